"""Content-addressed cache of rendered board images."""

from __future__ import annotations

import hashlib
import os
import tempfile
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from PIL import Image

from mfen_board.errors import CacheDirectoryError, ErrorCode
from mfen_renderer.codec import MimeKind, decode

from .logging_setup import get_logger


@dataclass(frozen=True)
class CachedImage:
    """A stored entry: the exact bytes on disk and their decoded image."""

    data: bytes
    image: Image.Image


def compute_key(
    position: str,
    size: int,
    mime_kind: MimeKind,
    quality: int,
    filter_setting: str,
    light_hex: str,
    dark_hex: str,
) -> str:
    """SHA-256 over every parameter that changes the encoded output."""
    material = "|".join(
        [
            f"fen={position}",
            f"size={int(size)}",
            f"mime={MimeKind.parse(mime_kind).value}",
            f"quality={int(quality)}",
            f"filters={filter_setting}",
            f"l={light_hex.upper()}",
            f"d={dark_hex.upper()}",
        ]
    )
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


class CacheStore:
    def __init__(self, root: Path | str, public_location: str, mime_kind: MimeKind) -> None:
        self.root = Path(root)
        self.public_location = public_location
        self.mime_kind = mime_kind
        self._log = get_logger("cache")

    def filename(self, digest: str) -> str:
        return f"{digest}{self.mime_kind.extension}"

    def path_for(self, digest: str) -> Path:
        return self.root / self.filename(digest)

    def location_for(self, digest: str) -> str:
        return f"{self.public_location}{self.filename(digest)}"

    def exists(self, digest: str) -> bool:
        return self.path_for(digest).is_file()

    def lookup(self, digest: str) -> CachedImage | None:
        """Read and decode the stored entry; unreadable entries count as a miss."""
        path = self.path_for(digest)
        if not path.is_file():
            return None
        try:
            data = path.read_bytes()
            return CachedImage(data=data, image=decode(data, self.mime_kind))
        except (OSError, ValueError) as exc:
            self._log.warning(
                f"discarding unreadable cache entry {path.name}: {exc}",
                extra={"event": "cache_corrupt", "digest": digest},
            )
            return None

    def ensure_directory(self) -> None:
        if not self.root.is_dir():
            try:
                self.root.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise CacheDirectoryError(
                    "Caching is turned on, but the cache directory does not exist and cannot be created."
                ) from exc
        if not os.access(self.root, os.W_OK):
            try:
                os.chmod(self.root, 0o777)
            except OSError as exc:
                raise CacheDirectoryError(
                    "Caching is turned on, but the cache directory is not writable and chmod() failed.",
                    code=ErrorCode.CACHE_DIRECTORY_UNWRITABLE,
                ) from exc
            if not os.access(self.root, os.W_OK):
                raise CacheDirectoryError(
                    "Caching is turned on, but the cache directory is not writable and chmod() failed.",
                    code=ErrorCode.CACHE_DIRECTORY_UNWRITABLE,
                )

    def store(self, digest: str, data: bytes) -> Path:
        self.ensure_directory()
        target = self.path_for(digest)
        unwritable = f"Caching is turned on, but '{target.name}' could not be written."
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{digest}.", suffix=".tmp", dir=self.root)
        except OSError as exc:
            raise CacheDirectoryError(unwritable, code=ErrorCode.CACHE_DIRECTORY_UNWRITABLE) from exc
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, target)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise CacheDirectoryError(unwritable, code=ErrorCode.CACHE_DIRECTORY_UNWRITABLE) from exc
        self._log.info(f"cached {target.name}", extra={"event": "cache_store", "digest": digest})
        return target

    def lock_path(self, digest: str) -> Path:
        return self.root / f"{digest}.lock"

    @contextmanager
    def claim(self, digest: str, timeout_s: float = 10.0, poll_s: float = 0.05) -> Iterator[bool]:
        """Hold an exclusive marker file for `digest`.

        Yields True when the marker was taken immediately, False when this
        caller had to wait for another holder first. Markers older than
        `timeout_s` are removed as stale.
        """
        self.ensure_directory()
        marker = self.lock_path(digest)
        waited = False
        deadline = time.monotonic() + timeout_s
        while True:
            try:
                fd = os.open(marker, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
                break
            except FileExistsError:
                waited = True
                try:
                    age = time.time() - marker.stat().st_mtime
                except FileNotFoundError:
                    continue
                if age > timeout_s or time.monotonic() > deadline:
                    self._log.warning(
                        f"breaking stale lock {marker.name}",
                        extra={"event": "cache_lock_stale", "digest": digest},
                    )
                    marker.unlink(missing_ok=True)
                    continue
                time.sleep(poll_s)
        try:
            os.write(fd, str(os.getpid()).encode("ascii"))
            os.close(fd)
            yield not waited
        finally:
            marker.unlink(missing_ok=True)
