"""Render orchestration: size, validation, colors, cache, composition, errors."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from PIL import Image

from mfen_board import colors, position
from mfen_board.errors import MfenError
from mfen_board.models import BoardGrid, RGBColor
from mfen_renderer import codec
from mfen_renderer.board import BoardRenderer
from mfen_renderer.codec import MimeKind
from mfen_renderer.error_image import render_error
from mfen_renderer.sizes import resolve_size
from mfen_renderer.sprites import DirectorySpriteProvider, DrawnSpriteProvider, SpriteProvider

from .cache import CacheStore, compute_key
from .config import DEFAULT_CONFIG, RenderConfig, lock_timeout
from .logging_setup import get_logger


class RenderState(str, Enum):
    IDLE = "Idle"
    SIZE_RESOLVED = "SizeResolved"
    VALIDATED = "Validated"
    CACHE_HIT = "CacheHit"
    COMPOSED = "Composed"
    DOWNSCALED = "Downscaled"
    CACHED = "Cached"
    READY = "Ready"
    ERRORED = "Errored"


@dataclass(frozen=True)
class RenderFailure:
    code: int
    message: str


@dataclass(frozen=True)
class RenderResult:
    state: RenderState
    image: Image.Image | None = None
    location: str | None = None
    digest: str | None = None
    size: int | None = None
    cache_hit: bool = False
    error: RenderFailure | None = None
    data: bytes | None = field(default=None, repr=False)
    trail: tuple[RenderState, ...] = field(default_factory=tuple)

    @property
    def errored(self) -> bool:
        return self.state is RenderState.ERRORED


@dataclass(frozen=True)
class _Request:
    placement: str
    grid: BoardGrid
    size: int
    light: RGBColor
    dark: RGBColor
    mime: MimeKind
    quality: int
    filter_setting: str
    digest: str


def sprites_for(cfg: RenderConfig) -> SpriteProvider:
    if cfg.piece_folder:
        return DirectorySpriteProvider(cfg.piece_folder)
    return DrawnSpriteProvider()


class MFEN:
    """Renders a board position to an image, reusing cached renders.

    `render()` never raises for bad input or cache trouble: the result holds
    either the board or an error image. The held image stays available to
    `output()` until `destroy()` or the next `render()`.
    """

    def __init__(self, config: RenderConfig | None = None, renderer: BoardRenderer | None = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self.renderer = renderer or BoardRenderer(sprites_for(self.config))
        self._log = get_logger("pipeline")
        self._result: RenderResult | None = None
        self._image: Image.Image | None = None
        self._data: bytes | None = None
        self._output_config = self.config
        self._events: list[dict[str, Any]] = []

    @property
    def result(self) -> RenderResult | None:
        return self._result

    def recent_events(self, limit: int = 200) -> list[dict[str, Any]]:
        return self._events[-limit:]

    def _event(self, event: str, **fields: Any) -> None:
        row = {"ts_utc": datetime.now(timezone.utc).isoformat(), "event": event}
        row.update(fields)
        self._events.append(row)
        if len(self._events) > 1000:
            self._events = self._events[-1000:]

    def render(self, want_location_only: bool = False, config: RenderConfig | None = None) -> RenderResult:
        cfg = config or self.config
        self.destroy()
        self._output_config = cfg
        trail = [RenderState.IDLE]
        try:
            result = self._render(cfg, want_location_only, trail)
        except MfenError as exc:
            result = self._fail(exc, trail)
        self._result = result
        self._image = result.image
        self._data = result.data
        return result

    def _prepare(self, cfg: RenderConfig, trail: list[RenderState]) -> _Request:
        size = resolve_size(cfg.size)
        trail.append(RenderState.SIZE_RESOLVED)

        placement = position.validate(cfg.position)
        grid = position.parse(placement)
        light = colors.decode(cfg.light_color)
        dark = colors.decode(cfg.dark_color)
        mime = MimeKind.parse(cfg.mime_kind)
        filter_setting = codec.check_filter(cfg.filter_setting)
        quality = codec.effective_quality(mime, cfg.quality)
        trail.append(RenderState.VALIDATED)

        digest = compute_key(placement, size, mime, quality, filter_setting, light.hex, dark.hex)
        return _Request(placement, grid, size, light, dark, mime, quality, filter_setting, digest)

    def _render(self, cfg: RenderConfig, want_location_only: bool, trail: list[RenderState]) -> RenderResult:
        req = self._prepare(cfg, trail)
        store = CacheStore(cfg.cache_directory, cfg.cache_public_location, req.mime) if cfg.use_caching else None

        if store is not None and cfg.purge:
            self._log.info("purge requested; skipping cache read", extra={"event": "cache_purge", "digest": req.digest})
            self._event("cache_purge", digest=req.digest)

        if store is not None and not cfg.purge:
            hit = self._from_cache(store, req, want_location_only, trail)
            if hit is not None:
                return hit
            self._log.info("cache miss", extra={"event": "cache_miss", "digest": req.digest})
            self._event("cache_miss", digest=req.digest)

        if store is not None and cfg.dedupe_writes:
            with store.claim(req.digest, timeout_s=lock_timeout(cfg.lock_timeout_s)) as immediate:
                if not immediate and not cfg.purge:
                    hit = self._from_cache(store, req, want_location_only, trail)
                    if hit is not None:
                        return hit
                return self._produce(store, req, trail)
        return self._produce(store, req, trail)

    def _from_cache(
        self,
        store: CacheStore,
        req: _Request,
        want_location_only: bool,
        trail: list[RenderState],
    ) -> RenderResult | None:
        if want_location_only and store.exists(req.digest):
            self._event("cache_hit", digest=req.digest, location_only=True)
            return RenderResult(
                state=RenderState.READY,
                location=store.location_for(req.digest),
                digest=req.digest,
                size=req.size,
                cache_hit=True,
                trail=tuple(trail + [RenderState.CACHE_HIT, RenderState.READY]),
            )
        cached = store.lookup(req.digest)
        if cached is None:
            return None
        self._log.info("cache hit", extra={"event": "cache_hit", "digest": req.digest})
        self._event("cache_hit", digest=req.digest)
        return RenderResult(
            state=RenderState.READY,
            image=cached.image,
            data=cached.data,
            location=store.location_for(req.digest),
            digest=req.digest,
            size=req.size,
            cache_hit=True,
            trail=tuple(trail + [RenderState.CACHE_HIT, RenderState.READY]),
        )

    def _produce(self, store: CacheStore | None, req: _Request, trail: list[RenderState]) -> RenderResult:
        image = self.renderer.compose(req.grid, req.light, req.dark)
        trail.append(RenderState.COMPOSED)
        image = self.renderer.downscale(image, req.size)
        trail.append(RenderState.DOWNSCALED)

        location = None
        data = None
        if store is not None:
            data = codec.encode(image, req.mime, req.quality, req.filter_setting)
            store.store(req.digest, data)
            location = store.location_for(req.digest)
            trail.append(RenderState.CACHED)
            self._event("cache_store", digest=req.digest)

        trail.append(RenderState.READY)
        return RenderResult(
            state=RenderState.READY,
            image=image,
            location=location,
            digest=req.digest,
            size=req.size,
            data=data,
            trail=tuple(trail),
        )

    def _fail(self, exc: MfenError, trail: list[RenderState]) -> RenderResult:
        code, message = exc.as_pair()
        self._log.warning(f"Error {code}: {message}", extra={"event": "render_error", "code": code})
        self._event("render_error", code=code, message=message)
        trail.append(RenderState.ERRORED)
        return RenderResult(
            state=RenderState.ERRORED,
            image=render_error(code, message),
            error=RenderFailure(code=code, message=message),
            trail=tuple(trail),
        )

    def has_errored(self) -> bool:
        return self._result is not None and self._result.errored

    def last_error(self) -> tuple[int, str] | None:
        if self._result is None or self._result.error is None:
            return None
        return self._result.error.code, self._result.error.message

    @property
    def mime_kind(self) -> MimeKind:
        try:
            return MimeKind.parse(self._output_config.mime_kind)
        except MfenError:
            return MimeKind.PNG

    def encoded(self) -> bytes:
        """Bytes for the held result; cached and freshly stored renders come back unchanged."""
        if self._data is not None:
            return self._data
        cfg = self._output_config
        if self._image is not None:
            kind = self.mime_kind
            try:
                quality = codec.effective_quality(kind, cfg.quality)
                filter_setting = codec.check_filter(cfg.filter_setting)
            except MfenError:
                quality, filter_setting = kind.default_quality, codec.DEFAULT_FILTER
            return codec.encode(self._image, kind, quality, filter_setting)
        if self._result is not None and self._result.digest and self._result.cache_hit:
            store = CacheStore(cfg.cache_directory, cfg.cache_public_location, self.mime_kind)
            return store.path_for(self._result.digest).read_bytes()
        raise RuntimeError("No image is held; call render() first")

    def output(self, destination: Path | str | None = None) -> bytes | Path:
        """Encode the held image; write it to `destination` or return the bytes."""
        data = self.encoded()
        if destination is None:
            return data
        path = Path(destination)
        path.write_bytes(data)
        return path

    def destroy(self) -> None:
        self._data = None
        if self._image is not None:
            self._image.close()
            self._image = None
