"""Immutable render settings with a default table and JSON load/save helpers."""

from __future__ import annotations

import json
import math
import os
import platform
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

from mfen_board.position import STARTING_POSITION


@dataclass(frozen=True)
class RenderConfig:
    position: str = STARTING_POSITION
    size: int | str | None = "medium"
    light_color: str = "DFE3E8"
    dark_color: str = "9DA8BD"
    use_caching: bool = True
    cache_directory: str = "cache"
    cache_public_location: str = "cache/"
    mime_kind: str = "image/png"
    quality: int | None = None
    filter_setting: str = "default"
    purge: bool = False
    piece_folder: str | None = None
    dedupe_writes: bool = False
    lock_timeout_s: float = 10.0


DEFAULT_CONFIG = RenderConfig()

_FIELD_NAMES = frozenset(f.name for f in fields(RenderConfig))


def apply_overrides(cfg: RenderConfig = DEFAULT_CONFIG, **overrides: Any) -> RenderConfig:
    unknown = sorted(set(overrides) - _FIELD_NAMES)
    if unknown:
        raise ValueError(f"Unknown render settings: {', '.join(unknown)}")
    return replace(cfg, **overrides)


def _truthy(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() not in ("0", "false", "no", "off")


_QUERY_KEYS = {
    "fen": "position",
    "size": "size",
    "color_light": "light_color",
    "l": "light_color",
    "color_dark": "dark_color",
    "d": "dark_color",
}


def config_from_query(params: Mapping[str, Any], base: RenderConfig = DEFAULT_CONFIG) -> RenderConfig:
    """Map legacy query parameters onto a config; `purge` is on when present at all."""
    overrides: dict[str, Any] = {}
    for key, name in _QUERY_KEYS.items():
        value = params.get(key)
        if isinstance(value, list):
            value = value[0] if value else None
        if value is not None:
            overrides[name] = value
    if "purge" in params:
        overrides["purge"] = True
    return apply_overrides(base, **overrides)


def config_path() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "MFEN" / "config.json"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "MFEN" / "config.json"
    return Path.home() / ".config" / "mfen" / "config.json"


def lock_timeout(value: Any) -> float:
    """Seconds to wait on a write marker; unusable values fall back to the default."""
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CONFIG.lock_timeout_s
    if not math.isfinite(seconds):
        return DEFAULT_CONFIG.lock_timeout_s
    return max(0.0, seconds)


def _normalize(raw: dict[str, Any]) -> dict[str, Any]:
    data = {k: v for k, v in raw.items() if k in _FIELD_NAMES}
    for key in ("use_caching", "purge", "dedupe_writes"):
        if key in data:
            data[key] = _truthy(data[key])
    if "lock_timeout_s" in data:
        data["lock_timeout_s"] = lock_timeout(data["lock_timeout_s"])
    if data.get("quality") is not None:
        try:
            data["quality"] = int(data["quality"])
        except (TypeError, ValueError, OverflowError):
            del data["quality"]
    return data


def load_config(path: Path | None = None) -> RenderConfig:
    path = path or config_path()
    if not path.exists():
        return RenderConfig()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return RenderConfig()
    if not isinstance(raw, dict):
        return RenderConfig()

    return apply_overrides(RenderConfig(), **_normalize(raw))


def save_config(cfg: RenderConfig, path: Path | None = None) -> Path:
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
