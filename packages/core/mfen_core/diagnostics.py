"""Environment and cache health report for the `doctor` command."""

from __future__ import annotations

import os
import platform
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import numpy as np
import PIL

from mfen_renderer.codec import MimeKind

from .config import RenderConfig
from .pipeline import sprites_for


def cache_report(cfg: RenderConfig) -> dict[str, Any]:
    root = Path(cfg.cache_directory)
    exists = root.is_dir()
    try:
        extension = MimeKind.parse(cfg.mime_kind).extension
    except ValueError:
        extension = None
    entries = sorted(root.glob(f"*{extension}")) if exists and extension else []
    return {
        "enabled": cfg.use_caching,
        "directory": str(root.resolve()),
        "exists": exists,
        "writable": exists and os.access(root, os.W_OK),
        "entries": len(entries),
        "bytes": sum(p.stat().st_size for p in entries),
    }


def build_doctor_payload(cfg: RenderConfig) -> dict[str, Any]:
    provider = sprites_for(cfg)
    return {
        "ts_utc": datetime.now(timezone.utc).isoformat(),
        "platform": platform.platform(),
        "python": platform.python_version(),
        "pillow": PIL.__version__,
        "numpy": np.__version__,
        "config": asdict(cfg),
        "cache": cache_report(cfg),
        "sprites": {
            "provider": type(provider).__name__,
            "missing": provider.missing(),
        },
    }
