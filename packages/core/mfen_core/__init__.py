"""Core MFEN services: settings, caching, logging, diagnostics and orchestration."""

from .cache import CacheStore, compute_key
from .config import DEFAULT_CONFIG, RenderConfig, apply_overrides, config_from_query, load_config, save_config
from .diagnostics import build_doctor_payload
from .pipeline import MFEN, RenderFailure, RenderResult, RenderState

__all__ = [
    "CacheStore",
    "DEFAULT_CONFIG",
    "MFEN",
    "RenderConfig",
    "RenderFailure",
    "RenderResult",
    "RenderState",
    "apply_overrides",
    "build_doctor_payload",
    "compute_key",
    "config_from_query",
    "load_config",
    "save_config",
]
