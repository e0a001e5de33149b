"""CLI entrypoints for rendering, serving and diagnostics."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from mfen_core import MFEN, RenderConfig, apply_overrides, build_doctor_payload, load_config
from mfen_core.logging_setup import configure_logging


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _config_from_args(args: argparse.Namespace) -> RenderConfig:
    cfg = load_config(Path(args.config).expanduser()) if args.config else load_config()
    overrides: dict[str, Any] = {}
    for name in ("position", "size", "light_color", "dark_color", "mime_kind", "quality", "filter_setting"):
        value = getattr(args, name, None)
        if value is not None:
            overrides[name] = value
    if getattr(args, "cache_dir", None):
        overrides["cache_directory"] = args.cache_dir
        overrides["cache_public_location"] = args.cache_dir.rstrip("/") + "/"
    if getattr(args, "pieces", None):
        overrides["piece_folder"] = args.pieces
    if getattr(args, "no_cache", False):
        overrides["use_caching"] = False
    if getattr(args, "purge", False):
        overrides["purge"] = True
    if getattr(args, "dedupe", False):
        overrides["dedupe_writes"] = True
    return apply_overrides(cfg, **overrides)


def cmd_render(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    board = MFEN(cfg)
    result = board.render(want_location_only=args.location_only)

    if args.location_only and result.image is None:
        _print_json({"location": result.location, "cache_hit": result.cache_hit})
        return 0

    if args.out:
        path = board.output(Path(args.out).expanduser())
        _print_json(
            {
                "success": not result.errored,
                "output": str(path),
                "location": result.location,
                "cache_hit": result.cache_hit,
                "size": result.size,
                "error": None if result.error is None else {"code": result.error.code, "message": result.error.message},
            }
        )
    else:
        sys.stdout.buffer.write(board.output())
        sys.stdout.buffer.flush()
    board.destroy()
    return 2 if result.errored else 0


def cmd_serve(args: argparse.Namespace) -> int:
    from .server import serve

    serve(_config_from_args(args), host=args.host, port=args.port)
    return 0


def cmd_doctor(args: argparse.Namespace) -> int:
    _print_json(build_doctor_payload(_config_from_args(args)))
    return 0


def _add_settings(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--config", default=None, help="Optional JSON settings file")
    cmd.add_argument("--size", default=None, help="Preset (tiny/small/medium/large/huge) or pixels up to 1024")
    cmd.add_argument("--light", dest="light_color", default=None, help="Light square hex color")
    cmd.add_argument("--dark", dest="dark_color", default=None, help="Dark square hex color")
    cmd.add_argument("--mime", dest="mime_kind", default=None, help="image/png or image/jpeg")
    cmd.add_argument("--quality", type=int, default=None, help="PNG 0-9 or JPEG 0-100")
    cmd.add_argument("--filter", dest="filter_setting", default=None, help="PNG filter strategy")
    cmd.add_argument("--cache-dir", default=None, help="Cache directory")
    cmd.add_argument("--pieces", default=None, help="Folder with {kind}_{w|b}.png sprites")
    cmd.add_argument("--no-cache", action="store_true", help="Disable caching")
    cmd.add_argument("--dedupe", action="store_true", help="Lock each cache key while rendering it")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mfen", description="Render chess positions to images")
    parser.add_argument("--verbose", action="store_true", help="Log to stderr")
    parser.add_argument("--log-file", default=None, help="Append JSON log lines here (size-rotated)")
    sub = parser.add_subparsers(dest="command", required=True)

    render_cmd = sub.add_parser("render", help="Render a position")
    render_cmd.add_argument("position", nargs="?", default=None, help="FEN string (placement field is used)")
    render_cmd.add_argument("--out", default=None, help="Write the image here instead of stdout")
    render_cmd.add_argument("--purge", action="store_true", help="Ignore and overwrite the cached image")
    render_cmd.add_argument("--location-only", action="store_true", help="Print the cache location when cached")
    _add_settings(render_cmd)
    render_cmd.set_defaults(func=cmd_render)

    serve_cmd = sub.add_parser("serve", help="Serve images over HTTP")
    serve_cmd.add_argument("--host", default="127.0.0.1")
    serve_cmd.add_argument("--port", type=int, default=8080)
    _add_settings(serve_cmd)
    serve_cmd.set_defaults(func=cmd_serve)

    doctor_cmd = sub.add_parser("doctor", help="Print environment and cache diagnostics")
    _add_settings(doctor_cmd)
    doctor_cmd.set_defaults(func=cmd_doctor)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(
        log_file=Path(args.log_file).expanduser() if args.log_file else None,
        console=args.verbose,
    )
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
