"""Legacy HTTP entry point: GET query parameters in, board image out."""

from __future__ import annotations

from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import parse_qs, urlsplit

from mfen_core import MFEN, RenderConfig, config_from_query
from mfen_core.logging_setup import get_logger
from mfen_core.pipeline import sprites_for
from mfen_renderer import BoardRenderer


def make_handler(base: RenderConfig) -> type[BaseHTTPRequestHandler]:
    log = get_logger("http")
    renderer = BoardRenderer(sprites_for(base))

    class BoardHandler(BaseHTTPRequestHandler):
        server_version = "mfen"

        def do_GET(self) -> None:  # noqa: N802
            params = parse_qs(urlsplit(self.path).query, keep_blank_values=True)
            cfg = config_from_query(params, base)

            board = MFEN(cfg, renderer=renderer)
            result = board.render()
            body = board.output()
            board.destroy()

            self.send_response(200)
            self.send_header("Content-Type", board.mime_kind.value)
            self.send_header("Content-Length", str(len(body)))
            if result.error is not None:
                self.send_header("X-MFEN-Error", f"{result.error.code}")
            elif result.location:
                self.send_header("X-MFEN-Location", result.location)
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format: str, *args) -> None:  # noqa: A002
            log.info(format % args, extra={"event": "http_request"})

    return BoardHandler


def make_server(base: RenderConfig, host: str = "127.0.0.1", port: int = 8080) -> HTTPServer:
    return HTTPServer((host, port), make_handler(base))


def serve(base: RenderConfig, host: str = "127.0.0.1", port: int = 8080) -> None:
    httpd = make_server(base, host, port)
    get_logger("http").info(
        f"serving on http://{httpd.server_address[0]}:{httpd.server_address[1]}/",
        extra={"event": "http_serving"},
    )
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        httpd.server_close()
