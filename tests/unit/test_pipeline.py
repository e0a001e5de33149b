import sys
import tempfile
import unittest
from io import BytesIO
from pathlib import Path
from unittest import mock

from PIL import Image

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "board"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))
sys.path.insert(0, str(ROOT / "packages" / "core"))

from mfen_board.models import PieceColor, PieceKind
from mfen_core.config import RenderConfig, apply_overrides
from mfen_core.pipeline import MFEN, RenderState
from mfen_renderer.board import BoardRenderer

OPENING = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"


class SolidSprites:
    def sprite(self, kind: PieceKind, color: PieceColor) -> Image.Image:
        return Image.new("RGB", (128, 128), (255, 255, 255) if color is PieceColor.WHITE else (0, 0, 0))


class CountingRenderer(BoardRenderer):
    def __init__(self) -> None:
        super().__init__(SolidSprites())
        self.composed = 0

    def compose(self, grid, light, dark):
        self.composed += 1
        return super().compose(grid, light, dark)


class PipelineTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.cache_dir = Path(self._tmp.name) / "cache"
        self.cfg = RenderConfig(cache_directory=str(self.cache_dir), cache_public_location="/boards/")
        self.renderer = CountingRenderer()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _board(self, **overrides) -> MFEN:
        return MFEN(apply_overrides(self.cfg, **overrides), renderer=self.renderer)

    def _cache_files(self) -> list[Path]:
        return sorted(self.cache_dir.glob("*")) if self.cache_dir.exists() else []

    def test_tiny_opening(self):
        board = self._board(position=OPENING, size="tiny")
        result = board.render()
        self.assertIs(result.state, RenderState.READY)
        self.assertEqual(result.image.size, (128, 128))
        self.assertEqual(result.size, 128)
        self.assertEqual(result.location, f"/boards/{result.digest}.png")
        self.assertTrue((self.cache_dir / f"{result.digest}.png").is_file())
        self.assertEqual(
            result.trail,
            (
                RenderState.IDLE,
                RenderState.SIZE_RESOLVED,
                RenderState.VALIDATED,
                RenderState.COMPOSED,
                RenderState.DOWNSCALED,
                RenderState.CACHED,
                RenderState.READY,
            ),
        )
        self.assertFalse(board.has_errored())
        self.assertIsNone(board.last_error())

    def test_second_render_is_served_from_cache(self):
        first = self._board(size="small")
        first.render()
        first_bytes = first.output()

        second = self._board(size="small")
        result = second.render()
        self.assertTrue(result.cache_hit)
        self.assertIn(RenderState.CACHE_HIT, result.trail)
        self.assertEqual(self.renderer.composed, 1)
        self.assertEqual(second.output(), first_bytes)

    def test_purge_skips_read_and_overwrites(self):
        self._board(size="tiny").render()
        result = self._board(size="tiny", purge=True).render()
        self.assertFalse(result.cache_hit)
        self.assertEqual(self.renderer.composed, 2)
        self.assertEqual(len(self._cache_files()), 1)

    def test_location_only_fast_path(self):
        self._board(size="tiny").render()
        board = self._board(size="tiny")
        result = board.render(want_location_only=True)
        self.assertIsNone(result.image)
        self.assertTrue(result.cache_hit)
        self.assertEqual(self.renderer.composed, 1)
        self.assertEqual(board.output(), (self.cache_dir / f"{result.digest}.png").read_bytes())

    def test_location_only_renders_on_miss(self):
        result = self._board(size="tiny").render(want_location_only=True)
        self.assertIsNotNone(result.image)
        self.assertEqual(result.location, f"/boards/{result.digest}.png")

    def test_invalid_characters_yield_error_image(self):
        board = self._board(position="xxxxxxxx/8/8/8/8/8/8/8")
        result = board.render()
        self.assertIs(result.state, RenderState.ERRORED)
        self.assertTrue(board.has_errored())
        self.assertEqual(board.last_error()[0], 2)
        self.assertEqual(result.image.mode, "RGBA")
        self.assertEqual(self._cache_files(), [])
        with Image.open(BytesIO(board.output())) as img:
            self.assertEqual(img.format, "PNG")

    def test_bogus_size(self):
        board = self._board(size="bogus")
        result = board.render()
        self.assertEqual(result.error.code, 1)
        self.assertEqual(result.trail, (RenderState.IDLE, RenderState.ERRORED))
        self.assertEqual(self._cache_files(), [])

    def test_size_aliases_share_a_digest(self):
        digests = {self._board(size=value).render().digest for value in (0, None, "medium", 384)}
        self.assertEqual(len(digests), 1)
        self.assertEqual(self._board(size=2000).render().size, 1024)

    def test_invalid_color(self):
        board = self._board(light_color="nothex")
        board.render()
        self.assertEqual(board.last_error()[0], 7)

    def test_unsupported_mime_still_outputs_png(self):
        board = self._board(mime_kind="image/gif")
        board.render()
        self.assertEqual(board.last_error()[0], 4)
        with Image.open(BytesIO(board.output())) as img:
            self.assertEqual(img.format, "PNG")

    def test_invalid_filter(self):
        board = self._board(filter_setting="PNG_ALL_FILTERS")
        board.render()
        self.assertEqual(board.last_error()[0], 9)
        self.assertIsInstance(board.output(), bytes)

    def test_jpeg_output(self):
        board = self._board(mime_kind="jpeg", size="small")
        result = board.render()
        self.assertTrue(result.location.endswith(".jpg"))
        with Image.open(BytesIO(board.output())) as img:
            self.assertEqual(img.format, "JPEG")
            self.assertEqual(img.size, (256, 256))

    def test_caching_disabled(self):
        board = self._board(use_caching=False, size="tiny")
        result = board.render()
        self.assertIsNone(result.location)
        self.assertFalse(self.cache_dir.exists())
        self.assertNotIn(RenderState.CACHED, result.trail)
        board.render()
        self.assertEqual(self.renderer.composed, 2)

    def test_cache_directory_failure_is_recovered(self):
        blocker = Path(self._tmp.name) / "blocker"
        blocker.write_text("x", encoding="utf-8")
        board = self._board(cache_directory=str(blocker / "cache"))
        result = board.render()
        self.assertTrue(result.errored)
        self.assertEqual(board.last_error()[0], 5)
        self.assertEqual(result.image.mode, "RGBA")

    def test_jpeg_cache_hit_returns_stored_bytes(self):
        first = self._board(mime_kind="jpeg", size="small", quality=75)
        first.render()
        first_bytes = first.output()

        second = self._board(mime_kind="jpeg", size="small", quality=75)
        result = second.render()
        self.assertTrue(result.cache_hit)
        self.assertEqual(self.renderer.composed, 1)
        stored = (self.cache_dir / f"{result.digest}.jpg").read_bytes()
        self.assertEqual(first_bytes, stored)
        self.assertEqual(second.output(), stored)
        self.assertEqual(second.output(), stored)

    def test_non_numeric_quality(self):
        board = self._board(quality="high", size="tiny")
        result = board.render()
        self.assertTrue(result.errored)
        self.assertEqual(board.last_error()[0], 10)
        self.assertEqual(self._cache_files(), [])
        with Image.open(BytesIO(board.output())) as img:
            self.assertEqual(img.format, "PNG")

    def test_unusable_lock_timeout_falls_back(self):
        for value in ("soon", None, float("inf")):
            with self.subTest(value=value):
                result = self._board(size="tiny", dedupe_writes=True, purge=True, lock_timeout_s=value).render()
                self.assertFalse(result.errored)

    def test_image_allocation_failure(self):
        with mock.patch("mfen_renderer.board.Image.fromarray", side_effect=MemoryError):
            board = self._board(size="tiny")
            result = board.render()
        self.assertTrue(result.errored)
        self.assertEqual(board.last_error()[0], 3)
        self.assertEqual(result.image.mode, "RGBA")
        self.assertEqual(self._cache_files(), [])

    def test_cache_write_failure_is_recovered(self):
        with mock.patch("mfen_core.cache.os.replace", side_effect=OSError("disk full")):
            board = self._board(size="tiny")
            result = board.render()
        self.assertTrue(result.errored)
        self.assertEqual(board.last_error()[0], 6)
        self.assertEqual(self._cache_files(), [])

    def test_error_then_success(self):
        board = self._board(position="xxxxxxxx/8/8/8/8/8/8/8")
        board.render()
        result = board.render(config=apply_overrides(self.cfg, size="tiny"))
        self.assertFalse(result.errored)
        self.assertFalse(board.has_errored())
        self.assertEqual(len(self._cache_files()), 1)

    def test_empty_and_slash_boards(self):
        for fen in ("8/8/8/8/8/8/8/8", "////////"):
            with self.subTest(fen=fen):
                result = self._board(position=fen, size="huge", use_caching=False).render()
                self.assertFalse(result.errored)
                self.assertEqual(result.image.size, (1024, 1024))

    def test_output_to_file(self):
        board = self._board(size="tiny")
        board.render()
        dest = Path(self._tmp.name) / "board.png"
        self.assertEqual(board.output(dest), dest)
        with Image.open(dest) as img:
            self.assertEqual(img.size, (128, 128))

    def test_destroy_is_idempotent(self):
        board = self._board(size="tiny")
        board.destroy()
        board.render()
        board.destroy()
        board.destroy()
        with self.assertRaises(RuntimeError):
            board.output()

    def test_dedupe_writes(self):
        board = self._board(size="tiny", dedupe_writes=True)
        result = board.render()
        self.assertFalse(result.errored)
        self.assertEqual([p.suffix for p in self._cache_files()], [".png"])
        self.assertTrue(self._board(size="tiny", dedupe_writes=True).render().cache_hit)

    def test_events_are_recorded(self):
        board = self._board(size="tiny")
        board.render()
        board.render()
        events = [row["event"] for row in board.recent_events()]
        self.assertEqual(events, ["cache_miss", "cache_store", "cache_hit"])


if __name__ == "__main__":
    unittest.main()
