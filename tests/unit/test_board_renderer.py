import sys
import unittest
from pathlib import Path

from PIL import Image

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "board"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from mfen_board.colors import decode
from mfen_board.models import PieceColor, PieceKind
from mfen_board.position import STARTING_POSITION, parse
from mfen_renderer.board import BoardRenderer, dark_square_mask
from mfen_renderer.sprites import DrawnSpriteProvider

LIGHT = decode("DFE3E8")
DARK = decode("9DA8BD")
WHITE_ART = (255, 0, 0)
BLACK_ART = (0, 0, 255)


class SolidSprites:
    def __init__(self) -> None:
        self.calls = 0

    def sprite(self, kind: PieceKind, color: PieceColor) -> Image.Image:
        self.calls += 1
        return Image.new("RGB", (128, 128), WHITE_ART if color is PieceColor.WHITE else BLACK_ART)


class BoardRendererTests(unittest.TestCase):
    def test_mask_starts_light(self):
        mask = dark_square_mask()
        self.assertFalse(mask[0, 0])
        self.assertTrue(mask[0, 1])
        self.assertTrue(mask[1, 0])
        self.assertEqual(int(mask.sum()), 32)

    def test_empty_board_background(self):
        sprites = SolidSprites()
        image = BoardRenderer(sprites).compose(parse("8/8/8/8/8/8/8/8"), LIGHT, DARK)
        self.assertEqual(image.size, (1024, 1024))
        self.assertEqual(image.getpixel((0, 0)), LIGHT.as_tuple())
        self.assertEqual(image.getpixel((128, 0)), DARK.as_tuple())
        self.assertEqual(image.getpixel((0, 128)), DARK.as_tuple())
        self.assertEqual(image.getpixel((1023, 1023)), LIGHT.as_tuple())
        self.assertEqual(sprites.calls, 0)

    def test_opaque_sprites_replace_squares(self):
        sprites = SolidSprites()
        image = BoardRenderer(sprites).compose(parse(STARTING_POSITION), LIGHT, DARK)
        self.assertEqual(sprites.calls, 32)
        self.assertEqual(image.getpixel((0, 0)), BLACK_ART)
        self.assertEqual(image.getpixel((127, 255)), BLACK_ART)
        self.assertEqual(image.getpixel((1023, 1023)), WHITE_ART)
        self.assertEqual(image.getpixel((64, 3 * 128 + 64)), DARK.as_tuple())

    def test_downscale(self):
        renderer = BoardRenderer(SolidSprites())
        image = renderer.compose(parse("8/8/8/8/8/8/8/8"), LIGHT, DARK)
        small = renderer.downscale(image, 128)
        self.assertEqual(small.size, (128, 128))
        self.assertEqual(small.getpixel((8, 8)), LIGHT.as_tuple())
        self.assertIs(renderer.downscale(image, 1024), image)

    def test_render_tiny_opening(self):
        image = BoardRenderer(SolidSprites()).render(parse(STARTING_POSITION), LIGHT, DARK, 128)
        self.assertEqual(image.size, (128, 128))
        self.assertEqual(image.getpixel((8, 40)), LIGHT.as_tuple())

    def test_drawn_sprites_keep_background(self):
        image = BoardRenderer(DrawnSpriteProvider()).compose(parse(STARTING_POSITION), LIGHT, DARK)
        self.assertEqual(image.getpixel((2, 2)), LIGHT.as_tuple())
        self.assertNotEqual(image.getpixel((64, 90)), LIGHT.as_tuple())


if __name__ == "__main__":
    unittest.main()
