import unittest
from concurrent.futures import ThreadPoolExecutor

from yoloseg_kit.colors import ColorPalette, hex_to_rgba


class TestColorPalette(unittest.TestCase):
    def test_get_is_deterministic_and_cycles(self) -> None:
        palette = ColorPalette()
        self.assertEqual(palette.get(0), "#FF3838")
        self.assertEqual(palette.get(3), palette.get(3))
        self.assertEqual(palette.get(len(palette)), palette.get(0))
        self.assertEqual(palette.get(len(palette) + 5), palette.get(5))

    def test_independent_instances_agree(self) -> None:
        self.assertEqual(ColorPalette().get(17), ColorPalette().get(17))

    def test_rgba(self) -> None:
        palette = ColorPalette()
        self.assertEqual(palette.rgba(0, 120), (255, 56, 56, 120))
        self.assertEqual(palette.rgba(11), (0, 194, 255, 255))

    def test_custom_palette_and_reset(self) -> None:
        palette = ColorPalette(["#010203", "0a0B0c"])
        self.assertEqual(palette.get(1), "#0A0B0C")
        self.assertEqual(palette.get(2), "#010203")
        palette.reset()
        self.assertEqual(palette.get(1), "#0A0B0C")

    def test_invalid_inputs(self) -> None:
        with self.assertRaises(ValueError):
            ColorPalette([])
        with self.assertRaises(ValueError):
            ColorPalette().get(-1)

    def test_concurrent_lookups(self) -> None:
        palette = ColorPalette()
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda i: palette.get(i % 40), range(2000)))
        for i, color in enumerate(results):
            self.assertEqual(color, palette.get(i % 40))


class TestHexToRgba(unittest.TestCase):
    def test_hex_and_triple(self) -> None:
        self.assertEqual(hex_to_rgba("#00C2FF", 120), (0, 194, 255, 120))
        self.assertEqual(hex_to_rgba("ff3838", 0), (255, 56, 56, 0))
        self.assertEqual(hex_to_rgba((1, 2, 3), 7), (1, 2, 3, 7))

    def test_rejects_bad_values(self) -> None:
        with self.assertRaises(ValueError):
            hex_to_rgba("#FFF", 10)
        with self.assertRaises(ValueError):
            hex_to_rgba("#FFFFFF", 256)


if __name__ == "__main__":
    unittest.main()
