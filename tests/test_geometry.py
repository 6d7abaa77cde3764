import unittest

import numpy as np

from yoloseg_kit.geometry import clip_box, div_stride, to_source_space, upscale_box
from yoloseg_kit.types import BoundingBox


class TestDivStride(unittest.TestCase):
    def test_rounds_to_nearest_stride(self) -> None:
        self.assertEqual(div_stride(32, 640, 480), (640, 480))
        # 650 % 32 = 10 -> down, 470 % 32 = 22 -> up
        self.assertEqual(div_stride(32, 650, 470), (640, 480))
        # Exactly half a stride rounds up.
        self.assertEqual(div_stride(32, 48, 80), (64, 96))

    def test_outputs_divisible_and_close(self) -> None:
        for stride in (8, 32, 64):
            for side in range(1, 700, 7):
                w, h = div_stride(stride, side, side + 3)
                self.assertEqual(w % stride, 0)
                self.assertEqual(h % stride, 0)
                self.assertLess(abs(w - side), stride)
                self.assertLess(abs(h - (side + 3)), stride)

    def test_small_sides_keep_one_stride(self) -> None:
        self.assertEqual(div_stride(32, 5, 10), (32, 32))

    def test_invalid_stride(self) -> None:
        with self.assertRaises(ValueError):
            div_stride(0, 10, 10)


class TestClipBox(unittest.TestCase):
    def test_origin_clamped_without_shrinking(self) -> None:
        self.assertEqual(clip_box((-10, -5, 50, 60), 640), (0, 0, 50, 60))

    def test_far_edge_shrunk(self) -> None:
        self.assertEqual(clip_box((600, 620, 100, 100), 640), (600, 620, 40, 20))

    def test_bounds_and_idempotence(self) -> None:
        rng = np.random.default_rng(0)
        m = 640
        for x, y, w, h in rng.uniform([-200, -200, 0, 0], [900, 900, 900, 900], size=(500, 4)):
            cx, cy, cw, ch = clip_box((x, y, w, h), m)
            self.assertGreaterEqual(cx, 0)
            self.assertGreaterEqual(cy, 0)
            self.assertGreaterEqual(cw, 0)
            self.assertGreaterEqual(ch, 0)
            self.assertLessEqual(cx + cw, m + 1e-9)
            self.assertLessEqual(cy + ch, m + 1e-9)
            self.assertEqual(clip_box((cx, cy, cw, ch), m), (cx, cy, cw, ch))


class TestScaling(unittest.TestCase):
    def test_upscale_floors_then_clips(self) -> None:
        self.assertEqual(upscale_box((75.0, 75.0, 50.0, 50.0), 1.0, 1.0, 640), BoundingBox(75, 75, 50, 50))
        self.assertEqual(upscale_box((100.4, 10.0, 10.0, 10.0), 1.5, 1.5, 640), BoundingBox(150, 15, 15, 15))
        self.assertEqual(upscale_box((500.0, 0.0, 100.0, 10.0), 1.25, 1.0, 640), BoundingBox(625, 0, 15, 10))

    def test_to_source_space(self) -> None:
        box = to_source_space(BoundingBox(320, 160, 64, 64), (640, 640), (1280, 960))
        self.assertEqual(box, BoundingBox(640, 240, 128, 96))


if __name__ == "__main__":
    unittest.main()
