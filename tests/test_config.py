import json
import tempfile
import unittest
from pathlib import Path

from yoloseg_kit.config import PipelineConfig, load_pipeline_config
from yoloseg_kit.metadata import load_class_names


class _TmpDirCase(unittest.TestCase):
    def _write(self, name: str, text: str) -> Path:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        path = Path(tmpdir.name) / name
        path.write_text(text, encoding="utf-8")
        return path


class TestPipelineConfig(unittest.TestCase):
    def test_defaults_and_properties(self) -> None:
        cfg = PipelineConfig(input_shape=[1, 3, 640, 480], class_names=["a", "b", "c"])
        self.assertEqual(cfg.input_shape, (1, 3, 640, 480))
        self.assertEqual(cfg.class_names, ("a", "b", "c"))
        self.assertEqual(cfg.model_width, 640)
        self.assertEqual(cfg.model_height, 480)
        self.assertEqual(cfg.max_size, 640)
        self.assertEqual(cfg.num_classes, 3)
        self.assertEqual(cfg.topk, 100)
        self.assertEqual(cfg.iou_threshold, 0.45)
        self.assertEqual(cfg.score_threshold, 0.25)

    def test_invalid_values_rejected(self) -> None:
        bad = [
            dict(input_shape=(2, 3, 640, 640)),
            dict(input_shape=(1, 3, 640)),
            dict(input_shape=(1, 1, 640, 640)),
            dict(class_names=()),
            dict(class_names="ab"),
            dict(topk=0),
            dict(topk=2.5),
            dict(topk=True),
            dict(stride=32.0),
            dict(iou_threshold=1.0),
            dict(iou_threshold=0.0),
            dict(score_threshold=0.0),
            dict(score_threshold=1.5),
            dict(mask_alpha=300),
        ]
        for overrides in bad:
            kwargs = dict(input_shape=(1, 3, 640, 640), class_names=("a",))
            kwargs.update(overrides)
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValueError):
                    PipelineConfig(**kwargs)


class TestLoadPipelineConfig(_TmpDirCase):
    def test_load_ok(self) -> None:
        path = self._write(
            "pipeline.json",
            json.dumps(
                {
                    "schema_version": 1,
                    "input_shape": [1, 3, 640, 640],
                    "class_names": ["person", "car"],
                    "topk": 50,
                    "iou_threshold": 0.5,
                    "score_threshold": 0.3,
                }
            ),
        )
        cfg = load_pipeline_config(path)
        self.assertEqual(cfg.class_names, ("person", "car"))
        self.assertEqual(cfg.topk, 50)
        self.assertEqual(cfg.iou_threshold, 0.5)
        self.assertEqual(cfg.stride, 32)

    def test_explicit_class_names_win(self) -> None:
        path = self._write(
            "pipeline.json",
            json.dumps({"schema_version": 1, "input_shape": [1, 3, 320, 320], "class_names": ["x"]}),
        )
        cfg = load_pipeline_config(path, class_names=["a", "b"])
        self.assertEqual(cfg.class_names, ("a", "b"))

    def test_unknown_keys_rejected(self) -> None:
        path = self._write(
            "pipeline.json",
            json.dumps({"schema_version": 1, "input_shape": [1, 3, 640, 640], "class_names": ["a"], "extra": 1}),
        )
        with self.assertRaises(ValueError):
            load_pipeline_config(path)

    def test_bad_types_rejected(self) -> None:
        path = self._write(
            "pipeline.json",
            json.dumps({"schema_version": 1, "input_shape": [1, 3, 640, 640], "class_names": ["a"], "topk": "10"}),
        )
        with self.assertRaises(ValueError):
            load_pipeline_config(path)

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_pipeline_config(Path("does/not/exist.json"))


class TestLoadClassNames(_TmpDirCase):
    def test_json_list(self) -> None:
        path = self._write("labels.json", json.dumps(["person", "bicycle"]))
        self.assertEqual(load_class_names(path), ["person", "bicycle"])

    def test_json_mapping_fills_gaps(self) -> None:
        path = self._write("labels.json", json.dumps({"0": "person", "2": "car"}))
        self.assertEqual(load_class_names(path), ["person", "1", "car"])

    def test_yaml_names(self) -> None:
        path = self._write(
            "metadata.yaml",
            "description: test\nnames:\n  0: person\n  1: 'bicycle'\n  # comment\n  2: \"car\"\n",
        )
        self.assertEqual(load_class_names(path), ["person", "bicycle", "car"])


if __name__ == "__main__":
    unittest.main()
