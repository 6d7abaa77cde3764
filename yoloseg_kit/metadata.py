from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Union


def _names_from_mapping(names: Dict[int, str]) -> List[str]:
    if not names:
        return []
    # Missing ids keep their numeric name so label indices stay aligned.
    return [names.get(i, str(i)) for i in range(max(names) + 1)]


def _load_yaml_names(metadata_path: Path) -> Dict[int, str]:
    names: Dict[int, str] = {}
    in_names = False

    with open(metadata_path, "r", encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            if line == "names:":
                in_names = True
                continue
            if not in_names:
                continue

            # Parse "id: label"
            if ":" not in line:
                continue
            left, right = line.split(":", 1)
            left = left.strip()
            right = right.strip().strip("'").strip('"')
            if not left.isdigit():
                continue
            names[int(left)] = right

    return names


def load_class_names(metadata_path: Union[str, Path]) -> List[str]:
    """
    Load the ordered class-label list for a model.

    Two formats are accepted:

    - `labels.json`: a JSON list of names, or an object {"0": "person", ...}
    - `metadata.yaml` exported by Ultralytics, using its simple mapping:

        names:
          0: person
          1: bicycle
          ...

    The YAML form is parsed line by line; no PyYAML dependency.
    """

    path = Path(metadata_path)
    if not path.exists():
        raise FileNotFoundError(f"Class metadata not found: {path}")

    if path.suffix.lower() == ".json":
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid class metadata JSON: {path}") from exc
        if isinstance(payload, list):
            return [str(n) for n in payload]
        if isinstance(payload, dict):
            try:
                return _names_from_mapping({int(k): str(v) for k, v in payload.items()})
            except ValueError as exc:
                raise ValueError(f"Class ids must be integers: {path}") from exc
        raise ValueError("Class metadata JSON must be a list or an object")

    return _names_from_mapping(_load_yaml_names(path))
