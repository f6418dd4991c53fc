"""Case dictionary helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import yaml


def read_yaml_file(path: str | Path) -> Dict[str, Any]:
    file_path = Path(path)
    with file_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{file_path} must hold a mapping, got {type(data).__name__}")
    return data


def read_optional_yaml(path: str | Path) -> Optional[Dict[str, Any]]:
    file_path = Path(path)
    if not file_path.exists():
        return None
    return read_yaml_file(file_path)
