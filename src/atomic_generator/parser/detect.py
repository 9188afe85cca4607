"""Load JSON or YAML documents into plain Python data."""

import json
from pathlib import Path

import yaml


def load_document(file_path: Path):
    """Read a JSON or YAML file.

    Content starting with `{` or `[` is treated as JSON, anything else as
    YAML. Returns None for an empty file.
    """
    text = file_path.read_text(encoding="utf-8")
    stripped = text.strip()
    if not stripped:
        return None

    if stripped[0] in "{[":
        return json.loads(stripped)
    return yaml.safe_load(stripped)
