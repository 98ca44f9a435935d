"""
Parsing of tag patches given as inline JSON (--tags) or a JSON file (--json).
"""
import json
from pathlib import Path
from typing import Any, Dict

from .exceptions import PatchError
from .models import TagPatch

# 'Creator', 'creator' and 'CREATOR' all name the same field
_FIELD_KEYS = {name.lower(): name for name in TagPatch.field_names()}


def parse_patch(text: str) -> TagPatch:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PatchError(f"Invalid tag JSON: {e.msg} (line {e.lineno}, column {e.colno})") from e
    return patch_from_mapping(data)


def load_patch(path: Path) -> TagPatch:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise PatchError(f"Can't read tag file {path}: {e.strerror or e}") from e
    return parse_patch(text)


def patch_from_mapping(data: Any) -> TagPatch:
    if not isinstance(data, dict):
        raise PatchError("Tag JSON must be an object, e.g. {\"Creator\": \"Jane Doe\"}")

    values: Dict[str, str] = {}
    for key, value in data.items():
        name = _FIELD_KEYS.get(str(key).lower())
        if name is None:
            known = ", ".join(n.capitalize() for n in TagPatch.field_names())
            raise PatchError(f"Unsupported tag '{key}'. Supported tags: {known}")
        if name in values:
            raise PatchError(f"Tag '{key}' given more than once")
        if not isinstance(value, str):
            raise PatchError(f"Value for '{key}' must be a string, got {type(value).__name__}")
        values[name] = value

    return TagPatch(**values)
