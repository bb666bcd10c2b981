from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

SCHEMA_DIR = Path(__file__).resolve().parents[1] / "schemas"


def load_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def schema_path(name: str) -> Path:
    """Path of a packaged schema, e.g. ``schema_path("template")``."""
    return SCHEMA_DIR / f"{name}.schema.json"


def _json_path(e: Any) -> str:
    path = "$"
    for p in e.path:
        path += f"[{p!r}]" if isinstance(p, str) else f"[{p}]"
    return path


def validate_instance(schema: dict[str, Any], instance: Any) -> list[str]:
    """
    Validate an in-memory JSON value against a schema.
    Returns human-readable error strings (empty if valid), each formatted as
    "<jsonpath>: <message>".
    """
    v = Draft202012Validator(schema)
    errors = sorted(v.iter_errors(instance), key=lambda e: list(e.path))
    return [f"{_json_path(e)}: {e.message}" for e in errors]


def validate_against(name: str, instance: Any) -> list[str]:
    return validate_instance(load_json(schema_path(name)), instance)

