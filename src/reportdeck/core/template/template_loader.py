"""Template configuration: load, validate and cache the slide layout document.

The configuration is a JSON document with three required top-level objects:

- ``colors``: semantic name -> 6-digit hex (no ``#``)
- ``fonts``: font role -> {face, size, bold, italic}
- ``slideTypes``: layout key -> layout description (positions in inches)

A missing file or a missing top-level object is fatal (``ConfigLoadError``).
A missing entry from ``REQUIRED_SLIDE_TYPES`` is only logged; the rest of the
config stays usable.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from reportdeck.core.errors import ConfigLoadError
from reportdeck.core.utils.schema_validate import load_json, schema_path, validate_instance

logger = logging.getLogger(__name__)

ENV_TEMPLATE_CONFIG = "REPORTDECK_TEMPLATE_CONFIG"
DEFAULT_TEMPLATE_PATH = Path(__file__).resolve().parent / "default_template.json"

REQUIRED_SLIDE_TYPES: tuple[str, ...] = (
    "title",
    "tableOfContents",
    "sectionDivider",
    "chartSection",
    "insightsSection",
    "timelineSection",
)


def resolve_template_path(path: str | Path | None = None) -> Path:
    """Explicit path, then $REPORTDECK_TEMPLATE_CONFIG, then the packaged default."""
    if path:
        return Path(path)
    env = os.environ.get(ENV_TEMPLATE_CONFIG)
    if env:
        return Path(env)
    return DEFAULT_TEMPLATE_PATH


class TemplateConfigStore:
    """Lazily loaded, cached template configuration.

    Lifecycle is ``unloaded -> loaded``; ``clear()`` goes back to unloaded so
    the next access re-reads the source. Not synchronized: concurrent first
    loads simply race and the last writer wins.
    """

    def __init__(self, path: str | Path | None = None):
        self._path = Path(path) if path else None
        self._cached: dict[str, Any] | None = None
        self.missing_slide_types: list[str] = []
        self.load_count = 0

    @property
    def path(self) -> Path:
        return resolve_template_path(self._path)

    @property
    def is_loaded(self) -> bool:
        return self._cached is not None

    def load(self) -> dict[str, Any]:
        if self._cached is not None:
            return self._cached

        config = self._read(self.path)
        self.missing_slide_types = self._check_slide_types(config)
        self.load_count += 1
        self._cached = config
        return config

    def _read(self, path: Path) -> dict[str, Any]:
        if not path.exists():
            raise ConfigLoadError([f"config source not found: {path}"], source=path)
        try:
            config = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigLoadError([f"could not read config: {e}"], source=path) from e

        errors = validate_instance(load_json(schema_path("template")), config)
        if errors:
            raise ConfigLoadError(errors, source=path)
        return config

    @staticmethod
    def _check_slide_types(config: dict[str, Any]) -> list[str]:
        slide_types = config["slideTypes"]
        missing: list[str] = []
        for slide_type in REQUIRED_SLIDE_TYPES:
            if not slide_types.get(slide_type):
                logger.warning("Template config missing slide type: %s", slide_type)
                missing.append(slide_type)
        return missing

    def get_slide_layout(self, slide_type: str) -> dict[str, Any] | None:
        return self.load()["slideTypes"].get(slide_type) or None

    def get_font_config(self, font_type: str) -> dict[str, Any]:
        fonts = self.load()["fonts"]
        return fonts.get(font_type) or fonts.get("body")

    def get_color(self, color_name: str) -> str:
        colors = self.load()["colors"]
        return colors.get(color_name) or colors.get("text")

    def clear(self) -> None:
        self._cached = None
        self.missing_slide_types = []


_default_store = TemplateConfigStore()


def default_store() -> TemplateConfigStore:
    return _default_store


def set_default_store(store: TemplateConfigStore) -> TemplateConfigStore:
    """Swap the process-wide store (returns the previous one)."""
    global _default_store
    previous = _default_store
    _default_store = store
    return previous


def load_template_config() -> dict[str, Any]:
    return _default_store.load()


def get_slide_layout(slide_type: str) -> dict[str, Any] | None:
    return _default_store.get_slide_layout(slide_type)


def get_font_config(font_type: str) -> dict[str, Any]:
    return _default_store.get_font_config(font_type)


def get_color(color_name: str) -> str:
    return _default_store.get_color(color_name)


def clear_config_cache() -> None:
    _default_store.clear()
