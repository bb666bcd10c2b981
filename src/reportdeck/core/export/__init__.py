"""Presentation export.

    from reportdeck.core.export import export_presentation
"""

from __future__ import annotations

from .pptx_export import SECTION_BUILDERS, export_presentation, export_section

__all__ = [
    "SECTION_BUILDERS",
    "export_presentation",
    "export_section",
]
