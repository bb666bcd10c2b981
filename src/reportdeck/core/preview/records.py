from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .canvas import SLIDE_HEIGHT, SLIDE_WIDTH


@dataclass(frozen=True)
class PreviewRecord:
    """One rendered slide. ``image_data`` is a base64 PNG."""

    slide_type: str
    image_data: str
    dimensions: dict[str, int] = field(default_factory=lambda: {"width": SLIDE_WIDTH, "height": SLIDE_HEIGHT})
    slide_index: int | None = None
    section_number: int | None = None

    @property
    def image_data_uri(self) -> str:
        return f"data:image/png;base64,{self.image_data}"

    def to_dict(self, *, include_image: bool = True, include_data_uri: bool = False) -> dict[str, Any]:
        out: dict[str, Any] = {
            "slideIndex": self.slide_index,
            "sectionNumber": self.section_number,
            "slideType": self.slide_type,
            "dimensions": dict(self.dimensions),
        }
        if include_image:
            out["imageData"] = self.image_data
        if include_data_uri:
            out["imageDataUri"] = self.image_data_uri
        return out


@dataclass
class PreviewBatch:
    previews: list[PreviewRecord]
    metadata: dict[str, Any]

    def to_dict(self, *, include_image: bool = True, include_data_uri: bool = False) -> dict[str, Any]:
        return {
            "previews": [
                p.to_dict(include_image=include_image, include_data_uri=include_data_uri) for p in self.previews
            ],
            "metadata": dict(self.metadata),
        }
