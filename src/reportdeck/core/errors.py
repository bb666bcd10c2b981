"""Exceptions raised across the reportdeck library boundary."""

from __future__ import annotations


class ReportDeckError(Exception):
    """Base class for reportdeck errors."""


class ConfigLoadError(ReportDeckError):
    """Raised when the template configuration cannot be loaded or is invalid."""

    def __init__(self, issues: list[str], *, source: object = None):
        self.source = source
        self.issues = [str(i).strip() for i in issues if str(i).strip()]
        if not self.issues:
            self.issues = ["Invalid template configuration"]
        super().__init__(self._format())

    def _format(self) -> str:
        head = "Template config could not be loaded"
        if self.source is not None:
            head += f" ({self.source})"
        lines = [head + ":"]
        for issue in self.issues:
            lines.append(f"- {issue}")
        return "\n".join(lines)
