from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# Soft results: a property that is legitimately absent is not an error
NOT_FOUND = "<NotFound>"
INDEX_OUT_OF_RANGE = "<index out of range>"
NUMBER_NOT_FOUND = -1


class CrsError(Exception):
    """Base class for failures that turn one cell into a value error."""


class MalformedSpec(CrsError):
    """The cell block does not match any recognized CRS or point shape."""

    def __init__(self, what: str, reason: str = ""):
        self.what = what
        self.reason = reason
        msg = f"malformed {what}" + (f": {reason}" if reason else "")
        super().__init__(msg)


class ResolutionFailed(CrsError):
    """The engine rejected a structurally valid CRS description."""

    def __init__(self, kind: str, engine_message: str):
        self.kind = kind
        self.engine_message = engine_message
        super().__init__(f"{kind}: {engine_message}")


@dataclass(frozen=True)
class CellError:
    """Typed error signal handed back to the spreadsheet host."""

    code: str
    detail: Optional[str] = None

    VALUE = "#VALUE!"
    NA = "#N/A"

    @classmethod
    def value(cls, detail: Optional[str] = None) -> "CellError":
        return cls(cls.VALUE, detail)

    @classmethod
    def not_applicable(cls, detail: Optional[str] = None) -> "CellError":
        return cls(cls.NA, detail)

    def __str__(self) -> str:  # pragma: no cover - debugging aid
        return self.code if not self.detail else f"{self.code} ({self.detail})"


__all__ = [
    "NOT_FOUND",
    "INDEX_OUT_OF_RANGE",
    "NUMBER_NOT_FOUND",
    "CrsError",
    "MalformedSpec",
    "ResolutionFailed",
    "CellError",
]
