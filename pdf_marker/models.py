# models.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple


class PreconditionError(ValueError):
    """Raised when a caller breaks an input contract of the geometry layer."""


class CoordinateSpace(Enum):
    DISPLAY = "display"    # origin top-left, rendered pixels
    DOCUMENT = "document"  # origin bottom-left, native page units


@dataclass(frozen=True)
class Viewport:
    """A page rendered at a given scale."""
    page_id: int
    scale: float
    page_height: float


@dataclass(frozen=True)
class TextHit:
    """
    Geometry of one text run, in document units before scaling.

    `anchor` is the baseline origin of the run, with y measured from the
    top edge of the page.
    """
    page_id: int
    anchor: Tuple[float, float]
    width: float
    height: float


@dataclass(frozen=True)
class TextRun:
    text: str
    hit: TextHit


@dataclass
class PageText:
    """All text runs of one page, plus the viewport the page is shown with."""
    page_id: int
    viewport: Viewport
    runs: List[TextRun] = field(default_factory=list)


@dataclass(frozen=True)
class HighlightRect:
    """Axis-aligned highlight rectangle tagged with its coordinate space."""
    x: float
    y: float
    width: float
    height: float
    space: CoordinateSpace = CoordinateSpace.DISPLAY

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Invalid rect size: width={self.width}, height={self.height}"
            )

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)


# page id -> rectangles in search order
PageHighlights = Dict[int, List[HighlightRect]]
