# highlighter.py
"""
Geometry of search highlights.

Text runs come out of the document in document units. They are drawn on
screen in display space (rendered pixels, origin top-left) and written back
into the file in document space (native units, origin bottom-left).
"""
import logging
from typing import Dict, Iterable, List, Tuple

from config import DOCUMENT_PRECISION
from models import (
    CoordinateSpace,
    HighlightRect,
    PageHighlights,
    PageText,
    PreconditionError,
    TextHit,
    Viewport,
)

logger = logging.getLogger(__name__)


def _require_positive_scale(scale: float) -> None:
    if not scale > 0:
        raise PreconditionError(f"Scale must be positive, got {scale!r}")


class HighlightTransformer:
    """Stateless conversions between text hits and highlight rectangles."""

    @staticmethod
    def to_display_rect(hit: TextHit, viewport: Viewport) -> HighlightRect:
        """
        Project a text hit onto the rendered page.

        The anchor is the text baseline, so the rectangle is lifted by the
        scaled run height. This approximates the glyph box; it is not a
        measured one.
        """
        if hit.page_id != viewport.page_id:
            raise PreconditionError(
                f"Hit on page {hit.page_id} cannot use viewport of page {viewport.page_id}"
            )
        _require_positive_scale(viewport.scale)

        s = viewport.scale
        ax, ay = hit.anchor
        return HighlightRect(
            x=ax * s,
            y=ay * s - hit.height * s,
            width=hit.width * s,
            height=hit.height * s,
            space=CoordinateSpace.DISPLAY,
        )

    @staticmethod
    def to_document_rect(display: HighlightRect, scale: float,
                         page_height: float) -> HighlightRect:
        """
        Re-project a display rectangle into page space.

        The y axis is flipped against the page height so the bottom edge of
        the stored rectangle lines up with the bottom edge on screen.
        """
        if display.space is not CoordinateSpace.DISPLAY:
            raise PreconditionError("Expected a display-space rectangle")
        _require_positive_scale(scale)

        p = DOCUMENT_PRECISION
        return HighlightRect(
            x=round(display.x / scale, p),
            y=round(page_height - (display.y + display.height) / scale, p),
            width=round(display.width / scale, p),
            height=round(display.height / scale, p),
            space=CoordinateSpace.DOCUMENT,
        )

    @staticmethod
    def search(term: str, pages: Iterable[PageText]) -> PageHighlights:
        """
        Find every text run containing `term`, ignoring case.

        Returns a rectangle list for every page visited, empty where nothing
        matched. A blank term returns an empty mapping without looking at
        any page.
        """
        if not term or not term.strip():
            return {}

        needle = term.lower()
        results: PageHighlights = {}
        for page in pages:
            rects = results.setdefault(page.page_id, [])
            for run in page.runs:
                if needle in run.text.lower():
                    rects.append(HighlightTransformer.to_display_rect(run.hit, page.viewport))

        logger.debug("Search for %r matched %d run(s) on %d page(s)",
                     term, HighlightTransformer.total_matches(results), len(results))
        return results

    @staticmethod
    def export_annotations(page_highlights: PageHighlights,
                           page_sizes: Dict[int, Tuple[float, float]],
                           scale: float) -> List[Tuple[int, HighlightRect]]:
        """Flatten search results into (page id, document rect) draw calls."""
        _require_positive_scale(scale)

        annotations: List[Tuple[int, HighlightRect]] = []
        for page_id, rects in page_highlights.items():
            if not rects:
                continue
            if page_id not in page_sizes:
                raise PreconditionError(f"No page size known for page {page_id}")
            _, page_height = page_sizes[page_id]
            for rect in rects:
                doc_rect = HighlightTransformer.to_document_rect(rect, scale, page_height)
                logger.debug("Page %d: x=%s, y=%s, width=%s, height=%s",
                             page_id, *doc_rect.as_tuple())
                annotations.append((page_id, doc_rect))
        return annotations

    @staticmethod
    def total_matches(page_highlights: PageHighlights) -> int:
        return sum(len(rects) for rects in page_highlights.values())
