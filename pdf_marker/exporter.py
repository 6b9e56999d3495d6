# exporter.py
"""
Writes search highlights into a PDF and saves the result.

Drawing happens on an independent copy of the document, and the bytes reach
their destination through a temporary file in the same directory, so a
failed export never leaves a half-written file behind.
"""
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Tuple

import fitz  # PyMuPDF

from config import HIGHLIGHT_COLOR, HIGHLIGHT_OPACITY
from models import CoordinateSpace, HighlightRect

logger = logging.getLogger(__name__)


class ExportError(RuntimeError):
    """Drawing or saving the highlighted document failed."""


class HighlightWriter:
    """Draws document-space rectangles onto a copy of a PDF."""

    def __init__(self, source: bytes):
        self.doc = fitz.open(stream=source, filetype="pdf")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def draw_highlight(self, page_id: int, rect: HighlightRect,
                       color: Tuple[float, float, float] = HIGHLIGHT_COLOR,
                       opacity: float = HIGHLIGHT_OPACITY) -> fitz.Rect:
        """
        Fills `rect` (origin bottom-left) on the given page.

        PyMuPDF draws with the origin at the top-left, so the rectangle goes
        through the page's transformation matrix first. Returns the rectangle
        that was actually drawn.
        """
        if rect.space is not CoordinateSpace.DOCUMENT:
            raise ValueError("Expected a document-space rectangle")
        if not 0 <= page_id < self.doc.page_count:
            raise IndexError(f"Page {page_id} out of range")

        page = self.doc.load_page(page_id)
        pdf_rect = fitz.Rect(rect.x, rect.y, rect.x + rect.width, rect.y + rect.height)
        drawn = pdf_rect * page.transformation_matrix
        page.draw_rect(drawn, color=None, fill=color, fill_opacity=opacity, overlay=True)
        return drawn

    def draw_all(self, annotations: Iterable[Tuple[int, HighlightRect]]) -> int:
        count = 0
        for page_id, rect in annotations:
            self.draw_highlight(page_id, rect)
            count += 1
        return count

    def tobytes(self) -> bytes:
        return self.doc.tobytes(garbage=3, deflate=True)

    def close(self):
        if self.doc:
            self.doc.close()
            self.doc = None


def save_pdf_bytes(data: bytes, output_path) -> Path:
    """Atomically writes `data` to `output_path`."""
    out_path = Path(output_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    # Temp file in the same directory so os.replace stays on one filesystem
    fd, temp_name = tempfile.mkstemp(prefix=out_path.stem + ".", suffix=".tmp.pdf",
                                     dir=out_path.parent)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(temp_name, out_path)
    except BaseException:
        if os.path.exists(temp_name):
            os.unlink(temp_name)
        raise

    logger.info("Saved %d bytes to %s", len(data), out_path)
    return out_path
