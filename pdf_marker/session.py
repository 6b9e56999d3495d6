# session.py
import logging
from typing import Callable, Optional

from config import DEFAULT_SCALE
from exporter import ExportError, HighlightWriter, save_pdf_bytes
from highlighter import HighlightTransformer
from models import PageHighlights, PreconditionError
from pdf_model import PDFModel

logger = logging.getLogger(__name__)


class MarkerSession:
    """
    State of one opened document: the file, the display scale and the
    current search results.

    A session lives from file load until the next file load (or close).
    Search results carry the scale they were computed at, so an export
    always re-projects with the scale the rectangles were built for.
    """
    def __init__(self, pdf_model: PDFModel, scale: float = DEFAULT_SCALE,
                 on_no_matches: Optional[Callable[[str], None]] = None):
        if not scale > 0:
            raise PreconditionError(f"Scale must be positive, got {scale!r}")
        self.pdf_model = pdf_model
        self.scale = scale
        self.on_no_matches = on_no_matches

        self.search_term = ""
        self.results: PageHighlights = {}
        self.results_scale: Optional[float] = None

    @classmethod
    def open(cls, path: str, **kwargs) -> "MarkerSession":
        return cls(PDFModel(path), **kwargs)

    @classmethod
    def from_bytes(cls, data: bytes, name: str = "document.pdf", **kwargs) -> "MarkerSession":
        return cls(PDFModel(stream=data, name=name), **kwargs)

    @property
    def is_open(self) -> bool:
        return self.pdf_model is not None and self.pdf_model.doc is not None

    @property
    def total_matches(self) -> int:
        return HighlightTransformer.total_matches(self.results)

    def clear_search(self):
        self.search_term = ""
        self.results = {}
        self.results_scale = None

    def search(self, term: str) -> PageHighlights:
        """
        Runs a fresh search over every page and replaces earlier results.

        A blank term leaves the current results untouched. When nothing
        matches, `on_no_matches` is called once and the results are cleared.
        """
        if not term or not term.strip() or not self.is_open:
            return {}

        results = HighlightTransformer.search(term, self.pdf_model.page_texts(self.scale))
        total = HighlightTransformer.total_matches(results)
        logger.info("Search %r: %d match(es) at scale %.2f", term, total, self.scale)

        self.search_term = term
        if total == 0:
            self.results = {}
            self.results_scale = None
            if self.on_no_matches:
                self.on_no_matches(term)
            return {}

        self.results = results
        self.results_scale = self.scale
        return results

    def set_scale(self, scale: float) -> None:
        """Changes the display scale and rebinds existing results to it."""
        if not scale > 0:
            raise PreconditionError(f"Scale must be positive, got {scale!r}")
        if scale == self.scale:
            return
        self.scale = scale
        if self.results:
            self.results = HighlightTransformer.search(
                self.search_term, self.pdf_model.page_texts(scale))
            self.results_scale = scale

    def export(self, output_path):
        """
        Writes a copy of the document with the highlights drawn in.

        Returns the written path, or None when there is nothing to export.
        Raises ExportError when drawing or saving fails.
        """
        if not self.is_open or not self.results:
            return None

        try:
            annotations = HighlightTransformer.export_annotations(
                self.results, self.pdf_model.page_sizes(), self.results_scale)
            with HighlightWriter(self.pdf_model.tobytes()) as writer:
                drawn = writer.draw_all(annotations)
                data = writer.tobytes()
            path = save_pdf_bytes(data, output_path)
        except Exception as e:
            logger.exception("Export to %s failed", output_path)
            raise ExportError(f"Could not save highlighted PDF: {e}") from e

        logger.info("Exported %d highlight(s) to %s", drawn, path)
        return path

    def close(self):
        self.clear_search()
        if self.pdf_model:
            self.pdf_model.close()
