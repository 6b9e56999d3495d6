# pdf_model.py
import logging
import fitz  # PyMuPDF
from typing import Dict, Iterator, List, Optional, Tuple

from models import PageText, TextHit, TextRun, Viewport

logger = logging.getLogger(__name__)


class PDFModel:
    """
    The Model class responsible for handling the PDF document.
    It encapsulates all interactions with the PyMuPDF (fitz) library.
    """
    def __init__(self, filepath: Optional[str] = None, stream: Optional[bytes] = None,
                 name: Optional[str] = None):
        if filepath is None and stream is None:
            raise ValueError("Either filepath or stream is required")
        self.filepath = filepath or name or "document.pdf"
        if stream is not None:
            self.doc: Optional[fitz.Document] = fitz.open(stream=stream, filetype="pdf")
        else:
            self.doc = fitz.open(filepath)
        self.page_count = self.doc.page_count if self.doc else 0
        self.page_text_cache: Dict[int, List[TextRun]] = {}
        logger.info("Opened %s (%d pages)", self.filepath, self.page_count)

    def get_page(self, page_num: int):
        """Returns a page object from the document."""
        if self.doc and 0 <= page_num < self.page_count:
            return self.doc.load_page(page_num)
        return None

    def get_page_size(self, page_num: int) -> Optional[fitz.Rect]:
        """
        Returns the unrotated dimensions of a specific page.

        Span origins and drawing both work on the unrotated page, so this is
        the height the y axis is flipped against.
        """
        page = self.get_page(page_num)
        return page.cropbox if page else None

    def page_sizes(self) -> Dict[int, Tuple[float, float]]:
        sizes = {}
        for i in range(self.page_count):
            rect = self.get_page_size(i)
            sizes[i] = (rect.width, rect.height)
        return sizes

    def viewport(self, page_num: int, scale: float) -> Viewport:
        rect = self.get_page_size(page_num)
        if rect is None:
            raise IndexError(f"Page {page_num} out of range")
        return Viewport(page_id=page_num, scale=scale, page_height=rect.height)

    def text_runs(self, page_num: int) -> List[TextRun]:
        """
        Returns the text spans of a page with their baseline geometry.

        PyMuPDF reports span origins with y growing downwards, which is
        the anchor convention TextHit uses. The run height is the font size.
        """
        if page_num in self.page_text_cache:
            return self.page_text_cache[page_num]

        page = self.get_page(page_num)
        if page is None:
            raise IndexError(f"Page {page_num} out of range")

        runs = []
        for block in page.get_text("dict")["blocks"]:
            if block.get("type") != 0:  # images
                continue
            for line in block["lines"]:
                for span in line["spans"]:
                    if not span["text"]:
                        continue
                    x0, _, x1, _ = span["bbox"]
                    ox, oy = span["origin"]
                    hit = TextHit(
                        page_id=page_num,
                        anchor=(ox, oy),
                        width=max(x1 - x0, 0.0),
                        height=span["size"],
                    )
                    runs.append(TextRun(text=span["text"], hit=hit))

        self.page_text_cache[page_num] = runs
        return runs

    def page_texts(self, scale: float) -> Iterator[PageText]:
        """Yields the text of every page, bound to a viewport at `scale`."""
        for i in range(self.page_count):
            yield PageText(page_id=i, viewport=self.viewport(i, scale), runs=self.text_runs(i))

    def tobytes(self) -> bytes:
        if not self.doc:
            raise ValueError("Document is closed")
        return self.doc.tobytes()

    def close(self):
        """Closes the PDF document."""
        if self.doc:
            self.doc.close()
            self.doc = None
            self.page_text_cache.clear()
