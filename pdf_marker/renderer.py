# renderer.py
import logging
import threading
import queue
from typing import Iterable, Tuple

import fitz  # PyMuPDF
from PIL import Image, ImageDraw

from config import HIGHLIGHT_COLOR, HIGHLIGHT_OPACITY
from models import CoordinateSpace, HighlightRect

logger = logging.getLogger(__name__)


class RenderWorker(threading.Thread):
    """
    A worker thread that renders PDF pages in the background.

    Pass `owns_doc=True` when the worker got its own document handle; it is
    then closed when the thread exits.
    """
    def __init__(self, pdf_doc, result_queue, owns_doc=False):
        super().__init__(daemon=True)
        self.pdf_doc = pdf_doc
        self.result_queue = result_queue
        self.owns_doc = owns_doc
        self.render_queue = queue.Queue()
        self.start()

    @classmethod
    def from_bytes(cls, data: bytes, result_queue):
        """Starts a worker on a private copy of the document."""
        return cls(fitz.open(stream=data, filetype="pdf"), result_queue, owns_doc=True)

    def run(self):
        try:
            while True:
                page_index, scale = self.render_queue.get()
                if page_index is None:  # Sentinel value to stop the thread
                    break

                try:
                    self.result_queue.put((page_index, scale, render_page(self.pdf_doc, page_index, scale)))
                except Exception:
                    logger.exception("Rendering error on page %s", page_index)
        finally:
            if self.owns_doc:
                self.pdf_doc.close()

    def render(self, page_index, scale):
        """Adds a page rendering request to the queue."""
        self.render_queue.put((page_index, scale))

    def clear(self):
        """Drops render requests that have not been picked up yet."""
        while True:
            try:
                self.render_queue.get_nowait()
            except queue.Empty:
                break

    def stop(self):
        """Stops the worker thread."""
        self.clear()
        self.render_queue.put((None, None))


def render_page(pdf_doc, page_index: int, scale: float) -> Image.Image:
    # Rendered unrotated, matching the space text and highlights live in
    page = pdf_doc.load_page(page_index)
    pix = page.get_pixmap(matrix=page.derotation_matrix * fitz.Matrix(scale, scale), alpha=False)
    return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)


def overlay_highlights(img: Image.Image, rects: Iterable[HighlightRect],
                       color: Tuple[float, float, float] = HIGHLIGHT_COLOR,
                       opacity: float = HIGHLIGHT_OPACITY) -> Image.Image:
    """Returns a copy of `img` with display-space rectangles blended on top."""
    base = img.convert("RGBA")
    layer = Image.new("RGBA", base.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    fill = tuple(int(round(c * 255)) for c in color) + (int(round(opacity * 255)),)

    for rect in rects:
        if rect.space is not CoordinateSpace.DISPLAY:
            raise ValueError("Only display-space rectangles can be drawn on a page image")
        # PIL's rectangle includes the end pixel
        x0, y0 = rect.x, rect.y
        x1, y1 = rect.x + rect.width - 1, rect.y + rect.height - 1
        if x1 < x0 or y1 < y0:
            continue
        draw.rectangle((x0, y0, x1, y1), fill=fill)

    return Image.alpha_composite(base, layer).convert("RGB")
