import queue

import fitz  # PyMuPDF
import pytest
from PIL import Image

from models import CoordinateSpace, HighlightRect
from renderer import RenderWorker, overlay_highlights, render_page
from session import MarkerSession


class TestOverlay:

    def test_blends_inside_rect_only(self):
        img = Image.new("RGB", (100, 100), (255, 255, 255))
        out = overlay_highlights(img, [HighlightRect(10, 10, 20, 20)])

        r, g, b = out.getpixel((15, 15))
        assert (r, g) == (255, 255)
        assert 120 <= b <= 135
        assert out.getpixel((5, 5)) == (255, 255, 255)
        assert out.getpixel((30, 30)) == (255, 255, 255)
        assert img.getpixel((15, 15)) == (255, 255, 255)

    def test_rejects_document_rect(self):
        img = Image.new("RGB", (10, 10))
        with pytest.raises(ValueError):
            overlay_highlights(img, [HighlightRect(0, 0, 5, 5, space=CoordinateSpace.DOCUMENT)])

    def test_no_rects_returns_same_content(self):
        img = Image.new("RGB", (8, 8), (1, 2, 3))
        assert overlay_highlights(img, []).tobytes() == img.tobytes()


class TestRendering:

    def test_render_page_size_follows_scale(self, sample_pdf_bytes):
        with fitz.open(stream=sample_pdf_bytes, filetype="pdf") as doc:
            img = render_page(doc, 0, 0.5)
        assert img.size == (306, 396)

    def test_worker_renders_and_stops(self, sample_pdf_bytes):
        doc = fitz.open(stream=sample_pdf_bytes, filetype="pdf")
        results = queue.Queue()
        worker = RenderWorker(doc, results)
        try:
            worker.render(1, 0.25)
            page_index, scale, img = results.get(timeout=30)
            assert (page_index, scale) == (1, 0.25)
            assert img.size == (153, 198)
        finally:
            worker.stop()
            worker.join(timeout=5)
        assert not worker.is_alive()
        doc.close()

    def test_worker_survives_bad_page(self, sample_pdf_bytes):
        doc = fitz.open(stream=sample_pdf_bytes, filetype="pdf")
        results = queue.Queue()
        worker = RenderWorker(doc, results)
        try:
            worker.render(99, 1.0)
            worker.render(0, 0.25)
            page_index, _, _ = results.get(timeout=30)
            assert page_index == 0
        finally:
            worker.stop()
            worker.join(timeout=5)
        doc.close()

    def test_cleared_worker_keeps_rendering(self, sample_pdf_bytes):
        results = queue.Queue()
        worker = RenderWorker.from_bytes(sample_pdf_bytes, results)
        try:
            worker.render(0, 0.25)
            results.get(timeout=30)
            worker.render(1, 0.25)
            worker.render(2, 0.25)
            worker.clear()
            worker.render(2, 0.5)

            seen = []
            while not seen or seen[-1][1] != 0.5:
                page_index, scale, _ = results.get(timeout=30)
                seen.append((page_index, scale))
            assert seen[-1] == (2, 0.5)
        finally:
            worker.stop()
            worker.join(timeout=5)
        assert not worker.is_alive()

    def test_owned_document_closed_on_stop(self, sample_pdf_bytes):
        worker = RenderWorker.from_bytes(sample_pdf_bytes, queue.Queue())
        worker.stop()
        worker.join(timeout=5)

        assert not worker.is_alive()
        assert worker.pdf_doc.is_closed

    def test_rotated_page_rendered_unrotated(self, rotated_pdf_bytes):
        with fitz.open(stream=rotated_pdf_bytes, filetype="pdf") as doc:
            img = render_page(doc, 0, 0.5)
        assert img.size == (306, 396)

    def test_worker_independent_of_session_document(self, sample_pdf_bytes):
        s = MarkerSession.from_bytes(sample_pdf_bytes)
        results = queue.Queue()
        worker = RenderWorker.from_bytes(s.pdf_model.tobytes(), results)
        try:
            s.close()
            worker.render(0, 0.25)
            page_index, _, img = results.get(timeout=30)
            assert page_index == 0
            assert img.size == (153, 198)
        finally:
            worker.stop()
            worker.join(timeout=5)
