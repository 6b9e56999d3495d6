import logging

import fitz  # PyMuPDF
import pytest

from models import PageText
from pdf_model import PDFModel

PAGE_WIDTH = 612
PAGE_HEIGHT = 792


class TestPDFModel:

    def test_open_from_path(self, sample_pdf_path):
        model = PDFModel(sample_pdf_path)
        try:
            assert model.page_count == 3
            assert model.filepath == sample_pdf_path
        finally:
            model.close()
        assert model.doc is None

    def test_open_from_bytes(self, sample_pdf_bytes):
        model = PDFModel(stream=sample_pdf_bytes)
        assert model.page_count == 3
        model.close()

    def test_requires_a_source(self):
        with pytest.raises(ValueError):
            PDFModel()

    def test_page_sizes(self, sample_pdf_bytes):
        model = PDFModel(stream=sample_pdf_bytes)
        assert model.page_sizes() == {i: (PAGE_WIDTH, PAGE_HEIGHT) for i in range(3)}
        assert model.get_page_size(5) is None
        model.close()

    def test_viewport(self, sample_pdf_bytes):
        model = PDFModel(stream=sample_pdf_bytes)
        vp = model.viewport(1, 2.0)
        assert (vp.page_id, vp.scale, vp.page_height) == (1, 2.0, PAGE_HEIGHT)
        with pytest.raises(IndexError):
            model.viewport(3, 1.0)
        model.close()

    def test_text_runs_carry_baseline_geometry(self, sample_pdf_bytes):
        model = PDFModel(stream=sample_pdf_bytes)
        runs = {r.text: r.hit for r in model.text_runs(0)}

        hit = runs["hello world"]
        assert hit.page_id == 0
        assert hit.anchor[0] == pytest.approx(100, abs=0.5)
        assert hit.anchor[1] == pytest.approx(700, abs=0.5)
        assert hit.height == pytest.approx(12)
        expected_width = fitz.get_text_length("hello world", fontname="helv", fontsize=12)
        assert hit.width == pytest.approx(expected_width, abs=0.5)
        model.close()

    def test_text_runs_are_cached(self, sample_pdf_bytes):
        model = PDFModel(stream=sample_pdf_bytes)
        assert model.text_runs(1) is model.text_runs(1)
        model.close()

    def test_page_texts(self, sample_pdf_bytes):
        model = PDFModel(stream=sample_pdf_bytes)
        pages = list(model.page_texts(1.5))

        assert [p.page_id for p in pages] == [0, 1, 2]
        assert all(isinstance(p, PageText) and p.viewport.scale == 1.5 for p in pages)
        assert [r.text for r in pages[1].runs] == ["nothing to see here"]
        model.close()

    def test_tobytes_round_trips(self, sample_pdf_bytes):
        model = PDFModel(stream=sample_pdf_bytes)
        again = PDFModel(stream=model.tobytes())
        assert again.page_count == 3
        again.close()
        model.close()
        with pytest.raises(ValueError):
            model.tobytes()

    def test_rotated_page_uses_unrotated_height(self, rotated_pdf_bytes):
        model = PDFModel(stream=rotated_pdf_bytes)

        assert model.get_page(0).rotation == 90
        assert model.viewport(0, 1.0).page_height == PAGE_HEIGHT
        assert model.page_sizes() == {0: (PAGE_WIDTH, PAGE_HEIGHT)}
        model.close()

    def test_stream_name_used_in_log(self, sample_pdf_bytes, caplog):
        with caplog.at_level(logging.INFO, logger="pdf_model"):
            model = PDFModel(stream=sample_pdf_bytes, name="report.pdf")

        assert model.filepath == "report.pdf"
        assert "Opened report.pdf (3 pages)" in caplog.text
        model.close()
