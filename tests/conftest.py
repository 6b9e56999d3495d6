import fitz  # PyMuPDF
import pytest

PAGE_WIDTH = 612
PAGE_HEIGHT = 792


def make_pdf(pages):
    """Builds a PDF in memory. `pages` is a list of [(x, y, text, fontsize), ...]."""
    doc = fitz.open()
    for lines in pages:
        page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        for x, y, text, size in lines:
            page.insert_text((x, y), text, fontsize=size, fontname="helv")
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def sample_pdf_bytes():
    return make_pdf([
        [(100, 700, "hello world", 12), (100, 200, "Say Hello again", 12)],
        [(72, 100, "nothing to see here", 12)],
        [(50, 400, "HELLO in capitals", 18)],
    ])


@pytest.fixture
def sample_pdf_path(tmp_path, sample_pdf_bytes):
    path = tmp_path / "sample.pdf"
    path.write_bytes(sample_pdf_bytes)
    return str(path)


@pytest.fixture
def rotated_pdf_bytes():
    doc = fitz.open()
    page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
    page.insert_text((100, 700), "hello world", fontsize=12, fontname="helv")
    page.set_rotation(90)
    data = doc.tobytes()
    doc.close()
    return data
