import io
from pathlib import Path

import pytest
from pypdf import PdfWriter


def pdf_bytes(num_pages: int = 1, width: float = 612) -> bytes:
    """Build a minimal PDF whose pages are identifiable by width"""
    writer = PdfWriter()
    for _ in range(num_pages):
        writer.add_blank_page(width=width, height=792)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def write_pdf(path: Path, num_pages: int = 1, width: float = 612) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(pdf_bytes(num_pages, width))
    return path


@pytest.fixture
def make_pdf(tmp_path):
    def _make(name: str, num_pages: int = 1, width: float = 612) -> Path:
        return write_pdf(tmp_path / name, num_pages, width)
    return _make
