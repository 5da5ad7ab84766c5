"""
PDF Consolidator
Merges downloaded invoice PDFs, or writes a one-page placeholder when a
category has nothing to merge
"""

import logging
from pathlib import Path
from typing import Sequence, Union

from pypdf import PdfReader, PdfWriter
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "No data available for this category."

PathLike = Union[str, Path]


def merge_pdfs(pdf_paths: Sequence[PathLike], output_path: PathLike) -> Path:
    """
    Merge PDFs into one file, keeping input order and page order

    Args:
        pdf_paths: At least one input PDF
        output_path: Destination file

    Returns:
        Path of the merged file
    """
    if not pdf_paths:
        raise ValueError("merge_pdfs needs at least one input file")

    output_path = Path(output_path)
    writer = PdfWriter()

    for pdf_path in pdf_paths:
        reader = PdfReader(str(pdf_path))
        for page in reader.pages:
            writer.add_page(page)

    with open(output_path, "wb") as f:
        writer.write(f)

    logger.info(f"PDFs merged into {output_path} ({len(writer.pages)} pages from {len(pdf_paths)} files)")
    return output_path


def create_placeholder_pdf(output_path: PathLike) -> Path:
    """Write a single page saying no data was available"""
    output_path = Path(output_path)

    pdf = canvas.Canvas(str(output_path), pagesize=letter)
    width, height = letter
    pdf.setFont("Helvetica", 14)
    pdf.drawString(50, height - 72, PLACEHOLDER_TEXT)
    pdf.showPage()
    pdf.save()

    logger.info(f"Empty PDF created at {output_path}")
    return output_path
