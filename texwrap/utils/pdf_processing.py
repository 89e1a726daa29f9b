"""
PDF inspection utilities for rendered output.

Helper functions:
    page_count: Quick page count without full extraction.
    is_pdf: Cheap header check for a PDF file.
"""

from pathlib import Path
from typing import Optional

from PyPDF2 import PdfReader

PDF_MAGIC = b"%PDF-"


def is_pdf(path: Path) -> bool:
    """True if path starts with the PDF header."""
    try:
        with open(path, "rb") as f:
            return f.read(len(PDF_MAGIC)) == PDF_MAGIC
    except OSError:
        return False


def page_count(pdf_path: Path) -> Optional[int]:
    """Get page count from PDF, or None if unreadable."""
    if not is_pdf(pdf_path):
        return None
    try:
        reader = PdfReader(str(pdf_path))
        return len(reader.pages)
    except Exception:
        return None
