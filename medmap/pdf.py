import io

from pypdf import PdfReader


def extract_text(pdf_bytes: bytes) -> str:
    """Concatenated text of all pages, raises on unreadable input"""
    reader = PdfReader(io.BytesIO(pdf_bytes))
    pages = []
    for page in reader.pages:
        pages.append(page.extract_text() or "")
    return "\n".join(pages)
