# install: pip install pymupdf
import fitz  # PyMuPDF


def pdf_page_count(pdf_bytes: bytes) -> int:
    """
    Number of pages in a PDF buffer. Raises ValueError if the buffer
    is not a readable PDF.
    """
    if not pdf_bytes:
        raise ValueError("empty PDF buffer")
    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except Exception as e:
        raise ValueError(f"unreadable PDF: {e}") from e
    try:
        if not doc.is_pdf:
            raise ValueError("not a PDF document")
        return doc.page_count
    finally:
        doc.close()


def ensure_valid_pdf(pdf_bytes: bytes) -> bytes:
    if pdf_page_count(pdf_bytes) < 1:
        raise ValueError("PDF has no pages")
    return pdf_bytes
