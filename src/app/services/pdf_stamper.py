"""
PDF Signature Stamping

Draws the signature attribution block onto the last page of a PDF.
The block becomes part of the page content stream, not an annotation.
"""

from io import BytesIO
from typing import Sequence

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from reportlab.lib.colors import black
from reportlab.pdfgen import canvas

FONT_NAME = "Helvetica"
FONT_SIZE = 12
BLOCK_X = 50
BLOCK_BASELINE_Y = 100
LINE_SPACING = 20
RULE_OFFSET = 10
RULE_END_X = 300
RULE_THICKNESS = 1


class PdfStampError(Exception):
    """Source bytes are not a usable PDF"""


def signature_block_lines(
    signature: str, signed_at_text: str, ip_address: str, document_id: str
) -> list[str]:
    return [
        f"Electronically signed by: {signature}",
        f"Date: {signed_at_text}",
        f"IP Address: {ip_address}",
        f"Document ID: {document_id}",
    ]


def _make_overlay(
    page_right: float, page_top: float, left: float, bottom: float, lines: Sequence[str]
) -> bytes:
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=(page_right, page_top))
    c.setFillColor(black)
    c.setStrokeColor(black)

    # Rule above the block
    c.setLineWidth(RULE_THICKNESS)
    rule_y = bottom + BLOCK_BASELINE_Y + RULE_OFFSET
    c.line(left + BLOCK_X, rule_y, left + RULE_END_X, rule_y)

    c.setFont(FONT_NAME, FONT_SIZE)
    for index, text in enumerate(lines):
        c.drawString(left + BLOCK_X, bottom + BLOCK_BASELINE_Y - index * LINE_SPACING, text)

    c.save()
    return buf.getvalue()


# pypdf parses lazily, so malformed objects surface as any of these
_MALFORMED_PDF_ERRORS = (PyPdfError, ValueError, KeyError, TypeError, AttributeError, IndexError)


def stamp_signature_block(pdf_bytes: bytes, lines: Sequence[str]) -> bytes:
    """
    Stamp lines onto the last page and return the new PDF bytes.

    The page count never changes. Raises PdfStampError when the input
    cannot be parsed, has no pages, or breaks while being rewritten.
    """
    try:
        reader = PdfReader(BytesIO(pdf_bytes))
        if len(reader.pages) == 0:
            raise PdfStampError("PDF has no pages")

        writer = PdfWriter(clone_from=reader)
        last_page = writer.pages[-1]
        box = last_page.mediabox
        overlay_pdf = _make_overlay(
            float(box.right), float(box.top), float(box.left), float(box.bottom), lines
        )
        last_page.merge_page(PdfReader(BytesIO(overlay_pdf)).pages[0])

        out = BytesIO()
        writer.write(out)
    except _MALFORMED_PDF_ERRORS as exc:
        raise PdfStampError(f"Could not stamp PDF: {exc}") from exc

    return out.getvalue()
