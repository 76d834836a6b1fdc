"""
PDF editing helpers for flyer generation.

Stamping works on PDF user-space coordinates: the QR rectangle is given in
points with its origin at the bottom-left corner of the page's media box.
Every page of the document is stamped, then the pages can be concatenated
into one print-ready file.
"""

from __future__ import annotations

import io
import logging
import math
from dataclasses import dataclass
from typing import Iterable, Mapping

from PIL import Image
from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from flyer_pipeline.qr_utils import DEFAULT_BORDER, DEFAULT_BOX_SIZE, render_qr_image

logger = logging.getLogger(__name__)


class PdfStampError(ValueError):
    """Raised when an input PDF or QR rectangle cannot be used."""


@dataclass(frozen=True)
class QrBounds:
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_mapping(cls, payload: Mapping) -> "QrBounds":
        try:
            bounds = cls(
                x=float(payload["x"]),
                y=float(payload["y"]),
                width=float(payload["width"]),
                height=float(payload["height"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise PdfStampError(
                "qrBounds must contain numeric x, y, width and height"
            ) from exc
        if not all(
            math.isfinite(value)
            for value in (bounds.x, bounds.y, bounds.width, bounds.height)
        ):
            raise PdfStampError("qrBounds values must be finite numbers")
        if bounds.width <= 0 or bounds.height <= 0:
            raise PdfStampError("qrBounds width and height must be positive")
        if bounds.x < 0 or bounds.y < 0:
            raise PdfStampError("qrBounds must lie inside the page")
        return bounds

    def as_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


def open_pdf(pdf_bytes: bytes) -> PdfReader:
    """Parse `pdf_bytes`, raising PdfStampError for anything unusable."""
    if not pdf_bytes:
        raise PdfStampError("PDF file is empty")
    try:
        reader = PdfReader(io.BytesIO(pdf_bytes))
        encrypted = reader.is_encrypted
        page_count = 0 if encrypted else len(reader.pages)
    except (PyPdfError, ValueError, OSError) as exc:
        raise PdfStampError("Invalid or corrupted PDF file") from exc
    if encrypted:
        raise PdfStampError("Encrypted PDFs are not supported")
    if page_count == 0:
        raise PdfStampError("PDF has no pages")
    return reader


def count_pages(pdf_bytes: bytes) -> int:
    return len(open_pdf(pdf_bytes).pages)


def check_bounds(reader: PdfReader, bounds: QrBounds) -> None:
    """Raise PdfStampError unless `bounds` fits on every page of `reader`."""
    for index, page in enumerate(reader.pages):
        box = page.mediabox
        if bounds.x + bounds.width > float(box.width) or (
            bounds.y + bounds.height > float(box.height)
        ):
            logger.info("qrBounds %s outside page %d", bounds.as_dict(), index + 1)
            raise PdfStampError("qrBounds must lie inside the page")


def _overlay_page(page_box, qr_image: ImageReader, bounds: QrBounds):
    left = float(page_box.left)
    bottom = float(page_box.bottom)
    x = left + bounds.x
    y = bottom + bounds.y

    packet = io.BytesIO()
    can = canvas.Canvas(
        packet, pagesize=(float(page_box.right), float(page_box.top))
    )
    # Cover whatever QR code the artwork already carries.
    can.setFillColorRGB(1, 1, 1)
    can.rect(x, y, bounds.width, bounds.height, fill=1, stroke=0)
    can.drawImage(qr_image, x, y, width=bounds.width, height=bounds.height)
    can.save()
    packet.seek(0)
    return PdfReader(packet).pages[0]


def stamp_qr_image(pdf_bytes: bytes, qr_image: Image.Image, bounds: QrBounds) -> bytes:
    """
    Paint `bounds` white on every page of `pdf_bytes` and draw `qr_image`
    into it. Returns the new document.
    """
    reader = open_pdf(pdf_bytes)
    check_bounds(reader, bounds)
    image_reader = ImageReader(qr_image)
    overlays = {}

    writer = PdfWriter()
    for source in reader.pages:
        page = writer.add_page(source)
        box = page.mediabox
        key = (float(box.left), float(box.bottom), float(box.right), float(box.top))
        if key not in overlays:
            overlays[key] = _overlay_page(box, image_reader, bounds)
        page.merge_page(overlays[key])

    output = io.BytesIO()
    writer.write(output)
    return output.getvalue()


def stamp_qr_code(
    pdf_bytes: bytes,
    content: str,
    bounds: QrBounds,
    *,
    box_size: int = DEFAULT_BOX_SIZE,
    border: int = DEFAULT_BORDER,
) -> bytes:
    """Render `content` as a QR code and stamp it onto every page."""
    qr_image = render_qr_image(content, box_size=box_size, border=border)
    return stamp_qr_image(pdf_bytes, qr_image, bounds)


def merge_pdfs(documents: Iterable[bytes]) -> bytes:
    """Concatenate the pages of `documents`, preserving order."""
    writer = PdfWriter()
    merged = 0
    for data in documents:
        writer.append(open_pdf(data))
        merged += 1
    if merged == 0:
        raise PdfStampError("Nothing to merge")
    output = io.BytesIO()
    writer.write(output)
    logger.info("Merged %d PDFs into %d pages", merged, len(writer.pages))
    return output.getvalue()
