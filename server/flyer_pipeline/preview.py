"""
First-page previews so a client can mark the QR rectangle in PDF points.
"""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass

import pypdfium2 as pdfium
from PIL import Image

from flyer_pipeline.pdf_utils import PdfStampError, open_pdf

MAX_PREVIEW_EDGE = 1600


@dataclass
class PagePreview:
    page_count: int
    width: float
    height: float
    scale: float
    png_bytes: bytes

    def as_dict(self) -> dict:
        return {
            "page_count": self.page_count,
            "width": self.width,
            "height": self.height,
            "scale": self.scale,
            "image": base64.b64encode(self.png_bytes).decode("ascii"),
        }


def render_page(pdf_bytes: bytes, page_index: int = 0, scale: float = 2.0) -> Image.Image:
    pdf = pdfium.PdfDocument(pdf_bytes)
    try:
        if page_index >= len(pdf):
            raise PdfStampError(f"PDF has no page {page_index + 1}")
        page = pdf[page_index]
        return page.render(scale=scale).to_pil()
    finally:
        pdf.close()


def build_preview(pdf_bytes: bytes, scale: float = 1.5) -> PagePreview:
    reader = open_pdf(pdf_bytes)
    box = reader.pages[0].mediabox
    width, height = float(box.width), float(box.height)
    # Keep large posters from producing huge images.
    scale = min(scale, MAX_PREVIEW_EDGE / max(width, height))

    image = render_page(pdf_bytes, 0, scale=scale)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return PagePreview(
        page_count=len(reader.pages),
        width=width,
        height=height,
        scale=scale,
        png_bytes=buffer.getvalue(),
    )
