"""
QR code rendering for flyer tracking URLs.
"""

from __future__ import annotations

import qrcode
from PIL import Image
from qrcode.constants import ERROR_CORRECT_M

DEFAULT_BOX_SIZE = 10
DEFAULT_BORDER = 2


def render_qr_image(
    content: str, *, box_size: int = DEFAULT_BOX_SIZE, border: int = DEFAULT_BORDER
) -> Image.Image:
    """Render `content` as a black-on-white QR code image."""
    if not content:
        raise ValueError("QR content must not be empty")
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(content)
    qr.make(fit=True)
    image = qr.make_image(fill_color="black", back_color="white")
    return image.get_image().convert("RGB")

