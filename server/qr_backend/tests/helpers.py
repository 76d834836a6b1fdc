"""
Shared fixtures for the backend tests.
"""

from __future__ import annotations

import io
import json
import unittest

import cv2
import numpy as np
from fastapi.testclient import TestClient
from pypdf import PdfReader
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from flyer_pipeline.pdf_utils import QrBounds
from flyer_pipeline.preview import render_page
from qr_backend.app import create_app
from qr_backend.config import Settings, get_settings
from qr_backend.db import InMemoryDbClient
from qr_backend.dependencies import get_db_client, get_storage_client
from qr_backend.storage import InMemoryStorageClient

QR_BOUNDS = {"x": 400, "y": 40, "width": 144, "height": 144}


def make_pdf(pages: int = 1, pagesize=letter, label: str = "Flyer") -> bytes:
    """A flyer with a black placeholder square where the QR code goes."""
    buffer = io.BytesIO()
    can = canvas.Canvas(buffer, pagesize=pagesize)
    for index in range(pages):
        can.setFont("Helvetica", 24)
        can.drawString(72, pagesize[1] - 96, f"{label} page {index + 1}")
        can.setFillColorRGB(0, 0, 0)
        can.rect(
            QR_BOUNDS["x"],
            QR_BOUNDS["y"],
            QR_BOUNDS["width"],
            QR_BOUNDS["height"],
            fill=1,
            stroke=0,
        )
        can.showPage()
    can.save()
    return buffer.getvalue()


def crop_region(pdf_bytes: bytes, bounds: QrBounds, page_index: int = 0, scale: float = 4.0, padding: float = 12.0):
    page_height = float(PdfReader(io.BytesIO(pdf_bytes)).pages[page_index].mediabox.height)
    image = render_page(pdf_bytes, page_index, scale=scale)
    left = (bounds.x - padding) * scale
    right = (bounds.x + bounds.width + padding) * scale
    top = (page_height - bounds.y - bounds.height - padding) * scale
    bottom = (page_height - bounds.y + padding) * scale
    return image.crop((int(left), int(top), int(right), int(bottom))).convert("L")


def decode_qr_region(pdf_bytes: bytes, bounds: QrBounds, page_index: int = 0) -> str:
    region = np.array(crop_region(pdf_bytes, bounds, page_index))
    data, _, _ = cv2.QRCodeDetector().detectAndDecode(region)
    return data


class ApiTestCase(unittest.TestCase):
    """Runs the app against fresh in-memory backends."""

    settings_overrides: dict = {}

    def setUp(self):
        self.db = InMemoryDbClient()
        self.storage = InMemoryStorageClient()
        self.settings = Settings(
            use_in_memory_backends=True, **self.settings_overrides
        )
        app = create_app()
        app.dependency_overrides[get_db_client] = lambda: self.db
        app.dependency_overrides[get_storage_client] = lambda: self.storage
        app.dependency_overrides[get_settings] = lambda: self.settings
        self.client = TestClient(
            app, follow_redirects=False, raise_server_exceptions=False
        )

    def sign_up(self, email: str = "owner@example.com") -> dict:
        response = self.client.post(
            "/api/auth/signup", json={"email": email, "password": "correct-horse"}
        )
        self.assertEqual(response.status_code, 201, response.text)
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    def create_campaign(
        self,
        headers: dict,
        *,
        name: str = "spring-sale",
        count: int = 3,
        pdf_bytes: bytes | None = None,
        bounds: dict | None = None,
        target_url: str = "https://example.com/landing",
    ):
        return self.client.post(
            "/api/process-pdf",
            headers=headers,
            files={"file": ("flyer.pdf", pdf_bytes or make_pdf(), "application/pdf")},
            data={
                "baseUrl": "http://testserver",
                "targetUrl": target_url,
                "campaignName": name,
                "flyerCount": str(count),
                "qrBounds": json.dumps(bounds or QR_BOUNDS),
            },
        )
