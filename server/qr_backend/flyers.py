"""
Campaign flyer generation.

Creates the campaign, then for each flyer: inserts the row, builds its
tracking URL, stamps a QR code for that URL onto the base PDF, uploads the
result and records where it went. Finally every flyer is merged into one
document for printing.

Flyers are processed one after another. A failure aborts the batch; rows and
objects written before the failure stay where they are.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from flyer_pipeline.pdf_utils import QrBounds, merge_pdfs, stamp_qr_code
from qr_backend.config import Settings
from qr_backend.db import CampaignRecord, DbClient, FlyerRecord
from qr_backend.storage import StorageClient
from qr_backend.tracking import TrackingTokenCodec, build_tracking_url

logger = logging.getLogger(__name__)


@dataclass
class FlyerBatchRequest:
    owner: str
    campaign_name: str
    target_url: str
    base_url: str
    flyer_count: int
    bounds: QrBounds
    pdf_bytes: bytes


@dataclass
class GeneratedFlyer:
    record: FlyerRecord
    signed_url: str

    def as_dict(self) -> dict:
        payload = self.record.as_dict()
        payload["signed_url"] = self.signed_url
        return payload


@dataclass
class FlyerBatchResult:
    campaign: CampaignRecord
    flyers: list[GeneratedFlyer]
    merged_pdf_key: str
    merged_pdf_url: str


def storage_key(filename: str, now: Optional[float] = None) -> str:
    millis = int((now if now is not None else time.time()) * 1000)
    return f"pdfs/{millis}-{filename}"


def _upload_pdf(storage: StorageClient, data: bytes, filename: str) -> tuple[str, str]:
    key = storage_key(filename)
    storage.upload_bytes(key, data)
    return key, storage.object_url(key)


def generate_campaign(
    request: FlyerBatchRequest,
    *,
    db: DbClient,
    storage: StorageClient,
    settings: Settings,
    codec: TrackingTokenCodec,
) -> FlyerBatchResult:
    original_key, original_url = _upload_pdf(
        storage, request.pdf_bytes, f"{request.campaign_name}-original.pdf"
    )

    campaign = db.create_campaign(
        owner=request.owner,
        name=request.campaign_name,
        url=request.target_url,
        pdf_key=original_key,
        pdf_url=original_url,
        flyers=request.flyer_count,
    )
    logger.info(
        "[campaign %s] Generating %d flyers for %s",
        campaign.id,
        request.flyer_count,
        campaign.name,
    )

    flyers: list[GeneratedFlyer] = []
    flyer_pdfs: list[bytes] = []
    for number in range(1, request.flyer_count + 1):
        flyer = db.create_flyer(
            campaign_id=campaign.id,
            number=number,
            campaign_name=campaign.name,
            redirect_url=campaign.url,
        )
        url = build_tracking_url(
            request.base_url,
            style=settings.tracking_url_style,
            campaign_id=campaign.id,
            campaign_name=campaign.name,
            flyer_id=flyer.id,
            number=number,
            codec=codec,
        )
        flyer_pdf = stamp_qr_code(
            request.pdf_bytes,
            url,
            request.bounds,
            box_size=settings.qr_box_size,
            border=settings.qr_border,
        )
        flyer_pdfs.append(flyer_pdf)

        key, object_url = _upload_pdf(storage, flyer_pdf, f"flyer-{flyer.id}.pdf")
        updated = db.update_flyer(flyer.id, url=url, pdf_url=object_url, s3_key=key)
        if updated is None:
            raise RuntimeError(f"Flyer {flyer.id} disappeared during generation")
        signed_url = storage.presign_get(key, expires_in=settings.signed_url_expires_in)
        flyers.append(GeneratedFlyer(record=updated, signed_url=signed_url))
        logger.info(
            "[campaign %s] Flyer %d/%d -> %s",
            campaign.id,
            number,
            request.flyer_count,
            key,
        )

    merged_key, _ = _upload_pdf(
        storage, merge_pdfs(flyer_pdfs), f"campaign-{campaign.id}-all-flyers.pdf"
    )
    campaign = db.update_campaign(campaign.id, merged_pdf_key=merged_key) or campaign
    merged_url = storage.presign_get(merged_key, expires_in=settings.signed_url_expires_in)
    logger.info("[campaign %s] Merged flyers uploaded to %s", campaign.id, merged_key)

    return FlyerBatchResult(
        campaign=campaign,
        flyers=flyers,
        merged_pdf_key=merged_key,
        merged_pdf_url=merged_url,
    )
