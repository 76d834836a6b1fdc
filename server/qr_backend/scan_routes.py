"""
Public routes hit by people scanning a flyer.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from qr_backend.config import Settings, get_settings
from qr_backend.db import DbClient, FlyerRecord
from qr_backend.dependencies import get_db_client, get_token_codec
from qr_backend.scans import record_visit
from qr_backend.tracking import TrackingTokenCodec, is_http_url

logger = logging.getLogger(__name__)

router = APIRouter()
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

GEOLOCATION_TIMEOUT_MS = 30_000
GEOLOCATION_MAX_ATTEMPTS = 3


def _is_int(value: Optional[str]) -> bool:
    # str.isdigit also accepts non-ASCII digits such as "²".
    return bool(value) and value.isascii() and value.isdigit()


def _redirect_after_scan(
    request: Request, db: DbClient, flyer: FlyerRecord, campaign_params: dict
) -> RedirectResponse:
    outcome = record_visit(db, flyer)
    if outcome.needs_location:
        prompt_url = request.url_for("location_prompt").include_query_params(
            flyerId=campaign_params.pop("flyerId"),
            scanId=outcome.scan.id,
            redirectUrl=flyer.redirect_url,
            **campaign_params,
        )
        return RedirectResponse(str(prompt_url))
    return RedirectResponse(flyer.redirect_url)


@router.get("/r/{token}")
def redirect_by_token(
    token: str,
    request: Request,
    db: DbClient = Depends(get_db_client),
    codec: TrackingTokenCodec = Depends(get_token_codec),
):
    ref = codec.decode(token)
    if ref is None:
        logger.warning("Rejected malformed tracking token")
        raise HTTPException(status_code=400, detail="Invalid ID format")

    campaign = db.get_campaign(ref.campaign_id)
    if campaign is None:
        raise HTTPException(status_code=404, detail="Campaign not found")
    flyer = db.get_flyer(ref.flyer_id)
    if flyer is None or flyer.campaign != campaign.id:
        raise HTTPException(status_code=404, detail="Flyer not found")

    return _redirect_after_scan(
        request, db, flyer, {"flyerId": flyer.id, "campaignId": campaign.id}
    )


@router.get("/r/{campaign_name}/{number}")
def redirect_by_number(
    campaign_name: str,
    number: str,
    request: Request,
    db: DbClient = Depends(get_db_client),
):
    if not _is_int(number):
        raise HTTPException(status_code=400, detail="Invalid flyer ID format")

    flyer = db.get_flyer_by_number(campaign_name, int(number))
    if flyer is None:
        raise HTTPException(status_code=404, detail="Flyer not found")

    return _redirect_after_scan(
        request, db, flyer, {"flyerId": flyer.number, "campaignName": campaign_name}
    )


@router.get("/location-prompt", name="location_prompt")
def location_prompt(request: Request, settings: Settings = Depends(get_settings)):
    params = request.query_params
    flyer_id = params.get("flyerId")
    redirect_url = params.get("redirectUrl")
    campaign_id = params.get("campaignId")
    campaign_name = params.get("campaignName")

    missing = not (flyer_id and redirect_url and (campaign_id or campaign_name))
    context = {
        "missing_params": missing,
        "payload": {
            "flyerId": int(flyer_id) if _is_int(flyer_id) else None,
            "campaignId": (
                int(campaign_id) if _is_int(campaign_id) else None
            ),
            "campaignName": campaign_name,
            "scanId": (
                int(params["scanId"]) if _is_int(params.get("scanId")) else None
            ),
        },
        "redirect_url": redirect_url if is_http_url(redirect_url) else "/",
        "update_location_url": f"{settings.api_prefix}/update-location",
        "timeout_ms": GEOLOCATION_TIMEOUT_MS,
        "max_attempts": GEOLOCATION_MAX_ATTEMPTS,
    }
    return templates.TemplateResponse(request, "location_prompt.html", context)
