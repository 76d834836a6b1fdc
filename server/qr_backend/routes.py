"""
HTTP routes for the campaign API.
"""

from __future__ import annotations

import json
import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from starlette.concurrency import run_in_threadpool

from flyer_pipeline.pdf_utils import PdfStampError, QrBounds, check_bounds, open_pdf
from flyer_pipeline.preview import build_preview
from qr_backend import analytics
from qr_backend.auth import (
    MIN_PASSWORD_LENGTH,
    create_session_token,
    get_current_user,
    hash_password,
    verify_password,
)
from qr_backend.config import Settings, get_settings
from qr_backend.db import CampaignRecord, DbClient, FlyerRecord, UserRecord
from qr_backend.dependencies import get_db_client, get_storage_client, get_token_codec
from qr_backend.flyers import FlyerBatchRequest, generate_campaign
from qr_backend.scans import attach_location
from qr_backend.schemas import (
    AnalyticsResponse,
    CampaignDetailResponse,
    CampaignListResponse,
    CredentialsRequest,
    PdfPreviewResponse,
    ProcessPdfResponse,
    SessionResponse,
    SignedUrlRequest,
    SignedUrlResponse,
    SuccessResponse,
    UpdateLocationRequest,
    UpdateRedirectUrlRequest,
    UpdateUrlRequest,
)
from qr_backend.storage import StorageClient
from qr_backend.tracking import TrackingTokenCodec, is_http_url, validate_campaign_name

logger = logging.getLogger(__name__)

router = APIRouter()


def _owned_campaign(db: DbClient, campaign_id: int, user: UserRecord) -> CampaignRecord:
    campaign = db.get_campaign(campaign_id)
    # Other users' campaigns are reported as missing.
    if campaign is None or campaign.owner != user.id:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return campaign


def _parse_bounds(raw: str) -> QrBounds:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise PdfStampError("qrBounds must be a JSON object") from exc
    if not isinstance(payload, dict):
        raise PdfStampError("qrBounds must be a JSON object")
    return QrBounds.from_mapping(payload)


@router.post("/auth/signup", response_model=SessionResponse, status_code=201)
def signup(
    payload: CredentialsRequest,
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_settings),
):
    if not payload.email or not payload.password:
        raise HTTPException(status_code=400, detail="Email and password are required")
    if "@" not in payload.email:
        raise HTTPException(status_code=400, detail="Invalid email address")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        )
    if db.get_user_by_email(payload.email):
        raise HTTPException(status_code=400, detail="Email is already registered")

    user = db.create_user(payload.email, hash_password(payload.password))
    logger.info("Created user %s", user.id)
    return SessionResponse(
        access_token=create_session_token(user.id, settings), user=user.as_dict()
    )


@router.post("/auth/signin", response_model=SessionResponse)
def signin(
    payload: CredentialsRequest,
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_settings),
):
    if not payload.email or not payload.password:
        raise HTTPException(status_code=400, detail="Email and password are required")
    user = db.get_user_by_email(payload.email)
    if user is None or not verify_password(user.password_hash, payload.password):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return SessionResponse(
        access_token=create_session_token(user.id, settings), user=user.as_dict()
    )


@router.post("/process-pdf", response_model=ProcessPdfResponse)
async def process_pdf(
    file: Optional[UploadFile] = File(None),
    base_url: Optional[str] = Form(None, alias="baseUrl"),
    target_url: Optional[str] = Form(None, alias="targetUrl"),
    campaign_name: Optional[str] = Form(None, alias="campaignName"),
    flyer_count: Optional[str] = Form(None, alias="flyerCount"),
    qr_bounds: Optional[str] = Form(None, alias="qrBounds"),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
    storage: StorageClient = Depends(get_storage_client),
    settings: Settings = Depends(get_settings),
    codec: TrackingTokenCodec = Depends(get_token_codec),
):
    """
    Create a campaign and stamp a tracking QR code onto every flyer copy.
    """
    if not all([file, base_url, target_url, campaign_name, flyer_count, qr_bounds]):
        raise HTTPException(status_code=400, detail="Missing required fields")

    name_error = validate_campaign_name(campaign_name)
    if name_error:
        raise HTTPException(status_code=400, detail=name_error)
    if not is_http_url(base_url) or not is_http_url(target_url):
        raise HTTPException(
            status_code=400, detail="baseUrl and targetUrl must be http(s) URLs"
        )
    try:
        count = int(flyer_count)
    except ValueError:
        raise HTTPException(status_code=400, detail="flyerCount must be an integer")
    if not 1 <= count <= settings.max_flyers_per_campaign:
        raise HTTPException(
            status_code=400,
            detail=f"flyerCount must be between 1 and {settings.max_flyers_per_campaign}",
        )

    pdf_bytes = await file.read()
    try:
        bounds = _parse_bounds(qr_bounds)
        check_bounds(open_pdf(pdf_bytes), bounds)
    except PdfStampError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    if db.count_campaigns(user.id) >= settings.max_campaigns_per_user:
        raise HTTPException(
            status_code=400,
            detail=f"Campaign limit reached ({settings.max_campaigns_per_user})",
        )
    if db.get_campaign_by_name(campaign_name):
        raise HTTPException(status_code=400, detail="Campaign name is already taken")

    request = FlyerBatchRequest(
        owner=user.id,
        campaign_name=campaign_name,
        target_url=target_url,
        base_url=base_url,
        flyer_count=count,
        bounds=bounds,
        pdf_bytes=pdf_bytes,
    )
    try:
        result = await run_in_threadpool(
            generate_campaign,
            request,
            db=db,
            storage=storage,
            settings=settings,
            codec=codec,
        )
    except PdfStampError as exc:
        logger.warning("Flyer generation rejected for %s: %s", campaign_name, exc)
        raise HTTPException(status_code=400, detail=str(exc))

    return ProcessPdfResponse(
        campaign=result.campaign.as_dict(),
        flyers=[flyer.as_dict() for flyer in result.flyers],
        merged_pdf_url=result.merged_pdf_url,
        merged_pdf_key=result.merged_pdf_key,
    )


@router.post("/preview-pdf", response_model=PdfPreviewResponse)
async def preview_pdf(
    file: Optional[UploadFile] = File(None),
    user: UserRecord = Depends(get_current_user),
):
    if file is None:
        raise HTTPException(status_code=400, detail="Missing required fields")
    pdf_bytes = await file.read()
    try:
        preview = await run_in_threadpool(build_preview, pdf_bytes)
    except PdfStampError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return PdfPreviewResponse(**preview.as_dict())


@router.get("/campaigns", response_model=CampaignListResponse)
def list_campaigns(
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_settings),
):
    campaigns = db.list_campaigns(user.id)
    remaining = max(settings.max_campaigns_per_user - len(campaigns), 0)
    return CampaignListResponse(
        campaigns=[c.as_dict() for c in campaigns], remaining=remaining
    )


@router.get("/campaigns/{campaign_id}", response_model=CampaignDetailResponse)
def get_campaign(
    campaign_id: int,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    campaign = _owned_campaign(db, campaign_id, user)
    return CampaignDetailResponse(
        campaign=campaign.as_dict(),
        flyers=[f.as_dict() for f in db.list_flyers(campaign.id)],
        scan_data=[s.as_dict() for s in db.list_scans(campaign.id)],
    )


@router.get("/campaigns/{campaign_id}/analytics", response_model=AnalyticsResponse)
def get_campaign_analytics(
    campaign_id: int,
    time_range: Literal["24h", "7d", "30d", "all"] = Query("all", alias="range"),
    flyer: Optional[list[int]] = Query(None),
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    campaign = _owned_campaign(db, campaign_id, user)
    report = analytics.campaign_analytics(
        db.list_flyers(campaign.id),
        db.list_scans(campaign.id),
        time_range=time_range,
        flyer_ids=flyer,
    )
    return AnalyticsResponse(**report)


@router.post("/campaigns/{campaign_id}/update-url", response_model=SuccessResponse)
def update_campaign_url(
    campaign_id: int,
    payload: UpdateUrlRequest,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    if not payload.url:
        raise HTTPException(status_code=400, detail="URL is required")
    if not is_http_url(payload.url):
        raise HTTPException(status_code=400, detail="URL must be an http(s) URL")
    campaign = _owned_campaign(db, campaign_id, user)

    db.update_campaign(campaign.id, url=payload.url)
    updated = db.set_flyers_redirect_url(campaign.id, payload.url)
    logger.info(
        "[campaign %s] Redirect URL changed; %d flyers updated", campaign.id, updated
    )
    return SuccessResponse()


@router.post("/update-redirect-url", response_model=SuccessResponse)
def update_redirect_url(
    payload: UpdateRedirectUrlRequest,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
):
    if payload.flyer_id is None or not payload.new_url:
        raise HTTPException(status_code=400, detail="Missing required fields")
    if not is_http_url(payload.new_url):
        raise HTTPException(status_code=400, detail="newUrl must be an http(s) URL")

    flyer = db.get_flyer(payload.flyer_id)
    campaign = db.get_campaign(flyer.campaign) if flyer else None
    if campaign is None or campaign.owner != user.id:
        raise HTTPException(status_code=404, detail="Failed to find flyer")
    db.update_flyer(flyer.id, redirect_url=payload.new_url)
    return SuccessResponse()


def _resolve_location_flyer(
    db: DbClient, payload: UpdateLocationRequest
) -> Optional[FlyerRecord]:
    if payload.campaign_name:
        # Path-style URLs carry the flyer's number within the campaign.
        return db.get_flyer_by_number(payload.campaign_name, payload.flyer_id)
    flyer = db.get_flyer(payload.flyer_id)
    if flyer is None or flyer.campaign != payload.campaign_id:
        return None
    return flyer


@router.post("/update-location", response_model=SuccessResponse)
def update_location(
    payload: UpdateLocationRequest,
    db: DbClient = Depends(get_db_client),
):
    """
    Called by the location prompt page, with coordinates or with nulls when
    the visitor skipped the prompt.
    """
    has_campaign = payload.campaign_id is not None or bool(payload.campaign_name)
    coords_sent = {"lat", "long"} <= payload.model_fields_set
    if payload.flyer_id is None or not has_campaign or not coords_sent:
        raise HTTPException(status_code=400, detail="Missing required fields")
    if (payload.lat is None) != (payload.long is None):
        raise HTTPException(
            status_code=400, detail="lat and long must both be set or both be null"
        )
    if payload.lat is not None and not (
        -90 <= payload.lat <= 90 and -180 <= payload.long <= 180
    ):
        raise HTTPException(status_code=400, detail="Coordinates out of range")

    flyer = _resolve_location_flyer(db, payload)
    if flyer is None:
        raise HTTPException(status_code=404, detail="Flyer not found")

    if payload.lat is None:
        logger.info("Location skipped for flyer %s", flyer.id)
        return SuccessResponse()

    attach_location(db, flyer, payload.lat, payload.long, scan_id=payload.scan_id)
    logger.info("Stored location for flyer %s", flyer.id)
    return SuccessResponse()


@router.post("/get-signed-url", response_model=SignedUrlResponse)
def get_signed_url(
    payload: SignedUrlRequest,
    user: UserRecord = Depends(get_current_user),
    db: DbClient = Depends(get_db_client),
    storage: StorageClient = Depends(get_storage_client),
    settings: Settings = Depends(get_settings),
):
    if not payload.s3_key:
        raise HTTPException(status_code=400, detail="Missing s3Key")
    campaign = db.find_campaign_for_key(payload.s3_key)
    if campaign is None or campaign.owner != user.id:
        raise HTTPException(status_code=404, detail="File not found")
    try:
        url = storage.presign_get(
            payload.s3_key, expires_in=settings.signed_url_expires_in
        )
    except FileNotFoundError:
        logger.warning("Signed URL requested for missing object %s", payload.s3_key)
        raise HTTPException(status_code=404, detail="File not found")
    return SignedUrlResponse(signed_url=url)
