"""
Pydantic schemas for the campaign API.

Request bodies keep the camelCase keys the browser client sends; most fields
are optional here so handlers can answer with a single "Missing required
fields" message.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CredentialsRequest(BaseModel):
    email: Optional[str] = Field(default=None, max_length=320)
    password: Optional[str] = Field(default=None, max_length=256)


class SessionResponse(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    user: dict


class SuccessResponse(BaseModel):
    success: bool = True


class UpdateUrlRequest(BaseModel):
    url: Optional[str] = None


class UpdateRedirectUrlRequest(CamelModel):
    flyer_id: Optional[int] = Field(default=None, alias="flyerId")
    new_url: Optional[str] = Field(default=None, alias="newUrl")


class UpdateLocationRequest(CamelModel):
    flyer_id: Optional[int] = Field(default=None, alias="flyerId")
    campaign_id: Optional[int] = Field(default=None, alias="campaignId")
    campaign_name: Optional[str] = Field(default=None, alias="campaignName")
    scan_id: Optional[int] = Field(default=None, alias="scanId")
    lat: Optional[float] = None
    long: Optional[float] = None


class SignedUrlRequest(CamelModel):
    s3_key: Optional[str] = Field(default=None, alias="s3Key")


class SignedUrlResponse(CamelModel):
    signed_url: str = Field(alias="signedUrl")


class ProcessPdfResponse(CamelModel):
    campaign: dict
    flyers: list[dict]
    merged_pdf_url: str = Field(alias="mergedPdfUrl")
    merged_pdf_key: str = Field(alias="mergedPdfKey")


class CampaignListResponse(BaseModel):
    campaigns: list[dict]
    remaining: int


class CampaignDetailResponse(BaseModel):
    campaign: dict
    flyers: list[dict]
    scan_data: list[dict]


class PdfPreviewResponse(BaseModel):
    page_count: int
    width: float
    height: float
    scale: float
    image: str


class AnalyticsResponse(BaseModel):
    range: str
    total_scans: int
    scans_by_day: list[dict]
    scans_by_hour: list[dict]
    scans_per_flyer: list[dict]
    locations: list[dict]
    scan_locations: list[dict]
    map_center: Optional[dict] = None
