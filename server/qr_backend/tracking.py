"""
Tracking URL construction and resolution.

Two URL shapes point at a flyer:

* ``<base>/r/<campaign_name>/<number>``, readable and stable;
* ``<base>/r/<token>``, where the token is a signed, URL-safe payload
  holding the campaign and flyer ids.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from itsdangerous import BadSignature, URLSafeSerializer

CAMPAIGN_NAME_PATTERN = re.compile(r"^[a-z0-9-]+$")
CAMPAIGN_NAME_MAX_LENGTH = 64
TOKEN_SALT = "flyer-tracking-v1"


def validate_campaign_name(name: Optional[str]) -> Optional[str]:
    """Return an error message for an unusable campaign name, else None."""
    if not name:
        return "Campaign name is required"
    if len(name) > CAMPAIGN_NAME_MAX_LENGTH:
        return f"Campaign name must be at most {CAMPAIGN_NAME_MAX_LENGTH} characters"
    if not CAMPAIGN_NAME_PATTERN.match(name):
        return (
            "Campaign name may only contain lowercase letters, digits and hyphens"
        )
    return None


def is_http_url(value: Optional[str]) -> bool:
    if not value:
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@dataclass(frozen=True)
class FlyerRef:
    campaign_id: int
    flyer_id: int


class TrackingTokenCodec:
    """Signs and verifies the opaque ids carried by token-style URLs."""

    def __init__(self, secret: str):
        self._serializer = URLSafeSerializer(secret, salt=TOKEN_SALT)

    def encode(self, campaign_id: int, flyer_id: int) -> str:
        return self._serializer.dumps({"c": campaign_id, "f": flyer_id})

    def decode(self, token: str) -> Optional[FlyerRef]:
        try:
            payload = self._serializer.loads(token)
        except BadSignature:
            return None
        if not isinstance(payload, dict):
            return None
        campaign_id, flyer_id = payload.get("c"), payload.get("f")
        if not isinstance(campaign_id, int) or not isinstance(flyer_id, int):
            return None
        return FlyerRef(campaign_id=campaign_id, flyer_id=flyer_id)


def build_tracking_url(
    base_url: str,
    *,
    style: str,
    campaign_id: int,
    campaign_name: str,
    flyer_id: int,
    number: int,
    codec: TrackingTokenCodec,
) -> str:
    base = base_url.rstrip("/")
    if style == "token":
        return f"{base}/r/{codec.encode(campaign_id, flyer_id)}"
    return f"{base}/r/{campaign_name}/{number}"
