"""
Account sessions: password hashing and bearer tokens.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from qr_backend.config import Settings, get_settings
from qr_backend.db import DbClient, UserRecord
from qr_backend.dependencies import get_db_client

logger = logging.getLogger(__name__)

SESSION_SALT = "qr-campaign-session-v1"
MIN_PASSWORD_LENGTH = 8

_bearer = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


def _serializer(settings: Settings) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(settings.session_secret, salt=SESSION_SALT)


def create_session_token(user_id: str, settings: Settings) -> str:
    return _serializer(settings).dumps({"uid": user_id})


def read_session_token(token: str, settings: Settings) -> Optional[str]:
    try:
        payload = _serializer(settings).loads(token, max_age=settings.session_max_age)
    except SignatureExpired:
        logger.info("Rejected expired session token")
        return None
    except BadSignature:
        return None
    return payload.get("uid") if isinstance(payload, dict) else None


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    db: DbClient = Depends(get_db_client),
    settings: Settings = Depends(get_settings),
) -> UserRecord:
    """Resolve the caller from the bearer token, or fail with 401."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Not authenticated")
    user_id = read_session_token(credentials.credentials, settings)
    user = db.get_user(user_id) if user_id else None
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user
