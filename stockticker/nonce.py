"""Request-forgery tokens: short-lived, action-scoped signed JWTs."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from stockticker.config import NONCE_ALGORITHM, NONCE_LIFETIME_MINUTES, NONCE_SECRET

logger = logging.getLogger(__name__)


def create_nonce(
    action: str,
    lifetime_minutes: int = NONCE_LIFETIME_MINUTES,
    secret: str = NONCE_SECRET,
) -> str:
    """Issue a signed token that is only valid for *action*."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=lifetime_minutes)
    payload = {"act": action, "exp": expire}
    return jwt.encode(payload, secret, algorithm=NONCE_ALGORITHM)


def verify_nonce(token: str | None, action: str, secret: str = NONCE_SECRET) -> bool:
    """Return True only for an unexpired token issued for *action*."""
    if not token:
        return False
    try:
        payload = jwt.decode(token, secret, algorithms=[NONCE_ALGORITHM])
    except JWTError as exc:
        logger.info("Rejected nonce for %s: %s", action, exc)
        return False
    return payload.get("act") == action
