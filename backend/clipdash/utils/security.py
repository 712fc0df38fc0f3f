"""Bearer token verification."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import logging

import jwt

from clipdash.config import settings

logger = logging.getLogger(__name__)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify a token issued by the auth provider.

    Args:
        token: Encoded JWT

    Returns:
        Claims, or None when the signature, audience or expiry is invalid
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired access token")
        return None
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected invalid access token: {e}")
        return None


def create_access_token(subject: str, email: Optional[str] = None, expires_in: timedelta = timedelta(hours=1)) -> str:
    """Sign a token shaped like the auth provider's, for service scripts and tests."""
    claims = {
        "sub": subject,
        "aud": settings.JWT_AUDIENCE,
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    if email:
        claims["email"] = email
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
