"""Authentication dependencies for protected routes."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from uuid import UUID

from clipdash.database import get_db
from clipdash.models.user import User
from clipdash.utils.security import decode_access_token

# HTTP Bearer token scheme
security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Dependency to get the current authenticated user.

    The token's subject is the profile id. Profiles are created by the auth
    provider on sign-up; a token whose profile is missing or inactive is
    refused.

    Raises:
        HTTPException: If authentication fails
    """
    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise _unauthorized("Invalid authentication credentials")

    try:
        user_id = UUID(str(payload["sub"]))
    except ValueError:
        raise _unauthorized("Invalid authentication credentials")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise _unauthorized("User profile not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )

    return user


async def get_current_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Dependency to get the current admin.

    Raises:
        HTTPException: If user is not an admin
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user


async def get_current_client_or_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """Dependency for campaign client dashboards."""
    if not (current_user.is_client or current_user.is_admin):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Client access required"
        )
    return current_user
