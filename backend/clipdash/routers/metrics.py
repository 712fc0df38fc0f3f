"""Dashboard metrics endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clipdash.database import get_db
from clipdash.models.user import User
from clipdash.middleware.auth import get_current_user, get_current_client_or_admin
from clipdash.services.metrics_service import MetricsService

router = APIRouter()


@router.get("/social")
def get_social_metrics(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Follower, view and engagement totals over the user's active accounts.

    Admins get the totals over every tracked account.
    """
    return MetricsService.get_social_metrics(db, current_user)


@router.get("/distribution")
def get_platform_distribution(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    summary = MetricsService.get_social_metrics(db, current_user)
    return MetricsService.get_platform_distribution(summary)


@router.get("/client")
def get_client_metrics(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_client_or_admin)
):
    """Totals over the approved creators of the campaigns the client owns."""
    return MetricsService.get_client_metrics(db, current_user)
