"""Campaign payment endpoints for admins."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from uuid import UUID

from clipdash.database import get_db
from clipdash.models.user import User
from clipdash.models.wallet_schemas import (
    CampaignPaymentsResponse,
    ProcessPaymentRequest,
    ProcessAllPaymentsRequest,
    ProcessAllPaymentsResponse,
    PaymentRecordResponse
)
from clipdash.middleware.auth import get_current_admin
from clipdash.routers.common import raise_for_error
from clipdash.services.payment_service import PaymentService, previous_period

router = APIRouter()


@router.get("/campaigns/{campaign_id}", response_model=CampaignPaymentsResponse)
def get_campaign_payments(
    campaign_id: UUID,
    period_type: str = Query(default="daily", pattern="^(daily|monthly)$"),
    period_date: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """
    Amount owed to each creator of a campaign for one period.

    Without period_date the most recent closed period is used: yesterday for
    daily payments, last month for monthly ones.
    """
    period_date = period_date or previous_period(period_type)
    payments, error = PaymentService.get_campaign_payments(db, campaign_id, period_type, period_date)
    raise_for_error(error)
    return payments


@router.post("/process", response_model=PaymentRecordResponse, status_code=201)
def process_payment(
    payment_data: ProcessPaymentRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    record, error = PaymentService.process_payment(
        db,
        payment_data.campaign_id,
        payment_data.user_id,
        payment_data.period_type,
        payment_data.period_date,
        payment_data.amount,
        current_user,
        notes=payment_data.notes,
        views_count=payment_data.views_count,
        videos_count=payment_data.videos_count,
        position=payment_data.position
    )
    raise_for_error(error)
    return record


@router.post("/process-all", response_model=ProcessAllPaymentsResponse)
def process_all_payments(
    payment_data: ProcessAllPaymentsRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """Pay every creator of the period that is owed something and not paid yet."""
    result, error = PaymentService.process_all_payments(
        db,
        payment_data.campaign_id,
        payment_data.period_type,
        payment_data.period_date,
        current_user
    )
    raise_for_error(error)
    return result
