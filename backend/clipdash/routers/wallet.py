"""Wallet and payout endpoints.

``router`` serves the signed-in creator; ``admin_router`` lets admins move
payout requests through their review.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from clipdash.database import get_db
from clipdash.models.user import User
from clipdash.models.wallet_schemas import (
    WalletResponse,
    TransactionResponse,
    PayoutRequestCreate,
    PayoutReject,
    PayoutResponse
)
from clipdash.middleware.auth import get_current_user, get_current_admin
from clipdash.routers.common import raise_for_error
from clipdash.services.payout_service import PayoutService

router = APIRouter()
admin_router = APIRouter()

STATUS_PATTERN = "^(pending|approved|paid|rejected)$"


# ============================================
# Creator Wallet
# ============================================

@router.get("", response_model=WalletResponse)
def get_wallet(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return PayoutService.get_wallet(db, current_user)


@router.get("/transactions", response_model=List[TransactionResponse])
def list_transactions(
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return PayoutService.list_transactions(db, current_user, limit)


@router.post("/payouts", response_model=PayoutResponse, status_code=201)
def request_payout(
    payout_data: PayoutRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Request a PIX withdrawal.

    The amount leaves the available balance and is held as pending until an
    admin pays or rejects the request.
    """
    payout, error = PayoutService.request_payout(
        db, current_user, payout_data.amount, payout_data.pix_key, payout_data.pix_type
    )
    raise_for_error(error)
    return payout


@router.get("/payouts", response_model=List[PayoutResponse])
def list_my_payouts(
    status: Optional[str] = Query(default=None, pattern=STATUS_PATTERN),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return PayoutService.list_payouts(db, current_user, status)


# ============================================
# Payout Review
# ============================================

@admin_router.get("", response_model=List[PayoutResponse])
def list_payouts(
    status: Optional[str] = Query(default=None, pattern=STATUS_PATTERN),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    return PayoutService.list_payouts(db, status=status)


@admin_router.post("/{request_id}/approve", response_model=PayoutResponse)
def approve_payout(
    request_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    payout, error = PayoutService.approve_payout(db, request_id, current_user)
    raise_for_error(error)
    return payout


@admin_router.post("/{request_id}/paid", response_model=PayoutResponse)
def mark_payout_paid(
    request_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """Record that an approved payout was transferred."""
    payout, error = PayoutService.mark_payout_paid(db, request_id, current_user)
    raise_for_error(error)
    return payout


@admin_router.post("/{request_id}/reject", response_model=PayoutResponse)
def reject_payout(
    request_id: UUID,
    reject_data: PayoutReject,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """Reject a pending or approved payout; the amount returns to the creator's balance."""
    payout, error = PayoutService.reject_payout(db, request_id, current_user, reject_data.reason)
    raise_for_error(error)
    return payout
