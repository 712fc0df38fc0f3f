"""Wallet balances and withdrawal (payout) requests."""

from sqlalchemy.orm import Session
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID
import logging

from clipdash.models.user import User
from clipdash.models.wallet_models import PayoutRequest, UserWallet, WalletTransaction
from clipdash.services.payment_service import get_or_create_wallet

logger = logging.getLogger(__name__)

PENDING = "pending"
APPROVED = "approved"
PAID = "paid"
REJECTED = "rejected"

ALLOWED_TRANSITIONS = {
    PENDING: (APPROVED, REJECTED),
    APPROVED: (PAID, REJECTED),
}

PIX_TYPES = ("cpf", "cnpj", "email", "phone", "random")


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, ())


class PayoutService:
    """Service for wallet and payout operations."""

    @staticmethod
    def get_wallet(db: Session, user: User) -> UserWallet:
        """Wallet of the user, created zeroed on first access."""
        wallet = db.query(UserWallet).filter(UserWallet.user_id == user.id).first()
        if wallet is None:
            wallet = get_or_create_wallet(db, user.id)
            db.commit()
            db.refresh(wallet)
        return wallet

    @staticmethod
    def list_transactions(db: Session, user: User, limit: int = 50) -> List[WalletTransaction]:
        return db.query(WalletTransaction).filter(
            WalletTransaction.user_id == user.id
        ).order_by(WalletTransaction.created_at.desc()).limit(limit).all()

    @staticmethod
    def request_payout(
        db: Session,
        user: User,
        amount: float,
        pix_key: str,
        pix_type: str
    ) -> Tuple[Optional[PayoutRequest], Optional[str]]:
        """
        Request a withdrawal of available balance.

        The amount is held in the pending balance until the request is paid
        or rejected.

        Returns:
            Tuple of (payout_request, error_message)
        """
        # Compared in cents; a sub-cent amount would be stored as zero
        amount = round(float(amount), 2) if amount is not None else 0
        if amount <= 0:
            return None, "Amount must be greater than zero"

        if not pix_key:
            return None, "PIX key is required"

        if pix_type not in PIX_TYPES:
            return None, f"Invalid PIX key type: {pix_type}"

        wallet = PayoutService.get_wallet(db, user)
        available = float(wallet.available_balance or 0)

        if amount > available:
            return None, "Insufficient balance"

        wallet.available_balance = round(available - amount, 2)
        wallet.pending_balance = round(float(wallet.pending_balance or 0) + amount, 2)

        payout = PayoutRequest(
            user_id=user.id,
            amount=amount,
            status=PENDING,
            pix_key=pix_key,
            pix_type=pix_type
        )
        db.add(payout)
        db.commit()
        db.refresh(payout)

        logger.info(f"Payout of {amount} requested by {user.email}")
        return payout, None

    @staticmethod
    def list_payouts(db: Session, user: Optional[User] = None, status: Optional[str] = None) -> List[PayoutRequest]:
        """Payout requests, newest first; only the user's own when a user is given."""
        query = db.query(PayoutRequest)
        if user is not None:
            query = query.filter(PayoutRequest.user_id == user.id)
        if status:
            query = query.filter(PayoutRequest.status == status)
        return query.order_by(PayoutRequest.requested_at.desc()).all()

    @staticmethod
    def _load(db: Session, request_id: UUID, target: str) -> Tuple[Optional[PayoutRequest], Optional[str]]:
        payout = db.query(PayoutRequest).filter(PayoutRequest.id == request_id).first()
        if not payout:
            return None, "Payout request not found"

        if not can_transition(payout.status, target):
            return None, f"Cannot change payout status from {payout.status} to {target}"

        return payout, None

    @staticmethod
    def approve_payout(db: Session, request_id: UUID, admin: User) -> Tuple[Optional[PayoutRequest], Optional[str]]:
        payout, error = PayoutService._load(db, request_id, APPROVED)
        if error:
            return None, error

        payout.status = APPROVED
        payout.processed_at = datetime.utcnow()
        payout.processed_by = admin.id
        db.commit()
        db.refresh(payout)

        return payout, None

    @staticmethod
    def mark_payout_paid(db: Session, request_id: UUID, admin: User) -> Tuple[Optional[PayoutRequest], Optional[str]]:
        """
        Settle an approved payout.

        The held amount leaves the pending balance, counts as withdrawn and is
        recorded as a withdrawal transaction.
        """
        payout, error = PayoutService._load(db, request_id, PAID)
        if error:
            return None, error

        amount = float(payout.amount)
        wallet = get_or_create_wallet(db, payout.user_id)
        wallet.pending_balance = round(float(wallet.pending_balance or 0) - amount, 2)
        wallet.total_withdrawn = round(float(wallet.total_withdrawn or 0) + amount, 2)

        payout.status = PAID
        payout.paid_at = datetime.utcnow()
        if payout.processed_by is None:
            payout.processed_by = admin.id

        db.add(WalletTransaction(
            user_id=payout.user_id,
            type="withdrawal",
            amount=amount,
            description=f"PIX withdrawal ({payout.pix_type})",
            reference_id=payout.id
        ))

        db.commit()
        db.refresh(payout)

        logger.info(f"Payout {payout.id} marked as paid")
        return payout, None

    @staticmethod
    def reject_payout(
        db: Session,
        request_id: UUID,
        admin: User,
        reason: str
    ) -> Tuple[Optional[PayoutRequest], Optional[str]]:
        """Reject a pending or approved payout and return the held amount to the available balance."""
        if not reason or not reason.strip():
            return None, "Rejection reason is required"

        payout, error = PayoutService._load(db, request_id, REJECTED)
        if error:
            return None, error

        amount = float(payout.amount)
        wallet = get_or_create_wallet(db, payout.user_id)
        wallet.pending_balance = round(float(wallet.pending_balance or 0) - amount, 2)
        wallet.available_balance = round(float(wallet.available_balance or 0) + amount, 2)

        payout.status = REJECTED
        payout.rejection_reason = reason.strip()
        payout.processed_at = datetime.utcnow()
        payout.processed_by = admin.id

        db.add(WalletTransaction(
            user_id=payout.user_id,
            type="refund",
            amount=amount,
            description=f"Payout rejected: {payout.rejection_reason}",
            reference_id=payout.id
        ))

        db.commit()
        db.refresh(payout)

        return payout, None
