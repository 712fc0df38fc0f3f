"""Campaign payment, wallet and payout models."""

from sqlalchemy import (
    Column, String, Integer, Text, DateTime, Date, ForeignKey, BigInteger,
    Numeric, UniqueConstraint, Uuid
)
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from clipdash.database import Base


PAYOUT_STATUSES = ("pending", "approved", "paid", "rejected")
TRANSACTION_TYPES = ("earning", "withdrawal", "refund")


class CampaignPaymentRecord(Base):
    """Earnings of one creator in one campaign period."""
    __tablename__ = "campaign_payment_records"
    __table_args__ = (
        UniqueConstraint(
            "campaign_id", "user_id", "period_type", "period_date",
            name="uq_campaign_payment_records_period"
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    campaign_id = Column(Uuid, ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    period_type = Column(String(10), nullable=False)  # daily or monthly
    period_date = Column(Date, nullable=False)

    amount = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    views_count = Column(BigInteger, default=0)
    videos_count = Column(Integer, default=0)
    position = Column(Integer)

    status = Column(String(20), default="pending", nullable=False)
    paid_at = Column(DateTime)
    paid_by = Column(Uuid, ForeignKey("profiles.id", ondelete="SET NULL"))
    notes = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<CampaignPaymentRecord(user_id={self.user_id}, amount={self.amount}, status='{self.status}')>"


class UserWallet(Base):
    """Balance a creator accumulates from campaign earnings."""
    __tablename__ = "user_wallets"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)

    available_balance = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    pending_balance = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    total_earned = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    total_withdrawn = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<UserWallet(user_id={self.user_id}, available={self.available_balance})>"


class WalletTransaction(Base):
    """Ledger entry for every wallet balance movement."""
    __tablename__ = "wallet_transactions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(20), nullable=False)
    amount = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    description = Column(Text)
    reference_id = Column(Uuid)  # Payment record or payout request

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<WalletTransaction(type='{self.type}', amount={self.amount})>"


class PayoutRequest(Base):
    """Withdrawal requested by a creator, settled by an admin."""
    __tablename__ = "payout_requests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    status = Column(String(20), default="pending", nullable=False, index=True)

    pix_key = Column(String(255), nullable=False)
    pix_type = Column(String(20), nullable=False)
    rejection_reason = Column(Text)

    requested_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    processed_at = Column(DateTime)
    processed_by = Column(Uuid, ForeignKey("profiles.id", ondelete="SET NULL"))
    paid_at = Column(DateTime)

    # Relationships
    user = relationship("User", foreign_keys=[user_id])

    def __repr__(self):
        return f"<PayoutRequest(amount={self.amount}, status='{self.status}')>"
