"""Pydantic schemas for campaign payments, wallets and payouts."""

from pydantic import BaseModel, Field, validator
from typing import List, Optional
from datetime import date, datetime
from uuid import UUID


# ============================================
# Campaign Payment Schemas
# ============================================

class ClipperPayment(BaseModel):
    user_id: UUID
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    total_views: int
    total_videos: int
    position: int
    calculated_amount: float
    payment_status: str
    payment_record_id: Optional[UUID] = None


class PaymentPrize(BaseModel):
    position: int
    prize_amount: float


class PaymentCampaign(BaseModel):
    id: UUID
    name: str
    campaign_type: str
    payment_rate: Optional[float] = None
    min_views: Optional[int] = None
    max_paid_views: Optional[int] = None


class CampaignPaymentsResponse(BaseModel):
    clippers: List[ClipperPayment]
    prizes: List[PaymentPrize]
    campaign: PaymentCampaign
    total_pending: float
    total_paid: float


class ProcessPaymentRequest(BaseModel):
    campaign_id: UUID
    user_id: UUID
    period_type: str = Field(..., pattern="^(daily|monthly)$")
    period_date: date
    amount: float = Field(..., gt=0)
    notes: Optional[str] = None
    views_count: int = Field(0, ge=0)
    videos_count: int = Field(0, ge=0)
    position: Optional[int] = Field(None, ge=1)


class ProcessAllPaymentsRequest(BaseModel):
    campaign_id: UUID
    period_type: str = Field(..., pattern="^(daily|monthly)$")
    period_date: date


class ProcessAllPaymentsResponse(BaseModel):
    processed: int
    failed: int
    total_amount: float


class PaymentRecordResponse(BaseModel):
    id: UUID
    campaign_id: UUID
    user_id: UUID
    period_type: str
    period_date: date
    amount: float
    views_count: Optional[int] = 0
    videos_count: Optional[int] = 0
    position: Optional[int] = None
    status: str
    paid_at: Optional[datetime] = None
    paid_by: Optional[UUID] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


# ============================================
# Wallet Schemas
# ============================================

class WalletResponse(BaseModel):
    user_id: UUID
    available_balance: float
    pending_balance: float
    total_earned: float
    total_withdrawn: float

    class Config:
        from_attributes = True


class TransactionResponse(BaseModel):
    id: UUID
    type: str
    amount: float
    description: Optional[str] = None
    reference_id: Optional[UUID] = None
    created_at: datetime

    class Config:
        from_attributes = True


# ============================================
# Payout Schemas
# ============================================

class PayoutRequestCreate(BaseModel):
    amount: float = Field(..., gt=0)
    pix_key: str = Field(..., min_length=1, max_length=255)
    pix_type: str = Field(..., pattern="^(cpf|cnpj|email|phone|random)$")

    @validator('amount')
    def amount_in_cents(cls, v):
        return round(v, 2)


class PayoutReject(BaseModel):
    reason: str = Field(..., min_length=1, max_length=1000)


class PayoutResponse(BaseModel):
    id: UUID
    user_id: UUID
    amount: float
    status: str
    pix_key: str
    pix_type: str
    rejection_reason: Optional[str] = None
    requested_at: datetime
    processed_at: Optional[datetime] = None
    processed_by: Optional[UUID] = None
    paid_at: Optional[datetime] = None

    class Config:
        from_attributes = True
