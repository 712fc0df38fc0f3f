"""Campaign payments per period and wallet crediting."""

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from datetime import date, datetime, time, timedelta
from typing import Dict, Optional, Tuple
from uuid import UUID
import calendar
import logging

from clipdash.models.user import User
from clipdash.models.campaign_models import Campaign, CampaignVideo
from clipdash.models.wallet_models import CampaignPaymentRecord, UserWallet, WalletTransaction
from clipdash.analytics.earnings_calculator import EarningsCalculator
from clipdash.services.campaign_service import aggregate_by_creator, prize_map

logger = logging.getLogger(__name__)

PERIOD_TYPES = ("daily", "monthly")


def period_bounds(period_type: str, period_date: date) -> Tuple[datetime, datetime]:
    """
    Inclusive datetime range covered by a payment period.

    Raises:
        ValueError: For an unknown period type
    """
    if period_type == "daily":
        start_day = end_day = period_date
    elif period_type == "monthly":
        start_day = period_date.replace(day=1)
        last_day = calendar.monthrange(period_date.year, period_date.month)[1]
        end_day = period_date.replace(day=last_day)
    else:
        raise ValueError(f"Invalid period type: {period_type}")

    return datetime.combine(start_day, time.min), datetime.combine(end_day, time.max)


def period_key(period_type: str, period_date: date) -> date:
    """Date stored on payment records; monthly periods use the first of the month."""
    return period_date.replace(day=1) if period_type == "monthly" else period_date


def get_or_create_wallet(db: Session, user_id: UUID) -> UserWallet:
    wallet = db.query(UserWallet).filter(UserWallet.user_id == user_id).first()
    if wallet is None:
        wallet = UserWallet(
            user_id=user_id,
            available_balance=0,
            pending_balance=0,
            total_earned=0,
            total_withdrawn=0
        )
        db.add(wallet)
        db.flush()
    return wallet


class PaymentService:
    """Service for campaign payment operations."""

    @staticmethod
    def get_campaign_payments(
        db: Session,
        campaign_id: UUID,
        period_type: str,
        period_date: date
    ) -> Tuple[Optional[Dict], Optional[str]]:
        """
        What each creator is owed for a campaign period.

        Submissions inside the period are grouped per creator and ranked by
        views, then the campaign's earnings formula is applied. Existing
        payment records provide the payment status.

        Returns:
            Tuple of ({clippers, prizes, campaign, total_pending, total_paid}, error_message)
        """
        if period_type not in PERIOD_TYPES:
            return None, f"Invalid period type: {period_type}"

        campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()
        if not campaign:
            return None, "Campaign not found"

        start, end = period_bounds(period_type, period_date)
        videos = db.query(CampaignVideo).filter(
            CampaignVideo.campaign_id == campaign_id,
            CampaignVideo.submitted_at >= start,
            CampaignVideo.submitted_at <= end
        ).all()

        prizes = prize_map(db, campaign_id)
        ranking = aggregate_by_creator(videos)

        records = {
            record.user_id: record
            for record in db.query(CampaignPaymentRecord).filter(
                CampaignPaymentRecord.campaign_id == campaign_id,
                CampaignPaymentRecord.period_type == period_type,
                CampaignPaymentRecord.period_date == period_key(period_type, period_date)
            ).all()
        }

        user_ids = [entry["user_id"] for entry in ranking]
        users = {user.id: user for user in db.query(User).filter(User.id.in_(user_ids)).all()} if user_ids else {}

        clippers = []
        total_pending = 0.0
        total_paid = 0.0

        for entry in ranking:
            user = users.get(entry["user_id"])
            record = records.get(entry["user_id"])
            amount = EarningsCalculator.calculate_amount(
                campaign,
                entry["total_views"],
                entry["total_videos"],
                entry["position"],
                prizes
            )
            payment_status = record.status if record else "not_created"

            if payment_status == "paid":
                total_paid += float(record.amount or 0)
            else:
                total_pending += amount

            clippers.append({
                "user_id": entry["user_id"],
                "username": user.username if user else None,
                "avatar_url": user.avatar_url if user else None,
                "total_views": entry["total_views"],
                "total_videos": entry["total_videos"],
                "position": entry["position"],
                "calculated_amount": amount,
                "payment_status": payment_status,
                "payment_record_id": record.id if record else None,
            })

        return {
            "clippers": clippers,
            "prizes": [{"position": position, "prize_amount": amount} for position, amount in sorted(prizes.items())],
            "campaign": {
                "id": campaign.id,
                "name": campaign.name,
                "campaign_type": campaign.campaign_type,
                "payment_rate": campaign.payment_rate,
                "min_views": campaign.min_views,
                "max_paid_views": campaign.max_paid_views,
            },
            "total_pending": round(total_pending, 2),
            "total_paid": round(total_paid, 2),
        }, None

    @staticmethod
    def process_payment(
        db: Session,
        campaign_id: UUID,
        user_id: UUID,
        period_type: str,
        period_date: date,
        amount: float,
        admin: User,
        notes: Optional[str] = None,
        views_count: int = 0,
        videos_count: int = 0,
        position: Optional[int] = None
    ) -> Tuple[Optional[CampaignPaymentRecord], Optional[str]]:
        """
        Mark a creator's period as paid and credit their wallet.

        The record, the wallet update and the earning transaction are
        committed together. A period that is already paid is refused.

        Returns:
            Tuple of (payment_record, error_message)
        """
        if period_type not in PERIOD_TYPES:
            return None, f"Invalid period type: {period_type}"

        amount = round(float(amount), 2) if amount is not None else 0
        if amount <= 0:
            return None, "Amount must be greater than zero"

        campaign = db.query(Campaign).filter(Campaign.id == campaign_id).first()
        if not campaign:
            return None, "Campaign not found"

        key_date = period_key(period_type, period_date)

        try:
            record = db.query(CampaignPaymentRecord).filter(
                CampaignPaymentRecord.campaign_id == campaign_id,
                CampaignPaymentRecord.user_id == user_id,
                CampaignPaymentRecord.period_type == period_type,
                CampaignPaymentRecord.period_date == key_date
            ).first()

            if record and record.status == "paid":
                return None, "Payment already processed for this period"

            now = datetime.utcnow()
            if record is None:
                record = CampaignPaymentRecord(
                    campaign_id=campaign_id,
                    user_id=user_id,
                    period_type=period_type,
                    period_date=key_date
                )
                db.add(record)

            record.amount = amount
            record.views_count = views_count
            record.videos_count = videos_count
            record.position = position
            record.status = "paid"
            record.paid_at = now
            record.paid_by = admin.id
            record.notes = notes
            db.flush()

            wallet = get_or_create_wallet(db, user_id)
            wallet.available_balance = round(float(wallet.available_balance or 0) + amount, 2)
            wallet.total_earned = round(float(wallet.total_earned or 0) + amount, 2)

            db.add(WalletTransaction(
                user_id=user_id,
                type="earning",
                amount=amount,
                description=f"Campaign earnings: {campaign.name} ({period_type} {key_date.isoformat()})",
                reference_id=record.id
            ))

            db.commit()
            db.refresh(record)

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to process payment for user {user_id}: {e}")
            return None, "Failed to process payment"

        logger.info(f"Processed payment of {amount} for user {user_id} in campaign {campaign.name}")
        return record, None

    @staticmethod
    def process_all_payments(
        db: Session,
        campaign_id: UUID,
        period_type: str,
        period_date: date,
        admin: User
    ) -> Tuple[Optional[Dict], Optional[str]]:
        """
        Pay every creator of a period that is not paid yet and is owed something.

        Returns:
            Tuple of ({processed, failed, total_amount}, error_message)
        """
        payments, error = PaymentService.get_campaign_payments(db, campaign_id, period_type, period_date)
        if error:
            return None, error

        processed = 0
        failed = 0
        total_amount = 0.0

        for clipper in payments["clippers"]:
            if clipper["payment_status"] == "paid" or clipper["calculated_amount"] <= 0:
                continue

            record, error = PaymentService.process_payment(
                db,
                campaign_id,
                clipper["user_id"],
                period_type,
                period_date,
                clipper["calculated_amount"],
                admin,
                views_count=clipper["total_views"],
                videos_count=clipper["total_videos"],
                position=clipper["position"]
            )
            if error:
                failed += 1
                logger.warning(f"Payment failed for user {clipper['user_id']}: {error}")
                continue

            processed += 1
            total_amount += clipper["calculated_amount"]

        return {
            "processed": processed,
            "failed": failed,
            "total_amount": round(total_amount, 2),
        }, None


def previous_period(period_type: str, today: Optional[date] = None) -> date:
    """The most recent closed period: yesterday, or last month."""
    today = today or datetime.utcnow().date()
    if period_type == "monthly":
        return (today.replace(day=1) - timedelta(days=1)).replace(day=1)
    return today - timedelta(days=1)
