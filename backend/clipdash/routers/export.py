"""Export API endpoints for generating CSV reports."""

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from datetime import date, datetime
from typing import Optional
from uuid import UUID
import csv
import io

from clipdash.database import get_db
from clipdash.models.user import User
from clipdash.middleware.auth import get_current_user, get_current_admin
from clipdash.routers.common import raise_for_error
from clipdash.services.campaign_service import CampaignService
from clipdash.services.payment_service import PaymentService, previous_period

router = APIRouter()


def csv_response(output: io.StringIO, prefix: str) -> StreamingResponse:
    output.seek(0)
    filename = f"{prefix}_{datetime.utcnow().strftime('%Y%m%d_%H%M%S')}.csv"

    return StreamingResponse(
        io.BytesIO(output.getvalue().encode('utf-8')),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/campaigns/{campaign_id}/ranking.csv")
def export_campaign_ranking_csv(
    campaign_id: UUID,
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Export the creator ranking of a campaign to CSV format.

    One row per creator, ordered by views.
    """
    if not CampaignService.get_campaign(db, campaign_id):
        raise HTTPException(status_code=404, detail="Campaign not found")

    ranking = CampaignService.get_ranking(db, campaign_id, limit)

    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow([
        'Position', 'User ID', 'Username', 'Videos', 'Views', 'Likes', 'Estimated Earnings'
    ])

    for entry in ranking:
        writer.writerow([
            entry["position"],
            entry["user_id"],
            entry["username"] or 'Unknown',
            entry["total_videos"],
            entry["total_views"],
            entry["total_likes"],
            f'{entry["estimated_earnings"]:.2f}'
        ])

    return csv_response(output, f"campaign_ranking_{campaign_id}")


@router.get("/campaigns/{campaign_id}/payments.csv")
def export_campaign_payments_csv(
    campaign_id: UUID,
    period_type: str = Query(default="daily", pattern="^(daily|monthly)$"),
    period_date: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """Export what each creator is owed for one campaign period to CSV format."""
    period_date = period_date or previous_period(period_type)
    payments, error = PaymentService.get_campaign_payments(db, campaign_id, period_type, period_date)
    raise_for_error(error)

    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow([
        'Position', 'User ID', 'Username', 'Videos', 'Views', 'Amount', 'Payment Status',
        'Period Type', 'Period Date'
    ])

    for clipper in payments["clippers"]:
        writer.writerow([
            clipper["position"],
            clipper["user_id"],
            clipper["username"] or 'Unknown',
            clipper["total_videos"],
            clipper["total_views"],
            f'{clipper["calculated_amount"]:.2f}',
            clipper["payment_status"],
            period_type,
            period_date.isoformat()
        ])

    return csv_response(output, f"campaign_payments_{campaign_id}")
