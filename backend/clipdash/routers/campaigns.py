"""Campaign endpoints: management, participation, submissions and dashboards."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from clipdash.database import get_db
from clipdash.models.user import User
from clipdash.models.campaign_models import CampaignVideo
from clipdash.models.campaign_schemas import (
    CampaignCreate,
    CampaignUpdate,
    CampaignResponse,
    ParticipantResponse,
    VideoSubmit,
    CampaignVideoResponse,
    VideoHistoryResponse,
    PrizeItem,
    PrizesUpdate,
    CampaignSummary,
    RankingEntry,
    PlatformDistributionEntry,
    VideoMetricsSyncResponse,
    AggregatedMetricsResponse
)
from clipdash.middleware.auth import get_current_user, get_current_admin
from clipdash.routers.common import raise_for_error
from clipdash.services.approval_service import ApprovalService
from clipdash.services.campaign_service import CampaignService
from clipdash.services import video_metrics_service

router = APIRouter()


def load_campaign(db: Session, campaign_id: UUID):
    campaign = CampaignService.get_campaign(db, campaign_id)
    if not campaign:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return campaign


# ============================================
# Campaign CRUD Operations
# ============================================

@router.post("", response_model=CampaignResponse, status_code=201)
def create_campaign(
    campaign_data: CampaignCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    data = campaign_data.model_dump(exclude={"owner_ids"})
    campaign, error = CampaignService.create_campaign(db, current_user, data, campaign_data.owner_ids)
    raise_for_error(error)
    return campaign


@router.get("", response_model=List[CampaignResponse])
def list_campaigns(
    include_inactive: bool = Query(default=False),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Active campaigns; admins may include inactive ones."""
    active_only = not (include_inactive and current_user.is_admin)
    return CampaignService.list_campaigns(db, active_only=active_only)


@router.get("/{campaign_id}", response_model=CampaignResponse)
def get_campaign(
    campaign_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return load_campaign(db, campaign_id)


@router.put("/{campaign_id}", response_model=CampaignResponse)
def update_campaign(
    campaign_id: UUID,
    campaign_data: CampaignUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    campaign, error = CampaignService.update_campaign(db, campaign_id, campaign_data.model_dump(exclude_unset=True))
    raise_for_error(error)
    return campaign


@router.delete("/{campaign_id}", status_code=204)
def delete_campaign(
    campaign_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    raise_for_error(CampaignService.delete_campaign(db, campaign_id))
    return None


# ============================================
# Participation
# ============================================

@router.post("/{campaign_id}/participate", response_model=ParticipantResponse, status_code=201)
def request_participation(
    campaign_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Ask to join a campaign; an admin approves or rejects the request."""
    participant, error = CampaignService.request_participation(db, current_user, campaign_id)
    raise_for_error(error)
    return participant


@router.get("/{campaign_id}/participants", response_model=List[ParticipantResponse])
def list_participants(
    campaign_id: UUID,
    status: Optional[str] = Query(default=None, pattern="^(pending|approved|rejected)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    load_campaign(db, campaign_id)
    return CampaignService.list_participants(db, campaign_id, status)


@router.post("/participants/{participant_id}/approve", response_model=ParticipantResponse)
def approve_participant(
    participant_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    participant, error = ApprovalService.approve_participant(db, participant_id, current_user)
    raise_for_error(error)
    return participant


@router.post("/participants/{participant_id}/reject", response_model=ParticipantResponse)
def reject_participant(
    participant_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    participant, error = ApprovalService.reject_participant(db, participant_id, current_user)
    raise_for_error(error)
    return participant


# ============================================
# Video Submissions
# ============================================

@router.post("/{campaign_id}/videos", response_model=CampaignVideoResponse, status_code=201)
def submit_video(
    campaign_id: UUID,
    video_data: VideoSubmit,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Submit a video link to a campaign.

    Only approved participants may submit, and only links of the campaign's
    platforms.
    """
    video, error = CampaignService.submit_video(
        db, current_user, campaign_id, video_data.video_link, video_data.platform
    )
    if error and error.startswith("Only approved participants"):
        raise HTTPException(status_code=403, detail=error)
    raise_for_error(error)
    return video


@router.get("/{campaign_id}/videos", response_model=List[CampaignVideoResponse])
def list_videos(
    campaign_id: UUID,
    mine: bool = Query(default=False),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    load_campaign(db, campaign_id)
    return CampaignService.list_videos(db, campaign_id, current_user if mine else None)


@router.get("/videos/{video_id}/history", response_model=List[VideoHistoryResponse])
def get_video_history(
    video_id: UUID,
    days: Optional[int] = Query(default=None, ge=1, le=365),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if not db.query(CampaignVideo.id).filter(CampaignVideo.id == video_id).first():
        raise HTTPException(status_code=404, detail="Video not found")
    return video_metrics_service.get_video_history(db, video_id, days)


# ============================================
# Dashboards
# ============================================

@router.get("/{campaign_id}/summary", response_model=CampaignSummary)
def get_campaign_summary(
    campaign_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    load_campaign(db, campaign_id)
    return CampaignService.get_summary(db, campaign_id)


@router.get("/{campaign_id}/ranking", response_model=List[RankingEntry])
def get_campaign_ranking(
    campaign_id: UUID,
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    load_campaign(db, campaign_id)
    return CampaignService.get_ranking(db, campaign_id, limit)


@router.get("/{campaign_id}/platform-distribution", response_model=List[PlatformDistributionEntry])
def get_campaign_platform_distribution(
    campaign_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    load_campaign(db, campaign_id)
    return CampaignService.get_platform_distribution(db, campaign_id)


@router.get("/{campaign_id}/metrics", response_model=AggregatedMetricsResponse)
def get_aggregated_metrics(
    campaign_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    load_campaign(db, campaign_id)
    return video_metrics_service.get_aggregated_metrics(db, campaign_id)


@router.post("/{campaign_id}/sync-metrics", response_model=VideoMetricsSyncResponse)
def sync_campaign_metrics(
    campaign_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """Copy the latest synced content metrics onto the campaign's submissions."""
    load_campaign(db, campaign_id)
    return video_metrics_service.sync_campaign_video_metrics(db, campaign_id)


# ============================================
# Competition Prizes
# ============================================

@router.get("/{campaign_id}/prizes", response_model=List[PrizeItem])
def list_prizes(
    campaign_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    load_campaign(db, campaign_id)
    return CampaignService.list_prizes(db, campaign_id)


@router.put("/{campaign_id}/prizes", response_model=List[PrizeItem])
def save_prizes(
    campaign_id: UUID,
    prizes_data: PrizesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """Replace the prize table of a competition campaign."""
    prizes, error = CampaignService.save_prizes(
        db, campaign_id, [prize.model_dump() for prize in prizes_data.prizes]
    )
    raise_for_error(error)
    return prizes
