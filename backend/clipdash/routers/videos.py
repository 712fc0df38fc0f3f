"""Single video lookup endpoint."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from clipdash.database import get_db
from clipdash.models.user import User
from clipdash.models.schemas import VideoDetailsRequest
from clipdash.middleware.auth import get_current_user
from clipdash.routers.common import provider_errors
from clipdash.services.video_details_service import VideoDetailsService

router = APIRouter()


@router.post("/details")
def get_video_details(
    request: VideoDetailsRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Fetch the current metrics of one video from its URL or platform and id.

    With update_database the stored content rows of that video are refreshed
    too. Provider failures are answered with their mapped status and message.
    """
    service = VideoDetailsService()
    with provider_errors("scrapecreators"):
        try:
            details = service.fetch_video_details(
                url=request.video_url,
                platform=request.platform,
                video_id=request.video_id
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    updated_rows = 0
    if request.update_database:
        updated_rows = VideoDetailsService.update_stored_content(db, details)

    return {"success": True, "data": details, "updated_rows": updated_rows}
