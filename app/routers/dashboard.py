import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_profile
from app.repos.dashboard_repo import get_finder_analytics, get_seeker_analytics

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/analytics")
def analytics(
    db: Session = Depends(get_db),
    profile=Depends(get_current_profile),
):
    """Seeker or finder analytics depending on the caller's role."""
    try:
        if profile.role == "FINDER":
            data = get_finder_analytics(db, profile.id)
        else:
            data = get_seeker_analytics(db, profile.id)
        return {"role": profile.role, "analytics": data}
    except Exception as e:
        logger.exception("Analytics failed for profile=%s: %s", profile.id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch analytics") from e
