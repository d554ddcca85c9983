# app/routers/preferences.py
"""
Preference endpoints.

PUT /api/preferences        - Save preferences (preferences.create)
GET /api/preferences        - Read saved preferences (preferences.view)
GET /api/personalized-feed  - Articles matching saved preferences (preferences.view)
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app import models
from app.auth import require_permission
from app.config import get_settings
from app.database import get_db
from app.schemas.articles import ArticlePage
from app.schemas.common import ApiResponse
from app.schemas.preferences import PreferenceResponse, PreferenceUpdate
from app.services.preferences import PreferenceService

router = APIRouter(prefix="/api", tags=["preferences"])

NO_PREFERENCES_MESSAGE = "No personalized preferences set"


@router.put("/preferences", response_model=ApiResponse[PreferenceResponse])
def update_preferences(
    payload: PreferenceUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(require_permission(models.Permission.PREFERENCES_CREATE)),
) -> dict:
    """Replace the caller's preferences. Their cached feed is evicted before this returns."""
    data = PreferenceService(db).update_preferences(user, payload)
    return {"success": True, "message": "Preferences updated successfully", "data": data}


@router.get("/preferences", response_model=ApiResponse[PreferenceResponse])
def get_preferences(
    db: Session = Depends(get_db),
    user: models.User = Depends(require_permission(models.Permission.PREFERENCES_VIEW)),
) -> dict:
    data = PreferenceService(db).get_preferences(user)
    if data is None:
        return {"success": True, "message": NO_PREFERENCES_MESSAGE, "data": None}
    return {"success": True, "message": "Preferences fetched successfully", "data": data}


@router.get("/personalized-feed", response_model=ApiResponse[ArticlePage])
def get_personalized_feed(
    page: int = Query(1, ge=1, le=models.MAX_INT),
    db: Session = Depends(get_db),
    user: models.User = Depends(require_permission(models.Permission.PREFERENCES_VIEW)),
) -> dict:
    """Newest-first articles matching the caller's preferences, 10 per page."""
    service = PreferenceService(db, page_size=get_settings().PAGE_SIZE)
    data = service.get_personalized_feed(user, page=page)
    if data is None:
        return {"success": True, "message": NO_PREFERENCES_MESSAGE, "data": None}
    return {"success": True, "message": "Personalized news feed fetched successfully", "data": data}
