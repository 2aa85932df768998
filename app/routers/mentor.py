"""
Mentor router: upcoming sessions for the home page, batches the mentor teaches.
"""

from datetime import date, timedelta

from fastapi import APIRouter, Depends, Query

from app.core.clock import get_today
from app.core.config import settings
from app.services.schedule_views import mentor_batches, upcoming_sessions
from app.services.stores import CohortCatalog, SessionStore, get_cohort_catalog, get_session_store
from app.utils.response import success_response

router = APIRouter(prefix="/api/mentor", tags=["Mentor"])


@router.get("/sessions")
async def get_upcoming_sessions(
    mentor_id: int = Query(..., gt=0),
    days: int = Query(settings.UPCOMING_SESSION_DAYS, ge=1, le=31),
    catalog: CohortCatalog = Depends(get_cohort_catalog),
    store: SessionStore = Depends(get_session_store),
    today: date = Depends(get_today),
):
    dates = [today + timedelta(days=i) for i in range(days)]
    result = upcoming_sessions(mentor_id, dates, catalog=catalog, store=store)
    data = {
        "sessions": [s.model_dump(mode="json") for s in result["sessions"]],
        "sessionsByDate": {
            d: [s.model_dump(mode="json") for s in items]
            for d, items in result["sessionsByDate"].items()
        },
        "todaySession": result["todaySession"].model_dump(mode="json") if result["todaySession"] else None,
        "todaySessions": [s.model_dump(mode="json") for s in result["todaySessions"]],
        "dates": [d.isoformat() for d in dates],
    }
    return success_response(data=data)


@router.get("/batches")
async def get_mentor_batches(
    mentor_id: int = Query(..., gt=0),
    catalog: CohortCatalog = Depends(get_cohort_catalog),
    store: SessionStore = Depends(get_session_store),
):
    batches = mentor_batches(mentor_id, catalog=catalog, store=store)
    return success_response(data=[b.model_dump() for b in batches])
