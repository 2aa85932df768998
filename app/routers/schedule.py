"""
Cohort schedule router: ordered timeline view, postpone/prepone window and commit.
Cohort table names are opaque; only names listed by the catalog are accepted.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.clock import get_today
from app.core.errors import NotFound
from app.schemas.reschedule import Direction, RescheduleCommit
from app.services import reschedule
from app.services.schedule_views import cohort_schedule
from app.services.stores import CohortCatalog, SessionStore, get_cohort_catalog, get_session_store
from app.utils.response import success_response

router = APIRouter(prefix="/api/cohort/schedule", tags=["Cohort Schedule"])


def _require_timeline(catalog: CohortCatalog, table_name: str) -> str:
    if table_name not in catalog.list_timeline_ids():
        raise NotFound("Cohort schedule not found", details=f"Unknown table {table_name}")
    return table_name


@router.get("")
async def get_schedule(
    tableName: str = Query(..., min_length=1),
    mentor_id: Optional[int] = Query(None),
    catalog: CohortCatalog = Depends(get_cohort_catalog),
    store: SessionStore = Depends(get_session_store),
):
    _require_timeline(catalog, tableName)
    sessions = cohort_schedule(store, tableName, mentor_id)
    return success_response(data=[s.model_dump(mode="json") for s in sessions])


@router.get("/{table_name}/sessions/{session_id}/reschedule")
async def get_reschedule_window(
    table_name: str,
    session_id: int,
    direction: Direction = Query(...),
    catalog: CohortCatalog = Depends(get_cohort_catalog),
    store: SessionStore = Depends(get_session_store),
    today: date = Depends(get_today),
):
    """Dates the session may move to, plus the same-day time constraint."""
    _require_timeline(catalog, table_name)
    session, sessions = reschedule.load_session(store, table_name, session_id)
    window = reschedule.reschedule_window(session, sessions, direction, today)
    message = "No available dates" if not window.dates else f"{len(window.dates)} dates available"
    return success_response(data=window.model_dump(mode="json"), message=message)


@router.post("/{table_name}/sessions/{session_id}/reschedule")
async def move_session(
    table_name: str,
    session_id: int,
    body: RescheduleCommit,
    catalog: CohortCatalog = Depends(get_cohort_catalog),
    store: SessionStore = Depends(get_session_store),
    today: date = Depends(get_today),
):
    _require_timeline(catalog, table_name)
    session, sessions = reschedule.load_session(store, table_name, session_id)
    plan = reschedule.plan_move(session, sessions, body.direction, today, body.date, body.time)
    applied = reschedule.commit_move(store, table_name, session, plan)
    return success_response(
        data=applied.model_dump(mode="json"),
        message=f"Session {body.direction.value}d",
    )
