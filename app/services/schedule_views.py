"""
Read-only schedule views for the mentor dashboard.
"""

import logging
from collections import defaultdict
from datetime import date
from typing import Optional

from app.core.errors import UpstreamFailure
from app.schemas.schedule import MentorBatch, MentorSession, SessionRecord
from app.services import timeline
from app.services.stores import CohortCatalog, SessionStore
from app.utils.formatting import day_name, format_batch_name

logger = logging.getLogger(__name__)


def cohort_schedule(store: SessionStore, timeline_id: str, mentor_id: Optional[int] = None) -> list[SessionRecord]:
    """Ordered timeline; with ``mentor_id`` only rows where they are primary or swapped mentor."""
    if mentor_id is None:
        return timeline.order(store.list_sessions(timeline_id))
    return timeline.order(store.mentor_sessions(timeline_id, mentor_id))


def _to_mentor_session(timeline_id: str, session: SessionRecord) -> MentorSession:
    return MentorSession(
        id=f"{timeline_id}-{session.id}-{session.time or ''}",
        session_id=session.id,
        date=session.date,
        day=session.day or day_name(session.date),
        time=session.time or "",
        subject=session.subject or "",
        topic=session.topic or "",
        batchName=format_batch_name(timeline_id),
        tableName=timeline_id,
        meetingLink=session.meeting_link or "",
        mentorId=session.mentor_id,
    )


def upcoming_sessions(
    mentor_id: int,
    dates: list[date],
    *,
    catalog: CohortCatalog,
    store: SessionStore,
) -> dict:
    """Sessions the mentor is assigned to on any of ``dates`` (first date is today)."""
    found: list[MentorSession] = []
    for timeline_id in catalog.list_timeline_ids():
        try:
            rows = store.mentor_sessions(timeline_id, mentor_id, dates=dates, include_swapped=False)
        except UpstreamFailure as e:
            logger.warning("Skipping %s for mentor %s: %s", timeline_id, mentor_id, e.details or e.message)
            continue
        found.extend(_to_mentor_session(timeline_id, s) for s in rows if s.date is not None)

    found.sort(key=lambda s: (s.date, s.time))

    today = dates[0] if dates else None
    today_sessions = [s for s in found if s.date == today]
    by_date: dict[str, list[MentorSession]] = defaultdict(list)
    for s in found:
        by_date[s.date.isoformat()].append(s)

    return {
        "sessions": found,
        "sessionsByDate": dict(by_date),
        "todaySession": today_sessions[0] if today_sessions else None,
        "todaySessions": today_sessions,
        "dates": dates,
    }


def mentor_batches(mentor_id: int, *, catalog: CohortCatalog, store: SessionStore) -> list[MentorBatch]:
    batches = []
    for timeline_id in catalog.list_timeline_ids():
        try:
            rows = store.mentor_sessions(timeline_id, mentor_id)
        except UpstreamFailure as e:
            logger.warning("Skipping %s for mentor %s: %s", timeline_id, mentor_id, e.details or e.message)
            continue
        if rows:
            batches.append(MentorBatch(
                tableName=timeline_id,
                batchName=format_batch_name(timeline_id),
                sessionCount=len(rows),
            ))
    return batches
