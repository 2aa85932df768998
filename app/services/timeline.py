"""
Ordering and neighbour lookups over one cohort's sessions.
"""

from datetime import date
from typing import Iterable, Optional

from app.schemas.schedule import SessionRecord


def _key(session: SessionRecord) -> tuple[int, int]:
    return (session.week_number or 0, session.session_number or 0)


def order(sessions: Iterable[SessionRecord]) -> list[SessionRecord]:
    # sorted() is stable, so full ties keep their input order
    return sorted(sessions, key=_key)


def _neighbour(sessions: Iterable[SessionRecord], session_id: int, step: int) -> Optional[SessionRecord]:
    ordered = order(sessions)
    for index, session in enumerate(ordered):
        if session.id == session_id:
            target = index + step
            if 0 <= target < len(ordered):
                return ordered[target]
            return None
    return None


def previous(sessions: Iterable[SessionRecord], session_id: int) -> Optional[SessionRecord]:
    return _neighbour(sessions, session_id, -1)


def next_session(sessions: Iterable[SessionRecord], session_id: int) -> Optional[SessionRecord]:
    return _neighbour(sessions, session_id, 1)


def find(sessions: Iterable[SessionRecord], session_id: int) -> Optional[SessionRecord]:
    return next((s for s in sessions if s.id == session_id), None)


def occupied_dates(sessions: Iterable[SessionRecord], exclude_id: Optional[int] = None) -> set[date]:
    """Dates held by dated sessions other than ``exclude_id``."""
    return {s.date for s in sessions if s.id != exclude_id and s.date is not None}
