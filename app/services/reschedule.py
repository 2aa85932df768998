"""
Postpone / prepone window computation and commit.

Window bounds (inclusive) for a session dated D, cutoff date T:

    postpone  max(D + 1, T)                      .. next.date - 1  (or D + 30)
    prepone   max(prev.date + 1 or D - 30, T)    .. D - 1

Dates held by any other session of the same cohort are removed. A committed
move writes date, day and a cleared meeting link (plus time, if it changed)
in one row update. Concurrent moves of the same session are last-write-wins.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from app.core.config import settings
from app.core.errors import ConstraintViolation, InvalidRequest, NotFound
from app.schemas.reschedule import AppliedMove, Direction, RescheduleWindow
from app.schemas.schedule import MEETING_LINK_COLUMN, SessionRecord, parse_time
from app.services import timeline
from app.services.stores import SessionStore
from app.utils.formatting import day_name

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class MovePlan:
    date: date
    day: str
    time: Optional[str]
    date_changed: bool
    time_changed: bool

    def fields(self) -> dict:
        """Column updates for the session row."""
        update = {
            "date": self.date.isoformat(),
            "day": self.day,
            MEETING_LINK_COLUMN: None,
        }
        if self.time_changed:
            update["time"] = self.time
        return update


def to_minutes(value: str) -> int:
    try:
        hours, minutes = value[:5].split(":")
        h, m = int(hours), int(minutes)
    except (AttributeError, ValueError):
        raise InvalidRequest("Invalid time", details=f"Expected HH:MM, got {value!r}")
    if not (0 <= h < 24 and 0 <= m < 60):
        raise InvalidRequest("Invalid time", details=f"Expected HH:MM, got {value!r}")
    return h * 60 + m


def date_window(
    session: SessionRecord,
    sessions: list[SessionRecord],
    direction: Direction,
    today: date,
    fallback_days: Optional[int] = None,
) -> tuple[date, date]:
    if session.date is None:
        raise ConstraintViolation("Session has no scheduled date", details=f"Session {session.id}")
    fallback = timedelta(days=settings.RESCHEDULE_FALLBACK_DAYS if fallback_days is None else fallback_days)

    if direction is Direction.POSTPONE:
        lower = max(session.date + ONE_DAY, today)
        nxt = timeline.next_session(sessions, session.id)
        if nxt is not None and nxt.date is not None:
            upper = nxt.date - ONE_DAY
        else:
            upper = session.date + fallback
        return lower, upper

    upper = session.date - ONE_DAY
    prev = timeline.previous(sessions, session.id)
    if prev is not None and prev.date is not None:
        lower = prev.date + ONE_DAY
    else:
        lower = session.date - fallback
    return max(lower, today), upper


def candidate_dates(
    session: SessionRecord,
    sessions: list[SessionRecord],
    direction: Direction,
    today: date,
    fallback_days: Optional[int] = None,
) -> list[date]:
    lower, upper = date_window(session, sessions, direction, today, fallback_days)
    taken = timeline.occupied_dates(sessions, exclude_id=session.id)
    dates = []
    current = lower
    while current <= upper:
        if current not in taken:
            dates.append(current)
        current += ONE_DAY
    return dates


def time_constraint(session: SessionRecord, direction: Direction) -> str:
    if not session.time:
        return ""
    if direction is Direction.PREPONE:
        return f"Select time before {session.time}"
    return f"Select time after {session.time}"


def reschedule_window(
    session: SessionRecord,
    sessions: list[SessionRecord],
    direction: Direction,
    today: date,
) -> RescheduleWindow:
    dates = candidate_dates(session, sessions, direction, today)
    if not dates:
        logger.info("No available dates to %s session %s", direction.value, session.id)
    return RescheduleWindow(
        direction=direction,
        currentDate=session.date,
        currentTime=session.time,
        dates=dates,
        timeConstraint=time_constraint(session, direction),
    )


def plan_move(
    session: SessionRecord,
    sessions: list[SessionRecord],
    direction: Direction,
    today: date,
    new_date: Optional[date] = None,
    new_time: Optional[str] = None,
) -> MovePlan:
    """Validate a requested move and return the resulting schedule state."""
    current_time = session.time or ""
    requested_time = parse_time(new_time)
    if requested_time:
        to_minutes(requested_time)

    effective_date = new_date or session.date
    effective_time = requested_time or current_time
    date_changed = effective_date != session.date
    time_changed = effective_time != current_time

    if not date_changed and not time_changed:
        raise ConstraintViolation("Please change either date or time")

    if date_changed:
        if effective_date not in candidate_dates(session, sessions, direction, today):
            raise ConstraintViolation(
                f"{effective_date.isoformat()} is not available to {direction.value} to",
                details="Pick one of the available dates",
            )
    elif current_time:
        current, requested = to_minutes(current_time), to_minutes(effective_time)
        if direction is Direction.PREPONE and not requested < current:
            raise ConstraintViolation(f"For prepone on same date, time must be before {current_time}")
        if direction is Direction.POSTPONE and not requested > current:
            raise ConstraintViolation(f"For postpone on same date, time must be after {current_time}")

    if effective_date is None:
        raise ConstraintViolation("Session has no scheduled date", details=f"Session {session.id}")

    return MovePlan(
        date=effective_date,
        day=day_name(effective_date),
        time=effective_time or None,
        date_changed=date_changed,
        time_changed=time_changed,
    )


def load_session(store: SessionStore, timeline_id: str, session_id: int) -> tuple[SessionRecord, list[SessionRecord]]:
    sessions = store.list_sessions(timeline_id)
    session = timeline.find(sessions, session_id)
    if session is None:
        raise NotFound("Session not found", details=f"No session {session_id} in {timeline_id}")
    return session, sessions


def commit_move(store: SessionStore, timeline_id: str, session: SessionRecord, plan: MovePlan) -> AppliedMove:
    updated = store.update_session(timeline_id, session.id, plan.fields())
    if not updated:
        raise NotFound("Session not found", details=f"No session {session.id} in {timeline_id}")
    logger.info(
        "Moved %s session %s from %s %s to %s %s",
        timeline_id, session.id, session.date, session.time or "TBD", plan.date, plan.time or "TBD",
    )
    return AppliedMove(date=plan.date, day=plan.day, time=plan.time)
