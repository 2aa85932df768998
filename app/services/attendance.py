"""
Mentor attendance aggregation.

For every cohort timeline, the mentor's past sessions are classified:

- assigned to the mentor, no recording, no swap   -> absent
- assigned to the mentor, swapped to someone else -> absent (recording ignored)
- assigned to the mentor, recording, no swap      -> present
- swapped *to* the mentor, with a recording       -> special attendance

Special attendance never enters ``total_classes`` (= present + absent) and so
never moves the percentage. "Past" means strictly before the cutoff date.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Iterable, Optional

from app.core.config import settings
from app.core.errors import NotFound, PartialDataLoss, UpstreamFailure
from app.schemas.attendance import AttendanceSummary, MentorProfile
from app.schemas.schedule import SessionRecord
from app.services.stores import AttendanceStore, CohortCatalog, MentorDirectory, SessionStore

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"


@dataclass(frozen=True)
class AttendanceTally:
    present: int = 0
    absent: int = 0
    special: int = 0

    @property
    def total(self) -> int:
        return self.present + self.absent

    def __add__(self, other: "AttendanceTally") -> "AttendanceTally":
        return AttendanceTally(
            present=self.present + other.present,
            absent=self.absent + other.absent,
            special=self.special + other.special,
        )


@dataclass
class AttendanceRun:
    summary: AttendanceSummary
    skipped: list[PartialDataLoss] = field(default_factory=list)


def _is_past(session: SessionRecord, today: date) -> bool:
    return session.date is not None and session.date < today


def classify(session: SessionRecord, mentor_id: int, today: date) -> Optional[Outcome]:
    """Outcome for an assigned-past session, None if the session is not one."""
    if session.mentor_id != mentor_id or not _is_past(session, today):
        return None
    if not session.has_recording and not session.was_swapped:
        return Outcome.ABSENT
    if session.was_swapped:
        return Outcome.ABSENT
    return Outcome.PRESENT


def is_special(session: SessionRecord, mentor_id: int, today: date) -> bool:
    return (
        session.swapped_mentor_id == mentor_id
        and _is_past(session, today)
        and session.has_recording
    )


def tally_timeline(
    sessions: Iterable[SessionRecord],
    mentor_id: int,
    today: date,
    timeline_id: str = "",
) -> AttendanceTally:
    present = absent = special = 0
    for session in sessions:
        outcome = classify(session, mentor_id, today)
        if outcome is Outcome.PRESENT:
            present += 1
            logger.debug("%s class %s (%s): PRESENT", timeline_id, session.id, session.date)
        elif outcome is Outcome.ABSENT:
            absent += 1
            if session.was_swapped:
                logger.debug(
                    "%s class %s (%s): ABSENT (swapped to mentor %s)",
                    timeline_id, session.id, session.date, session.swapped_mentor_id,
                )
            else:
                logger.debug("%s class %s (%s): ABSENT (no recording)", timeline_id, session.id, session.date)

        if is_special(session, mentor_id, today):
            special += 1
            logger.debug(
                "%s class %s (%s): SPECIAL (covered for mentor %s)",
                timeline_id, session.id, session.date, session.mentor_id,
            )
            if outcome is not None:
                # Same mentor is primary and swap on one row: counted absent
                # and special. Left as-is, see DESIGN.md.
                logger.warning(
                    "Mentor %s is both primary and swapped mentor on %s class %s",
                    mentor_id, timeline_id, session.id,
                )
    return AttendanceTally(present=present, absent=absent, special=special)


def attendance_percent(present: int, total: int) -> Decimal:
    if total <= 0:
        return Decimal("0")
    value = Decimal(present) * 100 / Decimal(total)
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def build_summary(profile: MentorProfile, tally: AttendanceTally, updated_at: datetime) -> AttendanceSummary:
    return AttendanceSummary(
        mentor_id=profile.mentor_id,
        name=profile.name,
        email=profile.email,
        total_classes=tally.total,
        present=tally.present,
        absent=tally.absent,
        special_attendance=tally.special,
        attendance_percent=attendance_percent(tally.present, tally.total),
        updated_at=updated_at,
    )


def compute_mentor_attendance(
    mentor_id: int,
    *,
    directory: MentorDirectory,
    catalog: CohortCatalog,
    sessions: SessionStore,
    attendance_store: AttendanceStore,
    today: date,
    now: datetime,
) -> AttendanceRun:
    """Recompute one mentor's summary across every cohort timeline and upsert it."""
    logger.info("Computing attendance for mentor %s (cutoff %s)", mentor_id, today)

    profile = directory.get_mentor(mentor_id)
    if profile is None:
        raise NotFound("Mentor not found", details=f"No mentor with id {mentor_id}")

    timeline_ids = catalog.list_timeline_ids()
    logger.info("Found %d cohort timelines", len(timeline_ids))

    def _tally(timeline_id: str) -> AttendanceTally:
        rows = sessions.mentor_sessions(timeline_id, mentor_id, before=today)
        return tally_timeline(rows, mentor_id, today, timeline_id)

    total = AttendanceTally()
    skipped: list[PartialDataLoss] = []
    if timeline_ids:
        workers = max(1, min(settings.ATTENDANCE_MAX_WORKERS, len(timeline_ids)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(_tally, tid): tid for tid in timeline_ids}
            for future in as_completed(futures):
                timeline_id = futures[future]
                try:
                    total = total + future.result()
                except UpstreamFailure as e:
                    loss = PartialDataLoss(timeline_id, e)
                    skipped.append(loss)
                    logger.warning("Partial data loss for mentor %s: %s (%s)", mentor_id, loss.message, loss.details)
                except Exception as e:
                    loss = PartialDataLoss(timeline_id, e)
                    skipped.append(loss)
                    logger.exception("Partial data loss for mentor %s: %s", mentor_id, loss.message)

    summary = build_summary(profile, total, now)
    logger.info(
        "Summary for %s: Total=%d, Present=%d, Absent=%d, Special=%d, Attendance=%s%%",
        profile.name, summary.total_classes, summary.present, summary.absent,
        summary.special_attendance, summary.attendance_percent,
    )

    attendance_store.upsert(summary)
    logger.info("Saved attendance for %s", profile.name)
    return AttendanceRun(summary=summary, skipped=skipped)


def list_attendance(attendance_store: AttendanceStore) -> list[dict]:
    rows = attendance_store.list_all()
    return sorted(rows, key=lambda r: float(r.get("attendance_percent") or 0), reverse=True)
