"""Mastery-level spaced repetition scheduling."""
from datetime import datetime, timedelta

from loguru import logger

from scripture_tutor.models import MasteryRecord

INTERVAL_DAYS = [0, 1, 3, 7, 14, 30]
MAX_LEVEL = 5


def clamp_level(level: int) -> int:
    return max(0, min(MAX_LEVEL, level))


def interval_days(level: int) -> int:
    """Days until the next review for a mastery level (index saturates at both ends)."""
    return INTERVAL_DAYS[max(0, min(level, len(INTERVAL_DAYS) - 1))]


def next_review_date(level: int, from_date: datetime) -> datetime:
    return from_date + timedelta(days=interval_days(level))


def promote(level: int) -> int:
    return min(MAX_LEVEL, level + 1)


def demote(level: int) -> int:
    return max(0, level - 1)


def new_record(reference: str, now: datetime, level: int = 0) -> MasteryRecord:
    """Create the record for a verse reviewed for the first time."""
    level = clamp_level(level)
    return MasteryRecord(
        reference=reference,
        level=level,
        last_reviewed_at=now,
        next_review_at=next_review_date(level, now),
    )


def review(record: MasteryRecord, correct: bool, now: datetime) -> MasteryRecord:
    """Apply one review outcome to a record in place and return it.

    Args:
        record: The record to update.
        correct: True promotes one level, False demotes one level.
        now: Review timestamp; becomes last_reviewed_at.

    Returns:
        The same record, with next_review_at recomputed from the new level.
    """
    old_level = record.level
    record.level = promote(record.level) if correct else demote(record.level)
    record.last_reviewed_at = now
    record.next_review_at = next_review_date(record.level, now)
    logger.debug(
        "Mastery {} {} -> {}, next review {}",
        record.reference, old_level, record.level, record.next_review_at.date(),
    )
    return record
