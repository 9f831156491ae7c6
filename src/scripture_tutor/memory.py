"""Memory verse drill with mastery-level scheduling."""
from datetime import datetime
from scripture_tutor.content import LocalContentProvider, load_reference
from scripture_tutor.db import load_mastery_record, save_mastery_record
from scripture_tutor.mastery import new_record, review
from scripture_tutor.models import MasteryRecord, ReadingDay, VerseRef

MASTERED_LEVEL = 3


def get_memory_cards(db_path: str, day: ReadingDay) -> list[VerseRef]:
    """Verses making up the day's memory verse (a range yields several cards)."""
    return load_reference(LocalContentProvider(db_path), day.memory_verse)


def record_memory_result(db_path: str, reference: str, mastered: bool, now: datetime | None = None) -> MasteryRecord:
    """Promote or demote a verse's mastery and persist it, creating the record on first review."""
    now = now or datetime.now()
    record = load_mastery_record(db_path, reference) or new_record(reference, now)
    review(record, mastered, now)
    save_mastery_record(db_path, record)
    return record


def is_mastered(record: MasteryRecord | None) -> bool:
    return record is not None and record.level >= MASTERED_LEVEL
