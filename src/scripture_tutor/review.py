"""Due and weak verse identification for review sessions."""
from datetime import datetime
from scripture_tutor.db import get_connection
from scripture_tutor.memory import MASTERED_LEVEL


def get_due_references(db_path: str, now: datetime | None = None, limit: int = 15) -> list[dict]:
    """Verses whose next review date has passed, most overdue first."""
    now = now or datetime.now()
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT reference, level, next_review_at FROM mastery_records
        WHERE next_review_at <= ?
        ORDER BY next_review_at ASC, level ASC
        LIMIT ?""",
        (now.isoformat(), limit),
    ).fetchall()
    conn.close()
    return [dict(r) for r in rows]


def get_weak_references(db_path: str, max_level: int = 1) -> list[dict]:
    """Verses at or below a mastery level (sorted weakest first)."""
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT reference, level FROM mastery_records WHERE level <= ? ORDER BY level ASC, reference",
        (max_level,),
    ).fetchall()
    conn.close()
    return [dict(r) for r in rows]


def get_mastered_count(db_path: str) -> int:
    conn = get_connection(db_path)
    count = conn.execute(
        "SELECT COUNT(*) FROM mastery_records WHERE level >= ?", (MASTERED_LEVEL,)
    ).fetchone()[0]
    conn.close()
    return count
