"""The 30-day reading plan and per-day study flow."""
from datetime import date
from scripture_tutor.db import get_connection, get_setting, set_setting
from scripture_tutor.models import ReadingDay

PLAN_LENGTH = 30


def _to_day(row) -> ReadingDay:
    return ReadingDay(
        id=row["id"],
        title=row["title"],
        theme=row["theme"],
        book=row["book"],
        start_chapter=row["start_chapter"],
        start_verse=row["start_verse"],
        end_chapter=row["end_chapter"],
        end_verse=row["end_verse"],
        memory_verse=row["memory_verse"],
    )


def get_all_days(db_path: str) -> list[ReadingDay]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM reading_days ORDER BY id").fetchall()
    conn.close()
    return [_to_day(r) for r in rows]


def get_reading_day(db_path: str, day_id: int) -> ReadingDay | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM reading_days WHERE id = ?", (day_id,)).fetchone()
    conn.close()
    return _to_day(row) if row else None


def day_number_for(when: date) -> int:
    """Plan day (1-30) for a calendar date; the plan repeats every 30 days of the year."""
    day_of_year = when.timetuple().tm_yday - 1
    return day_of_year % PLAN_LENGTH + 1


def get_todays_plan(db_path: str, today: date | None = None) -> ReadingDay | None:
    return get_reading_day(db_path, day_number_for(today or date.today()))


def get_start_date(db_path: str) -> str | None:
    return get_setting(db_path, "start_date")


def ensure_start_date(db_path: str, today: date | None = None) -> str:
    start = get_start_date(db_path)
    if not start:
        start = (today or date.today()).isoformat()
        set_setting(db_path, "start_date", start)
    return start


def get_calendar_days_elapsed(db_path: str, today: date | None = None) -> int:
    start = get_start_date(db_path)
    if not start:
        return 0
    return ((today or date.today()) - date.fromisoformat(start)).days + 1
