"""Database initialization, connection management and record persistence."""
import sqlite3
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Optional, TypeVar

from scripture_tutor.config import DEFAULT_DB_PATH
from scripture_tutor.models import MasteryRecord, ProgressRecord, SessionQuota, SessionResult

T = TypeVar("T")

SCHEMA = """
CREATE TABLE IF NOT EXISTS reading_days (
    id INTEGER PRIMARY KEY,
    title TEXT NOT NULL,
    theme TEXT NOT NULL,
    book TEXT NOT NULL,
    start_chapter INTEGER NOT NULL,
    start_verse INTEGER NOT NULL,
    end_chapter INTEGER NOT NULL,
    end_verse INTEGER NOT NULL,
    memory_verse TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS verses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    book TEXT NOT NULL,
    chapter INTEGER NOT NULL,
    verse INTEGER NOT NULL,
    text TEXT NOT NULL,
    source TEXT DEFAULT 'seeded',
    UNIQUE(book, chapter, verse)
);

CREATE TABLE IF NOT EXISTS quiz_questions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    day_id INTEGER NOT NULL REFERENCES reading_days(id),
    question TEXT NOT NULL,
    correct_answer TEXT NOT NULL,
    wrong_answers TEXT NOT NULL,
    verse_reference TEXT NOT NULL,
    UNIQUE(day_id, question)
);

CREATE TABLE IF NOT EXISTS mastery_records (
    reference TEXT PRIMARY KEY,
    level INTEGER NOT NULL DEFAULT 0,
    last_reviewed_at TEXT NOT NULL,
    next_review_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS progress (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    current_streak INTEGER DEFAULT 0,
    longest_streak INTEGER DEFAULT 0,
    last_activity_date TEXT
);

CREATE TABLE IF NOT EXISTS completed_days (
    day_id INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS session_quota (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    remaining INTEGER NOT NULL,
    window_started_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS game_scores (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    game_type TEXT NOT NULL,
    day_id INTEGER,
    score INTEGER NOT NULL,
    total_questions INTEGER NOT NULL,
    earned_reward INTEGER NOT NULL,
    completed_at TEXT
);

CREATE TABLE IF NOT EXISTS imported_content (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    filename TEXT NOT NULL,
    verse_count INTEGER NOT NULL,
    imported_at TEXT
);

CREATE TABLE IF NOT EXISTS user_settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    value TEXT
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


def load_mastery_record(db_path: str, reference: str) -> Optional[MasteryRecord]:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM mastery_records WHERE reference = ?", (reference,)).fetchone()
    conn.close()
    if row is None:
        return None
    return MasteryRecord(
        reference=row["reference"],
        level=row["level"],
        last_reviewed_at=datetime.fromisoformat(row["last_reviewed_at"]),
        next_review_at=datetime.fromisoformat(row["next_review_at"]),
    )


def save_mastery_record(db_path: str, record: MasteryRecord) -> None:
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO mastery_records (reference, level, last_reviewed_at, next_review_at)
        VALUES (?, ?, ?, ?)
        ON CONFLICT(reference) DO UPDATE SET
            level=excluded.level,
            last_reviewed_at=excluded.last_reviewed_at,
            next_review_at=excluded.next_review_at""",
        (record.reference, record.level, record.last_reviewed_at.isoformat(), record.next_review_at.isoformat()),
    )
    conn.commit()
    conn.close()


def load_progress_record(db_path: str) -> ProgressRecord:
    """Load the user's progress; a fresh record if nothing has been saved yet."""
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM progress WHERE id = 1").fetchone()
    days = {r["day_id"] for r in conn.execute("SELECT day_id FROM completed_days").fetchall()}
    conn.close()
    if row is None:
        return ProgressRecord(completed_day_ids=days)
    last = row["last_activity_date"]
    return ProgressRecord(
        completed_day_ids=days,
        current_streak=row["current_streak"],
        longest_streak=row["longest_streak"],
        last_activity_date=date.fromisoformat(last) if last else None,
    )


def save_progress_record(db_path: str, record: ProgressRecord) -> None:
    last = record.last_activity_date.isoformat() if record.last_activity_date else None
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO progress (id, current_streak, longest_streak, last_activity_date)
        VALUES (1, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            current_streak=excluded.current_streak,
            longest_streak=excluded.longest_streak,
            last_activity_date=excluded.last_activity_date""",
        (record.current_streak, record.longest_streak, last),
    )
    conn.execute("DELETE FROM completed_days")
    conn.executemany(
        "INSERT INTO completed_days (day_id) VALUES (?)",
        [(day_id,) for day_id in sorted(record.completed_day_ids)],
    )
    conn.commit()
    conn.close()


def _quota_from_row(row, cap: int, now: datetime) -> SessionQuota:
    if row is None:
        return SessionQuota(remaining=cap, window_started_at=now)
    return SessionQuota(
        remaining=min(cap, row["remaining"]),
        window_started_at=datetime.fromisoformat(row["window_started_at"]),
    )


def load_quota(db_path: str, cap: int, now: datetime) -> SessionQuota:
    """Load the stored quota, starting a full window on first use."""
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM session_quota WHERE id = 1").fetchone()
    conn.close()
    return _quota_from_row(row, cap, now)


def save_quota(db_path: str, quota: SessionQuota) -> None:
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO session_quota (id, remaining, window_started_at) VALUES (1, ?, ?)
        ON CONFLICT(id) DO UPDATE SET remaining=excluded.remaining, window_started_at=excluded.window_started_at""",
        (quota.remaining, quota.window_started_at.isoformat()),
    )
    conn.commit()
    conn.close()


def update_quota(db_path: str, cap: int, now: datetime, update: Callable[[SessionQuota], T]) -> T:
    """Apply update() to the stored quota inside one write transaction and save the result.

    The write lock is held from the read through the save.
    """
    conn = get_connection(db_path)
    conn.isolation_level = None
    try:
        conn.execute("BEGIN IMMEDIATE")
        row = conn.execute("SELECT * FROM session_quota WHERE id = 1").fetchone()
        quota = _quota_from_row(row, cap, now)
        outcome = update(quota)
        conn.execute(
            """INSERT INTO session_quota (id, remaining, window_started_at) VALUES (1, ?, ?)
            ON CONFLICT(id) DO UPDATE SET remaining=excluded.remaining, window_started_at=excluded.window_started_at""",
            (quota.remaining, quota.window_started_at.isoformat()),
        )
        conn.execute("COMMIT")
    except BaseException:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        raise
    finally:
        conn.close()
    return outcome


def record_game_score(db_path: str, result: SessionResult, game_type: str, day_id: Optional[int] = None) -> None:
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO game_scores (game_type, day_id, score, total_questions, earned_reward, completed_at)
        VALUES (?, ?, ?, ?, ?, ?)""",
        (game_type, day_id, result.score, result.total, result.earned_reward, datetime.now().isoformat()),
    )
    conn.commit()
    conn.close()


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()
