# tests/test_db.py
import threading
from datetime import date, datetime, timedelta

import pytest

from scripture_tutor.db import (
    get_connection, get_setting, init_db, load_mastery_record, load_progress_record, load_quota,
    record_game_score, save_mastery_record, save_progress_record, save_quota, set_setting, update_quota,
)
from scripture_tutor.models import MasteryRecord, ProgressRecord, SessionQuota, SessionResult
from scripture_tutor.streak import SessionLimiter

NOW = datetime(2026, 4, 2, 9, 30)


def test_init_db_creates_tables(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    tables = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()}
    conn.close()
    expected = {
        "reading_days", "verses", "mastery_records", "progress", "completed_days",
        "session_quota", "game_scores", "imported_content", "user_settings", "quiz_questions",
    }
    assert expected <= tables


def test_init_db_is_idempotent(tmp_db):
    init_db(tmp_db)
    init_db(tmp_db)


def test_init_db_creates_parent_directory(tmp_path):
    db_path = str(tmp_path / "nested" / "dir" / "tutor.db")
    init_db(db_path)
    assert (tmp_path / "nested" / "dir" / "tutor.db").exists()


def test_mastery_record_round_trip(tmp_db):
    init_db(tmp_db)
    assert load_mastery_record(tmp_db, "John 3:16") is None
    save_mastery_record(tmp_db, MasteryRecord("John 3:16", 2, NOW, NOW + timedelta(days=3)))
    save_mastery_record(tmp_db, MasteryRecord("John 3:16", 3, NOW, NOW + timedelta(days=7)))
    record = load_mastery_record(tmp_db, "John 3:16")
    assert record.level == 3
    assert record.next_review_at == NOW + timedelta(days=7)
    assert record.last_reviewed_at == NOW


def test_progress_defaults_when_nothing_saved(tmp_db):
    init_db(tmp_db)
    progress = load_progress_record(tmp_db)
    assert progress.completed_day_ids == set()
    assert progress.current_streak == 0
    assert progress.last_activity_date is None


def test_progress_round_trip(tmp_db):
    init_db(tmp_db)
    save_progress_record(tmp_db, ProgressRecord({1, 2, 5}, 2, 4, date(2026, 4, 2)))
    save_progress_record(tmp_db, ProgressRecord({1, 2}, 1, 4, date(2026, 4, 3)))
    progress = load_progress_record(tmp_db)
    assert progress.completed_day_ids == {1, 2}
    assert progress.current_streak == 1
    assert progress.longest_streak == 4
    assert progress.last_activity_date == date(2026, 4, 3)


def test_quota_starts_full(tmp_db):
    init_db(tmp_db)
    quota = load_quota(tmp_db, 5, NOW)
    assert quota.remaining == 5
    assert quota.window_started_at == NOW


def test_quota_round_trip_is_capped(tmp_db):
    init_db(tmp_db)
    save_quota(tmp_db, SessionQuota(remaining=4, window_started_at=NOW))
    assert load_quota(tmp_db, 5, NOW + timedelta(hours=1)).remaining == 4
    assert load_quota(tmp_db, 2, NOW).remaining == 2
    assert load_quota(tmp_db, 5, NOW).window_started_at == NOW


def test_record_game_score(tmp_db):
    init_db(tmp_db)
    record_game_score(tmp_db, SessionResult(5, 6, 83.3, 40), "Mini Test", day_id=1)
    conn = get_connection(tmp_db)
    row = conn.execute("SELECT * FROM game_scores").fetchone()
    conn.close()
    assert row["game_type"] == "Mini Test"
    assert row["day_id"] == 1
    assert row["score"] == 5
    assert row["total_questions"] == 6
    assert row["earned_reward"] == 40


def test_settings(tmp_db):
    init_db(tmp_db)
    assert get_setting(tmp_db, "start_date") is None
    assert get_setting(tmp_db, "start_date", "never") == "never"
    set_setting(tmp_db, "start_date", "2026-01-01")
    set_setting(tmp_db, "start_date", "2026-02-01")
    assert get_setting(tmp_db, "start_date") == "2026-02-01"


def test_update_quota_persists_changes(tmp_db):
    init_db(tmp_db)

    def spend(quota):
        quota.remaining -= 1
        return quota.remaining

    assert update_quota(tmp_db, 3, NOW, spend) == 2
    assert update_quota(tmp_db, 3, NOW, spend) == 1
    assert load_quota(tmp_db, 3, NOW).remaining == 1


def test_update_quota_rolls_back_on_error(tmp_db):
    init_db(tmp_db)
    save_quota(tmp_db, SessionQuota(remaining=2, window_started_at=NOW))

    def broken(quota):
        quota.remaining = 0
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        update_quota(tmp_db, 3, NOW, broken)
    assert load_quota(tmp_db, 3, NOW).remaining == 2


def test_update_quota_concurrent_starts_never_exceed_cap(tmp_db):
    """Separate connections racing for sessions share one persisted counter."""
    init_db(tmp_db)
    results = []
    barrier = threading.Barrier(8)

    def start(quota):
        return SessionLimiter(quota, 3, timedelta(hours=24)).try_start(NOW)

    def worker():
        barrier.wait()
        results.append(update_quota(tmp_db, 3, NOW, start))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 3
    assert load_quota(tmp_db, 3, NOW).remaining == 0
