"""Progress dashboard statistics."""
from datetime import datetime, timedelta
from scripture_tutor.config import Settings, get_settings
from scripture_tutor.db import get_connection, load_progress_record, load_quota
from scripture_tutor.review import get_due_references, get_mastered_count
from scripture_tutor.streak import SessionLimiter, completion_percentage


def get_progress_label(percentage: float) -> str:
    if percentage >= 100:
        return "COMPLETE"
    elif percentage >= 50:
        return "PAST HALFWAY"
    elif percentage > 0:
        return "UNDER WAY"
    return "NOT STARTED"


def get_score_color(score: float) -> str:
    if score >= 80:
        return "green"
    elif score >= 65:
        return "yellow"
    elif score >= 50:
        return "dark_orange"
    return "red"


def get_average_percentage(db_path: str) -> float:
    """Average score over every recorded game, as a percentage."""
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT SUM(score) as correct, SUM(total_questions) as total FROM game_scores"
    ).fetchone()
    conn.close()
    if not row["total"]:
        return 0.0
    return round((row["correct"] / row["total"]) * 100, 1)


def get_total_reward(db_path: str) -> int:
    conn = get_connection(db_path)
    total = conn.execute("SELECT COALESCE(SUM(earned_reward), 0) FROM game_scores").fetchone()[0]
    conn.close()
    return total


def get_sessions_remaining(db_path: str, settings: Settings | None = None, now: datetime | None = None) -> int:
    """Free sessions left in the current window, counting a refill that is already due."""
    settings = settings or get_settings()
    now = now or datetime.now()
    cap = settings.free_session_limit
    quota = load_quota(db_path, cap, now)
    return SessionLimiter(quota, cap, timedelta(hours=settings.session_window_hours)).refresh(now)


def get_study_stats(db_path: str, now: datetime | None = None, settings: Settings | None = None) -> dict:
    now = now or datetime.now()
    progress = load_progress_record(db_path)
    conn = get_connection(db_path)
    tests = conn.execute("SELECT COUNT(*) FROM game_scores").fetchone()[0]
    tracked = conn.execute("SELECT COUNT(*) FROM mastery_records").fetchone()[0]
    conn.close()
    completion = completion_percentage(progress)
    return {
        "days_completed": len(progress.completed_day_ids),
        "completion": round(completion, 1),
        "completion_label": get_progress_label(completion),
        "current_streak": progress.current_streak,
        "longest_streak": progress.longest_streak,
        "games_played": tests,
        "avg_test_score": get_average_percentage(db_path),
        "total_reward": get_total_reward(db_path),
        "verses_tracked": tracked,
        "verses_mastered": get_mastered_count(db_path),
        "reviews_due": len(get_due_references(db_path, now, limit=1000)),
        "sessions_remaining": get_sessions_remaining(db_path, settings, now),
    }
