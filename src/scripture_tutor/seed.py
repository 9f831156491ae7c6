"""Seed the database with the reading plan and the bundled verse corpus."""
import json
from pathlib import Path
from scripture_tutor.db import get_connection

CONTENT_DIR = Path(__file__).parent / "content"


def is_seeded(db_path: str) -> bool:
    """Check whether the database has already been seeded with the reading plan."""
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM reading_days").fetchone()[0]
    conn.close()
    return count > 0


def seed_reading_plan(db_path: str) -> None:
    """Insert the 30 reading days from reading_plan.json."""
    data = json.loads((CONTENT_DIR / "reading_plan.json").read_text())
    conn = get_connection(db_path)
    for day in data["days"]:
        conn.execute(
            """INSERT OR IGNORE INTO reading_days
            (id, title, theme, book, start_chapter, start_verse, end_chapter, end_verse, memory_verse)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (day["id"], day["title"], day["theme"], day["book"], day["start_chapter"],
             day["start_verse"], day["end_chapter"], day["end_verse"], day["memory_verse"]),
        )
    conn.commit()
    conn.close()


def seed_verses(db_path: str) -> None:
    """Insert the bundled verse texts from verses.json."""
    data = json.loads((CONTENT_DIR / "verses.json").read_text())
    conn = get_connection(db_path)
    for v in data["verses"]:
        conn.execute(
            "INSERT OR IGNORE INTO verses (book, chapter, verse, text, source) VALUES (?, ?, ?, ?, 'seeded')",
            (v["book"], v["chapter"], v["verse"], v["text"]),
        )
    conn.commit()
    conn.close()


def seed_quiz_questions(db_path: str) -> None:
    """Insert the per-day comprehension questions from quiz_questions.json."""
    data = json.loads((CONTENT_DIR / "quiz_questions.json").read_text())
    conn = get_connection(db_path)
    for q in data["questions"]:
        conn.execute(
            """INSERT OR IGNORE INTO quiz_questions
            (day_id, question, correct_answer, wrong_answers, verse_reference)
            VALUES (?, ?, ?, ?, ?)""",
            (q["day_id"], q["question"], q["correct_answer"], json.dumps(q["wrong_answers"]), q["verse_reference"]),
        )
    conn.commit()
    conn.close()


def seed_all(db_path: str) -> None:
    """Run all seed functions in order."""
    if is_seeded(db_path):
        return
    seed_reading_plan(db_path)
    seed_verses(db_path)
    seed_quiz_questions(db_path)
