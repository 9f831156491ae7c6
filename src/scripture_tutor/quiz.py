"""Multiple-choice quiz on a reading day's content."""
import json
import random
from scripture_tutor.db import get_connection, record_game_score
from scripture_tutor.models import QuizQuestion, ReadingDay, SessionResult

GAME_TYPE = "Quiz"
POINTS_PER_CORRECT = 10


def _others(candidates: list[str], correct: str) -> tuple[str, ...]:
    return tuple(c for c in candidates if c.lower() != correct.lower())


def get_stored_questions(db_path: str, day_id: int) -> list[QuizQuestion]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM quiz_questions WHERE day_id = ? ORDER BY id", (day_id,)
    ).fetchall()
    conn.close()
    return [
        QuizQuestion(
            question=r["question"],
            correct_answer=r["correct_answer"],
            wrong_answers=tuple(json.loads(r["wrong_answers"])),
            verse_reference=r["verse_reference"],
        )
        for r in rows
    ]


def general_questions(day: ReadingDay) -> list[QuizQuestion]:
    """Questions any reading day can answer: theme, book, chapter, day number and title."""
    chapter = str(day.start_chapter)
    return [
        QuizQuestion(
            f"What is the main theme of {day.title}?",
            day.theme, _others(["Creation", "Love", "Faith"], day.theme), day.reference,
        ),
        QuizQuestion(
            "Which book of the Bible is today's reading from?",
            day.book, _others(["Genesis", "Psalms", "John"], day.book), day.reference,
        ),
        QuizQuestion(
            "What chapter does today's reading start in?",
            chapter, _others(["1", "5", "10"], chapter), day.reference,
        ),
        QuizQuestion(
            "Today's reading is Day ___ of the 30 Day Challenge",
            str(day.id),
            tuple(str(n) for n in (day.id % 30 + 1, (day.id + 5) % 30 + 1, (day.id + 10) % 30 + 1)),
            "30 Day Challenge",
        ),
        QuizQuestion(
            f"What is the title of Day {day.id}?",
            day.title, _others(["The Beginning", "God's Love", "New Life"], day.title), day.reference,
        ),
    ]


def get_day_quiz(db_path: str, day: ReadingDay, rng: random.Random | None = None) -> list[QuizQuestion]:
    """The day's own questions when bundled, otherwise the general set; shuffled."""
    rng = rng or random.Random()
    questions = get_stored_questions(db_path, day.id) or general_questions(day)
    rng.shuffle(questions)
    return questions


def shuffled_choices(question: QuizQuestion, rng: random.Random | None = None) -> list[str]:
    choices = list(question.choices)
    (rng or random.Random()).shuffle(choices)
    return choices


def check_quiz_answer(question: QuizQuestion, answer: str) -> bool:
    return answer.lower().strip() == question.correct_answer.lower().strip()


def record_quiz_score(db_path: str, correct: int, total: int, day_id: int) -> SessionResult:
    """Store a finished quiz; every correct answer is worth a fixed reward."""
    result = SessionResult(
        score=correct,
        total=total,
        percentage=round(correct / total * 100, 1) if total else 0.0,
        earned_reward=correct * POINTS_PER_CORRECT,
    )
    record_game_score(db_path, result, GAME_TYPE, day_id)
    return result
