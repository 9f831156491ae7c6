"""Daily mini test: build from the day's passage, finish and record."""
import random
from datetime import date
from scripture_tutor.config import Settings, get_settings
from scripture_tutor.content import ContentProvider, LocalContentProvider, fetch_verses_or_empty
from scripture_tutor.db import load_progress_record, record_game_score, save_progress_record
from scripture_tutor.generator import generate
from scripture_tutor.models import ProgressRecord, ReadingDay, SessionResult
from scripture_tutor.session import MiniTestSession
from scripture_tutor.streak import record_day_completed

GAME_TYPE = "Mini Test"


def build_mini_test(
    db_path: str,
    day: ReadingDay,
    settings: Settings | None = None,
    provider: ContentProvider | None = None,
    rng: random.Random | None = None,
) -> MiniTestSession:
    """Create a session over the day's passage. Missing content gives an empty, already complete session."""
    settings = settings or get_settings()
    provider = provider or LocalContentProvider(db_path)
    verses = fetch_verses_or_empty(
        provider, day.book, day.start_chapter, day.start_verse, day.end_chapter, day.end_verse,
    )
    questions = generate(
        verses,
        max_questions=settings.max_questions,
        rng=rng,
        distractor_words=settings.distractor_words,
        reference_books=settings.reference_books,
    )
    return MiniTestSession(questions, recall_threshold=settings.recall_threshold)


def finish_mini_test(
    db_path: str, session: MiniTestSession, day: ReadingDay, today: date | None = None,
) -> tuple[SessionResult, ProgressRecord]:
    """Store the score and mark the reading day complete, updating the streak."""
    result = session.result()
    record_game_score(db_path, result, GAME_TYPE, day.id)
    progress = load_progress_record(db_path)
    record_day_completed(progress, day.id, today or date.today())
    save_progress_record(db_path, progress)
    return result, progress



def record_practice_test(db_path: str, session: MiniTestSession, day: ReadingDay) -> SessionResult:
    """Store the score of a practice run; the reading plan and streak are left alone."""
    result = session.result()
    record_game_score(db_path, result, GAME_TYPE, day.id)
    return result
