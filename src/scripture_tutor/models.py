"""Data classes for the tutor domain model."""
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True)
class VerseRef:
    book: str
    chapter: int
    verse: int
    text: str

    def __post_init__(self):
        if not self.book.strip():
            raise ValueError("book must not be empty")
        if self.chapter < 1 or self.verse < 1:
            raise ValueError(f"invalid location {self.chapter}:{self.verse}")
        if not self.text.strip():
            raise ValueError(f"{self.book} {self.chapter}:{self.verse} has no text")

    @property
    def reference(self) -> str:
        return f"{self.book} {self.chapter}:{self.verse}"


@dataclass
class MasteryRecord:
    reference: str
    level: int
    last_reviewed_at: datetime
    next_review_at: datetime

    def is_due(self, now: datetime) -> bool:
        return self.next_review_at <= now


class QuestionKind(str, Enum):
    GAP_FILL = "gap_fill"
    IDENTIFY_REFERENCE = "identify_reference"
    MATCH_PAIRS = "match_pairs"
    RECALL_BY_TYPING = "recall_by_typing"


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(eq=False)
class GapFill:
    verse: VerseRef
    display_text: str
    answer_words: tuple[str, ...]
    choice_pool: tuple[str, ...]
    attempts: int = 0
    solved: bool = False
    id: str = field(default_factory=_new_id)
    kind = QuestionKind.GAP_FILL


@dataclass(eq=False)
class IdentifyReference:
    verse: VerseRef
    options: tuple[str, ...]
    attempts: int = 0
    solved: bool = False
    id: str = field(default_factory=_new_id)
    kind = QuestionKind.IDENTIFY_REFERENCE


@dataclass(eq=False)
class MatchPairs:
    verse: VerseRef
    pairs: tuple[tuple[str, str], ...]  # (snippet, reference)
    attempts: int = 0
    solved: bool = False
    id: str = field(default_factory=_new_id)
    kind = QuestionKind.MATCH_PAIRS


@dataclass(eq=False)
class RecallByTyping:
    verse: VerseRef
    hint: str
    attempts: int = 0
    solved: bool = False
    id: str = field(default_factory=_new_id)
    kind = QuestionKind.RECALL_BY_TYPING


Question = Union[GapFill, IdentifyReference, MatchPairs, RecallByTyping]


@dataclass(frozen=True)
class QuestionView:
    """What the presentation layer may show for a question without leaking its answer."""
    id: str
    kind: QuestionKind
    prompt: str
    reference: Optional[str] = None
    options: tuple[str, ...] = ()
    snippets: tuple[str, ...] = ()
    blanks: int = 0
    attempts: int = 0


@dataclass
class SessionResult:
    score: int
    total: int
    percentage: float
    earned_reward: int
    missed_references: list[str] = field(default_factory=list)
    solved_references: list[str] = field(default_factory=list)


@dataclass
class ProgressRecord:
    completed_day_ids: set[int] = field(default_factory=set)
    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: Optional[date] = None


@dataclass
class SessionQuota:
    remaining: int
    window_started_at: datetime


@dataclass(frozen=True)
class ReadingDay:
    id: int
    title: str
    theme: str
    book: str
    start_chapter: int
    start_verse: int
    end_chapter: int
    end_verse: int
    memory_verse: str

    @property
    def reference(self) -> str:
        if self.start_chapter == self.end_chapter:
            if self.start_verse == self.end_verse:
                return f"{self.book} {self.start_chapter}:{self.start_verse}"
            return f"{self.book} {self.start_chapter}:{self.start_verse}-{self.end_verse}"
        return f"{self.book} {self.start_chapter}:{self.start_verse}-{self.end_chapter}:{self.end_verse}"


@dataclass(frozen=True)
class QuizQuestion:
    """A multiple-choice comprehension question about a reading day."""
    question: str
    correct_answer: str
    wrong_answers: tuple[str, ...]
    verse_reference: str

    @property
    def choices(self) -> tuple[str, ...]:
        return (self.correct_answer,) + self.wrong_answers
