"""Mini-test session: presentation order, recycling of missed questions, scoring."""
import dataclasses
from collections import deque
from typing import Optional, Sequence

from loguru import logger

from scripture_tutor.errors import SessionError
from scripture_tutor.models import (
    GapFill, IdentifyReference, MatchPairs, Question, QuestionView, RecallByTyping, SessionResult,
)
from scripture_tutor.validator import RECALL_THRESHOLD, check_answer

POINTS_PER_CORRECT = 5
PERFECT_BONUS = 25
GREAT_BONUS = 15


def question_view(question: Question) -> QuestionView:
    """Read-only view of a question that does not reveal its answer."""
    common = dict(id=question.id, kind=question.kind, attempts=question.attempts)
    if isinstance(question, GapFill):
        return QuestionView(
            prompt=question.display_text,
            reference=question.verse.reference,
            options=question.choice_pool,
            blanks=len(question.answer_words),
            **common,
        )
    if isinstance(question, IdentifyReference):
        return QuestionView(prompt=question.verse.text, options=question.options, **common)
    if isinstance(question, MatchPairs):
        return QuestionView(
            prompt="Match each verse to its reference",
            snippets=tuple(snippet for snippet, _ in question.pairs),
            options=tuple(sorted(reference for _, reference in question.pairs)),
            **common,
        )
    if isinstance(question, RecallByTyping):
        return QuestionView(prompt=question.hint, reference=question.verse.reference, **common)
    raise TypeError(f"unknown question type {type(question).__name__}")


def reward_for(score: int, percentage: float) -> int:
    reward = score * POINTS_PER_CORRECT
    if percentage >= 100:
        reward += PERFECT_BONUS
    elif percentage >= 80:
        reward += GREAT_BONUS
    return reward


class MiniTestSession:
    """Serves questions one at a time and requeues each missed question once.

    A zero-question session starts complete. Calling answer() or advance()
    out of order is a caller bug and raises SessionError.
    """

    def __init__(self, questions: Sequence[Question], recall_threshold: float = RECALL_THRESHOLD):
        self.questions: list[Question] = list(questions)
        self.cursor = 0
        self.score = 0
        self.recycle_queue: deque[Question] = deque()
        self.complete = not self.questions
        self.last_answer_correct: Optional[bool] = None
        self.recall_threshold = recall_threshold
        self._recycled_ids: set[str] = set()
        self._answered = False

    @property
    def current(self) -> Optional[Question]:
        if self.complete or self.cursor >= len(self.questions):
            return None
        return self.questions[self.cursor]

    def current_view(self) -> Optional[QuestionView]:
        question = self.current
        return question_view(question) if question is not None else None

    @property
    def awaiting_answer(self) -> bool:
        return not self.complete and not self._answered

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def progress(self) -> float:
        if self.complete:
            return 1.0
        return self.cursor / len(self.questions)

    @property
    def percentage(self) -> float:
        if not self.questions:
            return 0.0
        return self.score / len(self.questions) * 100

    @property
    def earned_reward(self) -> int:
        return reward_for(self.score, self.percentage)

    def answer(self, candidate) -> bool:
        if self.complete:
            raise SessionError("session is already complete")
        if self.cursor >= len(self.questions):
            raise SessionError(f"no question at position {self.cursor}")
        if self._answered:
            raise SessionError("current question was already answered; call advance()")

        question = self.questions[self.cursor]
        correct = check_answer(question, candidate, self.recall_threshold)
        self._answered = True
        self.last_answer_correct = correct
        if correct:
            self.score += 1
        elif question.id not in self._recycled_ids:
            self._recycled_ids.add(question.id)
            self.recycle_queue.append(dataclasses.replace(question))
            logger.debug("Recycling {} question for {}", question.kind.value, question.verse.reference)
        return correct

    def advance(self) -> None:
        if self.complete:
            raise SessionError("session is already complete")
        if not self._answered:
            raise SessionError("answer the current question before advancing")

        self._answered = False
        if self.cursor < len(self.questions) - 1:
            self.cursor += 1
        elif self.recycle_queue:
            self.questions.extend(self.recycle_queue)
            self.recycle_queue.clear()
            self.cursor += 1
        else:
            self.complete = True
            logger.info(
                "Mini test complete: {}/{} ({:.1f}%)", self.score, len(self.questions), self.percentage,
            )

    def result(self) -> SessionResult:
        if not self.complete:
            raise SessionError("session is still in progress")
        solved = []
        for question in self.questions:
            if question.solved and question.verse.reference not in solved:
                solved.append(question.verse.reference)
        missed = []
        for question in self.questions:
            reference = question.verse.reference
            if reference not in solved and reference not in missed:
                missed.append(reference)
        return SessionResult(
            score=self.score,
            total=len(self.questions),
            percentage=round(self.percentage, 1),
            earned_reward=self.earned_reward,
            missed_references=missed,
            solved_references=solved,
        )
