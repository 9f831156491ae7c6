"""Answer checking for each question kind."""
from typing import Mapping, Sequence, Union

from scripture_tutor.errors import QuestionKindError
from scripture_tutor.models import GapFill, IdentifyReference, MatchPairs, Question, RecallByTyping
from scripture_tutor.similarity import similarity

RECALL_THRESHOLD = 0.9

PairsAnswer = Union[Mapping[str, str], Sequence[tuple[str, str]]]


def _expect(question: Question, kind: type) -> None:
    if not isinstance(question, kind):
        raise QuestionKindError(
            f"cannot check a {type(question).__name__} answer as {kind.__name__}"
        )


def _record(question: Question, correct: bool) -> bool:
    question.attempts += 1
    if correct:
        question.solved = True
    return correct


def check_gap_fill(question: GapFill, words: Sequence[str]) -> bool:
    _expect(question, GapFill)
    expected = question.answer_words
    correct = len(words) == len(expected) and all(
        given.lower() == wanted.lower() for given, wanted in zip(words, expected)
    )
    return _record(question, correct)


def check_identify_reference(question: IdentifyReference, reference: str) -> bool:
    _expect(question, IdentifyReference)
    return _record(question, reference == question.verse.reference)


def check_match_pairs(question: MatchPairs, matches: PairsAnswer) -> bool:
    """All pairs must be re-associated exactly; there is no partial credit."""
    _expect(question, MatchPairs)
    proposed = list(matches.items()) if isinstance(matches, Mapping) else list(matches)
    expected = dict(question.pairs)
    correct = (
        len(proposed) == len(expected)
        and {snippet for snippet, _ in proposed} == set(expected)
        and all(expected[snippet] == reference for snippet, reference in proposed)
    )
    return _record(question, correct)


def check_recall_by_typing(
    question: RecallByTyping, text: str, threshold: float = RECALL_THRESHOLD,
) -> bool:
    _expect(question, RecallByTyping)
    return _record(question, similarity(text, question.verse.text) >= threshold)


def check_answer(question: Question, candidate, recall_threshold: float = RECALL_THRESHOLD) -> bool:
    """Dispatch a candidate to the checker for the question's kind."""
    if isinstance(question, GapFill):
        return check_gap_fill(question, candidate)
    if isinstance(question, IdentifyReference):
        return check_identify_reference(question, candidate)
    if isinstance(question, MatchPairs):
        return check_match_pairs(question, candidate)
    if isinstance(question, RecallByTyping):
        return check_recall_by_typing(question, candidate, recall_threshold)
    raise QuestionKindError(f"unknown question type {type(question).__name__}")
