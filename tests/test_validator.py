# tests/test_validator.py
import pytest

from scripture_tutor.errors import QuestionKindError
from scripture_tutor.models import GapFill, IdentifyReference, MatchPairs, RecallByTyping, VerseRef
from scripture_tutor.validator import (
    check_answer, check_gap_fill, check_identify_reference, check_match_pairs, check_recall_by_typing,
)

VERSE = VerseRef("Genesis", 1, 1, "In the beginning God created the heavens and the earth.")
PAIRS = (
    ("In the beginning God created the heavens and the earth.", "Genesis 1:1"),
    ("The LORD is my shepherd; I shall not want.", "Psalms 23:1"),
    ("Jesus wept.", "John 11:35"),
)


def gap_fill():
    return GapFill(
        verse=VERSE,
        display_text="In the beginning ___ ___ the heavens and the earth.",
        answer_words=("God", "created"),
        choice_pool=("created", "grace", "God", "hope"),
    )


def identify():
    return IdentifyReference(
        verse=VERSE, options=("Genesis 1:4", "Genesis 1:1", "Psalms 2:3", "Genesis 2:7"),
    )


def match_pairs():
    return MatchPairs(verse=VERSE, pairs=PAIRS)


def recall():
    return RecallByTyping(verse=VERSE, hint="In the beginning...")


def test_gap_fill_exact():
    assert check_gap_fill(gap_fill(), ["God", "created"]) is True


def test_gap_fill_case_insensitive():
    assert check_gap_fill(gap_fill(), ["god", "Created"]) is True


def test_gap_fill_wrong_order():
    assert check_gap_fill(gap_fill(), ["created", "God"]) is False


def test_gap_fill_wrong_length():
    assert check_gap_fill(gap_fill(), ["God"]) is False
    assert check_gap_fill(gap_fill(), ["God", "created", "hope"]) is False


def test_identify_reference():
    assert check_identify_reference(identify(), "Genesis 1:1") is True
    assert check_identify_reference(identify(), "Genesis 1:4") is False


def test_identify_reference_is_exact():
    assert check_identify_reference(identify(), "genesis 1:1") is False


def test_match_pairs_all_correct():
    assert check_match_pairs(match_pairs(), dict(PAIRS)) is True


def test_match_pairs_accepts_pair_list():
    assert check_match_pairs(match_pairs(), list(reversed(PAIRS))) is True


def test_match_pairs_two_of_three_fails():
    """No partial credit: one swapped association fails the question."""
    answer = dict(PAIRS)
    answer["Jesus wept."] = "Psalms 23:1"
    answer["The LORD is my shepherd; I shall not want."] = "John 11:35"
    assert check_match_pairs(match_pairs(), answer) is False


def test_match_pairs_missing_pair_fails():
    assert check_match_pairs(match_pairs(), list(PAIRS[:2])) is False


def test_match_pairs_unknown_snippet_fails():
    answer = list(PAIRS[:2]) + [("Something else", "John 11:35")]
    assert check_match_pairs(match_pairs(), answer) is False


def test_recall_exact_text():
    assert check_recall_by_typing(recall(), VERSE.text) is True


def test_recall_tolerates_small_typos():
    assert check_recall_by_typing(recall(), "in the begining God created the heavens and the earth") is True


def test_recall_rejects_partial_text():
    assert check_recall_by_typing(recall(), "In the beginning God") is False


def test_recall_custom_threshold():
    typed = "In the beginning God made the heavens and the earth."
    assert check_recall_by_typing(recall(), typed, threshold=0.99) is False
    assert check_recall_by_typing(recall(), typed, threshold=0.8) is True


def test_outcome_recorded_on_question():
    q = identify()
    check_identify_reference(q, "Genesis 1:4")
    assert q.attempts == 1
    assert q.solved is False
    check_identify_reference(q, "Genesis 1:1")
    assert q.attempts == 2
    assert q.solved is True


def test_wrong_variant_raises():
    with pytest.raises(QuestionKindError):
        check_gap_fill(identify(), ["God", "created"])
    with pytest.raises(TypeError):
        check_recall_by_typing(match_pairs(), "text")


def test_wrong_variant_does_not_record_attempt():
    q = identify()
    with pytest.raises(QuestionKindError):
        check_match_pairs(q, {})
    assert q.attempts == 0


def test_check_answer_dispatches():
    assert check_answer(gap_fill(), ["God", "created"]) is True
    assert check_answer(identify(), "Genesis 1:1") is True
    assert check_answer(match_pairs(), dict(PAIRS)) is True
    assert check_answer(recall(), VERSE.text) is True


def test_check_answer_unknown_type():
    with pytest.raises(QuestionKindError):
        check_answer(object(), "anything")
