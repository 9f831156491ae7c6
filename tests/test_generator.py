# tests/test_generator.py
import random
from collections import Counter

import pytest

from scripture_tutor.generator import (
    BLANK, build_gap_fill, build_identify_reference, build_match_pairs,
    build_recall_by_typing, generate, snippet,
)
from scripture_tutor.models import QuestionKind, VerseRef
from scripture_tutor.validator import check_gap_fill

SEEDS = range(25)

SHEPHERD = VerseRef("Psalms", 23, 1, "The LORD is my shepherd; I shall not want.")
BEGINNING = VerseRef("Genesis", 1, 1, "In the beginning God created the heavens and the earth.")


def test_generate_empty_verse_list():
    assert generate([]) == []


def test_generate_one_question_per_verse(genesis):
    questions = generate(genesis, rng=random.Random(1))
    assert len(questions) == 5
    assert {q.verse.reference for q in questions} == {v.reference for v in genesis}


def test_generate_cycles_question_kinds(genesis):
    """Verse order assigns kinds round-robin before the shuffle."""
    questions = generate(genesis, rng=random.Random(2))
    kinds = {q.verse.reference: q.kind for q in questions}
    assert kinds["Genesis 1:1"] is QuestionKind.GAP_FILL
    assert kinds["Genesis 1:2"] is QuestionKind.IDENTIFY_REFERENCE
    assert kinds["Genesis 1:3"] is QuestionKind.MATCH_PAIRS
    assert kinds["Genesis 1:4"] is QuestionKind.RECALL_BY_TYPING
    assert kinds["Genesis 1:5"] is QuestionKind.GAP_FILL
    assert Counter(kinds.values())[QuestionKind.GAP_FILL] == 2


def test_generate_respects_max_questions(genesis):
    questions = generate(genesis, max_questions=2, rng=random.Random(3))
    assert {q.verse.reference for q in questions} == {"Genesis 1:1", "Genesis 1:2"}


def test_generate_skips_verse_without_blankable_words():
    questions = generate([VerseRef("Test", 1, 1, "I am he")])
    assert questions == []


def test_new_questions_are_unanswered(genesis):
    for q in generate(genesis, rng=random.Random(4)):
        assert q.attempts == 0
        assert q.solved is False


@pytest.mark.parametrize("seed", SEEDS)
def test_gap_fill_blanks(seed):
    q = build_gap_fill(BEGINNING, random.Random(seed))
    assert len(q.answer_words) == 3
    assert q.display_text.count(BLANK) == 3
    assert set(q.answer_words) <= {"beginning", "created", "heavens", "earth"}
    # Blanked words keep their punctuation
    assert q.display_text.endswith(".")


@pytest.mark.parametrize("seed", SEEDS)
def test_gap_fill_answer_words_follow_verse_order(seed):
    q = build_gap_fill(BEGINNING, random.Random(seed))
    words = BEGINNING.text.replace(".", "").split()
    positions = [words.index(w) for w in q.answer_words]
    assert positions == sorted(positions)


@pytest.mark.parametrize("seed", SEEDS)
def test_gap_fill_choice_pool(seed):
    q = build_gap_fill(SHEPHERD, random.Random(seed))
    assert set(q.answer_words) <= set(q.choice_pool)
    assert len(q.choice_pool) == len(q.answer_words) + 2
    lowered = [w.lower() for w in q.choice_pool]
    assert len(lowered) == len(set(lowered))


def test_gap_fill_with_two_candidates():
    q = build_gap_fill(VerseRef("John", 11, 35, "Jesus wept."), random.Random(0))
    assert q.answer_words == ("Jesus", "wept")
    assert q.display_text == "___ ___."


def test_gap_fill_with_single_candidate():
    q = build_gap_fill(VerseRef("Test", 1, 1, "I am the Lord"), random.Random(0))
    assert q.answer_words == ("Lord",)
    assert "lord" not in [w.lower() for w in q.choice_pool if w != "Lord"]


def test_gap_fill_uses_supplied_distractors():
    q = build_gap_fill(SHEPHERD, random.Random(0), distractor_words=["mercy"])
    assert "mercy" in q.choice_pool
    assert len(q.choice_pool) == len(q.answer_words) + 1


@pytest.mark.parametrize("seed", SEEDS)
def test_gap_fill_round_trip(seed, genesis):
    """The generator's own answer words always validate."""
    for verse in genesis + [SHEPHERD]:
        q = build_gap_fill(verse, random.Random(seed))
        assert check_gap_fill(q, list(q.answer_words)) is True


@pytest.mark.parametrize("seed", SEEDS)
def test_identify_reference_options(seed):
    verse = VerseRef("John", 3, 16, "For God so loved the world.")
    q = build_identify_reference(verse, random.Random(seed))
    assert len(q.options) == 4
    assert len(set(q.options)) == 4
    assert verse.reference in q.options
    wrong = [o for o in q.options if o != verse.reference]
    assert sum(o.startswith("John 3:") for o in wrong) >= 1
    assert any(not o.startswith("John ") for o in wrong)


@pytest.mark.parametrize("seed", SEEDS)
def test_identify_reference_chapter_never_below_one(seed):
    verse = VerseRef("Genesis", 1, 1, "In the beginning.")
    q = build_identify_reference(verse, random.Random(seed))
    for option in q.options:
        chapter = int(option.rsplit(" ", 1)[1].split(":")[0])
        assert chapter >= 1


def test_identify_reference_other_book_from_pool():
    verse = VerseRef("John", 3, 16, "For God so loved the world.")
    q = build_identify_reference(verse, random.Random(5), reference_books=["John", "Ruth"])
    assert any(o.startswith("Ruth ") for o in q.options)


def test_snippet_truncates_long_text():
    long_text = "x" * 60
    assert snippet(long_text) == "x" * 50 + "..."
    assert snippet("short") == "short"


def test_match_pairs_uses_batch(genesis):
    q = build_match_pairs(genesis[2], genesis, random.Random(0))
    pairs = dict(q.pairs)
    assert len(q.pairs) == 3
    assert pairs[snippet(genesis[2].text)] == "Genesis 1:3"
    assert set(pairs.values()) == {"Genesis 1:3", "Genesis 1:1", "Genesis 1:2"}


@pytest.mark.parametrize("seed", SEEDS)
def test_match_pairs_padded_when_batch_is_small(seed):
    verse = VerseRef("John", 3, 16, "For God so loved the world.")
    q = build_match_pairs(verse, [verse], random.Random(seed))
    assert len(q.pairs) == 3
    assert len({s for s, _ in q.pairs}) == 3
    assert len({r for _, r in q.pairs}) == 3
    assert (verse.text, verse.reference) in q.pairs


def test_recall_hint():
    q = build_recall_by_typing(BEGINNING)
    assert q.hint == "In the beginning..."


def test_recall_hint_capped_at_four_words():
    verse = VerseRef("John", 3, 16, "For God so loved the world, that he gave his only Son, that whoever believes")
    assert build_recall_by_typing(verse).hint == "For God so loved..."


def test_recall_hint_for_short_verse():
    assert build_recall_by_typing(VerseRef("John", 11, 35, "Jesus wept.")).hint == "..."


@pytest.mark.parametrize("max_questions", [0, -1, -5])
def test_generate_non_positive_max_questions(genesis, max_questions):
    assert generate(genesis, max_questions=max_questions, rng=random.Random(0)) == []
