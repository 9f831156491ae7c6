"""Builds mini-test questions from a day's verses."""
import random
import re
from typing import Optional, Sequence

from loguru import logger

from scripture_tutor.config import DISTRACTOR_WORDS, REFERENCE_BOOKS
from scripture_tutor.models import (
    GapFill, IdentifyReference, MatchPairs, Question, QuestionKind, RecallByTyping, VerseRef,
)

BLANK = "___"
ELLIPSIS = "..."
SNIPPET_LENGTH = 50
MATCH_PAIR_COUNT = 3
PLACEHOLDER_SNIPPETS = [
    "Sample verse text...",
    "Another sample verse...",
]

KIND_ORDER = [
    QuestionKind.GAP_FILL,
    QuestionKind.IDENTIFY_REFERENCE,
    QuestionKind.MATCH_PAIRS,
    QuestionKind.RECALL_BY_TYPING,
]

_WORD_PARTS = re.compile(r"^(\W*)(.*?)(\W*)$", re.DOTALL)


def split_word(word: str) -> tuple[str, str, str]:
    """Split a token into (leading punctuation, core, trailing punctuation)."""
    return _WORD_PARTS.match(word).groups()


def letter_count(word: str) -> int:
    return sum(1 for ch in word if ch.isalpha())


def snippet(text: str) -> str:
    if len(text) > SNIPPET_LENGTH:
        return text[:SNIPPET_LENGTH] + ELLIPSIS
    return text


def build_gap_fill(
    verse: VerseRef,
    rng: random.Random,
    distractor_words: Sequence[str] = DISTRACTOR_WORDS,
) -> Optional[GapFill]:
    words = verse.text.split()
    candidates = [i for i, word in enumerate(words) if letter_count(word) > 3]
    if not candidates:
        return None
    count = min(len(candidates), 3, max(2, len(candidates)))
    chosen = sorted(rng.sample(candidates, count))

    answers = []
    display = list(words)
    for i in chosen:
        lead, core, trail = split_word(words[i])
        answers.append(core)
        display[i] = f"{lead}{BLANK}{trail}"

    taken = {w.lower() for w in answers}
    distractors = []
    for word in distractor_words:
        if word.lower() not in taken:
            distractors.append(word)
            taken.add(word.lower())
    rng.shuffle(distractors)

    pool = answers + distractors[:2]
    rng.shuffle(pool)
    return GapFill(
        verse=verse,
        display_text=" ".join(display),
        answer_words=tuple(answers),
        choice_pool=tuple(pool),
    )


def wrong_references(
    verse: VerseRef,
    rng: random.Random,
    reference_books: Sequence[str] = REFERENCE_BOOKS,
) -> list[str]:
    """Three distinct wrong references: nearby verse, nearby chapter, other book."""
    taken = {verse.reference}

    # Same chapter, later verse
    nearby_verse = f"{verse.book} {verse.chapter}:{verse.verse + rng.randint(1, 5)}"
    taken.add(nearby_verse)

    # Same book, chapter within two of the original
    while True:
        chapter = max(1, verse.chapter + rng.randint(-2, 2))
        nearby_chapter = f"{verse.book} {chapter}:{rng.randint(1, 20)}"
        if nearby_chapter not in taken:
            break
    taken.add(nearby_chapter)

    # Different book
    books = [b for b in reference_books if b != verse.book]
    if not books:
        books = [b for b in REFERENCE_BOOKS if b != verse.book]
    while True:
        other_book = f"{rng.choice(books)} {rng.randint(1, 10)}:{rng.randint(1, 20)}"
        if other_book not in taken:
            break

    return [nearby_verse, nearby_chapter, other_book]


def build_identify_reference(
    verse: VerseRef,
    rng: random.Random,
    reference_books: Sequence[str] = REFERENCE_BOOKS,
) -> IdentifyReference:
    options = [verse.reference] + wrong_references(verse, rng, reference_books)
    rng.shuffle(options)
    return IdentifyReference(verse=verse, options=tuple(options))


def build_match_pairs(
    verse: VerseRef,
    batch: Sequence[VerseRef],
    rng: random.Random,
) -> MatchPairs:
    pairs = [(snippet(verse.text), verse.reference)]
    snippets = {pairs[0][0]}
    references = {verse.reference}

    for other in batch:
        if len(pairs) == MATCH_PAIR_COUNT:
            break
        text = snippet(other.text)
        if other.reference in references or text in snippets:
            continue
        pairs.append((text, other.reference))
        snippets.add(text)
        references.add(other.reference)

    while len(pairs) < MATCH_PAIR_COUNT:
        reference = f"Psalms {rng.randint(1, 150)}:{rng.randint(1, 20)}"
        if reference in references:
            continue
        pairs.append((PLACEHOLDER_SNIPPETS[len(pairs) - 1], reference))
        references.add(reference)

    rng.shuffle(pairs)
    return MatchPairs(verse=verse, pairs=tuple(pairs))


def build_recall_by_typing(verse: VerseRef) -> RecallByTyping:
    words = verse.text.split()
    hint_words = words[:min(4, len(words) // 3)]
    return RecallByTyping(verse=verse, hint=" ".join(hint_words) + ELLIPSIS)


def generate(
    verses: Sequence[VerseRef],
    max_questions: int = 5,
    rng: Optional[random.Random] = None,
    distractor_words: Sequence[str] = DISTRACTOR_WORDS,
    reference_books: Sequence[str] = REFERENCE_BOOKS,
) -> list[Question]:
    """Generate a shuffled question set, one question per verse.

    Question kinds cycle gap-fill, identify-reference, match-pairs,
    recall-by-typing in verse order. Verses that cannot support their
    assigned kind are skipped, so the result may be shorter than
    max_questions; an empty verse list yields an empty question list.
    """
    rng = rng or random.Random()
    questions: list[Question] = []
    for index, verse in enumerate(verses[:max(0, max_questions)]):
        kind = KIND_ORDER[index % len(KIND_ORDER)]
        if kind is QuestionKind.GAP_FILL:
            question = build_gap_fill(verse, rng, distractor_words)
        elif kind is QuestionKind.IDENTIFY_REFERENCE:
            question = build_identify_reference(verse, rng, reference_books)
        elif kind is QuestionKind.MATCH_PAIRS:
            question = build_match_pairs(verse, verses, rng)
        else:
            question = build_recall_by_typing(verse)
        if question is None:
            logger.warning("Skipped {} question for {}", kind.value, verse.reference)
            continue
        questions.append(question)

    rng.shuffle(questions)
    logger.debug("Generated {} questions from {} verses", len(questions), len(verses))
    return questions
