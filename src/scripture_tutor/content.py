"""Verse lookup over the local corpus and reference parsing."""
import re
import sqlite3
from typing import Protocol

from loguru import logger

from scripture_tutor.db import get_connection
from scripture_tutor.errors import ContentError
from scripture_tutor.models import VerseRef

# "John 3:16", "Proverbs 3:5-6", "1 Corinthians 13:4-5", "Genesis 1:31-2:3"
_REFERENCE = re.compile(
    r"^\s*(?P<book>.+?)\s+(?P<chapter>\d+):(?P<verse>\d+)"
    r"(?:-(?:(?P<end_chapter>\d+):)?(?P<end_verse>\d+))?\s*$"
)


class ContentProvider(Protocol):
    def fetch_verses(
        self, book: str, start_chapter: int, start_verse: int, end_chapter: int, end_verse: int,
    ) -> list[VerseRef]:
        ...


def parse_reference(reference: str) -> tuple[str, int, int, int, int]:
    """Parse a reference into (book, start_chapter, start_verse, end_chapter, end_verse)."""
    match = _REFERENCE.match(reference)
    if not match:
        raise ContentError(f"Malformed reference: {reference!r}")
    chapter = int(match["chapter"])
    verse = int(match["verse"])
    end_chapter = int(match["end_chapter"]) if match["end_chapter"] else chapter
    end_verse = int(match["end_verse"]) if match["end_verse"] else verse
    if chapter < 1 or verse < 1 or (end_chapter, end_verse) < (chapter, verse):
        raise ContentError(f"Malformed reference: {reference!r}")
    return match["book"], chapter, verse, end_chapter, end_verse


def normalize_book_name(name: str) -> str:
    name = name.lower().strip()
    for word, digit in (("first ", "1"), ("second ", "2"), ("third ", "3")):
        if name.startswith(word):
            name = digit + name[len(word):]
    name = re.sub(r"^([123]) ", r"\1", name)
    if name == "psalm":
        name = "psalms"
    return name


class LocalContentProvider:
    """Reads verses from the seeded and imported verses table."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _canonical_book(self, conn, book: str) -> str:
        wanted = normalize_book_name(book)
        for row in conn.execute("SELECT DISTINCT book FROM verses").fetchall():
            if normalize_book_name(row["book"]) == wanted:
                return row["book"]
        raise ContentError(f"Unknown book name: {book}")

    def fetch_verses(
        self, book: str, start_chapter: int, start_verse: int, end_chapter: int, end_verse: int,
    ) -> list[VerseRef]:
        try:
            conn = get_connection(self.db_path)
        except sqlite3.Error as e:
            raise ContentError(f"Could not open verse store: {e}") from e
        try:
            book = self._canonical_book(conn, book)
            rows = conn.execute(
                """SELECT book, chapter, verse, text FROM verses
                WHERE book = ?
                  AND (chapter > ? OR (chapter = ? AND verse >= ?))
                  AND (chapter < ? OR (chapter = ? AND verse <= ?))
                ORDER BY chapter, verse""",
                (book, start_chapter, start_chapter, start_verse, end_chapter, end_chapter, end_verse),
            ).fetchall()
        except sqlite3.Error as e:
            raise ContentError(f"Could not read verses for {book}: {e}") from e
        finally:
            conn.close()
        verses = []
        for row in rows:
            try:
                verses.append(VerseRef(row["book"], row["chapter"], row["verse"], row["text"]))
            except ValueError as e:
                logger.warning("Skipping stored verse: {}", e)
        return verses


def fetch_verses_or_empty(
    provider: ContentProvider,
    book: str, start_chapter: int, start_verse: int, end_chapter: int, end_verse: int,
) -> list[VerseRef]:
    """Fetch a passage, treating any content failure as 'no verses available'."""
    try:
        return provider.fetch_verses(book, start_chapter, start_verse, end_chapter, end_verse)
    except ContentError as e:
        logger.warning("No verses for {} {}:{}: {}", book, start_chapter, start_verse, e)
        return []


def load_reference(provider: ContentProvider, reference: str) -> list[VerseRef]:
    """Verses for a reference string such as a day's memory verse; empty if unavailable."""
    try:
        book, chapter, verse, end_chapter, end_verse = parse_reference(reference)
    except ContentError as e:
        logger.warning("{}", e)
        return []
    return fetch_verses_or_empty(provider, book, chapter, verse, end_chapter, end_verse)
