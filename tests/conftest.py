import pytest

from scripture_tutor.models import GapFill, IdentifyReference, MatchPairs, RecallByTyping, VerseRef


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tutor.db")
    return db_path


@pytest.fixture
def genesis():
    """The first five verses of Genesis 1."""
    return [
        VerseRef("Genesis", 1, 1, "In the beginning God created the heavens and the earth."),
        VerseRef("Genesis", 1, 2, "The earth was formless and empty, and darkness was over the surface of the deep."),
        VerseRef("Genesis", 1, 3, "God said, \"Let there be light,\" and there was light."),
        VerseRef("Genesis", 1, 4, "God saw that the light was good, and God separated the light from the darkness."),
        VerseRef("Genesis", 1, 5, "God called the light day, and the darkness he called night."),
    ]


@pytest.fixture
def solve():
    """Return a function producing the correct candidate for any question."""
    def _solve(question):
        if isinstance(question, GapFill):
            return list(question.answer_words)
        if isinstance(question, IdentifyReference):
            return question.verse.reference
        if isinstance(question, MatchPairs):
            return dict(question.pairs)
        if isinstance(question, RecallByTyping):
            return question.verse.text
        raise TypeError(question)
    return _solve
