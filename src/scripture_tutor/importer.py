"""Import additional verse texts from json, yaml or plain-text files."""
import json
import re
from datetime import datetime
from pathlib import Path

import yaml
from loguru import logger

from scripture_tutor.db import get_connection
from scripture_tutor.errors import ContentError
from scripture_tutor.models import VerseRef

# "John 3:16 For God so loved the world..."
_TEXT_LINE = re.compile(r"^\s*(?P<book>.+?)\s+(?P<chapter>\d+):(?P<verse>\d+)\s+(?P<text>.+?)\s*$")


def _from_records(records) -> list[VerseRef]:
    if isinstance(records, dict):
        records = records.get("verses", [])
    if not isinstance(records, list):
        raise ContentError("Expected a list of verses or a mapping with a 'verses' key")
    verses = []
    for item in records:
        try:
            verses.append(VerseRef(str(item["book"]), int(item["chapter"]), int(item["verse"]), str(item["text"])))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed verse {!r}: {}", item, e)
    return verses


def _from_text(text: str) -> list[VerseRef]:
    verses = []
    for line in text.splitlines():
        if not line.strip():
            continue
        match = _TEXT_LINE.match(line)
        if not match:
            logger.warning("Skipping unparseable line: {!r}", line)
            continue
        try:
            verses.append(VerseRef(match["book"], int(match["chapter"]), int(match["verse"]), match["text"]))
        except ValueError as e:
            logger.warning("Skipping malformed verse line {!r}: {}", line, e)
    return verses


def read_verses(file_path: str) -> list[VerseRef]:
    path = Path(file_path)
    suffix = path.suffix.lower()

    try:
        if suffix == ".json":
            return _from_records(json.loads(path.read_text()))
        elif suffix in (".yaml", ".yml"):
            return _from_records(yaml.safe_load(path.read_text()))
        else:
            # Try reading as plain text
            return _from_text(path.read_text())
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ContentError(f"Could not parse {path.name}: {e}") from e


def import_file(db_path: str, file_path: str) -> dict:
    """Import verses from a file. Existing verses with the same reference are replaced."""
    verses = read_verses(file_path)
    conn = get_connection(db_path)
    for v in verses:
        conn.execute(
            """INSERT INTO verses (book, chapter, verse, text, source) VALUES (?, ?, ?, ?, 'imported')
            ON CONFLICT(book, chapter, verse) DO UPDATE SET text=excluded.text, source='imported'""",
            (v.book, v.chapter, v.verse, v.text),
        )
    conn.execute(
        "INSERT INTO imported_content (filename, verse_count, imported_at) VALUES (?, ?, ?)",
        (Path(file_path).name, len(verses), datetime.now().isoformat()),
    )
    conn.commit()
    conn.close()
    logger.info("Imported {} verses from {}", len(verses), Path(file_path).name)
    return {"filename": Path(file_path).name, "verse_count": len(verses)}
