"""
JMdict loader for the jmdict-simplified JSON format.

Turns the ``words`` array of jmdict-eng.json(.gz) into a built-in
:class:`DictionarySource`. One entry is emitted per (kanji form, kana form)
pair the kana applies to; words without kanji get one entry per kana form,
with the kana as both term and reading.

Download from https://github.com/scriptin/jmdict-simplified/releases
"""

import gzip
import json
import logging
import re
from pathlib import Path

from services.entry import DictionaryEntry
from services.sources import JMDICT, SourceId
from services.store import DictionaryLoadError, DictionarySource


logger = logging.getLogger(__name__)

# Separator between glosses of one sense
GLOSS_SEPARATOR = "; "

# Popularity weights for the common flags
KANJI_COMMON_SCORE = 10.0
KANA_COMMON_SCORE = 5.0


def _read_json(path: Path) -> dict:
    try:
        if path.suffix == ".gz":
            with gzip.open(path, "rt", encoding="utf-8") as f:
                return json.load(f)
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise DictionaryLoadError(f"JMdict file not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise DictionaryLoadError(f"Could not read JMdict from {path}: {e}") from e


def _applies(targets: list[str], text: str | None) -> bool:
    if text is None:
        return True
    return "*" in targets or text in targets


def _sense_meanings(senses: list[dict], kanji: str | None, kana: str) -> tuple[list[str], set[str]]:
    """Meaning strings and tags of every sense that applies to the pair."""
    meanings: list[str] = []
    tags: set[str] = set()
    for sense in senses:
        if not _applies(sense.get("appliesToKanji", ["*"]), kanji):
            continue
        if not _applies(sense.get("appliesToKana", ["*"]), kana):
            continue

        glosses = [g["text"] for g in sense.get("gloss", []) if g.get("text")]
        if not glosses:
            continue
        meanings.append(GLOSS_SEPARATOR.join(glosses))
        tags.update(sense.get("partOfSpeech", []))
        tags.update(sense.get("misc", []))
    return meanings, tags


def word_entries(word: dict, source: SourceId = JMDICT) -> list[DictionaryEntry]:
    """All entries for one jmdict-simplified word object."""
    word_id = word.get("id", "")
    kanji_forms = [k for k in word.get("kanji", []) if k.get("text")]
    kana_forms = [k for k in word.get("kana", []) if k.get("text")]
    senses = word.get("sense", [])

    pairs: list[tuple[dict | None, dict]] = []
    for kana in kana_forms:
        applies_to = kana.get("appliesToKanji", ["*"])
        matched = [k for k in kanji_forms if _applies(applies_to, k["text"])]
        if matched:
            pairs.extend((k, kana) for k in matched)
        else:
            pairs.append((None, kana))

    entries: list[DictionaryEntry] = []
    for kanji, kana in pairs:
        kanji_text = kanji["text"] if kanji else None
        meanings, meaning_tags = _sense_meanings(senses, kanji_text, kana["text"])
        if not meanings:
            continue

        popularity = 0.0
        term_tags = set(kana.get("tags", []))
        if kanji:
            term_tags.update(kanji.get("tags", []))
            if kanji.get("common"):
                popularity += KANJI_COMMON_SCORE
        if kana.get("common"):
            popularity += KANA_COMMON_SCORE
        if popularity:
            term_tags.update(("common", "P"))

        entries.append(DictionaryEntry(
            id=f"{word_id}-{len(entries)}",
            term=kanji_text or kana["text"],
            reading=kana["text"],
            meanings=tuple(meanings),
            source=source,
            meaning_tags=frozenset(meaning_tags),
            term_tags=frozenset(term_tags),
            popularity=popularity,
        ))
    return entries


def load_jmdict(path: Path | str, source: SourceId = JMDICT) -> DictionarySource:
    """Load jmdict-eng.json or jmdict-eng.json.gz into a source."""
    path = Path(path)
    logger.info(f"Loading JMdict from {path}")
    data = _read_json(path)

    version = data.get("version")
    if not version:
        match = re.search(r"jmdict-eng-(\d+\.\d+\.\d+)", path.name)
        version = match.group(1) if match else None

    entries: list[DictionaryEntry] = []
    skipped = 0
    for word in data.get("words", []):
        if not isinstance(word, dict):
            skipped += 1
            continue
        entries.extend(word_entries(word, source))

    if skipped:
        logger.debug(f"Skipped {skipped} malformed JMdict words in {path}")

    dictionary = DictionarySource(source, entries, title="JMdict", revision=version)
    version_str = f" (v{version})" if version else ""
    logger.info(f"Loaded {len(entries)} JMdict entries{version_str}")
    return dictionary
