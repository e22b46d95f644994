"""
Yomitan dictionary importer.

Reads a Yomitan (Yomichan) zip archive:

- ``index.json``: title, revision, format/version
- ``term_bank_*.json``: term rows, format 1 or 3
- ``term_meta_bank_*.json``: ``freq`` and ``pitch`` rows

Format 3 term row::

    [expression, reading, definitionTags, rules, score, glossary, sequence, termTags]

Format 1 term row::

    [expression, reading, definitionTags, rules, score, glossary...]

Rows that can't be parsed are skipped and counted; a partly usable
dictionary is still imported.
"""

import json
import logging
import uuid
import zipfile
from dataclasses import dataclass, field
from pathlib import Path

from services.entry import DictionaryEntry, PitchAccent
from services.frequency import FrequencyRecord, decode_frequency_value
from services.sources import SourceId
from services.store import DictionaryLoadError, DictionarySource


logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = (1, 2, 3)


@dataclass(slots=True)
class ImportedDictionary:
    """Everything read from one archive."""

    title: str
    revision: str
    format: int
    source: DictionarySource
    frequencies: list[FrequencyRecord] = field(default_factory=list)
    pitch_accents: list[PitchAccent] = field(default_factory=list)
    skipped_rows: int = 0


def flatten_glossary(item) -> str:
    """Plain text of one glossary item (string, text object or structured content)."""
    match item:
        case str():
            return item
        case list():
            return " ".join(t for t in (flatten_glossary(x) for x in item) if t)
        case {"type": "image"} | {"tag": "img"}:
            return ""
        case {"text": str() as text}:
            return text
        case {"content": content}:
            return flatten_glossary(content)
        case _:
            return ""


def _tags(value) -> frozenset[str]:
    if not isinstance(value, str):
        return frozenset()
    return frozenset(value.split())


def _parse_term_row(row, version: int, source: SourceId, row_id: int) -> tuple[int, DictionaryEntry] | None:
    """``(sequence, entry)`` for a term row, or None when unusable."""
    min_len = 8 if version >= 3 else 6
    if not isinstance(row, list) or len(row) < min_len:
        return None

    expression, reading = row[0], row[1]
    if not isinstance(expression, str) or not expression:
        return None
    if not isinstance(reading, str):
        return None

    score = row[4]
    if not isinstance(score, (int, float)) or isinstance(score, bool):
        return None

    glossary = row[5] if version >= 3 else row[5:]
    if not isinstance(glossary, list):
        return None
    meanings = tuple(t for t in (flatten_glossary(g).strip() for g in glossary) if t)
    if not meanings:
        return None

    sequence = row[6] if version >= 3 and isinstance(row[6], int) else row_id
    term_tags = _tags(row[7]) if version >= 3 else frozenset()

    entry = DictionaryEntry(
        id=f"{source.name}-{row_id}",
        term=expression,
        reading=reading or expression,
        meanings=meanings,
        source=source,
        meaning_tags=_tags(row[2]),
        term_tags=term_tags,
        score=float(score),
        popularity=float(score),
    )
    return sequence, entry


def _parse_meta_row(row, dictionary: ImportedDictionary) -> bool:
    if not isinstance(row, list) or len(row) < 3 or not isinstance(row[0], str):
        return False

    term, mode, data = row[0], row[1], row[2]
    match mode:
        case "freq":
            reading, rank = decode_frequency_value(data)
            if rank is None:
                return False
            dictionary.frequencies.append(FrequencyRecord(term, reading, rank))
            return True
        case "pitch":
            if not isinstance(data, dict) or not isinstance(data.get("reading"), str):
                return False
            positions = [
                p["position"] for p in data.get("pitches", [])
                if isinstance(p, dict) and isinstance(p.get("position"), int)
            ]
            if not positions:
                return False
            dictionary.pitch_accents.extend(PitchAccent(term, data["reading"], p) for p in positions)
            return True
        case _:
            # ipa and future modes carry nothing we index
            return True


def _read_json_member(archive: zipfile.ZipFile, name: str):
    with archive.open(name) as f:
        return json.load(f)


def load_yomitan_dictionary(path: Path | str, source_id: SourceId | None = None) -> ImportedDictionary:
    """
    Import a Yomitan zip.

    Without ``source_id`` the dictionary gets a fresh ``imported_<uuid>`` id.
    Raises DictionaryLoadError when the archive or its index is unreadable.
    """
    path = Path(path)
    source_id = source_id or SourceId.imported(uuid.uuid4().hex)
    logger.info(f"Importing Yomitan dictionary from {path}")

    try:
        archive = zipfile.ZipFile(path)
    except FileNotFoundError as e:
        raise DictionaryLoadError(f"Dictionary archive not found: {path}") from e
    except (zipfile.BadZipFile, OSError) as e:
        raise DictionaryLoadError(f"Not a readable zip archive: {path}") from e

    with archive:
        names = archive.namelist()
        if "index.json" not in names:
            raise DictionaryLoadError(f"{path} has no index.json")
        try:
            index = _read_json_member(archive, "index.json")
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DictionaryLoadError(f"Invalid index.json in {path}: {e}") from e
        if not isinstance(index, dict):
            raise DictionaryLoadError(f"Invalid index.json in {path}")

        version = index.get("version") or index.get("format") or 1
        if version not in SUPPORTED_FORMATS:
            raise DictionaryLoadError(f"Unsupported Yomitan format {version} in {path}")

        title = str(index.get("title") or path.stem)
        revision = str(index.get("revision") or "")

        rows: list[tuple[int, int, DictionaryEntry]] = []
        meta_rows = []
        skipped = 0
        row_id = 0

        for name in sorted(names):
            is_term_bank = name.startswith("term_bank_") and name.endswith(".json")
            is_meta_bank = name.startswith("term_meta_bank_") and name.endswith(".json")
            if not (is_term_bank or is_meta_bank):
                continue
            try:
                bank = _read_json_member(archive, name)
            except (json.JSONDecodeError, UnicodeDecodeError):
                logger.warning(f"Skipping unreadable {name} in {path}")
                continue
            if not isinstance(bank, list):
                logger.warning(f"Skipping {name} in {path}: not a JSON array")
                continue

            if is_meta_bank:
                meta_rows.extend(bank)
                continue

            for row in bank:
                parsed = _parse_term_row(row, version, source_id, row_id)
                row_id += 1
                if parsed is None:
                    skipped += 1
                    continue
                sequence, entry = parsed
                rows.append((sequence, len(rows), entry))

    rows.sort(key=lambda r: (r[0], r[1]))
    source = DictionarySource(source_id, (entry for _, _, entry in rows), title=title, revision=revision)
    dictionary = ImportedDictionary(title=title, revision=revision, format=version, source=source)

    for row in meta_rows:
        if not _parse_meta_row(row, dictionary):
            skipped += 1
    dictionary.skipped_rows = skipped

    if skipped:
        logger.debug(f"Skipped {skipped} malformed rows in {path}")
    logger.info(
        f"Read {title!r} rev {revision or '?'}: {len(source)} terms, "
        f"{len(dictionary.frequencies)} frequencies, {len(dictionary.pitch_accents)} pitch accents"
    )
    return dictionary
