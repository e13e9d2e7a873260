"""Bilingual profile knowledge base: schema, validation, loading and caching.

The dataset is a JSON document with ``version``, ``lastUpdated`` and a list of
Q&A ``entries``. It is validated once, converted to immutable models and
cached for the lifetime of the process.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_KNOWLEDGE_BASE_PATH = Path(__file__).parent / "data" / "profile.json"
DEFAULT_MIN_ENTRIES = 12

NonEmptyText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class MultilingualText(BaseModel):
    """Text available in every supported language."""

    model_config = ConfigDict(frozen=True)

    en: NonEmptyText
    fr: NonEmptyText

    def get(self, language: str) -> str:
        """Return the text for ``language`` ("en" or "fr")."""
        return getattr(self, language)


class KnowledgeEntry(BaseModel):
    """A single Q&A entry of the profile knowledge base.

    Attributes:
        id: Unique entry identifier.
        topic: Category such as "about", "skills" or "projects".
        question: Question in English and French.
        answer: Answer in English and French.
        tags: Keywords used for relevance scoring, in dataset order.
    """

    model_config = ConfigDict(frozen=True)

    id: NonEmptyText
    topic: NonEmptyText
    question: MultilingualText
    answer: MultilingualText
    tags: tuple[str, ...]


class KnowledgeDocument(BaseModel):
    """The dataset file as stored on disk."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: str
    last_updated: str = Field(..., alias="lastUpdated")
    entries: tuple[KnowledgeEntry, ...]


@dataclass(frozen=True)
class KnowledgeValidationError:
    """One problem found while validating the dataset."""

    entry_id: str
    field: str
    error: str

    def __str__(self) -> str:
        return f"[{self.entry_id}:{self.field}] {self.error}"


class KnowledgeBaseError(Exception):
    """Raised when the knowledge base cannot be loaded or is invalid."""

    def __init__(self, message: str, errors: list[KnowledgeValidationError] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


@dataclass(frozen=True)
class KnowledgeBase:
    """Read-only view over the loaded knowledge base."""

    version: str
    last_updated: str
    entries: tuple[KnowledgeEntry, ...]

    def get_entry(self, entry_id: str) -> KnowledgeEntry | None:
        return next((entry for entry in self.entries if entry.id == entry_id), None)

    def entries_by_topic(self, topic: str) -> list[KnowledgeEntry]:
        return [entry for entry in self.entries if entry.topic == topic]

    def entries_by_tag(self, tag: str) -> list[KnowledgeEntry]:
        return [entry for entry in self.entries if tag in entry.tags]

    def topics(self) -> list[str]:
        return sorted({entry.topic for entry in self.entries})

    def tags(self) -> list[str]:
        return sorted({tag for entry in self.entries for tag in entry.tags})

    def search(self, query: str, language: str = "en") -> list[KnowledgeEntry]:
        """Return entries whose question, answer or tags contain ``query``.

        Plain case-insensitive substring filter, in dataset order. Use
        ``find_relevant_entries`` for ranked retrieval.
        """
        needle = query.lower()
        return [
            entry
            for entry in self.entries
            if needle in entry.question.get(language).lower()
            or needle in entry.answer.get(language).lower()
            or needle in " ".join(entry.tags).lower()
        ]

    def metadata(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "last_updated": self.last_updated,
            "entry_count": len(self.entries),
        }

    def to_document(self) -> dict[str, Any]:
        """Return the dataset in its on-disk JSON layout."""
        return KnowledgeDocument(
            version=self.version,
            last_updated=self.last_updated,
            entries=self.entries,
        ).model_dump(mode="json", by_alias=True)


def _raw_entry_id(raw_entries: Any, index: int) -> str:
    if isinstance(raw_entries, list) and index < len(raw_entries):
        entry = raw_entries[index]
        if isinstance(entry, dict) and isinstance(entry.get("id"), str) and entry["id"]:
            return entry["id"]
    return "unknown"


def _schema_errors(exc: ValidationError, raw_entries: Any) -> list[KnowledgeValidationError]:
    """Map pydantic errors to entry-scoped validation errors."""
    errors: list[KnowledgeValidationError] = []
    for error in exc.errors(include_url=False, include_input=False):
        loc = error["loc"]
        if len(loc) >= 2 and loc[0] == "entries" and isinstance(loc[1], int):
            entry_id = _raw_entry_id(raw_entries, loc[1])
            field = ".".join(str(part) for part in loc[2:]) or "entry"
        else:
            entry_id = "root"
            field = ".".join(str(part) for part in loc) or "data"
        errors.append(KnowledgeValidationError(entry_id, field, error["msg"]))
    return errors


def _check_document(
    data: Any,
    min_entries: int,
) -> tuple[KnowledgeDocument | None, list[KnowledgeValidationError]]:
    raw_entries = data.get("entries") if isinstance(data, dict) else None
    document: KnowledgeDocument | None = None
    errors: list[KnowledgeValidationError] = []

    try:
        document = KnowledgeDocument.model_validate(data)
    except ValidationError as e:
        errors.extend(_schema_errors(e, raw_entries))

    if not isinstance(raw_entries, list):
        return None, errors

    if len(raw_entries) < min_entries:
        errors.append(
            KnowledgeValidationError(
                "root",
                "entries",
                f"Knowledge base must contain at least {min_entries} entries, "
                f"found {len(raw_entries)}",
            )
        )

    seen: set[str] = set()
    for index in range(len(raw_entries)):
        entry_id = _raw_entry_id(raw_entries, index)
        if entry_id == "unknown":
            continue
        if entry_id in seen:
            errors.append(
                KnowledgeValidationError(entry_id, "id", f"Duplicate entry ID: {entry_id}")
            )
        seen.add(entry_id)

    return (None if errors else document), errors


def validate_knowledge_data(
    data: Any,
    min_entries: int = DEFAULT_MIN_ENTRIES,
) -> list[KnowledgeValidationError]:
    """Validate a raw knowledge base document.

    Schema problems come from the pydantic models; the entry count and
    duplicate ids are checked across entries.

    Args:
        data: Parsed JSON document.
        min_entries: Minimum number of entries required.

    Returns:
        All problems found; an empty list means the document is valid.
    """
    _, errors = _check_document(data, min_entries)
    return errors


def parse_knowledge_data(data: Any, min_entries: int = DEFAULT_MIN_ENTRIES) -> KnowledgeBase:
    """Validate a raw document and build a ``KnowledgeBase`` from it.

    Raises:
        KnowledgeBaseError: If the document fails validation.
    """
    document, errors = _check_document(data, min_entries)
    if document is None:
        raise KnowledgeBaseError(
            f"Knowledge base validation failed with {len(errors)} error(s)", errors
        )

    return KnowledgeBase(
        version=document.version,
        last_updated=document.last_updated,
        entries=document.entries,
    )


def read_knowledge_file(path: Path) -> Any:
    """Read and decode a knowledge base JSON file.

    Raises:
        KnowledgeBaseError: If the file is missing or not valid JSON.
    """
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise KnowledgeBaseError(f"Knowledge base file not found: {path.name}") from e
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise KnowledgeBaseError(f"Knowledge base file is unreadable: {path.name}") from e


def load_knowledge_base(
    path: Path | str = DEFAULT_KNOWLEDGE_BASE_PATH,
    min_entries: int = DEFAULT_MIN_ENTRIES,
) -> KnowledgeBase:
    """Load and validate the knowledge base from disk (uncached)."""
    path = Path(path)
    knowledge_base = parse_knowledge_data(read_knowledge_file(path), min_entries=min_entries)
    logger.info(
        f"Loaded knowledge base {path.name} "
        f"(version {knowledge_base.version}, {len(knowledge_base.entries)} entries)"
    )
    return knowledge_base


# Process-wide cache, keyed by the source it was loaded from
_knowledge_base: KnowledgeBase | None = None
_knowledge_source: tuple[Path, int] | None = None


def get_knowledge_base(
    path: Path | str = DEFAULT_KNOWLEDGE_BASE_PATH,
    min_entries: int = DEFAULT_MIN_ENTRIES,
) -> KnowledgeBase:
    """Get or load the cached knowledge base.

    The dataset is read once per source; later calls return the same
    immutable instance. A failed load is not cached, so the next call
    retries.

    Raises:
        KnowledgeBaseError: If the dataset cannot be loaded or is invalid.
    """
    global _knowledge_base, _knowledge_source
    source = (Path(path), min_entries)
    if _knowledge_base is None or _knowledge_source != source:
        _knowledge_base = load_knowledge_base(path, min_entries=min_entries)
        _knowledge_source = source
    return _knowledge_base


def clear_knowledge_base_cache() -> None:
    """Forget the cached knowledge base so the next access reloads it."""
    global _knowledge_base, _knowledge_source
    _knowledge_base = None
    _knowledge_source = None
