"""
Record Editor — Typed add/update/delete over the document's list fields.

Each list field of the document is bound once to a `RecordCollection`
carrying its record type. Every operation is pure: it returns a new
document in which only the named field differs, so callers can detect
change with an identity check (`new is not old`).

## Usage

    from schoolportal.editing.records import get_collection

    notices = get_collection("notices")
    doc, notice = notices.add(doc, {"title": "Holiday", "important": True})
    doc = notices.update(doc, notice.id, {"title": "Eid Holiday"})
    doc = notices.delete(doc, notice.id)
"""

from __future__ import annotations

import logging
import random
import secrets
import time
from typing import Any, Dict, Generic, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel

from ..models.document import (
    AcademicFile,
    AdmissionApplication,
    Banner,
    ClassInfoLink,
    ClassTeacherAssignment,
    DriveFolder,
    Exam,
    Faculty,
    GalleryItem,
    NewsEvent,
    Notice,
    OfficeProfileItem,
    Record,
    Result,
    SchoolDocument,
    SchoolStats,
    SectionContent,
    ThemeConfig,
    TickerConfig,
    attribute_name,
    field_alias,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Record)


class UnknownCollectionError(KeyError):
    """Raised when a name does not refer to an editable document field."""

    def __init__(self, name: str, kind: str = "collection"):
        self.name = name
        self.kind = kind
        super().__init__(f"Unknown {kind}: {name}")

    def __str__(self) -> str:
        return f"Unknown {self.kind}: {self.name}"


# ── Helpers ──────────────────────────────────────────────────────


def new_record_id(existing: Iterable[str] = ()) -> str:
    """
    Timestamp-based id, unique within `existing`.

    A random suffix is appended when two records are created in the same
    millisecond.
    """
    taken = set(existing)
    base = str(int(time.time() * 1000))
    record_id = base
    while record_id in taken:
        record_id = f"{base}-{secrets.token_hex(3)}"
    return record_id


def to_wire_keys(model: Type[BaseModel], patch: Mapping[str, Any]) -> Dict[str, Any]:
    """Rewrite snake_case attribute names in `patch` to wire keys."""
    out: Dict[str, Any] = {}
    for key, value in patch.items():
        name = attribute_name(model, key)
        out[field_alias(model, name) if name else key] = value
    return out


def _merge(model: Type[T], record: T, patch: Mapping[str, Any]) -> T:
    """Shallow merge `patch` into `record`, revalidating the result."""
    data = record.model_dump(by_alias=True)
    data.update(to_wire_keys(model, patch))
    data["id"] = record.id
    return model.model_validate(data)


# ── Collections ──────────────────────────────────────────────────


class RecordCollection(Generic[T]):
    """Add/update/delete-by-id bound to one list field and its record type."""

    def __init__(self, field: str, model: Type[T], label: str = ""):
        self.field = field
        self.model = model
        self.label = label or field.replace("_", " ").title()

    @property
    def key(self) -> str:
        """Wire key of the field (e.g. ``newsEvents``)."""
        return field_alias(SchoolDocument, self.field)

    def items(self, document: SchoolDocument) -> List[T]:
        return list(getattr(document, self.field) or [])

    def find(self, document: SchoolDocument, record_id: str) -> Optional[T]:
        for item in self.items(document):
            if item.id == record_id:
                return item
        return None

    def _replace(self, document: SchoolDocument, items: List[T]) -> SchoolDocument:
        return document.model_copy(update={self.field: items})

    def build(self, document: SchoolDocument, patch: Mapping[str, Any]) -> T:
        """Validate `patch` into a new record with a fresh id."""
        data = to_wire_keys(self.model, patch)
        data["id"] = new_record_id(item.id for item in self.items(document))
        return self.model.model_validate(data)

    def add(
        self,
        document: SchoolDocument,
        patch: Mapping[str, Any],
        prepend: bool = True,
    ) -> Tuple[SchoolDocument, T]:
        """
        Create a record from `patch` and insert it.

        New records go to the front of the list (newest first) unless
        `prepend` is False.

        Raises:
            pydantic.ValidationError: if `patch` does not fit the record type
        """
        record = self.build(document, patch)
        items = self.items(document)
        items = [record, *items] if prepend else [*items, record]
        logger.debug(
            f"Added {self.field} record {record.id}",
            extra={"collection": self.field, "record_id": record.id},
        )
        return self._replace(document, items), record

    def append(self, document: SchoolDocument, record: T) -> SchoolDocument:
        """Append an already-built record, re-keying it if its id is taken."""
        items = self.items(document)
        if any(item.id == record.id for item in items) or not record.id:
            record = record.model_copy(update={"id": new_record_id(item.id for item in items)})
        return self._replace(document, [*items, record])

    def update(
        self,
        document: SchoolDocument,
        record_id: str,
        patch: Mapping[str, Any],
    ) -> SchoolDocument:
        """
        Shallow-merge `patch` into the record with `record_id`.

        Returns the same document object when no record matches.
        """
        items = self.items(document)
        for index, item in enumerate(items):
            if item.id == record_id:
                items[index] = _merge(self.model, item, patch)
                logger.debug(
                    f"Updated {self.field} record {record_id}",
                    extra={"collection": self.field, "record_id": record_id},
                )
                return self._replace(document, items)
        return document

    def delete(self, document: SchoolDocument, record_id: str) -> SchoolDocument:
        """
        Remove the record with `record_id`.

        Returns the same document object when no record matches.
        """
        items = self.items(document)
        kept = [item for item in items if item.id != record_id]
        if len(kept) == len(items):
            return document
        logger.debug(
            f"Deleted {self.field} record {record_id}",
            extra={"collection": self.field, "record_id": record_id},
        )
        return self._replace(document, kept)


COLLECTIONS: Dict[str, RecordCollection] = {
    c.field: c
    for c in [
        RecordCollection("news_events", NewsEvent, "News & Events"),
        RecordCollection("syllabuses", AcademicFile, "Syllabuses"),
        RecordCollection("class_routines", AcademicFile, "Class Routines"),
        RecordCollection("class_teachers", ClassTeacherAssignment, "Class Teachers"),
        RecordCollection("class_info_links", ClassInfoLink, "Class Info Links"),
        RecordCollection("assistant_head_teachers", Faculty, "Assistant Head Teachers"),
        RecordCollection("committee_members", Faculty, "School Committee"),
        RecordCollection("governing_body", Faculty, "Governing Body"),
        RecordCollection("banners", Banner, "Banners"),
        RecordCollection("notices", Notice, "Notices"),
        RecordCollection("exams", Exam, "Exams"),
        RecordCollection("results", Result, "Results"),
        RecordCollection("sections", SectionContent, "Sections"),
        RecordCollection("faculty", Faculty, "Teachers"),
        RecordCollection("gallery", GalleryItem, "Gallery"),
        RecordCollection("applications", AdmissionApplication, "Admission Applications"),
        RecordCollection("office_drive_links", DriveFolder, "Office Drive"),
        RecordCollection("office_profiles", OfficeProfileItem, "Office Profiles"),
    ]
}


def get_collection(name: str) -> RecordCollection:
    """Look up a collection by attribute name or wire key."""
    field = attribute_name(SchoolDocument, name)
    if field not in COLLECTIONS:
        raise UnknownCollectionError(name)
    return COLLECTIONS[field]


# ── Singletons and blocks ────────────────────────────────────────

# Optional record fields: set replaces, delete clears to unset.
SINGLETONS: Dict[str, Type[Record]] = {
    "head_teacher": Faculty,
}

# Embedded config objects: updated by field replacement only.
BLOCKS: Dict[str, Type[BaseModel]] = {
    "theme_config": ThemeConfig,
    "ticker_config": TickerConfig,
    "stats": SchoolStats,
}

# Set by DocumentStore.commit, never edited directly.
STAMPED_FIELDS = frozenset({"portal_schema", "revision"})


def _resolve(name: str, table: Mapping[str, Any], kind: str) -> str:
    field = attribute_name(SchoolDocument, name)
    if field not in table:
        raise UnknownCollectionError(name, kind)
    return field


def set_singleton(
    document: SchoolDocument,
    name: str,
    patch: Mapping[str, Any],
) -> SchoolDocument:
    """Merge `patch` into a singleton record, creating it if unset."""
    field = _resolve(name, SINGLETONS, "singleton")
    model = SINGLETONS[field]
    current = getattr(document, field)
    if current is None:
        data = to_wire_keys(model, patch)
        data["id"] = data.get("id") or new_record_id()
        value = model.model_validate(data)
    else:
        value = _merge(model, current, patch)
    return document.model_copy(update={field: value})


def clear_singleton(document: SchoolDocument, name: str) -> SchoolDocument:
    """Clear a singleton record to unset."""
    field = _resolve(name, SINGLETONS, "singleton")
    if getattr(document, field) is None:
        return document
    return document.model_copy(update={field: None})


def update_block(
    document: SchoolDocument,
    name: str,
    patch: Mapping[str, Any],
) -> SchoolDocument:
    """Replace fields of a config block (theme, ticker, stats)."""
    field = _resolve(name, BLOCKS, "block")
    model = BLOCKS[field]
    data = getattr(document, field).model_dump(by_alias=True)
    data.update(to_wire_keys(model, patch))
    return document.model_copy(update={field: model.model_validate(data)})


def update_fields(document: SchoolDocument, patch: Mapping[str, Any]) -> SchoolDocument:
    """
    Replace top-level scalar fields.

    Raises:
        UnknownCollectionError: for unknown keys, or keys naming a list,
            block or singleton field (those have their own operations), and
            for the fields stamped on commit
    """
    structured = set(COLLECTIONS) | set(SINGLETONS) | set(BLOCKS) | STAMPED_FIELDS
    for key in patch:
        field = attribute_name(SchoolDocument, key)
        if field is None or field in structured:
            raise UnknownCollectionError(key, "scalar field")
    data = document.model_dump(by_alias=True)
    data.update(to_wire_keys(SchoolDocument, patch))
    return SchoolDocument.model_validate(data)


# ── Dashboard helpers ────────────────────────────────────────────


def update_section_text(document: SchoolDocument, section_id: str, body: str) -> SchoolDocument:
    """Replace the body of a free-text section."""
    return COLLECTIONS["sections"].update(document, section_id, {"body": body})


def generate_reset_code() -> str:
    """Six-digit admin password reset code."""
    return str(random.SystemRandom().randint(100000, 999999))


def optimize_drive_link(url: str) -> str:
    """Turn a Google Drive share link into its embeddable preview URL."""
    if not url:
        return ""
    if "drive.google.com" in url and "/view" in url:
        return url.split("?")[0].replace("/view", "/preview")
    if "drive.google.com/file/d/" in url:
        parts = url.split("/")
        id_index = parts.index("d") + 1
        if id_index < len(parts) and parts[id_index]:
            return f"https://drive.google.com/file/d/{parts[id_index]}/preview"
    return url


def calculated_student_total(document: SchoolDocument) -> int:
    """Sum of per-class student counts from the class info links."""
    return sum(link.student_count or 0 for link in document.class_info_links)
