# This project was developed with assistance from AI tools.
"""Checklist and dirty-mask schemas.

The CRM stores a project's checklist as a JSON blob in which the ``_meta``
entry (selected sections) sits beside the category entries. Parsing splits
that blob into two distinct shapes -- ``SectionsMeta`` and ``Category`` --
so nothing downstream has to probe a value to find out which one it holds.

Parsing is lenient: malformed categories and documents are replaced with
defaults instead of raising, and document positions are always preserved.
"""

import json
import logging
from typing import Any

from portal_db.enums import CategoryStatus, DocumentStatus, SectionId
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

META_KEY = "_meta"
DEFAULT_SECTIONS: tuple[str, ...] = (SectionId.PERSONAL.value,)


class DocumentEntry(BaseModel):
    """One requested document slot within a category."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    status: DocumentStatus = DocumentStatus.NOT_SUBMITTED


class Category(BaseModel):
    """A grouping of requested documents (e.g. W-2s)."""

    model_config = ConfigDict(frozen=True)

    label: str
    active: bool = False
    documents: tuple[DocumentEntry, ...] = ()

    def document_at(self, index: int) -> DocumentEntry | None:
        """Return the document at ``index``, or None when the slot does not exist."""
        if 0 <= index < len(self.documents):
            return self.documents[index]
        return None

    def to_wire(self) -> dict[str, Any]:
        status = CategoryStatus.ACTIVE if self.active else CategoryStatus.INACTIVE
        return {
            "label": self.label,
            "status": status.value,
            "documents": [doc.model_dump(mode="json") for doc in self.documents],
        }


class SectionsMeta(BaseModel):
    """The ``_meta`` entry of the stored checklist blob."""

    model_config = ConfigDict(populate_by_name=True)

    selected_sections: list[str] = Field(default_factory=list, alias="selectedSections")

    @field_validator("selected_sections", mode="before")
    @classmethod
    def _keep_strings(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [section for section in value if isinstance(section, str)]


def _normalize_sections(value: Any) -> tuple[str, ...]:
    sections: list[str] = []
    for section in value or ():
        if isinstance(section, str) and section and section not in sections:
            sections.append(section)
    return tuple(sections) or DEFAULT_SECTIONS


class Checklist(BaseModel):
    """The full per-project checklist: selected sections plus categories."""

    model_config = ConfigDict(frozen=True)

    sections: tuple[str, ...] = DEFAULT_SECTIONS
    categories: dict[str, Category] = Field(default_factory=dict)

    @field_validator("sections", mode="before")
    @classmethod
    def _dedupe_sections(cls, value: Any) -> tuple[str, ...]:
        return _normalize_sections(value)

    @classmethod
    def from_document_data(cls, data: str | dict | None) -> "Checklist":
        """Build a checklist from the CRM ``document_data`` value.

        Accepts the raw JSON string or an already-decoded mapping. Missing or
        undecodable data yields the default checklist.
        """
        if data is None or data == "":
            return cls()
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except ValueError:
                logger.warning("Failed to parse document_data, returning default")
                return cls()
        if not isinstance(data, dict):
            logger.warning("document_data is not an object (%s), returning default", type(data).__name__)
            return cls()

        try:
            meta = SectionsMeta.model_validate(data.get(META_KEY) or {})
        except ValidationError:
            logger.warning("Malformed %s entry in document_data, using default sections", META_KEY)
            meta = SectionsMeta()
        categories = {
            key: parse_category(key, value) for key, value in data.items() if key != META_KEY
        }
        return cls(sections=meta.selected_sections, categories=categories)

    def to_document_data(self) -> dict[str, Any]:
        """Serialise back to the CRM blob shape (``_meta`` first, then categories)."""
        data: dict[str, Any] = {
            META_KEY: SectionsMeta(selected_sections=list(self.sections)).model_dump(by_alias=True)
        }
        for key, category in self.categories.items():
            data[key] = category.to_wire()
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_document_data())


def parse_document(raw: Any) -> DocumentEntry:
    """Parse one document entry, substituting defaults for malformed fields."""
    if not isinstance(raw, dict):
        return DocumentEntry()
    name = raw.get("name")
    try:
        status = DocumentStatus(raw.get("status"))
    except ValueError:
        status = DocumentStatus.NOT_SUBMITTED
    return DocumentEntry(name=name if isinstance(name, str) else "", status=status)


def parse_category(key: str, raw: Any) -> Category:
    """Parse one category entry; a non-object value becomes an empty inactive category."""
    if not isinstance(raw, dict):
        logger.warning("Category %r is malformed, substituting an empty category", key)
        return Category(label=key)

    label = raw.get("label")
    documents = raw.get("documents")
    if not isinstance(documents, list):
        documents = []

    status = raw.get("status")
    if isinstance(status, bool):
        active = status
    else:
        active = status == CategoryStatus.ACTIVE.value

    return Category(
        label=label if isinstance(label, str) and label else key,
        active=active,
        documents=tuple(parse_document(doc) for doc in documents),
    )


class DirtyMask(BaseModel):
    """Which leaves of a locally held checklist changed since the last sync.

    Only ``True`` flags carry meaning: false flags and empty per-category maps
    are dropped on validation, so a category with any entry in
    ``document_name_touched``/``document_status_touched`` has real dirt.

    Wire names follow the portal's request body: ``sections``, ``categories``,
    ``documents`` (names) and ``statuses``.
    """

    model_config = ConfigDict(populate_by_name=True)

    sections_touched: bool = Field(default=False, alias="sections")
    category_touched: dict[str, bool] = Field(default_factory=dict, alias="categories")
    document_name_touched: dict[str, dict[int, bool]] = Field(
        default_factory=dict, alias="documents"
    )
    document_status_touched: dict[str, dict[int, bool]] = Field(
        default_factory=dict, alias="statuses"
    )

    @field_validator("category_touched")
    @classmethod
    def _drop_clean_categories(cls, value: dict[str, bool]) -> dict[str, bool]:
        return {key: True for key, flag in value.items() if flag}

    @field_validator("document_name_touched", "document_status_touched")
    @classmethod
    def _drop_clean_documents(
        cls, value: dict[str, dict[int, bool]]
    ) -> dict[str, dict[int, bool]]:
        cleaned = {}
        for key, flags in value.items():
            touched = {index: True for index, flag in flags.items() if flag}
            if touched:
                cleaned[key] = touched
        return cleaned

    # -- queries --

    def is_clean(self) -> bool:
        return not (
            self.sections_touched
            or self.category_touched
            or self.document_name_touched
            or self.document_status_touched
        )

    def is_structural(self, key: str) -> bool:
        return self.category_touched.get(key, False)

    def has_field_dirt(self, key: str) -> bool:
        return bool(self.document_name_touched.get(key) or self.document_status_touched.get(key))

    def name_touched(self, key: str, index: int) -> bool:
        return self.document_name_touched.get(key, {}).get(index, False)

    def status_touched(self, key: str, index: int) -> bool:
        return self.document_status_touched.get(key, {}).get(index, False)

    # -- mutations (client-side accumulator) --

    def touch_sections(self) -> None:
        self.sections_touched = True

    def touch_category(self, key: str) -> None:
        self.category_touched[key] = True

    def touch_name(self, key: str, index: int) -> None:
        self.document_name_touched.setdefault(key, {})[index] = True

    def touch_status(self, key: str, index: int) -> None:
        self.document_status_touched.setdefault(key, {})[index] = True

    def clear(self) -> None:
        self.sections_touched = False
        self.category_touched = {}
        self.document_name_touched = {}
        self.document_status_touched = {}
