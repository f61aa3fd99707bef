# This project was developed with assistance from AI tools.
"""Client-side checklist editing with field-level dirty tracking.

Every edit updates the local checklist and records which leaf it touched in a
``DirtyMask``. Saves are debounced: each edit restarts a fixed timer, and when
it fires the current checklist and mask go out as one merge request.

- success: the mask is cleared and the local checklist replaced with the
  merged result from the server. Edits made while the request was in flight
  are rebased onto that result and stay dirty for the next save;
- failure: mask and checklist are kept and the timer is re-armed, so the
  next fire retries with the accumulated dirt.

Only one save runs at a time.

Structural edits (toggling a category, adding or removing a document) mark
the whole category and never set per-document flags; the merge trusts the
full local document list for such a category.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from portal_db.enums import DocumentStatus

from ..core.config import settings
from ..core.vocabulary import DEFAULT_VOCABULARY, ChecklistVocabulary
from ..schemas.checklist import Category, Checklist, DirtyMask, DocumentEntry
from .merge import merge_checklists

logger = logging.getLogger(__name__)

SaveCallback = Callable[[Checklist, DirtyMask], Awaitable[Checklist]]


class ChecklistEditError(Exception):
    """Raised when an edit targets a category or document that does not exist."""


class ChecklistTracker:
    """Local checklist copy plus the dirty mask accumulated since the last sync."""

    def __init__(
        self,
        checklist: Checklist,
        on_save: SaveCallback,
        *,
        debounce_seconds: float | None = None,
        vocabulary: ChecklistVocabulary = DEFAULT_VOCABULARY,
    ):
        self._checklist = checklist
        self._dirty = DirtyMask()
        self._on_save = on_save
        self._debounce_seconds = (
            settings.SYNC_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        )
        self._vocabulary = vocabulary
        self._timer: asyncio.TimerHandle | None = None
        self._saving = False
        self._save_lock = asyncio.Lock()
        # Flags set while a save is in flight; None when no save is running
        self._touched_during_save: DirtyMask | None = None
        self._closed = False
        # Retain references so pending saves are not garbage collected
        self._save_tasks: set[asyncio.Task] = set()
        self.last_error: Exception | None = None

    @property
    def checklist(self) -> Checklist:
        return self._checklist

    @property
    def dirty(self) -> DirtyMask:
        return self._dirty

    @property
    def is_saving(self) -> bool:
        return self._saving

    @property
    def has_pending_changes(self) -> bool:
        return not self._dirty.is_clean()

    def reset(self, checklist: Checklist) -> None:
        """Adopt a freshly loaded checklist, discarding unsaved edits."""
        self._cancel_timer()
        self._checklist = checklist
        self._dirty.clear()
        if self._touched_during_save is not None:
            self._touched_during_save = DirtyMask()
        self.last_error = None

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def _category(self, key: str) -> Category:
        category = self._checklist.categories.get(key)
        if category is None:
            raise ChecklistEditError(f"Unknown category: {key}")
        return category

    def _document_index(self, key: str, index: int) -> Category:
        category = self._category(key)
        if category.document_at(index) is None:
            raise ChecklistEditError(
                f"Document index {index} out of range for category {key} "
                f"({len(category.documents)} documents)"
            )
        return category

    def _replace_category(self, key: str, category: Category) -> None:
        categories = {**self._checklist.categories, key: category}
        self._checklist = self._checklist.model_copy(update={"categories": categories})

    def _replace_document(self, key: str, index: int, **changes) -> None:
        category = self._document_index(key, index)
        documents = list(category.documents)
        documents[index] = documents[index].model_copy(update=changes)
        self._replace_category(key, category.model_copy(update={"documents": tuple(documents)}))

    def _mark(self, touch: Callable[[DirtyMask], None]) -> None:
        touch(self._dirty)
        if self._touched_during_save is not None:
            touch(self._touched_during_save)
        self._schedule_save()

    def toggle_section(self, section: str) -> None:
        sections = list(self._checklist.sections)
        if section in sections:
            sections.remove(section)
        else:
            sections.append(section)
        self._checklist = Checklist(sections=sections, categories=self._checklist.categories)
        self._mark(lambda mask: mask.touch_sections())

    def toggle_category(self, key: str) -> None:
        """Flip a category's active flag; an unseen category is created active."""
        category = self._checklist.categories.get(key)
        if category is None:
            category = Category(label=self._vocabulary.label_for(key), active=True)
        else:
            category = category.model_copy(update={"active": not category.active})
        self._replace_category(key, category)
        self._mark(lambda mask: mask.touch_category(key))

    def add_document(self, key: str, name: str) -> int:
        """Append a not-yet-submitted document and return its index."""
        category = self._category(key)
        documents = (*category.documents, DocumentEntry(name=name))
        self._replace_category(key, category.model_copy(update={"documents": documents}))
        self._mark(lambda mask: mask.touch_category(key))
        return len(documents) - 1

    def remove_document(self, key: str, index: int) -> None:
        """Delete the document at ``index``; later documents shift down by one."""
        category = self._document_index(key, index)
        documents = category.documents[:index] + category.documents[index + 1 :]
        self._replace_category(key, category.model_copy(update={"documents": documents}))
        self._mark(lambda mask: mask.touch_category(key))

    def rename_document(self, key: str, index: int, name: str) -> None:
        self._replace_document(key, index, name=name)
        self._mark(lambda mask: mask.touch_name(key, index))

    def set_document_status(self, key: str, index: int, status: DocumentStatus | str) -> None:
        try:
            status = DocumentStatus(status)
        except ValueError as exc:
            raise ChecklistEditError(f"Invalid document status: {status}") from exc
        self._replace_document(key, index, status=status)
        self._mark(lambda mask: mask.touch_status(key, index))

    def mark_uploaded(self, key: str, index: int) -> None:
        """Record a successful upload: the document now awaits review."""
        self.set_document_status(key, index, DocumentStatus.PENDING_REVIEW)

    # ------------------------------------------------------------------
    # Debounced save
    # ------------------------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule_save(self) -> None:
        self._cancel_timer()
        if self._closed:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop: the owner drives saves through flush()
            return
        self._timer = loop.call_later(self._debounce_seconds, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        if self._saving:
            # One request at a time; try again after another quiet period
            self._schedule_save()
            return
        task = asyncio.get_running_loop().create_task(self.flush(), name="checklist-save")
        self._save_tasks.add(task)
        task.add_done_callback(self._save_tasks.discard)

    async def flush(self) -> bool:
        """Send pending changes now. Returns True when nothing is left unsaved.

        Waits for a save already in flight, then sends whatever is still dirty.
        """
        self._cancel_timer()
        async with self._save_lock:
            return await self._send()

    async def _send(self) -> bool:
        if self._dirty.is_clean():
            return True

        snapshot = self._checklist
        mask = self._dirty.model_copy(deep=True)
        self._saving = True
        self._touched_during_save = DirtyMask()
        try:
            merged = await self._on_save(snapshot, mask)
        except Exception as exc:
            self.last_error = exc
            logger.warning("Checklist save failed, keeping local changes for retry: %s", exc)
            self._schedule_save()
            return False
        finally:
            self._saving = False
            touched, self._touched_during_save = self._touched_during_save, None

        self.last_error = None
        if touched.is_clean():
            self._checklist = merged
            self._dirty.clear()
            return True

        # Edits arrived mid-request: keep them on top of the merged result
        self._checklist = merge_checklists(merged, self._checklist, touched)
        self._dirty = touched
        self._schedule_save()
        return False

    async def aclose(self) -> None:
        """Stop scheduling saves and wait for an in-flight save to finish."""
        self._closed = True
        self._cancel_timer()
        if self._save_tasks:
            await asyncio.gather(*self._save_tasks, return_exceptions=True)
