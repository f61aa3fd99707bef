# This project was developed with assistance from AI tools.
"""Fold completed file uploads into checklist state.

File handling itself happens elsewhere; a successful upload only reports
which checklist slot it satisfied. That slot moves to ``pending_review``
through the normal dirty-tracked merge path, so a concurrent admin edit to
other documents is not overwritten.
"""

import logging
from dataclasses import dataclass

from portal_db.enums import DocumentStatus

from ..schemas.checklist import Checklist, DirtyMask, DocumentEntry
from .audit import AuditRecorder
from .checklist_sync import sync_checklist
from .store import ChecklistStore
from .tracker import ChecklistTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadCompletion:
    """The checklist slot a finished upload belongs to."""

    category_key: str
    document_index: int

    def fold_into(self, tracker: ChecklistTracker) -> None:
        """Queue the status change on a client-side tracker."""
        tracker.mark_uploaded(self.category_key, self.document_index)

    def as_edit(self, checklist: Checklist) -> tuple[Checklist, DirtyMask] | None:
        """Return ``checklist`` with the slot marked pending review plus its mask.

        None when the slot does not exist in ``checklist``.
        """
        category = checklist.categories.get(self.category_key)
        if category is None or category.document_at(self.document_index) is None:
            return None

        documents = list(category.documents)
        documents[self.document_index] = DocumentEntry(
            name=documents[self.document_index].name,
            status=DocumentStatus.PENDING_REVIEW,
        )
        categories = {
            **checklist.categories,
            self.category_key: category.model_copy(update={"documents": tuple(documents)}),
        }
        dirty = DirtyMask()
        dirty.touch_status(self.category_key, self.document_index)
        return checklist.model_copy(update={"categories": categories}), dirty


async def record_upload(
    store: ChecklistStore,
    project_id: str,
    completion: UploadCompletion,
    *,
    actor: str,
    audit: AuditRecorder | None = None,
) -> Checklist:
    """Mark the uploaded document as pending review in the stored checklist.

    An upload that names a slot the checklist no longer has leaves the
    checklist untouched; the file itself is still kept by the caller.
    """
    current = await store.read(project_id)
    edit = completion.as_edit(current)
    if edit is None:
        logger.warning(
            "Upload for missing checklist slot (project_id=%s, category=%s, index=%s)",
            project_id,
            completion.category_key,
            completion.document_index,
        )
        return current

    local, dirty = edit
    return await sync_checklist(store, project_id, local, dirty, actor=actor, audit=audit)
