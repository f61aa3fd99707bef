# This project was developed with assistance from AI tools.
"""Server side of a checklist save: read, merge, write, audit.

The read-merge-write sequence is not atomic. A write from another actor that
lands between our read and our write is overwritten; the window is bounded by
one store round-trip and is not detected.
"""

import logging

from ..schemas.checklist import Checklist, DirtyMask
from .audit import AuditRecorder
from .merge import merge_checklists
from .progress import summarize_changes
from .store import ChecklistPersistenceError, ChecklistStore, ChecklistStoreError

logger = logging.getLogger(__name__)


async def sync_checklist(
    store: ChecklistStore,
    project_id: str,
    local: Checklist,
    dirty: DirtyMask,
    *,
    actor: str,
    audit: AuditRecorder | None = None,
) -> Checklist:
    """Merge a client's local checklist into the stored one and persist it.

    1. Read the authoritative checklist from the store
    2. Merge ``local`` into it as directed by ``dirty``
    3. Write the merged checklist back
    4. Record the change with the audit recorder (failures are only logged)
    5. Return the merged checklist for the client to adopt

    Raises:
        ChecklistStoreError: The authoritative checklist could not be read.
        ChecklistPersistenceError: The merged checklist could not be written.
            Retryable; the client must keep its dirty mask.
    """
    authoritative = await store.read(project_id)
    merged = merge_checklists(authoritative, local, dirty)

    try:
        await store.write(project_id, merged)
    except ChecklistStoreError as exc:
        logger.warning("Persisting merged checklist failed (project_id=%s): %s", project_id, exc)
        raise ChecklistPersistenceError(
            f"Could not save checklist for project {project_id}"
        ) from exc

    if audit is not None:
        summary = {
            "modified_fields": dirty.model_dump(by_alias=True),
            "changes": summarize_changes(authoritative, merged),
        }
        try:
            await audit.record(project_id, actor, summary)
        except Exception:
            logger.exception("Audit recording failed (project_id=%s)", project_id)

    logger.info("Checklist synced (project_id=%s, actor=%s)", project_id, actor)
    return merged
