# This project was developed with assistance from AI tools.
"""Checklist progress: document counts for the admin view and change summaries."""

from typing import Any

from portal_db.enums import DocumentStatus, TaxStage
from pydantic import BaseModel

from ..core.vocabulary import DEFAULT_VOCABULARY, ChecklistVocabulary
from ..schemas.checklist import Category, Checklist


class ChecklistStats(BaseModel):
    """Document counts across every category of a checklist."""

    total: int = 0
    pending_review: int = 0
    accepted: int = 0


def checklist_stats(checklist: Checklist) -> ChecklistStats:
    """Count documents, including those in inactive categories."""
    stats = ChecklistStats()
    for category in checklist.categories.values():
        for doc in category.documents:
            stats.total += 1
            if doc.status == DocumentStatus.PENDING_REVIEW:
                stats.pending_review += 1
            elif doc.status == DocumentStatus.ACCEPTED:
                stats.accepted += 1
    return stats


def normalized_stage(
    pipeline_stage_id: str | None,
    vocabulary: ChecklistVocabulary = DEFAULT_VOCABULARY,
) -> TaxStage:
    return vocabulary.normalized_stage(pipeline_stage_id)


def _category_changes(before: Category | None, after: Category) -> dict[str, Any]:
    changes: dict[str, Any] = {}
    if before is None:
        changes["created"] = True
        before = Category(label=after.label)
    if before.label != after.label:
        changes["label"] = [before.label, after.label]
    if before.active != after.active:
        changes["active"] = [before.active, after.active]

    documents = []
    for index in range(max(len(before.documents), len(after.documents))):
        old, new = before.document_at(index), after.document_at(index)
        if old == new:
            continue
        entry: dict[str, Any] = {"index": index}
        if old is None:
            entry["added"] = new.model_dump(mode="json")
        elif new is None:
            entry["removed"] = old.model_dump(mode="json")
        else:
            if old.name != new.name:
                entry["name"] = [old.name, new.name]
            if old.status != new.status:
                entry["status"] = [old.status.value, new.status.value]
        documents.append(entry)
    if documents:
        changes["documents"] = documents
    return changes


def summarize_changes(before: Checklist, after: Checklist) -> dict[str, Any]:
    """Describe what a write changed, for the audit trail.

    Categories are never removed by a merge, so only categories present in
    ``after`` are compared.
    """
    summary: dict[str, Any] = {}
    if before.sections != after.sections:
        summary["sections"] = [list(before.sections), list(after.sections)]

    categories = {}
    for key, category in after.categories.items():
        changes = _category_changes(before.categories.get(key), category)
        if changes:
            categories[key] = changes
    if categories:
        summary["categories"] = categories
    return summary
