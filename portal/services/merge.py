# This project was developed with assistance from AI tools.
"""Field-level merge of a locally edited checklist into the authoritative one.

Several actors (the client's browser, the admin console, the CRM card) edit
the same checklist concurrently. Each sends its whole local snapshot plus a
dirty mask; the merge keeps the sender's own edits and everything else from
the latest stored snapshot:

- untouched categories come from the authoritative snapshot verbatim;
- a structurally touched category (toggled, document added or removed) takes
  its shape, labels and names from the local snapshot, but statuses the
  sender did not touch come from the authoritative document at the same
  index, so an admin's "accepted" is not rolled back;
- a category with only per-document dirt keeps the authoritative label and
  active flag, taking each flagged name/status from the local snapshot.

Documents are addressed by position, not by a stable id.
"""

from ..schemas.checklist import Category, Checklist, DirtyMask, DocumentEntry


def _missing_category(local: Category) -> Category:
    """Stand-in for a category the authoritative snapshot does not have yet."""
    return Category(label=local.label, active=False, documents=())


def _merge_structural(key: str, auth: Category, local: Category, dirty: DirtyMask) -> Category:
    documents = []
    for index, doc in enumerate(local.documents):
        auth_doc = auth.document_at(index)
        if dirty.status_touched(key, index) or auth_doc is None:
            status = doc.status
        else:
            status = auth_doc.status
        documents.append(DocumentEntry(name=doc.name, status=status))
    return Category(label=local.label, active=local.active, documents=tuple(documents))


def _merge_fields(key: str, auth: Category, local: Category, dirty: DirtyMask) -> Category:
    documents = []
    for index, doc in enumerate(local.documents):
        auth_doc = auth.document_at(index)

        if dirty.name_touched(key, index) or auth_doc is None or not auth_doc.name:
            name = doc.name
        else:
            name = auth_doc.name

        if dirty.status_touched(key, index) or auth_doc is None:
            status = doc.status
        else:
            status = auth_doc.status

        documents.append(DocumentEntry(name=name, status=status))
    return auth.model_copy(update={"documents": tuple(documents)})


def merge_checklists(authoritative: Checklist, local: Checklist, dirty: DirtyMask) -> Checklist:
    """Merge ``local`` into ``authoritative`` as directed by ``dirty``.

    Pure and total: never raises for parsed checklists and never drops a
    category present in ``authoritative``.

    Args:
        authoritative: Latest snapshot read from the checklist store.
        local: The sender's full local snapshot.
        dirty: Leaves the sender modified since its last successful sync.

    Returns:
        The checklist to persist and hand back to the sender.
    """
    sections = local.sections if dirty.sections_touched else authoritative.sections

    categories = dict(authoritative.categories)
    for key, local_category in local.categories.items():
        auth_category = authoritative.categories.get(key) or _missing_category(local_category)

        if dirty.is_structural(key):
            categories[key] = _merge_structural(key, auth_category, local_category, dirty)
        elif dirty.has_field_dirt(key):
            categories[key] = _merge_fields(key, auth_category, local_category, dirty)
        # otherwise the local copy is stale; keep whatever the store has

    return Checklist(sections=sections, categories=categories)
