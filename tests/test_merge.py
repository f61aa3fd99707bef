# This project was developed with assistance from AI tools.
"""Tests for the field-level checklist merge."""

from portal.schemas.checklist import Checklist
from portal.services.merge import merge_checklists
from portal_db.enums import DocumentStatus

from .factories import make_category, make_checklist, make_dirty, make_doc

PENDING = DocumentStatus.PENDING_REVIEW
ACCEPTED = DocumentStatus.ACCEPTED
NOT_SUBMITTED = DocumentStatus.NOT_SUBMITTED


def _w2_checklist(status=PENDING, name="W2"):
    return make_checklist(
        w_2s=make_category(label="W-2s", active=True, documents=[(name, status)]),
    )


# ---------------------------------------------------------------------------
# General properties
# ---------------------------------------------------------------------------


def test_merge_with_no_local_change_is_identity():
    """merge(A, A, clean) == A."""
    checklist = make_checklist(
        sections=("personal", "entity"),
        w_2s=make_category(documents=[("W2 - Acme", PENDING), ("W2 - Beta", ACCEPTED)]),
        p_l=make_category(label="P&L", active=False),
        custom_key=make_category(label="Something new", documents=[("Receipt", NOT_SUBMITTED)]),
    )

    assert merge_checklists(checklist, checklist, make_dirty()) == checklist


def test_merge_never_drops_authoritative_categories():
    """Every authoritative category survives, even when local lacks it."""
    authoritative = make_checklist(
        w_2s=make_category(),
        k_1s=make_category(label="K-1s"),
        entity_income=make_category(label="Entity Income"),
    )
    local = make_checklist(w_2s=make_category(active=False))

    merged = merge_checklists(authoritative, local, make_dirty(categories={"w_2s": True}))

    assert set(merged.categories) == {"w_2s", "k_1s", "entity_income"}


def test_merge_adds_categories_only_known_locally():
    """A category the client created is added to the result."""
    authoritative = make_checklist(w_2s=make_category())
    local = make_checklist(
        w_2s=make_category(),
        charitable_donations=make_category(label="Charitable Donations", active=True),
    )

    merged = merge_checklists(
        authoritative, local, make_dirty(categories={"charitable_donations": True})
    )

    assert merged.categories["charitable_donations"].active is True
    assert merged.categories["charitable_donations"].label == "Charitable Donations"


def test_untouched_local_only_category_is_not_added():
    """A stale local-only category with no dirt never reaches the result."""
    authoritative = make_checklist(w_2s=make_category())
    local = make_checklist(w_2s=make_category(), k_1s=make_category(label="K-1s"))

    merged = merge_checklists(authoritative, local, make_dirty())

    assert "k_1s" not in merged.categories


def test_unknown_category_keys_pass_through():
    """Keys outside the vocabulary are merged like any other."""
    authoritative = make_checklist(crypto_statements=make_category(label="Crypto"))
    local = make_checklist(
        crypto_statements=make_category(label="Crypto", documents=[("Coinbase", PENDING)])
    )

    merged = merge_checklists(
        authoritative, local, make_dirty(categories={"crypto_statements": True})
    )

    assert merged.categories["crypto_statements"].documents == (make_doc("Coinbase", PENDING),)


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def test_sections_taken_from_local_when_touched():
    authoritative = make_checklist(sections=("personal",))
    local = make_checklist(sections=("personal", "entity"))

    merged = merge_checklists(authoritative, local, make_dirty(sections=True))

    assert merged.sections == ("personal", "entity")


def test_sections_taken_from_authoritative_when_untouched():
    """Another actor's section change is kept when ours is stale."""
    authoritative = make_checklist(sections=("personal", "entity"))
    local = make_checklist(sections=("personal",))

    merged = merge_checklists(authoritative, local, make_dirty())

    assert merged.sections == ("personal", "entity")


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


def test_scenario_a_touched_status_wins():
    """Local status edit is applied over the authoritative value."""
    authoritative = _w2_checklist(status=PENDING)
    local = _w2_checklist(status=ACCEPTED)

    merged = merge_checklists(authoritative, local, make_dirty(statuses={"w_2s": {0: True}}))

    assert merged.categories["w_2s"].documents[0].status == ACCEPTED


def test_scenario_b_untouched_status_discarded():
    """Without dirt the local status is stale and ignored."""
    authoritative = _w2_checklist(status=PENDING)
    local = _w2_checklist(status=ACCEPTED)

    merged = merge_checklists(authoritative, local, make_dirty())

    assert merged.categories["w_2s"].documents[0].status == PENDING


def test_scenario_c_structural_edit_keeps_foreign_status_advance():
    """Client added a document; admin accepted the first one meanwhile."""
    authoritative = make_checklist(w_2s=make_category(documents=[("W2 - Acme", ACCEPTED)]))
    local = make_checklist(
        w_2s=make_category(
            documents=[("W2 - Acme", NOT_SUBMITTED), ("W2 - Second job", NOT_SUBMITTED)]
        )
    )

    merged = merge_checklists(authoritative, local, make_dirty(categories={"w_2s": True}))

    documents = merged.categories["w_2s"].documents
    assert len(documents) == 2
    assert documents[0] == make_doc("W2 - Acme", ACCEPTED)
    assert documents[1] == make_doc("W2 - Second job", NOT_SUBMITTED)


def test_scenario_d_authoritative_only_category_unchanged():
    """A category added by a third actor appears verbatim."""
    k1 = make_category(label="K-1s", active=True, documents=[("K-1 Partnership", PENDING)])
    authoritative = make_checklist(w_2s=make_category(), k_1s=k1)
    local = make_checklist(w_2s=make_category(active=False))

    merged = merge_checklists(authoritative, local, make_dirty(categories={"w_2s": True}))

    assert merged.categories["k_1s"] == k1


# ---------------------------------------------------------------------------
# Structural dirtiness
# ---------------------------------------------------------------------------


def test_structural_edit_takes_local_shape_label_and_active_flag():
    authoritative = make_checklist(
        w_2s=make_category(label="W-2s", active=True, documents=[("A", PENDING), ("B", PENDING)])
    )
    local = make_checklist(
        w_2s=make_category(label="W-2 Forms", active=False, documents=[("B renamed", PENDING)])
    )

    merged = merge_checklists(authoritative, local, make_dirty(categories={"w_2s": True}))

    category = merged.categories["w_2s"]
    assert category.label == "W-2 Forms"
    assert category.active is False
    assert [d.name for d in category.documents] == ["B renamed"]


def test_structural_edit_honours_local_status_dirt():
    """A status the client touched wins even inside a structural change."""
    authoritative = make_checklist(w_2s=make_category(documents=[("A", ACCEPTED)]))
    local = make_checklist(
        w_2s=make_category(documents=[("A", DocumentStatus.MISSING_FILES), ("B", NOT_SUBMITTED)])
    )

    merged = merge_checklists(
        authoritative,
        local,
        make_dirty(categories={"w_2s": True}, statuses={"w_2s": {0: True}}),
    )

    assert merged.categories["w_2s"].documents[0].status == DocumentStatus.MISSING_FILES


def test_structural_edit_ignores_narrower_name_flags():
    """Names always come from local for a structurally touched category."""
    authoritative = make_checklist(w_2s=make_category(documents=[("Server name", PENDING)]))
    local = make_checklist(w_2s=make_category(documents=[("Local name", PENDING)]))

    merged = merge_checklists(authoritative, local, make_dirty(categories={"w_2s": True}))

    assert merged.categories["w_2s"].documents[0].name == "Local name"


def test_removal_aligns_statuses_by_position():
    """Positional identity: after a removal, statuses line up by index."""
    authoritative = make_checklist(
        w_2s=make_category(documents=[("A", ACCEPTED), ("B", PENDING), ("C", NOT_SUBMITTED)])
    )
    # Client removed "A"; "B" and "C" shifted down.
    local = make_checklist(
        w_2s=make_category(documents=[("B", PENDING), ("C", NOT_SUBMITTED)])
    )

    merged = merge_checklists(authoritative, local, make_dirty(categories={"w_2s": True}))

    documents = merged.categories["w_2s"].documents
    assert documents[0] == make_doc("B", ACCEPTED)
    assert documents[1] == make_doc("C", PENDING)


def test_structural_edit_on_category_missing_from_authoritative():
    """Missing authoritative category behaves as an empty inactive one."""
    authoritative = make_checklist()
    local = make_checklist(
        k_1s=make_category(label="K-1s", active=True, documents=[("K-1", PENDING)])
    )

    merged = merge_checklists(authoritative, local, make_dirty(categories={"k_1s": True}))

    assert merged.categories["k_1s"] == local.categories["k_1s"]


# ---------------------------------------------------------------------------
# Per-field dirtiness
# ---------------------------------------------------------------------------


def test_field_edit_keeps_authoritative_label_and_active_flag():
    authoritative = make_checklist(
        w_2s=make_category(label="W-2s (admin)", active=True, documents=[("A", PENDING)])
    )
    local = make_checklist(
        w_2s=make_category(label="W-2s", active=False, documents=[("A renamed", PENDING)])
    )

    merged = merge_checklists(authoritative, local, make_dirty(documents={"w_2s": {0: True}}))

    category = merged.categories["w_2s"]
    assert category.label == "W-2s (admin)"
    assert category.active is True
    assert category.documents[0].name == "A renamed"


def test_field_edit_mixes_local_and_authoritative_per_leaf():
    """Client renamed doc 0; admin accepted doc 0 and renamed doc 1."""
    authoritative = make_checklist(
        w_2s=make_category(documents=[("A", ACCEPTED), ("B (admin)", PENDING)])
    )
    local = make_checklist(
        w_2s=make_category(documents=[("A (client)", PENDING), ("B", NOT_SUBMITTED)])
    )

    merged = merge_checklists(authoritative, local, make_dirty(documents={"w_2s": {0: True}}))

    documents = merged.categories["w_2s"].documents
    assert documents[0] == make_doc("A (client)", ACCEPTED)
    assert documents[1] == make_doc("B (admin)", PENDING)


def test_field_edit_falls_back_to_local_beyond_authoritative_length():
    authoritative = make_checklist(w_2s=make_category(documents=[("A", PENDING)]))
    local = make_checklist(
        w_2s=make_category(documents=[("A", PENDING), ("B", DocumentStatus.MISSING_FILES)])
    )

    merged = merge_checklists(authoritative, local, make_dirty(statuses={"w_2s": {0: True}}))

    assert merged.categories["w_2s"].documents[1] == make_doc("B", DocumentStatus.MISSING_FILES)


def test_field_edit_follows_local_document_count():
    """Per-field merges iterate the local document list."""
    authoritative = make_checklist(
        w_2s=make_category(documents=[("A", PENDING), ("Added by admin", NOT_SUBMITTED)])
    )
    local = make_checklist(w_2s=make_category(documents=[("A", ACCEPTED)]))

    merged = merge_checklists(authoritative, local, make_dirty(statuses={"w_2s": {0: True}}))

    assert merged.categories["w_2s"].documents == (make_doc("A", ACCEPTED),)


def test_field_edit_uses_local_name_when_authoritative_name_empty():
    authoritative = make_checklist(w_2s=make_category(documents=[("", PENDING)]))
    local = make_checklist(w_2s=make_category(documents=[("Local", PENDING)]))

    merged = merge_checklists(authoritative, local, make_dirty(statuses={"w_2s": {0: True}}))

    assert merged.categories["w_2s"].documents[0].name == "Local"


def test_field_edit_on_category_missing_from_authoritative():
    """Default category is inactive and carries the local label."""
    authoritative = make_checklist()
    local = make_checklist(w_2s=make_category(label="W-2s", active=True, documents=[("A", PENDING)]))

    merged = merge_checklists(authoritative, local, make_dirty(statuses={"w_2s": {0: True}}))

    category = merged.categories["w_2s"]
    assert category.label == "W-2s"
    assert category.active is False
    assert category.documents == (make_doc("A", PENDING),)


def test_false_flags_do_not_count_as_dirt():
    """A mask of explicit False flags merges like a clean mask."""
    authoritative = _w2_checklist(status=PENDING, name="Server")
    local = _w2_checklist(status=ACCEPTED, name="Local")

    dirty = make_dirty(
        categories={"w_2s": False},
        documents={"w_2s": {0: False}},
        statuses={"w_2s": {0: False}},
    )
    merged = merge_checklists(authoritative, local, dirty)

    assert merged == authoritative


def test_merge_is_pure():
    """Inputs are left untouched."""
    authoritative = _w2_checklist(status=PENDING)
    local = _w2_checklist(status=ACCEPTED)
    before = (authoritative.model_copy(deep=True), local.model_copy(deep=True))

    merge_checklists(authoritative, local, make_dirty(statuses={"w_2s": {0: True}}))

    assert (authoritative, local) == before


def test_merge_of_malformed_inputs_succeeds():
    """Malformed blobs are normalised at parse time, so the merge still runs."""
    authoritative = Checklist.from_document_data(
        {"_meta": "oops", "w_2s": "not a category", "k_1s": {"label": "K-1s"}}
    )
    local = Checklist.from_document_data(
        {"w_2s": {"label": "W-2s", "status": "active", "documents": [None, {"name": "W2"}]}}
    )

    merged = merge_checklists(authoritative, local, make_dirty(categories={"w_2s": True}))

    assert merged.sections == ("personal",)
    assert merged.categories["k_1s"].documents == ()
    assert [d.name for d in merged.categories["w_2s"].documents] == ["", "W2"]
