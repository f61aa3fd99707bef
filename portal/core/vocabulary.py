# This project was developed with assistance from AI tools.
"""Checklist vocabulary: known categories and CRM pipeline stage labels.

Held as an immutable value and passed to the code that needs it, so tests
can substitute their own vocabulary without patching module globals.
"""

from portal_db.enums import SectionId, TaxStage
from pydantic import BaseModel, ConfigDict


class CategoryDefinition(BaseModel):
    """A predefined checklist category."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    section: SectionId


class ChecklistVocabulary(BaseModel):
    """Known category keys plus the HubSpot stage-id -> tracker stage mapping."""

    model_config = ConfigDict(frozen=True)

    categories: tuple[CategoryDefinition, ...]
    stage_labels: dict[str, str]
    stage_by_label: dict[str, TaxStage]

    def get(self, key: str) -> CategoryDefinition | None:
        for definition in self.categories:
            if definition.key == key:
                return definition
        return None

    def label_for(self, key: str) -> str:
        """Display label for ``key``; unknown keys label themselves."""
        definition = self.get(key)
        return definition.label if definition else key

    def keys_for_section(self, section: SectionId | str) -> list[str]:
        return [d.key for d in self.categories if d.section == section]

    def normalized_stage(self, pipeline_stage_id: str | None) -> TaxStage:
        """Map a CRM pipeline stage id onto the client progress tracker.

        Unknown or missing stage ids map to ``collecting``.
        """
        label = self.stage_labels.get(pipeline_stage_id or "")
        if label is None:
            return TaxStage.COLLECTING
        return self.stage_by_label.get(label, TaxStage.COLLECTING)


_PERSONAL = SectionId.PERSONAL
_ENTITY = SectionId.ENTITY

DEFAULT_VOCABULARY = ChecklistVocabulary(
    categories=(
        CategoryDefinition(key="w_2s", label="W-2s", section=_PERSONAL),
        CategoryDefinition(key="1099s", label="1099s", section=_PERSONAL),
        CategoryDefinition(key="k_1s", label="K-1s", section=_PERSONAL),
        CategoryDefinition(key="property_expenses", label="Property Expenses", section=_PERSONAL),
        CategoryDefinition(key="1098s", label="1098s", section=_PERSONAL),
        CategoryDefinition(key="charitable_donations", label="Charitable Donations", section=_PERSONAL),
        CategoryDefinition(key="additional_documents", label="Additional Documents", section=_PERSONAL),
        CategoryDefinition(
            key="livestock_sales_and_expenses",
            label="Livestock Sales and Expenses",
            section=_PERSONAL,
        ),
        CategoryDefinition(key="foreign_bank_accounts", label="Foreign Bank Accounts", section=_PERSONAL),
        CategoryDefinition(
            key="previous_personal_tax_returns",
            label="Previous Personal Tax Returns",
            section=_PERSONAL,
        ),
        CategoryDefinition(key="entity_income", label="Entity Income", section=_ENTITY),
        CategoryDefinition(key="entity_expenses", label="Entity Expenses", section=_ENTITY),
        CategoryDefinition(key="balance_sheet", label="Balance Sheet", section=_ENTITY),
        CategoryDefinition(key="p_l", label="P&L", section=_ENTITY),
        CategoryDefinition(key="trial_balance", label="Trial Balance", section=_ENTITY),
        CategoryDefinition(key="general_ledger", label="General Ledger", section=_ENTITY),
        CategoryDefinition(key="additions_and_disposals", label="Additions and Disposals", section=_ENTITY),
        CategoryDefinition(
            key="business_operation_agreement",
            label="Business Operation Agreement",
            section=_ENTITY,
        ),
        CategoryDefinition(
            key="previous_entity_tax_returns",
            label="Previous Entity Tax Returns",
            section=_ENTITY,
        ),
    ),
    stage_labels={
        "1742632656": "Collecting Documents",
        "1742632682": "Processing Return",
        "1742632683": "Processing Return",
        "1742632684": "Processing Return",
        "1742632685": "Processing Return",
        "1742632686": "Return Submitted",
        "1742632687": "Return Submitted",
        "1742632688": "Return Submitted",
        "1742632689": "Return Submitted",
        "1742632690": "Return Submitted",
        "1742632657": "Return Accepted",
    },
    stage_by_label={
        "Collecting Documents": TaxStage.COLLECTING,
        "Processing Return": TaxStage.PROCESSING,
        "Return Submitted": TaxStage.SUBMITTED,
        "Return Accepted": TaxStage.ACCEPTED,
    },
)
