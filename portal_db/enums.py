# This project was developed with assistance from AI tools.
"""
Domain enums for the client document checklist.

Shared domain types used by both SQLAlchemy models (portal_db package)
and Pydantic schemas (portal package).
"""

import enum


class DocumentStatus(str, enum.Enum):
    NOT_SUBMITTED = "not_submitted"
    PENDING_REVIEW = "pending_review"
    NEEDS_RESUBMISSION = "needs_resubmission"
    MISSING_FILES = "missing_files"
    ACCEPTED = "accepted"


class CategoryStatus(str, enum.Enum):
    """Wire representation of a category's active flag."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class SectionId(str, enum.Enum):
    PERSONAL = "personal"
    ENTITY = "entity"


class TaxStage(str, enum.Enum):
    """Normalised pipeline stages shown on the client progress tracker."""

    COLLECTING = "collecting"
    PROCESSING = "processing"
    SUBMITTED = "submitted"
    ACCEPTED = "accepted"


class UserType(str, enum.Enum):
    CLIENT = "client"
    ADMIN = "admin"
    CRM_CARD = "crm_card"
