# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, SessionLocal, get_db
from .enums import CategoryStatus, DocumentStatus, SectionId, TaxStage, UserType
from .models import AuditEvent

__all__ = [
    "Base",
    "SessionLocal",
    "get_db",
    "__version__",
    # Enums
    "CategoryStatus",
    "DocumentStatus",
    "SectionId",
    "TaxStage",
    "UserType",
    # Models
    "AuditEvent",
]
