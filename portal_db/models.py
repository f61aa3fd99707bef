# This project was developed with assistance from AI tools.
"""
Client portal -- persistence models

Checklist state itself lives in the CRM; the portal database only keeps the
audit trail of accepted checklist writes.
"""

from sqlalchemy import JSON, Column, DateTime, Integer, String, func

from .database import Base


class AuditEvent(Base):
    """Append-only audit trail. INSERT + SELECT only -- no UPDATE or DELETE."""

    __tablename__ = "audit_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    action = Column(String(100), nullable=False, index=True)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(255), nullable=False, index=True)
    user_email = Column(String(255), nullable=True)
    user_type = Column(String(50), nullable=True)
    details = Column(JSON, nullable=True)

    def __repr__(self):
        return f"<AuditEvent(id={self.id}, action='{self.action}', entity='{self.entity_id}')>"
