# This project was developed with assistance from AI tools.
"""Audit event service.

Writes append-only audit trail entries for accepted checklist writes. The
sync path treats auditing as fire-and-forget: a failing recorder is logged
and never fails the write it describes.
"""

import logging
from collections.abc import Callable
from typing import Any, Protocol

from portal_db import AuditEvent
from portal_db.enums import UserType
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

UPDATE_DOCUMENT_DATA = "update_document_data"


class AuditRecorder(Protocol):
    async def record(self, project_id: str, actor: str, diff_summary: dict[str, Any]) -> None: ...


async def write_audit_event(
    session: AsyncSession,
    *,
    action: str,
    entity_type: str,
    entity_id: str,
    user_email: str | None = None,
    user_type: str | None = None,
    details: dict | None = None,
) -> AuditEvent:
    """Add a single audit event to the session and flush it.

    Args:
        session: Database session.
        action: What happened (e.g. 'update_document_data').
        entity_type: Kind of entity acted on ('project', 'document').
        entity_id: Identifier of that entity (CRM project id).
        user_email: Actor who triggered the event.
        user_type: Actor kind at the time of the event.
        details: Arbitrary JSON-serializable event payload.

    Returns:
        The created AuditEvent row.
    """
    audit = AuditEvent(
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        user_email=user_email,
        user_type=user_type,
        details=details,
    )
    session.add(audit)
    await session.flush()
    return audit


async def get_events_for_project(
    session: AsyncSession,
    project_id: str,
    *,
    limit: int = 50,
) -> list[AuditEvent]:
    """Return the most recent audit events for a project, newest first."""
    stmt = (
        select(AuditEvent)
        .where(AuditEvent.entity_id == project_id)
        .order_by(AuditEvent.timestamp.desc())
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


class DatabaseAuditRecorder:
    """AuditRecorder that writes one ``audit_events`` row per accepted merge."""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        user_type: UserType = UserType.CLIENT,
    ):
        self._session_factory = session_factory
        self._user_type = user_type

    async def record(self, project_id: str, actor: str, diff_summary: dict[str, Any]) -> None:
        async with self._session_factory() as session:
            await write_audit_event(
                session,
                action=UPDATE_DOCUMENT_DATA,
                entity_type="project",
                entity_id=project_id,
                user_email=actor,
                user_type=self._user_type.value,
                details=diff_summary,
            )
            await session.commit()
