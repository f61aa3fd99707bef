# This project was developed with assistance from AI tools.
"""Checklist store contract and an in-memory implementation.

The store owns durable checklist state keyed by project id. A checklist is
created implicitly by the first write; reading a project that was never
written yields the default checklist.
"""

import logging
from typing import Protocol

from ..schemas.checklist import Checklist

logger = logging.getLogger(__name__)


class ChecklistStoreError(Exception):
    """Raised when the backing store cannot be read or written."""


class ChecklistPersistenceError(ChecklistStoreError):
    """Raised when a merged checklist could not be persisted (retryable)."""


class ChecklistStore(Protocol):
    async def read(self, project_id: str) -> Checklist: ...

    async def write(self, project_id: str, checklist: Checklist) -> None: ...


class InMemoryChecklistStore:
    """Dict-backed store for local development and tests."""

    def __init__(self, initial: dict[str, Checklist] | None = None):
        self._checklists: dict[str, Checklist] = dict(initial or {})

    async def read(self, project_id: str) -> Checklist:
        return self._checklists.get(project_id) or Checklist()

    async def write(self, project_id: str, checklist: Checklist) -> None:
        self._checklists[project_id] = checklist
        logger.debug("Stored checklist for project %s", project_id)

    def __contains__(self, project_id: str) -> bool:
        return project_id in self._checklists
