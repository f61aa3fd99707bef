# This project was developed with assistance from AI tools.
"""HubSpot CRM client and the checklist store built on it.

Client projects are a HubSpot custom object. The checklist is kept as a JSON
string in the project's ``document_data`` property; reads and writes go
through the CRM v3 objects API with a private-app bearer token.
"""

import json
import logging

import httpx
from pydantic import BaseModel

from ..core.config import Settings
from ..schemas.checklist import Checklist
from .store import ChecklistStoreError

logger = logging.getLogger(__name__)

PROJECT_PROPERTIES = (
    "client_project_name",
    "email",
    "hs_pipeline_stage",
    "document_data",
    "file_directory",
)


class HubSpotError(ChecklistStoreError):
    """Raised when a HubSpot API call fails."""


class Project(BaseModel):
    """A client project as stored in the CRM."""

    id: str
    name: str | None = None
    email: str | None = None
    pipeline_stage: str | None = None
    document_data: str | None = None
    file_directory: str | None = None

    @classmethod
    def from_api(cls, payload: dict) -> "Project":
        """Build from a CRM object response; raises ValueError when it is not one."""
        if not isinstance(payload, dict) or "id" not in payload:
            raise ValueError("CRM object response has no id")
        props = payload.get("properties") or {}
        if not isinstance(props, dict):
            raise ValueError("CRM object properties is not an object")
        return cls(
            id=str(payload["id"]),
            name=props.get("client_project_name"),
            email=props.get("email"),
            pipeline_stage=props.get("hs_pipeline_stage"),
            document_data=props.get("document_data"),
            file_directory=props.get("file_directory"),
        )

    @property
    def checklist(self) -> Checklist:
        return Checklist.from_document_data(self.document_data)

    def belongs_to(self, email: str) -> bool:
        """Case/whitespace-insensitive ownership check used for client access."""
        if not self.email:
            return False
        return self.email.strip().lower() == email.strip().lower()


class HubSpotClient:
    """Thin async wrapper around the HubSpot CRM objects API."""

    def __init__(
        self,
        access_token: str,
        object_type: str,
        base_url: str = "https://api.hubapi.com",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._object_type = object_type
        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=timeout,
            transport=transport,
        )

    def _object_path(self, project_id: str) -> str:
        return f"/crm/v3/objects/{self._object_type}/{project_id}"

    async def get_project(self, project_id: str) -> Project:
        """Fetch a single project with the properties the portal uses."""
        try:
            response = await self._http.get(
                self._object_path(project_id),
                params={"properties": ",".join(PROJECT_PROPERTIES)},
            )
            response.raise_for_status()
            return Project.from_api(response.json())
        except httpx.HTTPError as exc:
            logger.error("Failed to get project %s from HubSpot: %s", project_id, exc)
            raise HubSpotError(f"Failed to get project {project_id}") from exc
        except ValueError as exc:
            logger.error("Malformed HubSpot response for project %s: %s", project_id, exc)
            raise HubSpotError(f"Malformed response for project {project_id}") from exc

    async def update_document_data(self, project_id: str, checklist: Checklist) -> None:
        """Overwrite the project's ``document_data`` property."""
        body = {"properties": {"document_data": json.dumps(checklist.to_document_data())}}
        try:
            response = await self._http.patch(self._object_path(project_id), json=body)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Failed to update document_data for project %s: %s", project_id, exc)
            raise HubSpotError(f"Failed to update project {project_id}") from exc
        logger.info("Updated document_data in HubSpot (project_id=%s)", project_id)

    async def aclose(self) -> None:
        await self._http.aclose()


class HubSpotChecklistStore:
    """Checklist store backed by the project custom object's ``document_data``."""

    def __init__(self, client: HubSpotClient):
        self._client = client

    async def read(self, project_id: str) -> Checklist:
        project = await self._client.get_project(project_id)
        return project.checklist

    async def write(self, project_id: str, checklist: Checklist) -> None:
        await self._client.update_document_data(project_id, checklist)


def build_hubspot_client(cfg: Settings) -> HubSpotClient:
    """Create a client from settings; the access token must be configured."""
    if not cfg.HUBSPOT_ACCESS_TOKEN:
        raise RuntimeError("HUBSPOT_ACCESS_TOKEN is not set -- cannot talk to HubSpot")
    return HubSpotClient(
        access_token=cfg.HUBSPOT_ACCESS_TOKEN,
        object_type=cfg.HUBSPOT_CUSTOM_OBJECT_TYPE,
        base_url=cfg.HUBSPOT_BASE_URL,
        timeout=cfg.HUBSPOT_TIMEOUT_SECONDS,
    )
