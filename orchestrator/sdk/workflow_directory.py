"""Client for the n8n public REST API.

Thin wrapper that resolves the server URL and API key on every call, sends
JSON, and turns anything other than a 2xx JSON answer into an UpstreamError.
An HTML answer almost always means the base URL points at the editor UI or a
proxy login page, so it gets its own message instead of a JSON parse error.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from orchestrator.errors import ConfigurationError, UpstreamError
from orchestrator.models.workflow import Execution, Workflow
from orchestrator.utils.settings import N8N_API_KEY, N8N_API_URL, SettingsResolver

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
API_KEY_HEADER = "X-N8N-API-KEY"
HTML_PREFIXES = ("<!doctype", "<html")
HTML_HINT = (
    "The workflow server returned HTML instead of JSON. "
    "Check that N8N_API_URL points at the n8n instance (not the editor URL "
    "behind a proxy) and that N8N_API_KEY is valid."
)


def looks_like_html(body: str) -> bool:
    """Return True if a response body is an HTML page."""
    return body.lstrip()[:9].lower().startswith(HTML_PREFIXES)


def match_workflow_name(workflows: list[Workflow], query: str) -> Workflow | None:
    """First workflow whose name contains query, case-insensitively."""
    needle = query.strip().lower()
    if not needle:
        return None
    for workflow in workflows:
        if needle in workflow.name.lower():
            return workflow
    return None


class WorkflowDirectory:
    """Authenticated calls against the workflow server."""

    def __init__(
        self,
        settings: SettingsResolver,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            settings: resolves N8N_API_URL and N8N_API_KEY on each call
            timeout: HTTP request timeout in seconds
            transport: optional httpx transport (tests use httpx.MockTransport)
        """
        self.settings = settings
        self.timeout = timeout
        self._transport = transport

    def _resolve_config(self) -> tuple[str, str]:
        base_url = (self.settings.get(N8N_API_URL) or "").rstrip("/")
        api_key = self.settings.get(N8N_API_KEY)
        if not base_url:
            raise ConfigurationError(N8N_API_URL)
        if not api_key:
            raise ConfigurationError(N8N_API_KEY)
        return base_url, api_key

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        base_url, api_key = self._resolve_config()
        url = f"{base_url}{API_PREFIX}{path}"
        headers = {API_KEY_HEADER: api_key, "Accept": "application/json"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(method, url, json=json, params=params, headers=headers)
        except httpx.RequestError as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise UpstreamError(None, f"Failed to connect to workflow server at {base_url}: {e}") from e

        body = response.text
        if looks_like_html(body):
            logger.error("%s %s returned HTML (status %s)", method, url, response.status_code)
            raise UpstreamError(response.status_code, HTML_HINT)

        if not response.is_success:
            excerpt = body[:300].strip()
            logger.error("%s %s returned %s: %s", method, url, response.status_code, excerpt)
            message = f"Workflow server error: {response.status_code} {response.reason_phrase}"
            if excerpt:
                message = f"{message} - {excerpt}"
            raise UpstreamError(response.status_code, message)

        if not body.strip():
            return None
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(response.status_code, f"Workflow server returned invalid JSON: {e}") from e

    # --- workflows ---

    async def list_workflows(self) -> list[Workflow]:
        """All workflows in upstream order, following nextCursor across pages."""
        workflows: list[Workflow] = []
        params: dict[str, Any] = {}
        seen_cursors: set[str] = set()
        while True:
            data = await self._request("GET", "/workflows", params=params or None) or {}
            workflows.extend(Workflow.model_validate(item) for item in data.get("data", []))
            cursor = data.get("nextCursor")
            if not cursor:
                return workflows
            if cursor in seen_cursors:
                raise UpstreamError(None, f"Workflow server repeated page cursor {cursor!r}")
            seen_cursors.add(cursor)
            params = {"cursor": cursor}

    async def fetch_workflow_document(self, workflow_id: str) -> dict[str, Any]:
        """Fetch a workflow as the raw JSON document, untouched by our models."""
        data = await self._request("GET", f"/workflows/{workflow_id}")
        if not isinstance(data, dict):
            raise UpstreamError(None, f"Unexpected workflow document for {workflow_id}")
        return data

    async def get_workflow(self, workflow_id: str) -> Workflow:
        return Workflow.model_validate(await self.fetch_workflow_document(workflow_id))

    async def find_workflow_by_name(self, query: str) -> Workflow | None:
        """Case-insensitive substring match in upstream listing order."""
        return match_workflow_name(await self.list_workflows(), query)

    async def set_active(self, workflow_id: str, active: bool) -> Workflow:
        data = await self._request("POST", f"/workflows/{workflow_id}/activate", json={"active": active})
        return Workflow.model_validate(data)

    async def create_workflow(
        self,
        name: str,
        nodes: list[dict[str, Any]] | None = None,
        connections: dict[str, Any] | None = None,
    ) -> Workflow:
        payload = {"name": name, "nodes": nodes or [], "connections": connections or {}}
        data = await self._request("POST", "/workflows", json=payload)
        return Workflow.model_validate(data)

    async def replace_workflow(self, workflow_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        """PUT a complete workflow document. The server has no partial update."""
        data = await self._request("PUT", f"/workflows/{workflow_id}", json=payload)
        return data if isinstance(data, dict) else {}

    async def execute_workflow(self, workflow_id: str, input_data: dict[str, Any] | None = None) -> Execution:
        data = await self._request("POST", f"/workflows/{workflow_id}/run", json=input_data or {})
        if isinstance(data, dict) and "id" not in data:
            inner = data.get("data")
            # some versions wrap the execution in {"data": {...}}
            if isinstance(inner, dict) and ("id" in inner or "executionId" in inner):
                data = {"id": inner.get("executionId"), **inner}
        return Execution.model_validate(data or {})

    # --- executions ---

    async def list_executions(self, workflow_id: str | None = None, limit: int = 20) -> list[Execution]:
        """Executions newest first, in the order the server returns them."""
        params: dict[str, Any] = {"limit": limit}
        if workflow_id:
            params["workflowId"] = workflow_id
        data = await self._request("GET", "/executions", params=params)
        return [Execution.model_validate(item) for item in (data or {}).get("data", [])]
