"""Shared fixtures: an in-memory stand-in for the n8n public API."""

import copy
import json
from typing import Any

import httpx
import pytest

from orchestrator.sdk.workflow_directory import WorkflowDirectory
from orchestrator.utils.settings import SettingsResolver

TEST_API_URL = "http://n8n.test/"
TEST_API_KEY = "test-key"

# fields the PUT endpoint accepts; anything else is rejected like n8n does
ACCEPTED_PUT_FIELDS = {"name", "nodes", "connections", "settings", "staticData", "tags"}


def make_workflow(
    workflow_id: str,
    name: str,
    active: bool = False,
    nodes: list[dict] | None = None,
    connections: dict | None = None,
) -> dict[str, Any]:
    """A workflow document shaped like GET /workflows/{id}, read-only fields included."""
    return {
        "id": workflow_id,
        "name": name,
        "active": active,
        "nodes": nodes if nodes is not None else [],
        "connections": connections if connections is not None else {},
        "createdAt": "2025-01-01T00:00:00.000Z",
        "updatedAt": "2025-01-02T00:00:00.000Z",
        "versionId": "3f0c7a52-0000-0000-0000-000000000000",
        "pinData": {},
        "meta": {"templateCredsSetupCompleted": True},
        "shared": [{"role": "workflow:owner", "projectId": "p1"}],
        "triggerCount": 1,
        "isArchived": False,
        "settings": {"executionOrder": "v1"},
        "staticData": None,
        "tags": [{"id": "t1", "name": "Prod", "createdAt": "2025-01-01T00:00:00.000Z"}],
    }


def invoice_workflow(active: bool = True) -> dict[str, Any]:
    return make_workflow(
        "wf_1",
        "Invoice Processor",
        active=active,
        nodes=[
            {
                "id": "n1",
                "name": "Webhook",
                "type": "n8n-nodes-base.webhook",
                "typeVersion": 2,
                "position": [0, 0],
                "parameters": {"path": "invoices", "httpMethod": "POST"},
                "webhookId": "abc-123",
            },
            {
                "id": "n2",
                "name": "HTTP Request",
                "type": "n8n-nodes-base.httpRequest",
                "typeVersion": 4.2,
                "position": [220, 0],
                "parameters": {"url": "https://api.example.com", "method": "GET", "options": {"timeout": 1000}},
            },
        ],
        connections={"Webhook": {"main": [[{"node": "HTTP Request", "type": "main", "index": 0}]]}},
    )


class FakeN8nServer:
    """Records every call and serves workflows from memory."""

    def __init__(self, workflows: list[dict] | None = None, executions: list[dict] | None = None) -> None:
        self.workflows = {w["id"]: copy.deepcopy(w) for w in (workflows or [])}
        self.executions = executions or []
        self.calls: list[tuple[str, str, Any]] = []
        self.fail_activation = False
        self.fail_reactivation = False  # only active=True fails
        self.page_size: int | None = None
        self.fail_put_status: int | None = None
        self.html_response = False

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls_to(self, method: str, path: str) -> list[Any]:
        """Bodies of the calls made with this method and path."""
        return [body for m, p, body in self.calls if m == method and p == path]

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api/v1")
        body = json.loads(request.content) if request.content else None
        self.calls.append((request.method, path, body))

        if self.html_response:
            return httpx.Response(200, text="<!DOCTYPE html>\n<html><body>n8n</body></html>")
        if request.headers.get("X-N8N-API-KEY") != TEST_API_KEY:
            return httpx.Response(401, json={"message": "unauthorized"})

        parts = path.strip("/").split("/")
        if parts == ["workflows"]:
            if request.method == "GET":
                return self._list_page(request)
            if request.method == "POST":
                created = make_workflow("wf_new", body["name"], nodes=body["nodes"], connections=body["connections"])
                self.workflows[created["id"]] = created
                return httpx.Response(200, json=created)

        if parts[0] == "workflows" and len(parts) >= 2:
            workflow = self.workflows.get(parts[1])
            if workflow is None:
                return httpx.Response(404, json={"message": "Not Found"})
            if len(parts) == 2 and request.method == "GET":
                return httpx.Response(200, json=workflow)
            if len(parts) == 2 and request.method == "PUT":
                return self._put(workflow, body)
            if parts[2:] == ["activate"] and request.method == "POST":
                if self.fail_activation or (self.fail_reactivation and body["active"]):
                    return httpx.Response(400, json={"message": "activation failed"})
                workflow["active"] = body["active"]
                return httpx.Response(200, json=workflow)
            if parts[2:] == ["run"] and request.method == "POST":
                return httpx.Response(
                    200,
                    json={"id": "ex_9", "finished": False, "mode": "manual", "workflowId": workflow["id"]},
                )

        if parts == ["executions"] and request.method == "GET":
            workflow_id = request.url.params.get("workflowId")
            limit = int(request.url.params.get("limit", 20))
            matching = [e for e in self.executions if not workflow_id or e["workflowId"] == workflow_id]
            return httpx.Response(200, json={"data": matching[:limit]})

        return httpx.Response(404, json={"message": f"no route for {request.method} {path}"})

    def _list_page(self, request: httpx.Request) -> httpx.Response:
        workflows = list(self.workflows.values())
        if self.page_size is None:
            return httpx.Response(200, json={"data": workflows, "nextCursor": None})
        start = int(request.url.params.get("cursor", 0))
        end = start + self.page_size
        next_cursor = str(end) if end < len(workflows) else None
        return httpx.Response(200, json={"data": workflows[start:end], "nextCursor": next_cursor})

    def _put(self, workflow: dict, body: dict) -> httpx.Response:
        if self.fail_put_status is not None:
            return httpx.Response(self.fail_put_status, json={"message": "write rejected"})
        extra = set(body) - ACCEPTED_PUT_FIELDS
        if extra:
            return httpx.Response(400, json={"message": f"request/body must NOT have additional properties: {sorted(extra)}"})
        if workflow["active"]:
            return httpx.Response(400, json={"message": "cannot update an active workflow"})
        workflow.update(copy.deepcopy(body))
        workflow["tags"] = [{"id": tag, "name": tag} for tag in body.get("tags", [])]
        workflow["updatedAt"] = "2025-02-01T00:00:00.000Z"
        return httpx.Response(200, json=workflow)


@pytest.fixture
def n8n_settings() -> SettingsResolver:
    return SettingsResolver(environ={"N8N_API_URL": TEST_API_URL, "N8N_API_KEY": TEST_API_KEY})


@pytest.fixture
def n8n_server() -> FakeN8nServer:
    return FakeN8nServer(
        workflows=[
            invoice_workflow(active=True),
            make_workflow("wf_2", "Slack Digest"),
            make_workflow("wf_3", "Invoice Reminder"),
        ],
        executions=[
            {
                "id": 102,
                "finished": False,
                "mode": "trigger",
                "status": "error",
                "startedAt": "2025-01-03T10:00:00.000Z",
                "stoppedAt": "2025-01-03T10:00:02.000Z",
                "workflowId": "wf_1",
                "data": {"resultData": {"runData": {}, "error": {"message": "connect ECONNREFUSED"}}},
            },
            {
                "id": 101,
                "finished": True,
                "mode": "manual",
                "status": "success",
                "startedAt": "2025-01-02T10:00:00.000Z",
                "stoppedAt": "2025-01-02T10:00:01.000Z",
                "workflowId": "wf_1",
            },
            {
                "id": 100,
                "finished": True,
                "mode": "manual",
                "status": "success",
                "startedAt": "2025-01-01T10:00:00.000Z",
                "stoppedAt": "2025-01-01T10:00:01.000Z",
                "workflowId": "wf_2",
            },
        ],
    )


@pytest.fixture
def directory(n8n_settings: SettingsResolver, n8n_server: FakeN8nServer) -> WorkflowDirectory:
    return WorkflowDirectory(n8n_settings, transport=n8n_server.transport())
