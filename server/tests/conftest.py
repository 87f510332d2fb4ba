"""Fixtures for the API tests: a temporary database and swapped-out collaborators."""

import httpx
import pytest
from fastapi.testclient import TestClient

from orchestrator.sdk.model_provider import ModelCatalog
from orchestrator.sdk.persona_loader import PersonaLoader
from orchestrator.sdk.workflow_directory import WorkflowDirectory
from orchestrator.utils.settings import SettingsResolver
from server import db
from server.app import app
from server.dependencies import (
    get_directory,
    get_model_catalog,
    get_model_client,
    get_persona_loader,
)

ARCHITECT_PERSONA = """---
name: Workflow Architect
description: Designs n8n workflows
---
You design small, robust workflows.
"""


class FakeModelClient:
    """Stands in for ChatModelClient; replays canned deltas and records prompts."""

    def __init__(self):
        self.deltas: list = ["Sure", ", here you go."]
        self.plan = '{"nodes": []}'
        self.calls: list[dict] = []

    async def open_stream(self, messages, temperature=0.7):
        self.calls.append({"messages": messages, "temperature": temperature})
        return self._replay()

    async def _replay(self):
        for delta in self.deltas:
            # an exception in the list simulates a failure mid-stream
            if isinstance(delta, Exception):
                raise delta
            yield delta

    async def complete(self, messages, temperature=0.2):
        self.calls.append({"messages": messages, "temperature": temperature})
        return self.plan

    @property
    def system_prompt(self) -> str:
        return self.calls[-1]["messages"][0]["content"]


@pytest.fixture
def model_client():
    return FakeModelClient()


@pytest.fixture
def personas_dir(tmp_path):
    personas = tmp_path / "personas"
    personas.mkdir()
    (personas / "architect.md").write_text(ARCHITECT_PERSONA, encoding="utf-8")
    (personas / "debugger.md").write_text("Explain failed executions.\n", encoding="utf-8")
    return personas


@pytest.fixture
def provider_requests():
    return []


@pytest.fixture
def model_catalog(provider_requests):
    def handler(request):
        provider_requests.append(request)
        return httpx.Response(
            200,
            json={"data": [{"id": "openai/gpt-4o", "name": "GPT-4o"}, {"id": "anthropic/claude-3-haiku"}]},
        )

    settings = SettingsResolver(environ={"AI_BASE_URL": "https://models.test/api/v1", "AI_API_KEY": "sk-test"})
    return ModelCatalog(settings, transport=httpx.MockTransport(handler))


@pytest.fixture
def client(tmp_path, monkeypatch, n8n_settings, n8n_server, model_client, model_catalog, personas_dir):
    monkeypatch.setattr(db, "DB_PATH", tmp_path / "test.db")

    app.dependency_overrides[get_directory] = lambda: WorkflowDirectory(
        n8n_settings, transport=n8n_server.transport()
    )
    app.dependency_overrides[get_model_client] = lambda: model_client
    app.dependency_overrides[get_model_catalog] = lambda: model_catalog
    app.dependency_overrides[get_persona_loader] = lambda: PersonaLoader(personas_dir)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
