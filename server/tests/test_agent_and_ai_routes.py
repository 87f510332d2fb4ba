"""Tests for the persona, model catalog and plan routes."""


class TestAgentRoutes:
    def test_list_agents(self, client):
        response = client.get("/api/agents")

        assert response.status_code == 200
        agents = response.json()["agents"]
        assert [a["id"] for a in agents] == ["architect.md", "debugger.md"]
        assert agents[1]["name"] == "debugger"

    def test_get_agent(self, client):
        body = client.get("/api/agents/architect.md").json()

        assert body["description"] == "Designs n8n workflows"
        assert body["content"] == "You design small, robust workflows."

    def test_unknown_agent(self, client):
        assert client.get("/api/agents/ghost.md").status_code == 404

    def test_malformed_persona(self, client, personas_dir):
        (personas_dir / "broken.md").write_text("---\n- not a mapping\n---\nbody", encoding="utf-8")

        response = client.get("/api/agents/broken.md")

        assert response.status_code == 422


class TestAiRoutes:
    def test_models_are_cached(self, client, provider_requests):
        first = client.get("/api/ai/models").json()
        client.get("/api/ai/models")

        assert [m["id"] for m in first["models"]] == ["anthropic/claude-3-haiku", "openai/gpt-4o"]
        assert len(provider_requests) == 1

    def test_plan(self, client, model_client):
        response = client.post("/api/ai/plan", json={"prompt": "Sync CRM to Slack", "context": "HubSpot"})

        assert response.json() == {"plan": '{"nodes": []}'}
        messages = model_client.calls[-1]["messages"]
        assert "CONTEXT:\nHubSpot" in messages[0]["content"]
        assert messages[1] == {"role": "user", "content": "Sync CRM to Slack"}
        assert model_client.calls[-1]["temperature"] == 0.2


class TestHealth:
    def test_root(self, client):
        body = client.get("/").json()

        assert body["status"] == "ok"
        assert body["endpoints"]["chat"] == "/api/chat"
