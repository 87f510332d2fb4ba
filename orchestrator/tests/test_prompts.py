"""Tests for system prompt assembly."""

import pytest

from orchestrator.models.persona import Persona
from orchestrator.prompts import (
    COMMAND_INSTRUCTIONS,
    DEFAULT_SYSTEM_PROMPT,
    build_system_prompt,
    build_workflow_context,
    extract_workflow_reference,
    planner_prompt,
)
from orchestrator.sdk.workflow_directory import WorkflowDirectory
from orchestrator.utils.settings import SettingsResolver


class TestWorkflowReference:
    """Test guessing the workflow a message is about."""

    def test_quoted_name_wins(self):
        assert extract_workflow_reference('Why does "Slack Digest" fail?') == "Slack Digest"

    def test_word_before_workflow(self):
        assert extract_workflow_reference("why does the invoice workflow fail?") == "invoice"

    def test_word_after_workflow(self):
        assert extract_workflow_reference("please run workflow Slack now") == "Slack"

    def test_called_name(self):
        assert extract_workflow_reference("update the workflow called Invoice please") == "Invoice"

    def test_no_reference(self):
        assert extract_workflow_reference("hello there") is None

    def test_only_filler(self):
        assert extract_workflow_reference("show me the workflow") is None


class TestSystemPrompt:
    """Test the prompt seed and its sections."""

    def test_default_seed(self):
        prompt = build_system_prompt(None, None)

        assert prompt.startswith(DEFAULT_SYSTEM_PROMPT)
        assert COMMAND_INSTRUCTIONS in prompt

    def test_persona_seed(self):
        persona = Persona(id="architect.md", name="Architect", description="Designs flows", content="Be terse.")

        prompt = build_system_prompt(persona, "## Workflows on the n8n server\n- A")

        assert prompt.startswith("--- AGENT ACTIVATION ---\nNAME: Architect")
        assert "Be terse." in prompt
        assert DEFAULT_SYSTEM_PROMPT not in prompt
        assert prompt.endswith("- A")

    def test_planner_prompt_default_context(self):
        assert "No specific context provided." in planner_prompt()
        assert "CONTEXT:\nCRM sync" in planner_prompt("CRM sync")


class TestWorkflowContext:
    """Test live context built from the workflow server."""

    @pytest.mark.asyncio
    async def test_listing_only_without_reference(self, directory):
        context = await build_workflow_context(directory, "hello")

        assert "- Invoice Processor (id: wf_1, active)" in context
        assert "- Slack Digest (id: wf_2, inactive)" in context
        assert "Recent executions" not in context

    @pytest.mark.asyncio
    async def test_matched_workflow_details_and_executions(self, directory, n8n_server):
        """The first name match gets its nodes and last runs."""
        context = await build_workflow_context(directory, "why does the invoice workflow fail?")

        assert '## Workflow "Invoice Processor" (id: wf_1)' in context
        assert '"url": "https://api.example.com"' in context
        assert "- #102: error" in context
        assert "error: connect ECONNREFUSED" in context
        assert n8n_server.calls[-1][0] == "GET"
        # read-only: no writes while building context
        assert all(method == "GET" for method, _, _ in n8n_server.calls)

    @pytest.mark.asyncio
    async def test_listing_failure_is_written_into_context(self, n8n_server):
        """A configuration problem does not abort the chat."""
        directory = WorkflowDirectory(SettingsResolver(environ={}), transport=n8n_server.transport())

        context = await build_workflow_context(directory, "hello")

        assert "(Workflow list unavailable: N8N_API_KEY is not configured" in context

    @pytest.mark.asyncio
    async def test_upstream_failure_is_written_into_context(self, directory, n8n_server):
        n8n_server.html_response = True

        context = await build_workflow_context(directory, "hello")

        assert "Workflow list unavailable" in context
        assert "returned HTML" in context
