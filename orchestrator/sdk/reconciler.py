"""Partial updates for workflows on a server that only accepts full replacement.

The n8n public API has no PATCH for workflows: PUT /workflows/{id} replaces the
whole document and rejects any property it does not know. It also refuses
structural edits to an active workflow. An update therefore goes:

    fetch -> deactivate (if active) -> merge -> sanitize -> PUT -> reactivate

Nodes are matched by name first, then by id. Matched nodes are updated field
by field and their parameters are deep-merged, so a patch that only touches
one parameter keeps the others. Connections are merged one source node at a
time.

The outbound payload is built from an allow-list. The read endpoint returns
many fields the write endpoint rejects (timestamps, versionId, pinData,
ownership meta...), and that set is larger and less stable than the set of
accepted fields.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from orchestrator.errors import ChangeSetError, UpstreamError
from orchestrator.models.workflow import Execution, Workflow
from orchestrator.sdk.workflow_directory import WorkflowDirectory

logger = logging.getLogger(__name__)

WRITABLE_WORKFLOW_FIELDS = ("name", "nodes", "connections", "settings", "staticData", "tags")
WRITABLE_NODE_FIELDS = (
    "id",
    "name",
    "type",
    "typeVersion",
    "position",
    "parameters",
    "credentials",
    "disabled",
    "notes",
)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into a copy of base. Nested dicts merge, everything else replaces."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _find_node_index(nodes: list[dict[str, Any]], incoming: dict[str, Any]) -> int | None:
    name = incoming.get("name")
    if name is not None:
        for index, node in enumerate(nodes):
            if node.get("name") == name:
                return index
    node_id = incoming.get("id")
    if node_id is not None:
        for index, node in enumerate(nodes):
            if node.get("id") == node_id:
                return index
    return None


def merge_nodes(existing: list[dict[str, Any]], incoming: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Merge incoming nodes into existing ones.

    A node matches when its name equals an existing name, or failing that when
    its id equals an existing id. Unmatched nodes are appended.
    """
    merged = [copy.deepcopy(node) for node in existing]
    for node in incoming:
        index = _find_node_index(merged, node)
        if index is None:
            merged.append(copy.deepcopy(node))
            continue

        current = merged[index]
        updated = {**current, **copy.deepcopy(node)}
        current_params = current.get("parameters")
        incoming_params = node.get("parameters")
        if isinstance(current_params, dict) and isinstance(incoming_params, dict):
            updated["parameters"] = deep_merge(current_params, incoming_params)
        merged[index] = updated
    return merged


def merge_connections(existing: dict[str, Any] | None, incoming: dict[str, Any]) -> dict[str, Any]:
    """Shallow merge: incoming source nodes replace existing ones of the same name."""
    return {**copy.deepcopy(existing or {}), **copy.deepcopy(incoming)}


def check_changes(changes: dict[str, Any]) -> None:
    """Reject change sets that would replace the node graph instead of merging into it.

    nodes must be a list of node objects and connections an object. Either may
    be None, which means "no change".
    """
    nodes = changes.get("nodes")
    if nodes is not None:
        if not isinstance(nodes, list):
            raise ChangeSetError(f"changes.nodes must be a list of nodes, got {type(nodes).__name__}")
        for node in nodes:
            if not isinstance(node, dict):
                raise ChangeSetError(f"changes.nodes entries must be objects, got {type(node).__name__}")
    connections = changes.get("connections")
    if connections is not None and not isinstance(connections, dict):
        raise ChangeSetError(f"changes.connections must be an object, got {type(connections).__name__}")


def merge_workflow(current: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
    """Apply a partial change set to a fetched workflow document."""
    check_changes(changes)
    merged = copy.deepcopy(current)
    for key, value in changes.items():
        if key == "nodes":
            if value is not None:
                merged["nodes"] = merge_nodes(current.get("nodes") or [], value)
        elif key == "connections":
            if value is not None:
                merged["connections"] = merge_connections(current.get("connections"), value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def normalize_tags(tags: list[Any]) -> list[Any]:
    """Tag objects become bare tag ids; the write endpoint takes references."""
    normalized = []
    for tag in tags:
        if isinstance(tag, dict) and tag.get("id") is not None:
            normalized.append(tag["id"])
        else:
            normalized.append(tag)
    return normalized


def sanitize_node(node: dict[str, Any]) -> dict[str, Any]:
    """Keep the writable node fields that have a value."""
    return {key: node[key] for key in WRITABLE_NODE_FIELDS if node.get(key) is not None}


def build_update_payload(document: dict[str, Any]) -> dict[str, Any]:
    """Build the PUT body from a merged document, using the allow-list only."""
    payload: dict[str, Any] = {}
    for key in WRITABLE_WORKFLOW_FIELDS:
        value = document.get(key)
        if value is None:
            continue
        if key == "nodes":
            value = [sanitize_node(node) for node in value if isinstance(node, dict)]
        elif key == "tags":
            value = normalize_tags(value)
        payload[key] = value

    payload.setdefault("nodes", [])
    payload.setdefault("connections", {})
    # the write endpoint requires a settings object
    payload.setdefault("settings", {})
    return payload


class WorkflowReconciler:
    """Apply partial changes to remote workflows.

    No retries. The only compensating actions are the deactivate/reactivate
    calls around the write, and those never hide the write error.
    """

    def __init__(self, directory: WorkflowDirectory) -> None:
        self.directory = directory

    async def update(self, workflow_id: str, changes: dict[str, Any]) -> Workflow:
        check_changes(changes)
        current = await self.directory.fetch_workflow_document(workflow_id)
        was_active = bool(current.get("active"))
        payload = build_update_payload(merge_workflow(current, changes))

        deactivated = False
        if was_active:
            try:
                await self.directory.set_active(workflow_id, False)
                deactivated = True
            except UpstreamError as e:
                # some deployments allow editing active workflows
                logger.warning("Could not deactivate workflow %s before update: %s", workflow_id, e)

        try:
            written = await self.directory.replace_workflow(workflow_id, payload)
        except Exception:
            if deactivated:
                await self._reactivate_quietly(workflow_id)
            raise

        document = written or {**current, **payload}
        if was_active:
            document["active"] = await self._reactivate_quietly(workflow_id)
        return Workflow.model_validate(document)

    async def execute(self, workflow_id: str, input_data: dict[str, Any] | None = None) -> Execution:
        """Trigger a manual run."""
        return await self.directory.execute_workflow(workflow_id, input_data)

    async def _reactivate_quietly(self, workflow_id: str) -> bool:
        try:
            await self.directory.set_active(workflow_id, True)
        except UpstreamError as e:
            logger.warning("Could not reactivate workflow %s: %s", workflow_id, e)
            return False
        return True
