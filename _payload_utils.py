"""Utilities for working with payloads returned by the Linear GraphQL API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


def extract_nodes(payload: Any, key: str) -> Optional[List[Dict[str, Any]]]:
    """Extract the node list from a GraphQL connection field.

    Linear returns collections as connections shaped like
    ``{"issues": {"nodes": [...], "pageInfo": {...}}}``.  Test doubles sometimes hand back a
    bare list of nodes instead.  Returns ``None`` when the connection is missing or malformed
    so the caller can report it rather than mistake it for an empty collection.
    """

    if isinstance(payload, list):
        return [node for node in payload if isinstance(node, dict)]
    if not isinstance(payload, dict):
        return None

    connection = payload.get(key)
    if isinstance(connection, dict):
        nodes = connection.get("nodes")
        if isinstance(nodes, list):
            return [node for node in nodes if isinstance(node, dict)]
    return None


def extract_mutation_issue(payload: Any, key: str) -> Optional[Dict[str, Any]]:
    """Return the ``issue`` of an ``issueCreate``/``issueUpdate`` payload, if any."""

    if not isinstance(payload, dict):
        return None
    result = payload.get(key)
    if not isinstance(result, dict):
        return None
    issue = result.get("issue")
    return issue if isinstance(issue, dict) else None
