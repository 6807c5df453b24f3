"""Shared fixtures: an in-process stand-in for the Linear client."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

ISSUES = [
    {"id": "i-1", "identifier": "ENG-1", "title": "First", "url": "https://linear.app/acme/issue/ENG-1"},
    {"id": "i-2", "identifier": "ENG-2", "title": "Second", "url": "https://linear.app/acme/issue/ENG-2"},
]
TEAMS = [
    {"id": "team1", "key": "ENG", "name": "Engineering"},
    {"id": "team2", "key": "OPS", "name": "Operations"},
]


class FakeLinearClient:
    """Records every backend call; optionally fails with ``error``."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.calls: List[tuple] = []

    def _record(self, *call: Any) -> None:
        self.calls.append(call)
        if self.error is not None:
            raise self.error

    def list_active_issues(self) -> List[Dict[str, Any]]:
        self._record("list_active_issues")
        return ISSUES

    def list_teams(self) -> List[Dict[str, Any]]:
        self._record("list_teams")
        return TEAMS

    def get_issue(self, issue_id: str) -> Dict[str, Any]:
        self._record("get_issue", issue_id)
        return {"id": issue_id, "title": "Looked up", "url": f"https://linear.app/acme/issue/{issue_id}"}

    def create_issue(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        self._record("create_issue", fields)
        return {"id": "new", "title": fields.get("title"), "url": "https://linear.app/acme/issue/ENG-3"}

    def update_issue(self, issue_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        self._record("update_issue", issue_id, fields)
        return {"id": issue_id, "url": f"https://linear.app/acme/issue/{issue_id}"}


@pytest.fixture()
def fake_client():
    return FakeLinearClient()


@pytest.fixture()
def failing_client():
    return FakeLinearClient(error=RuntimeError("team not found"))
