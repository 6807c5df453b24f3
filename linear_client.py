from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import requests

from _payload_utils import extract_mutation_issue, extract_nodes
from config import DEFAULT_API_URL

DEFAULT_TIMEOUT = 30

ACTIVE_STATE_TYPES = ("started", "unstarted", "backlog")

logger = logging.getLogger(__name__)

_ISSUE_FIELDS = """
    id
    identifier
    title
    description
    url
    priority
    priorityLabel
    state { id name type }
    assignee { id name }
    team { id key name }
    createdAt
    updatedAt
"""

_TEAM_FIELDS = """
    id
    key
    name
    description
"""

ACTIVE_ISSUES_QUERY = f"""
query ActiveIssues($filter: IssueFilter) {{
    issues(filter: $filter) {{
        nodes {{ {_ISSUE_FIELDS} }}
    }}
}}
"""

TEAMS_QUERY = f"""
query Teams {{
    teams {{
        nodes {{ {_TEAM_FIELDS} }}
    }}
}}
"""

ISSUE_QUERY = f"""
query Issue($id: String!) {{
    issue(id: $id) {{ {_ISSUE_FIELDS} }}
}}
"""

CREATE_ISSUE_MUTATION = f"""
mutation IssueCreate($input: IssueCreateInput!) {{
    issueCreate(input: $input) {{
        success
        issue {{ {_ISSUE_FIELDS} }}
    }}
}}
"""

UPDATE_ISSUE_MUTATION = f"""
mutation IssueUpdate($id: String!, $input: IssueUpdateInput!) {{
    issueUpdate(id: $id, input: $input) {{
        success
        issue {{ {_ISSUE_FIELDS} }}
    }}
}}
"""


def _compact(fields: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}


@dataclass
class LinearClientError(Exception):
    message: str
    status_code: Optional[int] = None
    details: Optional[Any] = None

    def __str__(self) -> str:
        base = self.message
        if self.status_code is not None:
            base += f" (status={self.status_code})"
        if self.details is not None:
            base += f": {self.details}"
        return base


class LinearClient:
    """Thin GraphQL helper for the Linear API.

    Each public method performs exactly one HTTP round trip; there is no retry or caching.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not api_key and not access_token:
            raise LinearClientError("an API key or access token is required")
        self.api_key = api_key
        self.access_token = access_token
        self.api_url = api_url
        self.timeout = timeout
        self._session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        if self.access_token:
            authorization = f"Bearer {self.access_token}"
        else:
            authorization = self.api_key or ""
        return {
            "Authorization": authorization,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _response_details(self, resp: requests.Response) -> Any:
        if resp.content:
            try:
                return resp.json()
            except ValueError:
                return resp.text
        return None

    def _request(self, query: str, *, context: str, variables: Optional[Dict[str, Any]] = None) -> Any:
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        logger.debug("Linear request %s", context)
        try:
            resp = self._session.post(
                self.api_url,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise LinearClientError(f"request failed during {context}: {exc}") from exc

        if resp.status_code == 401:
            raise LinearClientError(
                "authentication failed; check LINEAR_API_KEY",
                status_code=resp.status_code,
                details=self._graphql_messages(self._response_details(resp)),
            )
        if resp.status_code >= 400:
            details = self._response_details(resp)
            raise LinearClientError(
                f"Linear request failed during {context}",
                status_code=resp.status_code,
                details=self._graphql_messages(details) or details,
            )
        try:
            body: Any = resp.json()
        except ValueError as exc:
            raise LinearClientError(f"Linear returned a non-JSON response during {context}") from exc
        return self._ensure_no_graphql_errors(body, context=context)

    @staticmethod
    def _graphql_messages(body: Any) -> Optional[str]:
        if not isinstance(body, dict):
            return None
        errors = body.get("errors")
        if not isinstance(errors, list) or not errors:
            return None
        messages = [
            str(err.get("message", err)) if isinstance(err, dict) else str(err)
            for err in errors
        ]
        return "; ".join(messages)

    def _ensure_no_graphql_errors(self, body: Any, *, context: str) -> Any:
        messages = self._graphql_messages(body)
        if messages:
            raise LinearClientError(messages)
        if not isinstance(body, dict) or not isinstance(body.get("data"), dict):
            raise LinearClientError(f"Linear returned no data during {context}")
        return body["data"]

    def _connection_nodes(self, data: Any, key: str, *, context: str) -> List[Dict[str, Any]]:
        nodes = extract_nodes(data, key)
        if nodes is None:
            raise LinearClientError(f"Linear returned no {key} connection during {context}", details=data.get(key))
        return nodes

    def _mutation_issue(self, data: Any, key: str) -> Dict[str, Any]:
        result = data.get(key) if isinstance(data, dict) else None
        if not isinstance(result, dict) or not result.get("success"):
            raise LinearClientError(f"{key} was not successful")
        issue = extract_mutation_issue(data, key)
        if issue is None:
            raise LinearClientError(f"{key} returned no issue")
        return issue

    # ------------------------------------------------------------------
    # Public API wrappers
    # ------------------------------------------------------------------
    def list_active_issues(self) -> List[Dict[str, Any]]:
        variables = {"filter": {"state": {"type": {"in": list(ACTIVE_STATE_TYPES)}}}}
        data = self._request(ACTIVE_ISSUES_QUERY, context="list_active_issues", variables=variables)
        return self._connection_nodes(data, "issues", context="list_active_issues")

    def list_teams(self) -> List[Dict[str, Any]]:
        data = self._request(TEAMS_QUERY, context="list_teams")
        return self._connection_nodes(data, "teams", context="list_teams")

    def get_issue(self, issue_id: str) -> Dict[str, Any]:
        data = self._request(ISSUE_QUERY, context="get_issue", variables={"id": issue_id})
        issue = data.get("issue")
        if not isinstance(issue, dict):
            raise LinearClientError(f"issue {issue_id} not found", status_code=404)
        return issue

    def create_issue(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        data = self._request(
            CREATE_ISSUE_MUTATION,
            context="create_issue",
            variables={"input": _compact(fields)},
        )
        return self._mutation_issue(data, "issueCreate")

    def update_issue(self, issue_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        data = self._request(
            UPDATE_ISSUE_MUTATION,
            context="update_issue",
            variables={"id": issue_id, "input": _compact(fields)},
        )
        return self._mutation_issue(data, "issueUpdate")
