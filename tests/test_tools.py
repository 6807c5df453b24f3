import json

import pytest

from errors import InvalidArguments, UnknownTool
from tools import ToolDispatcher


@pytest.mark.asyncio
async def test_create_issue_passes_absent_optionals_as_none(fake_client):
    result = await ToolDispatcher(fake_client).call("create_issue", {"title": "T", "teamId": "team1"})

    assert fake_client.calls == [
        ("create_issue", {"title": "T", "description": None, "teamId": "team1", "priority": None})
    ]
    assert result.is_error is False
    assert result.as_dict() == {
        "content": [{"type": "text", "text": "Created issue: https://linear.app/acme/issue/ENG-3"}],
        "isError": False,
    }


@pytest.mark.asyncio
async def test_create_issue_forwards_all_fields(fake_client):
    await ToolDispatcher(fake_client).call(
        "create_issue",
        {"title": "T", "teamId": "team1", "description": "body", "priority": 2},
    )
    _, fields = fake_client.calls[0]
    assert fields == {"title": "T", "description": "body", "teamId": "team1", "priority": 2}


@pytest.mark.asyncio
async def test_backend_failure_is_a_soft_error(failing_client):
    result = await ToolDispatcher(failing_client).call("create_issue", {"title": "T", "teamId": "nope"})

    assert result.is_error is True
    assert len(result.content) == 1
    assert result.content[0].type == "text"
    assert result.content[0].text.startswith("Linear API error: ")
    assert result.content[0].text == "Linear API error: team not found"


@pytest.mark.asyncio
async def test_unknown_tool_is_a_hard_error(fake_client):
    with pytest.raises(UnknownTool) as excinfo:
        await ToolDispatcher(fake_client).call("does_not_exist", {})
    assert "does_not_exist" in str(excinfo.value)
    assert fake_client.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "arguments",
    [
        {"title": "T"},
        {"teamId": "team1"},
        {"title": 5, "teamId": "team1"},
        {"title": "T", "teamId": "team1", "priority": 7},
        {"title": "T", "teamId": "team1", "priority": "2"},
        {"title": "T", "teamId": "team1", "priority": 1.5},
    ],
)
async def test_malformed_create_arguments_never_reach_backend(fake_client, arguments):
    with pytest.raises(InvalidArguments) as excinfo:
        await ToolDispatcher(fake_client).call("create_issue", arguments)
    assert excinfo.value.tool == "create_issue"
    assert fake_client.calls == []


@pytest.mark.asyncio
async def test_update_issue_passes_fields_through(fake_client):
    result = await ToolDispatcher(fake_client).call(
        "update_issue", {"issueId": "ENG-7", "title": "New", "status": "Done"}
    )
    assert fake_client.calls == [("update_issue", "ENG-7", {"title": "New", "description": None})]
    assert result.content[0].text == "Updated issue: https://linear.app/acme/issue/ENG-7"


@pytest.mark.asyncio
async def test_update_issue_requires_issue_id(fake_client):
    with pytest.raises(InvalidArguments):
        await ToolDispatcher(fake_client).call("update_issue", {"title": "New"})
    assert fake_client.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("arguments", [None, {}, {"ignored": True}])
async def test_read_team_ids_returns_compact_json(fake_client, arguments):
    result = await ToolDispatcher(fake_client).call("read_team_ids", arguments)

    text = result.content[0].text
    assert fake_client.calls == [("list_teams",)]
    assert "\n" not in text
    assert json.loads(text)[0] == {"id": "team1", "key": "ENG", "name": "Engineering"}


@pytest.mark.asyncio
async def test_each_tool_makes_one_backend_call(fake_client):
    dispatcher = ToolDispatcher(fake_client)
    await dispatcher.call("create_issue", {"title": "T", "teamId": "team1"})
    await dispatcher.call("update_issue", {"issueId": "ENG-1"})
    await dispatcher.call("read_team_ids", {})
    assert [call[0] for call in fake_client.calls] == ["create_issue", "update_issue", "list_teams"]


def test_parse_arguments_checks_without_backend(fake_client):
    dispatcher = ToolDispatcher(fake_client)

    args = dispatcher.parse_arguments("update_issue", {"issueId": "ENG-1"})
    assert args.issueId == "ENG-1"
    with pytest.raises(UnknownTool):
        dispatcher.parse_arguments("nope", {})
    with pytest.raises(InvalidArguments):
        dispatcher.parse_arguments("create_issue", {"title": "T"})
    assert fake_client.calls == []
