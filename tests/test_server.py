import json

import pytest
from fastmcp import Client
from mcp import McpError

from cleancode.config import SERVER_NAME, TOOL_NAME
from cleancode.server import MCPServer
from cleancode.services.planning_service import CodePlanningEngine


@pytest.fixture
def server():
    return MCPServer(engine=CodePlanningEngine(log_steps=False))


def thought(**overrides):
    arguments = {
        "thought": "Design module layout",
        "nextThoughtNeeded": True,
        "thoughtNumber": 1,
        "totalThoughts": 3,
    }
    arguments.update(overrides)
    return arguments


def test_registry_holds_planning_service(server):
    assert server.get_registry().tool_names() == [TOOL_NAME]
    assert server.get_mcp_instance().name == SERVER_NAME


@pytest.mark.asyncio
async def test_tool_is_advertised_with_schema(server):
    async with Client(server.get_mcp_instance()) as client:
        tools = await client.list_tools()

    tool = next(t for t in tools if t.name == TOOL_NAME)
    schema = tool.inputSchema
    assert set(schema["required"]) == {"thought", "nextThoughtNeeded", "thoughtNumber", "totalThoughts"}
    assert {"isRevision", "revisesThought", "branchFromThought", "branchId", "needsMoreThoughts"} <= set(schema["properties"])
    assert schema["properties"]["thoughtNumber"]["minimum"] == 1
    description = json.loads(tool.description)
    assert "clean" in description["description"]
    assert description["use_when"]


@pytest.mark.asyncio
async def test_successful_call_returns_summary(server):
    async with Client(server.get_mcp_instance()) as client:
        result = await client.call_tool_mcp(TOOL_NAME, thought())

    assert not result.isError
    assert len(result.content) == 1
    text = result.content[0].text
    assert json.loads(text) == {
        "stepNumber": 1,
        "totalSteps": 3,
        "nextStepNeeded": True,
        "branches": [],
        "historyLength": 1,
    }
    assert text == json.dumps(json.loads(text), indent=2)


@pytest.mark.asyncio
async def test_wire_names_map_onto_steps(server):
    async with Client(server.get_mcp_instance()) as client:
        await client.call_tool_mcp(TOOL_NAME, thought())
        await client.call_tool_mcp(TOOL_NAME, thought(
            thought="Add retry logic",
            thoughtNumber=2,
            branchFromThought=1,
            branchId="retry-strategy",
        ))
        result = await client.call_tool_mcp(TOOL_NAME, thought(
            thought="Revisit step 1",
            thoughtNumber=2,
            totalThoughts=1,
            isRevision=True,
            revisesThought=1,
        ))

    payload = json.loads(result.content[0].text)
    assert payload["totalSteps"] == 2
    assert payload["historyLength"] == 3
    assert payload["branches"] == ["retry-strategy"]

    revision = server.engine.history[-1]
    assert revision.is_revision is True
    assert revision.revises_step == 1
    assert server.engine.branches["retry-strategy"][0].code_reflection == "Add retry logic"


@pytest.mark.asyncio
async def test_rejected_step_sets_error_flag(server):
    async with Client(server.get_mcp_instance()) as client:
        result = await client.call_tool_mcp(TOOL_NAME, thought(thought=""))

    assert result.isError
    assert json.loads(result.content[0].text) == {
        "error": "Invalid codeReflection: must be a string",
        "status": "failed",
    }
    assert server.engine.history == ()


def without(field):
    arguments = thought()
    del arguments[field]
    return arguments


@pytest.mark.asyncio
@pytest.mark.parametrize("arguments, message", [
    (without("thoughtNumber"), "Invalid stepNumber: must be a number"),
    (thought(thoughtNumber=0), "Invalid stepNumber: must be a number"),
    (thought(thoughtNumber="2"), "Invalid stepNumber: must be a number"),
    (thought(totalThoughts=0), "Invalid totalSteps: must be a number"),
    (without("nextThoughtNeeded"), "Invalid nextStepNeeded: must be a boolean"),
    (thought(nextThoughtNeeded="true"), "Invalid nextStepNeeded: must be a boolean"),
])
async def test_invalid_arguments_return_failure_envelope(server, arguments, message):
    async with Client(server.get_mcp_instance()) as client:
        await client.call_tool_mcp(TOOL_NAME, thought())
        result = await client.call_tool_mcp(TOOL_NAME, arguments)

    assert result.isError
    assert json.loads(result.content[0].text) == {"error": message, "status": "failed"}
    assert len(server.engine.history) == 1


@pytest.mark.asyncio
async def test_unknown_tool_is_rejected(server):
    async with Client(server.get_mcp_instance()) as client:
        try:
            result = await client.call_tool_mcp("sequentialthinking", thought())
        except McpError as e:
            message = str(e)
        else:
            assert result.isError
            message = result.content[0].text

    assert "Unknown tool" in message
    assert server.engine.history == ()


@pytest.mark.asyncio
async def test_unknown_transport_is_rejected_at_startup(server):
    with pytest.raises(ValueError, match="CLEANCODE_TRANSPORT"):
        await server.run(transport="carrier-pigeon")
