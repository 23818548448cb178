"""
Tests for JSON-RPC dispatch of the MCP tool surface
"""

import json

import pytest

from fractal_prose import __version__
from fractal_prose.mcp import (
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PROTOCOL_VERSION,
    SERVER_ERROR,
    TOOL_DEFINITIONS,
    TOOL_HANDLERS,
    ToolTier,
    dispatch,
    get_tool_tier,
)
from fractal_prose.models import ToolName


def call(name: str, arguments: dict, id: int = 1) -> dict:
    return {
        "jsonrpc": "2.0",
        "id": id,
        "method": "tools/call",
        "params": {"name": name, "arguments": arguments},
    }


class TestToolDefinitions:
    """Tests for the advertised tool list."""

    def test_every_tool_has_a_handler(self):
        """Test the definitions and the handler table cover the same tools."""
        names = [tool["name"] for tool in TOOL_DEFINITIONS]
        assert len(names) == len(set(names)) == 16
        assert set(names) == {tool.value for tool in ToolName}
        assert set(TOOL_HANDLERS) == set(ToolName)

    @pytest.mark.parametrize("tool", list(ToolName))
    def test_schema_matches_params_model(self, tool):
        """Test each input schema names exactly the fields its params model accepts."""
        definition = next(d for d in TOOL_DEFINITIONS if d["name"] == tool.value)
        schema = definition["inputSchema"]
        fields = TOOL_HANDLERS[tool].params_model.model_fields
        assert set(schema["properties"]) == set(fields)
        required = {name for name, info in fields.items() if info.is_required()}
        assert set(schema.get("required", [])) == required

    def test_tiers(self):
        """Test tier lookup."""
        assert get_tool_tier("get_chapter") == ToolTier.READ
        assert get_tool_tier("write_beat_prose") == ToolTier.WRITE
        assert get_tool_tier("migrate_chapter") == ToolTier.MAINTENANCE


class TestProtocol:
    """Tests for the non-tool methods."""

    @pytest.mark.asyncio
    async def test_initialize(self, ctx):
        """Test the handshake reports protocol version and server info."""
        response = await dispatch({"jsonrpc": "2.0", "id": 1, "method": "initialize"}, ctx)
        result = response["result"]
        assert result["protocolVersion"] == PROTOCOL_VERSION
        assert result["serverInfo"] == {"name": "fractal-prose", "version": __version__}
        assert "tools" in result["capabilities"]

    @pytest.mark.asyncio
    async def test_tools_list(self, ctx):
        """Test tools/list returns the definitions."""
        response = await dispatch({"jsonrpc": "2.0", "id": 2, "method": "tools/list"}, ctx)
        assert response["id"] == 2
        assert response["result"]["tools"] == TOOL_DEFINITIONS

    @pytest.mark.asyncio
    async def test_ping(self, ctx):
        """Test ping answers with an empty result."""
        response = await dispatch({"jsonrpc": "2.0", "id": "p", "method": "ping"}, ctx)
        assert response == {"jsonrpc": "2.0", "id": "p", "result": {}}

    @pytest.mark.asyncio
    async def test_unknown_method(self, ctx):
        """Test unknown methods are reported."""
        response = await dispatch({"jsonrpc": "2.0", "id": 3, "method": "resources/list"}, ctx)
        assert response["error"]["code"] == METHOD_NOT_FOUND
        assert response["error"]["message"] == "Method not found: resources/list"

    @pytest.mark.asyncio
    async def test_notification_gets_no_response(self, ctx):
        """Test requests without an id are not answered."""
        request = {"jsonrpc": "2.0", "method": "notifications/initialized"}
        assert await dispatch(request, ctx) is None

    @pytest.mark.asyncio
    async def test_invalid_request(self, ctx):
        """Test a request without a method is invalid."""
        response = await dispatch({"jsonrpc": "2.0", "id": 4}, ctx)
        assert response["error"]["code"] == INVALID_REQUEST
        assert response["id"] is None

    @pytest.mark.asyncio
    async def test_batch(self, ctx):
        """Test a batch answers every request and skips notifications."""
        batch = [
            {"jsonrpc": "2.0", "id": 1, "method": "ping"},
            {"jsonrpc": "2.0", "method": "notifications/initialized"},
            {"jsonrpc": "2.0", "id": 2, "method": "ping"},
        ]
        responses = await dispatch(batch, ctx)
        assert [r["id"] for r in responses] == [1, 2]

    @pytest.mark.asyncio
    async def test_empty_batch(self, ctx):
        """Test an empty batch is invalid."""
        response = await dispatch([], ctx)
        assert response["error"]["code"] == INVALID_REQUEST


class TestToolsCall:
    """Tests for tools/call."""

    @pytest.mark.asyncio
    async def test_success(self, ctx):
        """Test a tool result comes back as one JSON text block."""
        response = await dispatch(call("get_chapter", {"path": "chapters/ch01.md"}), ctx)
        result = response["result"]
        assert result["isError"] is False
        assert result["content"][0]["type"] == "text"
        data = json.loads(result["content"][0]["text"])
        assert [b["id"] for b in data["beats"]] == ["b01", "b02", "b03"]

    @pytest.mark.asyncio
    async def test_tool_error_is_result(self, ctx):
        """Test engine errors are tool results flagged as errors, not protocol errors."""
        arguments = {"path": "chapters/ch01.md", "beat_id": "b99"}
        response = await dispatch(call("get_beat", arguments), ctx)
        result = response["result"]
        assert result["isError"] is True
        assert json.loads(result["content"][0]["text"])["code"] == "not_found"

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, ctx):
        """Test argument validation failures are invalid params with details."""
        response = await dispatch(call("get_beat", {"path": "chapters/ch01.md"}), ctx)
        error = response["error"]
        assert error["code"] == INVALID_PARAMS
        assert error["message"] == "Invalid arguments for get_beat"
        assert error["data"][0]["loc"] == ("beat_id",)

    @pytest.mark.asyncio
    async def test_unknown_tool(self, ctx):
        """Test unknown tool names are invalid params."""
        response = await dispatch(call("delete_everything", {}), ctx)
        assert response["error"]["code"] == INVALID_PARAMS
        assert response["error"]["message"] == "Unknown tool: delete_everything"

    @pytest.mark.asyncio
    async def test_unexpected_failure(self, ctx, monkeypatch):
        """Test an unexpected exception inside a handler becomes a server error."""

        def broken(path):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(ctx.store, "read_text", broken)
        response = await dispatch(call("get_chapter", {"path": "chapters/ch01.md"}), ctx)
        assert response["error"]["code"] == SERVER_ERROR
        assert response["error"]["message"] == "disk on fire"
