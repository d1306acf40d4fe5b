"""Tests for MCP Server components."""

import asyncio
import json
import uuid
from unittest.mock import AsyncMock

import pytest

from hookbase_shared.config import HookbaseSettings, StartupMode
from hookbase_shared.models import (
    ExecutionContext,
    ExecutionType,
    ToolCall,
    ToolDefinition,
    ToolResult,
    ToolResultStatus,
)
from hookbase_shared.schema import strict_object

from conftest import API_KEY, API_URL, ORG_PREFIX


def make_tool(name: str = "hookbase_get_thing", domain: str = "things", **kwargs) -> ToolDefinition:
    return ToolDefinition(
        name=name,
        domain=domain,
        description="A test tool",
        input_schema=strict_object({"thing_id": {"type": "string"}}, ["thing_id"]),
        **kwargs,
    )


def make_call(tool_name: str, parameters: dict) -> ToolCall:
    return ToolCall(
        tool_name=tool_name,
        parameters=parameters,
        context=ExecutionContext(request_id=str(uuid.uuid4())),
    )


class TestToolRegistry:
    """Tests for the ToolRegistry."""

    def test_register_tool(self):
        """Test registering a tool."""
        from hookbase_mcp.registry import ToolRegistry

        registry = ToolRegistry()
        registry.register(make_tool())

        assert registry.get("hookbase_get_thing") is not None
        assert "things" in registry.list_domains()

    def test_register_duplicate_tool_raises(self):
        """Test that registering duplicate tool raises error."""
        from hookbase_mcp.registry import ToolRegistry

        registry = ToolRegistry()
        registry.register(make_tool())

        with pytest.raises(ValueError, match="already registered"):
            registry.register(make_tool())

    def test_list_tools_by_domain(self):
        """Test listing tools filtered by domain."""
        from hookbase_mcp.registry import ToolRegistry

        registry = ToolRegistry()
        registry.register_many([
            make_tool("hookbase_a", "domain1"),
            make_tool("hookbase_b", "domain1"),
            make_tool("hookbase_c", "domain2"),
        ])

        assert len(registry.list_tools(domain="domain1")) == 2
        assert len(registry.list_tools(domain="domain2")) == 1
        assert registry.get_tool_count() == {"domain1": 2, "domain2": 1}

    def test_validate_input(self):
        """Test input validation against the closed schema."""
        from hookbase_mcp.registry import ToolRegistry

        registry = ToolRegistry()
        registry.register(make_tool())

        is_valid, errors = registry.validate_input("hookbase_get_thing", {"thing_id": "t1"})
        assert is_valid
        assert errors == []

        # Missing required field
        is_valid, errors = registry.validate_input("hookbase_get_thing", {})
        assert not is_valid

        # Unknown field
        is_valid, errors = registry.validate_input("hookbase_get_thing", {"thing_id": "t1", "extra": 1})
        assert not is_valid
        assert any("extra" in e for e in errors)

    def test_get_tools_for_mcp(self):
        """Test getting tools in the MCP announcement shape."""
        from hookbase_mcp.registry import ToolRegistry

        registry = ToolRegistry()
        registry.register(make_tool())

        tools = registry.get_tools_for_mcp()

        assert tools == [{
            "name": "hookbase_get_thing",
            "description": "A test tool",
            "inputSchema": make_tool().input_schema,
        }]


class TestToolRouter:
    """Tests for the ToolRouter."""

    def setup_method(self):
        from hookbase_mcp.router import ToolRouter

        self.router = ToolRouter()
        self.router.registry.register(make_tool())
        self.adapter = AsyncMock(return_value=ToolResult(
            tool_name="hookbase_get_thing",
            status=ToolResultStatus.SUCCESS,
            data={"thing": {"id": "t1"}},
        ))
        self.router.register_adapter("things", self.adapter)

    @pytest.mark.asyncio
    async def test_execute_success(self):
        result = await self.router.execute(make_call("hookbase_get_thing", {"thing_id": "t1"}))

        assert result.status == ToolResultStatus.SUCCESS
        assert result.data == {"thing": {"id": "t1"}}
        assert result.execution_time_ms >= 0
        self.adapter.assert_awaited_once()
        assert self.adapter.await_args.args[0] == "hookbase_get_thing"

    @pytest.mark.asyncio
    async def test_unknown_tool(self):
        result = await self.router.execute(make_call("hookbase_nope", {}))

        assert result.status == ToolResultStatus.NOT_FOUND
        assert result.error_code == "TOOL_NOT_FOUND"
        self.adapter.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_validation_error_skips_handler(self):
        """Test unknown fields are rejected before the adapter runs."""
        result = await self.router.execute(make_call("hookbase_get_thing", {"thing_id": "t1", "bogus": True}))

        assert result.status == ToolResultStatus.VALIDATION_ERROR
        assert result.error.startswith("Validation failed: ")
        self.adapter.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_adapter(self):
        from hookbase_mcp.router import ToolRouter

        router = ToolRouter()
        router.registry.register(make_tool())

        result = await router.execute(make_call("hookbase_get_thing", {"thing_id": "t1"}))

        assert result.status == ToolResultStatus.ERROR
        assert result.error_code == "NO_ADAPTER"

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_contained(self):
        """Test an adapter crash becomes an error result."""
        self.adapter.side_effect = KeyError("source")

        result = await self.router.execute(make_call("hookbase_get_thing", {"thing_id": "t1"}))

        assert result.status == ToolResultStatus.ERROR
        assert result.error_code == "EXECUTION_ERROR"
        assert "source" in result.error

    @pytest.mark.asyncio
    async def test_every_outcome_is_audited(self):
        audit_logger = AsyncMock()
        self.router.audit_logger = audit_logger

        await self.router.execute(make_call("hookbase_get_thing", {"thing_id": "t1"}))
        await self.router.execute(make_call("hookbase_get_thing", {}))

        assert audit_logger.log.await_count == 2


class TestAuditLogger:
    """Tests for the AuditLogger."""

    def make_logger(self, tmp_path, **kwargs):
        from hookbase_mcp.audit import AuditLogger

        return AuditLogger(log_path=str(tmp_path / "logs" / "audit.log"), **kwargs)

    def test_redacts_nested_secrets(self, tmp_path):
        """Test sensitive keys are redacted at any depth."""
        audit = self.make_logger(tmp_path)

        redacted = audit._redact_sensitive({
            "name": "api",
            "auth_config": {"token": "abc"},
            "headers": [{"name": "X-Key", "value": "v"}],
            "nested": {"Secret": "s", "items": [{"password": "p", "ok": 1}]},
        })

        assert redacted == {
            "name": "api",
            "auth_config": "[REDACTED]",
            "headers": "[REDACTED]",
            "nested": {"Secret": "[REDACTED]", "items": [{"password": "[REDACTED]", "ok": 1}]},
        }

    @pytest.mark.asyncio
    async def test_log_writes_redacted_json_lines(self, tmp_path):
        """Test entries are written as JSON lines with secrets redacted."""
        audit = self.make_logger(tmp_path, buffer_size=1)
        tool = make_tool(execution_type=ExecutionType.WRITE)
        call = make_call("hookbase_get_thing", {"thing_id": "t1", "api_key": "whr_secret"})
        result = ToolResult(
            tool_name=tool.name,
            status=ToolResultStatus.ERROR,
            error="Not found",
            metadata={"http_status": 404},
        )

        await audit.log(tool, call, result)

        content = (tmp_path / "logs" / "audit.log").read_text()
        assert "whr_secret" not in content
        line = json.loads(content.splitlines()[0])
        assert line["http_status"] == 404
        assert line["parameters"]["api_key"] == "[REDACTED]"

        assert line["request_id"] == call.context.request_id
        assert line["status"] == "error"
        assert line["domain"] == "things"

    @pytest.mark.asyncio
    async def test_buffer_flushed_on_demand(self, tmp_path):
        audit = self.make_logger(tmp_path, buffer_size=100)
        tool = make_tool()
        result = ToolResult(tool_name=tool.name, status=ToolResultStatus.SUCCESS, data={})

        await audit.log(tool, make_call(tool.name, {"thing_id": "t1"}), result)
        assert not (tmp_path / "logs" / "audit.log").exists()

        await audit.flush()
        assert len((tmp_path / "logs" / "audit.log").read_text().splitlines()) == 1

    @pytest.mark.asyncio
    async def test_disabled_logger_writes_nothing(self, tmp_path):
        audit = self.make_logger(tmp_path, enabled=False, buffer_size=1)
        tool = make_tool()
        result = ToolResult(tool_name=tool.name, status=ToolResultStatus.SUCCESS, data={})

        await audit.log(tool, make_call(tool.name, {"thing_id": "t1"}), result)
        await audit.flush()

        assert not (tmp_path / "logs").exists()


def make_settings(**overrides) -> HookbaseSettings:
    values = {"api_key": API_KEY, "api_url": API_URL, "org_id": "org_1", "enable_audit": False}
    values.update(overrides)
    return HookbaseSettings(_env_file=None, **values)


class TestHookbaseMCPServer:
    """Tests for the stdio front end and its startup modes."""

    async def start(self, api, **overrides):
        from hookbase_client.resolver import ConfigurationResolver
        from hookbase_mcp.main import create_server

        return await create_server(
            make_settings(**overrides),
            resolver=ConfigurationResolver(transport=api.transport),
            transport=api.transport,
        )

    @pytest.mark.asyncio
    async def test_tool_call_success(self, api):
        """Test a successful call is serialised as indented JSON."""
        api.add("GET", f"{ORG_PREFIX}/sources", {"sources": [{"id": "src_1", "is_active": 1}]})
        server = await self.start(api)

        result = await server.call_tool("hookbase_list_sources", {})

        assert result.isError is False
        text = result.content[0].text
        assert text.startswith("{\n  ")
        assert json.loads(text)["sources"][0]["isActive"] is True
        await server.shutdown()

    @pytest.mark.asyncio
    async def test_tool_call_error_shape(self, api):
        """Test errors are returned as {"error": ...} with isError set."""
        api.add("GET", f"{ORG_PREFIX}/sources/src_x", {"error": "Source not found"}, status=404)
        server = await self.start(api)

        result = await server.call_tool("hookbase_get_source", {"source_id": "src_x"})

        assert result.isError is True
        assert json.loads(result.content[0].text) == {"error": "Source not found"}

    @pytest.mark.asyncio
    async def test_validation_error_makes_no_request(self, api):
        server = await self.start(api)

        result = await server.call_tool("hookbase_list_sources", {"unexpected": 1})

        assert result.isError is True
        assert json.loads(result.content[0].text)["error"].startswith("Validation failed")
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_malformed_url_is_rejected_before_dispatch(self, api):
        """Test "uri" formatted arguments are checked, not just typed."""
        server = await self.start(api)

        result = await server.call_tool("hookbase_create_destination", {"name": "x", "url": "not a url"})

        assert result.isError is True
        error = json.loads(result.content[0].text)["error"]
        assert error.startswith("Validation failed")
        assert "url" in error
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_repeated_read_gives_identical_text(self, api):
        api.add("GET", f"{ORG_PREFIX}/sources/src_1", {"source": {"id": "src_1", "name": "Stripe", "is_active": 1}})
        server = await self.start(api)

        first = await server.call_tool("hookbase_get_source", {"source_id": "src_1"})
        second = await server.call_tool("hookbase_get_source", {"source_id": "src_1"})

        assert first.isError is False
        assert first.content[0].text == second.content[0].text
        assert len(api.requests) == 2

    @pytest.mark.asyncio
    async def test_concurrent_calls_do_not_share_state(self, api):
        """Test parallel calls over one client each get their own response."""
        api.add("GET", f"{ORG_PREFIX}/sources/src_1", {"source": {"id": "src_1", "name": "Stripe"}})
        api.add("GET", f"{ORG_PREFIX}/sources/src_2", {"source": {"id": "src_2", "name": "GitHub"}})
        server = await self.start(api)

        first, second = await asyncio.gather(
            server.router.execute(make_call("hookbase_get_source", {"source_id": "src_1"})),
            server.router.execute(make_call("hookbase_get_source", {"source_id": "src_2"})),
        )

        assert first.data["source"]["name"] == "Stripe"
        assert second.data["source"]["name"] == "GitHub"
        assert sorted(r.url.path for r in api.requests) == [
            f"{ORG_PREFIX}/sources/src_1",
            f"{ORG_PREFIX}/sources/src_2",
        ]
        await server.shutdown()

    @pytest.mark.asyncio
    async def test_lists_every_tool(self, api):
        server = await self.start(api)

        tools = server.list_tools()

        assert len(tools) == 60
        assert tools[0].name == "hookbase_list_sources"
        assert tools[0].inputSchema["additionalProperties"] is False

    @pytest.mark.asyncio
    async def test_deferred_mode_reports_diagnosis_per_call(self, api):
        """Test deferred startup advertises tools and each call fails with the diagnosis."""
        server = await self.start(api, api_key=None, startup_mode=StartupMode.DEFERRED)

        assert len(server.list_tools()) == 60

        result = await server.call_tool("hookbase_list_sources", {})

        assert result.isError is True
        error = json.loads(result.content[0].text)["error"]
        assert error.startswith("Configuration error: Missing HOOKBASE_API_KEY")
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_strict_mode_advertises_no_tools(self, api):
        """Test strict startup hides tools but keeps prompts."""
        server = await self.start(api, api_key="bad_key", startup_mode=StartupMode.STRICT)

        assert server.list_tools() == []
        assert len(server.list_prompts()) == 4

        result = await server.call_tool("hookbase_list_sources", {})

        assert result.isError is True
        assert "Invalid HOOKBASE_API_KEY format" in json.loads(result.content[0].text)["error"]

    @pytest.mark.asyncio
    async def test_strict_mode_with_valid_config(self, api):
        server = await self.start(api, startup_mode=StartupMode.STRICT)

        assert len(server.list_tools()) == 60

    @pytest.mark.asyncio
    async def test_prompts(self, api):
        server = await self.start(api)

        prompts = server.list_prompts()
        setup = next(p for p in prompts if p.name == "outbound_webhook_setup")
        assert [(a.name, a.required) for a in setup.arguments] == [
            ("customer_name", True),
            ("webhook_url", True),
            ("event_types", False),
        ]

        rendered = server.get_prompt("debug_failed_deliveries", {"direction": "inbound"})

        assert rendered.description == "Guide to diagnose and fix failed webhook deliveries"
        assert rendered.messages[0].role == "user"
        assert "Direction: inbound" in rendered.messages[0].content.text

    @pytest.mark.asyncio
    async def test_unknown_prompt_raises(self, api):
        from hookbase_shared.errors import PromptError

        server = await self.start(api)

        with pytest.raises(PromptError):
            server.get_prompt("hookbase_unknown", None)
