"""Tests for the prompt catalogue."""

import pytest

from hookbase_mcp.prompts import PromptCatalog, argument_schema
from hookbase_shared.errors import PromptError


class TestPromptCatalog:
    """Tests for PromptCatalog."""

    def setup_method(self):
        self.catalog = PromptCatalog()

    def test_lists_all_prompts(self):
        names = [p.name for p in self.catalog.list_prompts()]

        assert names == [
            "hookbase_overview",
            "outbound_webhook_setup",
            "debug_failed_deliveries",
            "send_test_event",
        ]

    def test_argument_schema_is_closed(self):
        """Test prompt argument schemas reject unknown fields."""
        schema = argument_schema(self.catalog.get("outbound_webhook_setup"))

        assert schema["additionalProperties"] is False
        assert schema["required"] == ["customer_name", "webhook_url"]

    def test_overview(self):
        text = self.catalog.render("hookbase_overview")

        assert text.startswith("# Hookbase MCP Server")
        assert "`half_open`" in text
        assert "hookbase_verb_noun" in text

    def test_outbound_setup_default_event_types(self):
        text = self.catalog.render(
            "outbound_webhook_setup",
            {"customer_name": "Acme", "webhook_url": "https://acme.test/hooks"},
        )

        assert "Customer: Acme" in text
        assert "Webhook URL: https://acme.test/hooks" in text
        assert "Event types: [all available event types]" in text

    def test_outbound_setup_with_event_types(self):
        text = self.catalog.render(
            "outbound_webhook_setup",
            {"customer_name": "Acme", "webhook_url": "https://acme.test", "event_types": "order.created"},
        )

        assert "Event types: order.created" in text

    def test_debug_direction(self):
        assert "Direction: both inbound and outbound" in self.catalog.render("debug_failed_deliveries")
        assert "Direction: outbound" in self.catalog.render("debug_failed_deliveries", {"direction": "outbound"})

    def test_debug_rejects_unknown_direction(self):
        with pytest.raises(PromptError, match="Invalid arguments"):
            self.catalog.render("debug_failed_deliveries", {"direction": "sideways"})

    def test_send_test_event(self):
        """Test the application line and idempotency hint."""
        text = self.catalog.render("send_test_event", {"event_type": "order.created", "application_id": "app_1"})

        assert text.startswith("Send a test order.created event to application app_1.")
        assert '- application_id: "app_1"' in text
        assert 'A unique key like "test-' in text

    def test_send_test_event_without_application(self):
        text = self.catalog.render("send_test_event", {"event_type": "order.created"})

        assert text.startswith("Send a test order.created event.")
        assert "application_id" not in text

    def test_missing_required_argument(self):
        with pytest.raises(PromptError, match="customer_name"):
            self.catalog.render("outbound_webhook_setup", {"webhook_url": "https://acme.test"})

    def test_unknown_argument(self):
        with pytest.raises(PromptError):
            self.catalog.render("hookbase_overview", {"verbose": "yes"})

    def test_unknown_prompt(self):
        with pytest.raises(PromptError, match="not found"):
            self.catalog.render("hookbase_nonexistent")
