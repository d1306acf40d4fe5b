"""Tests for the transport dispatcher and the response envelope."""

import httpx
import pytest
from pydantic import ValidationError

from hookbase_client.client import HookbaseClient, clean_query, extract_error_message
from hookbase_shared.errors import ConfigurationNotInitializedError, HookbaseAPIError
from hookbase_shared.models import ApiResponse, HookbaseConfig

from conftest import API_KEY, API_URL, ORG_PREFIX


class TestApiResponse:
    """Tests for the two-variant envelope."""

    def test_rejects_both_data_and_error(self):
        """An envelope cannot carry data and an error at once."""
        with pytest.raises(ValidationError):
            ApiResponse(status=200, data={"a": 1}, error="boom")

    def test_rejects_neither_data_nor_error(self):
        """An envelope must carry one outcome."""
        with pytest.raises(ValidationError):
            ApiResponse(status=200)

    def test_unwrap_success(self):
        """Test unwrap returns the payload."""
        assert ApiResponse(status=200, data={"ok": True}).unwrap() == {"ok": True}

    def test_unwrap_error_raises_with_status(self):
        """Test unwrap raises the remote error with its status."""
        response = ApiResponse(status=404, error="Source not found")

        with pytest.raises(HookbaseAPIError) as exc_info:
            response.unwrap()

        assert exc_info.value.message == "Source not found"
        assert exc_info.value.status == 404


class TestQueryHelpers:
    """Tests for query and error-body helpers."""

    def test_clean_query_drops_unset_values(self):
        """None and empty strings are not sent."""
        assert clean_query({"a": None, "b": "", "c": "x"}) == {"c": "x"}

    def test_clean_query_renders_booleans_and_zero(self):
        """Booleans are lower-case words and zero is kept."""
        assert clean_query({"isDisabled": True, "flag": False, "limit": 0}) == {
            "isDisabled": "true",
            "flag": "false",
            "limit": "0",
        }

    def test_clean_query_none(self):
        assert clean_query(None) == {}

    def test_extract_error_message(self):
        """Test error message extraction from the common body shapes."""
        assert extract_error_message({"error": "Bad key"}) == "Bad key"
        assert extract_error_message({"message": "Nope"}) == "Nope"
        assert extract_error_message({"error": {"message": "Nested"}}) == "Nested"
        assert extract_error_message({"detail": "x"}) is None
        assert extract_error_message("plain text") is None


class TestDispatch:
    """Tests for HookbaseClient.dispatch."""

    @pytest.mark.asyncio
    async def test_success_returns_data(self, api, client):
        """Test a successful round-trip."""
        api.org("GET", "/sources", {"sources": []})

        response = await client.get("/sources")

        assert response.ok
        assert response.status == 200
        assert response.data == {"sources": []}
        assert api.last.url.path == f"{ORG_PREFIX}/sources"

    @pytest.mark.asyncio
    async def test_sends_bearer_credential(self, api, client):
        """Test the API key is sent as a bearer token."""
        api.org("GET", "/sources", {"sources": []})

        await client.get("/sources")

        assert api.last.headers["authorization"] == f"Bearer {API_KEY}"
        assert api.last.headers["content-type"] == "application/json"

    @pytest.mark.asyncio
    async def test_query_params_are_cleaned(self, api, client):
        """Test unset query values are dropped before sending."""
        api.org("GET", "/events", {"events": []})

        await client.get("/events", {"limit": 10, "status": None, "search": ""})

        assert dict(api.last.url.params) == {"limit": "10"}

    @pytest.mark.asyncio
    async def test_empty_success_body_is_empty_object(self, api, client):
        """Test a 2xx response without a body yields an empty object."""
        api.org("DELETE", "/sources/src_1", status=204)

        response = await client.delete("/sources/src_1")

        assert response.ok
        assert response.status == 204
        assert response.data == {}

    @pytest.mark.asyncio
    async def test_remote_error_message(self, api, client):
        """Test the server-supplied message is surfaced with the status."""
        api.org("GET", "/sources/missing", {"error": "Source not found"}, status=404)

        response = await client.get("/sources/missing")

        assert not response.ok
        assert response.status == 404
        assert response.error == "Source not found"

    @pytest.mark.asyncio
    async def test_remote_error_without_message(self, api, client):
        """Test the fallback message when an error body carries none."""
        api.org("POST", "/sources", {"unexpected": True}, status=500)

        response = await client.post("/sources", {"name": "x"})

        assert response.status == 500
        assert response.error == "Request failed"

    @pytest.mark.asyncio
    async def test_invalid_json_success_is_transport_failure(self, api, client):
        """Test an unparseable 2xx body is reported with status 0."""
        api.add("GET", f"{ORG_PREFIX}/sources", content=b"<html>oops</html>")

        response = await client.get("/sources")

        assert response.status == 0
        assert response.error.startswith("Invalid JSON response")

    @pytest.mark.asyncio
    async def test_network_failure_is_status_zero(self, api, client):
        """Test connection failures never raise."""
        api.fail_with = httpx.ConnectError("Connection refused")

        response = await client.get("/sources")

        assert response.status == 0
        assert "Connection refused" in response.error

    @pytest.mark.asyncio
    async def test_malformed_base_url_is_status_zero(self, api):
        bad = HookbaseClient("http://[::1", API_KEY, org_id="org_1", transport=api.transport)

        response = await bad.get("/sources")

        assert response.status == 0
        assert response.error
        assert api.requests == []

    @pytest.mark.asyncio
    async def test_json_body_is_sent(self, api, client):
        """Test request bodies are sent as JSON."""
        api.org("POST", "/tunnels", {"tunnel": {"id": "t1"}}, status=201)

        await client.post("/tunnels", {"name": "dev"})

        assert api.last.method == "POST"
        assert api.last_body() == {"name": "dev"}


class TestOrganizationScope:
    """Tests for organization-scoped paths."""

    def test_org_path(self, client):
        assert client.org_path("/sources") == f"{ORG_PREFIX}/sources"

    def test_bootstrap_client_refuses_org_paths(self):
        """A client without an organization cannot build scoped paths."""
        bootstrap = HookbaseClient(API_URL, API_KEY)

        with pytest.raises(ConfigurationNotInitializedError):
            bootstrap.org_path("/sources")

    def test_trailing_slash_is_trimmed(self):
        assert HookbaseClient(f"{API_URL}/", API_KEY).api_url == API_URL

    def test_from_config(self):
        """Test a client bound to a resolved configuration."""
        config = HookbaseConfig(api_url=API_URL, api_key=API_KEY, org_id="org_1")
        client = HookbaseClient.from_config(config)

        assert client.api_url == API_URL
        assert client.org_id == "org_1"
        assert client.org_path("/sources") == "/api/organizations/org_1/sources"

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, api, client):
        """Test closing twice is safe."""
        api.org("GET", "/sources", {"sources": []})
        await client.get("/sources")

        await client.close()
        await client.close()
