"""Tests for configuration settings and the configuration resolver."""

import httpx
import pytest

from hookbase_client.resolver import IDENTITY_PATH, ConfigurationResolver
from hookbase_shared.config import DEFAULT_API_URL, HookbaseSettings, StartupMode
from hookbase_shared.errors import ConfigurationNotInitializedError
from hookbase_shared.models import ConfigError, ConfigErrorKind, HookbaseConfig

from conftest import API_KEY, API_URL


def make_settings(**overrides) -> HookbaseSettings:
    values = {"api_key": API_KEY, "api_url": API_URL, "org_id": None}
    values.update(overrides)
    return HookbaseSettings(_env_file=None, **values)


class TestSettings:
    """Tests for HookbaseSettings."""

    def test_defaults(self):
        """Test defaults when only the key is supplied."""
        settings = HookbaseSettings(_env_file=None, api_key=API_KEY, api_url=DEFAULT_API_URL)

        assert settings.base_url == "https://api.hookbase.app"
        assert settings.startup_mode == StartupMode.DEFERRED
        assert settings.enable_audit is False

    def test_debug_lowers_log_level(self):
        assert make_settings(debug=True, log_level="warning").effective_log_level == "DEBUG"
        assert make_settings(log_level="warning").effective_log_level == "WARNING"

    def test_base_url_strips_trailing_slash(self):
        assert make_settings(api_url=f"{API_URL}/").base_url == API_URL

    def test_environment_prefix(self, monkeypatch):
        """Test settings are read from HOOKBASE_* variables."""
        monkeypatch.setenv("HOOKBASE_API_KEY", "whr_from_env")
        monkeypatch.setenv("HOOKBASE_STARTUP_MODE", "strict")

        settings = HookbaseSettings(_env_file=None)

        assert settings.api_key == "whr_from_env"
        assert settings.startup_mode == StartupMode.STRICT

    @pytest.mark.parametrize("raw", ["", "verbose", "yes", "0", "false"])
    def test_unrecognised_flag_values_are_off(self, monkeypatch, raw):
        """Test anything but "1" or "true" leaves a flag off instead of failing startup."""
        monkeypatch.setenv("HOOKBASE_DEBUG", raw)
        monkeypatch.setenv("HOOKBASE_ENABLE_AUDIT", raw)

        settings = HookbaseSettings(_env_file=None)

        assert settings.debug is False
        assert settings.enable_audit is False

    @pytest.mark.parametrize("raw", ["1", "true", "TRUE"])
    def test_flag_values_that_switch_on(self, monkeypatch, raw):
        monkeypatch.setenv("HOOKBASE_DEBUG", raw)

        assert HookbaseSettings(_env_file=None).debug is True

    def test_empty_values_fall_back_to_defaults(self, monkeypatch):
        monkeypatch.setenv("HOOKBASE_API_URL", "")
        monkeypatch.setenv("HOOKBASE_API_KEY", "")
        monkeypatch.setenv("HOOKBASE_STARTUP_MODE", "sometimes")

        settings = HookbaseSettings(_env_file=None)

        assert settings.base_url == DEFAULT_API_URL
        assert settings.api_key is None
        assert settings.startup_mode == StartupMode.DEFERRED


class TestConfigurationResolver:
    """Tests for ConfigurationResolver."""

    def setup_method(self):
        """Set up a resolver backed by a scripted identity endpoint."""
        self.requests: list[httpx.Request] = []
        self.identity_status = 200
        self.identity_body = {"organizations": [{"id": "org_1", "name": "Acme", "slug": "acme"}]}
        self.network_error = None

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            if self.network_error is not None:
                raise self.network_error
            return httpx.Response(self.identity_status, json=self.identity_body)

        self.resolver = ConfigurationResolver(transport=httpx.MockTransport(handler))

    @pytest.mark.asyncio
    async def test_missing_credential(self):
        """Test a missing key fails without any request."""
        outcome = await self.resolver.resolve(make_settings(api_key=None))

        assert isinstance(outcome, ConfigError)
        assert outcome.kind == ConfigErrorKind.MISSING_CREDENTIAL
        assert "HOOKBASE_API_KEY" in outcome.message
        assert self.requests == []

    @pytest.mark.asyncio
    async def test_invalid_credential_format(self):
        """Test keys without the whr_ prefix are rejected locally."""
        outcome = await self.resolver.resolve(make_settings(api_key="sk_live_123"))

        assert isinstance(outcome, ConfigError)
        assert outcome.kind == ConfigErrorKind.INVALID_CREDENTIAL_FORMAT
        assert 'start with "whr_"' in outcome.message
        assert self.requests == []

    @pytest.mark.asyncio
    async def test_explicit_organization_skips_lookup(self):
        """Test HOOKBASE_ORG_ID bypasses auto-detection."""
        outcome = await self.resolver.resolve(make_settings(org_id="org_explicit"))

        assert outcome == HookbaseConfig(api_url=API_URL, api_key=API_KEY, org_id="org_explicit")
        assert self.requests == []

    @pytest.mark.asyncio
    async def test_single_organization(self):
        """Test the only organization is selected automatically."""
        outcome = await self.resolver.resolve(make_settings())

        assert isinstance(outcome, HookbaseConfig)
        assert outcome.org_id == "org_1"
        assert len(self.requests) == 1
        assert self.requests[0].url.path == IDENTITY_PATH
        assert self.requests[0].headers["authorization"] == f"Bearer {API_KEY}"

    @pytest.mark.asyncio
    async def test_ambiguous_organization(self):
        """Test several organizations require an explicit choice."""
        self.identity_body = {
            "organizations": [
                {"id": "org_1", "name": "Acme", "slug": "acme"},
                {"id": "org_2", "name": "Globex", "slug": "globex"},
            ]
        }

        outcome = await self.resolver.resolve(make_settings())

        assert isinstance(outcome, ConfigError)
        assert outcome.kind == ConfigErrorKind.AMBIGUOUS_ORGANIZATION
        assert "HOOKBASE_ORG_ID" in outcome.message
        assert "  - Acme (org_1)" in outcome.message
        assert "  - Globex (org_2)" in outcome.message
        assert [c.id for c in outcome.candidates] == ["org_1", "org_2"]

    @pytest.mark.asyncio
    async def test_no_organization(self):
        self.identity_body = {"organizations": []}

        outcome = await self.resolver.resolve(make_settings())

        assert isinstance(outcome, ConfigError)
        assert outcome.kind == ConfigErrorKind.NO_ORGANIZATION

    @pytest.mark.asyncio
    async def test_malformed_identity_body_means_no_organization(self):
        """Test an identity payload of the wrong shape never raises."""
        self.identity_body = {"organizations": "nope"}

        outcome = await self.resolver.resolve(make_settings())

        assert isinstance(outcome, ConfigError)
        assert outcome.kind == ConfigErrorKind.NO_ORGANIZATION

    @pytest.mark.asyncio
    async def test_authentication_failed(self):
        """Test a rejected key surfaces the server's message."""
        self.identity_status = 401
        self.identity_body = {"error": "API key revoked"}

        outcome = await self.resolver.resolve(make_settings())

        assert isinstance(outcome, ConfigError)
        assert outcome.kind == ConfigErrorKind.AUTHENTICATION_FAILED
        assert outcome.message == "API key revoked"

    @pytest.mark.asyncio
    async def test_authentication_failed_default_message(self):
        self.identity_status = 403
        self.identity_body = {}

        outcome = await self.resolver.resolve(make_settings())

        assert outcome.kind == ConfigErrorKind.AUTHENTICATION_FAILED
        assert outcome.message == "Invalid API key"

    @pytest.mark.asyncio
    async def test_network_error(self):
        """Test an unreachable API is reported as a network error."""
        self.network_error = httpx.ConnectError("Name or service not known")

        outcome = await self.resolver.resolve(make_settings())

        assert isinstance(outcome, ConfigError)
        assert outcome.kind == ConfigErrorKind.NETWORK_ERROR
        assert outcome.message.startswith("Failed to validate API key: ")
        assert "Name or service not known" in outcome.message

    @pytest.mark.asyncio
    async def test_malformed_api_url_is_a_network_error(self):
        """Test an unparseable HOOKBASE_API_URL is diagnosed instead of raising."""
        outcome = await self.resolver.resolve(make_settings(api_url="http://[::1"))

        assert isinstance(outcome, ConfigError)
        assert outcome.kind == ConfigErrorKind.NETWORK_ERROR
        assert outcome.message.startswith("Failed to validate API key: ")
        assert self.requests == []

    @pytest.mark.asyncio
    async def test_success_is_cached(self):
        """Test a resolved configuration is returned without re-validation."""
        first = await self.resolver.resolve(make_settings())
        second = await self.resolver.resolve(make_settings(api_key=None))

        assert first is second
        assert len(self.requests) == 1
        assert self.resolver.current() is first

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self):
        """Test resolution can be retried after a failure."""
        failed = await self.resolver.resolve(make_settings(api_key=None))
        assert isinstance(failed, ConfigError)
        with pytest.raises(ConfigurationNotInitializedError, match="Missing HOOKBASE_API_KEY"):
            self.resolver.current()

        resolved = await self.resolver.resolve(make_settings())

        assert isinstance(resolved, HookbaseConfig)
        assert self.resolver.current() is resolved

    @pytest.mark.asyncio
    async def test_current_before_resolution_raises(self):
        """Test reading the cache before resolution is a programming error."""
        with pytest.raises(ConfigurationNotInitializedError, match="not initialized"):
            self.resolver.current()

        await self.resolver.resolve(make_settings(api_key="bad"))

        with pytest.raises(ConfigurationNotInitializedError, match="Configuration error: Invalid"):
            self.resolver.current()
