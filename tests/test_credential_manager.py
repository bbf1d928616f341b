"""
Tests for minossync.auth.credential_manager module.

Tests token acquisition including:
- Reading INTUNE_* variables and explicit arguments
- Client-credentials request shape
- Token caching and refresh
- Error mapping to ConfigError and AuthError
"""

from __future__ import annotations

import pytest
import requests
import requests_mock

from minossync.auth import CredentialManager
from minossync.auth.credential_manager import TOKEN_URL
from minossync.exceptions import AuthError, ConfigError

TENANT = "contoso-tenant"
URL = TOKEN_URL.format(tenant=TENANT)


@pytest.fixture
def intune_env(monkeypatch):
    """Set the three INTUNE_* variables."""
    monkeypatch.setenv("INTUNE_TENANT_ID", TENANT)
    monkeypatch.setenv("INTUNE_CLIENT_ID", "client-id")
    monkeypatch.setenv("INTUNE_CLIENT_SECRET", "client-secret")


class TestCredentialLookup:
    """Tests for credential resolution."""

    def test_reads_environment(self, intune_env):
        """Test that values come from INTUNE_* variables."""
        creds = CredentialManager()

        assert creds.get_tenant_id() == TENANT
        assert creds.get_client_id() == "client-id"
        assert creds.get_client_secret() == "client-secret"

    def test_explicit_arguments_win(self, intune_env):
        """Test that constructor arguments override the environment."""
        creds = CredentialManager(tenant_id="other-tenant")
        assert creds.get_tenant_id() == "other-tenant"

    def test_missing_variable_raises_config_error(self, monkeypatch):
        """Test that a missing variable names the variable."""
        monkeypatch.delenv("INTUNE_CLIENT_SECRET", raising=False)
        creds = CredentialManager(tenant_id=TENANT, client_id="client-id")

        with pytest.raises(ConfigError, match="INTUNE_CLIENT_SECRET"):
            creds.get_token()


class TestGetToken:
    """Tests for token requests and caching."""

    def test_client_credentials_request(self, intune_env):
        """Test the token request form body."""
        with requests_mock.Mocker() as m:
            m.post(URL, json={"access_token": "abc", "expires_in": 3600})

            token = CredentialManager().get_token()

            body = m.last_request.text

        assert token == "abc"
        assert "grant_type=client_credentials" in body
        assert "client_id=client-id" in body
        assert "scope=https%3A%2F%2Fgraph.microsoft.com%2F.default" in body

    def test_token_is_cached(self, intune_env):
        """Test that a valid token is reused."""
        with requests_mock.Mocker() as m:
            m.post(URL, json={"access_token": "abc", "expires_in": 3600})
            creds = CredentialManager()

            creds.get_token()
            creds.get_token()

            assert m.call_count == 1

    def test_token_refreshed_near_expiry(self, intune_env):
        """Test that a token inside the refresh margin is replaced."""
        with requests_mock.Mocker() as m:
            m.post(
                URL,
                [
                    {"json": {"access_token": "old", "expires_in": 30}},
                    {"json": {"access_token": "new", "expires_in": 3600}},
                ],
            )
            creds = CredentialManager(refresh_margin=60)

            assert creds.get_token() == "old"
            assert creds.get_token() == "new"

    def test_rejected_credentials_raise_auth_error(self, intune_env):
        """Test that Entra ID errors include the error description."""
        with requests_mock.Mocker() as m:
            m.post(
                URL,
                status_code=401,
                json={
                    "error": "invalid_client",
                    "error_description": "AADSTS7000215: Invalid client secret provided.",
                },
            )

            with pytest.raises(AuthError, match="AADSTS7000215"):
                CredentialManager().get_token()

    def test_connection_error_raises_auth_error(self, intune_env):
        """Test that transport failures raise AuthError."""
        with requests_mock.Mocker() as m:
            m.post(URL, exc=requests.exceptions.ConnectionError)

            with pytest.raises(AuthError):
                CredentialManager().get_token()

    def test_missing_access_token_raises_auth_error(self, intune_env):
        """Test that a response without access_token raises AuthError."""
        with requests_mock.Mocker() as m:
            m.post(URL, json={"token_type": "Bearer"})

            with pytest.raises(AuthError, match="access_token"):
                CredentialManager().get_token()

    def test_non_object_token_response_raises_auth_error(self, intune_env):
        """Test that a JSON array instead of an object raises AuthError."""
        with requests_mock.Mocker() as m:
            m.post(URL, json=["unexpected"])

            with pytest.raises(AuthError, match="access_token"):
                CredentialManager().get_token()

    def test_non_object_error_body_keeps_status(self, intune_env):
        """Test that a rejected request with a list body still reports the status."""
        with requests_mock.Mocker() as m:
            m.post(URL, status_code=400, json=["invalid_client"])

            with pytest.raises(AuthError, match="400"):
                CredentialManager().get_token()
