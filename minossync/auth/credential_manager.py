import os
import time
from typing import Optional

from dotenv import load_dotenv
import requests

from minossync.exceptions import AuthError, ConfigError

GRAPH_SCOPE = "https://graph.microsoft.com/.default"
TOKEN_URL = "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/token"


class CredentialManager:
    """
    Loads INTUNE_* environment variables (optionally from .env) and manages
    a cached Microsoft Graph access token that is refreshed automatically
    when it is about to expire.

    Explicit tenant_id / client_id / client_secret arguments take precedence
    over the environment.
    """

    def __init__(
        self,
        env_prefix: str = "INTUNE_",
        refresh_margin: int = 60,
        *,
        tenant_id: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        timeout: int = 30,
    ) -> None:
        """
        :param env_prefix: Prefix used for environment variables.
        :param refresh_margin: Seconds before real expiry when we proactively refresh.
        :param timeout: Token request timeout in seconds.
        """
        load_dotenv()
        self.env_prefix = env_prefix
        self.refresh_margin = refresh_margin
        self.timeout = timeout
        self._explicit = {
            "TENANT_ID": tenant_id,
            "CLIENT_ID": client_id,
            "CLIENT_SECRET": client_secret,
        }
        self._token: Optional[str] = None
        self._token_expires_at: Optional[int] = None  # UNIX epoch

    # --------------------------------------------------------------------- #
    # Helper: read required value
    # --------------------------------------------------------------------- #
    def _env(self, key: str) -> str:
        explicit = self._explicit.get(key)
        if explicit:
            return explicit
        full_key = f"{self.env_prefix}{key}"
        value = os.getenv(full_key)
        if not value:
            raise ConfigError(f"Missing required environment variable: {full_key}")
        return value

    # --------------------------------------------------------------------- #
    # Public getters for ID / secret
    # --------------------------------------------------------------------- #
    def get_client_id(self) -> str:
        return self._env("CLIENT_ID")

    def get_tenant_id(self) -> str:
        return self._env("TENANT_ID")

    def get_client_secret(self) -> str:
        return self._env("CLIENT_SECRET")

    # --------------------------------------------------------------------- #
    # Token handling
    # --------------------------------------------------------------------- #
    def _token_expired(self) -> bool:
        if self._token is None or self._token_expires_at is None:
            return True
        return time.time() >= (self._token_expires_at - self.refresh_margin)

    def _fetch_token(self) -> None:
        """
        Performs the client-credentials flow and stores
        self._token and self._token_expires_at.
        """
        url = TOKEN_URL.format(tenant=self.get_tenant_id())

        data = {
            "client_id": self.get_client_id(),
            "client_secret": self.get_client_secret(),
            "grant_type": "client_credentials",
            "scope": GRAPH_SCOPE,
        }

        try:
            response = requests.post(url, data=data, timeout=self.timeout)
            response.raise_for_status()
            token_data = response.json()
            token = token_data["access_token"]
            # expires_in is seconds until expiry
            expires_in = int(token_data.get("expires_in", 0))
        except requests.exceptions.HTTPError as err:
            # Entra ID puts the useful part in error_description
            detail = ""
            try:
                body = err.response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                detail = str(body.get("error_description", ""))
            raise AuthError(
                f"Token request failed: {err.response.status_code} {detail}".rstrip()
            ) from err
        except requests.exceptions.RequestException as err:
            raise AuthError(f"Token request failed: {err}") from err
        except (KeyError, TypeError, ValueError) as err:
            raise AuthError("Token response did not contain an access_token") from err

        self._token = token
        self._token_expires_at = int(time.time()) + expires_in

    def get_token(self) -> str:
        """
        Returns a valid access token, refreshing it when necessary.
        """
        if self._token_expired():
            self._fetch_token()
        # At this point self._token is guaranteed to be str and valid
        return self._token  # type: ignore[return-value]
