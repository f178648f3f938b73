"""
Credential providers for the asset-ledger API client.

The gateway asks its provider for a bearer token on every request, so a
token refreshed elsewhere is picked up without rebuilding the client.
"""

from typing import Optional, Protocol

from app.core.config import config


class CredentialProvider(Protocol):
    def get_token(self) -> Optional[str]:
        """Current bearer token, or None when the user is not signed in."""
        ...


class StaticCredentialProvider:
    """Holds a token handed over by the login flow."""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def set_token(self, token: Optional[str]) -> None:
        self._token = token

    def get_token(self) -> Optional[str]:
        return self._token or None


class SettingsCredentialProvider:
    """Reads the service token from configuration (``API_TOKEN``)."""

    def get_token(self) -> Optional[str]:
        return config.api_token or None
