"""Microsoft Graph authentication for minossync."""

from .credential_manager import CredentialManager

__all__ = ["CredentialManager"]
