"""API key and credential storage package."""

from agentry.auth.api_keys import ApiKeyManager
from agentry.auth.credentials import CredentialStore
from agentry.auth.dependencies import require_auth

__all__ = ["ApiKeyManager", "CredentialStore", "require_auth"]
