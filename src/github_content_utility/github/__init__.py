"""GitHub API integration."""

from .api import GitHubClient
from .auth import build_client, get_installation_token
from .jwt_signer import sign

__all__ = [
    "GitHubClient",
    "build_client",
    "get_installation_token",
    "sign",
]
