"""Typed errors raised by the GitHub Content Utility.

Every failure aborts the operation that raised it; nothing in this package
retries or recovers locally.  Errors that originate from a GitHub response
carry the upstream ``status`` and ``message``.
"""

from __future__ import annotations


class ContentUtilityError(Exception):
    """Base class for every error raised by this package."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.message} (status {self.status})"


class InvalidArgument(ContentUtilityError, ValueError):
    """A required input was missing or empty.  Raised before any network call."""


class KeyParseError(ContentUtilityError, ValueError):
    """The private key is not a PEM-encoded RSA private key."""


class InstallationNotFoundError(ContentUtilityError):
    """The GitHub App has no installation on the requested account."""


class BranchNotFoundError(ContentUtilityError):
    """A branch that must exist is missing from the repository refs."""


class ContentNotFoundError(ContentUtilityError):
    """The requested path does not resolve to a file on the branch."""


class UpstreamApiError(ContentUtilityError, RuntimeError):
    """GitHub answered with an unexpected status, or the request never completed."""


class AuthExchangeError(UpstreamApiError):
    """The app assertion could not be exchanged for an installation token."""


class BranchAlreadyExistsError(UpstreamApiError):
    """GitHub rejected a branch creation because the ref already exists."""


class ConcurrentUpdateError(UpstreamApiError):
    """GitHub rejected a ref update that was not a fast-forward."""


class DuplicatePullRequestError(UpstreamApiError):
    """A pull request already exists for the head/base pair."""
