"""Authentication helpers for the GitHub API.

A GitHub App authenticates in two steps.  It first signs a short-lived JWT
with its private key and uses that assertion to look up the installation on
the target account.  It then exchanges the assertion for an installation
access token, which authorizes repository calls for about an hour.  Tokens
are minted per operation and never cached.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime

import httpx

from ..constants import GITHUB_API_URL, JWT_LIFETIME_S
from ..errors import AuthExchangeError, InstallationNotFoundError
from ..models import AppCredentials, InstallationToken
from ..policy.validation import require
from .api import GitHubClient
from .jwt_signer import sign

logger = logging.getLogger(__name__)


def build_app_claims(app_id: int, now: float) -> dict[str, object]:
    """Return the claims of an app assertion issued at ``now``."""
    issued_at = int(now)
    return {
        "iat": issued_at,
        "exp": issued_at + JWT_LIFETIME_S,
        "iss": str(app_id),
    }


def _parse_expiry(raw: object) -> datetime | None:
    if not isinstance(raw, str) or not raw:
        return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Ignoring unparseable token expiry: %s", raw)
        return None


def get_installation_token(
    credentials: AppCredentials,
    organization: str,
    *,
    base_url: str = GITHUB_API_URL,
    transport: httpx.BaseTransport | None = None,
    clock: Callable[[], float] = time.time,
) -> InstallationToken:
    """Exchange the app's signed assertion for an installation access token.

    :param credentials: the GitHub App identity and private key
    :param organization: login of the account the app is installed on
    :raises InvalidArgument: if a credential field or ``organization`` is empty
    :raises KeyParseError: if the private key cannot be parsed
    :raises InstallationNotFoundError: if the app is not installed on ``organization``
    :raises AuthExchangeError: if GitHub rejects the listing or the exchange
    """
    require(
        app_id=credentials.app_id,
        app_name=credentials.app_name,
        private_key_pem=credentials.private_key_pem,
        organization=organization,
    )

    app_jwt = sign(credentials.private_key_pem, build_app_claims(credentials.app_id, clock()))

    with GitHubClient(app_jwt, credentials.app_name, base_url=base_url, transport=transport) as app_client:
        installations = app_client.paginate("/app/installations", default_error=AuthExchangeError)
        installation_id = next(
            (
                inst["id"]
                for inst in installations
                if (inst.get("account") or {}).get("login") == organization
            ),
            None,
        )
        if installation_id is None:
            raise InstallationNotFoundError(
                f"GitHub App '{credentials.app_name}' has no installation for '{organization}'"
            )

        logger.debug("Exchanging app assertion for installation %s (%s)", installation_id, organization)
        data = app_client.request(
            "POST",
            f"/app/installations/{installation_id}/access_tokens",
            default_error=AuthExchangeError,
        )

    token = (data or {}).get("token")
    if not token:
        raise AuthExchangeError("GitHub returned no installation token")
    return InstallationToken(
        value=token,
        organization=organization,
        expires_at=_parse_expiry(data.get("expires_at")),
    )


def build_client(
    credentials: AppCredentials,
    organization: str,
    *,
    base_url: str = GITHUB_API_URL,
    transport: httpx.BaseTransport | None = None,
    clock: Callable[[], float] = time.time,
) -> GitHubClient:
    """Return a ``GitHubClient`` authenticated as the app's installation on ``organization``.

    Authentication runs to completion before this returns; the caller owns the
    returned client and should close it (it is a context manager).
    """
    token = get_installation_token(
        credentials,
        organization,
        base_url=base_url,
        transport=transport,
        clock=clock,
    )
    return GitHubClient(token.value, credentials.app_name, base_url=base_url, transport=transport)
