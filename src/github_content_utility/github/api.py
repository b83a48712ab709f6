"""GitHub REST API wrapper."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from ..constants import GITHUB_ACCEPT, GITHUB_API_URL, GITHUB_API_VERSION, HTTP_TIMEOUT_S, PAGE_SIZE
from ..errors import ContentUtilityError, UpstreamApiError
from ..policy.redaction import redact_secrets

logger = logging.getLogger(__name__)

ErrorMap = Mapping[int, type[ContentUtilityError]]


def _upstream_message(resp: httpx.Response) -> str:
    """Return GitHub's error message, with any field-level details appended."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if not isinstance(data, dict):
        return resp.text
    message = str(data.get("message") or resp.reason_phrase)
    details = [
        str(err.get("message") or err.get("code"))
        for err in data.get("errors") or []
        if isinstance(err, dict) and (err.get("message") or err.get("code"))
    ]
    if details:
        message = f"{message}: {'; '.join(details)}"
    return message


class GitHubClient:
    """An ``httpx`` session authenticated against the GitHub API.

    The same class serves the app-level session (bearer = signed JWT) and the
    installation session (bearer = installation token).  Use it as a context
    manager so the connection pool is closed when the operation ends.
    """

    def __init__(
        self,
        token: str,
        app_name: str,
        *,
        base_url: str = GITHUB_API_URL,
        transport: httpx.BaseTransport | None = None,
        timeout: float = HTTP_TIMEOUT_S,
    ) -> None:
        self._token = token
        self.app_name = app_name
        self._client = httpx.Client(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": GITHUB_ACCEPT,
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
                # GitHub requires a product identifier in the User-Agent
                "User-Agent": app_name,
            },
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, object] | None = None,
        json: dict[str, object] | None = None,
        errors: ErrorMap | None = None,
        default_error: type[UpstreamApiError] = UpstreamApiError,
    ) -> Any:
        """Perform a request against the GitHub API and return the decoded body.

        ``path`` is relative to the API root and must start with ``/``.  A
        non-2xx response raises the exception class registered for its status
        in ``errors``, or ``default_error`` otherwise; the upstream status and
        message are attached.  Transport failures raise ``default_error`` with
        no status.
        """
        if not path.startswith("/"):
            raise ValueError(f"Invalid GitHub API path: {path}")

        try:
            resp = self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            message = redact_secrets(f"GitHub API request failed: {method} {path}: {exc}", [self._token])
            logger.error(message)
            raise default_error(message) from exc

        if 200 <= resp.status_code < 300:
            if resp.status_code == 204 or not resp.content:
                return None
            return resp.json()

        message = redact_secrets(_upstream_message(resp), [self._token])
        logger.error("GitHub API error %s on %s %s: %s", resp.status_code, method, path, message)
        error_class = (errors or {}).get(resp.status_code, default_error)
        raise error_class(message, status=resp.status_code)

    def paginate(
        self,
        path: str,
        *,
        params: dict[str, object] | None = None,
        errors: ErrorMap | None = None,
        default_error: type[UpstreamApiError] = UpstreamApiError,
    ) -> list[Any]:
        """Collect every page of a list endpoint.  Paging stops at the first short page."""
        items: list[Any] = []
        page = 1
        while True:
            query = {**(params or {}), "per_page": PAGE_SIZE, "page": page}
            data = self.request("GET", path, params=query, errors=errors, default_error=default_error)
            batch = data or []
            items.extend(batch)
            if len(batch) < PAGE_SIZE:
                return items
            page += 1
