"""Secret redaction utilities.

This module removes credentials from text before it is logged or attached to
an exception.  GitHub echoes request details in some error bodies, and the
authentication flow handles a private key, an app assertion and an
installation token, none of which may leak into logs.  Redaction is a simple
string replacement with the placeholder ``"<REDACTED>"``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

_TOKEN_PATTERNS = [
    # Private key blocks (BEGIN/END markers)
    re.compile(r"-----BEGIN [A-Z ]*PRIVATE KEY-----[\s\S]+?-----END [A-Z ]*PRIVATE KEY-----"),
    # Bearer credentials (JWT or opaque strings following 'Bearer ')
    re.compile(r"Bearer\s+[A-Za-z0-9\-\._~\+/]+=*", re.IGNORECASE),
    # Compact JWS/JWT: three base64url segments, header starts with '{"' -> 'eyJ'
    re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+"),
    # GitHub tokens: installation (ghs_), user-to-server (ghu_), PATs and friends
    re.compile(r"gh[pousr]_[A-Za-z0-9]{30,}"),
    re.compile(r"github_pat_[A-Za-z0-9_]{20,}"),
]


def redact_secrets(text: str, secrets: Iterable[str] = ()) -> str:
    """Return ``text`` with secrets and common token patterns replaced.

    :param text: arbitrary text that may contain secrets
    :param secrets: iterable of explicit secret strings to redact
    :return: redacted text
    """
    redacted = text or ""
    for secret in secrets:
        if secret:
            redacted = redacted.replace(secret, "<REDACTED>")
    for pattern in _TOKEN_PATTERNS:
        redacted = pattern.sub("<REDACTED>", redacted)
    return redacted
