"""RS256 signing of GitHub App assertions."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..constants import JWT_ALGORITHM
from ..errors import KeyParseError


def load_rsa_private_key(private_key_pem: str) -> rsa.RSAPrivateKey:
    """Parse a PEM-encoded RSA private key.

    Both PKCS#1 (``BEGIN RSA PRIVATE KEY``, as downloaded from GitHub) and
    PKCS#8 (``BEGIN PRIVATE KEY``) encodings are accepted.

    :raises KeyParseError: if the PEM is malformed, encrypted, or not RSA
    """
    if not private_key_pem or not private_key_pem.strip():
        raise KeyParseError("Private key is empty")
    try:
        key = serialization.load_pem_private_key(private_key_pem.strip().encode("utf-8"), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise KeyParseError(f"Could not parse private key: {exc}") from exc
    if not isinstance(key, rsa.RSAPrivateKey):
        raise KeyParseError(f"Private key is not an RSA key ({type(key).__name__})")
    return key


def sign(private_key_pem: str, claims: Mapping[str, Any]) -> str:
    """Return a compact RS256 JWT (``header.claims.signature``) for ``claims``.

    A fresh token is minted on every call; callers control claim freshness.
    """
    key = load_rsa_private_key(private_key_pem)
    return jwt.encode(dict(claims), key, algorithm=JWT_ALGORITHM)
