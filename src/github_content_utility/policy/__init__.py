"""Policy utilities for the GitHub Content Utility."""

from .redaction import redact_secrets
from .validation import require

__all__ = [
    "redact_secrets",
    "require",
]
