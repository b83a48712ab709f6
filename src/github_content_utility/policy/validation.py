"""Argument checks run before any request leaves the process."""

from __future__ import annotations

from ..errors import InvalidArgument


def require(**values: object) -> None:
    """Raise ``InvalidArgument`` naming every argument that is ``None`` or blank.

    >>> require(organization="octo", repo_name="")
    Traceback (most recent call last):
    ...
    github_content_utility.errors.InvalidArgument: Missing required value(s): repo_name
    """
    missing = [
        name
        for name, value in values.items()
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        raise InvalidArgument(f"Missing required value(s): {', '.join(missing)}")
