"""Repository content operations run with an authenticated ``GitHubClient``."""

from .blob_reader import read_blob
from .blob_writer import ensure_branch, write_and_commit
from .pull_requests import build_issue_update, create_pull_request

__all__ = [
    "build_issue_update",
    "create_pull_request",
    "ensure_branch",
    "read_blob",
    "write_and_commit",
]
