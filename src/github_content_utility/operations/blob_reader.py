"""Read the content of a file on a repository branch."""

from __future__ import annotations

import base64
import logging

from ..errors import BranchNotFoundError, ContentNotFoundError
from ..github.api import GitHubClient
from ..models import RepositoryTarget
from ..policy.validation import require
from .refs import find_branch, list_branch_refs, url_path

logger = logging.getLogger(__name__)


def _decode(content: str, encoding: str | None) -> str:
    if encoding == "base64":
        return base64.b64decode(content).decode("utf-8")
    return content


def read_blob(client: GitHubClient, repo: RepositoryTarget, reference_branch: str, file_path: str) -> str:
    """Return the UTF-8 content of ``file_path`` on ``reference_branch``.

    :raises InvalidArgument: if any argument is empty
    :raises BranchNotFoundError: if the branch does not exist
    :raises ContentNotFoundError: if the path is missing or is not a file
    """
    require(
        organization=repo.organization,
        repo_name=repo.repo_name,
        reference_branch=reference_branch,
        file_path=file_path,
    )

    if find_branch(list_branch_refs(client, repo), reference_branch) is None:
        raise BranchNotFoundError(f"Branch '{reference_branch}' doesn't exist in {repo.slug}")

    data = client.request(
        "GET",
        f"/repos/{repo.slug}/contents/{url_path(file_path.lstrip('/'))}",
        params={"ref": reference_branch},
        errors={404: ContentNotFoundError},
    )

    # A directory comes back as a listing; only a single file entry is content
    entries = data if isinstance(data, list) else [data]
    files = [entry for entry in entries if entry and entry.get("type") == "file"]
    if isinstance(data, list) or not files:
        raise ContentNotFoundError(f"'{file_path}' is not a file on {repo.slug}@{reference_branch}")

    entry = files[0]
    if entry.get("encoding") == "none" or entry.get("content") is None:
        # Files above the contents API inline limit are served through the blob API
        logger.debug("Fetching %s through the blob API", file_path)
        blob = client.request("GET", f"/repos/{repo.slug}/git/blobs/{entry['sha']}")
        return _decode(blob["content"], blob.get("encoding"))
    return _decode(entry["content"], entry.get("encoding"))
