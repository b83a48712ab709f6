"""Branch ref lookups shared by the content operations."""

from __future__ import annotations

from urllib.parse import quote

from ..errors import UpstreamApiError
from ..github.api import GitHubClient
from ..models import GitRef, RepositoryTarget, head_ref


def url_path(value: str) -> str:
    """Percent-escape a branch name or file path for use inside a request path.

    ``/`` separates path segments and stays literal; ``#``, ``?``, ``%`` and
    spaces would otherwise end or alter the path.
    """
    return quote(value, safe="/")


def list_branch_refs(client: GitHubClient, repo: RepositoryTarget) -> list[GitRef]:
    """Return every ``refs/heads/*`` ref of the repository.

    An empty repository has no branches; GitHub reports it with a 409.
    """
    try:
        data = client.paginate(f"/repos/{repo.slug}/git/refs/heads")
    except UpstreamApiError as exc:
        if exc.status == 409:
            return []
        raise
    return [GitRef(name=item["ref"], target_sha=item["object"]["sha"]) for item in data]


def find_branch(refs: list[GitRef], branch: str) -> GitRef | None:
    name = head_ref(branch)
    return next((ref for ref in refs if ref.name == name), None)
