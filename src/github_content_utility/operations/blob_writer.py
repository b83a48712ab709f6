"""Commit a single file change through the Git Data API.

The write path builds the commit graph object by object:

1. ensure the working branch exists, branching it off the reference branch
   when it is missing;
2. read the working branch tip and the tree of that commit;
3. create a blob holding the new content;
4. create a tree layered on the tip tree with the blob at ``file_path``;
5. create a commit of that tree whose only parent is the tip;
6. fast-forward the working branch to the new commit.

Each step consumes the SHA produced by the one before it.  A failure aborts
the sequence; objects already written stay unreferenced on GitHub until they
are garbage-collected.
"""

from __future__ import annotations

import logging

from ..errors import BranchAlreadyExistsError, BranchNotFoundError, ConcurrentUpdateError, InvalidArgument
from ..github.api import GitHubClient
from ..models import BranchPair, ChangeRequest, GitRef, RepositoryTarget, TreeItemMode, head_ref
from ..policy.validation import require
from .refs import find_branch, list_branch_refs, url_path

logger = logging.getLogger(__name__)


def ensure_branch(client: GitHubClient, repo: RepositoryTarget, branches: BranchPair) -> GitRef:
    """Return the working branch ref, creating it from the reference branch tip if absent."""
    refs = list_branch_refs(client, repo)
    working = find_branch(refs, branches.working_branch)
    if working is not None:
        return working

    reference = find_branch(refs, branches.reference_branch)
    if reference is None:
        raise BranchNotFoundError(f"Branch '{branches.reference_branch}' doesn't exist in {repo.slug}")

    logger.info(
        "Creating branch %s from %s at %s",
        branches.working_branch,
        branches.reference_branch,
        reference.target_sha,
    )
    data = client.request(
        "POST",
        f"/repos/{repo.slug}/git/refs",
        json={"ref": head_ref(branches.working_branch), "sha": reference.target_sha},
        errors={422: BranchAlreadyExistsError},
    )
    return GitRef(name=data["ref"], target_sha=data["object"]["sha"])


def write_and_commit(
    client: GitHubClient,
    repo: RepositoryTarget,
    branches: BranchPair,
    change: ChangeRequest,
) -> str:
    """Commit ``change`` on the working branch and return the new commit SHA.

    :raises InvalidArgument: if a required field is empty
    :raises BranchNotFoundError: if the working branch is missing and so is the reference branch
    :raises BranchAlreadyExistsError: if another writer created the working branch first
    :raises ConcurrentUpdateError: if the branch moved before the fast-forward
    :raises UpstreamApiError: for any other rejected call
    """
    require(
        organization=repo.organization,
        repo_name=repo.repo_name,
        working_branch=branches.working_branch,
        reference_branch=branches.reference_branch,
        file_path=change.file_path,
        commit_message=change.commit_message,
    )
    if change.file_content is None:
        raise InvalidArgument("Missing required value(s): file_content")
    try:
        mode = TreeItemMode.parse(change.tree_item_mode)
    except ValueError as exc:
        raise InvalidArgument(str(exc)) from exc
    slug = repo.slug

    ensure_branch(client, repo, branches)

    # Re-read the tip rather than trusting the listing
    ref = client.request("GET", f"/repos/{slug}/git/ref/heads/{url_path(branches.working_branch)}")
    tip_sha = ref["object"]["sha"]
    tip = client.request("GET", f"/repos/{slug}/git/commits/{tip_sha}")
    base_tree_sha = tip["tree"]["sha"]

    blob = client.request(
        "POST",
        f"/repos/{slug}/git/blobs",
        json={"content": change.file_content, "encoding": "utf-8"},
    )

    tree = client.request(
        "POST",
        f"/repos/{slug}/git/trees",
        json={
            "base_tree": base_tree_sha,
            "tree": [
                {
                    "path": change.file_path.lstrip("/"),
                    "mode": mode.value,
                    "type": "blob",
                    "sha": blob["sha"],
                }
            ],
        },
    )

    commit = client.request(
        "POST",
        f"/repos/{slug}/git/commits",
        json={"message": change.commit_message, "tree": tree["sha"], "parents": [tip_sha]},
    )

    client.request(
        "PATCH",
        f"/repos/{slug}/git/refs/heads/{url_path(branches.working_branch)}",
        json={"sha": commit["sha"], "force": False},
        errors={422: ConcurrentUpdateError},
    )
    logger.info("Committed %s to %s@%s as %s", change.file_path, slug, branches.working_branch, commit["sha"])
    return commit["sha"]
