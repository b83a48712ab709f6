"""Open a pull request and annotate it with reviewers, assignees and labels."""

from __future__ import annotations

import logging

from ..errors import DuplicatePullRequestError, UpstreamApiError
from ..github.api import GitHubClient
from ..models import BranchPair, PullRequestSpec, RepositoryTarget
from ..policy.validation import require

logger = logging.getLogger(__name__)


def build_issue_update(pr_spec: PullRequestSpec) -> dict[str, list[str]]:
    """Return the issue patch for the PR; empty when there is nothing to set."""
    patch: dict[str, list[str]] = {}
    assignees = [login for login in pr_spec.assignees or [] if login]
    labels = [label for label in pr_spec.labels or [] if label]
    if assignees:
        patch["assignees"] = assignees
    if labels:
        patch["labels"] = labels
    return patch


def create_pull_request(
    client: GitHubClient,
    repo: RepositoryTarget,
    branches: BranchPair,
    pr_spec: PullRequestSpec,
) -> int:
    """Open a pull request from the working branch into the reference branch.

    Reviewers are requested and the assignee/label patch is applied as
    follow-up calls.  There is no lookup of an existing pull request: if one
    is already open for the same head and base, GitHub's rejection is
    surfaced as ``DuplicatePullRequestError``.

    :return: the pull request number
    """
    require(
        organization=repo.organization,
        repo_name=repo.repo_name,
        working_branch=branches.working_branch,
        reference_branch=branches.reference_branch,
        title=pr_spec.title,
    )
    slug = repo.slug

    try:
        pull = client.request(
            "POST",
            f"/repos/{slug}/pulls",
            json={
                "title": pr_spec.title,
                "head": branches.working_branch,
                "base": branches.reference_branch,
                "body": pr_spec.body or "",
            },
        )
    except UpstreamApiError as exc:
        # GitHub answers 422 for every validation failure; only this one is a duplicate
        if exc.status == 422 and "already exists" in exc.message.lower():
            raise DuplicatePullRequestError(exc.message, status=exc.status) from exc
        raise
    number = pull["number"]
    logger.info("Opened pull request #%s on %s (%s -> %s)", number, slug, branches.working_branch, branches.reference_branch)

    reviewers = [login for login in pr_spec.reviewers or [] if login]
    if reviewers:
        client.request(
            "POST",
            f"/repos/{slug}/pulls/{number}/requested_reviewers",
            json={"reviewers": reviewers},
        )

    patch = build_issue_update(pr_spec)
    if patch:
        client.request("PATCH", f"/repos/{slug}/issues/{number}", json=patch)

    return number
