"""Config-driven entry points.

Each function validates the configuration, authenticates as the GitHub App
installation (a fresh token every call), runs one operation and closes the
client.  Results are plain JSON-serializable dictionaries.
"""

from __future__ import annotations

from ..config import Config
from ..github.auth import build_client
from ..operations.blob_reader import read_blob
from ..operations.blob_writer import write_and_commit
from ..operations.pull_requests import create_pull_request
from ..policy.validation import require
from ..telemetry.logger import get_logger


def _require_target(config: Config) -> None:
    require(
        github_app_id=config.github_app_id,
        github_app_name=config.github_app_name,
        private_key_pem=config.private_key_pem,
        github_organization=config.github_organization,
        github_repo_name=config.github_repo_name,
    )


def read_blob_content(config: Config, key: str) -> dict[str, object]:
    """Read the file registered under ``key`` from the reference branch."""
    _require_target(config)
    require(reference_branch=config.reference_branch)
    path = config.file_path(key)
    logger = get_logger(__name__, config.log_level)

    with build_client(config.credentials(), config.github_organization) as client:
        content = read_blob(client, config.repository(), config.reference_branch, path)

    logger.info("Read %s from %s@%s", path, config.repository().slug, config.reference_branch)
    return {"path": path, "branch": config.reference_branch, "content": content}


def write_blob_content(config: Config, key: str) -> dict[str, object]:
    """Commit the content registered under ``key`` to the working branch."""
    _require_target(config)
    require(working_branch=config.working_branch, commit_message=config.commit_message)
    change = config.change_request(key)
    logger = get_logger(__name__, config.log_level)

    with build_client(config.credentials(), config.github_organization) as client:
        commit_sha = write_and_commit(client, config.repository(), config.branches(), change)

    logger.info("Wrote %s at %s", change.file_path, commit_sha)
    return {"path": change.file_path, "branch": config.working_branch, "commit_sha": commit_sha}


def open_pull_request(config: Config) -> dict[str, object]:
    """Open a pull request from the working branch into the reference branch."""
    _require_target(config)
    require(working_branch=config.working_branch, pull_request_title=config.pull_request_title)
    logger = get_logger(__name__, config.log_level)

    with build_client(config.credentials(), config.github_organization) as client:
        number = create_pull_request(client, config.repository(), config.branches(), config.pull_request_spec())

    logger.info("Opened #%s from %s into %s", number, config.working_branch, config.reference_branch)
    return {"pr_number": number, "head": config.working_branch, "base": config.reference_branch}


def commit_and_open_pull_request(config: Config, key: str) -> dict[str, object]:
    """Commit the content registered under ``key``, then open the pull request.

    Both steps share one installation session.  A failed commit never opens a
    pull request.
    """
    _require_target(config)
    require(
        working_branch=config.working_branch,
        commit_message=config.commit_message,
        pull_request_title=config.pull_request_title,
    )
    change = config.change_request(key)
    repo = config.repository()
    branches = config.branches()
    logger = get_logger(__name__, config.log_level)

    with build_client(config.credentials(), config.github_organization) as client:
        commit_sha = write_and_commit(client, repo, branches, change)
        number = create_pull_request(client, repo, branches, config.pull_request_spec())

    logger.info("Opened #%s for commit %s on %s", number, commit_sha, repo.slug)
    return {
        "path": change.file_path,
        "commit_sha": commit_sha,
        "pr_number": number,
        "head": branches.working_branch,
        "base": branches.reference_branch,
    }
