"""Configuration loading for the GitHub Content Utility.

This module loads environment variables from a `.env` file using
`python-dotenv` and populates a `Config` object.  Callers that already hold
their settings can construct `Config` directly instead.

Required variables:
- GITHUB_APP_ID
- GITHUB_APP_NAME
- GITHUB_APP_PRIVATE_KEY (or GITHUB_APP_PRIVATE_KEY_PATH)
- GITHUB_ORGANIZATION
- GITHUB_REPO_NAME

Optional variables with defaults:
- WORKING_BRANCH (default: unset; required only to write or open a PR)
- REFERENCE_BRANCH (default: 'main')
- COMMIT_MESSAGE, PR_TITLE, PR_BODY (default: unset)
- PR_REVIEWERS, PR_ASSIGNEES, PR_LABELS (comma-separated, default: empty)
- FILE_CONTENT_PATHS (comma-separated key=repository path pairs, default: empty)
- FILE_CONTENT_SOURCES (comma-separated key=local file pairs; each file's text
  becomes the content committed for that key, default: empty)
- TREE_ITEM_MODE (default: '100644')
- LOG_LEVEL (default: 'INFO')
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .constants import DEFAULT_LOG_LEVEL, DEFAULT_REFERENCE_BRANCH
from .errors import InvalidArgument
from .models import (
    AppCredentials,
    BranchPair,
    ChangeRequest,
    PullRequestSpec,
    RepositoryTarget,
    TreeItemMode,
)


def _split_list(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _split_mapping(name: str, raw: str | None) -> dict[str, str]:
    """Parse ``"key=value,key=value"``; raises ``RuntimeError`` naming ``name`` on a bad pair."""
    mapping: dict[str, str] = {}
    for item in _split_list(raw):
        key, sep, value = item.partition("=")
        if not sep or not key.strip() or not value.strip():
            raise RuntimeError(f"{name} entries must look like key=value, got {item!r}")
        mapping[key.strip()] = value.strip()
    return mapping


def _read_sources(sources: dict[str, str]) -> dict[str, str]:
    contents: dict[str, str] = {}
    for key, source in sources.items():
        path = Path(source).expanduser()
        if not path.is_file():
            raise RuntimeError(f"Content source for '{key}' not found at: {source}")
        contents[key] = path.read_text(encoding="utf-8")
    return contents


@dataclass
class Config:
    """Everything one run of the utility needs to reach a repository.

    ``file_content_paths`` and ``file_contents`` are keyed by the same logical
    name (e.g. ``"readme"``), so several files can be described while each
    write still commits one of them.
    """

    github_app_id: int
    github_app_name: str
    private_key_pem: str = field(repr=False)
    github_organization: str
    github_repo_name: str
    working_branch: str | None = None
    reference_branch: str = DEFAULT_REFERENCE_BRANCH
    file_content_paths: dict[str, str] = field(default_factory=dict)
    file_contents: dict[str, str] = field(default_factory=dict)
    commit_message: str | None = None
    pull_request_title: str | None = None
    pull_request_body: str = ""
    reviewers: list[str] = field(default_factory=list)
    pull_request_assignees: list[str] = field(default_factory=list)
    pull_request_labels: list[str] = field(default_factory=list)
    tree_item_mode: TreeItemMode = TreeItemMode.BLOB
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def load_from_env(cls) -> Config:
        """Load configuration from environment variables.

        The `.env` file is loaded if present.  Raises `RuntimeError` if
        required variables are missing or malformed.
        """
        load_dotenv()
        missing = []

        app_id_raw = os.getenv("GITHUB_APP_ID")
        if not app_id_raw:
            missing.append("GITHUB_APP_ID")

        app_name = os.getenv("GITHUB_APP_NAME")
        if not app_name:
            missing.append("GITHUB_APP_NAME")

        # The key may be inlined with escaped newlines, as CI secrets usually are
        private_key = os.getenv("GITHUB_APP_PRIVATE_KEY", "").replace("\\n", "\n").strip()
        key_path = os.getenv("GITHUB_APP_PRIVATE_KEY_PATH")
        if not private_key and key_path:
            path = Path(key_path).expanduser()
            if not path.is_file():
                raise RuntimeError(f"GitHub App private key not found at: {key_path}")
            private_key = path.read_text(encoding="utf-8")
        if not private_key:
            missing.append("GITHUB_APP_PRIVATE_KEY")

        organization = os.getenv("GITHUB_ORGANIZATION")
        if not organization:
            missing.append("GITHUB_ORGANIZATION")

        repo_name = os.getenv("GITHUB_REPO_NAME")
        if not repo_name:
            missing.append("GITHUB_REPO_NAME")

        if missing:
            raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

        try:
            app_id = int(app_id_raw)
        except ValueError as exc:
            raise RuntimeError(f"GITHUB_APP_ID must be an integer, got {app_id_raw!r}") from exc

        try:
            tree_item_mode = TreeItemMode.parse(os.getenv("TREE_ITEM_MODE", TreeItemMode.BLOB.value))
        except ValueError as exc:
            raise RuntimeError(str(exc)) from exc

        log_level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL)
        if not isinstance(logging.getLevelName(log_level.upper()), int):
            raise RuntimeError(f"LOG_LEVEL must be a logging level name, got {log_level!r}")

        file_content_paths = _split_mapping("FILE_CONTENT_PATHS", os.getenv("FILE_CONTENT_PATHS"))
        sources = _split_mapping("FILE_CONTENT_SOURCES", os.getenv("FILE_CONTENT_SOURCES"))
        unknown = sorted(set(sources) - set(file_content_paths))
        if unknown:
            raise RuntimeError(f"FILE_CONTENT_SOURCES keys have no FILE_CONTENT_PATHS entry: {', '.join(unknown)}")
        file_contents = _read_sources(sources)

        return cls(
            github_app_id=app_id,
            github_app_name=app_name,
            private_key_pem=private_key,
            github_organization=organization,
            github_repo_name=repo_name,
            working_branch=os.getenv("WORKING_BRANCH") or None,
            reference_branch=os.getenv("REFERENCE_BRANCH") or DEFAULT_REFERENCE_BRANCH,
            file_content_paths=file_content_paths,
            file_contents=file_contents,
            commit_message=os.getenv("COMMIT_MESSAGE") or None,
            pull_request_title=os.getenv("PR_TITLE") or None,
            pull_request_body=os.getenv("PR_BODY", ""),
            reviewers=_split_list(os.getenv("PR_REVIEWERS")),
            pull_request_assignees=_split_list(os.getenv("PR_ASSIGNEES")),
            pull_request_labels=_split_list(os.getenv("PR_LABELS")),
            tree_item_mode=tree_item_mode,
            log_level=log_level,
        )

    def credentials(self) -> AppCredentials:
        return AppCredentials(
            app_id=self.github_app_id,
            app_name=self.github_app_name,
            private_key_pem=self.private_key_pem,
        )

    def repository(self) -> RepositoryTarget:
        return RepositoryTarget(organization=self.github_organization, repo_name=self.github_repo_name)

    def branches(self) -> BranchPair:
        return BranchPair(working_branch=self.working_branch or "", reference_branch=self.reference_branch)

    def file_path(self, key: str) -> str:
        """Return the repository path registered under ``key``."""
        try:
            return self.file_content_paths[key]
        except KeyError:
            raise InvalidArgument(f"No file path configured for '{key}'") from None

    def change_request(self, key: str) -> ChangeRequest:
        """Return the change that writes ``file_contents[key]`` to ``file_content_paths[key]``."""
        path = self.file_path(key)
        if key not in self.file_contents:
            raise InvalidArgument(f"No file content configured for '{key}'")
        return ChangeRequest(
            file_path=path,
            file_content=self.file_contents[key],
            commit_message=self.commit_message or "",
            tree_item_mode=self.tree_item_mode,
        )

    def pull_request_spec(self) -> PullRequestSpec:
        return PullRequestSpec(
            title=self.pull_request_title or "",
            body=self.pull_request_body or "",
            reviewers=list(self.reviewers),
            assignees=list(self.pull_request_assignees),
            labels=list(self.pull_request_labels),
        )
