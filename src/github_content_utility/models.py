"""Records passed between the caller and the GitHub operations.

All records are built by the caller for a single operation and treated as
read-only inputs.  Git objects themselves live on GitHub; only their SHAs are
observed here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

HEADS_PREFIX = "refs/heads/"


class TreeItemMode(str, Enum):
    """File modes accepted by the Git tree API.

    The wire value is always the numeric string (``"100644"``), never the
    member name.
    """

    BLOB = "100644"
    EXECUTABLE_BLOB = "100755"
    SUBDIRECTORY_TREE = "040000"
    SUBMODULE_COMMIT = "160000"
    SYMLINK_BLOB = "120000"

    @classmethod
    def parse(cls, raw: str | TreeItemMode) -> TreeItemMode:
        """Return the mode for a numeric string or a symbolic name (``"blob"``)."""
        if isinstance(raw, cls):
            return raw
        text = str(raw).strip()
        for mode in cls:
            if text == mode.value or text.upper().replace("-", "_") == mode.name:
                return mode
        # "40000" is how the tree mode prints once the leading zero is dropped
        if text.isdigit() and text.zfill(6) == cls.SUBDIRECTORY_TREE.value:
            return cls.SUBDIRECTORY_TREE
        raise ValueError(f"Unknown tree item mode: {raw!r}")


@dataclass(frozen=True)
class AppCredentials:
    """Identity of a registered GitHub App."""

    app_id: int
    app_name: str
    private_key_pem: str = field(repr=False)


@dataclass(frozen=True)
class RepositoryTarget:
    organization: str
    repo_name: str

    @property
    def slug(self) -> str:
        return f"{self.organization}/{self.repo_name}"


@dataclass(frozen=True)
class BranchPair:
    """The head branch to create or update and the base it branches from."""

    working_branch: str
    reference_branch: str


@dataclass(frozen=True)
class ChangeRequest:
    file_path: str
    file_content: str
    commit_message: str
    tree_item_mode: TreeItemMode = TreeItemMode.BLOB


@dataclass(frozen=True)
class PullRequestSpec:
    title: str
    body: str = ""
    reviewers: list[str] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class InstallationToken:
    """Short-lived credential for one installation.  Never cached."""

    value: str = field(repr=False)
    organization: str
    expires_at: datetime | None = None


@dataclass(frozen=True)
class GitRef:
    name: str
    target_sha: str

    @property
    def branch(self) -> str:
        return self.name.removeprefix(HEADS_PREFIX)


def head_ref(branch: str) -> str:
    """Return the fully qualified ref name for ``branch``."""
    return f"{HEADS_PREFIX}{branch}"
