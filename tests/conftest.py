"""Pytest configuration and fixtures for GitHub Content Utility tests.

This module provides a FakeGitHub that serves the subset of the GitHub REST
API the utility talks to from an in-memory Git object store, through
``httpx.MockTransport``.  Every request is recorded so tests can assert on
call counts and payloads.

This is ONLY for testing - not used in production.
"""

from __future__ import annotations

import base64
import hashlib
import json
import re

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from github_content_utility.github.api import GitHubClient
from github_content_utility.models import AppCredentials, BranchPair, RepositoryTarget

ORG = "octo-org"
REPO = "widgets"
INSTALLATION_TOKEN = "ghs_" + "T" * 36


def _json(status: int, payload: object) -> httpx.Response:
    return httpx.Response(status, json=payload)


def _error(status: int, message: str) -> httpx.Response:
    return httpx.Response(status, json={"message": message, "documentation_url": "https://docs.github.com"})


class FakeGitHub:
    """In-memory GitHub serving one repository and one app installation."""

    def __init__(self, organization: str = ORG, repo_name: str = REPO) -> None:
        self.organization = organization
        self.repo_name = repo_name
        self.installations: list[dict[str, object]] = [
            {"id": 1001, "account": {"login": "someone-else"}},
            {"id": 4242, "account": {"login": organization}},
        ]
        self.token = INSTALLATION_TOKEN
        self.requests: list[httpx.Request] = []
        self.blobs: dict[str, bytes] = {}
        self.trees: dict[str, dict[str, dict[str, str]]] = {}
        self.commits: dict[str, dict[str, object]] = {}
        self.refs: dict[str, str] = {}
        self.pulls: list[dict[str, object]] = []
        self.large_paths: set[str] = set()
        self._failures: list[tuple[str, str, int, str]] = []

    # -- seeding helpers -------------------------------------------------

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def seed_branch(self, branch: str, files: dict[str, str], parent: str | None = None) -> str:
        """Create a commit holding ``files`` and point ``branch`` at it."""
        entries = {}
        for path, content in files.items():
            entries[path] = {"mode": "100644", "type": "blob", "sha": self._store_blob(content.encode("utf-8"))}
        tree_sha = self._store_tree(entries)
        commit_sha = self._store_commit(tree_sha, [parent] if parent else [], f"seed {branch}")
        self.refs[f"refs/heads/{branch}"] = commit_sha
        return commit_sha

    def fail_next(self, method: str, path_fragment: str, status: int, message: str) -> None:
        """Answer the next matching request with an error instead of handling it."""
        self._failures.append((method, path_fragment, status, message))

    def calls(self, method: str | None = None, path_fragment: str = "") -> list[httpx.Request]:
        return [
            req
            for req in self.requests
            if (method is None or req.method == method) and path_fragment in req.url.path
        ]

    def tip(self, branch: str) -> str:
        return self.refs[f"refs/heads/{branch}"]

    def tree_of(self, commit_sha: str) -> dict[str, dict[str, str]]:
        return self.trees[self.commits[commit_sha]["tree"]]

    def file_at(self, branch: str, path: str) -> str:
        return self.blobs[self.tree_of(self.tip(branch))[path]["sha"]].decode("utf-8")

    # -- object store ----------------------------------------------------

    def _store_blob(self, content: bytes) -> str:
        sha = hashlib.sha1(b"blob %d\0" % len(content) + content).hexdigest()
        self.blobs[sha] = content
        return sha

    def _store_tree(self, entries: dict[str, dict[str, str]]) -> str:
        sha = hashlib.sha1(("tree " + json.dumps(entries, sort_keys=True)).encode()).hexdigest()
        self.trees[sha] = dict(entries)
        return sha

    def _store_commit(self, tree: str, parents: list[str], message: str) -> str:
        body = json.dumps({"tree": tree, "parents": parents, "message": message, "n": len(self.commits)})
        sha = hashlib.sha1(("commit " + body).encode()).hexdigest()
        self.commits[sha] = {"tree": tree, "parents": list(parents), "message": message}
        return sha

    def _is_ancestor(self, ancestor: str, sha: str) -> bool:
        pending = [sha]
        while pending:
            current = pending.pop()
            if current == ancestor:
                return True
            pending.extend(self.commits.get(current, {}).get("parents", []))
        return False

    # -- HTTP ------------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        for index, (method, fragment, status, message) in enumerate(self._failures):
            if request.method == method and fragment in path:
                del self._failures[index]
                return _error(status, message)

        auth = request.headers.get("Authorization", "")
        if path.startswith("/app/"):
            if not auth.startswith("Bearer eyJ"):
                return _error(401, "A JSON web token could not be decoded")
            return self._handle_app(request, path)

        if auth != f"Bearer {self.token}":
            return _error(401, "Bad credentials")
        prefix = f"/repos/{self.organization}/{self.repo_name}/"
        if not path.startswith(prefix):
            return _error(404, "Not Found")
        return self._handle_repo(request, path[len(prefix):])

    def _handle_app(self, request: httpx.Request, path: str) -> httpx.Response:
        if request.method == "GET" and path == "/app/installations":
            return _json(200, self.installations)
        match = re.fullmatch(r"/app/installations/(\d+)/access_tokens", path)
        if request.method == "POST" and match:
            if not any(str(inst["id"]) == match.group(1) for inst in self.installations):
                return _error(404, "Not Found")
            return _json(201, {"token": self.token, "expires_at": "2030-01-01T00:00:00Z"})
        return _error(404, "Not Found")

    def _handle_repo(self, request: httpx.Request, path: str) -> httpx.Response:
        method = request.method
        body = json.loads(request.content) if request.content else {}

        if method == "GET" and path == "git/refs/heads":
            return _json(200, [self._ref_json(name) for name in sorted(self.refs)])

        match = re.fullmatch(r"git/ref/heads/(.+)", path)
        if method == "GET" and match:
            name = f"refs/heads/{match.group(1)}"
            if name not in self.refs:
                return _error(404, "Not Found")
            return _json(200, self._ref_json(name))

        if method == "POST" and path == "git/refs":
            if body["ref"] in self.refs:
                return _error(422, "Reference already exists")
            if body["sha"] not in self.commits:
                return _error(422, "Object does not exist")
            self.refs[body["ref"]] = body["sha"]
            return _json(201, self._ref_json(body["ref"]))

        match = re.fullmatch(r"git/refs/heads/(.+)", path)
        if method == "PATCH" and match:
            name = f"refs/heads/{match.group(1)}"
            if name not in self.refs:
                return _error(422, "Reference does not exist")
            if not body.get("force") and not self._is_ancestor(self.refs[name], body["sha"]):
                return _error(422, "Update is not a fast forward")
            self.refs[name] = body["sha"]
            return _json(200, self._ref_json(name))

        match = re.fullmatch(r"git/commits/([0-9a-f]+)", path)
        if method == "GET" and match:
            commit = self.commits.get(match.group(1))
            if commit is None:
                return _error(404, "Not Found")
            return _json(200, {
                "sha": match.group(1),
                "message": commit["message"],
                "tree": {"sha": commit["tree"]},
                "parents": [{"sha": parent} for parent in commit["parents"]],
            })

        if method == "POST" and path == "git/blobs":
            assert body["encoding"] == "utf-8"
            return _json(201, {"sha": self._store_blob(body["content"].encode("utf-8"))})

        match = re.fullmatch(r"git/blobs/([0-9a-f]+)", path)
        if method == "GET" and match:
            content = self.blobs[match.group(1)]
            return _json(200, {"sha": match.group(1), "encoding": "base64", "content": base64.b64encode(content).decode()})

        if method == "POST" and path == "git/trees":
            entries = dict(self.trees[body["base_tree"]]) if body.get("base_tree") else {}
            for item in body["tree"]:
                if item["sha"] not in self.blobs:
                    return _error(422, "Tree item sha does not exist")
                entries[item["path"]] = {"mode": item["mode"], "type": item["type"], "sha": item["sha"]}
            return _json(201, {"sha": self._store_tree(entries)})

        if method == "POST" and path == "git/commits":
            if body["tree"] not in self.trees:
                return _error(422, "Tree SHA does not exist")
            sha = self._store_commit(body["tree"], body["parents"], body["message"])
            return _json(201, {"sha": sha, "tree": {"sha": body["tree"]}})

        match = re.fullmatch(r"contents/(.+)", path)
        if method == "GET" and match:
            return self._contents(match.group(1), request.url.params.get("ref"))

        if method == "POST" and path == "pulls":
            if f"refs/heads/{body['head']}" not in self.refs:
                return httpx.Response(422, json={
                    "message": "Validation Failed",
                    "errors": [{"resource": "PullRequest", "field": "head", "code": "invalid"}],
                })
            for pull in self.pulls:
                if pull["head"] == body["head"] and pull["base"] == body["base"]:
                    return httpx.Response(422, json={
                        "message": "Validation Failed",
                        "errors": [{
                            "resource": "PullRequest",
                            "code": "custom",
                            "message": f"A pull request already exists for {self.organization}:{body['head']}.",
                        }],
                    })
            pull = {**body, "number": len(self.pulls) + 1, "reviewers": [], "assignees": [], "labels": []}
            self.pulls.append(pull)
            return _json(201, {"number": pull["number"], "html_url": f"https://github.com/pull/{pull['number']}"})

        match = re.fullmatch(r"pulls/(\d+)/requested_reviewers", path)
        if method == "POST" and match:
            pull = self.pulls[int(match.group(1)) - 1]
            pull["reviewers"] = list(body["reviewers"])
            return _json(201, {"number": pull["number"]})

        match = re.fullmatch(r"issues/(\d+)", path)
        if method == "PATCH" and match:
            pull = self.pulls[int(match.group(1)) - 1]
            pull.update({key: list(value) for key, value in body.items()})
            return _json(200, {"number": pull["number"]})

        return _error(404, "Not Found")

    def _ref_json(self, name: str) -> dict[str, object]:
        return {"ref": name, "object": {"sha": self.refs[name], "type": "commit"}}

    def _contents(self, path: str, ref: str | None) -> httpx.Response:
        name = f"refs/heads/{ref}"
        if ref is None or name not in self.refs:
            return _error(404, "No commit found for the ref")
        tree = self.tree_of(self.refs[name])
        if path in tree:
            entry = tree[path]
            if path in self.large_paths:
                return _json(200, {"type": "file", "path": path, "sha": entry["sha"], "encoding": "none", "content": ""})
            encoded = base64.encodebytes(self.blobs[entry["sha"]]).decode("ascii")
            return _json(200, {"type": "file", "path": path, "sha": entry["sha"], "encoding": "base64", "content": encoded})
        children = sorted({key[len(path) + 1:].split("/")[0] for key in tree if key.startswith(path + "/")})
        if children:
            return _json(200, [{"type": "file", "name": child, "path": f"{path}/{child}"} for child in children])
        return _error(404, "Not Found")


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_private_key) -> str:
    """PKCS#1 PEM, the format GitHub hands out for app keys."""
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


@pytest.fixture
def credentials(private_key_pem) -> AppCredentials:
    return AppCredentials(app_id=123456, app_name="content-bot", private_key_pem=private_key_pem)


@pytest.fixture
def fake_github() -> FakeGitHub:
    github = FakeGitHub()
    github.seed_branch("main", {"README.md": "# Widgets\n", "docs/guide.md": "Guide\n"})
    return github


@pytest.fixture
def repo() -> RepositoryTarget:
    return RepositoryTarget(organization=ORG, repo_name=REPO)


@pytest.fixture
def branches() -> BranchPair:
    return BranchPair(working_branch="feature-x", reference_branch="main")


@pytest.fixture
def client(fake_github):
    """An installation session wired to the fake GitHub."""
    with GitHubClient(fake_github.token, "content-bot", transport=fake_github.transport) as github_client:
        yield github_client
