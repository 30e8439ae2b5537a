"""Shared fixtures: an in-memory stand-in for GitHubAPI."""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

import pytest

from action_audit.errors import NotFoundError
from action_audit.models import InfectedPackageEntry
from action_audit.registry import InfectedPackageRegistry

Key = Tuple[str, str, str]


class FakeGitHubAPI:
    """Serves repositories, directories and files from dicts.

    ``errors`` maps ``(owner, repo, path)`` to an exception raised instead of
    answering; anything not registered is a 404.
    """

    def __init__(self, pages: List[List[Dict[str, Any]]] = None) -> None:
        self.pages = pages or []
        self.directories: Dict[Key, List[Dict[str, Any]]] = {}
        self.files: Dict[Key, str] = {}
        self.errors: Dict[Key, Exception] = {}
        self.pages_served = 0
        self.calls: List[Tuple[str, Key]] = []

    def add_workflow(self, org: str, repo: str, name: str, text: str) -> None:
        path = f".github/workflows/{name}"
        self.directories.setdefault((org, repo, ".github/workflows"), []).append(
            {"name": name, "path": path, "type": "file"}
        )
        self.files[(org, repo, path)] = text

    def iter_org_repo_pages(self, org: str):
        for page in self.pages:
            self.pages_served += 1
            yield page

    def _lookup(self, store: Dict[Key, Any], key: Key) -> Any:
        if key in self.errors:
            raise self.errors[key]
        if key not in store:
            raise NotFoundError(*key)
        return store[key]

    def list_directory(self, owner: str, repo: str, path: str):
        self.calls.append(("list_directory", (owner, repo, path)))
        return self._lookup(self.directories, (owner, repo, path))

    def get_file_text(self, owner: str, repo: str, path: str) -> str:
        self.calls.append(("get_file_text", (owner, repo, path)))
        return self._lookup(self.files, (owner, repo, path))

    def file_exists(self, owner: str, repo: str, path: str) -> bool:
        self.calls.append(("file_exists", (owner, repo, path)))
        try:
            self._lookup(self.files, (owner, repo, path))
        except NotFoundError:
            return False
        return True


def repo_page(*names: str) -> List[Dict[str, Any]]:
    return [{"name": n, "owner": {"login": "acme"}} for n in names]


@pytest.fixture
def fake_api():
    return FakeGitHubAPI()


@pytest.fixture
def registry():
    return InfectedPackageRegistry([
        InfectedPackageEntry("left-pad", "1.3.0"),
        InfectedPackageEntry("@ctrl/tinycolor", "4.1.1"),
        InfectedPackageEntry("lodash", "4.17.20"),
    ])
