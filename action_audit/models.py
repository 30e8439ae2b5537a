"""Data model for the audit plus typed views over workflow and lockfile documents."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

import yaml

from .errors import LockfileFormatError, WorkflowFormatError

NODE_MODULES_PREFIX = "node_modules/"
NESTED_SEPARATOR = "/node_modules/"


@dataclass
class ActionUsage:
    """One distinct ``uses:`` reference and everything learned about it."""

    reference: str
    used_by_repositories: Set[str] = field(default_factory=set)
    uses_npm: bool = False
    is_infected: bool = False
    infected_packages: List[str] = field(default_factory=list)
    analyzed: bool = False

    def record_infection(self, matches: List[str]) -> None:
        # keeps is_infected and infected_packages in lockstep
        self.infected_packages = list(matches)
        self.is_infected = bool(self.infected_packages)


@dataclass(frozen=True)
class InfectedPackageEntry:
    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass(frozen=True)
class ActionReference:
    """``owner/repo[/path]@ref`` split into its parts."""

    owner: str
    repo: str
    path: str = ""
    ref: str = ""

    @property
    def full_repo(self) -> str:
        return f"{self.owner}/{self.repo}"

    @classmethod
    def parse(cls, reference: str) -> Optional["ActionReference"]:
        """Split the text before ``@`` on ``/``; ``None`` if owner or repo is empty.

        No attempt is made to recognise local (``./x/y``) or ``docker://``
        references: ``./x/y`` becomes owner ``.``, which the API then fails to
        resolve, and ``docker://img`` has an empty repo part.
        """
        target, _, ref = reference.partition("@")
        parts = target.split("/")
        if len(parts) < 2 or not parts[0] or not parts[1]:
            return None
        return cls(owner=parts[0], repo=parts[1], path="/".join(parts[2:]), ref=ref)


def package_name_from_path(pkg_path: str) -> str:
    """Map a lockfile ``packages`` key to the npm package name.

    >>> package_name_from_path("node_modules/@scope/pkg")
    '@scope/pkg'
    >>> package_name_from_path("node_modules/a/node_modules/b")
    'b'
    """
    name = pkg_path[len(NODE_MODULES_PREFIX):] if pkg_path.startswith(NODE_MODULES_PREFIX) else pkg_path
    if name.startswith("@") and "/" in name and NESTED_SEPARATOR not in name:
        return name
    if NESTED_SEPARATOR in name:
        name = name.rsplit(NESTED_SEPARATOR, 1)[1]
    return name


class Workflow:
    """The part of a GitHub Actions workflow the scanner reads: ``jobs.*.steps[].uses``."""

    def __init__(self, document: Dict[str, Any]) -> None:
        self._document = document

    @classmethod
    def from_yaml(cls, text: str) -> "Workflow":
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise WorkflowFormatError(f"invalid YAML: {exc}") from exc
        if not isinstance(document, dict):
            raise WorkflowFormatError(f"expected a mapping, got {type(document).__name__}")
        return cls(document)

    def uses_references(self) -> Iterator[str]:
        jobs = self._document.get("jobs")
        if not isinstance(jobs, dict):
            return
        for job in jobs.values():
            if not isinstance(job, dict):
                continue
            steps = job.get("steps")
            if not isinstance(steps, list):
                continue
            for step in steps:
                if isinstance(step, dict) and isinstance(step.get("uses"), str):
                    yield step["uses"]


class Lockfile:
    """npm ``package-lock.json`` (lockfile v2/v3 ``packages`` map)."""

    def __init__(self, document: Dict[str, Any]) -> None:
        self._document = document

    @classmethod
    def from_json(cls, text: str) -> "Lockfile":
        try:
            document = json.loads(text)
        except ValueError as exc:
            raise LockfileFormatError(f"invalid JSON: {exc}") from exc
        if not isinstance(document, dict):
            raise LockfileFormatError(f"expected an object, got {type(document).__name__}")
        return cls(document)

    @property
    def lockfile_version(self) -> Optional[int]:
        version = self._document.get("lockfileVersion")
        return version if isinstance(version, int) else None

    def locked_packages(self) -> Iterator[Tuple[str, str]]:
        """Yield ``(name, version)`` for every non-root entry with a string version."""
        packages = self._document.get("packages")
        if not isinstance(packages, dict):
            return
        for pkg_path, info in packages.items():
            if pkg_path == "":
                continue
            if not isinstance(info, dict) or not isinstance(info.get("version"), str):
                continue
            yield package_name_from_path(pkg_path), info["version"]
