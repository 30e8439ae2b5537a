"""Decide, per action, whether its repository uses npm and pulls in a compromised version."""

from __future__ import annotations

import logging
from typing import Iterable, List, Tuple

import requests
from tqdm import tqdm

from .api import GitHubAPI
from .errors import AuditError, ContentUnavailableError, LockfileFormatError
from .models import ActionReference, ActionUsage, Lockfile
from .registry import InfectedPackageRegistry
from .scanner import UsageMap

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

PACKAGE_LOCK = "package-lock.json"
PACKAGE_JSON = "package.json"


def find_infected(packages: Iterable[Tuple[str, str]], registry: InfectedPackageRegistry) -> List[str]:
    """Return ``name@version`` for every locked package in *registry*, in lockfile order."""
    found = []
    for name, version in packages:
        if registry.contains(name, version):
            found.append(f"{name}@{version}")
    return found


class DependencyAnalyzer:
    def __init__(self, api: GitHubAPI, registry: InfectedPackageRegistry, *, show_progress: bool = False) -> None:
        self.api = api
        self.registry = registry
        self.show_progress = show_progress

    def analyze_all(self, usage: UsageMap) -> None:
        logger.info("Analyzing %d actions...", len(usage))
        for info in tqdm(list(usage.values()), desc="actions", unit="action", disable=not self.show_progress):
            self.analyze(info)

    def analyze(self, info: ActionUsage) -> None:
        """Populate the npm and infection fields of *info* once."""
        if info.analyzed:
            return
        try:
            ref = ActionReference.parse(info.reference)
            if ref is None:
                logger.debug("Skipping %s: not a repository action", info.reference)
                return
            logger.info("Analyzing %s...", ref.full_repo)
            if not self._analyze_package_lock(ref, info):
                self._analyze_package_json(ref, info)
        finally:
            info.analyzed = True

    def _analyze_package_lock(self, ref: ActionReference, info: ActionUsage) -> bool:
        """Return ``False`` when the lock file could not be fetched at all."""
        try:
            text = self.api.get_file_text(ref.owner, ref.repo, PACKAGE_LOCK)
        except ContentUnavailableError as exc:
            info.uses_npm = True
            logger.warning("  Error reading %s content for %s: %s", PACKAGE_LOCK, ref.full_repo, exc)
            return True
        except (requests.RequestException, AuditError) as exc:
            logger.debug("%s: no usable %s (%s)", ref.full_repo, PACKAGE_LOCK, exc)
            return False

        info.uses_npm = True
        logger.info("  Found %s for %s", PACKAGE_LOCK, ref.full_repo)
        try:
            lockfile = Lockfile.from_json(text)
        except LockfileFormatError as exc:
            logger.warning("  Error parsing %s for %s: %s", PACKAGE_LOCK, ref.full_repo, exc)
            return True

        if lockfile.lockfile_version == 1:
            logger.warning("  %s for %s is lockfileVersion 1 (no packages map); dependencies not checked",
                           PACKAGE_LOCK, ref.full_repo)
            return True

        found = find_infected(lockfile.locked_packages(), self.registry)
        if found:
            info.record_infection(found)
            logger.warning("  ⚠️  INFECTED with %d packages: %s", len(found), found)
        return True

    def _analyze_package_json(self, ref: ActionReference, info: ActionUsage) -> None:
        # no lock file means no resolved versions; existence is all we record
        try:
            exists = self.api.file_exists(ref.owner, ref.repo, PACKAGE_JSON)
        except (requests.RequestException, AuditError) as exc:
            logger.debug("%s: %s probe failed (%s)", ref.full_repo, PACKAGE_JSON, exc)
            exists = False
        if not exists:
            logger.info("  No %s or %s found for %s", PACKAGE_JSON, PACKAGE_LOCK, ref.full_repo)
            return
        info.uses_npm = True
        logger.info("  Found %s (no lock file) for %s", PACKAGE_JSON, ref.full_repo)
