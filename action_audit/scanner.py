"""Collect every ``uses:`` reference from the organization's workflows."""

from __future__ import annotations

import logging
from typing import Dict, Optional

import requests

from .api import GitHubAPI
from .errors import AuditError, NotFoundError, ScanError, WorkflowFormatError
from .models import ActionUsage, Workflow

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

WORKFLOWS_DIR = ".github/workflows"
WORKFLOW_SUFFIXES = (".yml", ".yaml")

UsageMap = Dict[str, ActionUsage]


def add_action_usage(usage: UsageMap, reference: str, repo_name: str) -> None:
    entry = usage.get(reference)
    if entry is None:
        entry = usage[reference] = ActionUsage(reference)
    entry.used_by_repositories.add(repo_name)


def extract_actions_from_workflow(text: str, repo_name: str, usage: UsageMap) -> int:
    """Parse one workflow document into *usage*; return the number of references seen.

    Raises :class:`WorkflowFormatError` for invalid YAML or a non-mapping document.
    """
    count = 0
    for reference in Workflow.from_yaml(text).uses_references():
        add_action_usage(usage, reference, repo_name)
        count += 1
    return count


def is_workflow_file(entry: Dict) -> bool:
    name = entry.get("name") or ""
    return entry.get("type") == "file" and name.endswith(WORKFLOW_SUFFIXES)


class WorkflowScanner:
    """Walk every repository of *org* and aggregate workflow action usage.

    ``max_repos`` of ``0`` (or ``None``) scans everything.
    """

    def __init__(self, api: GitHubAPI, org: str, *, max_repos: Optional[int] = 0) -> None:
        self.api = api
        self.org = org
        self.max_repos = max_repos or 0

    @property
    def limit_enabled(self) -> bool:
        return self.max_repos > 0

    def _should_stop(self, repo_count: int) -> bool:
        return self.limit_enabled and repo_count >= self.max_repos

    def scan(self) -> UsageMap:
        usage: UsageMap = {}
        repo_count = 0
        pages = self.api.iter_org_repo_pages(self.org)
        while True:
            try:
                repos = next(pages, None)
            except (requests.RequestException, AuditError) as exc:
                raise ScanError(f"Error listing repositories for {self.org}: {exc}") from exc
            if repos is None:
                break

            for repo in repos:
                if self._should_stop(repo_count):
                    logger.info("Reached maximum of %d repositories.", self.max_repos)
                    return usage
                repo_name = repo.get("name")
                if not repo_name:
                    continue
                self._log_progress(repo_count, repo_name)
                repo_count += 1
                self.process_repository(repo_name, usage)

            if self._should_stop(repo_count):
                logger.info("Reached maximum of %d repositories.", self.max_repos)
                break

        logger.info("Scanned %d repositories; found %d distinct actions", repo_count, len(usage))
        return usage

    def process_repository(self, repo_name: str, usage: UsageMap) -> None:
        try:
            contents = self.api.list_directory(self.org, repo_name, WORKFLOWS_DIR)
        except NotFoundError:
            return
        except (requests.RequestException, AuditError) as exc:
            logger.warning("Error getting contents of %s in %s: %s", WORKFLOWS_DIR, repo_name, exc)
            return

        for entry in contents:
            if is_workflow_file(entry):
                self.process_workflow_file(repo_name, entry.get("path") or f"{WORKFLOWS_DIR}/{entry['name']}", usage)

    def process_workflow_file(self, repo_name: str, path: str, usage: UsageMap) -> None:
        try:
            text = self.api.get_file_text(self.org, repo_name, path)
        except (requests.RequestException, AuditError) as exc:
            logger.warning("Error getting file %s in %s: %s", path, repo_name, exc)
            return
        try:
            found = extract_actions_from_workflow(text, repo_name, usage)
        except WorkflowFormatError as exc:
            logger.warning("Error parsing workflow %s in %s: %s", path, repo_name, exc)
            return
        logger.debug("%s: %s -> %d action references", repo_name, path, found)

    def _log_progress(self, repo_count: int, repo_name: str) -> None:
        if self.limit_enabled:
            logger.info("Processing repository %d/%d: %s", repo_count + 1, self.max_repos, repo_name)
        else:
            logger.info("Processing repository: %s", repo_name)
