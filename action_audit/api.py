"""
api.py
======

Light-weight wrapper around the GitHub REST API required for the audit.

Only a subset of endpoints is implemented, just enough to:
    * list organization repositories (paginated)
    * list a directory through the contents API
    * read a file through the contents API

All calls are read-only and synchronous. No retries, no rate-limit backoff:
an error surfaces to the caller, which decides whether it is fatal.
"""

from __future__ import annotations

import base64
import binascii
import logging as _logging
from typing import Any, Dict, Iterator, List, Optional
from urllib.parse import quote

import requests

from .errors import ContentDecodeError, ContentUnavailableError, NotFoundError
from .session import GitHubSession

_logger = _logging.getLogger(__name__)
_logger.addHandler(_logging.NullHandler())

DEFAULT_API_BASE = "https://api.github.com"
REPO_PAGE_SIZE = 50


class GitHubAPI:
    """Provide convenience methods for the GitHub contents/repos API."""

    def __init__(self, session: GitHubSession, api_base_url: str = DEFAULT_API_BASE) -> None:
        """Create a new API helper.

        Parameters
        ----------
        session:
            An authenticated :class:`GitHubSession`.
        api_base_url:
            REST root, e.g. ``https://api.github.com`` or
            ``https://git.example.gov/api/v3`` for GitHub Enterprise.
        """
        self._session = session
        self._api_base_url = api_base_url.rstrip("/")

    # ------------------------------------------------------------------ #
    # Public high-level helpers                                          #
    # ------------------------------------------------------------------ #

    def iter_org_repo_pages(self, org: str, *, per_page: int = REPO_PAGE_SIZE) -> Iterator[List[Dict[str, Any]]]:
        """Yield the organization's repositories one page at a time.

        Pages are followed through the ``Link: rel="next"`` header. Any HTTP
        error is raised as :class:`requests.HTTPError`.
        """
        url: Optional[str] = f"{self._api_base_url}/orgs/{quote(org)}/repos"
        params: Optional[Dict[str, Any]] = {"per_page": per_page, "type": "all"}
        while url:
            resp = self._session.get(url, params=params)
            resp.raise_for_status()
            page = resp.json()
            if not isinstance(page, list):
                raise ContentDecodeError(f"unexpected repository page payload from {url}")
            _logger.debug("Fetched %s repos page", len(page))
            yield page
            url = resp.links.get("next", {}).get("url")
            # the next link already carries the query string
            params = None

    def list_directory(self, owner: str, repo: str, path: str) -> List[Dict[str, Any]]:
        """Return the entries of a repository directory."""
        data = self._get_contents(owner, repo, path)
        if not isinstance(data, list):
            raise ContentDecodeError(f"{owner}/{repo}: {path} is not a directory")
        return data

    def get_file_text(self, owner: str, repo: str, path: str) -> str:
        """Return the decoded text of a repository file.

        Files over 1 MB come back from the contents API without inline
        content (``encoding == "none"``); those are read from
        ``download_url`` instead.

        Once the contents API has listed the file, any failure to obtain its
        text raises :class:`ContentUnavailableError`.
        """
        data = self._get_contents(owner, repo, path)
        if not isinstance(data, dict) or data.get("type", "file") != "file":
            raise ContentDecodeError(f"{owner}/{repo}: {path} is not a file")

        encoding = data.get("encoding")
        content = data.get("content")
        if encoding == "base64" and isinstance(content, str):
            try:
                return base64.b64decode(content).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError) as exc:
                raise ContentUnavailableError(f"{owner}/{repo}: cannot decode {path}: {exc}") from exc
        if isinstance(content, str) and encoding in (None, "", "utf-8"):
            return content

        download_url = data.get("download_url")
        if not download_url:
            raise ContentUnavailableError(f"{owner}/{repo}: {path} has unsupported encoding {encoding!r}")
        _logger.debug("%s/%s: %s too large for inline content, downloading", owner, repo, path)
        try:
            resp = self._session.get(download_url)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise ContentUnavailableError(f"{owner}/{repo}: download of {path} failed: {exc}") from exc
        return resp.text

    def file_exists(self, owner: str, repo: str, path: str) -> bool:
        """Return ``True`` if *path* exists in the repository's default branch."""
        try:
            self._get_contents(owner, repo, path)
        except NotFoundError:
            return False
        return True

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _get_contents(self, owner: str, repo: str, path: str) -> Any:
        url = f"{self._api_base_url}/repos/{quote(owner)}/{quote(repo)}/contents/{quote(path)}"
        resp = self._session.get(url)
        if resp.status_code == 404:
            raise NotFoundError(owner, repo, path)
        resp.raise_for_status()
        try:
            return resp.json()
        except ValueError as exc:
            # a garbled body is a failed fetch, not evidence the file exists
            raise requests.exceptions.InvalidJSONError(f"{owner}/{repo}: invalid JSON for {path}") from exc
