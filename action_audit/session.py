"""
session.py
==========

Contains :class:`GitHubSession` which owns the :class:`requests.Session`
used for every GitHub REST call.

The session carries the token header, the JSON ``Accept`` header and the
TLS verification setting. Resolution order for ``verify``:

1. ``no_verify=True``  -> ``False`` (insecure, logged as a warning)
2. explicit CA bundle  -> that path
3. otherwise           -> the :mod:`certifi` bundle
"""

from __future__ import annotations

import logging as _logging
import os
from typing import Any, Dict, Optional, Union

import certifi
import requests
import urllib3

_logger = _logging.getLogger(__name__)
_logger.addHandler(_logging.NullHandler())

USER_AGENT = "org-actions-npm-audit/1.0"


class GitHubSession:
    """Authenticated HTTP session for the GitHub REST API."""

    def __init__(
        self,
        token: str,
        *,
        ca_bundle: Optional[str] = None,
        no_verify: bool = False,
        timeout: int = 30,
    ) -> None:
        """Create a new session.

        Parameters
        ----------
        token:
            Classic or fine-grained token with read access to the org repos.
        ca_bundle:
            Path to a PEM bundle, e.g. for GitHub Enterprise behind a private CA.
            Ignored when the file does not exist.
        no_verify:
            Disable TLS verification entirely. Only for on-prem PoCs.
        timeout:
            Request timeout in seconds.
        """
        self._timeout = timeout
        self._http = requests.Session()
        self._http.verify = self._resolve_verify(ca_bundle, no_verify)
        self._http.headers.update({
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT,
        })
        _logger.debug("requests.Session created; session.verify=%s", self._http.verify)

    # ---------------------------------------------------------------------#
    # Public API                                                           #
    # ---------------------------------------------------------------------#

    @property
    def verify(self) -> Union[bool, str]:
        return self._http.verify

    def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        """Issue a GET and return the raw response (status is not checked)."""
        _logger.debug("HTTP GET %s params=%s", url, params or {})
        resp = self._http.get(url, params=params, timeout=self._timeout)
        _logger.debug("HTTP %s -> %s", url, resp.status_code)
        return resp

    def close(self) -> None:
        self._http.close()

    # ---------------------------------------------------------------------#
    # Internal helpers                                                     #
    # ---------------------------------------------------------------------#

    @staticmethod
    def _resolve_verify(ca_bundle: Optional[str], no_verify: bool) -> Union[bool, str]:
        if no_verify:
            _logger.warning("GITHUB_SSL_NO_VERIFY=1 => SSL verification DISABLED (insecure).")
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
            return False
        if ca_bundle:
            if os.path.isfile(ca_bundle):
                _logger.info("Using explicit CA bundle from GITHUB_SSL_CA_BUNDLE: %s", ca_bundle)
                return ca_bundle
            _logger.warning("GITHUB_SSL_CA_BUNDLE %s does not exist; ignoring", ca_bundle)
        return certifi.where()
