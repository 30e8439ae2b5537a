"""
errors.py
=========

Exception hierarchy shared by the audit pipeline.

Fatal errors (:class:`ConfigError`, :class:`ScanError`) stop the run.
Everything else is scoped to a single repository, file or action and is
logged and skipped by the caller.
"""

from __future__ import annotations


class AuditError(Exception):
    """Base class for all errors raised by :mod:`action_audit`."""


class ConfigError(AuditError):
    """Missing or invalid configuration detected at startup."""


class ScanError(AuditError):
    """Top-level repository listing failed; the run cannot continue."""


class NotFoundError(AuditError):
    """The contents API answered 404 for the requested path."""

    def __init__(self, owner: str, repo: str, path: str) -> None:
        super().__init__(f"{owner}/{repo}: {path} not found")
        self.owner = owner
        self.repo = repo
        self.path = path


class ContentDecodeError(AuditError):
    """A contents API payload could not be turned into text."""


class WorkflowFormatError(AuditError):
    """A workflow file is not valid YAML or not a mapping."""


class LockfileFormatError(AuditError):
    """A package-lock.json is not valid JSON or not an object."""


class ContentUnavailableError(AuditError):
    """The contents API listed the file but its text could not be obtained."""
