"""
Organization-wide audit of GitHub Actions for compromised npm dependencies.

The pipeline is three sequential stages sharing one usage map:

    WorkflowScanner  ->  DependencyAnalyzer  ->  print_results

:class:`GitHubAPI` / :class:`GitHubSession` wrap the handful of read-only
REST calls the stages need.
"""

__version__ = "0.1.0"

from .analyzer import DependencyAnalyzer
from .api import GitHubAPI
from .models import ActionUsage, InfectedPackageEntry
from .registry import InfectedPackageRegistry, load_registry
from .reporter import print_results
from .scanner import WorkflowScanner
from .session import GitHubSession

__all__ = [
    "ActionUsage",
    "DependencyAnalyzer",
    "GitHubAPI",
    "GitHubSession",
    "InfectedPackageEntry",
    "InfectedPackageRegistry",
    "WorkflowScanner",
    "load_registry",
    "print_results",
]
