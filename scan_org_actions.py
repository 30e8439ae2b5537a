# scan_org_actions.py
"""
Scan every repository of an organization for the GitHub Actions its workflows
use, then check each action's own repository for npm lock entries matching a
known-compromised package version (Shai-Hulud campaign).

Configured through the environment (a ``.env`` file is honoured):

    GITHUB_TOKEN, GITHUB_ORG        required
    GITHUB_API_BASE                 default https://api.github.com
    MAX_REPOS                       0 = unlimited
    BAD_PACKAGES_FILE, BAD_FEED_URLS
    REPORT_FORMAT                   text | markdown | html
    LOG_LEVEL, LOG_FILE
    GITHUB_SSL_NO_VERIFY, GITHUB_SSL_CA_BUNDLE
    SHOW_PROGRESS
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from dotenv import load_dotenv

from action_audit.analyzer import DependencyAnalyzer
from action_audit.api import GitHubAPI
from action_audit.config import Settings, load_settings
from action_audit.errors import ConfigError, ScanError
from action_audit.registry import load_registry
from action_audit.reporter import print_results
from action_audit.scanner import WorkflowScanner
from action_audit.session import GitHubSession

logger = logging.getLogger("action_audit")


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Console handler always; rotating file handler only when LOG_FILE is set."""
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_file:
        fh = RotatingFileHandler(log_file, maxBytes=5*1024*1024, backupCount=5)
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        logger.addHandler(fh)


def run(settings: Settings) -> int:
    session = GitHubSession(
        settings.github_token,
        ca_bundle=settings.ssl_ca_bundle,
        no_verify=settings.ssl_no_verify,
    )
    try:
        registry = load_registry(settings.bad_packages_file, settings.bad_feed_urls, verify=session.verify)
        api = GitHubAPI(session, settings.github_api_base)

        logger.info("Scanning repositories in organization: %s", settings.github_org)
        usage = WorkflowScanner(api, settings.github_org, max_repos=settings.max_repos).scan()
        DependencyAnalyzer(api, registry, show_progress=settings.show_progress).analyze_all(usage)
    finally:
        session.close()

    print_results(usage, settings.report_format, org=settings.github_org)
    return 0


def main() -> int:
    load_dotenv()
    try:
        settings = load_settings()
    except ConfigError as e:
        setup_logging()
        logger.error("%s", e)
        return 1

    setup_logging(settings.log_level, settings.log_file)
    try:
        return run(settings)
    except (ConfigError, ScanError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
