"""Environment-driven settings. ``.env`` loading is left to the entry script."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from .api import DEFAULT_API_BASE
from .errors import ConfigError
from .reporter import REPORT_FORMATS


@dataclass(frozen=True)
class Settings:
    github_token: str
    github_org: str
    github_api_base: str = DEFAULT_API_BASE
    max_repos: int = 0
    bad_packages_file: Optional[str] = None
    bad_feed_urls: List[str] = field(default_factory=list)
    report_format: str = "text"
    log_level: str = "INFO"
    log_file: Optional[str] = None
    ssl_no_verify: bool = False
    ssl_ca_bundle: Optional[str] = None
    show_progress: bool = False


def _required(env: Mapping[str, str], key: str) -> str:
    value = (env.get(key) or "").strip()
    if not value:
        raise ConfigError(f"{key} environment variable is not set")
    return value


def _optional(env: Mapping[str, str], key: str) -> Optional[str]:
    value = (env.get(key) or "").strip()
    return value or None


def _flag(env: Mapping[str, str], key: str) -> bool:
    return env.get(key, "0").strip() == "1"


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if env is None else env

    token = _required(env, "GITHUB_TOKEN")
    org = _required(env, "GITHUB_ORG")

    raw_max = env.get("MAX_REPOS", "0").strip() or "0"
    try:
        max_repos = int(raw_max)
    except ValueError:
        raise ConfigError(f"MAX_REPOS must be an integer, got {raw_max!r}") from None
    if max_repos < 0:
        raise ConfigError("MAX_REPOS must be >= 0 (0 disables the limit)")

    report_format = env.get("REPORT_FORMAT", "text").strip().lower() or "text"
    if report_format not in REPORT_FORMATS:
        raise ConfigError(f"REPORT_FORMAT must be one of {', '.join(REPORT_FORMATS)}")

    log_level = (env.get("LOG_LEVEL", "INFO").strip() or "INFO").upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"LOG_LEVEL {log_level!r} is not a logging level name")

    return Settings(
        github_token=token,
        github_org=org,
        github_api_base=_optional(env, "GITHUB_API_BASE") or DEFAULT_API_BASE,
        max_repos=max_repos,
        bad_packages_file=_optional(env, "BAD_PACKAGES_FILE"),
        bad_feed_urls=[x.strip() for x in env.get("BAD_FEED_URLS", "").split(",") if x.strip()],
        report_format=report_format,
        log_level=log_level,
        log_file=_optional(env, "LOG_FILE"),
        ssl_no_verify=_flag(env, "GITHUB_SSL_NO_VERIFY"),
        ssl_ca_bundle=_optional(env, "GITHUB_SSL_CA_BUNDLE"),
        show_progress=_flag(env, "SHOW_PROGRESS"),
    )
