"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest

from action_audit.config import load_settings
from action_audit.errors import ConfigError

BASE = {"GITHUB_TOKEN": "ghp_x", "GITHUB_ORG": "acme"}


class TestLoadSettings:
    def test_defaults(self):
        s = load_settings(BASE)
        assert s.github_org == "acme"
        assert s.github_api_base == "https://api.github.com"
        assert s.max_repos == 0
        assert s.report_format == "text"
        assert s.bad_feed_urls == []
        assert not s.ssl_no_verify and not s.show_progress
        assert s.log_file is None

    @pytest.mark.parametrize("missing", ["GITHUB_TOKEN", "GITHUB_ORG"])
    def test_required(self, missing):
        env = dict(BASE)
        env[missing] = "  "
        with pytest.raises(ConfigError, match=missing):
            load_settings(env)

    def test_overrides(self):
        s = load_settings({
            **BASE,
            "GITHUB_API_BASE": "https://git.example.gov/api/v3",
            "MAX_REPOS": "5",
            "BAD_FEED_URLS": "https://a/x.json, ,/tmp/b.json",
            "REPORT_FORMAT": "HTML",
            "LOG_LEVEL": "debug",
            "GITHUB_SSL_NO_VERIFY": "1",
            "SHOW_PROGRESS": "1",
        })
        assert s.github_api_base == "https://git.example.gov/api/v3"
        assert s.max_repos == 5
        assert s.bad_feed_urls == ["https://a/x.json", "/tmp/b.json"]
        assert s.report_format == "html"
        assert s.log_level == "DEBUG"
        assert s.ssl_no_verify and s.show_progress

    @pytest.mark.parametrize("value", ["abc", "-1"])
    def test_bad_max_repos(self, value):
        with pytest.raises(ConfigError, match="MAX_REPOS"):
            load_settings({**BASE, "MAX_REPOS": value})

    def test_bad_report_format(self):
        with pytest.raises(ConfigError, match="REPORT_FORMAT"):
            load_settings({**BASE, "REPORT_FORMAT": "pdf"})

    @pytest.mark.parametrize("value", ["BASIC_FORMAT", "verbose", "Logger"])
    def test_bad_log_level(self, value):
        with pytest.raises(ConfigError, match="LOG_LEVEL"):
            load_settings({**BASE, "LOG_LEVEL": value})

    @pytest.mark.parametrize("value, expected", [("warning", "WARNING"), ("", "INFO"), ("WARN", "WARN")])
    def test_log_level_names(self, value, expected):
        assert load_settings({**BASE, "LOG_LEVEL": value}).log_level == expected
