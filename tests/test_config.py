"""
Configuration Unit Tests
"""
import json

import pytest

from repo_stats.utils.config import StatsConfig


class TestStatsConfig:
    """StatsConfig 테스트"""

    def test_defaults(self, monkeypatch):
        for name in [
            "REPO_STATS_GIT_EXECUTABLE",
            "REPO_STATS_TERMINATION_GRACE",
            "REPO_STATS_POLL_INTERVAL",
            "REPO_STATS_DEFAULT_TIMEOUT",
            "REPO_STATS_LOG_LEVEL",
        ]:
            monkeypatch.delenv(name, raising=False)

        config = StatsConfig.from_env()
        assert config.git_executable == "git"
        assert config.termination_grace == 5.0
        assert config.poll_interval == 0.05
        assert config.default_timeout is None
        assert config.log_level == "INFO"
        assert config.validate() == []

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("REPO_STATS_GIT_EXECUTABLE", "/usr/local/bin/git")
        monkeypatch.setenv("REPO_STATS_TERMINATION_GRACE", "2.5")
        monkeypatch.setenv("REPO_STATS_DEFAULT_TIMEOUT", "30")

        config = StatsConfig.from_env()
        assert config.git_executable == "/usr/local/bin/git"
        assert config.termination_grace == 2.5
        assert config.default_timeout == 30.0

    def test_blank_timeout_is_unset(self, monkeypatch):
        monkeypatch.setenv("REPO_STATS_DEFAULT_TIMEOUT", "  ")
        assert StatsConfig.from_env().default_timeout is None

    def test_from_file_overrides(self, tmp_path, monkeypatch):
        monkeypatch.delenv("REPO_STATS_POLL_INTERVAL", raising=False)
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"default_timeout": 12, "unknown_key": True}))

        config = StatsConfig.from_file(str(config_file))
        assert config.default_timeout == 12
        assert config.poll_interval == 0.05
        assert not hasattr(config, "unknown_key")

    def test_from_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            StatsConfig.from_file(str(tmp_path / "missing.json"))

    def test_validate_reports_problems(self):
        config = StatsConfig(git_executable="", termination_grace=-1, poll_interval=0, default_timeout=0)
        errors = config.validate()
        assert len(errors) == 4

    def test_validate_rejects_unknown_log_level(self):
        assert StatsConfig(log_level="LOUD").validate() == ["unknown log level: LOUD"]

    def test_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("REPO_STATS_LOG_LEVEL", "DEBUG")
        assert StatsConfig.from_env().log_level == "DEBUG"
