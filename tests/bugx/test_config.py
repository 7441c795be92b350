"""Tests for BugX configuration."""

import json

import pytest

from bugx.config import (
    AnalysisConfig, BugXConfig, DatabaseConfig, LoggingConfig, TeamIntegrationConfig,
    WorkflowConfig
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("BUGX_LOG_LEVEL", "POSTGRES_URL", "VERCEL"):
        monkeypatch.delenv(name, raising=False)


class TestWorkflowConfig:
    """Test the workflow configuration."""

    def test_defaults(self):
        config = WorkflowConfig()

        assert config.time_target == 4.5
        assert config.ai_assisted is True
        assert config.metrics_enabled is True
        assert config.prevention_required is True
        assert config.documentation_required is True
        assert config.pattern_recognition_enabled is True
        assert config.team_integration == TeamIntegrationConfig()

    def test_merged_is_a_copy(self):
        config = WorkflowConfig()
        merged = config.merged({"time_target": 2.0})

        assert merged.time_target == 2.0
        assert config.time_target == 4.5
        assert merged.team_integration is not config.team_integration

    def test_merged_nested_team_settings(self):
        merged = WorkflowConfig().merged({"team_integration": {"share_patterns": False}})

        assert merged.team_integration.share_patterns is False
        assert merged.team_integration.notify_on_critical is True

    def test_merged_unknown_key(self):
        with pytest.raises(ValueError, match="time_limit"):
            WorkflowConfig().merged({"time_limit": 2})


class TestBugXConfig:
    """Test loading, saving and validating the main configuration."""

    def test_from_dict(self):
        config = BugXConfig.from_dict({
            "workflow": {"time_target": 3.0, "team_integration": {"require_reviews": True}},
            "analysis": {"min_match_confidence": 30},
            "logging": {"log_level": "DEBUG"},
            "debug_mode": True,
        })

        assert config.workflow.time_target == 3.0
        assert config.workflow.team_integration.require_reviews is True
        assert config.analysis.min_match_confidence == 30
        assert config.logging.log_level == "DEBUG"
        assert config.debug_mode is True

    def test_to_dict_round_trip(self):
        config = BugXConfig.from_dict({"analysis": {"high_confidence_threshold": 90}})

        data = config.to_dict()

        assert data["analysis"]["high_confidence_threshold"] == 90
        assert data["workflow"]["team_integration"]["share_patterns"] is True

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "bugx.json"
        path.write_text(json.dumps({"workflow": {"ai_assisted": False}}))

        assert BugXConfig.from_file(str(path)).workflow.ai_assisted is False

    def test_from_yaml_file(self, tmp_path):
        path = tmp_path / "bugx.yaml"
        path.write_text("workflow:\n  time_target: 6.0\nanalysis:\n  max_relevant_knowledge: 5\n")

        config = BugXConfig.from_file(str(path))

        assert config.workflow.time_target == 6.0
        assert config.analysis.max_relevant_knowledge == 5

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            BugXConfig.from_file(str(tmp_path / "missing.yaml"))

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "bugx.toml"
        path.write_text("")

        with pytest.raises(ValueError, match="Unsupported"):
            BugXConfig.from_file(str(path))

    def test_validate_defaults(self):
        assert BugXConfig().validate() == []

    def test_validate_reports_issues(self):
        config = BugXConfig(
            workflow=WorkflowConfig(time_target=0),
            analysis=AnalysisConfig(min_match_confidence=150),
            database=DatabaseConfig(min_pool_size=5, max_pool_size=2, max_init_attempts=0),
        )

        issues = config.validate()

        assert "time_target must be positive" in issues
        assert "min_match_confidence must be between 0 and 100" in issues
        assert "min_pool_size cannot exceed max_pool_size" in issues
        assert "max_init_attempts must be positive" in issues


class TestEnvironmentOverrides:
    """Test environment-driven settings."""

    def test_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("BUGX_LOG_LEVEL", "debug")

        assert LoggingConfig().log_level == "DEBUG"

    def test_log_file_directory_created(self, tmp_path):
        log_file = tmp_path / "logs" / "bugx.log"

        LoggingConfig(log_file=str(log_file))

        assert log_file.parent.is_dir()

    def test_database_url_from_env(self, monkeypatch):
        monkeypatch.setenv("POSTGRES_URL", "postgresql://localhost/app")

        config = DatabaseConfig()

        assert config.url == "postgresql://localhost/app"
        assert config.ssl_required is False
        assert config.max_pool_size == 10

    def test_hosted_database_limits(self):
        config = DatabaseConfig(url="postgresql://user@db.project.supabase.co:5432/postgres")

        assert config.is_hosted
        assert config.ssl_required is True
        assert config.max_pool_size == 1
        assert config.idle_timeout == 20.0
        assert config.connect_timeout == 5.0

    def test_serverless_deployment_is_hosted(self, monkeypatch):
        monkeypatch.setenv("VERCEL", "1")

        assert DatabaseConfig(url="postgresql://localhost/app").max_pool_size == 1
