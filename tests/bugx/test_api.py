"""Tests for the procedural BugX API."""

import pytest

from bugx.api import BugX
from bugx.errors import ValidationFailure
from bugx.models import Complexity, ErrorDetails
from bugx.pattern_library import ANTI_PATTERN_LIBRARY
from bugx.templates import PATTERN_TEMPLATES


@pytest.fixture
def bugx(system):
    return BugX(system)


class TestQuickFix:
    """Test the quick fix entry point."""

    def test_quick_fix(self, bugx):
        result = bugx.quick_fix(
            "dev",
            "Hydration failed because the server rendered text did not match the client",
            "at Component (/app/page.tsx:15:3)",
            "const value = useState(Math.random());",
            "/app/page.tsx",
            "HomePage",
        )

        assert result.success is True
        assert result.applied_template.error_type == "hydration_error"
        assert result.prevention_measures

    def test_quick_fix_rejects_empty_developer(self, bugx):
        with pytest.raises(ValidationFailure) as exc_info:
            bugx.quick_fix("", "Hydration failed")

        assert "developer" in str(exc_info.value)
        assert exc_info.value.errors


class TestAnalysis:
    """Test the analysis helpers."""

    def test_analyze_pattern(self, bugx):
        analysis = bugx.analyze_pattern(
            "Cannot access 'calculateScore' before initialization",
            "const score = calculateScore(); const calculateScore = () => 1;",
            "hooks/use-metrics.ts",
        )

        assert analysis["best_match"].signature.id == "temporal_dead_zone"
        assert analysis["has_high_confidence_match"] is True
        assert analysis["all_matches"][0] is analysis["best_match"]
        assert analysis["summary"] == "No anti-patterns detected"

    def test_analyze_pattern_without_match(self, bugx):
        analysis = bugx.analyze_pattern("The quick brown fox")

        assert analysis["best_match"] is None
        assert analysis["has_high_confidence_match"] is False

    def test_analyze_context(self, bugx):
        result = bugx.analyze_context(
            "Hydration failed because the server rendered text did not match the client",
            "", "const [v] = useState(Math.random());", "page.tsx")

        assert result.complexity == Complexity.MODERATE
        assert result.error_category == "hydration"

    def test_generate_implementation(self, bugx):
        analysis = bugx.analyze_context("Cannot read properties of undefined (reading 'map')")
        template = bugx.get_template("null_reference")["template"]

        result = bugx.generate_implementation(analysis, template)

        assert result.steps == template.steps
        assert result.prevention_measures


class TestTemplates:
    """Test template lookup through the API."""

    def test_get_template(self, bugx):
        response = bugx.get_template("scope_error")

        assert response["success"] is True
        assert response["template"].name == "Declaration Order Fix"
        assert response["usage"]["scope_error"]["usage_count"] == 1

    def test_get_unknown_template(self, bugx):
        response = bugx.get_template("quantum_error")

        assert response["success"] is False
        assert "quantum_error" in response["error"]
        assert set(response["available_templates"]) == set(PATTERN_TEMPLATES)


class TestTeamAndMetrics:
    """Test sharing and metrics."""

    def test_share_with_team_records_feedback_on_entry(self, bugx, hydration_error):
        result = bugx.system.run_complete_workflow("dev", hydration_error)

        response = bugx.share_with_team(result, "dev", "Common in dashboard widgets")

        entry = bugx.system.knowledge.get(result.knowledge_entry_id)
        assert response["shared"] is True
        assert entry.effectiveness == 87
        assert entry.feedback.comments == ["Common in dashboard widgets"]
        assert response["team_knowledge"][0] is entry
        assert response["report"].startswith("# BugX v1.4 Team Integration Report")

    def test_share_without_entry(self, bugx, hydration_error):
        result = bugx.system.run_complete_workflow(
            "dev", hydration_error, {"documentation_required": False})

        response = bugx.share_with_team(result, "dev")

        assert response["shared"] is False

    def test_get_metrics(self, bugx, hydration_error):
        bugx.system.run_complete_workflow("dev", hydration_error)

        response = bugx.get_metrics()

        assert response["metrics"].completed_sessions == 1
        assert response["summary"]["quality"] == 100
        assert response["report"].startswith("## BugX Metrics Report")


class TestConfigureAndHealth:
    """Test configuration and health check."""

    def test_configure(self, bugx):
        response = bugx.configure({"time_target": 3.0,
                                   "team_integration": {"require_reviews": True}})

        assert response["configured"] is True
        assert response["config"]["time_target"] == 3.0
        assert response["config"]["team_integration"] == {
            "notify_on_critical": True, "share_patterns": True, "require_reviews": True,
        }
        assert bugx.system.workflow_config.time_target == 3.0

    @pytest.mark.parametrize("update", [
        {"time_target": -1},
        {"time_limit": 3},
        {"team_integration": {"notify_everyone": True}},
        {"ai_assisted": "sometimes"},
    ])
    def test_configure_rejects_invalid_input(self, bugx, update):
        response = bugx.configure(update)

        assert response["configured"] is False
        assert response["error"].startswith("Invalid input")
        assert bugx.system.workflow_config.time_target == 4.5

    def test_health_check(self, bugx):
        health = bugx.health_check()

        assert health["status"] == "healthy"
        assert health["ready"] is True
        assert all(health["components"].values())
        assert health["stats"] == {
            "template_count": len(PATTERN_TEMPLATES),
            "anti_pattern_count": len(ANTI_PATTERN_LIBRARY),
            "system_version": "1.4",
        }

    def test_default_construction(self):
        bugx = BugX()
        result = bugx.system.run_complete_workflow("dev", ErrorDetails(message="Failed to fetch"))

        assert result.success is True
