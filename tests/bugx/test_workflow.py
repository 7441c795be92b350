"""Tests for the integration system workflow."""

import pytest
from hypothesis import given, strategies as st

from bugx.errors import ValidationFailure
from bugx.models import Approach, Complexity, ErrorDetails, PatternMatch
from bugx.pattern_library import PATTERN_SIGNATURES
from bugx.pattern_recognition import PatternRecognitionEngine
from bugx.workflow import (
    FAILURE_NEXT_STEPS, FAILURE_RECOMMENDATIONS, BugXIntegrationSystem, calculate_efficiency,
    calculate_quality_score, calculate_team_impact, generate_error_signature,
    infer_documentation_category, infer_error_type
)


class ExplodingRecognizer(PatternRecognitionEngine):
    def analyze_error(self, *args, **kwargs):
        raise RuntimeError("pattern store unavailable")


class FailingNextStepsSystem(BugXIntegrationSystem):
    @staticmethod
    def _generate_next_steps(state):
        raise RuntimeError("next steps unavailable")


class TestCompleteWorkflow:
    """Test end-to-end workflow runs."""

    def test_hydration_error_end_to_end(self, system, hydration_error):
        """Test the full hydration scenario."""
        result = system.run_complete_workflow("dev", hydration_error)

        assert result.success is True
        assert result.error is None
        assert result.pattern_matches[0].signature.id == "hydration_mismatch"
        assert result.pattern_matches[0].confidence == 100
        assert [ap.id for ap in result.anti_patterns] == ["no-random-in-state"]
        assert result.context_analysis.complexity == Complexity.MODERATE
        assert result.applied_template.name == "Hydration-Safe State Initialization"
        assert result.implementation_steps[-1].startswith("Apply pattern recommendation:")
        assert len(result.prevention_measures) == 4
        assert result.documentation_created is True
        assert result.knowledge_entry_id is not None
        assert result.metrics.quality_score == 100
        assert result.metrics.efficiency == 100
        assert result.metrics.team_impact == 90
        assert result.approach == Approach.BUGX_V14
        assert len(result.prompts) == 8

    def test_session_and_template_usage_recorded(self, system, hydration_error):
        result = system.run_complete_workflow("dev", hydration_error)

        session = system.metrics.get_session(result.session_id)
        assert session.completed
        assert session.outcome.success is True
        assert session.outcome.pattern_used == "Hydration-Safe State Initialization"
        assert session.outcome.satisfaction_rating == 10.0
        assert system.templates.get_template_stats()["hydration_error"]["usage_count"] == 1
        assert len(system.metrics.get_documentation()) == 1

    def test_knowledge_entry_shared(self, system, hydration_error):
        result = system.run_complete_workflow("dev", hydration_error)

        entry = system.knowledge.get(result.knowledge_entry_id)
        assert entry.title == "hydration_error Resolution"
        assert entry.error_signature == generate_error_signature(hydration_error)
        assert entry.shared_by == "dev"

    def test_relevant_knowledge_feeds_next_run(self, system, hydration_error):
        first = system.run_complete_workflow("dev", hydration_error)
        second = system.run_complete_workflow("dev", hydration_error)

        assert "hydration_error Resolution" in second.prompts["team_knowledge"]
        assert system.knowledge.get(first.knowledge_entry_id).usage_count == 1

    def test_slow_run_uses_full_approach(self, make_system, hydration_error):
        system = make_system(0.0, 600.0)

        result = system.run_complete_workflow("dev", hydration_error)

        assert result.time_spent == 10.0
        assert result.approach == Approach.FULL_BUGX
        assert result.metrics.efficiency == 45
        assert result.recommendations[0] == (
            "Consider optimizing pattern recognition - exceeded target time by 5.5 minutes")

    def test_clean_run_recommendations(self, system, hydration_error):
        result = system.run_complete_workflow("dev", hydration_error)

        assert result.recommendations == ["Excellent work! Continue with current practices."]
        assert result.next_steps == [
            "Implement all prevention measures to avoid recurrence",
            "Schedule code review to address detected anti-patterns",
            "Test thoroughly to ensure fix works across all scenarios",
            "Monitor for similar issues in related components",
        ]

    def test_unknown_error_uses_generic_path(self, system):
        result = system.run_complete_workflow("dev", ErrorDetails(message="Something odd happened"))

        assert result.success is True
        assert result.pattern_matches == []
        assert result.applied_template is None
        assert result.implementation_steps[0] == "Reproduce the error with the smallest possible input"
        assert result.metrics.quality_score == 55
        assert "Add custom pattern for this error type to improve future recognition" in result.recommendations
        assert "Create specific template for this error pattern to improve efficiency" in result.recommendations

    def test_critical_anti_pattern_notifies_team(self, system, caplog):
        error = ErrorDetails(
            message="Failed to fetch",
            code_context="const apiKey = 'sk-1234567890abcdef';\nfetch('/api/data');",
            file_name="lib/client.ts",
            component="Client",
        )

        result = system.run_complete_workflow("dev", error)

        assert result.success is True
        assert "Address 1 critical anti-patterns immediately" in result.recommendations
        assert "Critical anti-patterns detected by dev" in caplog.text
        assert "Hard-coded secret" in caplog.text

    def test_notification_disabled(self, system, caplog):
        error = ErrorDetails(message="Failed to fetch",
                             code_context="const apiKey = 'sk-1234567890abcdef';")

        system.run_complete_workflow("dev", error, {"team_integration": {"notify_on_critical": False}})

        assert "Critical anti-patterns detected" not in caplog.text

    def test_phase_exception_yields_failed_result(self, make_system, hydration_error):
        system = make_system(recognizer=ExplodingRecognizer())

        result = system.run_complete_workflow("dev", hydration_error)

        assert result.success is False
        assert result.error == "pattern store unavailable"
        assert result.recommendations == FAILURE_RECOMMENDATIONS
        assert result.next_steps == FAILURE_NEXT_STEPS
        assert result.metrics.quality_score == 0
        assert result.metrics.efficiency == 0
        session = system.metrics.get_session(result.session_id)
        assert session.outcome.success is False

    def test_failure_while_finishing_is_not_recorded_as_success(self, hydration_error):
        system = FailingNextStepsSystem(clock=lambda: 0.0)

        result = system.run_complete_workflow("dev", hydration_error)

        assert result.success is False
        assert result.error == "next steps unavailable"
        session = system.metrics.get_session(result.session_id)
        assert session.outcome.success is False
        assert session.outcome.approach == Approach.FULL_BUGX

    def test_applied_template_is_a_snapshot(self, system, hydration_error):
        first = system.run_complete_workflow("dev", hydration_error)
        system.run_complete_workflow("dev", hydration_error)

        assert first.applied_template.usage_count == 0
        assert system.templates.get_template_stats()["hydration_error"]["usage_count"] == 2


class TestInvalidOptions:
    """Test per-run options and configuration updates are validated."""

    def test_unknown_option_rejected(self, system, hydration_error):
        with pytest.raises(ValidationFailure) as exc_info:
            system.run_complete_workflow("dev", hydration_error, {"timeTarget": 3})

        assert "timeTarget" in str(exc_info.value)
        assert exc_info.value.errors
        assert system.metrics.calculate_metrics().total_sessions == 0

    def test_unknown_team_option_rejected(self, system, hydration_error):
        with pytest.raises(ValidationFailure) as exc_info:
            system.run_complete_workflow("dev", hydration_error,
                                         {"team_integration": {"notify": True}})

        assert "team_integration.notify" in str(exc_info.value)

    def test_non_positive_time_target_rejected(self, system, hydration_error):
        with pytest.raises(ValidationFailure, match="time_target"):
            system.run_complete_workflow("dev", hydration_error, {"time_target": 0})

    def test_configure_keeps_previous_settings_on_error(self, system):
        with pytest.raises(ValidationFailure):
            system.configure({"time_target": 2.0, "team_integration": {"notify": False}})

        assert system.workflow_config.time_target == 4.5
        assert system.metrics.time_target == 4.5


class TestConditionalPhases:
    """Test configuration-driven branching."""

    def test_pattern_recognition_disabled(self, system, hydration_error):
        result = system.run_complete_workflow("dev", hydration_error,
                                              {"pattern_recognition_enabled": False})

        assert result.pattern_matches == []
        assert result.anti_patterns == []
        # Message keywords still select the template
        assert result.applied_template.error_type == "hydration_error"

    def test_ai_assistance_disabled(self, system, hydration_error):
        result = system.run_complete_workflow("dev", hydration_error, {"ai_assisted": False})

        assert result.implementation_steps == []
        assert result.prevention_measures == []
        assert result.prompts == {}

    def test_documentation_disabled(self, system, hydration_error):
        result = system.run_complete_workflow("dev", hydration_error,
                                              {"documentation_required": False})

        assert result.documentation_created is False
        assert result.knowledge_entry_id is None
        assert system.metrics.get_documentation() == []

    def test_sharing_disabled(self, system, hydration_error):
        result = system.run_complete_workflow(
            "dev", hydration_error, {"team_integration": {"share_patterns": False}})

        assert result.documentation_created is True
        assert result.knowledge_entry_id is None
        assert len(system.knowledge) == 0

    def test_metrics_disabled(self, system, hydration_error):
        result = system.run_complete_workflow("dev", hydration_error, {"metrics_enabled": False})

        assert result.session_id.startswith("session-")
        assert system.metrics.calculate_metrics().total_sessions == 0

    def test_options_do_not_change_defaults(self, system, hydration_error):
        system.run_complete_workflow("dev", hydration_error, {"ai_assisted": False})

        assert system.workflow_config.ai_assisted is True

    def test_configure_merges_team_settings(self, system):
        config = system.configure({"time_target": 3.0,
                                   "team_integration": {"require_reviews": True}})

        assert config.time_target == 3.0
        assert config.team_integration.require_reviews is True
        assert config.team_integration.share_patterns is True

    def test_configure_rejects_unknown_keys(self, system):
        with pytest.raises(ValueError):
            system.configure({"time_limit": 3})


class TestTeamReport:
    """Test the team report."""

    def test_empty_report(self, system):
        report = system.generate_team_report()

        assert report.startswith("# BugX v1.4 Team Integration Report")
        assert "**Total Shared Patterns**: 0" in report
        assert "No shared patterns yet" in report

    def test_report_after_runs(self, system, hydration_error):
        result = system.run_complete_workflow("dev", hydration_error)
        system.record_team_knowledge_feedback(result.knowledge_entry_id, True)

        report = system.generate_team_report()

        assert "**Total Shared Patterns**: 1" in report
        assert "**Average Effectiveness**: 87%" in report
        assert "hydration_error Resolution (87% effective, used 0 times)" in report


class TestScoringHelpers:
    """Test the scoring functions."""

    def test_infer_error_type_prefers_confident_match(self):
        match = PatternMatch(signature=PATTERN_SIGNATURES[1], confidence=90)
        assert infer_error_type("Hydration failed", [match]) == "scope_error"

    def test_infer_error_type_falls_back_to_keywords(self):
        weak = PatternMatch(signature=PATTERN_SIGNATURES[1], confidence=70)
        assert infer_error_type("Hydration failed", [weak]) == "hydration_error"
        assert infer_error_type("Missing environment variable", []) == "environment_config"
        assert infer_error_type("connection refused", []) == "database_connection"
        assert infer_error_type("Odd", []) == "generic_error"

    def test_efficiency(self):
        assert calculate_efficiency(3.0, 4.5) == 100
        assert calculate_efficiency(9.0, 4.5) == 50

    def test_team_impact(self):
        assert calculate_team_impact(True, 10) == 100
        assert calculate_team_impact(False, 2) == 20

    def test_documentation_category(self):
        assert infer_documentation_category("Failed to fetch").value == "integration"
        assert infer_documentation_category("Hydration failed").value == "pattern"
        assert infer_documentation_category("Missing config").value == "infrastructure"
        assert infer_documentation_category("Wrong total").value == "business_logic"

    @given(st.booleans(), st.integers(0, 20), st.integers(0, 100), st.sampled_from(list(Complexity)))
    def test_quality_score_capped_and_monotonic(self, template, prevention, confidence, complexity):
        """Property: quality stays within [50, 100] and never drops with more prevention."""
        score = calculate_quality_score(template, prevention, confidence, complexity)
        more = calculate_quality_score(template, prevention + 1, confidence, complexity)

        assert 50 <= score <= 100
        assert more >= score
