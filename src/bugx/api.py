"""
Unified procedural API for the BugX toolkit.

``BugX`` wraps one ``BugXIntegrationSystem`` and exposes the common
debugging calls. Every call returns a dataclass or a plain dict.
"""

import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from .config import BugXConfig
from .errors import TemplateNotFoundError, ValidationFailure
from .models import (
    ContextAnalysisResult, ContextInput, ErrorDetails, ImplementationRequest,
    ImplementationResult, PatternMatch, PatternTemplate, WorkflowResult
)
from .workflow import BugXIntegrationSystem


logger = logging.getLogger(__name__)

SYSTEM_VERSION = "1.4"
QUICK_FIX_OPTIONS = {"time_target": 4.5, "ai_assisted": True, "prevention_required": True}


class ErrorReport(BaseModel):
    """An error report submitted for a quick fix."""
    developer: str = Field(..., min_length=1, description="Developer running the session")
    message: str = Field(..., description="Error message as shown to the developer")
    stack_trace: str = Field("", description="Stack trace text, if any")
    code_context: str = Field("", description="Source around the failing code")
    file_name: str = Field("", description="File the error points at")
    component: str = Field("", description="UI component or module name")


class BugX:
    """Simplified interface for common debugging workflows."""

    def __init__(self, system: Optional[BugXIntegrationSystem] = None,
                 config: Optional[BugXConfig] = None):
        self.system = system or BugXIntegrationSystem(config)

    def quick_fix(self, developer: str, error_message: str, stack_trace: str = "",
                  code_context: str = "", file_name: str = "",
                  component: str = "") -> WorkflowResult:
        """Analyze and fix an error with the 4.5 minute target.

        Raises:
            ValidationFailure: if the report is malformed (e.g. empty developer)
        """
        try:
            report = ErrorReport(
                developer=developer,
                message=error_message,
                stack_trace=stack_trace,
                code_context=code_context,
                file_name=file_name,
                component=component,
            )
        except ValidationError as e:
            raise ValidationFailure.from_validation_error(e) from e

        return self.system.run_complete_workflow(
            report.developer,
            ErrorDetails(
                message=report.message,
                stack_trace=report.stack_trace,
                code_context=report.code_context,
                file_name=report.file_name,
                component=report.component,
            ),
            dict(QUICK_FIX_OPTIONS),
        )

    def analyze_pattern(self, error_message: str, code_context: str = "",
                        file_name: str = "") -> Dict[str, Any]:
        """Quick pattern matching for known error types."""
        recognizer = self.system.recognizer
        matches = recognizer.analyze_error(error_message, "", code_context, file_name)
        anti_patterns = recognizer.detect_anti_patterns(code_context, file_name)
        threshold = self.system.config.analysis.high_confidence_threshold

        return {
            "best_match": matches[0] if matches else None,
            "all_matches": matches,
            "anti_patterns": anti_patterns,
            "has_high_confidence_match": bool(matches) and matches[0].confidence > threshold,
            "summary": recognizer.generate_anti_pattern_report(anti_patterns),
        }

    def get_template(self, error_type: str) -> Dict[str, Any]:
        """Look up the fix template for an error type and count the use."""
        templates = self.system.templates
        try:
            template = templates.get_template(error_type)
            templates.record_template_usage(error_type, True)
        except TemplateNotFoundError as e:
            return {
                "success": False,
                "error": str(e),
                "available_templates": e.available,
            }

        return {
            "success": True,
            "template": template,
            "usage": templates.get_template_stats(),
        }

    def analyze_context(self, error_message: str, stack_trace: str = "",
                        code_context: str = "", file_name: str = "") -> ContextAnalysisResult:
        recognizer = self.system.recognizer
        matches = recognizer.analyze_error(error_message, stack_trace, code_context, file_name)
        anti_patterns = recognizer.detect_anti_patterns(code_context, file_name)

        return self.system.context_engine.analyze_context(ContextInput(
            error_message=error_message,
            stack_trace=stack_trace,
            code_context=code_context,
            file_name=file_name,
            pattern_matches=[(m.signature.name, m.confidence) for m in matches],
            anti_patterns=[(ap.name, ap.severity) for ap in anti_patterns],
            pattern_category=matches[0].signature.category if matches else None,
        ))

    def generate_implementation(self, error_analysis: ContextAnalysisResult,
                                selected_template: Optional[PatternTemplate] = None,
                                code_context: str = "",
                                pattern_matches: Optional[List[PatternMatch]] = None
                                ) -> ImplementationResult:
        return self.system.implementation_engine.generate_implementation(ImplementationRequest(
            error_analysis=error_analysis,
            selected_template=selected_template,
            code_context=code_context,
            pattern_matches=list(pattern_matches or []),
            prevention_required=True,
        ))

    def share_with_team(self, session_result: WorkflowResult, developer: str,
                        additional_notes: Optional[str] = None) -> Dict[str, Any]:
        """
        Record the outcome of a session as feedback on the knowledge entry it shared.

        Results without a knowledge entry (documentation disabled, sharing off
        or a failed run) record nothing and report ``shared`` as False.
        """
        recorded = False
        if session_result.knowledge_entry_id:
            recorded = self.system.record_team_knowledge_feedback(
                session_result.knowledge_entry_id,
                session_result.success,
                additional_notes,
            )
        logger.info(f"{developer} shared session {session_result.session_id} "
                    f"(feedback recorded: {recorded})")

        return {
            "shared": recorded,
            "team_knowledge": self.system.get_team_knowledge()[:5],
            "report": self.system.generate_team_report(),
        }

    def get_metrics(self) -> Dict[str, Any]:
        metrics = self.system.metrics.calculate_metrics()
        return {
            "metrics": metrics,
            "report": self.system.metrics.generate_report(),
            "summary": {
                "avg_time": metrics.time_efficiency.average_debug_time,
                "quality": metrics.quality_impact.prevention_effectiveness,
                "team_adoption": metrics.team_adoption.satisfaction_score,
                "efficiency": metrics.time_efficiency.quick_fix_comparison,
            },
        }

    def configure(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Update the default workflow configuration.

        Invalid input leaves the configuration untouched.
        """
        try:
            workflow_config = self.system.configure(config)
        except ValidationFailure as e:
            logger.warning(f"Rejected configuration update: {e}")
            return {"configured": False, "error": str(e)}

        return {"configured": True, "config": asdict(workflow_config)}

    def health_check(self) -> Dict[str, Any]:
        """Validate that every component is constructed and report catalog sizes."""
        try:
            system = self.system
            components = {
                "core_system": system.templates is not None,
                "context_analysis": system.context_engine is not None,
                "pattern_recognition": system.recognizer is not None,
                "metrics_system": system.metrics is not None,
                "ai_prompts": system.prompts is not None,
                "integration": system.knowledge is not None,
            }
            stats = {
                "template_count": len(system.templates.available_types()),
                "anti_pattern_count": len(system.recognizer.anti_patterns),
                "system_version": SYSTEM_VERSION,
            }
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return {"status": "error", "error": str(e), "ready": False}

        healthy = all(components.values())
        return {
            "status": "healthy" if healthy else "degraded",
            "components": components,
            "stats": stats,
            "ready": healthy,
        }
