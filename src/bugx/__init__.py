"""BugX debugging toolkit: pattern recognition and workflow orchestration."""

from .api import BugX
from .config import BugXConfig, WorkflowConfig
from .context_analysis import ContextAnalysisEngine
from .diagnostics import BehavioralParityTester, HydrationValidator
from .errors import (
    BugXError,
    DependencyFailure,
    TemplateNotFoundError,
    ValidationFailure,
    WorkflowFailure,
)
from .implementation import ImplementationEngine
from .knowledge import TeamKnowledgeBase
from .metrics import MetricsCollector
from .models import ErrorDetails, Severity, WorkflowResult
from .pattern_recognition import PatternRecognitionEngine
from .prompts import AIWorkflowPrompts
from .templates import TemplateRegistry
from .workflow import BugXIntegrationSystem

__version__ = "1.4.0"

__all__ = [
    "BugX",
    "BugXConfig",
    "WorkflowConfig",
    "ContextAnalysisEngine",
    "BehavioralParityTester",
    "HydrationValidator",
    "BugXError",
    "DependencyFailure",
    "TemplateNotFoundError",
    "ValidationFailure",
    "WorkflowFailure",
    "ImplementationEngine",
    "TeamKnowledgeBase",
    "MetricsCollector",
    "ErrorDetails",
    "Severity",
    "WorkflowResult",
    "PatternRecognitionEngine",
    "AIWorkflowPrompts",
    "TemplateRegistry",
    "BugXIntegrationSystem",
]
