"""
Core data models for the BugX debugging toolkit.

This module defines the records exchanged between the workflow phases:
pattern signatures and matches, anti-patterns, fix templates, context
analysis results, implementation results, metrics sessions, documentation
entries, team knowledge entries and the final workflow result.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import total_ordering
from typing import Dict, FrozenSet, List, Optional, Tuple


@total_ordering
class Severity(Enum):
    """Anti-pattern severity, ordered from low to critical."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


class Complexity(Enum):
    """Complexity bucket assigned by context analysis."""
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class Approach(Enum):
    """Debugging approach a session ended up taking."""
    QUICK_FIX = "quick_fix"
    BUGX_V14 = "bugx_v14"
    FULL_BUGX = "full_bugx"


class DocumentationCategory(Enum):
    """Category a documentation entry is filed under."""
    BUSINESS_LOGIC = "business_logic"
    INTEGRATION = "integration"
    PATTERN = "pattern"
    INFRASTRUCTURE = "infrastructure"


@dataclass(frozen=True)
class PatternSignature:
    """Named rule describing the textual markers of a known error category."""
    id: str
    name: str
    category: str
    error_type: str
    keywords: FrozenSet[str] = frozenset()
    matchers: Tuple[str, ...] = ()
    context_clues: FrozenSet[str] = frozenset()
    recommendation: str = ""


@dataclass
class PatternMatch:
    """A signature matched against one error report."""
    signature: PatternSignature
    confidence: int
    matched_keywords: List[str] = field(default_factory=list)
    matched_context_clues: List[str] = field(default_factory=list)
    matched_expressions: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate confidence is between 0 and 100."""
        if not 0 <= self.confidence <= 100:
            raise ValueError("Confidence must be between 0 and 100")

    @property
    def recommendation(self) -> str:
        return self.signature.recommendation


@dataclass(frozen=True)
class AntiPattern:
    """Code construct known to cause defects, independent of any error message."""
    id: str
    name: str
    category: str
    severity: Severity
    detectors: Tuple[str, ...]
    impact: str
    solution: str
    file_extensions: Tuple[str, ...] = ()

    def applies_to(self, file_name: str) -> bool:
        """Check whether the rule applies to the given file name."""
        if not self.file_extensions or not file_name:
            return True
        lowered = file_name.lower()
        return any(lowered.endswith(ext) for ext in self.file_extensions)


@dataclass
class PatternTemplate:
    """Fix template for one error type; counters are process-lifetime state."""
    name: str
    error_type: str
    description: str
    steps: List[str] = field(default_factory=list)
    prevention: List[str] = field(default_factory=list)
    usage_count: int = 0
    success_count: int = 0


@dataclass
class PromptTemplate:
    """Template for AI prompts with placeholders."""
    template_id: str
    content: str
    placeholders: List[str] = field(default_factory=list)


@dataclass
class ErrorDetails:
    """A reported error as submitted by a developer."""
    message: str
    stack_trace: str = ""
    code_context: str = ""
    file_name: str = ""
    component: str = ""


@dataclass
class ContextInput:
    """Input to context analysis."""
    error_message: str
    stack_trace: str = ""
    code_context: str = ""
    file_name: str = ""
    pattern_matches: List[Tuple[str, int]] = field(default_factory=list)
    anti_patterns: List[Tuple[str, Severity]] = field(default_factory=list)
    pattern_category: Optional[str] = None


@dataclass
class ContextAnalysisResult:
    """Derived classification of an error's complexity and handling."""
    complexity: Complexity
    estimated_time: float
    recommended_approach: str
    error_category: str
    complexity_score: int = 0
    risk_factors: List[str] = field(default_factory=list)


@dataclass
class ImplementationRequest:
    """Input to the implementation engine."""
    error_analysis: ContextAnalysisResult
    selected_template: Optional[PatternTemplate] = None
    code_context: str = ""
    pattern_matches: List[PatternMatch] = field(default_factory=list)
    prevention_required: bool = True


@dataclass
class ImplementationResult:
    """Concrete fix steps and prevention measures."""
    steps: List[str] = field(default_factory=list)
    prevention_measures: List[str] = field(default_factory=list)
    source: str = "generic"


@dataclass
class SessionOutcome:
    """Outcome recorded when a metrics session completes."""
    success: bool
    approach: Approach = Approach.BUGX_V14
    pattern_used: Optional[str] = None
    prevention_applied: bool = False
    documentation_created: bool = False
    quality_score: int = 0
    satisfaction_rating: Optional[float] = None
    notes: str = ""


@dataclass
class WorkflowSession:
    """One debugging session tracked by the metrics collector."""
    id: str
    developer: str
    error_message: str
    component: str
    start_time: datetime
    end_time: Optional[datetime] = None
    outcome: Optional[SessionOutcome] = None

    @property
    def completed(self) -> bool:
        return self.outcome is not None

    @property
    def duration_minutes(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds() / 60.0


@dataclass
class DocumentationEntry:
    """Documentation generated for a resolved issue."""
    title: str
    error_type: str
    component: str
    issue: str
    root_cause: str
    solution: str
    prevention: str
    pattern_template: str
    category: DocumentationCategory
    reusability: str
    time_to_fix: float
    confidence: int
    code_examples: Dict[str, str] = field(default_factory=dict)
    team_notes: str = ""
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class TeamFeedback:
    """Peer feedback tally for a knowledge entry."""
    helpful: int = 0
    not_helpful: int = 0
    comments: List[str] = field(default_factory=list)


@dataclass
class TeamKnowledgeEntry:
    """A shared record of a resolved issue and its fix."""
    id: str
    title: str
    error_signature: str
    solution: str
    prevention: str
    shared_by: str
    shared_at: datetime = field(default_factory=datetime.now)
    usage_count: int = 0
    effectiveness: int = 85
    feedback: TeamFeedback = field(default_factory=TeamFeedback)


@dataclass
class WorkflowMetrics:
    """Scores attached to a workflow result."""
    efficiency: int = 0
    quality_score: int = 0
    team_impact: int = 0


@dataclass
class WorkflowResult:
    """Structured result of one complete workflow run."""
    session_id: str
    success: bool
    time_spent: float
    approach: Approach
    pattern_matches: List[PatternMatch] = field(default_factory=list)
    anti_patterns: List[AntiPattern] = field(default_factory=list)
    applied_template: Optional[PatternTemplate] = None
    context_analysis: Optional[ContextAnalysisResult] = None
    implementation_steps: List[str] = field(default_factory=list)
    prevention_measures: List[str] = field(default_factory=list)
    documentation_created: bool = False
    knowledge_entry_id: Optional[str] = None
    prompts: Dict[str, str] = field(default_factory=dict)
    metrics: WorkflowMetrics = field(default_factory=WorkflowMetrics)
    recommendations: List[str] = field(default_factory=list)
    next_steps: List[str] = field(default_factory=list)
    error: Optional[str] = None
