"""
Context Analysis Engine for the BugX toolkit.

Buckets an error into a complexity class from the recognition output and
derives an estimated resolution time and a recommended approach.
"""

import logging
from typing import Dict

from .models import Complexity, ContextAnalysisResult, ContextInput, Severity


logger = logging.getLogger(__name__)


COMPLEXITY_THRESHOLDS: Dict[str, float] = {
    "high_confidence": 80,
    "medium_confidence": 50,
    "max_stack_lines": 10,
    "max_code_lines": 100,
    "simple_max_score": 1,
    "moderate_max_score": 3,
}

SEVERITY_POINTS: Dict[Severity, int] = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}

BASE_TIME_MINUTES: Dict[Complexity, float] = {
    Complexity.SIMPLE: 2.0,
    Complexity.MODERATE: 4.5,
    Complexity.COMPLEX: 10.0,
}

ANTI_PATTERN_TIME_MINUTES = 0.5

RECOMMENDED_APPROACHES: Dict[Complexity, str] = {
    Complexity.SIMPLE: "Apply the matched pattern template directly and verify the fix",
    Complexity.MODERATE: "Follow the BugX workflow: confirm the pattern, apply the template, "
                         "then add prevention measures",
    Complexity.COMPLEX: "Run the full BugX analysis: reproduce, isolate the root cause, "
                        "and review the fix with the team",
}

# Checked in order; first hit wins
MESSAGE_CATEGORIES = [
    ("hydration", ("hydration", "server rendered")),
    ("scope", ("cannot access", "before initialization", "is not defined")),
    ("null_reference", ("null", "undefined")),
    ("api", ("cors", "fetch", "network")),
    ("validation", ("validation", "invalid")),
    ("database", ("database", "connection refused", "econnrefused")),
    ("environment", ("environment variable", "env")),
]


def infer_category_from_message(message: str) -> str:
    """Infer an error category from message keywords."""
    lowered = (message or "").lower()
    for category, keywords in MESSAGE_CATEGORIES:
        if any(keyword in lowered for keyword in keywords):
            return category
    return "generic"


class ContextAnalysisEngine:
    """Deterministic complexity classification of an error report."""

    def __init__(self, thresholds: Dict[str, float] = None):
        self.thresholds = dict(COMPLEXITY_THRESHOLDS)
        if thresholds:
            self.thresholds.update(thresholds)

    def analyze_context(self, context: ContextInput) -> ContextAnalysisResult:
        """Classify complexity, estimate time and pick an approach."""
        score = 0
        risk_factors = []

        best_confidence = max((conf for _, conf in context.pattern_matches), default=0)
        if best_confidence < self.thresholds["medium_confidence"]:
            score += 2
            risk_factors.append("No confident pattern match")
        elif best_confidence < self.thresholds["high_confidence"]:
            score += 1
            risk_factors.append(f"Moderate pattern confidence ({best_confidence}%)")

        for name, severity in context.anti_patterns:
            points = SEVERITY_POINTS[severity]
            score += points
            if points:
                risk_factors.append(f"{severity.value} anti-pattern: {name}")

        stack_lines = [line for line in (context.stack_trace or "").splitlines() if line.strip()]
        if len(stack_lines) > self.thresholds["max_stack_lines"]:
            score += 1
            risk_factors.append(f"Deep stack trace ({len(stack_lines)} frames)")

        code_lines = (context.code_context or "").splitlines()
        if len(code_lines) > self.thresholds["max_code_lines"]:
            score += 1
            risk_factors.append(f"Large code context ({len(code_lines)} lines)")

        if score <= self.thresholds["simple_max_score"]:
            complexity = Complexity.SIMPLE
        elif score <= self.thresholds["moderate_max_score"]:
            complexity = Complexity.MODERATE
        else:
            complexity = Complexity.COMPLEX

        estimated_time = round(
            BASE_TIME_MINUTES[complexity]
            + ANTI_PATTERN_TIME_MINUTES * len(context.anti_patterns),
            1,
        )

        error_category = context.pattern_category or infer_category_from_message(context.error_message)

        logger.debug(f"Context analysis: complexity={complexity.value}, score={score}, "
                     f"estimated_time={estimated_time}")

        return ContextAnalysisResult(
            complexity=complexity,
            estimated_time=estimated_time,
            recommended_approach=RECOMMENDED_APPROACHES[complexity],
            error_category=error_category,
            complexity_score=score,
            risk_factors=risk_factors,
        )
