"""
Implementation Engine for the BugX toolkit.

Expands a selected template, or the error category when no template
applies, into concrete fix steps and prevention measures.
"""

import logging
from typing import Dict, List

from .models import ImplementationRequest, ImplementationResult


logger = logging.getLogger(__name__)


PREVENTION_TEMPLATES: Dict[str, List[str]] = {
    "hydration": [
        "Keep server-rendered output deterministic",
        "Review new components for client-only values during render",
    ],
    "scope": [
        "Order declarations before use in every module",
    ],
    "null_reference": [
        "Model optional data explicitly in component props",
    ],
    "api": [
        "Monitor failed requests and alert on error-rate spikes",
    ],
    "validation": [
        "Reject invalid input at the boundary with user-facing messages",
    ],
    "database": [
        "Health-check the database before routing traffic",
    ],
    "environment": [
        "Document every required environment variable",
    ],
}

GENERIC_STEPS: Dict[str, List[str]] = {
    "generic": [
        "Reproduce the error with the smallest possible input",
        "Read the stack trace from the first application frame",
        "Form a hypothesis for the root cause and test it",
        "Apply the smallest fix that removes the root cause",
        "Add a regression test covering the failing case",
    ],
    "hydration": [
        "Compare server-rendered HTML with the first client render",
        "Find values that differ between the two renders",
        "Defer client-only values until after mount",
    ],
    "scope": [
        "Locate the first use of the binding named in the error",
        "Move its declaration above that use",
    ],
    "null_reference": [
        "Find which value is missing at the failing line",
        "Guard the access and handle the missing case",
    ],
    "api": [
        "Capture the failing request and response",
        "Fix the endpoint, headers or response handling",
    ],
    "validation": [
        "Identify the rejected field and rule",
        "Fix the input mapping or relax the rule if it is wrong",
    ],
    "database": [
        "Verify connectivity and that the schema exists",
        "Retry the failing query after setup",
    ],
    "environment": [
        "Find the missing variable and define it for the environment",
    ],
}


class ImplementationEngine:
    """Turns analysis results into an ordered fix plan."""

    def __init__(self,
                 prevention_templates: Dict[str, List[str]] = None,
                 generic_steps: Dict[str, List[str]] = None):
        self.prevention_templates = prevention_templates or PREVENTION_TEMPLATES
        self.generic_steps = generic_steps or GENERIC_STEPS

    def generate_implementation(self, request: ImplementationRequest) -> ImplementationResult:
        """Generate fix steps and, when required, prevention measures."""
        category = request.error_analysis.error_category
        template = request.selected_template

        if template is not None and template.steps:
            steps = list(template.steps)
            source = "template"
        else:
            steps = list(self.generic_steps.get(category) or self.generic_steps["generic"])
            source = "generic"

        if request.pattern_matches:
            recommendation = request.pattern_matches[0].recommendation
            if recommendation:
                steps.append(f"Apply pattern recommendation: {recommendation}")

        prevention: List[str] = []
        if request.prevention_required:
            candidates = list(template.prevention) if template is not None else []
            candidates.extend(self.prevention_templates.get(category, []))
            for measure in candidates:
                if measure not in prevention:
                    prevention.append(measure)

        logger.debug(f"Generated {len(steps)} steps and {len(prevention)} prevention "
                     f"measures from {source} source")
        return ImplementationResult(steps=steps, prevention_measures=prevention, source=source)
