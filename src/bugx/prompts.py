"""
AI workflow prompts for the BugX toolkit.

Standardized prompts that walk an AI assistant (or a developer) through
each phase of the methodology. Prompts are rendered as text only; nothing
here calls a model.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .models import (
    ContextAnalysisResult, PatternMatch, PatternTemplate, PromptTemplate,
    TeamKnowledgeEntry
)


logger = logging.getLogger(__name__)


@dataclass
class WorkflowContext:
    """Everything the prompts can refer to."""
    error_type: str
    context_analysis: ContextAnalysisResult
    error_message: str = ""
    code_context: str = ""
    pattern_matches: List[PatternMatch] = field(default_factory=list)
    applied_template: Optional[PatternTemplate] = None
    team_knowledge: List[TeamKnowledgeEntry] = field(default_factory=list)


AI_PROMPT_LIBRARY: Dict[str, PromptTemplate] = {
    "context_analysis": PromptTemplate(
        template_id="context_analysis",
        content="""You are debugging a {error_type} ({complexity} complexity).

Error:
{error_message}

Spend at most 60 seconds confirming the context:
1. Which component and file raise the error
2. What changed recently in that area
3. Whether the error reproduces consistently

Risk factors already identified: {risk_factors}""",
        placeholders=["error_type", "complexity", "error_message", "risk_factors"],
    ),
    "pattern_recognition": PromptTemplate(
        template_id="pattern_recognition",
        content="""Known patterns matched for this error:
{pattern_summary}

Confirm or reject the best match by checking its markers against the code:
```
{code_context}
```""",
        placeholders=["pattern_summary", "code_context"],
    ),
    "root_cause": PromptTemplate(
        template_id="root_cause",
        content="""State the root cause of this {error_type} in one sentence.
Distinguish the symptom ("{error_message}") from the underlying defect.
Best pattern recommendation: {recommendation}""",
        placeholders=["error_type", "error_message", "recommendation"],
    ),
    "implementation": PromptTemplate(
        template_id="implementation",
        content="""Apply the fix using template "{template_name}".

Steps:
{template_steps}

Keep the change minimal and explain each edit.""",
        placeholders=["template_name", "template_steps"],
    ),
    "prevention": PromptTemplate(
        template_id="prevention",
        content="""Propose prevention measures so this {error_type} cannot recur.
Start from:
{prevention}""",
        placeholders=["error_type", "prevention"],
    ),
    "testing": PromptTemplate(
        template_id="testing",
        content="""Write a regression test that fails before the fix and passes after it.
Target time for the whole workflow: {estimated_time} minutes.""",
        placeholders=["estimated_time"],
    ),
    "documentation": PromptTemplate(
        template_id="documentation",
        content="""Document the resolution for the team knowledge base:
- Issue: {error_message}
- Category: {error_category}
- Fix template: {template_name}
- Prevention: short list of the measures applied""",
        placeholders=["error_message", "error_category", "template_name"],
    ),
    "team_knowledge": PromptTemplate(
        template_id="team_knowledge",
        content="""Previous team solutions for similar errors:
{team_knowledge}

Reuse what applies and note where this case differs.""",
        placeholders=["team_knowledge"],
    ),
}


class AIWorkflowPrompts:
    """Renders the prompt library for one workflow run."""

    def __init__(self, library: Optional[Dict[str, PromptTemplate]] = None):
        self.library = dict(AI_PROMPT_LIBRARY if library is None else library)

    def get_template(self, template_id: str) -> Optional[PromptTemplate]:
        """Get a template by ID."""
        return self.library.get(template_id)

    def add_template(self, template: PromptTemplate) -> None:
        """Add a new template to the library."""
        self.library[template.template_id] = template

    def generate_workflow_prompts(self, context: WorkflowContext) -> Dict[str, str]:
        """Render every prompt in the library for the given context."""
        variables = self._build_variables(context)

        prompts = {}
        for template_id, template in self.library.items():
            try:
                prompts[template_id] = template.content.format(**variables)
            except KeyError as e:
                logger.warning(f"Missing template variable {e} for {template_id}")
        return prompts

    def _build_variables(self, context: WorkflowContext) -> Dict[str, str]:
        analysis = context.context_analysis
        template = context.applied_template

        if context.pattern_matches:
            pattern_summary = "\n".join(
                f"- {m.signature.name} ({m.confidence}% confidence)"
                for m in context.pattern_matches[:3]
            )
            recommendation = context.pattern_matches[0].recommendation
        else:
            pattern_summary = "- No known pattern matched"
            recommendation = "none available"

        if context.team_knowledge:
            team_knowledge = "\n".join(
                f"- {entry.title} ({entry.effectiveness}% effective): {entry.solution}"
                for entry in context.team_knowledge
            )
        else:
            team_knowledge = "- No previous solutions recorded"

        return {
            "error_type": context.error_type,
            "error_message": context.error_message,
            "code_context": context.code_context[:1000],
            "complexity": analysis.complexity.value,
            "risk_factors": ", ".join(analysis.risk_factors) or "none",
            "estimated_time": str(analysis.estimated_time),
            "error_category": analysis.error_category,
            "pattern_summary": pattern_summary,
            "recommendation": recommendation,
            "template_name": template.name if template else "generic debugging approach",
            "template_steps": "\n".join(
                f"{i}. {step}" for i, step in enumerate(template.steps, start=1)
            ) if template else "1. Follow the generic debugging steps",
            "prevention": "\n".join(
                f"- {measure}" for measure in template.prevention
            ) if template and template.prevention else "- No template prevention available",
            "team_knowledge": team_knowledge,
        }
