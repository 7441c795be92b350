"""
Pattern Recognition Engine for the BugX toolkit.

This module matches reported errors against the signature catalog and scans
code for anti-patterns. Matching is plain keyword and regex work: every
signature earns points for keywords found in the error message, stack trace
and code, for its regular expressions hitting the error text and for
context clues in the code or file name. Points saturate at 100.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Pattern, Sequence, Tuple

from .config import AnalysisConfig
from .models import AntiPattern, PatternMatch, PatternSignature, Severity
from .pattern_library import ANTI_PATTERN_LIBRARY, PATTERN_SIGNATURES


logger = logging.getLogger(__name__)


# Points per kind of evidence
MESSAGE_KEYWORD_POINTS = 25
STACK_KEYWORD_POINTS = 10
CODE_KEYWORD_POINTS = 10
MATCHER_POINTS = 30
CONTEXT_CLUE_POINTS = 10
MAX_CONFIDENCE = 100


def _compile(expressions: Iterable[str], owner: str) -> List[Tuple[str, Pattern]]:
    """Compile regexes, skipping (and logging) invalid ones."""
    compiled = []
    for expression in expressions:
        try:
            compiled.append((expression, re.compile(expression, re.IGNORECASE | re.MULTILINE)))
        except re.error as e:
            logger.warning(f"Invalid regex pattern in rule {owner}: {e}")
    return compiled


class PatternRecognitionEngine:
    """Matches error reports against known signatures and detects anti-patterns."""

    def __init__(self,
                 config: Optional[AnalysisConfig] = None,
                 signatures: Optional[Sequence[PatternSignature]] = None,
                 anti_patterns: Optional[Sequence[AntiPattern]] = None):
        self.config = config or AnalysisConfig()
        self.signatures: List[PatternSignature] = list(
            PATTERN_SIGNATURES if signatures is None else signatures
        )
        self.anti_patterns: List[AntiPattern] = list(
            ANTI_PATTERN_LIBRARY if anti_patterns is None else anti_patterns
        )

        # Compile once; the catalogs are immutable
        self._signature_matchers: Dict[str, List[Tuple[str, Pattern]]] = {
            s.id: _compile(s.matchers, s.id) for s in self.signatures
        }
        self._anti_pattern_detectors: Dict[str, List[Tuple[str, Pattern]]] = {
            ap.id: _compile(ap.detectors, ap.id) for ap in self.anti_patterns
        }

    def analyze_error(self, message: str, stack_trace: str = "",
                      code_context: str = "", file_name: str = "") -> List[PatternMatch]:
        """
        Match an error report against the signature catalog.

        Args:
            message: The error message
            stack_trace: Stack trace text, may be empty
            code_context: Code surrounding the failure, may be empty
            file_name: Name of the file the error came from

        Returns:
            Matches ordered by confidence (highest first); ties keep catalog order
        """
        message = message or ""
        stack_trace = stack_trace or ""
        code_context = code_context or ""
        file_name = file_name or ""

        message_lower = message.lower()
        stack_lower = stack_trace.lower()
        code_lower = code_context.lower()
        clue_haystack = f"{code_lower}\n{file_name.lower()}"
        error_text = f"{message}\n{stack_trace}"

        matches = []
        for signature in self.signatures:
            points = 0
            matched_keywords = []
            error_text_hit = False

            for keyword in sorted(signature.keywords):
                keyword_points = 0
                if keyword in message_lower:
                    keyword_points += MESSAGE_KEYWORD_POINTS
                    error_text_hit = True
                if keyword in stack_lower:
                    keyword_points += STACK_KEYWORD_POINTS
                    error_text_hit = True
                if keyword in code_lower:
                    keyword_points += CODE_KEYWORD_POINTS
                if keyword_points:
                    matched_keywords.append(keyword)
                    points += keyword_points

            matched_expressions = []
            for expression, regex in self._signature_matchers[signature.id]:
                if regex.search(error_text):
                    matched_expressions.append(expression)
                    points += MATCHER_POINTS
                    error_text_hit = True

            # A signature must be evidenced by the error itself, not just the code
            if not error_text_hit:
                continue

            matched_clues = [clue for clue in sorted(signature.context_clues)
                             if clue in clue_haystack]
            points += CONTEXT_CLUE_POINTS * len(matched_clues)

            confidence = min(MAX_CONFIDENCE, points)
            if confidence < self.config.min_match_confidence:
                continue

            matches.append(PatternMatch(
                signature=signature,
                confidence=confidence,
                matched_keywords=matched_keywords,
                matched_context_clues=matched_clues,
                matched_expressions=matched_expressions,
            ))

        # Stable sort keeps catalog order for equal confidence
        matches.sort(key=lambda m: m.confidence, reverse=True)

        if matches:
            logger.debug(f"Best pattern match: {matches[0].signature.name} "
                         f"({matches[0].confidence}% confidence)")
        return matches

    def detect_anti_patterns(self, code_context: str, file_name: str = "") -> List[AntiPattern]:
        """Scan code for anti-patterns; each rule is reported at most once."""
        if not code_context or not code_context.strip():
            return []

        detected = []
        for anti_pattern in self.anti_patterns:
            if not anti_pattern.applies_to(file_name):
                continue
            detectors = self._anti_pattern_detectors[anti_pattern.id]
            if any(regex.search(code_context) for _, regex in detectors):
                detected.append(anti_pattern)

        detected.sort(key=lambda ap: ap.severity.rank, reverse=True)
        return detected

    def find_anti_pattern_lines(self, anti_pattern: AntiPattern, code: str) -> List[int]:
        """Return 1-based line numbers where the anti-pattern occurs."""
        detectors = self._anti_pattern_detectors.get(anti_pattern.id)
        if detectors is None:
            detectors = _compile(anti_pattern.detectors, anti_pattern.id)

        lines = []
        for number, line in enumerate(code.splitlines(), start=1):
            if any(regex.search(line) for _, regex in detectors):
                lines.append(number)
        return lines

    def find_pattern(self, query: str) -> Optional[PatternSignature]:
        """Find the signature that best fits a free-text query."""
        words = [w for w in re.split(r"\W+", (query or "").lower()) if len(w) > 2]
        if not words:
            return None

        best: Optional[PatternSignature] = None
        best_score = 0
        for signature in self.signatures:
            haystack = " ".join([signature.name.lower(), signature.category,
                                 *sorted(signature.keywords)])
            score = sum(1 for word in words if word in haystack)
            if score > best_score:
                best, best_score = signature, score
        return best

    @staticmethod
    def generate_anti_pattern_report(anti_patterns: Sequence[AntiPattern]) -> str:
        """Summarize detected anti-patterns as markdown, grouped by severity."""
        if not anti_patterns:
            return "No anti-patterns detected"

        lines = [f"## Anti-Pattern Report ({len(anti_patterns)} detected)"]
        for severity in sorted(Severity, reverse=True):
            group = [ap for ap in anti_patterns if ap.severity is severity]
            if not group:
                continue
            lines.append("")
            lines.append(f"### {severity.value.capitalize()} ({len(group)})")
            for ap in group:
                lines.append(f"- **{ap.name}** [{ap.category}]: {ap.impact}")
                lines.append(f"  - Solution: {ap.solution}")
        return "\n".join(lines)
