"""
Metrics collection for the BugX toolkit.

Records debugging sessions and documentation entries and aggregates them
into efficiency, quality, adoption and library-growth figures. State belongs
to one collector instance and lives for the life of the process.
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from .models import DocumentationEntry, SessionOutcome, WorkflowSession


logger = logging.getLogger(__name__)


@dataclass
class TimeEfficiencyMetrics:
    average_debug_time: float = 0.0
    template_usage_rate: int = 0
    quick_fix_comparison: int = 0
    target_met_rate: int = 0


@dataclass
class QualityImpactMetrics:
    success_rate: int = 0
    prevention_effectiveness: int = 0
    documentation_rate: int = 0
    average_quality_score: float = 0.0


@dataclass
class TeamAdoptionMetrics:
    active_developers: int = 0
    sessions_per_developer: float = 0.0
    satisfaction_score: float = 0.0


@dataclass
class LibraryGrowthMetrics:
    total_documentation: int = 0
    new_patterns_per_month: int = 0
    patterns_used: List[str] = field(default_factory=list)


@dataclass
class BugXMetrics:
    """Aggregated metrics over all completed sessions."""
    total_sessions: int = 0
    completed_sessions: int = 0
    time_efficiency: TimeEfficiencyMetrics = field(default_factory=TimeEfficiencyMetrics)
    quality_impact: QualityImpactMetrics = field(default_factory=QualityImpactMetrics)
    team_adoption: TeamAdoptionMetrics = field(default_factory=TeamAdoptionMetrics)
    library_growth: LibraryGrowthMetrics = field(default_factory=LibraryGrowthMetrics)


def _percent(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole else 0


class MetricsCollector:
    """Process-lifetime store of sessions and documentation."""

    def __init__(self, quick_fix_baseline_minutes: float = 10.0, time_target: float = 4.5):
        self.quick_fix_baseline_minutes = quick_fix_baseline_minutes
        self.time_target = time_target
        self._sessions: Dict[str, WorkflowSession] = {}
        self._documentation: List[DocumentationEntry] = []
        self._lock = threading.Lock()

    def start_session(self, developer: str, error_message: str, component: str) -> str:
        """Open a session and return its id."""
        session_id = f"bugx-{uuid.uuid4().hex[:12]}"
        session = WorkflowSession(
            id=session_id,
            developer=developer,
            error_message=error_message,
            component=component,
            start_time=datetime.now(),
        )
        with self._lock:
            self._sessions[session_id] = session
        logger.info(f"Started session {session_id} for {developer}")
        return session_id

    def complete_session(self, session_id: str, outcome: SessionOutcome) -> bool:
        """
        Finalize a session.

        Returns:
            False when the id is unknown or the session already completed;
            the first recorded outcome is kept.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                logger.warning(f"Session not found: {session_id}")
                return False
            if session.completed:
                logger.debug(f"Session {session_id} already completed")
                return False
            session.end_time = datetime.now()
            session.outcome = outcome

        logger.info(f"Completed session {session_id} (success={outcome.success})")
        return True

    def get_session(self, session_id: str) -> Optional[WorkflowSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def add_documentation(self, entry: DocumentationEntry) -> None:
        """Append an entry to the documentation log."""
        with self._lock:
            self._documentation.append(entry)

    def get_documentation(self) -> List[DocumentationEntry]:
        with self._lock:
            return list(self._documentation)

    def reset(self) -> None:
        """Drop all sessions and documentation."""
        with self._lock:
            self._sessions.clear()
            self._documentation.clear()

    def calculate_metrics(self) -> BugXMetrics:
        """Aggregate over all recorded sessions."""
        with self._lock:
            sessions = list(self._sessions.values())
            documentation = list(self._documentation)

        completed = [s for s in sessions if s.completed]
        metrics = BugXMetrics(total_sessions=len(sessions), completed_sessions=len(completed))

        documentation_cutoff = datetime.now() - timedelta(days=30)
        metrics.library_growth = LibraryGrowthMetrics(
            total_documentation=len(documentation),
            new_patterns_per_month=sum(1 for d in documentation
                                       if d.created_at >= documentation_cutoff),
            patterns_used=sorted({s.outcome.pattern_used for s in completed
                                  if s.outcome.pattern_used}),
        )

        if not completed:
            return metrics

        count = len(completed)
        durations = [s.duration_minutes for s in completed]
        average_time = sum(durations) / count

        baseline = self.quick_fix_baseline_minutes
        metrics.time_efficiency = TimeEfficiencyMetrics(
            average_debug_time=round(average_time, 2),
            template_usage_rate=_percent(sum(1 for s in completed if s.outcome.pattern_used), count),
            quick_fix_comparison=round((baseline - average_time) / baseline * 100) if baseline else 0,
            target_met_rate=_percent(sum(1 for d in durations if d <= self.time_target), count),
        )

        metrics.quality_impact = QualityImpactMetrics(
            success_rate=_percent(sum(1 for s in completed if s.outcome.success), count),
            prevention_effectiveness=_percent(
                sum(1 for s in completed if s.outcome.prevention_applied), count),
            documentation_rate=_percent(
                sum(1 for s in completed if s.outcome.documentation_created), count),
            average_quality_score=round(
                sum(s.outcome.quality_score for s in completed) / count, 1),
        )

        developers = {s.developer for s in completed}
        ratings = [s.outcome.satisfaction_rating for s in completed
                   if s.outcome.satisfaction_rating is not None]
        metrics.team_adoption = TeamAdoptionMetrics(
            active_developers=len(developers),
            sessions_per_developer=round(count / len(developers), 1),
            satisfaction_score=round(sum(ratings) / len(ratings), 1) if ratings else 0.0,
        )

        return metrics

    def generate_report(self) -> str:
        """Render the current metrics as markdown."""
        m = self.calculate_metrics()
        te, qi, ta, lg = m.time_efficiency, m.quality_impact, m.team_adoption, m.library_growth

        return "\n".join([
            "## BugX Metrics Report",
            "",
            f"- **Sessions**: {m.completed_sessions} completed of {m.total_sessions} started",
            "",
            "### Time Efficiency",
            f"- Average debug time: {te.average_debug_time} minutes",
            f"- Sessions within target: {te.target_met_rate}%",
            f"- Template usage rate: {te.template_usage_rate}%",
            f"- Improvement over quick fix baseline: {te.quick_fix_comparison}%",
            "",
            "### Quality Impact",
            f"- Success rate: {qi.success_rate}%",
            f"- Prevention applied: {qi.prevention_effectiveness}%",
            f"- Documentation rate: {qi.documentation_rate}%",
            f"- Average quality score: {qi.average_quality_score}/100",
            "",
            "### Team Adoption",
            f"- Active developers: {ta.active_developers}",
            f"- Sessions per developer: {ta.sessions_per_developer}",
            f"- Satisfaction: {ta.satisfaction_score}/10",
            "",
            "### Library Growth",
            f"- Documentation entries: {lg.total_documentation}",
            f"- New entries in the last 30 days: {lg.new_patterns_per_month}",
            f"- Templates used: {', '.join(lg.patterns_used) or 'none'}",
        ])
