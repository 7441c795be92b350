"""
Team knowledge base for the BugX toolkit.

Resolved issues are shared as entries that start at 85% effectiveness and
drift with peer feedback.
"""

import logging
import threading
import uuid
from typing import List, Optional

from .models import TeamKnowledgeEntry


logger = logging.getLogger(__name__)

INITIAL_EFFECTIVENESS = 85
HELPFUL_DELTA = 2
NOT_HELPFUL_DELTA = -5


class TeamKnowledgeBase:
    """Shared entries and their feedback, guarded by a lock."""

    def __init__(self):
        self._entries: List[TeamKnowledgeEntry] = []
        self._lock = threading.Lock()

    def share(self, title: str, error_signature: str, solution: str,
              prevention: str, shared_by: str) -> TeamKnowledgeEntry:
        """Record a resolution and return the new entry."""
        entry = TeamKnowledgeEntry(
            id=f"team-{uuid.uuid4().hex}",
            title=title,
            error_signature=error_signature,
            solution=solution,
            prevention=prevention,
            shared_by=shared_by,
            effectiveness=INITIAL_EFFECTIVENESS,
        )
        with self._lock:
            self._entries.append(entry)
        logger.info(f"Shared knowledge entry {entry.id}: {title}")
        return entry

    def get(self, entry_id: str) -> Optional[TeamKnowledgeEntry]:
        with self._lock:
            return next((e for e in self._entries if e.id == entry_id), None)

    def record_feedback(self, entry_id: str, helpful: bool,
                        comment: Optional[str] = None) -> bool:
        """
        Apply one piece of feedback to an entry.

        Helpful feedback raises effectiveness by 2, unhelpful lowers it by 5;
        the result stays within [0, 100].

        Returns:
            False if no entry has the given id.
        """
        with self._lock:
            entry = next((e for e in self._entries if e.id == entry_id), None)
            if entry is None:
                logger.warning(f"Knowledge entry not found: {entry_id}")
                return False

            if helpful:
                entry.feedback.helpful += 1
                delta = HELPFUL_DELTA
            else:
                entry.feedback.not_helpful += 1
                delta = NOT_HELPFUL_DELTA
            entry.effectiveness = max(0, min(100, entry.effectiveness + delta))

            if comment:
                entry.feedback.comments.append(comment)

        return True

    def relevant(self, error_type: str, limit: int = 3) -> List[TeamKnowledgeEntry]:
        """Most effective entries for an error type; each returned entry counts as used."""
        needle = error_type.lower()
        with self._lock:
            matches = [
                e for e in self._entries
                if needle in e.error_signature.lower() or needle in e.title.lower()
            ]
            matches.sort(key=lambda e: e.effectiveness, reverse=True)
            selected = matches[:limit]
            for entry in selected:
                entry.usage_count += 1
        return selected

    def entries(self) -> List[TeamKnowledgeEntry]:
        """All entries, most effective first."""
        with self._lock:
            return sorted(self._entries, key=lambda e: e.effectiveness, reverse=True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
