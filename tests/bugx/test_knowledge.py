"""Tests for the team knowledge base."""

import threading

import pytest
from hypothesis import given, strategies as st

from bugx.knowledge import TeamKnowledgeBase


def share(kb: TeamKnowledgeBase, title: str = "hydration_error Resolution",
          signature: str = "Hydration failed:page.tsx:Hub"):
    return kb.share(title=title, error_signature=signature, solution="Use useEffect",
                    prevention="Lint rule", shared_by="dev")


class TestTeamKnowledgeBase:
    """Test sharing, feedback and relevance."""

    def test_share_creates_entry(self):
        kb = TeamKnowledgeBase()

        entry = share(kb)

        assert entry.id.startswith("team-")
        assert entry.effectiveness == 85
        assert entry.usage_count == 0
        assert kb.get(entry.id) is entry
        assert len(kb) == 1

    def test_helpful_feedback_raises_effectiveness(self):
        kb = TeamKnowledgeBase()
        entry = share(kb)

        assert kb.record_feedback(entry.id, True, "Worked first time")

        assert entry.effectiveness == 87
        assert entry.feedback.helpful == 1
        assert entry.feedback.comments == ["Worked first time"]

    def test_unhelpful_feedback_lowers_effectiveness(self):
        kb = TeamKnowledgeBase()
        entry = share(kb)

        kb.record_feedback(entry.id, False)

        assert entry.effectiveness == 80
        assert entry.feedback.not_helpful == 1
        assert entry.feedback.comments == []

    def test_effectiveness_clamped(self):
        kb = TeamKnowledgeBase()
        entry = share(kb)

        for _ in range(20):
            kb.record_feedback(entry.id, True)
        assert entry.effectiveness == 100

        for _ in range(40):
            kb.record_feedback(entry.id, False)
        assert entry.effectiveness == 0

    def test_unknown_entry(self):
        assert TeamKnowledgeBase().record_feedback("team-missing", True) is False

    @given(st.lists(st.booleans(), max_size=100))
    def test_effectiveness_stays_in_range(self, feedback):
        """Property: any feedback sequence keeps effectiveness in [0, 100]."""
        kb = TeamKnowledgeBase()
        entry = share(kb)

        for helpful in feedback:
            kb.record_feedback(entry.id, helpful)
            assert 0 <= entry.effectiveness <= 100

    def test_relevant_top_three_by_effectiveness(self):
        kb = TeamKnowledgeBase()
        entries = [share(kb) for _ in range(4)]
        share(kb, title="scope_error Resolution", signature="Cannot access x:a.ts:A")
        kb.record_feedback(entries[3].id, True)
        kb.record_feedback(entries[0].id, False)

        relevant = kb.relevant("hydration_error")

        assert len(relevant) == 3
        assert relevant[0] is entries[3]
        assert entries[0] not in relevant
        assert all(e.usage_count == 1 for e in relevant)
        assert entries[0].usage_count == 0

    def test_relevant_matches_signature_case_insensitively(self):
        kb = TeamKnowledgeBase()
        entry = share(kb, title="Fix", signature="HYDRATION failed:page.tsx:Hub")

        assert kb.relevant("hydration") == [entry]
        assert kb.relevant("database") == []

    def test_entries_sorted_by_effectiveness(self):
        kb = TeamKnowledgeBase()
        low, high = share(kb), share(kb)
        kb.record_feedback(low.id, False)

        assert kb.entries() == [high, low]

    def test_concurrent_sharing_and_feedback(self):
        """Test entries and feedback from many threads are all kept."""
        kb = TeamKnowledgeBase()
        target = share(kb)

        def worker(index):
            share(kb, title=f"Fix {index}")
            kb.record_feedback(target.id, index % 2 == 0)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(100)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(kb) == 101
        assert len({entry.id for entry in kb.entries()}) == 101
        assert target.feedback.helpful == 50
        assert target.feedback.not_helpful == 50
