"""
Tests for store module.

Tests the in-memory store including:
- Reads returning copies that callers cannot mutate through
- Loader bookkeeping of event questions and participants
"""

import pytest
from pathlib import Path

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from judge.models import Event, Question, TestCase, User, ACCEPTED
from judge.store import MemoryStore


def make_store():
    store = MemoryStore()
    store.add_user(User(id="alice", username="alice"))
    store.add_event(Event(id="spring", name="Spring"))
    store.add_participant("spring", "alice")
    store.add_question(Question(id="q1", event_id="spring", title="Echo", description="",
                                test_cases=[TestCase("a", "a")]))
    return store


class TestCopies:
    """Test that reads never hand out stored objects."""

    def test_event_copy_not_changed_by_later_loads(self):
        store = make_store()
        event = store.get_event("spring")

        store.add_question(Question(id="q2", event_id="spring", title="Two", description="", test_cases=[]))
        store.add_user(User(id="bob", username="bob"))
        store.add_participant("spring", "bob")

        assert event.question_ids == ["q1"]
        assert event.participant_ids == ["alice"]
        assert store.get_event("spring").question_ids == ["q1", "q2"]

    def test_mutating_returned_event_does_not_leak(self):
        store = make_store()
        store.get_event("spring").participant_ids.append("mallory")

        assert store.get_event("spring").participant_ids == ["alice"]

    def test_mutating_returned_question_does_not_leak(self):
        store = make_store()
        question = store.get_question("q1")
        question.title = "Changed"
        question.test_cases.clear()

        stored = store.get_question("q1")
        assert stored.title == "Echo"
        assert len(stored.test_cases) == 1

    def test_event_listings_are_copies(self):
        store = make_store()
        store.get_event_participants("spring")[0].username = "eve"
        store.get_event_questions("spring")[0].test_cases.append(TestCase("b", "b"))

        assert store.get_event_participants("spring")[0].username == "alice"
        assert len(store.get_event_questions("spring")[0].test_cases) == 1

    def test_added_objects_are_copied(self):
        store = MemoryStore()
        event = Event(id="spring", name="Spring")
        store.add_event(event)
        event.participant_ids.append("ghost")

        assert store.get_event("spring").participant_ids == []

    def test_submission_update_does_not_touch_earlier_copy(self):
        store = make_store()
        submission = store.create_submission("alice", "q1", "code", "python")

        store.update_submission(submission.id, status=ACCEPTED, score=100)

        assert submission.score == 0
        assert store.get_submission(submission.id).score == 100


class TestLoaders:
    """Test event bookkeeping."""

    def test_unknown_event_participant(self):
        with pytest.raises(KeyError):
            MemoryStore().add_participant("missing", "alice")

    def test_question_added_once(self):
        store = make_store()
        store.add_question(Question(id="q1", event_id="spring", title="Echo", description="", test_cases=[]))

        assert store.get_event("spring").question_ids == ["q1"]

    def test_unknown_lookups(self):
        store = make_store()

        assert store.get_question("nope") is None
        assert store.get_event("nope") is None
        assert store.get_event_participants("nope") == []
        assert store.get_event_questions("nope") == []
