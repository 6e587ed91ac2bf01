"""
Persistence interface consumed by the grading engine.

Store defines the per-record operations the engine relies on; MemoryStore
keeps everything in process memory behind a lock. Every operation is
atomic for a single record and returns copies, so callers never share
mutable state with the store.
"""

import threading
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional

from .models import Event, Question, Submission, User, PENDING


def _copy_question(question: Question) -> Question:
    return replace(question, test_cases=list(question.test_cases))


def _copy_event(event: Event) -> Event:
    return replace(event, question_ids=list(event.question_ids), participant_ids=list(event.participant_ids))


class Store:
    """Interface for submission, question and event persistence."""

    def create_submission(self, user_id: str, question_id: str, code: str, language: str) -> Submission:
        raise NotImplementedError

    def get_submission(self, submission_id: str) -> Optional[Submission]:
        raise NotImplementedError

    def update_submission(self, submission_id: str, **fields) -> Optional[Submission]:
        raise NotImplementedError

    def get_user_submissions(self, user_id: str, question_id: Optional[str] = None) -> List[Submission]:
        raise NotImplementedError

    def get_question(self, question_id: str) -> Optional[Question]:
        raise NotImplementedError

    def get_event(self, event_id: str) -> Optional[Event]:
        raise NotImplementedError

    def get_event_participants(self, event_id: str) -> List[User]:
        raise NotImplementedError

    def get_event_questions(self, event_id: str) -> List[Question]:
        raise NotImplementedError

    # Loading (used by the bank loader)

    def add_user(self, user: User) -> None:
        raise NotImplementedError

    def add_event(self, event: Event) -> None:
        raise NotImplementedError

    def add_question(self, question: Question) -> None:
        raise NotImplementedError

    def add_participant(self, event_id: str, user_id: str) -> None:
        raise NotImplementedError


class MemoryStore(Store):
    """Thread-safe in-memory store."""

    def __init__(self):
        self._lock = threading.Lock()
        self.users: Dict[str, User] = {}
        self.events: Dict[str, Event] = {}
        self.questions: Dict[str, Question] = {}
        self.submissions: Dict[str, Submission] = {}

    # ===== SUBMISSIONS =====

    def create_submission(self, user_id: str, question_id: str, code: str, language: str) -> Submission:
        submission = Submission(
            id=str(uuid.uuid4()),
            user_id=user_id,
            question_id=question_id,
            code=code,
            language=language,
            submitted_at=datetime.now(),
            status=PENDING,
        )
        with self._lock:
            self.submissions[submission.id] = submission
            return replace(submission)

    def get_submission(self, submission_id: str) -> Optional[Submission]:
        with self._lock:
            submission = self.submissions.get(submission_id)
            return replace(submission) if submission else None

    def update_submission(self, submission_id: str, **fields) -> Optional[Submission]:
        with self._lock:
            submission = self.submissions.get(submission_id)
            if submission is None:
                return None
            updated = replace(submission, **fields)
            self.submissions[submission_id] = updated
            return replace(updated)

    def get_user_submissions(self, user_id: str, question_id: Optional[str] = None) -> List[Submission]:
        with self._lock:
            return [
                replace(s) for s in self.submissions.values()
                if s.user_id == user_id and (question_id is None or s.question_id == question_id)
            ]

    # ===== QUESTIONS & EVENTS =====

    def get_question(self, question_id: str) -> Optional[Question]:
        with self._lock:
            question = self.questions.get(question_id)
            return _copy_question(question) if question else None

    def get_event(self, event_id: str) -> Optional[Event]:
        with self._lock:
            event = self.events.get(event_id)
            return _copy_event(event) if event else None

    def get_event_participants(self, event_id: str) -> List[User]:
        with self._lock:
            event = self.events.get(event_id)
            if event is None:
                return []
            return [replace(self.users[uid]) for uid in event.participant_ids if uid in self.users]

    def get_event_questions(self, event_id: str) -> List[Question]:
        with self._lock:
            event = self.events.get(event_id)
            if event is None:
                return []
            return [_copy_question(self.questions[qid]) for qid in event.question_ids if qid in self.questions]

    def add_user(self, user: User) -> None:
        with self._lock:
            self.users[user.id] = replace(user)

    def add_event(self, event: Event) -> None:
        with self._lock:
            self.events[event.id] = _copy_event(event)

    def add_question(self, question: Question) -> None:
        with self._lock:
            self.questions[question.id] = _copy_question(question)
            event = self.events.get(question.event_id)
            if event is not None and question.id not in event.question_ids:
                event.question_ids.append(question.id)

    def add_participant(self, event_id: str, user_id: str) -> None:
        with self._lock:
            event = self.events.get(event_id)
            if event is None:
                raise KeyError(f"Event '{event_id}' not found")
            if user_id not in event.participant_ids:
                event.participant_ids.append(user_id)
