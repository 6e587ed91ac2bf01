"""
Submission lifecycle: pending -> accepted | wrong_answer | runtime_error | time_limit_exceeded.

SubmissionService persists a pending record synchronously and evaluates it
on a bounded worker pool. Every path out of a worker, including crashes,
cancellation and a stuck evaluation, ends in a terminal state.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from functools import partial
from typing import Callable, Dict, List, Optional

from . import languages, scoring
from .errors import QuestionNotFoundError, SubmissionNotFoundError
from .feedback import FALLBACK_MESSAGE, StaticFeedback
from .grader import Grader
from .models import EvaluationOutcome, JudgeConfig, Question, Submission, RUNTIME_ERROR
from .store import Store


CRASH_MESSAGE = "Internal error during evaluation"
WATCHDOG_MESSAGE = "Evaluation did not finish within its time budget"
CANCELLED_MESSAGE = "Evaluation was cancelled before it started"
DEFAULT_DIAGNOSTIC = "Code did not pass all test cases"


class SubmissionService:
    """Owns submission state transitions and background evaluation."""

    def __init__(
        self,
        store: Store,
        config: Optional[JudgeConfig] = None,
        grader: Optional[Grader] = None,
        feedback=None,
        session_logger: Optional[Callable[[str, str], None]] = None
    ):
        self.store = store
        self.config = config or JudgeConfig.default()
        self.grader = grader or Grader(self.config)
        self.feedback = feedback or StaticFeedback()
        self.session_logger = session_logger

        self._executor = ThreadPoolExecutor(
            max_workers=self.config.max_concurrent_evaluations,
            thread_name_prefix="judge-eval"
        )
        self._resolved = threading.Condition()
        self._watchdogs: Dict[str, threading.Timer] = {}

    def __enter__(self) -> 'SubmissionService':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
        return False

    def _log(self, event: str, details: str = ""):
        if self.session_logger:
            self.session_logger(event, details)

    # ===== PUBLIC SURFACE =====

    def submit(self, user_id: str, question_id: str, code: str, language: str) -> Submission:
        """
        Create a pending submission and schedule its evaluation.

        Returns immediately with the pending record; poll get_result or
        call wait for the verdict.

        Raises:
            UnsupportedLanguageError: Before any record is created
            QuestionNotFoundError: Before any record is created
        """
        languages.resolve(language)
        question = self.store.get_question(question_id)
        if question is None:
            raise QuestionNotFoundError(question_id)

        submission = self.store.create_submission(user_id, question_id, code, language)
        self._log("SUBMISSION_CREATED", f"Submission: {submission.id}, User: {user_id}, Question: {question_id}, Language: {language}")

        future = self._executor.submit(self._evaluate_and_resolve, submission.id, question)
        future.add_done_callback(partial(self._on_worker_done, submission.id, question))
        return submission

    def get_result(self, submission_id: str) -> Submission:
        submission = self.store.get_submission(submission_id)
        if submission is None:
            raise SubmissionNotFoundError(submission_id)
        return submission

    def get_user_submissions(self, user_id: str, question_id: Optional[str] = None) -> List[Submission]:
        return self.store.get_user_submissions(user_id, question_id)

    def wait(self, submission_id: str, timeout: Optional[float] = None) -> Submission:
        """Block until the submission is terminal or the timeout elapses; return its latest state."""
        with self._resolved:
            self._resolved.wait_for(lambda: self.get_result(submission_id).is_resolved, timeout)
        return self.get_result(submission_id)

    def resolve(self, submission_id: str, outcome: EvaluationOutcome, question: Optional[Question] = None) -> Submission:
        """
        Move a pending submission to the outcome's terminal status.

        Scores the outcome, asks for feedback when it is not accepted and
        persists status, score, execution time, feedback and test counts in
        one update. A submission that is already terminal is returned
        unchanged.
        """
        submission = self.get_result(submission_id)
        if submission.is_resolved:
            self._log("RESOLVE_SKIPPED", f"Submission: {submission_id} already {submission.status}")
            return submission

        feedback = None
        if not outcome.accepted:
            if question is None:
                question = self.store.get_question(submission.question_id)
            feedback = self._request_feedback(submission, question, outcome)

        return self._persist_terminal(
            submission_id,
            status=outcome.verdict,
            score=scoring.score(outcome),
            execution_time_ms=outcome.execution_time_ms,
            feedback=feedback,
            passed_tests=outcome.passed_tests,
            total_tests=outcome.total_tests,
        )

    def shutdown(self, wait: bool = True):
        """Stop accepting work. With wait=True, block until running evaluations finish."""
        self._executor.shutdown(wait=wait)
        if wait:
            with self._resolved:
                timers = list(self._watchdogs.values())
                self._watchdogs.clear()
            for timer in timers:
                timer.cancel()

    # ===== BACKGROUND EVALUATION =====

    def _evaluate_and_resolve(self, submission_id: str, question: Question):
        submission = self.get_result(submission_id)
        self._arm_watchdog(submission, question)
        try:
            self._log("EVALUATION_START", f"Submission: {submission_id}, Tests: {len(question.test_cases)}")
            outcome = self.grader.evaluate(
                submission.language,
                submission.code,
                question.test_cases,
                question.time_limit_ms,
                question.memory_limit_mb
            )
        finally:
            # The budget covers grading only; feedback has its own timeout
            self._disarm_watchdog(submission_id)

        self._log(
            "EVALUATION_DONE",
            f"Submission: {submission_id}, Verdict: {outcome.verdict}, "
            f"Passed: {outcome.passed_tests}/{outcome.total_tests}, Time: {outcome.execution_time_ms} ms"
        )
        self.resolve(submission_id, outcome, question)

    def _on_worker_done(self, submission_id: str, question: Question, future: Future):
        if future.cancelled():
            self._fail_safe(submission_id, question, CANCELLED_MESSAGE)
            return

        error = future.exception()
        if error is not None:
            self._log("EVALUATION_CRASH", f"Submission: {submission_id}, Error: {type(error).__name__}: {error}")
            self._fail_safe(submission_id, question, CRASH_MESSAGE)

    def _evaluation_budget(self, submission: Submission, question: Question) -> float:
        budget = len(question.test_cases) * question.time_limit_ms / 1000.0
        budget += self.config.evaluation_grace_seconds
        if languages.resolve(submission.language).needs_compile:
            budget += self.config.compile_timeout_seconds
        return budget

    def _arm_watchdog(self, submission: Submission, question: Question):
        budget = self._evaluation_budget(submission, question)
        timer = threading.Timer(budget, self._on_watchdog, args=(submission.id, question, budget))
        timer.daemon = True
        with self._resolved:
            self._watchdogs[submission.id] = timer
        timer.start()

    def _disarm_watchdog(self, submission_id: str):
        with self._resolved:
            timer = self._watchdogs.pop(submission_id, None)
        if timer is not None:
            timer.cancel()

    def _on_watchdog(self, submission_id: str, question: Question, budget: float):
        with self._resolved:
            self._watchdogs.pop(submission_id, None)
        self._log("EVALUATION_WATCHDOG", f"Submission: {submission_id} still pending after {budget:.1f}s")
        self._fail_safe(submission_id, question, WATCHDOG_MESSAGE)

    # ===== TERMINAL WRITES =====

    def _request_feedback(self, submission: Submission, question: Optional[Question], outcome: EvaluationOutcome) -> str:
        description = question.description if question else ""
        try:
            return self.feedback.explain(submission.code, description, outcome.message or DEFAULT_DIAGNOSTIC)
        except Exception as e:
            self._log("FEEDBACK_ERROR", f"Submission: {submission.id}, Error: {e}")
            return FALLBACK_MESSAGE

    def _fail_safe(self, submission_id: str, question: Question, message: str):
        """Force a still-pending submission to runtime_error."""
        try:
            self._persist_terminal(
                submission_id,
                status=RUNTIME_ERROR,
                score=0,
                execution_time_ms=0,
                feedback=message,
                passed_tests=0,
                total_tests=len(question.test_cases),
            )
        except Exception as e:
            # Runs on a worker or timer thread with nobody to raise to
            self._log("FAIL_SAFE_ERROR", f"Submission: {submission_id}, Error: {e}")

    def _persist_terminal(self, submission_id: str, **fields) -> Submission:
        with self._resolved:
            current = self.get_result(submission_id)
            if current.is_resolved:
                self._log("RESOLVE_SKIPPED", f"Submission: {submission_id} already {current.status}")
                return current
            updated = self.store.update_submission(submission_id, **fields)
            self._resolved.notify_all()

        self._log(
            "SUBMISSION_RESOLVED",
            f"Submission: {submission_id}, Status: {updated.status}, Score: {updated.score}"
        )
        return updated
