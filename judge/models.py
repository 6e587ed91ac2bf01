"""
Data models for questions, submissions and engine configuration.

Provides type-safe structures for TestCase, Question, Event, Submission,
EvaluationOutcome, LeaderboardEntry and JudgeConfig objects.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Any


# Submission statuses
PENDING = "pending"
ACCEPTED = "accepted"
WRONG_ANSWER = "wrong_answer"
RUNTIME_ERROR = "runtime_error"
TIME_LIMIT_EXCEEDED = "time_limit_exceeded"

TERMINAL_STATUSES = frozenset({ACCEPTED, WRONG_ANSWER, RUNTIME_ERROR, TIME_LIMIT_EXCEEDED})


@dataclass(frozen=True)
class TestCase:
    """Represents a single hidden test case for a question."""
    __test__ = False  # not a pytest class

    input: str
    expected_output: str

    @staticmethod
    def from_dict(data: dict) -> 'TestCase':
        """Create a TestCase, accepting either 'output' or 'expected_output'."""
        expected = data.get('expected_output', data.get('output'))
        if expected is None:
            raise ValueError("Test case is missing its expected output")
        return TestCase(input=data.get('input') or "", expected_output=expected)


@dataclass
class Question:
    """Represents a programming question owned by an event."""
    id: str
    event_id: str
    title: str
    description: str
    test_cases: List[TestCase]
    difficulty: str = "medium"
    time_limit_seconds: float = 5
    memory_limit_mb: int = 256

    @property
    def time_limit_ms(self) -> int:
        return int(self.time_limit_seconds * 1000)

    @staticmethod
    def from_dict(data: dict, event_id: str) -> 'Question':
        """Create a Question object from a dictionary."""
        tests = data.get('test_cases', data.get('tests', []))
        return Question(
            id=data['id'],
            event_id=event_id,
            title=data.get('title', data['id']),
            description=data.get('description', ""),
            test_cases=[TestCase.from_dict(t) for t in tests],
            difficulty=data.get('difficulty', 'medium'),
            time_limit_seconds=data.get('time_limit_seconds', data.get('time_limit', 5)),
            memory_limit_mb=data.get('memory_limit_mb', data.get('memory_limit', 256)),
        )


@dataclass
class User:
    """A participant or organizer."""
    id: str
    username: str
    name: str = ""

    @staticmethod
    def from_dict(data: dict) -> 'User':
        return User(
            id=data['id'],
            username=data.get('username', data['id']),
            name=data.get('name', ""),
        )


@dataclass
class Event:
    """A contest grouping questions and participants."""
    id: str
    name: str
    description: str = ""
    question_ids: List[str] = field(default_factory=list)
    participant_ids: List[str] = field(default_factory=list)


@dataclass
class Submission:
    """One grading attempt by a user at a question."""
    id: str
    user_id: str
    question_id: str
    code: str
    language: str
    submitted_at: datetime
    status: str = PENDING
    score: int = 0
    execution_time_ms: Optional[int] = None
    feedback: Optional[str] = None
    passed_tests: Optional[int] = None
    total_tests: Optional[int] = None

    @property
    def is_resolved(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "question_id": self.question_id,
            "language": self.language,
            "status": self.status,
            "score": self.score,
            "execution_time_ms": self.execution_time_ms,
            "feedback": self.feedback,
            "passed_tests": self.passed_tests,
            "total_tests": self.total_tests,
            "submitted_at": self.submitted_at.isoformat(),
        }


@dataclass
class EvaluationOutcome:
    """
    Result of running a submission against its test cases.

    Attributes:
        verdict: One of the terminal submission statuses
        passed_tests: Test cases passed before the first failure
        total_tests: Number of test cases for the question
        execution_time_ms: Elapsed time summed over every attempted test case
        message: Diagnostic text (compiler output, stderr, mismatch details)
        failed_test: 1-based index of the failing test case, if any
        actual_output: Trimmed program output for a wrong answer
        expected_output: Trimmed expected output for a wrong answer
    """
    verdict: str
    passed_tests: int
    total_tests: int
    execution_time_ms: int = 0
    message: Optional[str] = None
    failed_test: Optional[int] = None
    actual_output: Optional[str] = None
    expected_output: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.verdict == ACCEPTED


@dataclass
class LeaderboardEntry:
    """Derived per-participant ranking record. Never persisted."""
    user: User
    score: int
    solved: int
    last_submission_time: Optional[datetime]


@dataclass
class JudgeConfig:
    """
    Engine configuration set by the deployment.

    Attributes:
        max_concurrent_evaluations: Worker pool size bounding concurrent evaluations
        default_time_limit_ms: Per test case limit when a question sets none
        default_memory_limit_mb: Advisory memory limit when a question sets none
        compile_timeout_seconds: Deadline for the compile step
        evaluation_grace_seconds: Slack added to the evaluation watchdog budget
        feedback_enabled: Ask the feedback service for hints on failed submissions
        feedback_timeout_seconds: HTTP timeout for the feedback service
        feedback_api_url: Chat completions endpoint
        feedback_model: Model name sent to the feedback service
        log_path: Event log file (None keeps the log in memory only)
    """
    max_concurrent_evaluations: int
    default_time_limit_ms: int
    default_memory_limit_mb: int
    compile_timeout_seconds: float
    evaluation_grace_seconds: float
    feedback_enabled: bool
    feedback_timeout_seconds: float
    feedback_api_url: str
    feedback_model: str
    log_path: Optional[str] = None

    @staticmethod
    def from_dict(data: dict) -> 'JudgeConfig':
        """Create JudgeConfig from dictionary."""
        return JudgeConfig(
            max_concurrent_evaluations=data.get('max_concurrent_evaluations', 4),
            default_time_limit_ms=data.get('default_time_limit_ms', 5000),
            default_memory_limit_mb=data.get('default_memory_limit_mb', 256),
            compile_timeout_seconds=float(data.get('compile_timeout_seconds', 30.0)),
            evaluation_grace_seconds=float(data.get('evaluation_grace_seconds', 10.0)),
            feedback_enabled=data.get('feedback_enabled', True),
            feedback_timeout_seconds=float(data.get('feedback_timeout_seconds', 15.0)),
            feedback_api_url=data.get('feedback_api_url', "https://api.openai.com/v1/chat/completions"),
            feedback_model=data.get('feedback_model', "gpt-3.5-turbo"),
            log_path=data.get('log_path'),
        )

    def validate(self) -> tuple[bool, str]:
        """
        Validate configuration consistency.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if self.max_concurrent_evaluations < 1:
            return False, "max_concurrent_evaluations must be at least 1"

        if self.default_time_limit_ms <= 0 or self.default_memory_limit_mb <= 0:
            return False, "Default time and memory limits must be positive"

        if self.compile_timeout_seconds <= 0 or self.feedback_timeout_seconds <= 0:
            return False, "Timeouts must be positive"

        if self.evaluation_grace_seconds < 0:
            return False, "evaluation_grace_seconds must be non-negative"

        return True, ""

    @staticmethod
    def default() -> 'JudgeConfig':
        """Return default configuration."""
        return JudgeConfig.from_dict({})
