"""
Exceptions raised by the grading engine.

Grading outcomes (wrong answer, timeout, crash) are never exceptions; they
are reported through EvaluationOutcome. These errors cover requests the
engine refuses to accept and data it cannot load.
"""


class JudgeError(Exception):
    """Base class for all engine errors."""


class UnsupportedLanguageError(JudgeError):
    """Raised when no run recipe exists for the requested language."""

    def __init__(self, language: str):
        super().__init__(f"Unsupported language: {language}")
        self.language = language


class QuestionNotFoundError(JudgeError):
    """Raised when a submission references an unknown question."""

    def __init__(self, question_id: str):
        super().__init__(f"Question '{question_id}' not found")
        self.question_id = question_id


class SubmissionNotFoundError(JudgeError):
    """Raised when a submission ID does not exist in the store."""

    def __init__(self, submission_id: str):
        super().__init__(f"Submission '{submission_id}' not found")
        self.submission_id = submission_id


class BankError(JudgeError):
    """Raised when a question bank cannot be read, decrypted or parsed."""
