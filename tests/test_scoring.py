"""
Tests for scoring module.

Tests the scoring policy including:
- Full marks for accepted outcomes
- Capped partial credit for every other verdict
"""

import pytest
from pathlib import Path

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from judge.models import (
    EvaluationOutcome,
    ACCEPTED, WRONG_ANSWER, RUNTIME_ERROR, TIME_LIMIT_EXCEEDED,
)
from judge.scoring import score


class TestAcceptedScore:
    """Test that accepted always scores 100."""

    @pytest.mark.parametrize("passed,total", [(5, 5), (0, 0), (1, 3), (0, 7)])
    def test_accepted_is_100(self, passed, total):
        outcome = EvaluationOutcome(verdict=ACCEPTED, passed_tests=passed, total_tests=total)
        assert score(outcome) == 100


class TestPartialCredit:
    """Test floor(50 * passed / total) for non-accepted outcomes."""

    @pytest.mark.parametrize("verdict", [WRONG_ANSWER, RUNTIME_ERROR, TIME_LIMIT_EXCEEDED])
    def test_three_of_five(self, verdict):
        outcome = EvaluationOutcome(verdict=verdict, passed_tests=3, total_tests=5)
        assert score(outcome) == 30

    def test_zero_passed(self):
        outcome = EvaluationOutcome(verdict=WRONG_ANSWER, passed_tests=0, total_tests=4)
        assert score(outcome) == 0

    def test_rounds_down(self):
        outcome = EvaluationOutcome(verdict=WRONG_ANSWER, passed_tests=2, total_tests=3)
        assert score(outcome) == 33

    def test_stays_below_accepted(self):
        """Test that every case passed but a failed verdict still caps at 50."""
        outcome = EvaluationOutcome(verdict=RUNTIME_ERROR, passed_tests=4, total_tests=4)
        assert score(outcome) == 50

    def test_no_tests(self):
        outcome = EvaluationOutcome(verdict=RUNTIME_ERROR, passed_tests=0, total_tests=0)
        assert score(outcome) == 0

    def test_timeout_first_of_five(self):
        outcome = EvaluationOutcome(verdict=TIME_LIMIT_EXCEEDED, passed_tests=0, total_tests=5)
        assert score(outcome) == 0
