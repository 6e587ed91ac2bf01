"""Scoring policy: maps an evaluation outcome to an integer score."""

from .models import EvaluationOutcome

ACCEPTED_SCORE = 100
PARTIAL_CREDIT_CAP = 50


def score(outcome: EvaluationOutcome) -> int:
    """
    Accepted earns full marks; anything else earns floor(50 * passed / total).

    Partial credit therefore always stays below the accepted score, and zero
    passed tests (or a question without tests) scores 0.
    """
    if outcome.accepted:
        return ACCEPTED_SCORE
    if outcome.total_tests <= 0:
        return 0
    return (PARTIAL_CREDIT_CAP * outcome.passed_tests) // outcome.total_tests
