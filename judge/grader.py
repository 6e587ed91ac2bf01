"""
Grader module for running test cases and classifying submissions.

Provides the Grader class which drives the sandbox once per test case,
compares outputs and turns the first failure into a verdict.
"""

from typing import Callable, List, Optional

from . import languages
from .models import (
    EvaluationOutcome, JudgeConfig, TestCase,
    ACCEPTED, WRONG_ANSWER, RUNTIME_ERROR, TIME_LIMIT_EXCEEDED,
)
from .sandbox import Sandbox, RunResult, TIMEOUT, SPAWN_ERROR


class Grader:
    """Handles test case execution and output validation."""

    def __init__(self, config: JudgeConfig, sandbox_factory: Callable[..., Sandbox] = Sandbox):
        """
        Initialize grader with engine config.

        Args:
            config: Engine configuration (compile timeout, default limits)
            sandbox_factory: Callable building a Sandbox from
                (recipe, source_code, memory_limit_mb)
        """
        self.config = config
        self.sandbox_factory = sandbox_factory

    # ===== CHECKER =====

    @staticmethod
    def outputs_match(actual: str, expected: str) -> bool:
        """
        Exact string equality after stripping leading and trailing whitespace.

        Internal whitespace, case and number formatting are compared as-is.
        """
        return actual.strip() == expected.strip()

    # ===== TEST EXECUTION =====

    def evaluate(
        self,
        language: str,
        code: str,
        test_cases: List[TestCase],
        time_limit_ms: Optional[int] = None,
        memory_limit_mb: Optional[int] = None
    ) -> EvaluationOutcome:
        """
        Run the test cases in order and stop at the first failure.

        Args:
            language: Language identifier resolved through the registry
            code: Submitted source code
            test_cases: Ordered test cases
            time_limit_ms: Per test case wall-clock limit
            memory_limit_mb: Advisory memory limit

        Returns:
            EvaluationOutcome; passed_tests only counts cases before the
            first failure

        Raises:
            UnsupportedLanguageError: If the language has no recipe
        """
        recipe = languages.resolve(language)
        time_limit_ms = time_limit_ms or self.config.default_time_limit_ms
        memory_limit_mb = memory_limit_mb or self.config.default_memory_limit_mb
        total_tests = len(test_cases)

        with self.sandbox_factory(recipe, code, memory_limit_mb) as sandbox:
            if recipe.needs_compile:
                compiled = sandbox.compile(self.config.compile_timeout_seconds)
                if not compiled.succeeded:
                    return EvaluationOutcome(
                        verdict=RUNTIME_ERROR,
                        passed_tests=0,
                        total_tests=total_tests,
                        message=f"Compilation failed: {self._diagnostic(compiled)}",
                    )

            passed_count = 0
            elapsed_total = 0

            for i, test_case in enumerate(test_cases, start=1):
                result = sandbox.run(test_case.input, time_limit_ms)
                elapsed_total += result.elapsed_ms

                if result.status == TIMEOUT:
                    return EvaluationOutcome(
                        verdict=TIME_LIMIT_EXCEEDED,
                        passed_tests=passed_count,
                        total_tests=total_tests,
                        execution_time_ms=elapsed_total,
                        message=f"Time limit exceeded on test case {i} ({time_limit_ms} ms)",
                        failed_test=i,
                    )

                if result.status == SPAWN_ERROR or result.exit_code != 0:
                    return EvaluationOutcome(
                        verdict=RUNTIME_ERROR,
                        passed_tests=passed_count,
                        total_tests=total_tests,
                        execution_time_ms=elapsed_total,
                        message=f"Runtime error in test case {i}: {self._diagnostic(result)}",
                        failed_test=i,
                    )

                if not self.outputs_match(result.stdout, test_case.expected_output):
                    actual = result.stdout.strip()
                    expected = test_case.expected_output.strip()
                    return EvaluationOutcome(
                        verdict=WRONG_ANSWER,
                        passed_tests=passed_count,
                        total_tests=total_tests,
                        execution_time_ms=elapsed_total,
                        message=f"Test case {i} failed. Expected: {expected}, Got: {actual}",
                        failed_test=i,
                        actual_output=actual,
                        expected_output=expected,
                    )

                passed_count += 1

        return EvaluationOutcome(
            verdict=ACCEPTED,
            passed_tests=passed_count,
            total_tests=total_tests,
            execution_time_ms=elapsed_total,
        )

    @staticmethod
    def _diagnostic(result: RunResult) -> str:
        stderr = (result.stderr or "").strip()
        if stderr:
            return stderr[:2000]
        if result.exit_code is not None:
            return f"Process exited with code {result.exit_code}"
        return result.status

    # ===== UTILITY METHODS =====

    def format_outcome(self, outcome: EvaluationOutcome, show_details: bool = False) -> str:
        """
        Format an outcome for terminal display.

        Args:
            outcome: Outcome returned by evaluate
            show_details: If True, include diagnostics and the output comparison
        """
        labels = {
            ACCEPTED: "ACCEPTED",
            WRONG_ANSWER: "WRONG ANSWER",
            RUNTIME_ERROR: "RUNTIME ERROR",
            TIME_LIMIT_EXCEEDED: "TIME LIMIT EXCEEDED",
        }
        lines = [f"Verdict: {labels.get(outcome.verdict, outcome.verdict)}"]
        lines.append(f"Passed: {outcome.passed_tests}/{outcome.total_tests} test case(s) in {outcome.execution_time_ms} ms")

        if outcome.failed_test is not None:
            lines.append(f"Failed at test case #{outcome.failed_test}")

        if show_details:
            if outcome.actual_output is not None:
                lines.append(f"  Your output: {repr(outcome.actual_output)[:100]}")
                lines.append(f"  Expected:    {repr(outcome.expected_output)[:100]}")
            elif outcome.message:
                lines.append(f"  Details: {outcome.message.strip()[:200]}")

        return "\n".join(lines)
