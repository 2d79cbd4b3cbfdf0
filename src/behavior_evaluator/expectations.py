"""Checking evaluation results against a test case's expectations.

ResultValidator decides whether an evaluated session satisfies the test
case that produced it: behavior expectations must hold, expected
violations must (or must not) appear, and no other error-level
violation may remain.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import Field

from behavior_evaluator.logging_config import get_logger
from behavior_evaluator.models.base import BaseSchema
from behavior_evaluator.models.enums import Severity
from behavior_evaluator.models.evaluation import AggregatedResult, Violation
from behavior_evaluator.models.test_case import ExpectedViolation, TestCase

__all__ = ["RULE_VIOLATION_PATTERNS", "ValidationOutcome", "ResultValidator"]

logger = get_logger(__name__)

# Rule name -> substrings of the violation codes that rule reports.
RULE_VIOLATION_PATTERNS: dict[str, tuple[str, ...]] = {
    "approval-gate": ("missing-approval",),
    "context-loading": ("context",),
    "delegation": ("delegation",),
    "tool-usage": ("wrong-tool-category", "bash-used-for-read"),
    "stop-on-failure": ("continued-after-failure",),
    "report-first": ("fix-before-report",),
    "cleanup-confirmation": ("unconfirmed-cleanup",),
    "confirm-cleanup": ("unconfirmed-cleanup",),
    "execution-balance": ("execution-before-read", "insufficient-read"),
}


class ValidationOutcome(BaseSchema):
    """Verdict of a test case.

    Attributes:
        passed: Whether the session satisfied the test case.
        reasons: Why the test case failed (empty when passed).

    """

    passed: bool
    reasons: list[str] = Field(default_factory=list)


class ResultValidator:
    """Validates aggregated results against test case expectations."""

    def validate(
        self,
        test_case: TestCase,
        evaluation: AggregatedResult | None,
        errors: Sequence[str] = (),
    ) -> ValidationOutcome:
        """Decide whether a test case passed.

        Checks run in order and stop at the first failing stage:
        execution errors, behavior expectations, expected violations,
        then unexpected error-level violations.

        Args:
            test_case: The test case that was run.
            evaluation: Aggregated verdict of the recorded session, if any.
            errors: Errors raised while driving the agent.

        Returns:
            ValidationOutcome with the failure reasons, if any.

        """
        if errors:
            return self._fail(test_case, [f"Execution error: {e}" for e in errors])

        if evaluation is None:
            return ValidationOutcome(passed=True)

        if test_case.behavior is not None:
            reasons = self._check_behavior(evaluation)
            if reasons:
                return self._fail(test_case, reasons)

        expected_codes: set[str] = set()
        if test_case.expected_violations:
            reasons = self._check_expected_violations(
                test_case.expected_violations, evaluation, expected_codes
            )
            if reasons:
                return self._fail(test_case, reasons)

        unexpected = [
            v
            for v in evaluation.all_violations
            if v.severity == Severity.error and v.code not in expected_codes
        ]
        if unexpected:
            return self._fail(
                test_case,
                [f"Unexpected error violation {v.code}: {v.message}" for v in unexpected],
            )

        logger.info("test_case_passed", test_id=test_case.id)
        return ValidationOutcome(passed=True)

    @staticmethod
    def matching_violations(
        expected: ExpectedViolation, evaluation: AggregatedResult
    ) -> list[Violation]:
        """Violations that satisfy one expected-violation entry.

        Args:
            expected: The expected violation.
            evaluation: Aggregated verdict to search.

        Returns:
            Matching violations, in rule order.

        """
        patterns = RULE_VIOLATION_PATTERNS.get(expected.rule, (expected.rule,))
        matches = [
            v
            for v in evaluation.all_violations
            if any(p.lower() in v.code.lower() for p in patterns)
        ]
        if expected.violation_type:
            matches = [v for v in matches if v.code == expected.violation_type]
        return matches

    @staticmethod
    def _check_behavior(evaluation: AggregatedResult) -> list[str]:
        result = evaluation.get_result("behavior")
        if result is None:
            return []
        reasons = []
        if not result.passed:
            reasons.append(f"Behavior expectations failed (score {result.score:.1f})")
        reasons.extend(
            f"{v.code}: {v.message}" for v in result.violations if v.severity == Severity.error
        )
        return reasons

    def _check_expected_violations(
        self,
        expected_violations: list[ExpectedViolation],
        evaluation: AggregatedResult,
        expected_codes: set[str],
    ) -> list[str]:
        reasons = []
        for expected in expected_violations:
            matches = self.matching_violations(expected, evaluation)
            if expected.should_violate:
                if not matches:
                    reasons.append(f"Expected {expected.rule} violation but none found")
                    continue
                expected_codes.update(v.code for v in matches)
                logger.debug(
                    "expected_violation_found",
                    rule=expected.rule,
                    codes=sorted({v.code for v in matches}),
                )
            elif matches:
                reasons.append(
                    f"Unexpected {expected.rule} violation found: {matches[0].message}"
                )
        return reasons

    @staticmethod
    def _fail(test_case: TestCase, reasons: list[str]) -> ValidationOutcome:
        logger.info("test_case_failed", test_id=test_case.id, reasons=reasons)
        return ValidationOutcome(passed=False, reasons=reasons)
