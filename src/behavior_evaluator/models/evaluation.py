"""Evaluation result models for behavior-evaluator.

This module defines the verdict vocabulary shared by every rule:
weighted checks, advisory violations, evidence snapshots, per-rule
results and the aggregated result of a whole rule set.
"""

from typing import Any

from pydantic import Field, computed_field

from behavior_evaluator.models.base import BaseSchema
from behavior_evaluator.models.enums import PassPolicy, Severity

__all__ = [
    "MetadataValue",
    "Evidence",
    "Check",
    "Violation",
    "EvaluationResult",
    "AggregatedResult",
]

# Typed value of the per-rule metadata map (ratios, counts, flags).
MetadataValue = bool | int | float | str


class Evidence(BaseSchema):
    """A named, timestamped snapshot of data justifying a verdict.

    Attributes:
        type: Short identifier of the evidence kind (e.g. 'ordering').
        description: Human-readable description.
        data: Snapshot of the data used.
        timestamp: Timeline position the evidence refers to (optional).

    """

    type: str = Field(..., min_length=1)
    description: str = ""
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: int | None = None


class Check(BaseSchema):
    """One named, weighted boolean assertion inside a rule's verdict.

    Attributes:
        name: Check identifier, unique within its rule.
        passed: Whether the assertion held.
        weight: Positive, rule-local weight.
        evidence: One or more evidence entries.

    """

    name: str = Field(..., min_length=1)
    passed: bool
    weight: float = Field(..., gt=0)
    evidence: list[Evidence] = Field(..., min_length=1)


class Violation(BaseSchema):
    """A reported rule breach.

    Violations are diagnostic: a check's outcome is set by the rule
    logic, and violations corroborate it.

    Attributes:
        code: Stable violation code (e.g. 'missing-approval').
        severity: error or warning.
        message: Human-readable message.
        timestamp: Timeline position of the triggering event.
        data: Structured supporting data.

    """

    code: str = Field(..., min_length=1)
    severity: Severity
    message: str
    timestamp: int
    data: dict[str, Any] = Field(default_factory=dict)


class EvaluationResult(BaseSchema):
    """One rule's verdict on a timeline.

    Attributes:
        evaluator: Name of the rule that produced the result.
        passed: Overall outcome of the rule.
        score: Weighted check score (0-100).
        checks: Checks the score was computed from.
        violations: Reported violations.
        evidence: Session-level evidence.
        metadata: Numeric/string metrics for reporting; keys are rule-specific.

    """

    evaluator: str = Field(..., min_length=1)
    passed: bool
    score: float = Field(..., ge=0.0, le=100.0)
    checks: list[Check] = Field(default_factory=list)
    violations: list[Violation] = Field(default_factory=list)
    evidence: list[Evidence] = Field(default_factory=list)
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)

    def get_check(self, name: str) -> Check | None:
        """Return the check with the given name, if present."""
        return next((c for c in self.checks if c.name == name), None)


class AggregatedResult(BaseSchema):
    """Combined verdict of a rule set on one timeline.

    Attributes:
        session_id: Evaluated session.
        session_title: Title of the evaluated session.
        results: Per-rule results, in rule registration order.
        overall_passed: Overall decision under the configured policy.
        overall_score: Combined score (0-100).
        policy: Aggregation policy used.
        threshold: Threshold used by the weighted policy.

    """

    session_id: str
    session_title: str = ""
    results: list[EvaluationResult] = Field(default_factory=list)
    overall_passed: bool
    overall_score: float = Field(..., ge=0.0, le=100.0)
    policy: PassPolicy = PassPolicy.all_pass
    threshold: float = 75.0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_violations(self) -> int:
        """Number of violations across all rules."""
        return sum(len(r.violations) for r in self.results)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def violations_by_severity(self) -> dict[str, int]:
        """Violation counts keyed by severity."""
        counts = {severity.value: 0 for severity in Severity}
        for violation in self.all_violations:
            counts[violation.severity.value] += 1
        return counts

    @property
    def all_violations(self) -> list[Violation]:
        """Violations of every rule, in rule order."""
        return [v for r in self.results for v in r.violations]

    def get_result(self, evaluator: str) -> EvaluationResult | None:
        """Return the result of the named rule, if it ran."""
        return next((r for r in self.results if r.evaluator == evaluator), None)
