"""Delegation rule.

Complex work (many files modified) should be delegated to a sub-agent,
and every delegation must name its target agent and say why.

Violations:
- missed-delegation (warning): complex work done without delegating.
- unjustified-delegation (warning): a delegation without target or rationale.

Metadata keys: delegation_count, files_modified, complexity_threshold.
"""

from __future__ import annotations

from behavior_evaluator.config.defaults import DEFAULT_COMPLEXITY_THRESHOLD, DELEGATION_TOOLS
from behavior_evaluator.evaluators.base import BaseEvaluator, Timeline
from behavior_evaluator.evaluators.classification import modified_files
from behavior_evaluator.models.enums import EventType, Severity
from behavior_evaluator.models.evaluation import Check, EvaluationResult
from behavior_evaluator.models.session import SessionInfo

__all__ = ["DelegationEvaluator"]


def _text_field(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


class DelegationEvaluator(BaseEvaluator):
    """Checks that delegation matches task complexity.

    Attributes:
        complexity_threshold: Files modified from which delegation is expected.

    """

    name = "delegation"
    description = "Delegates complex work to sub-agents with a stated rationale"

    def __init__(self, complexity_threshold: int = DEFAULT_COMPLEXITY_THRESHOLD) -> None:
        """Initialize the rule.

        Args:
            complexity_threshold: Files modified from which delegation is expected.

        Raises:
            ValueError: If complexity_threshold is below 1.

        """
        if complexity_threshold < 1:
            raise ValueError(f"complexity_threshold must be at least 1, got {complexity_threshold}")
        self.complexity_threshold = complexity_threshold

    def evaluate(self, timeline: Timeline, session_info: SessionInfo) -> EvaluationResult:
        delegations = [
            e
            for e in timeline
            if e.type == EventType.tool_call and (e.tool or "").lower() in DELEGATION_TOOLS
        ]

        files: list[str] = []
        for event in timeline:
            for path in modified_files(event):
                if path not in files:
                    files.append(path)

        complex_task = len(files) >= self.complexity_threshold
        delegated_when_complex = not complex_task or bool(delegations)

        violations = []
        if not delegated_when_complex:
            last_change = max(
                (e for e in timeline if modified_files(e)),
                key=lambda e: (e.timestamp, e.sequence),
                default=None,
            )
            violations.append(
                self.create_violation(
                    "missed-delegation",
                    Severity.warning,
                    f"{len(files)} files modified without delegating "
                    f"(threshold {self.complexity_threshold})",
                    last_change.timestamp if last_change else 0,
                    {"files": files, "complexity_threshold": self.complexity_threshold},
                )
            )

        unjustified = []
        for event in delegations:
            agent = _text_field(event.tool_input.get("subagent_type"))
            rationale = _text_field(event.tool_input.get("description")) or _text_field(
                event.tool_input.get("prompt")
            )
            if agent and rationale:
                continue
            unjustified.append(event)
            violations.append(
                self.create_violation(
                    "unjustified-delegation",
                    Severity.warning,
                    "Delegation without a target agent or rationale",
                    event.timestamp,
                    {
                        "agent": agent or None,
                        "has_rationale": bool(rationale),
                        "child_session_id": (event.data.get("delegation") or {}).get(
                            "child_session_id"
                        ),
                    },
                )
            )

        delegation_evidence = self.create_evidence(
            "delegations",
            "Delegating tool calls and modified files",
            {
                "delegations": [
                    {
                        "timestamp": e.timestamp,
                        "agent": e.tool_input.get("subagent_type"),
                        "description": e.tool_input.get("description"),
                    }
                    for e in delegations
                ],
                "files_modified": files,
            },
        )
        checks = [
            Check(
                name="delegation-when-complex",
                passed=delegated_when_complex,
                weight=50,
                evidence=[delegation_evidence],
            ),
            Check(
                name="delegation-justified",
                passed=not unjustified,
                weight=50,
                evidence=[delegation_evidence],
            ),
        ]

        return self.build_result(
            checks,
            violations,
            metadata={
                "delegation_count": len(delegations),
                "files_modified": len(files),
                "complexity_threshold": self.complexity_threshold,
            },
        )
