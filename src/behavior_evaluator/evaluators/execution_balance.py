"""Execution balance rule.

Rules:
1. At least one read-class call (read/glob/grep/list) must happen before
   the first execution-class call (bash/write/edit/patch/task).
2. When there are executions, reads:executions must be at least 1.

Violations:
- execution-before-read (error): state was changed before anything was read.
- insufficient-read (warning): fewer reads than executions.

Metadata keys: read_count, exec_count, ratio (inf without executions),
read_before_exec.
"""

from __future__ import annotations

import math

from behavior_evaluator.evaluators.base import BaseEvaluator, Timeline
from behavior_evaluator.models.enums import Severity
from behavior_evaluator.models.evaluation import Check, EvaluationResult
from behavior_evaluator.models.session import SessionInfo

__all__ = ["ExecutionBalanceEvaluator"]


class ExecutionBalanceEvaluator(BaseEvaluator):
    """Checks read-before-execute ordering and the read:execute ratio."""

    name = "execution-balance"
    description = "Reads before executing and keeps a healthy read/execution ratio"

    def evaluate(self, timeline: Timeline, session_info: SessionInfo) -> EvaluationResult:
        read_events = self.get_read_tools(timeline)
        exec_events = self.get_execution_tools(timeline)

        first_read = read_events[0] if read_events else None
        first_exec = exec_events[0] if exec_events else None

        read_before_exec = first_exec is None or (
            first_read is not None and first_read.timestamp < first_exec.timestamp
        )

        checks: list[Check] = []
        violations = []

        checks.append(
            Check(
                name="read-before-first-exec",
                passed=read_before_exec,
                weight=50,
                evidence=[
                    self.create_evidence(
                        "ordering",
                        "Order of the first read and the first execution",
                        {
                            "first_read_ts": first_read.timestamp if first_read else None,
                            "first_exec_ts": first_exec.timestamp if first_exec else None,
                            "read_before_exec": read_before_exec,
                        },
                        timestamp=(first_exec or first_read).timestamp
                        if (first_exec or first_read)
                        else None,
                    )
                ],
            )
        )

        if not read_before_exec and first_exec is not None:
            violations.append(
                self.create_violation(
                    "execution-before-read",
                    Severity.error,
                    "A state-changing tool ran before anything was read",
                    first_exec.timestamp,
                    {"tool": first_exec.tool, "exec_timestamp": first_exec.timestamp},
                )
            )

        read_count = len(read_events)
        exec_count = len(exec_events)
        ratio = math.inf if exec_count == 0 else read_count / exec_count
        ratio_passed = exec_count == 0 or ratio >= 1

        checks.append(
            Check(
                name="read-exec-ratio",
                passed=ratio_passed,
                weight=50,
                evidence=[
                    self.create_evidence(
                        "ratio-metrics",
                        "Read/execution ratio metrics",
                        {"read_count": read_count, "exec_count": exec_count, "ratio": ratio},
                    )
                ],
            )
        )

        if not ratio_passed and first_exec is not None:
            violations.append(
                self.create_violation(
                    "insufficient-read",
                    Severity.warning,
                    f"Read/execution ratio below 1 ({ratio:.2f})",
                    first_exec.timestamp,
                    {"read_count": read_count, "exec_count": exec_count, "ratio": ratio},
                )
            )

        evidence = [
            self.create_evidence(
                "session-summary",
                "Session summary for execution balance",
                {
                    "title": session_info.title,
                    "read_count": read_count,
                    "exec_count": exec_count,
                    "ratio": ratio,
                    "has_execution": exec_count > 0,
                },
            )
        ]

        return self.build_result(
            checks,
            violations,
            evidence,
            {
                "read_count": read_count,
                "exec_count": exec_count,
                "ratio": ratio,
                "read_before_exec": read_before_exec,
            },
        )
