"""Free-form behavior expectations.

BehaviorEvaluator turns a test case's BehaviorExpectation into one
weighted check per configured expectation. Tool names are compared
case-insensitively.

Violations:
- missing-required-tool (error): a must-use tool was never called.
- missing-alternative-tools (error): no alternative tool set was fully used.
- forbidden-tool-used (error): a must-not-use tool was called.
- missing-approval-request (error): execution happened without a prior request.
- missing-context (error): context was not read before execution.
- missing-delegation (warning): delegation was expected but did not happen.
- unexpected-delegation (warning): delegation happened but was not expected.
- too-few-tool-calls / too-many-tool-calls (warning): call count out of range.
- bash-used-for-read (warning): the shell was used instead of a read tool.

Metadata keys: tool_call_count, expectation_count, tools_used.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from behavior_evaluator.config.defaults import DEFAULT_CONTEXT_PATTERNS, DELEGATION_TOOLS
from behavior_evaluator.evaluators.base import BaseEvaluator, Timeline
from behavior_evaluator.evaluators.classification import (
    command_heads,
    shell_command,
    tool_target,
)
from behavior_evaluator.evaluators.context_loading import ContextLoadingEvaluator
from behavior_evaluator.evaluators.tool_usage import READ_COMMAND_TOOLS
from behavior_evaluator.models.enums import Severity
from behavior_evaluator.models.evaluation import Check, EvaluationResult, Violation
from behavior_evaluator.models.session import SessionInfo
from behavior_evaluator.models.test_case import BehaviorExpectation
from behavior_evaluator.models.timeline_event import TimelineEvent

__all__ = ["BehaviorEvaluator", "EXPECTATION_WEIGHT"]

EXPECTATION_WEIGHT = 10.0

# (check name, passed, description, evidence data, violations)
_Outcome = tuple[str, bool, str, dict[str, Any], list[Violation]]


class BehaviorEvaluator(BaseEvaluator):
    """Checks a session against declarative behavior expectations.

    Attributes:
        expectation: The expectations to verify.
        context: Rule used to recognize context files.

    """

    name = "behavior"
    description = "Matches the behavior expected by the test case"

    def __init__(
        self,
        expectation: BehaviorExpectation,
        context_patterns: Iterable[str] = DEFAULT_CONTEXT_PATTERNS,
        required_files: Iterable[str] = (),
    ) -> None:
        """Initialize the evaluator.

        Args:
            expectation: The expectations to verify.
            context_patterns: Path fragments identifying context files.
            required_files: Context files named by the test case.

        """
        self.expectation = expectation
        self.context = ContextLoadingEvaluator(context_patterns, required_files)

    def evaluate(self, timeline: Timeline, session_info: SessionInfo) -> EvaluationResult:
        ordered = sorted(timeline, key=lambda e: (e.timestamp, e.sequence))
        tool_calls = self.get_tool_calls(ordered)
        used = {(e.tool or "").lower() for e in tool_calls}
        end_ts = ordered[-1].timestamp if ordered else 0
        exp = self.expectation

        checks: list[Check] = []
        violations: list[Violation] = []

        def add(
            name: str,
            passed: bool,
            description: str,
            data: dict[str, Any],
            found: list[Violation],
        ) -> None:
            checks.append(
                Check(
                    name=name,
                    passed=passed,
                    weight=EXPECTATION_WEIGHT,
                    evidence=[self.create_evidence("expectation", description, data)],
                )
            )
            violations.extend(found)

        if exp.must_use_tools:
            missing = [t for t in exp.must_use_tools if t.lower() not in used]
            add(
                "must-use-tools",
                not missing,
                "Required tools were used",
                {"required": exp.must_use_tools, "missing": missing},
                [
                    self.create_violation(
                        "missing-required-tool",
                        Severity.error,
                        f"Required tool '{tool}' was never used",
                        end_ts,
                        {"tool": tool},
                    )
                    for tool in missing
                ],
            )

        if exp.must_use_any_of:
            satisfied = [
                group
                for group in exp.must_use_any_of
                if group and all(t.lower() in used for t in group)
            ]
            found: list[Violation] = []
            if not satisfied:
                found.append(
                    self.create_violation(
                        "missing-alternative-tools",
                        Severity.error,
                        "None of the alternative tool sets was fully used",
                        end_ts,
                        {"alternatives": exp.must_use_any_of},
                    )
                )
            add(
                "must-use-any-of",
                bool(satisfied),
                "One alternative tool set was fully used",
                {"alternatives": exp.must_use_any_of, "satisfied": satisfied},
                found,
            )

        if exp.must_not_use_tools:
            forbidden = {t.lower() for t in exp.must_not_use_tools}
            offending = [e for e in tool_calls if (e.tool or "").lower() in forbidden]
            add(
                "must-not-use-tools",
                not offending,
                "Forbidden tools were not used",
                {"forbidden": exp.must_not_use_tools, "used": sorted({e.tool for e in offending})},
                [
                    self.create_violation(
                        "forbidden-tool-used",
                        Severity.error,
                        f"Forbidden tool '{e.tool}' was used",
                        e.timestamp,
                        {"tool": e.tool, "target": tool_target(e)},
                    )
                    for e in offending
                ],
            )

        if exp.requires_approval:
            add(*self._check_approval(ordered, end_ts))

        if exp.requires_context:
            add(*self._check_context(ordered, end_ts))

        if exp.should_delegate is not None:
            delegations = [e for e in tool_calls if (e.tool or "").lower() in DELEGATION_TOOLS]
            passed = bool(delegations) == exp.should_delegate
            found: list[Violation] = []
            if not passed and exp.should_delegate:
                found.append(
                    self.create_violation(
                        "missing-delegation",
                        Severity.warning,
                        "Expected delegation to a sub-agent, none happened",
                        end_ts,
                    )
                )
            elif not passed:
                found.append(
                    self.create_violation(
                        "unexpected-delegation",
                        Severity.warning,
                        "Delegated to a sub-agent although no delegation was expected",
                        delegations[0].timestamp,
                        {"delegation_count": len(delegations)},
                    )
                )
            add(
                "should-delegate",
                passed,
                "Delegation matches the expectation",
                {"expected": exp.should_delegate, "delegation_count": len(delegations)},
                found,
            )

        if exp.min_tool_calls is not None:
            passed = len(tool_calls) >= exp.min_tool_calls
            add(
                "min-tool-calls",
                passed,
                "Enough tool calls were made",
                {"minimum": exp.min_tool_calls, "actual": len(tool_calls)},
                []
                if passed
                else [
                    self.create_violation(
                        "too-few-tool-calls",
                        Severity.warning,
                        f"{len(tool_calls)} tool calls, expected at least {exp.min_tool_calls}",
                        end_ts,
                        {"minimum": exp.min_tool_calls, "actual": len(tool_calls)},
                    )
                ],
            )

        if exp.max_tool_calls is not None:
            passed = len(tool_calls) <= exp.max_tool_calls
            add(
                "max-tool-calls",
                passed,
                "Tool calls stayed within the limit",
                {"maximum": exp.max_tool_calls, "actual": len(tool_calls)},
                []
                if passed
                else [
                    self.create_violation(
                        "too-many-tool-calls",
                        Severity.warning,
                        f"{len(tool_calls)} tool calls, expected at most {exp.max_tool_calls}",
                        tool_calls[exp.max_tool_calls].timestamp,
                        {"maximum": exp.max_tool_calls, "actual": len(tool_calls)},
                    )
                ],
            )

        if exp.must_use_dedicated_tools:
            add(*self._check_dedicated_tools(tool_calls))

        expectation_count = len(checks)
        if not checks:
            checks.append(
                Check(
                    name="no-expectations",
                    passed=True,
                    weight=EXPECTATION_WEIGHT,
                    evidence=[
                        self.create_evidence(
                            "expectation", "No behavior expectations were configured"
                        )
                    ],
                )
            )

        return self.build_result(
            checks,
            violations,
            metadata={
                "tool_call_count": len(tool_calls),
                "expectation_count": expectation_count,
                "tools_used": ",".join(sorted(used)),
            },
        )

    def _check_approval(self, ordered: list[TimelineEvent], end_ts: int) -> _Outcome:
        executions = self.get_execution_tools(ordered)
        first_exec = executions[0] if executions else None
        requests = [
            e
            for e in self.get_assistant_messages(ordered)
            if self.detect_approval(e.text).requested
        ]
        first_request = requests[0] if requests else None

        passed = first_request is not None and (
            first_exec is None or first_request.timestamp < first_exec.timestamp
        )
        found: list[Violation] = []
        if not passed:
            found.append(
                self.create_violation(
                    "missing-approval-request",
                    Severity.error,
                    "No approval request preceded execution",
                    first_exec.timestamp if first_exec else end_ts,
                    {"tool": first_exec.tool if first_exec else None},
                )
            )
        return (
            "requires-approval",
            passed,
            "An approval request preceded execution",
            {
                "first_request_ts": first_request.timestamp if first_request else None,
                "first_exec_ts": first_exec.timestamp if first_exec else None,
            },
            found,
        )

    def _check_context(self, ordered: list[TimelineEvent], end_ts: int) -> _Outcome:
        executions = self.get_execution_tools(ordered)
        first_exec = executions[0] if executions else None
        context_reads = [
            e
            for e in self.get_read_tools(ordered)
            if (e.tool or "").lower() == "read"
            and (path := tool_target(e)) is not None
            and self.context.is_context_path(path)
        ]
        first_read = context_reads[0] if context_reads else None

        passed = first_read is not None and (
            first_exec is None or first_read.timestamp < first_exec.timestamp
        )
        found: list[Violation] = []
        if not passed:
            found.append(
                self.create_violation(
                    "missing-context",
                    Severity.error,
                    "Context files were not read before execution",
                    first_exec.timestamp if first_exec else end_ts,
                    {"context_reads": [tool_target(e) for e in context_reads]},
                )
            )
        return (
            "requires-context",
            passed,
            "Context files were read before execution",
            {
                "context_reads": [tool_target(e) for e in context_reads],
                "first_exec_ts": first_exec.timestamp if first_exec else None,
            },
            found,
        )

    def _check_dedicated_tools(self, tool_calls: list[TimelineEvent]) -> _Outcome:
        found: list[Violation] = []
        for event in tool_calls:
            command = shell_command(event)
            if command is None:
                continue
            programs = [h for h in command_heads(command) if h in READ_COMMAND_TOOLS]
            if programs:
                found.append(
                    self.create_violation(
                        "bash-used-for-read",
                        Severity.warning,
                        f"Shell used for reading ({', '.join(programs)})",
                        event.timestamp,
                        {"command": command, "programs": programs},
                    )
                )
        return (
            "dedicated-tools",
            not found,
            "Reads went through dedicated tools",
            {"misuse_count": len(found)},
            found,
        )
