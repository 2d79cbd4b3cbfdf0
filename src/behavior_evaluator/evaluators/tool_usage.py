"""Tool usage rule.

Information gathering must go through read-class tools rather than the
shell: ``cat``, ``ls``, ``grep`` and friends have dedicated tools.

Violations:
- wrong-tool-category (warning): one per shell call used for reading.

Metadata keys: bash_calls, misuse_count.
"""

from __future__ import annotations

from behavior_evaluator.evaluators.base import BaseEvaluator, Timeline
from behavior_evaluator.evaluators.classification import command_heads, shell_command
from behavior_evaluator.models.enums import Severity
from behavior_evaluator.models.evaluation import Check, EvaluationResult
from behavior_evaluator.models.session import SessionInfo

__all__ = ["ToolUsageEvaluator", "READ_COMMAND_TOOLS"]

# Shell programs that duplicate a read-class tool, mapped to that tool.
READ_COMMAND_TOOLS: dict[str, str] = {
    "cat": "read",
    "head": "read",
    "tail": "read",
    "less": "read",
    "more": "read",
    "ls": "list",
    "tree": "list",
    "find": "glob",
    "grep": "grep",
    "egrep": "grep",
    "fgrep": "grep",
    "rg": "grep",
}


class ToolUsageEvaluator(BaseEvaluator):
    """Checks that reads use dedicated read tools."""

    name = "tool-usage"
    description = "Uses dedicated read tools instead of shell commands for reading"

    def evaluate(self, timeline: Timeline, session_info: SessionInfo) -> EvaluationResult:
        shell_calls = [
            (event, command)
            for event in self.get_tool_calls(timeline)
            if (command := shell_command(event)) is not None
        ]

        misuses = []
        violations = []
        for event, command in shell_calls:
            programs = [h for h in command_heads(command) if h in READ_COMMAND_TOOLS]
            if not programs:
                continue
            suggested = sorted({READ_COMMAND_TOOLS[p] for p in programs})
            misuses.append({"timestamp": event.timestamp, "command": command})
            violations.append(
                self.create_violation(
                    "wrong-tool-category",
                    Severity.warning,
                    f"Shell used for reading ({', '.join(programs)}); "
                    f"use {', '.join(suggested)} instead",
                    event.timestamp,
                    {"command": command, "programs": programs, "suggested_tools": suggested},
                )
            )

        check = Check(
            name="dedicated-read-tools",
            passed=not misuses,
            weight=100,
            evidence=[
                self.create_evidence(
                    "shell-reads",
                    "Shell commands that duplicate read tools",
                    {"misuses": misuses, "bash_calls": len(shell_calls)},
                )
            ],
        )

        return self.build_result(
            [check],
            violations,
            metadata={"bash_calls": len(shell_calls), "misuse_count": len(misuses)},
        )
