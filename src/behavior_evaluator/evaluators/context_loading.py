"""Context loading rule.

Context files (project standards, agent guides) must be read before the
first execution-class tool call. Sessions without executions are treated
as conversational and pass.

Violations:
- context-not-loaded (error): execution started without the context.

Metadata keys: context_reads, execution_count, conversational.
"""

from __future__ import annotations

from collections.abc import Iterable

from behavior_evaluator.config.defaults import DEFAULT_CONTEXT_PATTERNS
from behavior_evaluator.evaluators.base import BaseEvaluator, Timeline
from behavior_evaluator.evaluators.classification import tool_target
from behavior_evaluator.models.enums import Severity
from behavior_evaluator.models.evaluation import Check, EvaluationResult
from behavior_evaluator.models.session import SessionInfo

__all__ = ["ContextLoadingEvaluator"]


class ContextLoadingEvaluator(BaseEvaluator):
    """Checks that context files are loaded before acting.

    Attributes:
        context_patterns: Path fragments identifying context files.
        required_files: Files that must each be read before execution.

    """

    name = "context-loading"
    description = "Loads context files before running state-changing tools"

    def __init__(
        self,
        context_patterns: Iterable[str] = DEFAULT_CONTEXT_PATTERNS,
        required_files: Iterable[str] = (),
    ) -> None:
        """Initialize the rule.

        Args:
            context_patterns: Path fragments identifying context files.
            required_files: Files that must each be read before execution.

        """
        self.context_patterns = tuple(context_patterns)
        self.required_files = tuple(required_files)

    def is_context_path(self, path: str) -> bool:
        """Whether a file path names a context file."""
        return any(p in path for p in self.context_patterns) or any(
            path.endswith(f) for f in self.required_files
        )

    def evaluate(self, timeline: Timeline, session_info: SessionInfo) -> EvaluationResult:
        executions = self.get_execution_tools(timeline)
        first_exec = executions[0] if executions else None
        conversational = first_exec is None

        # path -> earliest read timestamp
        context_reads: dict[str, int] = {}
        for event in self.get_read_tools(timeline):
            if (event.tool or "").lower() != "read":
                continue
            path = tool_target(event)
            if path and self.is_context_path(path) and path not in context_reads:
                context_reads[path] = event.timestamp

        def first_read(suffix: str | None = None) -> int | None:
            times = [
                ts
                for path, ts in context_reads.items()
                if suffix is None or path.endswith(suffix)
            ]
            return min(times) if times else None

        missing_files = [f for f in self.required_files if first_read(f) is None]
        late_files = []
        if first_exec is not None:
            late_files = [
                f
                for f in self.required_files
                if f not in missing_files and first_read(f) >= first_exec.timestamp
            ]

        first_context_ts = first_read()
        loaded = conversational or (bool(context_reads) and not missing_files)
        loaded_in_time = conversational or (
            first_context_ts is not None
            and first_context_ts < first_exec.timestamp
            and not missing_files
            and not late_files
        )

        violations = []
        if not loaded_in_time and first_exec is not None:
            violations.append(
                self.create_violation(
                    "context-not-loaded",
                    Severity.error,
                    "Execution started before context files were loaded",
                    first_exec.timestamp,
                    {
                        "tool": first_exec.tool,
                        "context_reads": list(context_reads),
                        "missing_files": missing_files,
                        "late_files": late_files,
                    },
                )
            )

        checks = [
            Check(
                name="context-loaded",
                passed=loaded,
                weight=40,
                evidence=[
                    self.create_evidence(
                        "context-reads",
                        "Context files read during the session",
                        {
                            "files": [
                                {"path": path, "timestamp": ts}
                                for path, ts in context_reads.items()
                            ],
                            "required_files": list(self.required_files),
                            "missing_files": missing_files,
                        },
                    )
                ],
            ),
            Check(
                name="context-before-execution",
                passed=loaded_in_time,
                weight=60,
                evidence=[
                    self.create_evidence(
                        "ordering",
                        "First context read relative to the first execution",
                        {
                            "first_context_ts": first_context_ts,
                            "first_exec_ts": first_exec.timestamp if first_exec else None,
                            "late_files": late_files,
                        },
                        timestamp=first_exec.timestamp if first_exec else None,
                    )
                ],
            ),
        ]

        return self.build_result(
            checks,
            violations,
            metadata={
                "context_reads": len(context_reads),
                "execution_count": len(executions),
                "conversational": conversational,
            },
        )
