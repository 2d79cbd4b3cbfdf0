"""Construction of rule sets.

default_evaluators() returns the standard behavioral rules;
build_evaluators() tailors them to a declarative test case.
"""

from __future__ import annotations

from behavior_evaluator.evaluators.approval_gate import ApprovalGateEvaluator
from behavior_evaluator.evaluators.base import BaseEvaluator
from behavior_evaluator.evaluators.behavior import BehaviorEvaluator
from behavior_evaluator.evaluators.cleanup_confirmation import CleanupConfirmationEvaluator
from behavior_evaluator.evaluators.context_loading import ContextLoadingEvaluator
from behavior_evaluator.evaluators.delegation import DelegationEvaluator
from behavior_evaluator.evaluators.execution_balance import ExecutionBalanceEvaluator
from behavior_evaluator.evaluators.report_first import ReportFirstEvaluator
from behavior_evaluator.evaluators.stop_on_failure import StopOnFailureEvaluator
from behavior_evaluator.evaluators.tool_usage import ToolUsageEvaluator
from behavior_evaluator.logging_config import get_logger
from behavior_evaluator.models.test_case import TestCase

__all__ = ["default_evaluators", "build_evaluators"]

logger = get_logger(__name__)


def default_evaluators() -> list[BaseEvaluator]:
    """Return a fresh instance of every standard rule."""
    return [
        ApprovalGateEvaluator(),
        ContextLoadingEvaluator(),
        DelegationEvaluator(),
        ToolUsageEvaluator(),
        StopOnFailureEvaluator(),
        ReportFirstEvaluator(),
        CleanupConfirmationEvaluator(),
        ExecutionBalanceEvaluator(),
    ]


def build_evaluators(test_case: TestCase) -> list[BaseEvaluator]:
    """Build the rule set for one test case.

    Context files named by the prompts become required files of the
    context-loading rule, and behavior expectations add a
    BehaviorEvaluator.

    Args:
        test_case: The test case to evaluate against.

    Returns:
        Rules in evaluation order.

    """
    context_files = test_case.context_files
    evaluators: list[BaseEvaluator] = []
    for evaluator in default_evaluators():
        if isinstance(evaluator, ContextLoadingEvaluator) and context_files:
            evaluator = ContextLoadingEvaluator(required_files=context_files)
        evaluators.append(evaluator)

    if test_case.behavior is not None:
        evaluators.append(BehaviorEvaluator(test_case.behavior, required_files=context_files))

    logger.debug(
        "evaluators_built",
        test_id=test_case.id,
        evaluators=[e.name for e in evaluators],
    )
    return evaluators
