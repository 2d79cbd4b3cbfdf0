"""Behavioral rules and the runner that applies them.

This package contains:
- base: BaseEvaluator, the capability every rule implements
- classification, approval_detection, scoring: stateless helpers
- one module per rule (approval_gate, context_loading, ...)
- runner: EvaluatorRunner, aggregation of a rule set
- factory: standard and test-case specific rule sets
"""

from behavior_evaluator.evaluators.approval_gate import ApprovalGateEvaluator
from behavior_evaluator.evaluators.base import BaseEvaluator, Timeline
from behavior_evaluator.evaluators.behavior import BehaviorEvaluator
from behavior_evaluator.evaluators.cleanup_confirmation import CleanupConfirmationEvaluator
from behavior_evaluator.evaluators.context_loading import ContextLoadingEvaluator
from behavior_evaluator.evaluators.delegation import DelegationEvaluator
from behavior_evaluator.evaluators.exceptions import EvaluatorError, RuleEvaluationError
from behavior_evaluator.evaluators.execution_balance import ExecutionBalanceEvaluator
from behavior_evaluator.evaluators.factory import build_evaluators, default_evaluators
from behavior_evaluator.evaluators.report_first import ReportFirstEvaluator
from behavior_evaluator.evaluators.runner import (
    EvaluatorRunner,
    RunnerConfig,
    SessionEvaluation,
)
from behavior_evaluator.evaluators.scoring import calculate_score, is_passing
from behavior_evaluator.evaluators.stop_on_failure import StopOnFailureEvaluator
from behavior_evaluator.evaluators.tool_usage import ToolUsageEvaluator

__all__ = [
    "ApprovalGateEvaluator",
    "BaseEvaluator",
    "BehaviorEvaluator",
    "build_evaluators",
    "calculate_score",
    "CleanupConfirmationEvaluator",
    "ContextLoadingEvaluator",
    "default_evaluators",
    "DelegationEvaluator",
    "EvaluatorError",
    "EvaluatorRunner",
    "ExecutionBalanceEvaluator",
    "is_passing",
    "ReportFirstEvaluator",
    "RuleEvaluationError",
    "RunnerConfig",
    "SessionEvaluation",
    "StopOnFailureEvaluator",
    "Timeline",
    "ToolUsageEvaluator",
]
