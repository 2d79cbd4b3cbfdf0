"""Evaluator runner for executing a rule set over session timelines.

This module provides the EvaluatorRunner class, which runs every
registered rule on the same read-only timeline, isolates rule failures,
and combines per-rule results into an AggregatedResult.
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import Iterable, Sequence

from pydantic import Field, field_validator

from behavior_evaluator.collector.exceptions import CollectorError
from behavior_evaluator.collector.session_reader import SessionReader
from behavior_evaluator.collector.timeline_builder import TimelineBuilder
from behavior_evaluator.config.defaults import (
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_PASS_THRESHOLD,
    DEFAULT_RULE_WEIGHT,
    MAX_CONCURRENCY_MAX,
    MAX_CONCURRENCY_MIN,
    THRESHOLD_MAX,
    THRESHOLD_MIN,
)
from behavior_evaluator.config.settings import Settings, get_settings
from behavior_evaluator.evaluators.base import BaseEvaluator, Timeline
from behavior_evaluator.evaluators.exceptions import RuleEvaluationError
from behavior_evaluator.logging_config import get_logger, session_context
from behavior_evaluator.models.base import BaseSchema
from behavior_evaluator.models.enums import PassPolicy, Severity
from behavior_evaluator.models.evaluation import (
    AggregatedResult,
    Check,
    EvaluationResult,
    Evidence,
    Violation,
)
from behavior_evaluator.models.session import SessionInfo

__all__ = [
    "RunnerConfig",
    "SessionEvaluation",
    "EvaluatorRunner",
]

logger = get_logger(__name__)


class RunnerConfig(BaseSchema):
    """Aggregation settings of an EvaluatorRunner.

    Attributes:
        policy: How per-rule results combine into the overall verdict.
        threshold: Overall score required by the weighted policy.
        rule_weights: Per-rule weight overrides for the overall score.
        required_rules: Rules that must pass under all_pass (None means all).
        max_concurrency: Default parallelism of batch evaluation.

    """

    policy: PassPolicy = Field(
        default=PassPolicy.all_pass,
        description="Aggregation policy for the overall verdict",
    )
    threshold: float = Field(
        default=DEFAULT_PASS_THRESHOLD,
        ge=THRESHOLD_MIN,
        le=THRESHOLD_MAX,
        description="Overall score required by the weighted policy",
    )
    rule_weights: dict[str, float] = Field(
        default_factory=dict,
        description="Per-rule weight overrides; unlisted rules weigh 1.0",
    )
    required_rules: list[str] | None = Field(
        default=None,
        description="Rules that must pass under all_pass (None means all)",
    )
    max_concurrency: int = Field(
        default=DEFAULT_MAX_CONCURRENCY,
        ge=MAX_CONCURRENCY_MIN,
        le=MAX_CONCURRENCY_MAX,
        description="Sessions evaluated in parallel by batch runs",
    )

    @field_validator("rule_weights")
    @classmethod
    def _check_weights(cls, value: dict[str, float]) -> dict[str, float]:
        for rule, weight in value.items():
            if not weight > 0:
                raise ValueError(f"Weight of rule '{rule}' must be positive, got {weight}")
        return value

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> RunnerConfig:
        """Build the configuration from application settings.

        Args:
            settings: Settings to read. Defaults to get_settings().

        Returns:
            RunnerConfig carrying the runner settings.

        """
        runner = (settings or get_settings()).runner
        return cls(
            policy=runner.policy,
            threshold=runner.pass_threshold,
            max_concurrency=runner.max_concurrency,
        )


class SessionEvaluation(BaseSchema):
    """Outcome of one session in a batch evaluation.

    Attributes:
        session_id: Evaluated session.
        result: Aggregated verdict, when the session could be evaluated.
        error: Storage error that prevented evaluation.

    """

    session_id: str
    result: AggregatedResult | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Whether the session was evaluated."""
        return self.result is not None


class EvaluatorRunner:
    """Runs a rule set over timelines and aggregates the verdicts.

    Rules are kept in registration order; that order is reflected in
    AggregatedResult.results.

    Attributes:
        config: Aggregation settings.
        timeline_builder: Builder used by run_session.

    """

    def __init__(
        self,
        evaluators: Iterable[BaseEvaluator] | None = None,
        config: RunnerConfig | None = None,
        timeline_builder: TimelineBuilder | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            evaluators: Initial rules, registered in order.
            config: Aggregation settings. Defaults to the configured settings.
            timeline_builder: Builder used by run_session. Defaults to one
                reading the configured storage path.

        Raises:
            ValueError: If two initial rules share a name.

        """
        self.config = config or RunnerConfig.from_settings()
        self._timeline_builder = timeline_builder
        self._evaluators: list[BaseEvaluator] = []
        for evaluator in evaluators or ():
            self.register(evaluator)

        logger.debug(
            "evaluator_runner_initialized",
            evaluator_count=len(self._evaluators),
            policy=self.config.policy.value,
            threshold=self.config.threshold,
        )

    @property
    def evaluators(self) -> list[BaseEvaluator]:
        """Registered rules, in order (a copy)."""
        return list(self._evaluators)

    @property
    def timeline_builder(self) -> TimelineBuilder:
        """Builder used by run_session, created on first use."""
        if self._timeline_builder is None:
            storage_path = get_settings().collector.storage_path
            self._timeline_builder = TimelineBuilder(SessionReader(storage_path))
        return self._timeline_builder

    def register(self, evaluator: BaseEvaluator) -> None:
        """Register a rule.

        Args:
            evaluator: The rule to add.

        Raises:
            ValueError: If a rule with the same name is already registered.

        """
        if any(e.name == evaluator.name for e in self._evaluators):
            raise ValueError(f"Evaluator '{evaluator.name}' is already registered")
        self._evaluators.append(evaluator)
        logger.debug("evaluator_registered", evaluator=evaluator.name)

    def unregister(self, name: str) -> bool:
        """Remove a rule by name.

        Args:
            name: Name of the rule to remove.

        Returns:
            True if the rule was registered, False otherwise.

        """
        for index, evaluator in enumerate(self._evaluators):
            if evaluator.name == name:
                del self._evaluators[index]
                logger.debug("evaluator_unregistered", evaluator=name)
                return True
        return False

    def evaluate(self, timeline: Timeline, session_info: SessionInfo) -> AggregatedResult:
        """Run every registered rule on one timeline.

        Each rule sees the same immutable events. A rule that raises is
        reported as a failed result instead of aborting the run.

        Args:
            timeline: Ordered events of one session.
            session_info: Identity of the session.

        Returns:
            The aggregated verdict.

        """
        events = tuple(timeline)
        results: list[EvaluationResult] = []

        for evaluator in self._evaluators:
            try:
                result = evaluator.evaluate(events, session_info)
            except Exception as e:
                logger.error(
                    "evaluator_failed",
                    evaluator=evaluator.name,
                    session_id=session_info.id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                result = self._error_result(evaluator, e, events)
            else:
                logger.debug(
                    "evaluator_completed",
                    evaluator=evaluator.name,
                    session_id=session_info.id,
                    passed=result.passed,
                    score=result.score,
                    violation_count=len(result.violations),
                )
            results.append(result)

        overall_score = self._overall_score(results)
        overall_passed = self._overall_passed(results, overall_score)

        aggregated = AggregatedResult(
            session_id=session_info.id,
            session_title=session_info.title,
            results=results,
            overall_passed=overall_passed,
            overall_score=overall_score,
            policy=self.config.policy,
            threshold=self.config.threshold,
        )

        logger.info(
            "session_evaluated",
            session_id=session_info.id,
            event_count=len(events),
            evaluator_count=len(results),
            overall_passed=overall_passed,
            overall_score=round(overall_score, 2),
            total_violations=aggregated.total_violations,
        )

        return aggregated

    def run_session(self, session_id: str) -> AggregatedResult:
        """Build a session's timeline from storage and evaluate it.

        Args:
            session_id: Session identifier.

        Returns:
            The aggregated verdict.

        Raises:
            SessionNotFoundError: If the session is absent from storage.

        """
        builder = self.timeline_builder
        with session_context(session_id):
            session_info = builder.reader.get_session_info(session_id)
            timeline = builder.build_timeline(session_id)
            return self.evaluate(timeline, session_info)

    def run_tree(self, session_id: str) -> dict[str, AggregatedResult]:
        """Evaluate a session and each delegated child session separately.

        Args:
            session_id: Root session identifier.

        Returns:
            Verdicts keyed by session id, root first, then depth-first.

        Raises:
            SessionNotFoundError: If the root session is absent from storage.

        """
        tree = self.timeline_builder.build_tree(session_id)
        return {node.session.id: self.evaluate(node.events, node.session) for node in tree.walk()}

    async def evaluate_sessions(
        self,
        session_ids: Sequence[str],
        max_concurrency: int | None = None,
    ) -> list[SessionEvaluation]:
        """Evaluate many sessions in parallel worker threads.

        A storage error for one session is reported in its entry and does
        not fail the batch.

        Args:
            session_ids: Sessions to evaluate.
            max_concurrency: Sessions evaluated at once. Defaults to the
                configured value.

        Returns:
            One entry per session, in input order.

        """
        limit = max_concurrency or self.config.max_concurrency
        semaphore = asyncio.Semaphore(limit)

        logger.info("batch_evaluation_started", session_count=len(session_ids), max_concurrency=limit)

        async def run_one(session_id: str) -> SessionEvaluation:
            async with semaphore:
                try:
                    result = await asyncio.to_thread(self.run_session, session_id)
                except CollectorError as e:
                    logger.warning("session_evaluation_failed", session_id=session_id, error=str(e))
                    return SessionEvaluation(session_id=session_id, error=str(e))
                return SessionEvaluation(session_id=session_id, result=result)

        evaluations = await asyncio.gather(*(run_one(sid) for sid in session_ids))

        logger.info(
            "batch_evaluation_completed",
            session_count=len(evaluations),
            failed_count=len([e for e in evaluations if not e.ok]),
            passed_count=len([e for e in evaluations if e.ok and e.result.overall_passed]),
        )

        return list(evaluations)

    def _overall_score(self, results: list[EvaluationResult]) -> float:
        if not results:
            return 0.0
        weights = [self.config.rule_weights.get(r.evaluator, DEFAULT_RULE_WEIGHT) for r in results]
        total = math.fsum(weights)
        score = math.fsum(r.score * w for r, w in zip(results, weights)) / total
        return min(100.0, max(0.0, score))

    def _overall_passed(self, results: list[EvaluationResult], overall_score: float) -> bool:
        if not results:
            return False
        if self.config.policy == PassPolicy.weighted_threshold:
            return overall_score >= self.config.threshold

        required = self.config.required_rules
        return all(r.passed for r in results if required is None or r.evaluator in required)

    @staticmethod
    def _error_result(
        evaluator: BaseEvaluator,
        error: Exception,
        events: tuple,
    ) -> EvaluationResult:
        failure = RuleEvaluationError(evaluator.name, str(error) or type(error).__name__)
        timestamp = max((e.timestamp for e in events), default=0)
        return EvaluationResult(
            evaluator=evaluator.name,
            passed=False,
            score=0.0,
            checks=[
                Check(
                    name="evaluator-execution",
                    passed=False,
                    weight=1.0,
                    evidence=[
                        Evidence(
                            type="error",
                            description=failure.message,
                            data={"error_type": type(error).__name__},
                        )
                    ],
                )
            ],
            violations=[
                Violation(
                    code="evaluator-error",
                    severity=Severity.error,
                    message=str(failure),
                    timestamp=timestamp,
                    data={"error_type": type(error).__name__},
                )
            ],
        )
