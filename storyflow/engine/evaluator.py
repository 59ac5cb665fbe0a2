"""
Condition evaluator: combines strategies into group and edge decisions
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..schemas.story import Condition, ConditionGroup
from ..utils.logger import get_logger
from ..utils.random_source import RandomSource
from .conditions import ConditionStrategyFactory
from .state import GameState

logger = get_logger(__name__)


@dataclass
class ConditionResult:
    """Outcome of one evaluated condition"""

    condition: Condition
    result: bool


@dataclass
class GroupResult:
    """Outcome of one condition group, with the conditions it evaluated"""

    group: ConditionGroup
    passed: bool
    condition_results: List[ConditionResult] = field(default_factory=list)


@dataclass
class ConnectionResult:
    """Outcome of an edge's condition groups"""

    passed: bool
    group_results: List[GroupResult] = field(default_factory=list)


class ConditionEvaluator:
    """
    Decides whether conditions, condition groups and whole edges are open.

    Group semantics: AND needs every condition, OR needs one; both stop at
    the first condition that settles the result. An empty AND group is true
    and an empty OR group is false.

    Edge semantics: no groups means no restriction. Otherwise the groups form
    a disjunction, each group being one independent reason for the edge to
    be open.
    """

    def __init__(
        self,
        factory: Optional[ConditionStrategyFactory] = None,
        random_source: Optional[RandomSource] = None,
    ):
        self.factory = factory or ConditionStrategyFactory(random_source)

    def evaluate_condition(self, condition: Condition, state: GameState) -> bool:
        strategy = self.factory.get_strategy(condition.type)
        return strategy.evaluate(condition, state)

    def evaluate_condition_group(self, group: ConditionGroup, state: GameState) -> bool:
        return self._evaluate_group(group, state).passed

    def evaluate_connection_conditions(
        self, groups: Optional[Sequence[ConditionGroup]], state: GameState
    ) -> bool:
        return self.explain_connection_conditions(groups, state).passed

    def explain_connection_conditions(
        self, groups: Optional[Sequence[ConditionGroup]], state: GameState
    ) -> ConnectionResult:
        """Evaluate an edge's groups and keep the per-condition trace"""

        if not groups:
            return ConnectionResult(passed=True)

        group_results: List[GroupResult] = []
        for group in groups:
            group_result = self._evaluate_group(group, state)
            group_results.append(group_result)
            if group_result.passed:
                return ConnectionResult(passed=True, group_results=group_results)

        return ConnectionResult(passed=False, group_results=group_results)

    def _evaluate_group(self, group: ConditionGroup, state: GameState) -> GroupResult:
        condition_results: List[ConditionResult] = []
        # AND stops at the first False, OR at the first True
        stop_on = group.operator == "OR"
        passed = not stop_on

        for condition in group.conditions:
            result = self.evaluate_condition(condition, state)
            condition_results.append(ConditionResult(condition=condition, result=result))
            if result == stop_on:
                passed = stop_on
                break

        logger.debug(
            f"Condition group {group.id or '<unnamed>'} ({group.operator}) -> {passed}"
        )
        return GroupResult(group=group, passed=passed, condition_results=condition_results)
