"""
Condition strategies, one per condition kind, and the factory that hands
them out.

Strategies are pure predicates over the game state. A condition that points
at a missing variable or node evaluates to False instead of raising, so one
malformed condition cannot stop playback.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from ..errors import UnknownConditionTypeError
from ..schemas.story import (
    NodeVisitCondition,
    ProbabilityCondition,
    VariableComparisonCondition,
)
from ..utils.jsonlogic import COMPARISON_OPERATORS, JSONLogicEvaluator
from ..utils.logger import get_logger
from ..utils.random_source import RandomSource, default_random_source
from .state import GameState

logger = get_logger(__name__)


class ConditionStrategy(ABC):
    """Abstract base class for condition strategies."""

    @abstractmethod
    def evaluate(self, condition, game_state: GameState) -> bool:
        """Return whether the condition currently holds."""
        pass


class ProbabilityStrategy(ConditionStrategy):
    """Fires when a uniform draw falls below the condition's probability."""

    def __init__(self, random_source: RandomSource):
        self.random_source = random_source

    def evaluate(self, condition, game_state: GameState) -> bool:
        if not isinstance(condition, ProbabilityCondition):
            return False

        probability = condition.probability or 0.0
        draw = self.random_source.random()
        return draw < probability


class VariableComparisonStrategy(ConditionStrategy):
    """
    Compares a variable with another variable or a literal value.

    A literal flagged as a percent number (75 meaning 75%) is scaled to a
    fraction when the left variable is a percent variable, since percent
    variables store fractions.
    """

    def __init__(self, logic: Optional[JSONLogicEvaluator] = None):
        self.logic = logic or JSONLogicEvaluator()

    def evaluate(self, condition, game_state: GameState) -> bool:
        if not isinstance(condition, VariableComparisonCondition):
            return False

        left_variable = game_state.variables.get(condition.var_id or "")
        if left_variable is None:
            return False

        if condition.val_type == "variable":
            right_variable = game_state.variables.get(condition.comparison_var_id or "")
            if right_variable is None:
                return False
            right = right_variable.value
        else:
            right = condition.value
            if (
                condition.percent_type
                and left_variable.type == "percent"
                and isinstance(right, (int, float))
                and not isinstance(right, bool)
            ):
                right = right / 100

        operator = condition.operator or "eq"
        if operator not in COMPARISON_OPERATORS:
            logger.warning(f"Unknown comparison operator {operator!r}")
            return False

        try:
            return self.logic.compare(operator, left_variable.value, right)
        except ValueError as e:
            logger.warning(f"Comparison of {condition.var_id} failed: {e}")
            return False


class NodeVisitStrategy(ConditionStrategy):
    """Handles both node_happened and node_not_happened."""

    def evaluate(self, condition, game_state: GameState) -> bool:
        if not isinstance(condition, NodeVisitCondition) or not condition.node_id:
            return False

        happened = condition.node_id in game_state.visited_nodes
        if condition.type == "node_not_happened":
            return not happened
        return happened


class ConditionStrategyFactory:
    """Memoizing lookup from condition kind to its strategy instance"""

    def __init__(self, random_source: Optional[RandomSource] = None):
        self.random_source = random_source or default_random_source()
        self._strategies: Dict[str, ConditionStrategy] = {}
        self._builders: Dict[str, Callable[[], ConditionStrategy]] = {
            "probability": lambda: ProbabilityStrategy(self.random_source),
            "variable_comparison": VariableComparisonStrategy,
            "node_happened": NodeVisitStrategy,
        }
        # Both visit kinds are answered by one instance
        self._shared_keys = {"node_not_happened": "node_happened"}

    def get_strategy(self, condition_type: str) -> ConditionStrategy:
        """Return the strategy for a condition kind, building it on first use"""

        key = self._shared_keys.get(condition_type, condition_type)
        strategy = self._strategies.get(key)
        if strategy is not None:
            return strategy

        builder = self._builders.get(key)
        if builder is None:
            raise UnknownConditionTypeError(condition_type)

        strategy = builder()
        self._strategies[key] = strategy
        return strategy
