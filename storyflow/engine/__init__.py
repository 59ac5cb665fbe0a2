"""
Story playback engine: conditions, traversal, operations and connectivity
"""

from .conditions import (
    ConditionStrategy,
    ConditionStrategyFactory,
    NodeVisitStrategy,
    ProbabilityStrategy,
    VariableComparisonStrategy,
)
from .connectivity import (
    is_graph_ready_for_playback,
    validate_document,
    validate_graph_connectivity,
)
from .evaluator import ConditionEvaluator, ConditionResult, ConnectionResult, GroupResult
from .events import EngineEvent, EngineEventEmitter
from .operations import OperationsService
from .state import ExecutedOperation, GameState
from .story_engine import StoryEngine

__all__ = [
    "StoryEngine",
    "GameState",
    "ExecutedOperation",
    "ConditionEvaluator",
    "ConditionResult",
    "GroupResult",
    "ConnectionResult",
    "ConditionStrategy",
    "ConditionStrategyFactory",
    "ProbabilityStrategy",
    "VariableComparisonStrategy",
    "NodeVisitStrategy",
    "OperationsService",
    "EngineEvent",
    "EngineEventEmitter",
    "validate_graph_connectivity",
    "validate_document",
    "is_graph_ready_for_playback",
]
