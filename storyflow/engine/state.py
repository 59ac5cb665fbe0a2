"""
Mutable runtime state of one playback session
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from ..schemas.story import ScalarValue, Variable


@dataclass
class ExecutedOperation:
    """Journal entry of a variable operation, kept for rollback"""

    node_id: str
    variable_id: str
    operation_type: str
    previous_value: Optional[ScalarValue]
    result_value: Optional[ScalarValue]
    # Position of the visit in the history, so a revisited node only
    # rolls back its latest visit
    history_index: int = -1


@dataclass
class GameState:
    """Variables, visited nodes and walked path of one session"""

    variables: Dict[str, Variable] = field(default_factory=dict)
    visited_nodes: Set[str] = field(default_factory=set)
    history: List[str] = field(default_factory=list)
    executed_operations: List[ExecutedOperation] = field(default_factory=list)

    def get_value(self, variable_id: Optional[str]) -> Any:
        """Current value of a variable, None when it does not exist"""
        if variable_id is None or variable_id not in self.variables:
            return None
        return self.variables[variable_id].value

    def snapshot(self) -> "GameState":
        """Independent copy that later playback does not affect"""
        return GameState(
            variables={key: var.copy(deep=True) for key, var in self.variables.items()},
            visited_nodes=set(self.visited_nodes),
            history=list(self.history),
            executed_operations=list(self.executed_operations),
        )
