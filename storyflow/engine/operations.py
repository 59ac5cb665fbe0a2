"""
Variable operations attached to narrative nodes

Operations run in declaration order when a narrative node is visited. Each
applied operation is journaled with the value it replaced so that stepping
back past the node restores the variables exactly.
"""

import math
from typing import Optional

from ..schemas.story import Node, OperationTarget, ScalarValue, VariableOperation, describe_value
from ..utils.logger import get_logger
from .events import EngineEventEmitter, OperationExecutedEvent, OperationsRolledBackEvent
from .state import ExecutedOperation, GameState

logger = get_logger(__name__)

NUMERIC_OPERATIONS = {"addition", "subtract", "multiply", "divide"}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class OperationsService:
    """Applies and rolls back node operations on a game state"""

    def __init__(self, events: Optional[EngineEventEmitter] = None):
        self.events = events

    def execute_operations(
        self, node: Node, state: GameState, history_index: int = -1
    ) -> int:
        """Run the enabled operations of a narrative node; returns how many ran"""

        if not node.is_narrative or not node.operations:
            return 0

        executed = 0
        for operation in node.operations:
            if not operation.enabled:
                continue

            variable = state.variables.get(operation.variable_id)
            if variable is None:
                logger.warning(
                    f"Node {node.id} operation targets unknown variable {operation.variable_id}"
                )
                continue

            previous_value = variable.value
            target_value = self._get_target_value(operation.target, state)
            result_value = self.apply_operation(
                operation, previous_value, target_value, variable.type
            )

            variable.value = result_value
            state.executed_operations.append(
                ExecutedOperation(
                    node_id=node.id,
                    variable_id=operation.variable_id,
                    operation_type=operation.operation_type,
                    previous_value=previous_value,
                    result_value=result_value,
                    history_index=history_index,
                )
            )
            executed += 1

            logger.debug(
                f"{node.id}: {operation.operation_type} {operation.variable_id} "
                f"{describe_value(previous_value)} -> {describe_value(result_value)}"
            )
            if self.events:
                self.events.emit(
                    OperationExecutedEvent(
                        node_id=node.id,
                        variable_id=operation.variable_id,
                        operation_type=operation.operation_type,
                        previous_value=previous_value,
                        result_value=result_value,
                    )
                )

        return executed

    def rollback_node_operations(
        self, node_id: str, state: GameState, history_index: Optional[int] = None
    ) -> int:
        """Undo the journaled operations of a node, newest first.

        With a history index only the operations of that visit are undone.
        """

        def matches(entry: ExecutedOperation) -> bool:
            if entry.node_id != node_id:
                return False
            return history_index is None or entry.history_index == history_index

        node_operations = [op for op in state.executed_operations if matches(op)]
        if not node_operations:
            return 0

        for entry in reversed(node_operations):
            variable = state.variables.get(entry.variable_id)
            if variable is None:
                logger.warning(
                    f"Cannot roll back {entry.operation_type}: variable {entry.variable_id} not found"
                )
                continue
            variable.value = entry.previous_value

        state.executed_operations = [
            op for op in state.executed_operations if not matches(op)
        ]

        logger.debug(f"Rolled back {len(node_operations)} operation(s) of {node_id}")
        if self.events:
            self.events.emit(
                OperationsRolledBackEvent(node_id=node_id, count=len(node_operations))
            )
        return len(node_operations)

    def apply_operation(
        self,
        operation: VariableOperation,
        current: Optional[ScalarValue],
        target: Optional[ScalarValue],
        variable_type: str,
    ) -> Optional[ScalarValue]:
        """Compute the new value of a variable for one operation"""

        op_type = operation.operation_type

        if op_type == "override":
            return target if target is not None else current

        if op_type in NUMERIC_OPERATIONS:
            try:
                left = float(current)  # type: ignore[arg-type]
                right = float(target)  # type: ignore[arg-type]
            except (TypeError, ValueError):
                logger.warning(
                    f"Operation {op_type} on {operation.variable_id} needs numbers, "
                    f"got {describe_value(current)} and {describe_value(target)}"
                )
                return current

            if op_type == "addition":
                result = left + right
            elif op_type == "subtract":
                result = left - right
            elif op_type == "multiply":
                result = left * right
            else:
                if right == 0:
                    return current
                result = left / right

            if variable_type == "integer":
                return _round_half_up(result)
            return result

        if op_type == "invert":
            if variable_type == "boolean" and isinstance(current, bool):
                return not current
            logger.warning(f"Operation invert on non-boolean variable {operation.variable_id}")
            return current

        if op_type == "join":
            if variable_type == "string":
                suffix = "" if target is None else str(target)
                return f"{'' if current is None else current}{suffix}"
            logger.warning(f"Operation join on non-string variable {operation.variable_id}")
            return current

        return current

    def _get_target_value(
        self, target: Optional[OperationTarget], state: GameState
    ) -> Optional[ScalarValue]:
        if target is None:
            return None
        if target.type == "variable":
            return state.get_value(target.variable_id)
        return target.value
