"""
Playback events

The engine reports what happened during playback as typed events so that a
playback log or a debugging panel can follow a session without reaching
into engine internals.

Event types:
- node.visited: a node was recorded into the history
- choice.selected: the player picked a choice
- navigation.back: the player stepped back one node
- story.restarted: the session was reset
- operation.executed: a node operation changed a variable
- operations.rolledback: a node's operations were undone by going back
- condition.group.evaluated: a condition group of a followed edge was checked

Usage:
    emitter = EngineEventEmitter()
    unsubscribe = emitter.on(lambda event: print(event.type))
    ...
    unsubscribe()
"""

import time
from typing import Any, Callable, List, Literal, Optional

from pydantic import BaseModel, Field

from ..utils.logger import get_logger

logger = get_logger(__name__)


class EngineEvent(BaseModel):
    """Base class for all playback events"""

    type: str
    timestamp: float = Field(default_factory=time.time)


class NodeVisitedEvent(EngineEvent):
    type: Literal["node.visited"] = "node.visited"
    node_id: str
    node_name: str
    node_type: str


class ChoiceSelectedEvent(EngineEvent):
    type: Literal["choice.selected"] = "choice.selected"
    node_id: Optional[str] = Field(None, description="Node the choice was made at")
    choice_id: str
    choice_text: str


class NavigationBackEvent(EngineEvent):
    type: Literal["navigation.back"] = "navigation.back"
    from_node_id: str
    to_node_id: str


class StoryRestartedEvent(EngineEvent):
    type: Literal["story.restarted"] = "story.restarted"
    start_node_id: Optional[str] = None


class OperationExecutedEvent(EngineEvent):
    type: Literal["operation.executed"] = "operation.executed"
    node_id: str
    variable_id: str
    operation_type: str
    previous_value: Any = None
    result_value: Any = None


class OperationsRolledBackEvent(EngineEvent):
    type: Literal["operations.rolledback"] = "operations.rolledback"
    node_id: str
    count: int


class ConditionGroupEvaluatedEvent(EngineEvent):
    type: Literal["condition.group.evaluated"] = "condition.group.evaluated"
    node_id: str
    edge_id: str
    group_id: Optional[str] = None
    group_operator: str
    group_result: bool
    condition_results: List[bool] = Field(default_factory=list)


EventListener = Callable[[EngineEvent], None]


class EngineEventEmitter:
    """Synchronous in-process event dispatcher"""

    def __init__(self):
        self._listeners: List[EventListener] = []

    def on(self, listener: EventListener) -> Callable[[], None]:
        """Subscribe a listener; returns a function that unsubscribes it"""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            self.off(listener)

        return unsubscribe

    def off(self, listener: EventListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def clear(self) -> None:
        self._listeners = []

    def emit(self, event: EngineEvent) -> None:
        """Deliver an event to every listener in subscription order.

        A failing listener is logged and does not stop the others.
        """

        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Event listener failed while handling {event.type}")
