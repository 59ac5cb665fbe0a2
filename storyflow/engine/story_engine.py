"""
Story traversal engine

Walks a story document: finds the entry point, follows open edges, resolves
player choices, steps back and restarts. One engine instance owns the game
state of exactly one playback session; sessions never share an engine.

A dead end is not an error or a separate state, navigation calls simply
return None and leave the state untouched.
"""

from typing import Dict, List, Optional, Tuple

from ..schemas.story import Edge, Node, ScalarValue, StoryDocument, describe_value
from ..utils.logger import get_logger
from ..utils.random_source import RandomSource, default_random_source
from .evaluator import ConditionEvaluator, ConnectionResult
from .events import (
    ChoiceSelectedEvent,
    ConditionGroupEvaluatedEvent,
    EngineEventEmitter,
    NavigationBackEvent,
    NodeVisitedEvent,
    StoryRestartedEvent,
)
from .operations import OperationsService
from .state import GameState

logger = get_logger(__name__)

OpenEdge = Tuple[Edge, ConnectionResult]


class StoryEngine:
    """
    Interpreter over a story graph.

    Randomness (tie-breaks between several open edges and probability
    conditions) comes from a single injected RandomSource, so a scripted
    source makes a whole session deterministic.
    """

    def __init__(
        self,
        evaluator: Optional[ConditionEvaluator] = None,
        random_source: Optional[RandomSource] = None,
        events: Optional[EngineEventEmitter] = None,
    ):
        self.random_source = random_source or default_random_source()
        self.evaluator = evaluator or ConditionEvaluator(random_source=self.random_source)
        self.events = events or EngineEventEmitter()
        self.operations = OperationsService(self.events)

        self.document: Optional[StoryDocument] = None
        self.state = GameState()
        self._nodes: Dict[str, Node] = {}
        self._outgoing: Dict[str, List[Edge]] = {}
        self._start_node_ids: List[str] = []

    @property
    def is_initialized(self) -> bool:
        return self.document is not None

    def initialize(self, document: StoryDocument) -> None:
        """Load a document and reset the session state"""

        self.document = document
        self._nodes = {node.id: node for node in document.all_nodes()}
        self._outgoing = {}
        targets = set()
        for edge in document.all_edges():
            self._outgoing.setdefault(edge.source, []).append(edge)
            targets.add(edge.target)

        self._start_node_ids = [
            node_id for node_id in self._nodes if node_id not in targets
        ]
        if len(self._start_node_ids) > 1:
            logger.warning(
                f"Story has {len(self._start_node_ids)} start nodes, "
                f"playback begins at {self._start_node_ids[0]}"
            )
        elif not self._start_node_ids and self._nodes:
            logger.warning("Story has no start node; every node has an incoming edge")

        self.state = GameState(variables=document.initial_variables())
        logger.info(
            f"Engine initialized with {len(self._nodes)} nodes and "
            f"{len(document.variables)} variables"
        )

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def get_start_node(self) -> Optional[Node]:
        """The node without incoming edges; does not touch the state"""

        if not self._start_node_ids:
            return None
        return self._nodes[self._start_node_ids[0]]

    def get_current_node(self) -> Optional[Node]:
        """Last node of the history, or the start node before the first visit"""

        if self.state.history:
            return self._nodes.get(self.state.history[-1])
        return self.get_start_node()

    def visit_node(self, node_id: str) -> Optional[Node]:
        """
        Record a node into the history and the visited set.

        Kept apart from get_start_node so a preview can show a node before
        the player commits to it. Narrative nodes run their operations.
        """

        node = self._nodes.get(node_id)
        if node is None:
            logger.warning(f"Cannot visit unknown node {node_id}")
            return None

        self.operations.execute_operations(
            node, self.state, history_index=len(self.state.history)
        )
        self.state.history.append(node_id)
        self.state.visited_nodes.add(node_id)

        logger.debug(f"Visited {node_id} (history length {len(self.state.history)})")
        self.events.emit(
            NodeVisitedEvent(
                node_id=node.id,
                node_name=node.data.title or node.data.text or node.id,
                node_type=node.type,
            )
        )
        return node

    def move_forward(
        self, from_node_id: str, user_initiated: bool = True
    ) -> Optional[Node]:
        """
        Follow an open edge from a node to a non-choice node.

        Choice targets are skipped, choices go through execute_choice. With
        several open edges one is picked at random. An automatic advance
        (user_initiated=False) holds on the first recorded node so the
        opening beat is shown before playback continues.
        """

        if not self.is_initialized:
            return None

        if not user_initiated and self.state.history == [from_node_id]:
            return self._nodes.get(from_node_id)

        candidates = [
            (edge, trace)
            for edge, trace in self._open_edges(from_node_id)
            if not self._nodes[edge.target].is_choice
        ]
        if not candidates:
            logger.debug(f"Dead end at {from_node_id}")
            return None

        if len(candidates) == 1:
            edge, trace = candidates[0]
        else:
            edge, trace = candidates[self.random_source.next(len(candidates))]
            logger.debug(
                f"Picked {edge.target} out of {len(candidates)} open edges from {from_node_id}"
            )

        self._emit_condition_trace(from_node_id, edge, trace)
        return self.visit_node(edge.target)

    def get_available_choices(self, node_id: str) -> List[Node]:
        """Choice nodes reachable from a node through open edges, in edge order"""

        if not self.is_initialized:
            return []

        choices: List[Node] = []
        for edge, _ in self._open_edges(node_id):
            target = self._nodes[edge.target]
            if target.is_choice and target not in choices:
                choices.append(target)
        return choices

    def execute_choice(self, choice_id: str) -> Optional[Node]:
        """Mark a choice as visited and move on to the node it leads to"""

        choice = self._nodes.get(choice_id)
        if choice is None or not choice.is_choice:
            logger.warning(f"{choice_id} is not a choice node")
            return None

        self.state.visited_nodes.add(choice_id)
        self.events.emit(
            ChoiceSelectedEvent(
                node_id=self.state.history[-1] if self.state.history else None,
                choice_id=choice_id,
                choice_text=choice.data.text or choice.data.title or choice_id,
            )
        )
        return self.move_forward(choice_id)

    def go_back(self) -> Optional[Node]:
        """
        Step back one node. The start node is a floor: with a single entry in
        the history nothing happens and None is returned.

        Visited marks are kept, so conditions can still see branches the
        player explored before backtracking. Operations of the node left
        behind are undone.
        """

        if not self.is_initialized or len(self.state.history) <= 1:
            return None

        removed_id = self.state.history.pop()
        self.operations.rollback_node_operations(
            removed_id, self.state, history_index=len(self.state.history)
        )

        previous_id = self.state.history[-1]
        logger.debug(f"Back from {removed_id} to {previous_id}")
        self.events.emit(NavigationBackEvent(from_node_id=removed_id, to_node_id=previous_id))
        return self._nodes.get(previous_id)

    def restart(self) -> Optional[Node]:
        """Start a fresh run: empty history, no visits, initial variable values"""

        variables = self.document.initial_variables() if self.document else {}
        self.state = GameState(variables=variables)

        start_node = self.get_start_node()
        logger.info(f"Story restarted at {start_node.id if start_node else None}")
        self.events.emit(StoryRestartedEvent(start_node_id=start_node.id if start_node else None))
        return start_node

    def get_state(self) -> GameState:
        """Snapshot of the current game state"""
        return self.state.snapshot()

    def set_variable(self, variable_id: str, value: ScalarValue) -> None:
        """Set a variable by hand; going back does not undo this"""

        variable = self.state.variables.get(variable_id)
        if variable is None:
            logger.warning(f"Variable {variable_id} not found")
            return

        logger.debug(
            f"{variable_id} set manually: {describe_value(variable.value)} -> {describe_value(value)}"
        )
        variable.value = value

    def _open_edges(self, node_id: str) -> List[OpenEdge]:
        open_edges: List[OpenEdge] = []
        for edge in self._outgoing.get(node_id, []):
            if edge.target not in self._nodes:
                continue
            trace = self.evaluator.explain_connection_conditions(edge.conditions, self.state)
            if trace.passed:
                open_edges.append((edge, trace))
        return open_edges

    def _emit_condition_trace(self, node_id: str, edge: Edge, trace: ConnectionResult) -> None:
        for group_result in trace.group_results:
            self.events.emit(
                ConditionGroupEvaluatedEvent(
                    node_id=node_id,
                    edge_id=edge.id,
                    group_id=group_result.group.id,
                    group_operator=group_result.group.operator,
                    group_result=group_result.passed,
                    condition_results=[r.result for r in group_result.condition_results],
                )
            )
