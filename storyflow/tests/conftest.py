"""
Shared fixtures for storyflow tests.
"""

from typing import Any, Dict, List, Optional

import pytest

from storyflow.engine import GameState, StoryEngine
from storyflow.schemas import StoryDocument, Variable


class ScriptedRandom:
    """Random source stand-in returning scripted values.

    ``choices`` feed ``next(max)`` (taken modulo max, 0 when exhausted) and
    ``draws`` feed ``random()`` (0.0 when exhausted).
    """

    def __init__(self, choices: Optional[List[int]] = None, draws: Optional[List[float]] = None):
        self.choices = list(choices or [])
        self.draws = list(draws or [])
        self.next_calls: List[int] = []

    def next(self, max: int) -> int:
        self.next_calls.append(max)
        value = self.choices.pop(0) if self.choices else 0
        return value % max

    def random(self) -> float:
        return self.draws.pop(0) if self.draws else 0.0


class GraphBuilder:
    """Small helpers producing camelCase document fragments"""

    @staticmethod
    def narrative(node_id: str, text: Optional[str] = None, title: Optional[str] = None,
                  operations: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        node: Dict[str, Any] = {
            "id": node_id,
            "type": "narrative",
            "data": {"title": title, "text": text if text is not None else f"Text of {node_id}"},
        }
        if operations:
            node["operations"] = operations
        return node

    @staticmethod
    def choice(node_id: str, text: Optional[str] = None) -> Dict[str, Any]:
        return {
            "id": node_id,
            "type": "choice",
            "data": {"text": text if text is not None else f"Choose {node_id}"},
        }

    @staticmethod
    def edge(source: str, target: str, conditions: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        return {
            "id": f"{source}->{target}",
            "source": source,
            "target": target,
            "conditions": conditions or [],
        }

    @staticmethod
    def document(nodes, edges, variables=None, layers=None) -> StoryDocument:
        return StoryDocument(
            **{
                "id": "story",
                "nodes": nodes,
                "edges": edges,
                "variables": variables or [],
                "layers": layers or [],
            }
        )


@pytest.fixture
def graph() -> GraphBuilder:
    return GraphBuilder()


@pytest.fixture
def branching_document_data(graph) -> Dict[str, Any]:
    """start -> node_1 -> node_2 -> {choice_a -> node_2a -> node_3 -> final_1,
    choice_b -> node_2b -> {choice_b_a -> final_2, choice_b_b -> final_3}}"""

    nodes = [
        graph.narrative("start", "You wake up in a dark room.", title="Start"),
        graph.narrative("node_1", "A door creaks open."),
        graph.narrative("node_2", "Two corridors lie ahead."),
        graph.choice("choice_a", "Take the left corridor"),
        graph.choice("choice_b", "Take the right corridor"),
        graph.narrative("node_2a", "The left corridor is quiet."),
        graph.narrative("node_3", "You find a staircase."),
        graph.narrative("final_1", "You escape into the daylight."),
        graph.narrative("node_2b", "The right corridor splits again."),
        graph.choice("choice_b_a", "Climb the ladder"),
        graph.choice("choice_b_b", "Jump down the shaft"),
        graph.narrative("final_2", "The ladder leads to the roof."),
        graph.narrative("final_3", "You land in the cellar."),
    ]
    edges = [
        graph.edge("start", "node_1"),
        graph.edge("node_1", "node_2"),
        graph.edge("node_2", "choice_a"),
        graph.edge("node_2", "choice_b"),
        graph.edge("choice_a", "node_2a"),
        graph.edge("node_2a", "node_3"),
        graph.edge("node_3", "final_1"),
        graph.edge("choice_b", "node_2b"),
        graph.edge("node_2b", "choice_b_a"),
        graph.edge("node_2b", "choice_b_b"),
        graph.edge("choice_b_a", "final_2"),
        graph.edge("choice_b_b", "final_3"),
    ]
    return {
        "id": "corridors",
        "name": "Corridors",
        "nodes": nodes,
        "edges": edges,
        "variables": [{"id": "gold", "name": "Gold", "type": "integer", "value": 0}],
    }


@pytest.fixture
def branching_document(branching_document_data) -> StoryDocument:
    return StoryDocument(**branching_document_data)


@pytest.fixture
def scripted_random() -> ScriptedRandom:
    return ScriptedRandom()


@pytest.fixture
def engine(branching_document, scripted_random) -> StoryEngine:
    story_engine = StoryEngine(random_source=scripted_random)
    story_engine.initialize(branching_document)
    return story_engine


@pytest.fixture
def game_state() -> GameState:
    """State with one variable of each type and a visited node"""

    variables = [
        Variable(id="health", name="Health", type="integer", value=50),
        Variable(id="max_health", name="Max health", type="integer", value=100),
        Variable(id="luck", name="Luck", type="percent", value=0.75),
        Variable(id="speed", name="Speed", type="float", value=1.5),
        Variable(id="brave", name="Brave", type="boolean", value=True),
        Variable(id="hero", name="Hero", type="string", value="Ann"),
    ]
    return GameState(
        variables={variable.id: variable for variable in variables},
        visited_nodes={"seen"},
        history=["seen"],
    )
