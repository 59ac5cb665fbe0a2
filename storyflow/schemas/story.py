"""
Story document schema definitions

A story document is the declarative graph the engine plays: narrative and
choice nodes, edges gated by condition groups, and the variables the
conditions read. JSON documents use the authoring tool's camelCase keys,
which are mapped onto snake_case fields through aliases.
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, validator
from typing_extensions import Annotated

ScalarValue = Union[bool, int, float, str]

NodeType = Literal["narrative", "choice"]
VariableType = Literal["integer", "float", "boolean", "string", "percent"]
OperationType = Literal[
    "override", "addition", "subtract", "multiply", "divide", "invert", "join"
]


class StoryModel(BaseModel):
    """Base model accepting both aliases and field names on input"""

    class Config:
        populate_by_name = True


class ProbabilityCondition(StoryModel):
    """Fires with the given probability each time it is evaluated"""

    id: Optional[str] = Field(None, description="Condition identifier")
    type: Literal["probability"] = "probability"
    probability: Optional[float] = Field(
        None, description="Chance in [0, 1]; a missing value never fires"
    )


class VariableComparisonCondition(StoryModel):
    """Compares a variable with another variable or with a literal"""

    id: Optional[str] = Field(None, description="Condition identifier")
    type: Literal["variable_comparison"] = "variable_comparison"
    var_id: Optional[str] = Field(None, alias="varId")
    operator: Optional[str] = Field(
        "eq", description="One of eq, neq, gt, gte, lt, lte"
    )
    val_type: Literal["variable", "custom"] = Field("custom", alias="valType")
    value: Optional[ScalarValue] = Field(None, description="Literal right operand")
    percent_type: bool = Field(
        False,
        alias="percentType",
        description="Literal is a plain percent number (75 means 0.75)",
    )
    comparison_var_id: Optional[str] = Field(None, alias="comparisonVarId")


class NodeVisitCondition(StoryModel):
    """Checks whether a node has (or has not) been visited"""

    id: Optional[str] = Field(None, description="Condition identifier")
    type: Literal["node_happened", "node_not_happened"]
    node_id: Optional[str] = Field(None, alias="nodeId")


Condition = Annotated[
    Union[ProbabilityCondition, VariableComparisonCondition, NodeVisitCondition],
    Field(discriminator="type"),
]


class ConditionGroup(StoryModel):
    """AND/OR-combined list of conditions"""

    id: Optional[str] = Field(None, description="Group identifier")
    operator: Literal["AND", "OR"] = Field("AND", description="Boolean operator")
    conditions: List[Condition] = Field(default_factory=list)

    @validator("operator", pre=True)
    def normalize_operator(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v


class Variable(StoryModel):
    """Story variable with its declared type and current value"""

    id: str = Field(..., description="Unique variable identifier")
    name: str = Field("", description="Display name")
    type: VariableType = Field("integer", description="Declared type")
    value: Optional[ScalarValue] = Field(None, description="Current value")


class OperationTarget(StoryModel):
    """Right-hand side of a variable operation"""

    type: Literal["variable", "custom"] = "custom"
    variable_id: Optional[str] = Field(None, alias="variableId")
    value: Optional[ScalarValue] = None


class VariableOperation(StoryModel):
    """Variable mutation applied when a narrative node is visited"""

    id: Optional[str] = Field(None, description="Operation identifier")
    variable_id: str = Field(..., alias="variableId")
    operation_type: OperationType = Field(..., alias="operationType")
    target: Optional[OperationTarget] = None
    enabled: bool = True


class NodeData(StoryModel):
    """Display payload of a node; logic only reads it for previews"""

    title: Optional[str] = None
    text: Optional[str] = None

    class Config:
        populate_by_name = True
        extra = "allow"


class Node(StoryModel):
    """Graph vertex: a narrative beat or a player choice"""

    id: str = Field(..., description="Unique node identifier")
    type: NodeType = Field(..., description="Node kind")
    data: NodeData = Field(default_factory=NodeData)
    operations: List[VariableOperation] = Field(
        default_factory=list, description="Operations run when the node is visited"
    )

    @property
    def is_choice(self) -> bool:
        return self.type == "choice"

    @property
    def is_narrative(self) -> bool:
        return self.type == "narrative"


class Edge(StoryModel):
    """Directed transition between two nodes"""

    id: str = Field(..., description="Unique edge identifier")
    source: str = Field(..., description="Source node id")
    target: str = Field(..., description="Target node id")
    conditions: List[ConditionGroup] = Field(
        default_factory=list,
        description="Condition groups; the edge is open if any group holds",
    )


class Layer(StoryModel):
    """Named group of nodes and edges edited together"""

    id: str = Field(..., description="Layer identifier")
    name: str = Field("", description="Layer display name")
    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)


class StoryDocument(StoryModel):
    """Complete story document consumed by the engine and the validator"""

    id: Optional[str] = Field(None, description="Story identifier")
    name: Optional[str] = Field(None, description="Story name")
    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)
    variables: List[Variable] = Field(default_factory=list)
    layers: List[Layer] = Field(
        default_factory=list, description="Optional nested layers"
    )

    def iter_layers(self, default_layer_name: str = "root") -> List[Layer]:
        """Return every layer, with top-level nodes as an implicit first layer"""

        layers: List[Layer] = []
        if self.nodes or self.edges or not self.layers:
            name = self.name or default_layer_name
            layers.append(
                Layer(id=default_layer_name, name=name, nodes=self.nodes, edges=self.edges)
            )
        layers.extend(self.layers)
        return layers

    def all_nodes(self) -> List[Node]:
        """Nodes of the playable graph, in declaration order"""

        nodes = list(self.nodes)
        for layer in self.layers:
            nodes.extend(layer.nodes)
        return nodes

    def all_edges(self) -> List[Edge]:
        """Edges of the playable graph, in declaration order"""

        edges = list(self.edges)
        for layer in self.layers:
            edges.extend(layer.edges)
        return edges

    def initial_variables(self) -> Dict[str, Variable]:
        """Fresh copies of the declared variables keyed by id"""

        return {variable.id: variable.copy(deep=True) for variable in self.variables}


def describe_value(value: Any) -> str:
    """Short printable form of a variable value for logs"""

    if isinstance(value, str):
        return repr(value)
    return str(value)
