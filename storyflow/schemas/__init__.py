"""
Story document schemas and validation
"""

from .connectivity import ConnectivityResult, NodeInfo
from .story import (
    Condition,
    ConditionGroup,
    Edge,
    Layer,
    Node,
    NodeData,
    NodeVisitCondition,
    OperationTarget,
    ProbabilityCondition,
    StoryDocument,
    Variable,
    VariableComparisonCondition,
    VariableOperation,
)
from .validation import (
    load_story_document,
    validate_json_schema,
    validate_story_document,
)

__all__ = [
    # Document models
    "StoryDocument",
    "Layer",
    "Node",
    "NodeData",
    "Edge",
    "Variable",
    "VariableOperation",
    "OperationTarget",
    # Conditions
    "Condition",
    "ConditionGroup",
    "ProbabilityCondition",
    "VariableComparisonCondition",
    "NodeVisitCondition",
    # Connectivity results
    "ConnectivityResult",
    "NodeInfo",
    # Validation functions
    "validate_story_document",
    "load_story_document",
    "validate_json_schema",
]
