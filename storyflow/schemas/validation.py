"""
Story document validation utilities
"""

import json
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Union

from jsonschema import ValidationError, validate

from ..errors import StoryDocumentError
from ..utils.logger import get_logger
from .story import StoryDocument

logger = get_logger(__name__)

_NODE_SCHEMA = {
    "type": "object",
    "required": ["id", "type"],
    "properties": {
        "id": {"type": "string"},
        "type": {"enum": ["narrative", "choice"]},
    },
}

_EDGE_SCHEMA = {
    "type": "object",
    "required": ["id", "source", "target"],
    "properties": {
        "id": {"type": "string"},
        "source": {"type": "string"},
        "target": {"type": "string"},
        "conditions": {"type": "array"},
    },
}

# Structural outline checked before model parsing; gives precise error paths
STORY_DOCUMENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "nodes": {"type": "array", "items": _NODE_SCHEMA},
        "edges": {"type": "array", "items": _EDGE_SCHEMA},
        "variables": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id"],
                "properties": {"id": {"type": "string"}},
            },
        },
        "layers": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id"],
                "properties": {
                    "id": {"type": "string"},
                    "nodes": {"type": "array", "items": _NODE_SCHEMA},
                    "edges": {"type": "array", "items": _EDGE_SCHEMA},
                },
            },
        },
    },
}


def validate_json_schema(data: Dict[str, Any], schema: Dict[str, Any]) -> bool:
    """Validate data against a JSON schema"""
    try:
        validate(instance=data, schema=schema)
        return True
    except ValidationError as e:
        path = "/".join(str(part) for part in e.absolute_path) or "<root>"
        raise StoryDocumentError(f"JSON schema validation failed at {path}: {e.message}")


def validate_story_document(document_data: Dict[str, Any]) -> StoryDocument:
    """Validate and parse a story document"""
    validate_json_schema(document_data, STORY_DOCUMENT_SCHEMA)

    try:
        document = StoryDocument(**document_data)
    except Exception as e:
        raise StoryDocumentError(f"Invalid story document: {e}")

    nodes = document.all_nodes()
    duplicates = [
        node_id for node_id, count in Counter(n.id for n in nodes).items() if count > 1
    ]
    if duplicates:
        raise StoryDocumentError(f"Duplicate node ids: {', '.join(sorted(duplicates))}")

    node_ids = {node.id for node in nodes}
    for edge in document.all_edges():
        if edge.source not in node_ids or edge.target not in node_ids:
            logger.warning(
                f"Edge {edge.id} connects unknown nodes ({edge.source} -> {edge.target})"
            )

    return document


def load_story_document(path: Union[str, Path]) -> StoryDocument:
    """Read a JSON story document from disk and validate it"""
    document_path = Path(path)
    try:
        with document_path.open(encoding="utf-8") as handle:
            document_data = json.load(handle)
    except json.JSONDecodeError as e:
        raise StoryDocumentError(f"{document_path} is not valid JSON: {e}")
    except OSError as e:
        raise StoryDocumentError(f"Cannot read {document_path}: {e}")

    if not isinstance(document_data, dict):
        raise StoryDocumentError(f"{document_path} must contain a JSON object")

    logger.debug(f"Loaded story document from {document_path}")
    return validate_story_document(document_data)
