"""
Graph connectivity check run before playback.

A layer is playable when it has exactly one node without incoming edges and
every other node can be reached from it. The check is a pure function of the
layer: it never raises and never modifies its input. Problems are reported
in the returned ConnectivityResult together with human-readable node
descriptions for an editor to show.
"""

from typing import Callable, Dict, List, Optional

from ..config import settings
from ..schemas.connectivity import ConnectivityResult, NodeInfo
from ..schemas.story import Edge, Layer, Node, StoryDocument
from ..utils.logger import get_logger

logger = get_logger(__name__)

Translator = Callable[[str, str], str]

NO_START_NODE = (
    "connectivity_error.no_start_node",
    "No start node found; all nodes have incoming edges, a cycle is likely",
)
# Keyed by plural category so translations can inflect the count
START_NODE_KEYS = {
    "one": "connectivity_error.start_node_one",
    "few": "connectivity_error.start_node_few",
    "many": "connectivity_error.start_node_many",
}
START_NODE_DEFAULT = "Found {count} start nodes. There must be exactly one start node for playback"
UNREACHABLE_NODES = (
    "connectivity_error.unreachable_nodes",
    "Found {count} unreachable node(s). Every node must be connected to the main graph",
)
DEFAULT_NARRATIVE_TITLE = ("connectivity_error.default_narrative_node", "Narrative node")
DEFAULT_CHOICE_TITLE = ("connectivity_error.default_choice_node", "Choice node")
DEFAULT_NO_TEXT = ("connectivity_error.default_no_text", "No text")


def translate(t: Optional[Translator], key: str, fallback: str) -> str:
    """Look a message up through the translator, falling back to English"""

    if t is None:
        return fallback
    try:
        translated = t(key, fallback)
    except Exception as e:
        logger.debug(f"Translator failed for {key}: {e}")
        return fallback
    if not translated or translated == key:
        return fallback
    return translated


def plural_category(count: int) -> str:
    """one/few/many category of a count (1, 21 -> one; 2-4, 22 -> few; 5-20 -> many)"""

    if count % 10 == 1 and count % 100 != 11:
        return "one"
    if 2 <= count % 10 <= 4 and not 12 <= count % 100 <= 14:
        return "few"
    return "many"


def describe_node(
    node: Node, layer: Layer, t: Optional[Translator] = None
) -> NodeInfo:
    """Build the display entry of a node for connectivity warnings"""

    title = (node.data.title or "").strip()
    if not title:
        default = DEFAULT_CHOICE_TITLE if node.is_choice else DEFAULT_NARRATIVE_TITLE
        title = translate(t, *default)

    text = node.data.text or ""
    limit = settings.text_preview_length
    if not text:
        preview = translate(t, *DEFAULT_NO_TEXT)
    elif len(text) > limit:
        preview = text[:limit] + "..."
    else:
        preview = text

    return NodeInfo(
        id=node.id,
        type=node.type,
        title=title,
        text_preview=preview,
        layer_name=layer.name or layer.id,
        layer_id=layer.id,
    )


def find_start_nodes(nodes: List[Node], edges: List[Edge]) -> List[Node]:
    """Nodes without incoming edges, in declaration order"""

    node_ids = {node.id for node in nodes}
    targets = {
        edge.target for edge in edges
        if edge.source in node_ids and edge.target in node_ids
    }
    return [node for node in nodes if node.id not in targets]


def find_reachable_nodes(start_node_id: str, edges: List[Edge]) -> set:
    """Every node id reachable from the start node, the start included"""

    outgoing: Dict[str, List[str]] = {}
    for edge in edges:
        outgoing.setdefault(edge.source, []).append(edge.target)

    reachable = set()
    stack = [start_node_id]
    while stack:
        node_id = stack.pop()
        if node_id in reachable:
            continue
        reachable.add(node_id)
        stack.extend(
            target for target in outgoing.get(node_id, []) if target not in reachable
        )
    return reachable


def validate_graph_connectivity(
    layer: Layer, t: Optional[Translator] = None
) -> ConnectivityResult:
    """Check that a layer has a single start node reaching every node"""

    nodes = layer.nodes
    if not nodes:
        return ConnectivityResult(is_connected=True, start_node_count=0)

    node_ids = {node.id for node in nodes}
    edges = [
        edge for edge in layer.edges
        if edge.source in node_ids and edge.target in node_ids
    ]
    start_nodes = find_start_nodes(nodes, edges)

    if not start_nodes:
        return ConnectivityResult(
            is_connected=False,
            start_node_count=0,
            unreachable_nodes=[node.id for node in nodes],
            unreachable_nodes_info=[describe_node(node, layer, t) for node in nodes],
            message=translate(t, *NO_START_NODE),
        )

    start_nodes_info = [describe_node(node, layer, t) for node in start_nodes]

    if len(start_nodes) > 1:
        count = len(start_nodes)
        key = START_NODE_KEYS[plural_category(count)]
        return ConnectivityResult(
            is_connected=False,
            start_node_count=count,
            start_nodes=start_nodes_info,
            message=_format(translate(t, key, START_NODE_DEFAULT), count),
        )

    reachable = find_reachable_nodes(start_nodes[0].id, edges)
    unreachable = [node for node in nodes if node.id not in reachable]

    message = None
    if unreachable:
        message = _format(translate(t, *UNREACHABLE_NODES), len(unreachable))

    return ConnectivityResult(
        is_connected=not unreachable,
        start_node_count=1,
        start_nodes=start_nodes_info,
        unreachable_nodes=[node.id for node in unreachable],
        unreachable_nodes_info=[describe_node(node, layer, t) for node in unreachable],
        message=message,
    )


def validate_document(
    document: StoryDocument, t: Optional[Translator] = None
) -> Dict[str, ConnectivityResult]:
    """Validate every layer of a document independently, keyed by layer id"""

    results: Dict[str, ConnectivityResult] = {}
    for layer in document.iter_layers(settings.default_layer_name):
        result = validate_graph_connectivity(layer, t)
        if not result.is_connected:
            logger.info(f"Layer {layer.id} is not playable: {result.message}")
        results[layer.id] = result
    return results


def is_graph_ready_for_playback(layer: Layer, t: Optional[Translator] = None) -> bool:
    """Quick check: connected with exactly one start node"""

    return validate_graph_connectivity(layer, t).is_ready_for_playback


def _format(message: str, count: int) -> str:
    # Translations may drop the placeholder or use unknown ones
    try:
        return message.format(count=count)
    except (KeyError, IndexError, ValueError):
        return message
