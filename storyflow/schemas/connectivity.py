"""
Result schema of the graph connectivity check
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class NodeInfo(BaseModel):
    """Human-readable description of a node shown in connectivity warnings"""

    id: str = Field(..., description="Node identifier")
    type: str = Field(..., description="Node kind (narrative or choice)")
    title: str = Field(..., description="Node title or a default label")
    text_preview: str = Field(..., description="Truncated node text")
    layer_name: str = Field(..., description="Name of the containing layer")
    layer_id: str = Field(..., description="Identifier of the containing layer")


class ConnectivityResult(BaseModel):
    """Outcome of validating one layer before playback"""

    is_connected: bool = Field(..., description="Whether the layer is playable")
    start_node_count: int = Field(..., description="Nodes without incoming edges")
    start_nodes: List[NodeInfo] = Field(default_factory=list)
    unreachable_nodes: List[str] = Field(default_factory=list)
    unreachable_nodes_info: List[NodeInfo] = Field(default_factory=list)
    message: Optional[str] = Field(None, description="Diagnostic message")

    @property
    def is_ready_for_playback(self) -> bool:
        return self.is_connected and self.start_node_count == 1
