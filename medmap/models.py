"""Wire types of the mind map: nodes, edges and verification verdicts"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

CALLBACK_PLACEHOLDER = "__CALLBACK__"
EDGE_COLOR = "#6366f1"


class Position(BaseModel):
    x: float = 0
    y: float = 0


class Verdict(BaseModel):
    model_config = ConfigDict(extra="allow")

    verified: bool
    confidence: Literal["high", "medium", "low"]
    explanation: Optional[str] = None
    corrections: Optional[Any] = None
    sources: List[str] = Field(default_factory=list)
    error: Optional[str] = None


class NodeData(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    label: str
    on_edit: Any = Field(default=CALLBACK_PLACEHOLDER, alias="onEdit")
    on_regenerate: Any = Field(default=CALLBACK_PLACEHOLDER, alias="onRegenerate")
    verification: Optional[Verdict] = None
    sources: Optional[List[str]] = None


class Node(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str
    type: str = "custom"
    position: Position = Field(default_factory=Position)
    data: NodeData

    @property
    def label(self) -> str:
        return self.data.label


class MarkerEnd(BaseModel):
    type: str = "arrowclosed"


class EdgeStyle(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    stroke: str = EDGE_COLOR
    stroke_width: float = Field(default=2, alias="strokeWidth")


class Edge(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    source: str
    target: str
    type: str = "smoothstep"
    marker_end: MarkerEnd = Field(default_factory=MarkerEnd, alias="markerEnd")
    style: EdgeStyle = Field(default_factory=EdgeStyle)


class SourceRecord(BaseModel):
    url: str
    title: str
    snippet: str


class Regeneration(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_content: str = Field(alias="newContent")
    explanation: str
    sources: List[str]


class MindMap(BaseModel):
    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)

    def dangling_edges(self) -> List[Edge]:
        """Edges whose source or target is not a node of this map"""
        ids = {node.id for node in self.nodes}
        return [e for e in self.edges if e.source not in ids or e.target not in ids]

    def drop_dangling_edges(self) -> "MindMap":
        dangling = {id(e) for e in self.dangling_edges()}
        self.edges = [e for e in self.edges if id(e) not in dangling]
        return self

    def strip_callbacks(self) -> "MindMap":
        """Callbacks are attached client-side, the wire only carries the marker"""
        for node in self.nodes:
            node.data.on_edit = CALLBACK_PLACEHOLDER
            node.data.on_regenerate = CALLBACK_PLACEHOLDER
        return self

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
