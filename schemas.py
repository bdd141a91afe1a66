from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import Any, Dict, FrozenSet, List, Literal, Optional, Union

class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float
    y: float

class Node(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    x: float
    y: float
    name: Optional[str] = None
    code: Optional[str] = None
    category_id: Optional[str] = None

    def tooltip(self) -> str:
        if self.name is None:
            return self.id
        return f"{self.name} ({self.code})" if self.code else self.name

class EndpointRef(BaseModel):
    """Extremidade de uma aresta: referência por id ou nó embutido."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["id", "inline"]
    value: Union[str, Node]

    @property
    def node_id(self) -> str:
        return self.value.id if isinstance(self.value, Node) else self.value

    @classmethod
    def parse(cls, raw: Any) -> Optional["EndpointRef"]:
        if isinstance(raw, dict):
            nid = raw.get("id", raw.get("productId"))
            if nid is None:
                return None
            node = Node(
                id=str(nid),
                x=raw.get("x") if raw.get("x") is not None else 0.0,
                y=raw.get("y") if raw.get("y") is not None else 0.0,
            )
            return cls(kind="inline", value=node)
        if isinstance(raw, (str, int)) and not isinstance(raw, bool):
            return cls(kind="id", value=str(raw))
        return None

class PreEdge(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: EndpointRef
    target: EndpointRef

class Edge(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    source_id: str
    target_id: str
    source: Point
    target: Point

class Metadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: Optional[str] = None
    code: Optional[str] = None
    category_id: Optional[str] = None

class HighlightSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    focal_id: str
    neighbor_ids: FrozenSet[str] = frozenset()
    edge_ids: FrozenSet[str] = frozenset()

    @field_serializer("neighbor_ids", "edge_ids")
    def _sorted_ids(self, ids: FrozenSet[str]) -> List[str]:
        return sorted(ids)

    def is_emphasized(self, item_id: str) -> bool:
        return item_id == self.focal_id or item_id in self.neighbor_ids or item_id in self.edge_ids

class HoverInfo(BaseModel):
    label: str
    highlight: HighlightSet

class GraphDiagnostics(BaseModel):
    unpositioned_nodes: int = 0
    missing_references: int = 0
    unparseable_edges: int = 0
    invalid_metadata: int = 0
    duplicate_edges: int = 0

# ---------------------------------------------------------------------------
# Hierarquia região -> estado -> condado
# ---------------------------------------------------------------------------
Level = Literal["region", "state", "county"]

class Place(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    level: Level
    parent: Optional[int] = None

class State(Place):
    counties: List[Place] = Field(default_factory=list)

class Region(Place):
    states: List[State] = Field(default_factory=list)

class CountyPath(BaseModel):
    model_config = ConfigDict(frozen=True)

    region: Region
    state: State
    county: Place

class PickerRow(BaseModel):
    level: Level
    id: int
    name: str
    depth: int

class HierarchyDiagnostics(BaseModel):
    invalid_places: int = 0
    orphan_states: int = 0
    orphan_counties: int = 0

class GraphPayload(BaseModel):
    ready: bool
    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)
    meta: Dict[str, Any] = Field(default_factory=dict)
