import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

from schemas import Edge, GraphDiagnostics, HighlightSet, HoverInfo, Node, Point, PreEdge

logger = logging.getLogger(__name__)

def edge_id(source_id: str, target_id: str) -> str:
    return f"{source_id}->{target_id}"

@dataclass(frozen=True)
class GraphIndex:
    """
    Grafo já resolvido: nós em coordenadas de exibição, arestas com id
    derivado do par ordenado e adjacência simétrica (não direcionada).
    """
    nodes: List[Node]
    edges: List[Edge]
    adjacency: Dict[str, Set[str]]
    diagnostics: GraphDiagnostics = field(default_factory=GraphDiagnostics)

    def node(self, node_id: str) -> Optional[Node]:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def highlight(self, focal_id: Optional[str]) -> Optional[HighlightSet]:
        return highlight(focal_id, self.adjacency, self.edges)

    def hover(self, node_id: Optional[str]) -> Optional[HoverInfo]:
        hl = self.highlight(node_id)
        if hl is None:
            return None
        n = self.node(node_id)
        label = n.tooltip() if n is not None else node_id
        return HoverInfo(label=label, highlight=hl)

def build_graph_index(
    nodes: Sequence[Node],
    pre_edges: Sequence[PreEdge],
    diagnostics: Optional[GraphDiagnostics] = None,
) -> GraphIndex:
    diag = diagnostics.model_copy() if diagnostics is not None else GraphDiagnostics()
    by_id: Dict[str, Node] = {n.id: n for n in nodes}
    adjacency: Dict[str, Set[str]] = {n.id: set() for n in nodes}
    # chave é o par ordenado: ids podem conter "->"
    edges: Dict[Tuple[str, str], Edge] = {}

    for pe in pre_edges:
        s = by_id.get(pe.source.node_id)
        t = by_id.get(pe.target.node_id)
        if s is None or t is None:
            # nó ausente (ex.: descartado por não ter posição)
            diag.missing_references += 1
            continue

        pair = (s.id, t.id)
        if pair in edges:
            diag.duplicate_edges += 1
        edges[pair] = Edge(
            id=edge_id(s.id, t.id),
            source_id=s.id,
            target_id=t.id,
            source=Point(x=s.x, y=s.y),
            target=Point(x=t.x, y=t.y),
        )
        adjacency[s.id].add(t.id)
        adjacency[t.id].add(s.id)

    if diag.missing_references or diag.duplicate_edges:
        logger.warning(
            "graph index: %d edges skipped (missing node), %d duplicated pairs overwritten",
            diag.missing_references, diag.duplicate_edges,
        )

    return GraphIndex(nodes=list(nodes), edges=list(edges.values()), adjacency=adjacency, diagnostics=diag)

def highlight(
    focal_id: Optional[str],
    adjacency: Mapping[str, Set[str]],
    edges: Sequence[Edge],
) -> Optional[HighlightSet]:
    if focal_id is None:
        return None
    related = {e.id for e in edges if focal_id in (e.source_id, e.target_id)}
    return HighlightSet(
        focal_id=focal_id,
        neighbor_ids=frozenset(adjacency.get(focal_id, ())),
        edge_ids=frozenset(related),
    )
