# graph_utils.py
import json
import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError
from pyvis.network import Network

from schemas import EndpointRef, HighlightSet, Metadata, Node, PreEdge

# Paleta por setor de produto (HS92)
SECTOR_COLORS: Dict[str, str] = {
    "product-HS92-1": "rgb(125, 218, 161)",
    "product-HS92-2": "#F5CF23",
    "product-HS92-3": "rgb(218, 180, 125)",
    "product-HS92-4": "rgb(187, 150, 138)",
    "product-HS92-5": "rgb(217, 123, 123)",
    "product-HS92-6": "rgb(197, 123, 217)",
    "product-HS92-7": "rgb(141, 123, 216)",
    "product-HS92-8": "rgb(123, 162, 217)",
    "product-HS92-9": "rgb(125, 218, 218)",
    "product-HS92-10": "#2a607c",
    "product-HS92-14": "rgb(178, 61, 109)",
}
DEFAULT_COLOR = "#607d8b"
EMPHASIS_COLOR = "#ef4444"
MUTED_COLOR = "#CCCCCC"

def _node_id(item: Dict[str, Any]) -> Optional[str]:
    nid = item.get("id", item.get("productId"))
    return None if nid is None else str(nid)

def normalize_graph(raw: Any) -> Dict[str, List[Dict[str, Any]]]:
    """
    Espera algo como: {"nodes":[...], "edges":[...]}.
    Nós podem vir com "id" ou "productId"; qualquer outro formato vira grafo vazio.
    """
    if not isinstance(raw, dict):
        return {"nodes": [], "edges": []}

    nodes = []
    for item in raw.get("nodes") or []:
        if not isinstance(item, dict):
            continue
        nid = _node_id(item)
        if nid is None:
            continue
        nodes.append({**item, "id": nid})

    edges = [e for e in (raw.get("edges") or []) if isinstance(e, dict)]
    return {"nodes": nodes, "edges": edges}

def positioned_nodes(raw_nodes: Sequence[Dict[str, Any]]) -> Tuple[List[Node], int]:
    """Mantém só os nós com x e y finitos; 0 é coordenada válida."""
    kept, dropped = [], 0
    for item in raw_nodes:
        if item.get("x") is None or item.get("y") is None:
            dropped += 1
            continue
        try:
            node = Node(id=item["id"], x=item["x"], y=item["y"])
        except ValidationError:
            dropped += 1
            continue
        # NaN/Infinity passam pelo json.loads
        if not (math.isfinite(node.x) and math.isfinite(node.y)):
            dropped += 1
            continue
        kept.append(node)
    return kept, dropped

def parse_metadata(raw: Any, key: str = "productHs92") -> Tuple[List[Metadata], int]:
    """Registros que não validam são descartados e contados."""
    records = raw.get(key) if isinstance(raw, dict) else raw
    if not isinstance(records, list):
        return [], 0

    out, bad = [], 0
    for m in records:
        if not isinstance(m, dict):
            bad += 1
            continue
        mid = _node_id(m)
        if mid is None:
            bad += 1
            continue
        sector = m.get("productSector")
        category = m.get("categoryId")
        if category is None and isinstance(sector, dict):
            category = sector.get("productId")
        try:
            out.append(Metadata(
                id=mid,
                name=m.get("name", m.get("productName")),
                code=m.get("code", m.get("productCode")),
                category_id=None if category is None else str(category),
            ))
        except ValidationError:
            bad += 1
    return out, bad

def join_metadata(nodes: Sequence[Node], metadata: Sequence[Metadata]) -> List[Node]:
    by_id = {m.id: m for m in metadata}
    joined = []
    for n in nodes:
        m = by_id.get(n.id)
        if m is None:
            joined.append(n)
            continue
        joined.append(n.model_copy(update={"name": m.name, "code": m.code, "category_id": m.category_id}))
    return joined

def parse_pre_edges(raw_edges: Sequence[Dict[str, Any]]) -> Tuple[List[PreEdge], int]:
    """Converte cada extremidade em EndpointRef (id ou nó embutido) uma única vez."""
    parsed, bad = [], 0
    for e in raw_edges:
        try:
            s = EndpointRef.parse(e.get("source"))
            t = EndpointRef.parse(e.get("target"))
        except ValidationError:
            bad += 1
            continue
        if s is None or t is None:
            bad += 1
            continue
        parsed.append(PreEdge(source=s, target=t))
    return parsed, bad

def _scale(value: float, lo: float, hi: float, extent: float, padding: float) -> float:
    if hi == lo:
        return extent / 2
    return padding + (value - lo) / (hi - lo) * (extent - 2 * padding)

def normalize_coordinates(
    nodes: Sequence[Node],
    width: float = 1200,
    height: float = 800,
    padding: float = 20,
) -> List[Node]:
    """
    Leva as coordenadas brutas para o retângulo de exibição
    [padding, width - padding] x [padding, height - padding].
    Eixo degenerado (todos com o mesmo valor) vai para o ponto médio.
    """
    if not nodes:
        return []

    xs = [n.x for n in nodes]
    ys = [n.y for n in nodes]
    min_x, max_x = min(xs), max(xs)
    min_y, max_y = min(ys), max(ys)

    return [
        n.model_copy(update={
            "x": _scale(n.x, min_x, max_x, width, padding),
            "y": _scale(n.y, min_y, max_y, height, padding),
        })
        for n in nodes
    ]

def build_pyvis_html(
    nodes: Sequence[Node],
    edges: Sequence[Any],
    highlight: Optional[HighlightSet] = None,
    theme: str = "light",
    height: str = "800px",
    width: str = "100%",
) -> str:
    bg = "#0b0f19" if theme == "dark" else "#eff6ff"
    font = "#e0e0e0" if theme == "dark" else "#222"
    net = Network(height=height, width=width, bgcolor=bg, font_color=font, cdn_resources="in_line")
    # posições já vêm normalizadas: nada de física
    net.toggle_physics(False)

    for n in nodes:
        fill = SECTOR_COLORS.get(n.category_id or "", DEFAULT_COLOR)
        hot = highlight is not None and highlight.is_emphasized(n.id)
        net.add_node(
            n.id,
            label=" ",
            title=n.tooltip(),
            x=n.x,
            y=n.y,
            size=4,
            physics=False,
            borderWidth=3 if hot else 1,
            color={"background": fill, "border": EMPHASIS_COLOR if hot else MUTED_COLOR},
        )

    for e in edges:
        # pelo par de extremidades: ids em texto podem coincidir
        hot = highlight is not None and highlight.focal_id in (e.source_id, e.target_id)
        net.add_edge(
            e.source_id,
            e.target_id,
            color=EMPHASIS_COLOR if hot else MUTED_COLOR,
            width=3 if hot else 1,
        )

    net.set_options(json.dumps({
        "interaction": {"hover": True, "tooltipDelay": 120, "dragNodes": False},
        "nodes": {"shape": "dot", "fixed": True},
        "edges": {"smooth": False},
        "physics": {"enabled": False},
    }))

    return net.generate_html(notebook=False)
