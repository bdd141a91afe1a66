import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse

from cache import get_cache
from config import get_settings
from graph_utils import build_pyvis_html
from hierarchy import filter_hierarchy, picker_rows, selected_row
from loader import Dataset, load_dataset
from schemas import GraphPayload
from utils import cached_json_response

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    cache = get_cache(settings)
    await cache.start()
    try:
        app.state.dataset = await load_dataset(settings, cache=cache)
    except Exception:
        # nunca derruba o processo: sobe vazio
        logger.exception("dataset load crashed; serving empty state")
        app.state.dataset = Dataset()
    yield
    await cache.close()


app = FastAPI(title="svc-atlas", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_allow_origins.split(",") if o.strip()],
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=[m.strip() for m in settings.cors_allow_methods.split(",") if m.strip()],
    allow_headers=[h.strip() for h in settings.cors_allow_headers.split(",") if h.strip()],
)


def _dataset(request: Request) -> Dataset:
    return getattr(request.app.state, "dataset", None) or Dataset()


# -----------------------------------------------------------------------------
# Health
# -----------------------------------------------------------------------------
@app.get("/health", tags=["ops"])
async def health(request: Request):
    ds = _dataset(request)
    return {
        "status": "ok",
        "env": settings.app_env,
        "graph_ready": ds.graph_ready,
        "places_ready": ds.places_ready,
    }


# -----------------------------------------------------------------------------
# Grafo
# -----------------------------------------------------------------------------
@app.get("/v1/graph", tags=["graph"])
async def get_graph(request: Request):
    graph = _dataset(request).graph
    if graph is None:
        return GraphPayload(ready=False).model_dump()

    payload = GraphPayload(
        ready=True,
        nodes=graph.nodes,
        edges=graph.edges,
        meta={
            "node_count": len(graph.nodes),
            "edge_count": len(graph.edges),
            "diagnostics": graph.diagnostics.model_dump(),
        },
    )
    return cached_json_response(request, payload.model_dump(), settings.cache_static_max_age)


@app.get("/v1/graph/highlight", tags=["graph"])
async def get_highlight(request: Request, node_id: Optional[str] = Query(default=None)):
    graph = _dataset(request).graph
    if graph is None or node_id is None:
        # ponteiro saiu do nó (ou não há grafo): nada destacado
        return None
    if node_id not in graph.adjacency:
        raise HTTPException(status_code=404, detail=f"unknown node: {node_id}")
    return graph.hover(node_id).model_dump()


@app.get("/v1/vis/pyvis", response_class=HTMLResponse, tags=["viz"])
async def vis_pyvis(
    request: Request,
    highlight: Optional[str] = Query(default=None),
    theme: str = Query(default="light", pattern="^(light|dark)$"),
):
    graph = _dataset(request).graph
    if graph is None:
        return HTMLResponse('<div style="padding:12px">Sem dados.</div>', status_code=200)
    if highlight is not None and highlight not in graph.adjacency:
        raise HTTPException(status_code=404, detail=f"unknown node: {highlight}")

    html = build_pyvis_html(
        graph.nodes,
        graph.edges,
        highlight=graph.highlight(highlight),
        theme=theme,
        height=f"{int(settings.canvas_height)}px",
    )
    return HTMLResponse(html, status_code=200)


# -----------------------------------------------------------------------------
# Seletor de condados
# -----------------------------------------------------------------------------
@app.get("/v1/places", tags=["places"])
async def get_places(request: Request, q: str = Query(default="")):
    ds = _dataset(request)
    if ds.places is None:
        return {"ready": False, "regions": []}
    regions = filter_hierarchy(ds.places, q)
    return {
        "ready": True,
        "query": q,
        "regions": [r.model_dump() for r in regions],
        "meta": {"diagnostics": ds.hierarchy_diagnostics.model_dump()},
    }


@app.get("/v1/places/rows", tags=["places"])
async def get_place_rows(
    request: Request,
    q: str = Query(default=""),
    selected: Optional[int] = Query(default=None),
):
    ds = _dataset(request)
    if ds.places is None:
        return {"ready": False, "rows": [], "selected_row": None}
    rows = picker_rows(filter_hierarchy(ds.places, q))
    return {
        "ready": True,
        "query": q,
        "rows": [r.model_dump() for r in rows],
        "selected_row": selected_row(rows, selected),
    }


@app.get("/v1/places/counties/{county_id}", tags=["places"])
async def get_county(request: Request, county_id: int):
    path = _dataset(request).counties.get(county_id)
    if path is None:
        raise HTTPException(status_code=404, detail=f"unknown county: {county_id}")
    return {
        "county": path.county.model_dump(),
        "state": path.state.model_dump(exclude={"counties"}),
        "region": path.region.model_dump(exclude={"states"}),
    }
