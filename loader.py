"""
Sequência de carga: busca os três payloads (uma vez, em ordem), monta o
grafo e a hierarquia e devolve um Dataset imutável.

Falha de busca/parse de um payload deixa a parte correspondente ausente
(None); nada disso sobe como exceção para as rotas.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from cache import _BaseCache, _MemoryCache, payload_key
from config import Settings
from data_client import PayloadClient
from graph_builder import GraphIndex, build_graph_index
from graph_utils import (
    join_metadata,
    normalize_coordinates,
    normalize_graph,
    parse_metadata,
    parse_pre_edges,
    positioned_nodes,
)
from hierarchy import build_hierarchy, index_counties, parse_places
from schemas import CountyPath, GraphDiagnostics, HierarchyDiagnostics, Region

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dataset:
    graph: Optional[GraphIndex] = None
    places: Optional[List[Region]] = None
    hierarchy_diagnostics: HierarchyDiagnostics = field(default_factory=HierarchyDiagnostics)
    counties: Dict[int, CountyPath] = field(default_factory=dict)

    @property
    def graph_ready(self) -> bool:
        return self.graph is not None

    @property
    def places_ready(self) -> bool:
        return self.places is not None


def assemble_graph(raw_nodes_edges: Any, raw_metadata: Any, settings: Settings) -> GraphIndex:
    data = normalize_graph(raw_nodes_edges)
    diag = GraphDiagnostics()

    nodes, diag.unpositioned_nodes = positioned_nodes(data["nodes"])
    if diag.unpositioned_nodes:
        logger.warning("graph: %d nodes without coordinates ignored", diag.unpositioned_nodes)

    metadata, diag.invalid_metadata = parse_metadata(raw_metadata, settings.metadata_key)
    if diag.invalid_metadata:
        logger.warning("graph: %d invalid metadata records ignored", diag.invalid_metadata)
    nodes = join_metadata(nodes, metadata)
    nodes = normalize_coordinates(
        nodes,
        width=settings.canvas_width,
        height=settings.canvas_height,
        padding=settings.canvas_padding,
    )

    pre_edges, diag.unparseable_edges = parse_pre_edges(data["edges"])
    if diag.unparseable_edges:
        logger.warning("graph: %d edges with unreadable endpoints ignored", diag.unparseable_edges)
    return build_graph_index(nodes, pre_edges, diagnostics=diag)


def assemble_places(raw_places: Any) -> Dataset:
    places, bad = parse_places(raw_places)
    diag = HierarchyDiagnostics(invalid_places=bad)
    if bad:
        logger.warning("places: %d invalid records ignored", bad)
    tree = build_hierarchy(places, diagnostics=diag)
    return Dataset(places=tree, hierarchy_diagnostics=diag, counties=index_counties(tree))


async def _fetch(client: PayloadClient, cache: _BaseCache, name: str, url: str, ttl: int) -> Optional[Any]:
    async def load():
        return await client.fetch_json(url)

    try:
        return await cache.get_or_load(payload_key(name), load, ttl=ttl)
    except httpx.HTTPError as e:
        logger.error("failed to fetch %s from %s: %s", name, url, e)
    except ValueError as e:
        logger.error("failed to parse %s from %s: %s", name, url, e)
    return None


async def load_dataset(
    settings: Settings,
    client: Optional[PayloadClient] = None,
    cache: Optional[_BaseCache] = None,
) -> Dataset:
    own_client = client is None
    client = client or PayloadClient(timeout=settings.fetch_timeout)
    cache = cache or _MemoryCache()
    if own_client:
        await client.start()

    try:
        ttl = settings.cache_api_ttl
        raw_meta = await _fetch(client, cache, "metadata", settings.metadata_url, ttl)
        raw_graph = await _fetch(client, cache, "node-edges", settings.nodes_edges_url, ttl)
        raw_places = await _fetch(client, cache, "places", settings.places_url, ttl)
    finally:
        if own_client:
            await client.close()

    graph = None
    if raw_meta is not None and raw_graph is not None:
        try:
            graph = assemble_graph(raw_graph, raw_meta, settings)
        except (ValueError, TypeError) as e:
            # falha só do lado do grafo; lugares seguem independentes
            logger.error("failed to assemble graph: %s", e)
        else:
            logger.info("graph ready: %d nodes, %d edges", len(graph.nodes), len(graph.edges))
    else:
        logger.warning("graph unavailable: metadata or node/edge payload missing")

    if raw_places is None:
        logger.warning("places unavailable")
        return Dataset(graph=graph)

    try:
        places = assemble_places(raw_places)
    except (ValueError, TypeError) as e:
        logger.error("failed to assemble places: %s", e)
        return Dataset(graph=graph)
    logger.info("places ready: %d regions, %d counties", len(places.places), len(places.counties))
    return Dataset(
        graph=graph,
        places=places.places,
        hierarchy_diagnostics=places.hierarchy_diagnostics,
        counties=places.counties,
    )
