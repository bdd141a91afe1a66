import pytest

from config import Settings

NODE_EDGES = {
    "nodes": [
        {"productId": "product-HS92-1", "x": 0, "y": 0},
        {"productId": "product-HS92-2", "x": 10, "y": 5},
        {"productId": "product-HS92-3", "x": 5, "y": 10},
        {"productId": "product-HS92-4"},
    ],
    "edges": [
        {"source": "product-HS92-1", "target": "product-HS92-2"},
        {"source": "product-HS92-2", "target": "product-HS92-3"},
        {"source": "product-HS92-3", "target": "product-HS92-4"},
    ],
}

METADATA = {
    "productHs92": [
        {
            "productId": "product-HS92-1",
            "productName": "Live animals",
            "productCode": "0101",
            "productSector": {"productId": "product-HS92-1"},
        },
        {
            "productId": "product-HS92-2",
            "productName": "Coffee",
            "productCode": "0901",
            "productSector": {"productId": "product-HS92-2"},
        },
    ]
}

PLACES = [
    {"id": 1, "name": "Midwest", "level": "region", "parent": None},
    {"id": 10, "name": "Illinois", "level": "state", "parent": 1},
    {"id": 100, "name": "Springfield", "level": "county", "parent": 10},
    {"id": 101, "name": "Shelbyville", "level": "county", "parent": 10},
    {"id": 102, "name": "Lost County", "level": "county", "parent": 999},
]


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        nodes_edges_url="http://upstream.test/node-edges.json",
        metadata_url="http://upstream.test/metadata.json",
        places_url="http://upstream.test/places.json",
        enable_redis_cache=False,
    )


@pytest.fixture()
def payloads():
    return {
        "/node-edges.json": NODE_EDGES,
        "/metadata.json": METADATA,
        "/places.json": PLACES,
    }
