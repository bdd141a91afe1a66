import os
from dataclasses import dataclass

PLACES_GIST = (
    "https://gist.githubusercontent.com/bleonard33/38a183289ed87082fed7b2547f2eea49/raw/"
    "3290b8ea9791c4e632520a9e1849f580bb82346a/census_classification.json"
)

@dataclass
class Settings:
    # App
    app_env: str = os.getenv("APP_ENV", "production")
    log_level: str = os.getenv("LOG_LEVEL", "info")

    # CORS
    cors_allow_origins: str = os.getenv("CORS_ALLOW_ORIGINS", "*")
    cors_allow_credentials: bool = os.getenv("CORS_ALLOW_CREDENTIALS", "false").lower() == "true"
    cors_allow_headers: str = os.getenv("CORS_ALLOW_HEADERS", "Authorization,Content-Type")
    cors_allow_methods: str = os.getenv("CORS_ALLOW_METHODS", "GET,OPTIONS")

    # Payloads de origem
    nodes_edges_url: str = os.getenv("NODES_EDGES_URL", "http://localhost:8000/node-edges.json")
    metadata_url: str = os.getenv("METADATA_URL", "http://localhost:8000/metadata.json")
    metadata_key: str = os.getenv("METADATA_KEY", "productHs92")
    places_url: str = os.getenv("PLACES_URL", PLACES_GIST)
    fetch_timeout: float = float(os.getenv("FETCH_TIMEOUT", "15"))

    # Área de desenho (espaço de exibição)
    canvas_width: float = float(os.getenv("CANVAS_WIDTH", "1200"))
    canvas_height: float = float(os.getenv("CANVAS_HEIGHT", "800"))
    canvas_padding: float = float(os.getenv("CANVAS_PADDING", "20"))

    # Cache
    cache_static_max_age: int = int(os.getenv("CACHE_STATIC_MAX_AGE", "86400"))
    cache_api_ttl: int = int(os.getenv("CACHE_API_TTL", "60"))

    # Redis
    enable_redis_cache: bool = os.getenv("ENABLE_REDIS_CACHE", "false").lower() == "true"
    redis_url: str = os.getenv("REDIS_URL", "redis://redis:6379/0")

def get_settings() -> Settings:
    return Settings()
