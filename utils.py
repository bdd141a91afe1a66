import hashlib
import json
from typing import Any, Dict, Optional

from fastapi import Request, Response

def compute_etag(body: bytes) -> str:
    return '"' + hashlib.sha256(body).hexdigest() + '"'

def make_cache_headers(max_age: int, etag: Optional[str] = None) -> Dict[str, str]:
    headers = {
        "Cache-Control": f"public, max-age={max_age}",
    }
    if etag:
        headers["ETag"] = etag
    return headers

def cached_json_response(request: Request, payload: Any, max_age: int) -> Response:
    """JSON com ETag; devolve 304 se o cliente já tem a mesma versão."""
    body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    etag = compute_etag(body)
    headers = make_cache_headers(max_age, etag)
    if request.headers.get("if-none-match") == etag:
        return Response(status_code=304, headers=headers)
    return Response(content=body, media_type="application/json", headers=headers)
