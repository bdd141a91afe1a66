import httpx
from typing import Any, Optional


class PayloadClient:
    """Busca os payloads JSON de origem (nós/arestas, metadados, lugares)."""

    def __init__(self, timeout: float = 15.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def start(self):
        self._client = httpx.AsyncClient(
            headers={"Accept": "application/json"},
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
        )

    async def close(self):
        if self._client:
            await self._client.aclose()

    async def fetch_json(self, url: str) -> Any:
        if not self._client:
            raise RuntimeError("PayloadClient not started")
        r = await self._client.get(url)
        r.raise_for_status()
        return r.json()
