"""
REST backing store for the KVS client.

Endpoints, relative to base_url:
  GET /keys/{key}   raw value bytes, 404 when absent
  GET /meta         {creationDateTime, lastUpdatedDateTime, keyCount}
"""

from typing import Any, Optional
from urllib.parse import quote

import httpx

from edgefn.errors import KvsError

DEFAULT_TIMEOUT = 5.0


class HttpStore:
    def __init__(
        self,
        base_url: str,
        kvs_id: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.id = kvs_id
        self._token = token
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"User-Agent": "edgefn/0.1.0"},
            timeout=timeout,
            transport=transport,
        )

    def _auth_headers(self) -> dict[str, str]:
        if self._token:
            return {"Authorization": f"Bearer {self._token}"}
        return {}

    async def lookup(self, key: str) -> Optional[bytes]:
        try:
            resp = await self._client.get(f"/keys/{quote(key, safe='')}", headers=self._auth_headers())
        except httpx.HTTPError as e:
            raise KvsError(f"Lookup of {key!r} failed: {e}") from e
        if resp.status_code == 404:
            return None
        if resp.status_code >= 400:
            raise KvsError(f"HTTP {resp.status_code}: {resp.text[:200]}", details={"key": key})
        return resp.content

    async def describe(self) -> dict[str, Any]:
        try:
            resp = await self._client.get("/meta", headers={"Accept": "application/json", **self._auth_headers()})
        except httpx.HTTPError as e:
            raise KvsError(f"Describe failed: {e}") from e
        if resp.status_code >= 400:
            raise KvsError(f"HTTP {resp.status_code}: {resp.text[:200]}")
        try:
            return resp.json()
        except ValueError as e:
            raise KvsError(f"Describe returned invalid JSON: {e}", details={"body": resp.text[:200]}) from e

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpStore":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()
