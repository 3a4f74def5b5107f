"""
IPFS HTTP RPC client used for asset ingestion.

Only the call minty needs is implemented:

  POST /api/v0/add      multipart upload, newline-delimited JSON reply

The client talks to one endpoint for its whole lifetime. The underlying
httpx.AsyncClient is created by connect(), once; later calls reuse it.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from minty.local_ipfs.config import DEFAULT_API_URL, DEFAULT_TIMEOUT
from minty.local_ipfs.errors import StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AddOptions:
    """Addressing parameters for every add. Fixed for the process."""

    cid_version: int = 1
    hash_alg: str = "sha2-256"

    def as_params(self) -> dict[str, str]:
        return {
            "cid-version": str(self.cid_version),
            "hash": self.hash_alg,
            "pin": "true",
        }


ADD_OPTIONS = AddOptions()


class IpfsStoreClient:
    """Async client for a single IPFS API endpoint.

    Example:
        async with IpfsStoreClient("http://localhost:5001") as store:
            cid = await store.add("/nft/cat.png", data, ADD_OPTIONS)
    """

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            api_url: Base URL of the IPFS RPC API (no /api/v0 suffix).
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests pass a MockTransport).
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def connected(self) -> bool:
        return self._client is not None

    def connect(self) -> None:
        """Open the HTTP client. Safe to call repeatedly."""
        if self._client is not None:
            return
        self._client = httpx.AsyncClient(
            base_url=self.api_url,
            timeout=self.timeout,
            transport=self._transport,
        )
        logger.debug("Connected to IPFS API at %s", self.api_url)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> IpfsStoreClient:
        self.connect()
        return self

    async def __aexit__(self, *_exc: Any) -> None:
        await self.aclose()

    async def _post(self, endpoint: str, **kwargs: Any) -> httpx.Response:
        self.connect()
        assert self._client is not None
        try:
            response = await self._client.post(endpoint, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise StoreError(f"IPFS API at {self.api_url} timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            body = e.response.text.strip()
            raise StoreError(
                f"IPFS API rejected {endpoint}: HTTP {e.response.status_code} {body[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise StoreError(f"IPFS API at {self.api_url} unreachable: {e}") from e
        return response

    async def add(self, path: str, content: bytes, options: AddOptions = ADD_OPTIONS) -> str:
        """Add ``content`` under ``path`` and return the file's CID.

        Raises:
            StoreError: transport failure, error status, or a reply with
                no usable entry.
        """
        files = {
            "file": (quote(path, safe=""), content, "application/octet-stream"),
        }
        response = await self._post("/api/v0/add", params=options.as_params(), files=files)

        entries = _parse_ndjson(response.text)
        if not entries:
            raise StoreError(f"IPFS API returned no entries for {path}")

        wanted = path.lstrip("/")
        entry = next((e for e in entries if e.get("Name") == wanted), entries[0])
        cid = entry.get("Hash")
        if not cid:
            raise StoreError(f"IPFS API reply for {path} has no Hash: {entry}")

        logger.debug("Added %s (%d bytes) -> %s", path, len(content), cid)
        return cid


def _parse_ndjson(text: str) -> list[dict[str, Any]]:
    entries = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            entries.append(json.loads(line))
        except json.JSONDecodeError as e:
            raise StoreError(f"Malformed IPFS API reply line: {line[:200]}") from e
    return entries
