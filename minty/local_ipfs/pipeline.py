"""
Asset ingestion: file or bytes in, AssetRecord out.

Every asset lands under the /nft/ namespace of the store, named after its
base name. The CID is what identifies the asset; the store path is only a
human-readable label and may collide between different payloads.
"""

import asyncio
import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path

from minty.local_ipfs.errors import AssetReadError
from minty.local_ipfs.store import ADD_OPTIONS

logger = logging.getLogger(__name__)

# --- Constants ---

STORE_NAMESPACE = "/nft/"
DEFAULT_ASSET_NAME = "asset.bin"


@dataclass(frozen=True)
class AssetRecord:
    store_path: str
    content_id: str


def store_path_for(source_name) -> str:
    """Map a source name to its store path.

    >>> store_path_for("/a/b/cat.png")
    '/nft/cat.png'
    >>> store_path_for("")
    '/nft/asset.bin'
    """
    name = str(source_name or "").rstrip("/")
    base = posixpath.basename(name)
    return STORE_NAMESPACE + (base or DEFAULT_ASSET_NAME)


class AssetPipeline:
    """Reads assets and deposits them in the store.

    The store client is owned by the caller; the pipeline only uses it.
    """

    def __init__(self, store):
        self.store = store

    async def ingest_file(self, file_path) -> AssetRecord:
        """Read ``file_path`` completely, then ingest it under its base name."""
        path = Path(file_path)
        try:
            content = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise AssetReadError(path, e.strerror or e) from e
        return await self.ingest_bytes(content, str(file_path))

    async def ingest_bytes(self, content: bytes, source_name: str = "") -> AssetRecord:
        store_path = store_path_for(source_name)
        cid = await self.store.add(store_path, content, ADD_OPTIONS)
        logger.debug("Ingested %s as %s (cid %s)", source_name or "<bytes>", store_path, cid)
        return AssetRecord(store_path=store_path, content_id=cid)
