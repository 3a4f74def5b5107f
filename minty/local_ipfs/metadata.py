"""
Mint request assembly.

Builds the NFT metadata record from the resolved answers and the ingested
asset, stores the metadata JSON next to the asset, and bundles everything
the downstream minting step needs. Submitting the mint transaction is not
done here.
"""

import json
from dataclasses import dataclass
from typing import Optional

from minty.local_ipfs.pipeline import AssetRecord

METADATA_NAME = "metadata.json"
IPFS_SCHEME = "ipfs://"


def ipfs_uri(cid: str) -> str:
    if cid.startswith(IPFS_SCHEME):
        return cid
    return IPFS_SCHEME + cid


def gateway_url(base: str, cid: str) -> str:
    if cid.startswith(IPFS_SCHEME):
        cid = cid[len(IPFS_SCHEME):]
    return f"{base.rstrip('/')}/{cid}"


def build_metadata(answers, asset: AssetRecord) -> dict:
    return {
        "name": answers.get("name", ""),
        "description": answers.get("description", ""),
        "image": ipfs_uri(asset.content_id),
    }


@dataclass(frozen=True)
class MintRequest:
    owner: Optional[str]
    creation_info: bool
    metadata: dict
    asset: AssetRecord
    metadata_record: AssetRecord
    asset_uri: str
    asset_gateway_url: str
    metadata_uri: str
    metadata_gateway_url: str

    def to_dict(self) -> dict:
        return {
            "owner": self.owner,
            "creation_info": self.creation_info,
            "asset": {
                "store_path": self.asset.store_path,
                "cid": self.asset.content_id,
                "uri": self.asset_uri,
                "gateway_url": self.asset_gateway_url,
            },
            "metadata": {
                "store_path": self.metadata_record.store_path,
                "cid": self.metadata_record.content_id,
                "uri": self.metadata_uri,
                "gateway_url": self.metadata_gateway_url,
            },
            "nft_metadata": self.metadata,
        }


async def prepare_mint(answers, asset: AssetRecord, pipeline, gateway_base: str) -> MintRequest:
    """Store the metadata JSON for ``asset`` and return the mint request.

    ``owner`` of None leaves the choice (first signing address) to the
    minting step.
    """
    metadata = build_metadata(answers, asset)
    payload = json.dumps(metadata, indent=2).encode("utf-8")
    metadata_record = await pipeline.ingest_bytes(payload, METADATA_NAME)

    return MintRequest(
        owner=answers.get("owner"),
        creation_info=bool(answers.get("creation_info", False)),
        metadata=metadata,
        asset=asset,
        metadata_record=metadata_record,
        asset_uri=ipfs_uri(asset.content_id),
        asset_gateway_url=gateway_url(gateway_base, asset.content_id),
        metadata_uri=ipfs_uri(metadata_record.content_id),
        metadata_gateway_url=gateway_url(gateway_base, metadata_record.content_id),
    )
