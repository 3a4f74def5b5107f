from __future__ import annotations

import hashlib
import json
from urllib.parse import unquote

import httpx
import pytest

from minty.local_ipfs.store import IpfsStoreClient


def _multipart_file(request: httpx.Request) -> tuple[str, bytes]:
    content_type = request.headers["content-type"]
    boundary = content_type.split("boundary=", 1)[1].encode()
    body = request.read()
    for part in body.split(b"--" + boundary):
        if b'name="file"' not in part:
            continue
        headers, _, data = part.partition(b"\r\n\r\n")
        disposition = headers.decode()
        filename = disposition.split('filename="', 1)[1].split('"', 1)[0]
        if data.endswith(b"\r\n"):
            data = data[:-2]
        return unquote(filename), data
    raise AssertionError("no file part in request")


def fake_cid(data: bytes) -> str:
    return "bafkrei" + hashlib.sha256(data).hexdigest()[:40]


class FakeIpfsNode:
    """In-memory stand-in for the IPFS RPC API."""

    def __init__(self) -> None:
        self.adds: list[dict] = []
        self.fail_with: int | None = None
        self.raise_exc: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.raise_exc is not None:
            raise self.raise_exc
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, text="boom")

        assert request.url.path == "/api/v0/add"
        filename, data = _multipart_file(request)
        self.adds.append({"path": filename, "data": data, "params": dict(request.url.params)})
        name = filename.lstrip("/")
        lines = [
            {"Name": name, "Hash": fake_cid(data), "Size": str(len(data))},
            {"Name": name.split("/")[0], "Hash": "bafybeidir" + fake_cid(name.encode())[7:20], "Size": "0"},
        ]
        return httpx.Response(200, text="\n".join(json.dumps(line) for line in lines) + "\n")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture()
def ipfs_node() -> FakeIpfsNode:
    return FakeIpfsNode()


@pytest.fixture()
def store(ipfs_node: FakeIpfsNode) -> IpfsStoreClient:
    return IpfsStoreClient("http://ipfs.test:5001", timeout=5, transport=ipfs_node.transport())
