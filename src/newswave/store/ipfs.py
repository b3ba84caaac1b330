"""IPFS content store: Kubo RPC for writes, an HTTP gateway for reads."""

import json
import logging
from typing import Any

import httpx

from newswave.data import ContentBlob
from newswave.errors import ContentCorrupt, ContentNotFound, ContentStoreFailure
from newswave.store.base import decode_blob, encode_blob, is_valid_cid, split_ref

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://127.0.0.1:5001"
DEFAULT_GATEWAY_URL = "https://ipfs.io"
DIRECTORY_INDEX_PATH = "0"

# Gateways answer 504 while a CID is still propagating.
_NOT_FOUND_STATUSES = frozenset({404, 410, 504})


def _last_json_object(text: str) -> dict[str, Any] | None:
    """Return the last JSON object in an NDJSON body (``add`` streams one per line)."""
    last: dict[str, Any] | None = None
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            obj = json.loads(line)
        except ValueError:
            continue
        if isinstance(obj, dict):
            last = obj
    return last


class IPFSContentStore:
    """Store blobs on IPFS.

    ``put`` adds the serialized blob through the Kubo RPC API
    (``POST /api/v0/add``) and pins it. ``get`` reads through a public or
    private gateway (``GET /ipfs/<cid>``). A reference that resolves to a
    small directory is read from its index file at sub-path ``0``.

    Args:
        api_url: Base URL of the Kubo RPC API used for writes.
        gateway_url: Base URL of the gateway used for reads.
        timeout: Timeout in seconds for every request.
        cid_version: CID version requested from ``add``.
    """

    def __init__(
        self,
        *,
        api_url: str = DEFAULT_API_URL,
        gateway_url: str = DEFAULT_GATEWAY_URL,
        timeout: float = 30.0,
        cid_version: int = 1,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._gateway_url = gateway_url.rstrip("/")
        self._timeout = timeout
        self._cid_version = cid_version

    async def put(self, blob: ContentBlob) -> str:
        data = encode_blob(blob)
        params = {"cid-version": str(self._cid_version), "pin": "true"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    f"{self._api_url}/api/v0/add",
                    params=params,
                    files={"file": ("news.json", data, "application/json")},
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise ContentStoreFailure(f"IPFS add failed: {e}") from e

        result = _last_json_object(response.text)
        content_ref = result.get("Hash") if result else None
        if not content_ref or not is_valid_cid(content_ref):
            raise ContentStoreFailure(f"IPFS add returned no usable CID: {result!r}")

        logger.info("Stored %d bytes on IPFS as %s", len(data), content_ref)
        return content_ref

    async def get(self, content_ref: str) -> ContentBlob:
        root, subpath = split_ref(content_ref)
        if not is_valid_cid(root):
            raise ContentNotFound(content_ref, f"Not a valid IPFS CID: {content_ref!r}")

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            if subpath is not None:
                raw = await self._fetch(client, content_ref, f"{root}/{subpath}")
                return decode_blob(content_ref, raw)

            raw = await self._fetch(client, content_ref, root)
            try:
                return decode_blob(content_ref, raw)
            except ContentCorrupt as e:
                logger.debug("%s is not a blob, trying directory index", root)
                corrupt = e

            try:
                raw = await self._fetch(client, content_ref, f"{root}/{DIRECTORY_INDEX_PATH}")
            except ContentNotFound:
                # Not a directory either, so the root bytes are the blob.
                raise corrupt from None
            return decode_blob(content_ref, raw)

    async def _fetch(self, client: httpx.AsyncClient, content_ref: str, path: str) -> bytes:
        url = f"{self._gateway_url}/ipfs/{path}"
        try:
            response = await client.get(url)
        except httpx.TimeoutException as e:
            raise ContentNotFound(content_ref, f"Gateway timed out fetching {path}") from e
        except httpx.HTTPError as e:
            raise ContentStoreFailure(f"Gateway request for {path} failed: {e}") from e

        if response.status_code in _NOT_FOUND_STATUSES:
            raise ContentNotFound(content_ref, f"Gateway has no content at {path}")
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ContentStoreFailure(f"Gateway request for {path} failed: {e}") from e
        return response.content
