"""In-process content store keyed by the SHA-256 of the serialized blob."""

import hashlib

from newswave.data import ContentBlob
from newswave.errors import ContentNotFound
from newswave.store.base import decode_blob, encode_blob


class InMemoryContentStore:
    """Content-addressed store held in a dict.

    References are ``sha256-<hex digest>`` of the deterministic encoding, so
    identical blobs always map to the same reference and a repeated ``put``
    writes nothing.
    """

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}
        self.writes = 0

    async def put(self, blob: ContentBlob) -> str:
        data = encode_blob(blob)
        content_ref = f"sha256-{hashlib.sha256(data).hexdigest()}"
        if content_ref not in self._blobs:
            self._blobs[content_ref] = data
            self.writes += 1
        return content_ref

    async def get(self, content_ref: str) -> ContentBlob:
        try:
            raw = self._blobs[content_ref]
        except KeyError:
            raise ContentNotFound(content_ref) from None
        return decode_blob(content_ref, raw)

    def raw(self, content_ref: str) -> bytes:
        """Return the stored bytes for a reference."""
        try:
            return self._blobs[content_ref]
        except KeyError:
            raise ContentNotFound(content_ref) from None

    def put_raw(self, content_ref: str, data: bytes) -> None:
        """Place arbitrary bytes under a reference (for seeding bad content)."""
        self._blobs[content_ref] = data

    def __len__(self) -> int:
        return len(self._blobs)
