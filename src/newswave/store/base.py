"""Content store protocol and the blob wire codec."""

import json
import re
from typing import Protocol

from newswave.data import ContentBlob
from newswave.errors import ContentCorrupt

# CIDv0 is base58btc, no 0/O/I/l; CIDv1 here is the lowercase base32 form.
_CIDV0_RE = re.compile(r"^Qm[1-9A-HJ-NP-Za-km-z]{44}$")
_CIDV1_BASE32_RE = re.compile(r"^b[a-z2-7]{10,}$")


class ContentStore(Protocol):
    """Interface for content-addressed blob storage."""

    async def put(self, blob: ContentBlob) -> str:
        """Store a blob and return its content reference.

        Storing identical bytes twice returns the same reference.

        Raises:
            ContentStoreFailure: If the write failed.
        """
        ...

    async def get(self, content_ref: str) -> ContentBlob:
        """Fetch and decode a blob.

        Raises:
            ContentNotFound: If the reference is unknown to the store.
            ContentCorrupt: If the bytes are not a well-formed blob.
            ContentStoreFailure: On other transport failures.
        """
        ...


def encode_blob(blob: ContentBlob) -> bytes:
    """Serialize a blob deterministically (sorted keys, compact, UTF-8)."""
    return json.dumps(
        blob.to_wire(), sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


def decode_blob(content_ref: str, raw: bytes) -> ContentBlob:
    """Parse blob bytes.

    Raises:
        ContentCorrupt: If the bytes are not a JSON object with the blob fields.
    """
    try:
        data = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ContentCorrupt(content_ref, f"Content {content_ref} is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise ContentCorrupt(content_ref, f"Content {content_ref} is not a JSON object")
    try:
        return ContentBlob.from_wire(data)
    except (KeyError, ValueError) as e:
        raise ContentCorrupt(content_ref, f"Content {content_ref} is malformed: {e}") from e


def is_valid_cid(cid: str) -> bool:
    """Lightweight shape check for IPFS CIDs (v0 base58 or v1 base32)."""
    cid = (cid or "").strip()
    if not cid or len(cid) > 128:
        return False
    return bool(_CIDV0_RE.match(cid) or _CIDV1_BASE32_RE.match(cid))


def split_ref(content_ref: str) -> tuple[str, str | None]:
    """Split ``<cid>/<subpath>`` into the root CID and the optional sub-path."""
    root, _, subpath = content_ref.strip().strip("/").partition("/")
    return root, subpath or None
