"""Content-addressed blob storage."""

from newswave.store.base import ContentStore, decode_blob, encode_blob, is_valid_cid
from newswave.store.ipfs import IPFSContentStore
from newswave.store.memory import InMemoryContentStore

__all__ = [
    "ContentStore",
    "IPFSContentStore",
    "InMemoryContentStore",
    "decode_blob",
    "encode_blob",
    "is_valid_cid",
]
