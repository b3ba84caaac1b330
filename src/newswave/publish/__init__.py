"""Publication pipeline."""

from newswave.publish.publisher import ProgressCallback, Publisher

__all__ = [
    "ProgressCallback",
    "Publisher",
]
