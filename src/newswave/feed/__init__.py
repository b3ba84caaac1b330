"""Read-side aggregation of the published article list."""

from newswave.feed.aggregator import FeedAggregator

__all__ = [
    "FeedAggregator",
]
