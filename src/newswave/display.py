"""Display helpers for addresses, timestamps and scores."""

import logging
from datetime import UTC, datetime

logger = logging.getLogger(__name__)


def truncate_address(address: str, *, head: int = 6, tail: int = 4) -> str:
    """Shorten an address to ``0x1234...abcd`` form.

    Args:
        address: The address to shorten.
        head: Characters kept from the start (including ``0x``).
        tail: Characters kept from the end.

    Returns:
        The shortened address, or the address unchanged if it is already short.
    """
    if not address:
        return ""
    if len(address) <= head + tail + 3:
        return address
    return f"{address[:head]}...{address[-tail:]}"


def format_timestamp(milliseconds: int) -> str:
    """Format a millisecond epoch timestamp as ``YYYY-MM-DD HH:MM UTC``."""
    try:
        moment = datetime.fromtimestamp(milliseconds / 1000, tz=UTC)
    except (OverflowError, OSError, ValueError):
        logger.warning(f"Could not format timestamp {milliseconds}")
        return "unknown date"
    return moment.strftime("%Y-%m-%d %H:%M UTC")


def format_score(score: float) -> str:
    """Format a verification score as a whole percentage."""
    return f"{round(score * 100)}%"
