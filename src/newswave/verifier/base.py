import math
from typing import Protocol

from newswave.data import ContentBlob


class ContentVerifier(Protocol):
    """Interface for scoring draft articles against an external service."""

    async def score(self, draft: ContentBlob) -> float:
        """Score a draft article.

        Implementations make exactly one attempt; retry policy belongs to
        the caller.

        Args:
            draft: The unscored content blob.

        Returns:
            Trust score in [0, 1].

        Raises:
            VerificationUnavailable: On transport error or malformed reply.
            VerificationTimeout: If the service does not answer in time.
        """
        ...


def clamp_score(value: float) -> float:
    """Clamp a raw score into [0, 1].

    Raises:
        ValueError: If the score is NaN or infinite.
    """
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"Score is not a finite number: {value!r}")
    return max(0.0, min(1.0, value))
