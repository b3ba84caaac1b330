"""Verifier that assigns a constant score without calling any service."""

from newswave.data import ContentBlob
from newswave.verifier.base import clamp_score


class FixedVerifier:
    """Content verifier that returns the same score for every draft.

    No API calls are made. This is useful for local ledgers and for
    development setups where no scoring service is available.

    Args:
        score: The score to assign (clamped to [0, 1]).
    """

    def __init__(self, score: float = 0.5) -> None:
        self._score = clamp_score(score)

    async def score(self, draft: ContentBlob) -> float:
        return self._score
