"""Content verifier backed by a generic HTTP scoring endpoint."""

import logging
import os

import httpx

from newswave.data import ContentBlob
from newswave.errors import VerificationTimeout, VerificationUnavailable
from newswave.verifier.base import clamp_score

logger = logging.getLogger(__name__)


class HttpVerifier:
    """Score drafts by POSTing them to a scoring service.

    The request body is ``{"title", "content", "author", "timestamp"}``. The
    service answers with either a bare JSON number or ``{"score": <float>}``.

    Args:
        url: Scoring endpoint URL.
        token: Optional bearer token (defaults to NEWSWAVE_VERIFIER_TOKEN env var).
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        url: str,
        *,
        token: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        if not url:
            raise ValueError("Verifier URL required.")
        self._url = url
        self._token = token or os.environ.get("NEWSWAVE_VERIFIER_TOKEN")
        self._timeout = timeout

    async def score(self, draft: ContentBlob) -> float:
        payload = {
            "title": draft.title,
            "content": draft.body,
            "author": draft.author,
            "timestamp": draft.submitted_at,
        }
        headers: dict[str, str] = {}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self._url, json=payload, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            raise VerificationTimeout(f"Verifier at {self._url} timed out") from e
        except httpx.HTTPError as e:
            raise VerificationUnavailable(f"Verifier at {self._url} failed: {e}") from e
        except ValueError as e:
            raise VerificationUnavailable(f"Verifier returned invalid JSON: {e}") from e

        if isinstance(data, dict):
            data = data.get("score")
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            raise VerificationUnavailable(f"Verifier returned no numeric score: {data!r}")

        try:
            score = clamp_score(data)
        except ValueError as e:
            raise VerificationUnavailable(f"Verifier returned an unusable score: {e}") from e
        logger.info("Verifier scored %r at %.2f", draft.title, score)
        return score
