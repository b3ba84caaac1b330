"""Claude-based content verifier using structured JSON output."""

import json
import logging
import os

import anthropic

from newswave.data import ContentBlob
from newswave.errors import VerificationTimeout, VerificationUnavailable
from newswave.verifier.base import clamp_score

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are a fact-checking assistant for a public news ledger. Given a news \
article submitted by an anonymous author, estimate how trustworthy it is. \
Respond ONLY with a JSON object (no markdown fences, no commentary) of the \
form {"score": <float>, "reason": "<one sentence>"}.

"score" is a float from 0.0 to 1.0. Use the full range of the scale:
  - 0.9-1.0: Specific, internally consistent, plausible claims that match \
well-established facts; neutral tone; verifiable details (who, what, where, when).
  - 0.7-0.8: Plausible and mostly specific reporting with minor gaps or \
unverifiable details, but no red flags.
  - 0.4-0.6: Vague, one-sided or partly unverifiable; some sensational framing \
or missing key details.
  - 0.1-0.3: Strong signs of misinformation: implausible claims, emotional \
manipulation, internal contradictions.
  - 0.0: Fabricated or nonsensical content.\
"""


def _draft_to_prompt_text(draft: ContentBlob) -> str:
    """Format a draft for inclusion in the verification prompt."""
    parts = [f"Title: {draft.title}"]
    parts.append(f"Author: {draft.author}")
    parts.append("")
    parts.append(draft.body)
    return "\n".join(parts)


def _parse_score(text: str) -> float:
    """Extract the score from the model reply.

    Raises:
        ValueError: If the reply holds no numeric score.
    """
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = [line for line in cleaned.split("\n") if not line.strip().startswith("```")]
        cleaned = "\n".join(lines)

    parsed = json.loads(cleaned)
    if isinstance(parsed, dict):
        parsed = parsed.get("score")
    if isinstance(parsed, bool) or not isinstance(parsed, (int, float)):
        raise ValueError(f"No numeric score in reply: {text!r}")
    return clamp_score(parsed)


class ClaudeVerifier:
    """Score drafts with Claude.

    The SDK's own retries are disabled so each ``score`` call is exactly one
    request.

    Args:
        model: Anthropic model to use.
        api_key: API key (defaults to CLAUDE_API_KEY env var).
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        model: str = "claude-haiku-4-5-20251001",
        api_key: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        resolved_key = api_key or os.environ.get("CLAUDE_API_KEY")
        self._client = anthropic.AsyncAnthropic(
            api_key=resolved_key, timeout=timeout, max_retries=0
        )
        self._model = model

    async def score(self, draft: ContentBlob) -> float:
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=256,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": _draft_to_prompt_text(draft)}],
            )
        except anthropic.APITimeoutError as e:
            raise VerificationTimeout(f"Claude verification timed out: {e}") from e
        except anthropic.APIError as e:
            raise VerificationUnavailable(f"Claude verification failed: {e}") from e

        response_text = ""
        for block in response.content:
            if hasattr(block, "text"):
                response_text += block.text

        try:
            score = _parse_score(response_text)
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            raise VerificationUnavailable(f"Malformed verification reply: {e}") from e

        logger.info("Claude scored %r at %.2f", draft.title, score)
        return score
