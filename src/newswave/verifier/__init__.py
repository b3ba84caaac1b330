"""Content verification module."""

from newswave.verifier.base import ContentVerifier, clamp_score
from newswave.verifier.claude import ClaudeVerifier
from newswave.verifier.fixed import FixedVerifier
from newswave.verifier.http import HttpVerifier

__all__ = [
    "ClaudeVerifier",
    "ContentVerifier",
    "FixedVerifier",
    "HttpVerifier",
    "clamp_score",
]
