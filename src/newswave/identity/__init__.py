"""Signing identity providers and the session handle."""

from newswave.identity.base import IdentityListener, IdentityProvider
from newswave.identity.node import NodeAccountIdentity
from newswave.identity.session import Session
from newswave.identity.static import StaticIdentity

__all__ = [
    "IdentityListener",
    "IdentityProvider",
    "NodeAccountIdentity",
    "Session",
    "StaticIdentity",
]
