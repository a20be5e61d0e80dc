"""Application layer: key loading, token service, and CLI dispatch."""

from .key_store import KeyNotFoundError, KeyStore
from .token_service import TokenService, TokenServiceError

__all__ = [
    "KeyNotFoundError",
    "KeyStore",
    "TokenService",
    "TokenServiceError",
]
