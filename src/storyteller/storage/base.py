from __future__ import annotations

from abc import ABC, abstractmethod


class BlobStore(ABC):
    """Write-only object sink addressed by deterministic keys.

    Implementations must overwrite an existing object at the same key and
    must not decorate the key (no random suffixes).
    """

    @abstractmethod
    async def put(self, key: str, body: bytes, content_type: str) -> str:
        """Store *body* at *key* and return its public URL."""
        raise NotImplementedError

    async def aclose(self) -> None:
        return None
