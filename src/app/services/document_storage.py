from abc import ABC, abstractmethod


class DocumentStorageError(Exception):
    """Raised when a document cannot be fetched or stored"""


class IDocumentStorage(ABC):
    """Document storage interface - application layer"""

    @abstractmethod
    async def fetch(self, url: str) -> bytes:
        """Get document bytes by URL; raises DocumentStorageError"""
        pass

    @abstractmethod
    async def store(self, key: str, content: bytes) -> str:
        """
        Store a new artifact under key and return a URL that fetch() accepts.

        Existing originals are never overwritten: callers pass keys that
        are unique to the artifact being produced.
        """
        pass
