"""Abstract contract for durable local blob storage."""

from abc import ABC, abstractmethod


class DurableKeyValueStore(ABC):
    """Contract for small blobs that survive process restarts."""

    @abstractmethod
    def read_blob(self, key: str) -> bytes | None:
        """Return the blob stored under *key*, or None if absent."""

    @abstractmethod
    def write_blob(self, key: str, data: bytes) -> None:
        """Replace the blob stored under *key* with *data*."""
