"""Abstract contract for remote object storage."""

from abc import ABC, abstractmethod
from collections.abc import Sequence


class RemoteObjectStore(ABC):
    """Contract for storing image objects and granting read access to them.

    Implementations could be S3, GCS, Supabase Storage, etc.
    Components depend on this interface, not the implementation.
    """

    @abstractmethod
    def upload(
        self,
        *,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
    ) -> None:
        """Upload *data* at *path*.

        Raises:
            ObjectStoreError: If upload fails
        """

    @abstractmethod
    def get_signed_url(self, *, bucket: str, path: str, expiry_seconds: int) -> str:
        """Return a time-limited URL granting read access to *path*.

        Raises:
            ObjectStoreError: If the URL cannot be generated
        """

    @abstractmethod
    def get_public_url(self, *, bucket: str, path: str) -> str:
        """Return the non-expiring public URL of *path*."""

    @abstractmethod
    def remove(self, *, bucket: str, paths: Sequence[str]) -> None:
        """Delete every object in *paths*.

        Raises:
            ObjectStoreError: If deletion fails
        """
