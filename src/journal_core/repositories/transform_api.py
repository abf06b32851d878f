"""Abstract contract for the third-party image stylization API."""

from abc import ABC, abstractmethod

from journal_core.models.style import StyleConfiguration


class TransformAPI(ABC):
    """Contract for a single-shot image transformation call.

    There is no polling: the call returns the final result URL or fails.
    The caller downloads the result itself.
    """

    @abstractmethod
    def submit(self, *, image_bytes: bytes, style: StyleConfiguration) -> str:
        """Submit *image_bytes* for transformation and return the result URL.

        Args:
            image_bytes: JPEG-encoded source image
            style: Model and prompt parameters of the target style

        Returns:
            URL of the transformed image

        Raises:
            TransformApiError: If the API rejects the request or fails
        """
