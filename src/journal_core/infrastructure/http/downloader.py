"""Blocking HTTP download of remote image bytes."""

from aws_lambda_powertools import Logger
import requests

from journal_core.models.errors import DownloadError
from journal_core.utils.constants import IMAGE_FETCH_TIMEOUT_SECONDS

logger = Logger(UTC=True)


def download_bytes(url: str, *, timeout: float = IMAGE_FETCH_TIMEOUT_SECONDS) -> bytes:
    """Download *url* and return the response body.

    Raises:
        DownloadError: On transport failure, timeout or non-2xx status
    """
    logger.debug("Downloading image", extra={"url": url, "timeout": timeout})

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()

    except requests.Timeout as exc:
        logger.warning("Image download timed out", extra={"url": url})
        raise DownloadError(
            message="Downloading the image took too long",
            details={"url": url, "timeout": timeout},
        ) from exc

    except requests.RequestException as exc:
        logger.error("Image download failed", extra={"url": url})
        raise DownloadError(
            message="Unable to download image",
            details={"url": url},
        ) from exc

    content = response.content
    logger.debug("Image downloaded", extra={"url": url, "size": len(content)})
    return content
