"""S3-backed implementation of RemoteObjectStore."""

from collections.abc import Sequence
from urllib.parse import quote

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from journal_core.infrastructure.adapters.s3_adapter import S3Adapter, S3AdapterProtocol
from journal_core.models.errors import NotFoundError, ObjectStoreError
from journal_core.repositories.object_store import RemoteObjectStore
from journal_core.utils.constants import (
    ERROR_CODE_OBJECT_REMOVE_FAILED,
    ERROR_CODE_OBJECT_UPLOAD_FAILED,
    ERROR_CODE_SIGNED_URL_FAILED,
)

logger = Logger(UTC=True)


class S3ObjectStore(RemoteObjectStore):
    """Object storage implementation backed by Amazon S3."""

    def __init__(self, adapter: S3AdapterProtocol | None = None) -> None:
        """Create storage using the provided S3 adapter."""
        self._s3: S3AdapterProtocol = adapter or S3Adapter()

    def upload(
        self,
        *,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str,
    ) -> None:
        """Upload object bytes to S3."""
        logger.debug(
            "Uploading object",
            extra={"bucket": bucket, "path": path, "size": len(data)},
        )

        try:
            self._s3.put_object(
                bucket=bucket,
                key=path,
                body=data,
                content_type=content_type,
            )
            logger.info("Object uploaded successfully", extra={"path": path})

        except ClientError as exc:
            logger.error("S3 upload failed", extra={"path": path})
            raise ObjectStoreError(
                message="Unable to upload image at this time",
                error_code=ERROR_CODE_OBJECT_UPLOAD_FAILED,
                details={"path": path},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error uploading object")
            raise ObjectStoreError(
                message="Unable to upload image at this time",
                error_code=ERROR_CODE_OBJECT_UPLOAD_FAILED,
                details={"path": path},
            ) from exc

    def get_signed_url(self, *, bucket: str, path: str, expiry_seconds: int) -> str:
        """Generate a pre-signed S3 URL for reading an object."""
        logger.debug(
            "Generating pre-signed S3 URL",
            extra={"path": path, "expires_in": expiry_seconds},
        )

        try:
            url: str = self._s3.generate_presigned_url(
                method="get_object",
                params={"Key": path},
                expires_in=expiry_seconds,
            )

            return url
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == "NoSuchKey":
                raise NotFoundError(
                    message="Image not found",
                    details={"path": path},
                ) from exc

            logger.error("Failed to generate pre-signed URL", extra={"path": path})
            raise ObjectStoreError(
                message="Unable to generate image access URL",
                error_code=ERROR_CODE_SIGNED_URL_FAILED,
                details={"path": path},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error generating pre-signed URL")
            raise ObjectStoreError(
                message="Unable to generate image access URL",
                error_code=ERROR_CODE_SIGNED_URL_FAILED,
                details={"path": path},
            ) from exc

    def get_public_url(self, *, bucket: str, path: str) -> str:
        """Build the public URL of an object; nothing is requested from S3."""
        physical = self._s3.bucket_name(bucket)
        key = quote(path)

        if self._s3.endpoint_url:
            return f"{self._s3.endpoint_url.rstrip('/')}/{physical}/{key}"

        return f"https://{physical}.s3.{self._s3.region}.amazonaws.com/{key}"

    def remove(self, *, bucket: str, paths: Sequence[str]) -> None:
        """Delete objects from S3."""
        if not paths:
            return

        logger.debug("Deleting objects", extra={"paths": list(paths)})

        try:
            response = self._s3.delete_objects(bucket=bucket, keys=paths)

        except ClientError as exc:
            logger.error("S3 deletion failed", extra={"paths": list(paths)})
            raise ObjectStoreError(
                message="Unable to delete image at this time",
                error_code=ERROR_CODE_OBJECT_REMOVE_FAILED,
                details={"paths": list(paths)},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error deleting objects")
            raise ObjectStoreError(
                message="Unable to delete image at this time",
                error_code=ERROR_CODE_OBJECT_REMOVE_FAILED,
                details={"paths": list(paths)},
            ) from exc

        errors = response.get("Errors") or []
        if errors:
            logger.error("S3 reported per-object deletion errors", extra={"errors": errors})
            raise ObjectStoreError(
                message="Unable to delete image at this time",
                error_code=ERROR_CODE_OBJECT_REMOVE_FAILED,
                details={"paths": [error.get("Key") for error in errors]},
            )

        logger.info("Objects deleted successfully", extra={"count": len(paths)})
