"""Global constants used throughout the application.

This module centralizes all magic numbers, string literals, and configuration
values that are used across multiple modules. Using constants prevents hardcoding
values and makes it easy to change them globally.
"""

from typing import Final

# ============================================================================
# Error Codes
# ============================================================================


# Validation Errors
ERROR_CODE_VALIDATION_FAILED = "VALIDATION_FAILED"
ERROR_CODE_INVALID_RANGE = "INVALID_RANGE"
ERROR_CODE_UNSUPPORTED_MIME_TYPE = "UNSUPPORTED_MIME_TYPE"

# Auth / Ownership Errors
ERROR_CODE_UNAUTHENTICATED = "UNAUTHENTICATED"
ERROR_CODE_NOT_FOUND_OR_FORBIDDEN = "NOT_FOUND_OR_FORBIDDEN"

# Object Storage Errors
ERROR_CODE_OBJECT_STORE = "OBJECT_STORE_ERROR"
ERROR_CODE_OBJECT_UPLOAD_FAILED = "OBJECT_UPLOAD_FAILED"
ERROR_CODE_OBJECT_REMOVE_FAILED = "OBJECT_REMOVE_FAILED"
ERROR_CODE_SIGNED_URL_FAILED = "SIGNED_URL_FAILED"

# Data Store Errors
ERROR_CODE_DATA_STORE = "DATA_STORE_ERROR"
ERROR_CODE_QUERY_FAILED = "QUERY_FAILED"
ERROR_CODE_INSERT_FAILED = "INSERT_FAILED"
ERROR_CODE_UPDATE_FAILED = "UPDATE_FAILED"
ERROR_CODE_DELETE_FAILED = "DELETE_FAILED"
ERROR_CODE_COUNT_FAILED = "COUNT_FAILED"
ERROR_CODE_ROW_INVALID_FORMAT = "ROW_INVALID_FORMAT"

# Transform / Download Errors
ERROR_CODE_TRANSFORM_FAILED = "TRANSFORM_FAILED"
ERROR_CODE_TRANSFORM_INVALID_RESPONSE = "TRANSFORM_INVALID_RESPONSE"
ERROR_CODE_DOWNLOAD_FAILED = "DOWNLOAD_FAILED"


# ============================================================================
# Remote Tables and Buckets
# ============================================================================

TABLE_PHOTOS: Final = "photos"
TABLE_LIKES: Final = "likes"
TABLE_COMMENTS: Final = "comments"
TABLE_PROFILES: Final = "profiles"

ALL_TABLES: Final[tuple[str, ...]] = (
    TABLE_PHOTOS,
    TABLE_LIKES,
    TABLE_COMMENTS,
    TABLE_PROFILES,
)

PHOTO_BUCKET: Final = "photos"


# ============================================================================
# Image Cache
# ============================================================================

IMAGE_CACHE_COUNT_LIMIT: Final = 100
IMAGE_CACHE_BYTES_LIMIT: Final = 100 * 1024 * 1024  # 100MB
IMAGE_FETCH_TIMEOUT_SECONDS: Final = 30.0
PRELOAD_IMAGE_LIMIT: Final = 10


# ============================================================================
# Gallery
# ============================================================================

SIGNED_URL_EXPIRY_SECONDS: Final = 60 * 60  # 1 hour
GALLERY_STATE_BLOB_KEY: Final = "gallery_state"


# ============================================================================
# Transform Jobs / Notifications
# ============================================================================

SUCCESS_DISMISS_DELAY_SECONDS: Final = 3.0
ERROR_DISMISS_DELAY_SECONDS: Final = 4.0

TRANSFORMING_SINGLE_MESSAGE: Final = "Transforming image..."
TRANSFORMING_MANY_MESSAGE: Final = "Transforming {count} images..."
SUCCESS_MESSAGE: Final = "Photo successfully uploaded!"
ERROR_MESSAGE: Final = "Upload failed: {error}"

TRANSFORM_REQUEST_TIMEOUT_SECONDS: Final = 120.0
TRANSFORM_DEFAULT_ENDPOINT: Final = "https://api.runware.ai/v1"
TRANSFORM_JPEG_MIME_TYPE: Final = "image/jpeg"


# ============================================================================
# Feed / Pagination Constraints
# ============================================================================

DEFAULT_PAGE_SIZE = 20
MIN_LIMIT = 1
MAX_LIMIT = 100
DEFAULT_OFFSET = 0
DEFAULT_COMMENT_PAGE_SIZE = 50


# ============================================================================
# File Upload Constraints
# ============================================================================

MIME_TYPE_EXTENSION_MAP: Final[dict[str, tuple[str, ...]]] = {
    "image/jpeg": ("jpg", "jpeg"),
    "image/png": ("png",),
    "image/gif": ("gif",),
    "image/webp": ("webp",),
}

ALLOWED_MIME_TYPES: Final[frozenset[str]] = frozenset(MIME_TYPE_EXTENSION_MAP.keys())


# ============================================================================
# Environment Variable Names
# ============================================================================

ENV_AWS_ENDPOINT_URL = "AWS_ENDPOINT_URL"
ENV_AWS_REGION = "AWS_REGION"
ENV_PHOTO_BUCKET_NAME = "JOURNAL_PHOTO_BUCKET_NAME"
ENV_TABLE_PREFIX = "JOURNAL_TABLE_PREFIX"
ENV_TRANSFORM_API_URL = "TRANSFORM_API_URL"
ENV_TRANSFORM_API_KEY = "TRANSFORM_API_KEY"
ENV_CACHE_DIR = "JOURNAL_CACHE_DIR"

DEFAULT_AWS_REGION = "us-east-1"

