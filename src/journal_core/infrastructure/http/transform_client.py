"""HTTP client for the image stylization API."""

import base64
import os
from typing import Any
import uuid

from aws_lambda_powertools import Logger
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
import requests

from journal_core.models.errors import TransformApiError
from journal_core.models.style import StyleConfiguration
from journal_core.repositories.transform_api import TransformAPI
from journal_core.utils.constants import (
    ENV_TRANSFORM_API_KEY,
    ENV_TRANSFORM_API_URL,
    ERROR_CODE_TRANSFORM_INVALID_RESPONSE,
    TRANSFORM_DEFAULT_ENDPOINT,
    TRANSFORM_JPEG_MIME_TYPE,
    TRANSFORM_REQUEST_TIMEOUT_SECONDS,
)

logger = Logger(UTC=True)


class TransformResultItem(BaseModel):
    """One task result returned by the API."""

    model_config = ConfigDict(populate_by_name=True)

    task_type: str = Field(..., alias="taskType")
    task_uuid: str = Field(..., alias="taskUUID")
    image_uuid: str | None = Field(None, alias="imageUUID")
    image_url: str | None = Field(None, alias="imageURL")
    cost: float | None = None


class TransformApiErrorItem(BaseModel):
    """One error entry returned by the API."""

    code: str
    message: str


class TransformResponse(BaseModel):
    """Envelope of an API response; either list may be absent."""

    data: list[TransformResultItem] | None = None
    errors: list[TransformApiErrorItem] | None = None


class HttpTransformClient(TransformAPI):
    """Single-shot client: one POST, one final answer, no polling."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        endpoint: str | None = None,
        timeout: float = TRANSFORM_REQUEST_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        resolved_key = api_key or os.getenv(ENV_TRANSFORM_API_KEY)
        if not resolved_key:
            raise RuntimeError(f"{ENV_TRANSFORM_API_KEY} environment variable is not set")

        self._api_key = resolved_key
        self._endpoint = endpoint or os.getenv(ENV_TRANSFORM_API_URL, TRANSFORM_DEFAULT_ENDPOINT)
        self._timeout = timeout
        self._session = session or requests.Session()

    def build_payload(self, *, image_bytes: bytes, style: StyleConfiguration) -> list[dict[str, Any]]:
        """Build the task list sent to the API."""
        encoded = base64.b64encode(image_bytes).decode("ascii")
        inference: dict[str, Any] = {
            "taskType": "imageInference",
            "taskUUID": str(uuid.uuid4()),
            "model": style.model,
            "positivePrompt": style.positive_prompt,
            "referenceImages": [f"data:{TRANSFORM_JPEG_MIME_TYPE};base64,{encoded}"],
            "CFGScale": style.cfg_scale,
            "includeCost": True,
        }
        inference.update(style.additional_parameters)

        return [
            {"taskType": "authentication", "apiKey": self._api_key},
            inference,
        ]

    def submit(self, *, image_bytes: bytes, style: StyleConfiguration) -> str:
        """Submit the image and return the URL of the transformed result."""
        logger.info(
            "Submitting image for transformation",
            extra={"style": style.name, "model": style.model, "size": len(image_bytes)},
        )

        payload = self.build_payload(image_bytes=image_bytes, style=style)

        try:
            response = self._session.post(
                self._endpoint,
                json=payload,
                timeout=self._timeout,
            )
        except requests.Timeout as exc:
            logger.warning("Transformation request timed out", extra={"style": style.name})
            raise TransformApiError(
                message="The transformation took too long",
                details={"style": style.name},
            ) from exc
        except requests.RequestException as exc:
            logger.error("Transformation request failed", extra={"style": style.name})
            raise TransformApiError(
                message="Unable to reach the transformation service",
                details={"style": style.name},
            ) from exc

        try:
            decoded = TransformResponse.model_validate(response.json())
        except (ValueError, PydanticValidationError) as exc:
            logger.error(
                "Transformation response could not be decoded",
                extra={"status": response.status_code},
            )
            raise TransformApiError(
                message="Invalid response from transformation service",
                error_code=ERROR_CODE_TRANSFORM_INVALID_RESPONSE,
                details={"status": response.status_code},
            ) from exc

        for item in decoded.data or []:
            if item.cost is not None:
                logger.info("Transformation cost", extra={"cost": f"{item.cost:.4f}"})
            if item.image_url:
                logger.info(
                    "Transformation succeeded",
                    extra={"task_uuid": item.task_uuid, "image_url": item.image_url},
                )
                return item.image_url

        if decoded.errors:
            first = decoded.errors[0]
            logger.warning(
                "Transformation rejected",
                extra={"code": first.code, "error": first.message},
            )
            raise TransformApiError(
                message=first.message,
                details={"code": first.code},
            )

        raise TransformApiError(
            message="Unknown error",
            error_code=ERROR_CODE_TRANSFORM_INVALID_RESPONSE,
            details={"status": response.status_code},
        )
