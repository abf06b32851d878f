"""Input validation utilities."""

from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from journal_core.models.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def sanitize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Sanitize Pydantic validation errors for user-facing messages.

    Removes internal fields like:
    - url
    - ctx
    - input
    """
    sanitized: list[dict[str, str]] = []

    for err in errors:
        field = ".".join(str(x) for x in err.get("loc", [])) or "input"
        raw_msg = err.get("msg", "Invalid value")

        # Remove noisy prefixes
        msg = raw_msg.replace("Value error,", "").strip()

        msg_lower = msg.lower()
        if "field required" in msg_lower:
            msg = "This field is required"
        elif "at most" in msg_lower:
            msg = "This value is too long"

        sanitized.append(
            {
                "field": field,
                "message": msg,
            }
        )

    return sanitized


def validate_input(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    """Validate *data* against a Pydantic model.

    Raises:
        ValidationError: With sanitized field errors in ``details``
    """
    try:
        return model(**data)

    except PydanticValidationError as exc:
        sanitized_errors = sanitize_validation_errors(exc.errors())
        raise ValidationError(
            message=sanitized_errors[0]["message"] if sanitized_errors else "Invalid input",
            details={"errors": sanitized_errors},
        ) from exc
