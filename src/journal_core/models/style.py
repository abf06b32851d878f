"""Transformation style model."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class StyleConfiguration(BaseModel):
    """Model parameters sent to the transformation API for one visual style."""

    model_config = ConfigDict(frozen=True)

    name: StrictStr = Field(..., description="Display name of the style")
    model: StrictStr = Field(..., description="Inference model identifier")
    positive_prompt: StrictStr = Field(..., description="Prompt describing the target style")
    cfg_scale: float = Field(1.0, gt=0, description="Classifier-free guidance scale")
    additional_parameters: dict[str, Any] = Field(
        default_factory=dict,
        description="Extra inference parameters merged into the request",
    )
