"""Schemas for batch validation results."""

from pydantic import BaseModel


class BatchError(BaseModel):
    """The error raised while validating the item at `index`."""
    index: int
    error: Exception

    model_config = {"arbitrary_types_allowed": True}


class BatchValidationResult(BaseModel):
    success: bool
    errors: list[BatchError] = []
