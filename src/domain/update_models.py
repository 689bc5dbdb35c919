"""Update models for database operations."""

from typing import Literal

from pydantic import BaseModel


class CompletionStatusUpdate(BaseModel):
    """Evaluator decision for a completion under evaluation."""

    status: Literal["approved", "rejected"]
    feedback: str | None = None
