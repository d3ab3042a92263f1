"""Request payloads accepted by the recipe API.

The ingredients arrive as a single comma separated string and are split by the
storage layer, so every field here is a plain string.
"""

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from .errors import RecipeValidationError


class RecipeInput(BaseModel):
    """Body of the create and update operations."""

    model_config = ConfigDict(extra="ignore")

    title: StrictStr = Field(..., description="Recipe title")
    ingredients: StrictStr = Field(..., description="Comma separated ingredients")
    instructions: StrictStr = Field(..., description="Free text instructions")
    author: StrictStr = Field(..., description="Recipe author")

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> "RecipeInput":
        if not isinstance(payload, Mapping):
            raise RecipeValidationError("Request body must be a JSON object.")

        try:
            return cls.model_validate(dict(payload))
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in exc.errors()
            )
            raise RecipeValidationError(f"Invalid recipe: {problems}") from exc


__all__ = ["RecipeInput"]
