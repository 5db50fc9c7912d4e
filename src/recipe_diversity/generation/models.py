"""
Recipe Diversity - Generation request and outcome models.

A request ends in exactly one of:
- GenerationSuccess: a recipe was accepted and saved
- DiversityExhausted: every attempt was rejected; nothing was saved
- an exception (RequestValidationError, GenerationError, StoreError)
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from recipe_diversity.errors import RequestValidationError
from recipe_diversity.models.entities import RecipeDraft


class GenerationState(str, Enum):
    """Orchestrator states for one request."""

    IDLE = "idle"
    ATTEMPTING = "attempting"
    ACCEPTED = "accepted"
    EXHAUSTED = "exhausted"


class GenerationRequest(BaseModel):
    """Inbound generation request."""

    meal_type: str
    style_type: str
    user_id: str
    conversation_id: str
    max_retries: int = Field(default=3, ge=1, le=10)
    similarity_threshold: float = Field(default=0.85, gt=0.0, le=1.0)
    temporal_window_days: int = Field(default=14, ge=1, le=365)

    @field_validator("meal_type", "style_type", "user_id", "conversation_id")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class AcceptedRecipe(RecipeDraft):
    """The accepted draft plus its assigned id."""

    id: str


class GenerationMetadata(BaseModel):
    was_retried: bool
    attempts: int
    similarity_score: float
    diversity_score: float
    latency_ms: int
    recent_recipes_checked: int
    temperature: float


class GenerationSuccess(BaseModel):
    success: Literal[True] = True
    recipe: AcceptedRecipe
    recipe_id: str
    metadata: GenerationMetadata


class DiversityExhausted(BaseModel):
    """Structured "couldn't find something different enough" outcome."""

    success: Literal[False] = False
    kind: Literal["diversity_exhaustion"] = "diversity_exhaustion"
    message: str
    attempts: int
    final_similarity: float
    final_diversity: float
    similarity_threshold: float
    diversity_threshold: float
    quality_bar: str
    weaknesses: list[str] = Field(default_factory=list)
    # From the last attempt
    preference_violations: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    recent_recipes_checked: int = 0
    latency_ms: int = 0


GenerationOutcome = GenerationSuccess | DiversityExhausted


def parse_generation_request(payload: dict[str, Any]) -> GenerationRequest:
    """
    Validate a raw request payload.

    Raises:
        RequestValidationError: Naming the first missing or invalid field.
    """
    try:
        return GenerationRequest.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "body"
        if first["type"] == "missing":
            raise RequestValidationError(field) from e
        raise RequestValidationError(field, f"'{field}': {first['msg']}") from e
