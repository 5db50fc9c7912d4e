"""
Recipe Diversity - Generation.

- orchestrator: adaptive-temperature accept/retry loop
- categories: per-category acceptance thresholds
- models: request and outcome models
"""

from recipe_diversity.generation.models import (
    DiversityExhausted,
    GenerationOutcome,
    GenerationRequest,
    GenerationSuccess,
    parse_generation_request,
)
from recipe_diversity.generation.orchestrator import GenerationOrchestrator

__all__ = [
    "DiversityExhausted",
    "GenerationOrchestrator",
    "GenerationOutcome",
    "GenerationRequest",
    "GenerationSuccess",
    "parse_generation_request",
]
