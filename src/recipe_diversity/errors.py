"""
Recipe Diversity - Error taxonomy.

Diversity exhaustion is deliberately absent: running out of attempts is a
normal outcome and is returned as a DiversityExhausted result, not raised.
"""


class DiversityEngineError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(DiversityEngineError):
    """Invalid static configuration. Raised at import/startup, never per request."""


class DimensionMismatchError(DiversityEngineError, ValueError):
    """Two embedding vectors of different lengths were compared."""

    def __init__(self, left: int, right: int):
        super().__init__(f"Embedding dimension mismatch: {left} != {right}")
        self.left = left
        self.right = right


class RequestValidationError(DiversityEngineError, ValueError):
    """A generation request is missing a required field."""

    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"'{field}' is required")
        self.field = field


class GenerationError(DiversityEngineError):
    """The recipe generator failed or returned nothing usable."""


class StoreError(DiversityEngineError):
    """A read or write against the memory store failed."""

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
