"""Error taxonomy shared by the remote-call boundaries."""
from typing import Optional


class KofiBotError(Exception):
    """Base class for all errors raised inside kofibot."""


class TransientRemoteFailure(KofiBotError):
    """Network error, 5xx or 'model loading'; safe to retry."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PermanentRemoteFailure(KofiBotError):
    """Malformed response or auth failure; retrying cannot help."""


class EmbeddingError(PermanentRemoteFailure):
    pass


class EmbeddingUnavailable(EmbeddingError):
    """Raised when every embedding attempt failed with a transient error."""

    def __init__(self, attempts: int, last_error: Exception):
        super().__init__(f"Embedding service unavailable after {attempts} attempt(s): {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class EmbeddingFormatError(EmbeddingError):
    """The service answered, but not with a numeric vector of the expected length."""


class EmbeddingRejected(EmbeddingError):
    """The service refused the request (4xx other than rate limiting)."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class GenerationError(PermanentRemoteFailure):
    pass


class IngestionError(KofiBotError):
    """Raised when one chunk cannot be embedded; nothing is upserted."""

    def __init__(self, chunk_id: str, cause: Exception):
        super().__init__(f"Ingestion failed at chunk {chunk_id}: {cause}")
        self.chunk_id = chunk_id
        self.cause = cause
