"""Exceptions raised by memdecay."""

from uuid import UUID


class MemdecayError(Exception):
    """Base exception for memdecay."""


class EmbeddingUnavailable(MemdecayError):
    """The embedding client failed, timed out, or returned an unusable vector."""


class SimilarityComputationFailed(MemdecayError):
    """The similarity function failed for a query/document pair."""

    def __init__(self, message: str, document_id: UUID | None = None):
        super().__init__(message)
        self.document_id = document_id


class InvalidConfiguration(MemdecayError, ValueError):
    """A retriever setting or call argument is out of range."""
