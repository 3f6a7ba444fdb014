"""Interfaces for the collaborators a retriever is built from."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingClient(Protocol):
    """Maps text to a fixed-length vector."""

    async def embed(self, text: str) -> list[float]: ...

    async def embed_batch(self, texts: list[str]) -> list[list[float]]: ...


class SimilarityFunction(Protocol):
    """Scores two vectors; higher means more similar.

    The range participates additively in the final score alongside the decay
    term (in [0, 1]) and any metadata bonus, so implementations should
    document it.
    """

    def __call__(self, a: Sequence[float], b: Sequence[float], /) -> float: ...
