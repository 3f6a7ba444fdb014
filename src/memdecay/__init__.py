"""memdecay - Time-weighted retrieval for AI agent memory.

Documents are ranked by semantic similarity plus an exponential decay of the
hours since they were last retrieved, so memories that keep being useful stay
fresh and neglected ones fade.

Example:
    ```python
    from memdecay import TimeWeightedRetriever
    from memdecay.embeddings import OpenAIEmbedAdapter

    retriever = TimeWeightedRetriever(
        embedding_client=OpenAIEmbedAdapter(),
        decay_rate=0.01,
        other_score_keys=["importance"],
    )

    await retriever.insert("The user is allergic to peanuts", {"importance": 0.5})
    result = await retriever.query("What should I avoid cooking?", k=3)
    print(result.to_prompt())
    ```
"""

from memdecay.config import RetrieverConfig
from memdecay.exceptions import (
    EmbeddingUnavailable,
    InvalidConfiguration,
    MemdecayError,
    SimilarityComputationFailed,
)
from memdecay.models import Document, QueryResult, ScoredDocument
from memdecay.retrieval import TimeWeightedRetriever

__all__ = [
    "TimeWeightedRetriever",
    "RetrieverConfig",
    "Document",
    "ScoredDocument",
    "QueryResult",
    "MemdecayError",
    "EmbeddingUnavailable",
    "SimilarityComputationFailed",
    "InvalidConfiguration",
]
