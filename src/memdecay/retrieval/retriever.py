"""Time-weighted retrieval combining semantic similarity with recency of access."""

from __future__ import annotations

import logging
import math
import threading
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, NamedTuple
from uuid import UUID

from memdecay.cache import EmbeddingCache
from memdecay.config import RetrieverConfig, validate_k
from memdecay.exceptions import EmbeddingUnavailable, MemdecayError, SimilarityComputationFailed
from memdecay.models import Document, QueryResult, ScoredDocument, utc_now
from memdecay.scoring import combined_score, decay_term, hours_passed, metadata_bonus
from memdecay.similarity import cosine_similarity

if TYPE_CHECKING:
    from memdecay.protocols import EmbeddingClient, SimilarityFunction

logger = logging.getLogger(__name__)


class _Scored(NamedTuple):
    score: float
    semantic_score: float
    decay_term: float
    bonus: float
    document: Document


def _as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _snapshot(document: Document) -> Document:
    """Copy a stored document for a caller; metadata values are shared, not copied."""
    return document.model_copy(update={"metadata": dict(document.metadata), "embedding": list(document.embedding)})


class TimeWeightedRetriever:
    """
    In-memory retriever ranking documents by similarity plus recency of access.

    score = similarity(query, doc) + (1 - decay_rate) ** hours_since_last_access + bonus

    Returning a document from query() refreshes its last_accessed_at, so
    documents that keep being relevant resist decay while neglected ones fade
    toward their semantic score.

    Embedding calls are the only await points. Scoring, ranking and the
    last_accessed_at commit run under one lock with no suspension inside, so a
    query sees a consistent snapshot and its refresh is all-or-nothing.

    Example:
        ```python
        retriever = TimeWeightedRetriever(embedding_client=OpenAIEmbedAdapter(), decay_rate=0.01)
        await retriever.insert("The user prefers dark roast coffee", {"importance": 0.3})
        result = await retriever.query("What coffee does the user like?", k=3)
        print(result.to_prompt())
        ```
    """

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        similarity: SimilarityFunction | None = None,
        config: RetrieverConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        # Scoring config
        decay_rate: float | None = None,
        k: int | None = None,
        other_score_keys: Sequence[str] | None = None,
        default_salience: float | None = None,
        # Cache config
        enable_embedding_cache: bool | None = None,
        embedding_cache_size: int | None = None,
        embedding_cache_ttl_seconds: int | None = None,
    ):
        if embedding_client is None:
            raise ValueError("embedding_client is required")

        # Use param if provided, else use config value
        cfg = config or RetrieverConfig()
        self.config = RetrieverConfig(
            decay_rate=decay_rate if decay_rate is not None else cfg.decay_rate,
            k=k if k is not None else cfg.k,
            other_score_keys=list(other_score_keys if other_score_keys is not None else cfg.other_score_keys),
            default_salience=default_salience if default_salience is not None else cfg.default_salience,
            enable_embedding_cache=enable_embedding_cache if enable_embedding_cache is not None else cfg.enable_embedding_cache,
            embedding_cache_size=embedding_cache_size if embedding_cache_size is not None else cfg.embedding_cache_size,
            embedding_cache_ttl_seconds=(
                embedding_cache_ttl_seconds if embedding_cache_ttl_seconds is not None else cfg.embedding_cache_ttl_seconds
            ),
        )
        self.config.validate()

        self.embedder = embedding_client
        self.similarity: SimilarityFunction = similarity or cosine_similarity
        self._clock = clock or utc_now

        self._embedding_cache: EmbeddingCache | None = None
        if self.config.enable_embedding_cache:
            self._embedding_cache = EmbeddingCache(
                max_size=self.config.embedding_cache_size,
                ttl_seconds=self.config.embedding_cache_ttl_seconds,
                clock=self._clock,
            )

        self._documents: dict[UUID, Document] = {}
        self._next_buffer_idx = 0
        self._dimensions: int | None = None
        self._lock = threading.Lock()

    @property
    def decay_rate(self) -> float:
        return self.config.decay_rate

    @property
    def k(self) -> int:
        return self.config.k

    @property
    def dimensions(self) -> int | None:
        """Embedding dimensionality of the collection, fixed by the first insert."""
        return self._dimensions

    def _now(self, now: datetime | None) -> datetime:
        return _as_utc(now) if now is not None else _as_utc(self._clock())

    # -------------------------------------------------------------------------
    # Embedding
    # -------------------------------------------------------------------------

    async def _embed(self, text: str) -> list[float]:
        try:
            embedding = await self.embedder.embed(text)
        except MemdecayError:
            raise
        except Exception as exc:
            raise EmbeddingUnavailable(f"Embedding client failed: {exc}") from exc
        return self._coerce_vector(embedding)

    async def _embed_query(self, text: str) -> list[float]:
        if self._embedding_cache is not None:
            with self._lock:
                cached = self._embedding_cache.get(text)
            if cached is not None:
                logger.debug("Query embedding cache hit")
                return cached

        embedding = await self._embed(text)
        with self._lock:
            # A vector the collection cannot use is never cached
            self._check_query_dimensions(embedding)
            if self._embedding_cache is not None:
                self._embedding_cache.set(text, embedding)
        return embedding

    @staticmethod
    def _coerce_vector(embedding: Any) -> list[float]:
        try:
            vector = [float(x) for x in embedding]
        except (TypeError, ValueError) as exc:
            raise EmbeddingUnavailable(f"Embedding client returned a non-numeric vector: {exc}") from exc
        if not vector:
            raise EmbeddingUnavailable("Embedding client returned an empty vector")
        if not all(math.isfinite(x) for x in vector):
            raise EmbeddingUnavailable("Embedding client returned a vector with non-finite values")
        return vector

    def _check_dimensions(self, vectors: Sequence[list[float]]) -> None:
        """Must be called with the lock held."""
        expected = self._dimensions if self._dimensions is not None else len(vectors[0])
        for vector in vectors:
            if len(vector) != expected:
                raise EmbeddingUnavailable(f"Embedding has {len(vector)} dimensions, collection uses {expected}")

    def _check_query_dimensions(self, embedding: list[float]) -> None:
        """Must be called with the lock held."""
        if self._dimensions is not None and len(embedding) != self._dimensions:
            raise EmbeddingUnavailable(f"Query embedding has {len(embedding)} dimensions, collection uses {self._dimensions}")

    # -------------------------------------------------------------------------
    # Insertion
    # -------------------------------------------------------------------------

    @staticmethod
    def _build(content: str, metadata: dict[str, Any], embedding: list[float], timestamp: datetime, buffer_idx: int) -> Document:
        return Document(
            content=content,
            metadata=metadata,
            embedding=embedding,
            created_at=timestamp,
            last_accessed_at=timestamp,
            buffer_idx=buffer_idx,
        )

    def _commit(self, documents: Sequence[Document]) -> None:
        """Must be called with the lock held."""
        for document in documents:
            self._documents[document.id] = document
        self._next_buffer_idx = documents[-1].buffer_idx + 1
        if self._dimensions is None:
            self._dimensions = len(documents[0].embedding)

    async def insert(
        self,
        content: str,
        metadata: Mapping[str, Any] | None = None,
        *,
        now: datetime | None = None,
    ) -> UUID:
        """
        Embed and store a document.

        Args:
            content: Text to embed and store
            metadata: Arbitrary metadata; the mapping is copied, its values are kept as given
            now: Insertion time (defaults to the retriever's clock)

        Returns:
            The new document's id

        Raises:
            EmbeddingUnavailable: The embedding client failed; nothing is stored
        """
        if not isinstance(content, str):
            raise TypeError(f"content must be str, got {type(content).__name__}")
        copied = dict(metadata or {})
        timestamp = self._now(now)

        embedding = await self._embed(content)

        with self._lock:
            self._check_dimensions([embedding])
            document = self._build(content, copied, embedding, timestamp, self._next_buffer_idx)
            self._commit([document])

        logger.info(f"Inserted document {document.id} (buffer_idx={document.buffer_idx})")
        return document.id

    async def insert_many(
        self,
        contents: Sequence[str],
        metadatas: Sequence[Mapping[str, Any] | None] | None = None,
        *,
        now: datetime | None = None,
    ) -> list[UUID]:
        """
        Embed and store several documents with one batch embedding call.

        Either every document is stored, in input order with consecutive
        buffer_idx values, or none is.
        """
        if isinstance(contents, str):
            raise TypeError("contents must be a sequence of str, not a str")
        if not all(isinstance(c, str) for c in contents):
            raise TypeError("contents must all be str")
        if metadatas is not None and len(metadatas) != len(contents):
            raise ValueError(f"Got {len(metadatas)} metadata entries for {len(contents)} documents")
        copied = [dict(m or {}) for m in metadatas] if metadatas is not None else [{} for _ in contents]
        if not contents:
            return []
        timestamp = self._now(now)

        try:
            raw = await self.embedder.embed_batch(list(contents))
        except MemdecayError:
            raise
        except Exception as exc:
            raise EmbeddingUnavailable(f"Embedding client failed: {exc}") from exc
        if len(raw) != len(contents):
            raise EmbeddingUnavailable(f"Embedding client returned {len(raw)} vectors for {len(contents)} texts")
        embeddings = [self._coerce_vector(e) for e in raw]

        with self._lock:
            self._check_dimensions(embeddings)
            start = self._next_buffer_idx
            documents = [
                self._build(content, copied[i], embeddings[i], timestamp, start + i)
                for i, content in enumerate(contents)
            ]
            self._commit(documents)

        logger.info(f"Inserted {len(documents)} documents (buffer_idx {documents[0].buffer_idx}-{documents[-1].buffer_idx})")
        return [d.id for d in documents]

    # -------------------------------------------------------------------------
    # Querying
    # -------------------------------------------------------------------------

    def _semantic_score(self, query_embedding: list[float], document: Document) -> float:
        try:
            value = float(self.similarity(query_embedding, document.embedding))
        except Exception as exc:
            raise SimilarityComputationFailed(f"Similarity failed for document {document.id}: {exc}", document_id=document.id) from exc
        if not math.isfinite(value):
            raise SimilarityComputationFailed(f"Similarity for document {document.id} is not finite: {value}", document_id=document.id)
        return value

    def _rank(self, query_embedding: list[float], now: datetime) -> list[_Scored]:
        """Score every document against a consistent snapshot. Must be called with the lock held."""
        cfg = self.config
        scored = []
        for document in self._documents.values():
            decay = decay_term(cfg.decay_rate, hours_passed(now, document.last_accessed_at))
            semantic = self._semantic_score(query_embedding, document)
            bonus = metadata_bonus(document.metadata, cfg.other_score_keys, cfg.default_salience)
            scored.append(_Scored(combined_score(semantic, decay, bonus), semantic, decay, bonus, document))

        # Ties go to the earlier insertion
        scored.sort(key=lambda s: (-s.score, s.document.buffer_idx))
        return scored

    async def query(self, query_text: str, now: datetime | None = None, k: int | None = None) -> QueryResult:
        """
        Return the top-k documents by time-weighted score.

        The returned documents have their last_accessed_at set to now; the
        documents that were scored but not returned are left untouched.

        Args:
            query_text: Text to embed and compare against stored documents
            now: Time to compute decay against (defaults to the clock at call entry)
            k: Number of results (defaults to the configured k)

        Returns:
            QueryResult with at most min(k, len(self)) results, best first

        Raises:
            EmbeddingUnavailable: The query could not be embedded
            SimilarityComputationFailed: Any document could not be scored
            InvalidConfiguration: k is not a positive integer
            TypeError: query_text is not a str
        """
        if not isinstance(query_text, str):
            raise TypeError(f"query_text must be str, got {type(query_text).__name__}")
        timestamp = self._now(now)
        top_k = k if k is not None else self.config.k
        validate_k(top_k)

        query_embedding = await self._embed_query(query_text)

        with self._lock:
            # A cached vector may predate the first insert
            self._check_query_dimensions(query_embedding)
            selected = self._rank(query_embedding, timestamp)[:top_k]

            # Refresh exactly the returned documents, never moving a timestamp backwards
            for s in selected:
                if timestamp > s.document.last_accessed_at:
                    s.document.last_accessed_at = timestamp

            results = [
                ScoredDocument(
                    document=_snapshot(s.document),
                    score=s.score,
                    semantic_score=s.semantic_score,
                    decay_term=s.decay_term,
                    bonus=s.bonus,
                )
                for s in selected
            ]
            total = len(self._documents)

        logger.debug(f"Query ranked {total} documents, returning {len(results)} (k={top_k})")
        return QueryResult(results=results, queried_at=timestamp)

    async def salient_documents(self, query_text: str, k: int | None = None) -> list[tuple[Document, float]]:
        """
        Rank documents by semantic similarity alone, without touching access times.

        Useful for inspecting how much of a query's ranking comes from recency.
        Returns every document when k is None.
        """
        if not isinstance(query_text, str):
            raise TypeError(f"query_text must be str, got {type(query_text).__name__}")
        if k is not None:
            validate_k(k)
        query_embedding = await self._embed_query(query_text)

        with self._lock:
            self._check_query_dimensions(query_embedding)
            scored = [(self._semantic_score(query_embedding, d), d) for d in self._documents.values()]
            scored.sort(key=lambda pair: (-pair[0], pair[1].buffer_idx))
            if k is not None:
                scored = scored[:k]
            return [(_snapshot(d), score) for score, d in scored]

    # -------------------------------------------------------------------------
    # Collection access
    # -------------------------------------------------------------------------

    def get(self, document_id: UUID) -> Document | None:
        with self._lock:
            document = self._documents.get(document_id)
            return _snapshot(document) if document is not None else None

    def remove(self, document_id: UUID) -> bool:
        """Remove a document. buffer_idx values are never reused."""
        with self._lock:
            removed = self._documents.pop(document_id, None) is not None
        if removed:
            logger.info(f"Removed document {document_id}")
        return removed

    def documents(self) -> list[Document]:
        """Snapshots of all documents in insertion order."""
        with self._lock:
            ordered = sorted(self._documents.values(), key=lambda d: d.buffer_idx)
            return [_snapshot(d) for d in ordered]

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._documents
