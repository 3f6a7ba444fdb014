"""Configuration dataclass for memdecay."""

import math
from dataclasses import dataclass, field

from memdecay.exceptions import InvalidConfiguration


@dataclass
class RetrieverConfig:
    """
    Configuration for TimeWeightedRetriever.

    Provides centralized configuration with sensible defaults.
    Can be passed to TimeWeightedRetriever() or individual params can be overridden.

    Example:
        config = RetrieverConfig(
            decay_rate=0.05,
            other_score_keys=["importance"],
        )
        retriever = TimeWeightedRetriever(embedding_client=embedder, config=config)
    """

    # Scoring
    decay_rate: float = 0.01
    k: int = 4
    other_score_keys: list[str] = field(default_factory=list)
    default_salience: float = 0.0

    # Query embedding cache
    enable_embedding_cache: bool = True
    embedding_cache_size: int = 1000
    embedding_cache_ttl_seconds: int = 600

    def validate(self) -> None:
        """Raise InvalidConfiguration if any setting is out of range."""
        if isinstance(self.decay_rate, bool) or not isinstance(self.decay_rate, (int, float)):
            raise InvalidConfiguration(f"decay_rate must be a number, got {self.decay_rate!r}")
        if math.isnan(self.decay_rate) or not 0.0 <= self.decay_rate <= 1.0:
            raise InvalidConfiguration(f"decay_rate must be in [0, 1], got {self.decay_rate}")
        validate_k(self.k)
        if isinstance(self.default_salience, bool) or not isinstance(self.default_salience, (int, float)):
            raise InvalidConfiguration(f"default_salience must be a number, got {self.default_salience!r}")
        if not math.isfinite(self.default_salience):
            raise InvalidConfiguration(f"default_salience must be finite, got {self.default_salience}")
        if not all(isinstance(key, str) for key in self.other_score_keys):
            raise InvalidConfiguration("other_score_keys must be strings")
        if self.embedding_cache_size <= 0:
            raise InvalidConfiguration(f"embedding_cache_size must be positive, got {self.embedding_cache_size}")
        if self.embedding_cache_ttl_seconds <= 0:
            raise InvalidConfiguration(f"embedding_cache_ttl_seconds must be positive, got {self.embedding_cache_ttl_seconds}")


def validate_k(k: int) -> None:
    if isinstance(k, bool) or not isinstance(k, int) or k <= 0:
        raise InvalidConfiguration(f"k must be a positive integer, got {k!r}")
