"""Retrieval layer for memdecay."""

from memdecay.retrieval.retriever import TimeWeightedRetriever

__all__ = ["TimeWeightedRetriever"]
