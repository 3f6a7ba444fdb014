"""Embedding clients for memdecay."""

from memdecay.embeddings.azure import AzureOpenAIEmbedAdapter
from memdecay.embeddings.openai import OpenAIEmbedAdapter

__all__ = ["OpenAIEmbedAdapter", "AzureOpenAIEmbedAdapter"]
