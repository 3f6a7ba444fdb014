"""Command line interface for trying time-weighted retrieval on a file of documents."""

import asyncio
import json
import logging
from datetime import timedelta
from enum import StrEnum
from pathlib import Path
from typing import Annotated, Any

import typer
from openai import OpenAIError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from memdecay.exceptions import MemdecayError
from memdecay.models import utc_now
from memdecay.protocols import EmbeddingClient
from memdecay.retrieval import TimeWeightedRetriever

console = Console()
app = typer.Typer(help="Time-weighted retrieval over a JSON-lines file of documents.")


class Provider(StrEnum):
    OPENAI = "openai"
    AZURE = "azure"


def load_documents(path: Path) -> list[tuple[str, dict[str, Any]]]:
    """
    Read documents from a JSON-lines file.

    Each non-blank line is an object with a "content" string and an optional
    "metadata" object.
    """
    documents = []
    for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        if not line.strip():
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{path}:{lineno}: invalid JSON ({exc.msg})") from exc
        if not isinstance(record, dict) or not isinstance(record.get("content"), str):
            raise ValueError(f"{path}:{lineno}: expected an object with a string 'content'")
        metadata = record.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise ValueError(f"{path}:{lineno}: 'metadata' must be an object")
        documents.append((record["content"], metadata))
    return documents


def build_embedder(provider: Provider, model: str | None) -> EmbeddingClient:
    if provider is Provider.AZURE:
        from memdecay.embeddings import AzureOpenAIEmbedAdapter

        return AzureOpenAIEmbedAdapter(deployment_name=model)

    from memdecay.embeddings import OpenAIEmbedAdapter

    return OpenAIEmbedAdapter(model=model) if model else OpenAIEmbedAdapter()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def _load_retriever(
    docs_file: Path,
    provider: Provider,
    model: str | None,
    decay_rate: float,
    score_keys: list[str],
) -> TimeWeightedRetriever:
    documents = load_documents(docs_file)
    retriever = TimeWeightedRetriever(
        embedding_client=build_embedder(provider, model),
        decay_rate=decay_rate,
        other_score_keys=score_keys,
    )
    if documents:
        contents = [content for content, _ in documents]
        metadatas = [metadata for _, metadata in documents]
        await retriever.insert_many(contents, metadatas)
    return retriever


async def _run_query(
    docs_file: Path,
    query_text: str,
    k: int,
    decay_rate: float,
    hours_ahead: float,
    score_keys: list[str],
    provider: Provider,
    model: str | None,
) -> None:
    retriever = await _load_retriever(docs_file, provider, model, decay_rate, score_keys)
    now = utc_now() + timedelta(hours=hours_ahead)
    result = await retriever.query(query_text, now=now, k=k)

    table = Table(title=f"Top {k} of {len(retriever)} at +{hours_ahead:g}h (decay_rate={decay_rate:g})")
    table.add_column("#", justify="right")
    table.add_column("score", justify="right")
    table.add_column("semantic", justify="right")
    table.add_column("decay", justify="right")
    table.add_column("bonus", justify="right")
    table.add_column("content")
    for rank, r in enumerate(result.results, start=1):
        table.add_row(
            str(rank),
            f"{r.score:.4f}",
            f"{r.semantic_score:.4f}",
            f"{r.decay_term:.4f}",
            f"{r.bonus:.4f}",
            escape(r.document.content),
        )
    console.print(table)


async def _run_salient(docs_file: Path, query_text: str, k: int | None, provider: Provider, model: str | None) -> None:
    retriever = await _load_retriever(docs_file, provider, model, 0.0, [])
    ranked = await retriever.salient_documents(query_text, k=k)

    table = Table(title="Semantic similarity only")
    table.add_column("#", justify="right")
    table.add_column("similarity", justify="right")
    table.add_column("content")
    for rank, (document, similarity) in enumerate(ranked, start=1):
        table.add_row(str(rank), f"{similarity:.4f}", escape(document.content))
    console.print(table)


def _guard(coro: Any) -> None:
    try:
        asyncio.run(coro)
    except (MemdecayError, OpenAIError, ValueError, OSError) as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


@app.command()
def query(
    docs_file: Annotated[Path, typer.Argument(help="JSON-lines file of {'content': ..., 'metadata': {...}}")],
    query_text: Annotated[str, typer.Argument(help="Query text")],
    k: Annotated[int, typer.Option("--k", "-k", help="Number of results")] = 4,
    decay_rate: Annotated[float, typer.Option(help="Decay rate per hour, in [0, 1]")] = 0.01,
    hours_ahead: Annotated[float, typer.Option(help="Run the query this many hours after loading")] = 0.0,
    score_key: Annotated[list[str] | None, typer.Option(help="Metadata key added to the score (repeatable)")] = None,
    provider: Annotated[Provider, typer.Option(help="Embedding provider")] = Provider.OPENAI,
    model: Annotated[str | None, typer.Option(help="Embedding model (Azure: deployment name)")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Load documents, then rank them for a query by similarity plus recency."""
    _configure_logging(verbose)
    _guard(_run_query(docs_file, query_text, k, decay_rate, hours_ahead, score_key or [], provider, model))


@app.command()
def salient(
    docs_file: Annotated[Path, typer.Argument(help="JSON-lines file of {'content': ..., 'metadata': {...}}")],
    query_text: Annotated[str, typer.Argument(help="Query text")],
    k: Annotated[int | None, typer.Option("--k", "-k", help="Number of results (default: all)")] = None,
    provider: Annotated[Provider, typer.Option(help="Embedding provider")] = Provider.OPENAI,
    model: Annotated[str | None, typer.Option(help="Embedding model (Azure: deployment name)")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Rank documents by semantic similarity alone."""
    _configure_logging(verbose)
    _guard(_run_salient(docs_file, query_text, k, provider, model))


def main() -> None:
    app()
