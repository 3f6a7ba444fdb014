from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Document(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    content: str = Field(..., description="The text payload of the document.")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Caller supplied metadata, passed through unchanged.")
    embedding: list[float] = Field(..., description="The embedding of the content, computed once at insertion.")
    created_at: datetime = Field(default_factory=utc_now, description="When the document was inserted (UTC).")
    last_accessed_at: datetime = Field(..., description="When the document was last returned by a query (UTC).")
    buffer_idx: int = Field(..., ge=0, description="Insertion sequence number, used for tie-breaking.")


class ScoredDocument(BaseModel):
    document: Document
    score: float = Field(..., description="semantic_score + decay_term + bonus")
    semantic_score: float
    decay_term: float = Field(..., ge=0.0, le=1.0)
    bonus: float = 0.0


class QueryResult(BaseModel):
    results: list[ScoredDocument] = Field(default_factory=list, description="Ranked results, best first.")
    queried_at: datetime = Field(..., description="The time decay was computed against (UTC).")

    def __len__(self) -> int:
        return len(self.results)

    @property
    def documents(self) -> list[Document]:
        return [r.document for r in self.results]

    def as_text(self) -> str:
        return "\n".join(r.document.content for r in self.results)

    def to_prompt(self) -> str:
        """Format the retrieved documents as context for an LLM prompt."""
        if not self.results:
            return "No relevant context found."

        lines = ["Relevant memories (most relevant first):"]
        for r in self.results:
            accessed = r.document.last_accessed_at.strftime("%Y-%m-%d %H:%M")
            lines.append(f"- {r.document.content} (last accessed {accessed}, score={r.score:.3f})")
        return "\n".join(lines)
