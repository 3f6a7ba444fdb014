from datetime import datetime, timezone

from memdecay.models import Document, QueryResult, ScoredDocument

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_document(content: str, buffer_idx: int = 0) -> Document:
    return Document(content=content, embedding=[1.0, 0.0], created_at=NOW, last_accessed_at=NOW, buffer_idx=buffer_idx)


def test_document_creation():
    doc = make_document("User likes tea")

    assert doc.id is not None
    assert doc.metadata == {}
    assert doc.created_at == doc.last_accessed_at == NOW


def test_documents_get_distinct_ids():
    assert make_document("a").id != make_document("b").id


def test_query_result_empty():
    result = QueryResult(queried_at=NOW)
    assert len(result) == 0
    assert result.documents == []
    assert result.as_text() == ""
    assert result.to_prompt() == "No relevant context found."


def test_query_result_with_documents():
    first = ScoredDocument(document=make_document("User likes tea", 0), score=1.9, semantic_score=0.9, decay_term=1.0)
    second = ScoredDocument(document=make_document("User owns a cat", 1), score=1.2, semantic_score=0.2, decay_term=1.0)

    result = QueryResult(results=[first, second], queried_at=NOW)

    assert len(result) == 2
    assert [d.content for d in result.documents] == ["User likes tea", "User owns a cat"]
    assert result.as_text() == "User likes tea\nUser owns a cat"

    prompt = result.to_prompt()
    assert prompt.startswith("Relevant memories")
    assert "- User likes tea (last accessed 2024-03-01 12:00, score=1.900)" in prompt
    assert prompt.index("User likes tea") < prompt.index("User owns a cat")


def test_document_json_roundtrip():
    doc = make_document("User likes tea")
    doc.metadata["importance"] = 0.4

    restored = Document.model_validate_json(doc.model_dump_json())

    assert restored == doc
