import json

import pytest
from typer.testing import CliRunner

from memdecay import cli
from memdecay.exceptions import EmbeddingUnavailable

runner = CliRunner()


class FakeEmbedder:
    """Fake embedder keyed on the first word of the text."""

    VECTORS = {
        "coffee": [1.0, 0.0, 0.0],
        "tea": [0.8, 0.6, 0.0],
        "hiking": [0.0, 0.0, 1.0],
    }

    async def embed(self, text: str) -> list[float]:
        return list(self.VECTORS[text.split()[0].lower()])

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [await self.embed(t) for t in texts]


class DownEmbedder(FakeEmbedder):
    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        raise EmbeddingUnavailable("provider down")


@pytest.fixture
def docs_file(tmp_path):
    path = tmp_path / "docs.jsonl"
    records = [
        {"content": "coffee black", "metadata": {"importance": 0.1}},
        {"content": "tea green"},
        {"content": "hiking alps", "metadata": {"importance": 5}},
    ]
    path.write_text("\n".join(json.dumps(r) for r in records) + "\n\n", encoding="utf-8")
    return path


@pytest.fixture
def fake_embedder(monkeypatch):
    monkeypatch.setattr(cli, "build_embedder", lambda provider, model: FakeEmbedder())


def test_load_documents(docs_file):
    documents = cli.load_documents(docs_file)

    assert documents == [
        ("coffee black", {"importance": 0.1}),
        ("tea green", {}),
        ("hiking alps", {"importance": 5}),
    ]


@pytest.mark.parametrize(
    "line",
    ['{"content": ', '["coffee"]', '{"text": "coffee"}', '{"content": "coffee", "metadata": [1]}'],
)
def test_load_documents_rejects_malformed_lines(tmp_path, line):
    path = tmp_path / "bad.jsonl"
    path.write_text(line + "\n", encoding="utf-8")

    with pytest.raises(ValueError, match="bad.jsonl:1"):
        cli.load_documents(path)


def test_query_command(docs_file, fake_embedder):
    result = runner.invoke(cli.app, ["query", str(docs_file), "coffee please", "--k", "2"])

    assert result.exit_code == 0, result.output
    assert "coffee black" in result.output
    assert "tea green" in result.output
    assert "hiking alps" not in result.output
    assert result.output.index("coffee black") < result.output.index("tea green")


def test_query_command_with_score_key(docs_file, fake_embedder):
    result = runner.invoke(cli.app, ["query", str(docs_file), "coffee please", "--k", "1", "--score-key", "importance"])

    assert result.exit_code == 0, result.output
    assert "hiking alps" in result.output
    assert "coffee black" not in result.output


def test_salient_command(docs_file, fake_embedder):
    result = runner.invoke(cli.app, ["salient", str(docs_file), "tea time"])

    assert result.exit_code == 0, result.output
    assert result.output.index("tea green") < result.output.index("coffee black") < result.output.index("hiking alps")


def test_query_command_rejects_bad_decay_rate(docs_file, fake_embedder):
    result = runner.invoke(cli.app, ["query", str(docs_file), "coffee", "--decay-rate", "2"])

    assert result.exit_code == 1
    assert "decay_rate" in result.output


def test_query_command_reports_embedding_failure(docs_file, monkeypatch):
    monkeypatch.setattr(cli, "build_embedder", lambda provider, model: DownEmbedder())

    result = runner.invoke(cli.app, ["query", str(docs_file), "coffee"])

    assert result.exit_code == 1
    assert "provider down" in result.output


def test_query_command_reports_missing_file(tmp_path, fake_embedder):
    result = runner.invoke(cli.app, ["query", str(tmp_path / "missing.jsonl"), "coffee"])

    assert result.exit_code == 1
