from openai import AsyncOpenAI, OpenAIError

from memdecay.exceptions import EmbeddingUnavailable


class OpenAIEmbedAdapter:
    def __init__(self, api_key: str | None = None, model: str = "text-embedding-3-small", timeout: float | None = None):
        # Retries are left to the caller
        if timeout is not None:
            self.client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        else:
            self.client = AsyncOpenAI(api_key=api_key, max_retries=0)
        self.model = model

    async def embed(self, text: str) -> list[float]:
        try:
            response = await self.client.embeddings.create(input=text, model=self.model)
        except OpenAIError as exc:
            raise EmbeddingUnavailable(f"OpenAI embedding request failed: {exc}") from exc
        return response.data[0].embedding

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        try:
            response = await self.client.embeddings.create(input=texts, model=self.model)
        except OpenAIError as exc:
            raise EmbeddingUnavailable(f"OpenAI embedding request failed: {exc}") from exc
        return [item.embedding for item in sorted(response.data, key=lambda item: item.index)]
