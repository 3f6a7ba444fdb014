"""Azure OpenAI embedding client."""

from __future__ import annotations

import os
from collections.abc import Awaitable, Callable
from typing import Any

from openai import AsyncAzureOpenAI, OpenAIError

from memdecay.exceptions import EmbeddingUnavailable, InvalidConfiguration


class AzureOpenAIEmbedAdapter:
    """
    Embedding client for an Azure OpenAI deployment.

    Azure routes requests by deployment rather than model name, so the
    endpoint is built from the resource (instance) name and deployment:

        https://{instance_name}.openai.azure.com/openai/deployments/{deployment_name}

    A base_path replaces everything before the deployment segment, and an
    explicit base_url is used verbatim. Unset arguments fall back to the
    AZURE_OPENAI_* environment variables.

    Authentication uses either an api key or an Azure AD token provider.
    """

    def __init__(
        self,
        deployment_name: str | None = None,
        instance_name: str | None = None,
        api_key: str | None = None,
        api_version: str | None = None,
        base_path: str | None = None,
        base_url: str | None = None,
        azure_ad_token_provider: Callable[[], str | Awaitable[str]] | None = None,
        timeout: float | None = None,
    ):
        self.deployment_name = deployment_name or os.environ.get("AZURE_OPENAI_API_DEPLOYMENT_NAME")
        self.instance_name = instance_name or os.environ.get("AZURE_OPENAI_API_INSTANCE_NAME")
        self.api_key = api_key or os.environ.get("AZURE_OPENAI_API_KEY")
        self.api_version = api_version or os.environ.get("AZURE_OPENAI_API_VERSION")
        self.base_path = base_path or os.environ.get("AZURE_OPENAI_BASE_PATH")
        self.base_url = base_url
        self.azure_ad_token_provider = azure_ad_token_provider
        self.timeout = timeout

        if not self.api_version:
            raise InvalidConfiguration("Azure OpenAI api_version is required")
        if not self.api_key and self.azure_ad_token_provider is None:
            raise InvalidConfiguration("Azure OpenAI needs an api_key or an azure_ad_token_provider")
        # Fail early if no endpoint can be derived
        self.endpoint = self._build_endpoint()

        self._client: AsyncAzureOpenAI | None = None

    def _build_endpoint(self) -> str:
        if not self.deployment_name:
            raise InvalidConfiguration("Azure OpenAI deployment_name is required")
        if self.base_url:
            return self.base_url.rstrip("/")
        if self.base_path:
            return f"{self.base_path.rstrip('/')}/{self.deployment_name}"
        if not self.instance_name:
            raise InvalidConfiguration("Azure OpenAI instance_name is required when no base_path or base_url is given")
        return f"https://{self.instance_name}.openai.azure.com/openai/deployments/{self.deployment_name}"

    @property
    def client(self) -> AsyncAzureOpenAI:
        """The underlying client, created on first use."""
        if self._client is None:
            params: dict[str, Any] = {
                "api_version": self.api_version,
                "base_url": self.endpoint,
                # Retries are left to the caller
                "max_retries": 0,
            }
            if self.timeout is not None:
                params["timeout"] = self.timeout
            if self.azure_ad_token_provider is not None:
                params["azure_ad_token_provider"] = self.azure_ad_token_provider
            else:
                params["api_key"] = self.api_key
            self._client = AsyncAzureOpenAI(**params)
        return self._client

    @property
    def model(self) -> str:
        # Azure addresses the model through its deployment
        return self.deployment_name

    async def embed(self, text: str) -> list[float]:
        try:
            response = await self.client.embeddings.create(input=text, model=self.model)
        except OpenAIError as exc:
            raise EmbeddingUnavailable(f"Azure OpenAI embedding request failed: {exc}") from exc
        return response.data[0].embedding

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        try:
            response = await self.client.embeddings.create(input=texts, model=self.model)
        except OpenAIError as exc:
            raise EmbeddingUnavailable(f"Azure OpenAI embedding request failed: {exc}") from exc
        return [item.embedding for item in sorted(response.data, key=lambda item: item.index)]

    def to_dict(self) -> dict[str, Any]:
        """Serializable settings, without credentials or deployment routing."""
        return {
            "type": "azure_openai",
            "instance_name": self.instance_name,
            "timeout": self.timeout,
        }
