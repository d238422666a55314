"""OpenAI-compatible chat-completions gateway provider."""

import logging
from typing import AsyncIterator

import httpx

from genshai.core.config import settings
from genshai.core.errors import (
    ConfigurationError,
    UpstreamQuotaExhausted,
    UpstreamRateLimited,
    UpstreamTransportError,
)
from genshai.services.llm.base import BaseLLMProvider, PromptMessage, UpstreamStream

logger = logging.getLogger(__name__)


class GatewayStream(UpstreamStream):
    def __init__(self, client: httpx.AsyncClient, response: httpx.Response):
        self._client = client
        self._response = response

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        async for chunk in self._response.aiter_bytes():
            yield chunk

    async def aclose(self) -> None:
        await self._response.aclose()
        await self._client.aclose()


class GatewayProvider(BaseLLMProvider):
    def __init__(
        self,
        api_key: str | None = None,
        url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key if api_key is not None else settings.gateway_api_key
        if not self._api_key:
            raise ConfigurationError("GENSHAI_GATEWAY_API_KEY is not configured")
        self._url = url or settings.gateway_url
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        # Streams stay open as long as the user is watching, so only connecting is bounded.
        return httpx.AsyncClient(
            transport=self._transport,
            timeout=httpx.Timeout(None, connect=settings.gateway_connect_timeout),
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    @staticmethod
    async def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        status = response.status_code
        if status == 429:
            raise UpstreamRateLimited("Rate limit exceeded. Please wait a moment before trying again.")
        if status == 402:
            raise UpstreamQuotaExhausted("AI credits exhausted. Please add credits in workspace settings.")
        body = (await response.aread()).decode("utf-8", errors="replace")
        logger.error(f"AI gateway error: {status} {body[:500]}")
        raise UpstreamTransportError(f"AI gateway error: {status}")

    async def open_stream(self, messages: list[PromptMessage], model: str) -> GatewayStream:
        client = self._client()
        request = client.build_request(
            "POST",
            self._url,
            headers=self._headers(),
            json={
                "model": model,
                "messages": [m.to_dict() for m in messages],
                "stream": True,
            },
        )
        logger.info(f"Opening gateway stream: model={model} messages={len(messages)}")

        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            raise UpstreamTransportError(f"AI gateway unreachable: {e}") from e

        try:
            await self._raise_for_status(response)
        except Exception:
            await response.aclose()
            await client.aclose()
            raise

        return GatewayStream(client, response)

    async def complete(
        self, messages: list[PromptMessage], model: str, json_mode: bool = False
    ) -> str:
        payload: dict = {"model": model, "messages": [m.to_dict() for m in messages]}
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        async with self._client() as client:
            try:
                response = await client.post(self._url, headers=self._headers(), json=payload)
            except httpx.HTTPError as e:
                raise UpstreamTransportError(f"AI gateway unreachable: {e}") from e
            await self._raise_for_status(response)

        try:
            return response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise UpstreamTransportError(f"Unexpected AI gateway response: {e}") from e
