"""Async Python client for the GenShai chat relay."""

import uuid
from dataclasses import dataclass, field
from typing import Any, AsyncIterator

import httpx

from genshai.core.errors import error_for_status
from genshai.services.render import Segment, split_segments
from genshai.services.sse import FrameDecoder


@dataclass
class Reply:
    conversation_id: str | None
    text: str
    segments: list[Segment] = field(default_factory=list)


class GenShaiClient:
    """Talks to one GenShai server as one anonymous session (or one signed-in user).

    Conversation ids returned by the server are remembered per agent, so
    consecutive turns with the same agent land in the same conversation.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        user_session: str | None = None,
        user_id: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.user_session = user_session or uuid.uuid4().hex
        self.user_id = user_id
        self.conversations: dict[str, str] = {}
        self._transport = transport

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            transport=self._transport,
            timeout=httpx.Timeout(None, connect=10.0),
        )

    @staticmethod
    async def _raise_for_error(response: httpx.Response) -> None:
        if response.status_code < 400:
            return
        await response.aread()
        try:
            message = response.json().get("error") or response.text
        except ValueError:
            message = response.text
        raise error_for_status(response.status_code, message)

    async def stream(
        self,
        agent_id: str,
        text: str,
        model: str | None = None,
        custom_system_prompt: str | None = None,
    ) -> AsyncIterator[str]:
        """Send one user turn and yield reply text as it arrives."""
        payload: dict[str, Any] = {
            "agentId": agent_id,
            "messages": [{"role": "user", "content": text}],
            "conversationId": self.conversations.get(agent_id),
            "userSession": self.user_session,
            "userId": self.user_id,
        }
        if model:
            payload["model"] = model
        if custom_system_prompt:
            payload["customSystemPrompt"] = custom_system_prompt

        async with self._http() as http:
            async with http.stream("POST", "/api/chat", json=payload) as response:
                await self._raise_for_error(response)
                conversation_id = response.headers.get("X-Conversation-Id")
                if conversation_id:
                    self.conversations[agent_id] = conversation_id

                decoder = FrameDecoder()
                async for chunk in response.aiter_bytes():
                    for frame in decoder.feed(chunk):
                        if frame.done:
                            return
                        if frame.delta:
                            yield frame.delta
                for frame in decoder.flush():
                    if frame.delta:
                        yield frame.delta

    async def chat(self, agent_id: str, text: str, **kwargs) -> Reply:
        parts = [delta async for delta in self.stream(agent_id, text, **kwargs)]
        reply = "".join(parts)
        return Reply(
            conversation_id=self.conversations.get(agent_id),
            text=reply,
            segments=split_segments(reply),
        )

    async def history(self, agent_id: str) -> dict:
        params = {"agentId": agent_id, "userSession": self.user_session}
        if self.user_id:
            params["userId"] = self.user_id
        async with self._http() as http:
            response = await http.get("/api/conversations", params=params)
            await self._raise_for_error(response)
            data = response.json()
        if data.get("conversationId"):
            self.conversations[agent_id] = data["conversationId"]
        return data
