"""Streaming chat relay.

One turn goes: resolve the conversation, read prior history, record the user's
message, open the upstream stream, then pass every upstream byte through to the
caller while collecting the reply text. The reply is stored once, at the
`[DONE]` sentinel or upstream EOF, whichever comes first. If the caller
disconnects or upstream drops before that, the partial reply is discarded.
"""

import logging
from dataclasses import dataclass
from typing import AsyncIterator

import httpx

from genshai.core.config import settings
from genshai.core.errors import PersistenceError
from genshai.models.conversation import MessageRole
from genshai.services import conversation_store as store
from genshai.services.llm.base import BaseLLMProvider, ModelRole, PromptMessage, UpstreamStream
from genshai.services.personas import resolve_system_prompt
from genshai.services.sse import FrameDecoder

logger = logging.getLogger(__name__)


@dataclass
class TurnRequest:
    agent_id: str
    content: str
    user_session: str | None = None
    user_id: str | None = None
    conversation_id: str | None = None
    model: str | None = None
    custom_system_prompt: str | None = None


@dataclass
class OpenTurn:
    conversation_id: str
    upstream: UpstreamStream


class ChatRelay:
    def __init__(self, provider: BaseLLMProvider, history_limit: int | None = None):
        self.provider = provider
        self.history_limit = history_limit if history_limit is not None else settings.history_limit

    def system_prompt(self, request: TurnRequest) -> str:
        layers = None
        name = None
        if not request.custom_system_prompt:
            try:
                found = store.get_custom_agent_layers(request.agent_id)
            except PersistenceError as e:
                logger.warning(f"Custom agent lookup failed, using default prompt: {e}")
                found = None
            if found:
                name, layers = found
        return resolve_system_prompt(
            request.agent_id,
            custom_prompt=request.custom_system_prompt,
            layers=layers,
            name=name,
        )

    def build_context(self, request: TurnRequest, conversation_id: str) -> list[PromptMessage]:
        """System prompt, then bounded prior history, then the new user message."""
        history = store.load_context(conversation_id, self.history_limit)
        return [
            PromptMessage(role=ModelRole.SYSTEM, content=self.system_prompt(request)),
            *history,
            PromptMessage(role=ModelRole.USER, content=request.content),
        ]

    async def open_turn(self, request: TurnRequest) -> OpenTurn:
        """Everything that must succeed before a byte is streamed back.

        The user message is stored before the upstream call, so a failed call
        still leaves the question in the history.
        """
        conversation_id = store.resolve_conversation(
            request.agent_id,
            request.user_session,
            request.user_id,
            request.conversation_id,
        )
        context = self.build_context(request, conversation_id)
        store.save_message(conversation_id, MessageRole.USER, request.content)
        store.touch_conversation(conversation_id)

        upstream = await self.provider.open_stream(
            context, model=request.model or settings.default_model
        )
        return OpenTurn(conversation_id=conversation_id, upstream=upstream)

    async def relay(self, turn: OpenTurn) -> AsyncIterator[bytes]:
        """Forward upstream bytes unchanged and store the full reply once they end.

        The reply is complete at the `[DONE]` sentinel or at EOF. Anything that
        cuts the stream short before that discards it.
        """
        decoder = FrameDecoder()
        reply: list[str] = []
        finished = False
        sentinel_seen = False

        def collect(frames) -> None:
            nonlocal sentinel_seen
            for frame in frames:
                if sentinel_seen:
                    return
                if frame.done:
                    sentinel_seen = True
                elif frame.delta:
                    reply.append(frame.delta)

        try:
            async for chunk in turn.upstream.aiter_bytes():
                collect(decoder.feed(chunk))
                yield chunk
            collect(decoder.flush())
            finished = True
        except httpx.HTTPError as e:
            if sentinel_seen:
                logger.debug(f"Upstream closed after the reply for conversation {turn.conversation_id}: {e}")
            else:
                logger.warning(f"Upstream stream interrupted for conversation {turn.conversation_id}: {e}")
        finally:
            if finished or sentinel_seen:
                self._store_reply(turn.conversation_id, "".join(reply))
            else:
                logger.info(f"Discarding partial reply for conversation {turn.conversation_id}")
            await turn.upstream.aclose()

    def _store_reply(self, conversation_id: str, text: str) -> None:
        if not text.strip():
            logger.info(f"Empty reply for conversation {conversation_id}, nothing stored")
            return
        try:
            store.save_message(conversation_id, MessageRole.AGENT, text)
            store.touch_conversation(conversation_id)
        except PersistenceError as e:
            # The caller already has the whole reply; only the history misses this turn.
            logger.error(f"Failed to store agent reply for conversation {conversation_id}: {e}")
