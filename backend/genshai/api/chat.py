from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from genshai.core.errors import BadRequestError
from genshai.services.llm import get_llm_provider
from genshai.services.llm.base import BaseLLMProvider
from genshai.services.relay import ChatRelay, TurnRequest

router = APIRouter()


class IncomingMessage(BaseModel):
    role: str  # "user" | "agent"
    content: str


class ChatRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    agent_id: str
    messages: list[IncomingMessage]
    conversation_id: str | None = None
    user_session: str | None = None
    user_id: str | None = None
    model: str | None = None
    custom_system_prompt: str | None = None


@router.post("")
async def chat(body: ChatRequest, provider: BaseLLMProvider = Depends(get_llm_provider)):
    """Relay one chat turn as a token stream.

    Only the newest user turn is read from `messages`; earlier turns come from the store.
    The conversation id is returned in the X-Conversation-Id header.
    """
    if not body.messages or body.messages[-1].role != "user":
        raise BadRequestError("The last message must be a user message")
    content = body.messages[-1].content
    if not content.strip():
        raise BadRequestError("Message content is empty")
    if not (body.user_session or body.user_id):
        raise BadRequestError("userSession or userId is required")

    relay = ChatRelay(provider)
    turn = await relay.open_turn(
        TurnRequest(
            agent_id=body.agent_id,
            content=content,
            user_session=body.user_session,
            user_id=body.user_id,
            conversation_id=body.conversation_id,
            model=body.model,
            custom_system_prompt=body.custom_system_prompt,
        )
    )

    return StreamingResponse(
        relay.relay(turn),
        media_type="text/event-stream",
        headers={
            "X-Conversation-Id": turn.conversation_id,
            "Cache-Control": "no-cache",
        },
    )
