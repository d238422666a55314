"""REST API for conversation history."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from genshai.core.database import get_session
from genshai.core.errors import BadRequestError
from genshai.models.conversation import Message
from genshai.services import conversation_store as store

router = APIRouter()
logger = logging.getLogger(__name__)


def _message_dict(m: Message) -> dict:
    return {
        "id": m.id,
        "role": m.role.value,
        "content": m.content,
        "created_at": m.created_at.isoformat(),
    }


@router.get("")
async def get_history(
    agent_id: str | None = Query(default=None, alias="agentId"),
    user_session: str | None = Query(default=None, alias="userSession"),
    user_id: str | None = Query(default=None, alias="userId"),
    session: Session = Depends(get_session),
):
    """Latest conversation of the caller with an agent, oldest message first."""
    if not agent_id or not (user_session or user_id):
        raise BadRequestError("Missing parameters")

    conv = store.latest_conversation(session, agent_id, user_session, user_id)
    if not conv:
        return {"conversationId": None, "messages": []}

    messages = store.list_messages(session, conv.id)
    return {"conversationId": conv.id, "messages": [_message_dict(m) for m in messages]}


@router.get("/{conversation_id}")
async def get_conversation(
    conversation_id: str,
    user_session: str | None = Query(default=None, alias="userSession"),
    user_id: str | None = Query(default=None, alias="userId"),
    session: Session = Depends(get_session),
):
    conv = store.get_owned_conversation(session, conversation_id, user_session, user_id)
    if not conv:
        logger.debug(f"Conversation {conversation_id} not found for caller")
        raise HTTPException(status_code=404, detail="Conversation not found")

    return {
        "id": conv.id,
        "agent_id": conv.agent_id,
        "created_at": conv.created_at.isoformat(),
        "updated_at": conv.updated_at.isoformat(),
        "messages": [_message_dict(m) for m in store.list_messages(session, conv.id)],
    }


@router.delete("/{conversation_id}")
async def delete_conversation(
    conversation_id: str,
    user_session: str | None = Query(default=None, alias="userSession"),
    user_id: str | None = Query(default=None, alias="userId"),
    session: Session = Depends(get_session),
):
    conv = store.get_owned_conversation(session, conversation_id, user_session, user_id)
    if not conv:
        logger.debug(f"Delete: conversation {conversation_id} not found for caller")
        raise HTTPException(status_code=404, detail="Conversation not found")

    store.delete_conversation(session, conv)
    logger.debug(f"Deleted conversation {conversation_id}")
    return {"status": "deleted"}
