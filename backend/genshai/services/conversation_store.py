"""Conversation and message persistence used by the chat relay and history endpoints."""

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from genshai.core.database import engine
from genshai.core.errors import PersistenceError
from genshai.models.agent import CustomAgent
from genshai.models.conversation import Conversation, Message, MessageRole
from genshai.services.llm.base import PromptMessage, to_model_role
from genshai.services.personas import PersonaLayers

logger = logging.getLogger(__name__)


def _caller_filter(statement, user_session: str | None, user_id: str | None):
    if user_id:
        return statement.where(Conversation.user_id == user_id)
    return statement.where(Conversation.user_session == user_session)


def resolve_conversation(
    agent_id: str,
    user_session: str | None,
    user_id: str | None,
    conversation_id: str | None = None,
) -> str:
    """Return the conversation to write against, creating one when none was supplied.

    A supplied identifier is trusted as-is.
    """
    if conversation_id:
        return conversation_id

    try:
        with Session(engine) as session:
            conv = Conversation(agent_id=agent_id, user_session=user_session, user_id=user_id)
            session.add(conv)
            session.commit()
            session.refresh(conv)
            logger.debug(f"Created conversation {conv.id} for agent {agent_id}")
            return conv.id
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not create conversation: {e}") from e


def save_message(conversation_id: str, role: MessageRole, content: str) -> int:
    try:
        with Session(engine) as session:
            msg = Message(conversation_id=conversation_id, role=role, content=content)
            session.add(msg)
            session.commit()
            session.refresh(msg)
            return msg.id  # type: ignore
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not save {role.value} message: {e}") from e


def touch_conversation(conversation_id: str) -> None:
    try:
        with Session(engine) as session:
            conv = session.get(Conversation, conversation_id)
            if conv:
                conv.updated_at = datetime.now(timezone.utc)
                session.add(conv)
                session.commit()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not update conversation: {e}") from e


def load_context(conversation_id: str, limit: int) -> list[PromptMessage]:
    """Load the most recent `limit` messages, oldest first, in model roles."""
    try:
        with Session(engine) as session:
            recent = session.exec(
                select(Message)
                .where(Message.conversation_id == conversation_id)
                .order_by(Message.created_at.desc(), Message.id.desc())  # type: ignore
                .limit(limit)
            ).all()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not load conversation history: {e}") from e

    return [PromptMessage(role=to_model_role(m.role), content=m.content) for m in reversed(recent)]


def list_messages(session: Session, conversation_id: str) -> list[Message]:
    return list(
        session.exec(
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at, Message.id)  # type: ignore
        ).all()
    )


def latest_conversation(
    session: Session, agent_id: str, user_session: str | None, user_id: str | None
) -> Conversation | None:
    statement = select(Conversation).where(Conversation.agent_id == agent_id)
    statement = _caller_filter(statement, user_session, user_id)
    return session.exec(
        statement.order_by(Conversation.created_at.desc()).limit(1)  # type: ignore
    ).first()


def get_owned_conversation(
    session: Session, conversation_id: str, user_session: str | None, user_id: str | None
) -> Conversation | None:
    """Fetch a conversation only if it belongs to the caller."""
    conv = session.get(Conversation, conversation_id)
    if not conv or not (user_session or user_id):
        return None
    if user_id:
        return conv if conv.user_id == user_id else None
    return conv if conv.user_session == user_session else None


def delete_conversation(session: Session, conv: Conversation) -> None:
    # Delete messages first
    messages = session.exec(select(Message).where(Message.conversation_id == conv.id)).all()
    for msg in messages:
        session.delete(msg)
    session.delete(conv)
    session.commit()


def get_custom_agent_layers(agent_id: str) -> tuple[str, PersonaLayers] | None:
    """Look up an active user-authored persona by slug and return (name, layers)."""
    try:
        with Session(engine) as session:
            agent = session.exec(
                select(CustomAgent).where(
                    CustomAgent.slug == agent_id,
                    CustomAgent.is_active == True,  # noqa: E712
                )
            ).first()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Could not load custom agent: {e}") from e

    if not agent:
        return None
    return agent.name, layers_of(agent)


def layers_of(agent: CustomAgent) -> PersonaLayers:
    return PersonaLayers(
        core_values=agent.layer_core_values,
        mental_models=agent.layer_mental_models,
        reasoning_patterns=agent.layer_reasoning_patterns,
        emotional_stance=agent.layer_emotional_stance,
        language_dna=agent.layer_language_dna,
        decision_history=agent.layer_decision_history,
        knowledge_base=agent.layer_knowledge_base,
    )
