"""Conversation and message models for chat history persistence."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import Index
from sqlmodel import Field, Relationship, SQLModel


class MessageRole(str, Enum):
    USER = "user"
    AGENT = "agent"


class Conversation(SQLModel, table=True):
    __table_args__ = (
        Index("ix_conversation_caller_latest", "agent_id", "user_session", "created_at"),
    )

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    agent_id: str
    user_session: Optional[str] = None
    user_id: Optional[str] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    messages: list["Message"] = Relationship(back_populates="conversation")


class Message(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    conversation_id: str = Field(foreign_key="conversation.id", index=True)
    role: MessageRole
    content: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    conversation: Optional[Conversation] = Relationship(back_populates="messages")
