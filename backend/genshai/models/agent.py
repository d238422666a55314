"""User-authored personas, described by seven free-text cognitive layers."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class CustomAgent(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    slug: str = Field(unique=True, index=True)  # agent identifier used by the chat relay
    name: str
    era: Optional[str] = None
    domain: str
    tagline: Optional[str] = None
    image_url: Optional[str] = None
    accent_color: str = Field(default="42 80% 52%")  # HSL triplet
    is_public: bool = Field(default=False)
    is_active: bool = Field(default=True)
    conversation_starters: list[str] = Field(default_factory=list, sa_column=Column(JSON))

    layer_core_values: Optional[str] = None
    layer_mental_models: Optional[str] = None
    layer_reasoning_patterns: Optional[str] = None
    layer_emotional_stance: Optional[str] = None
    layer_language_dna: Optional[str] = None
    layer_decision_history: Optional[str] = None
    layer_knowledge_base: Optional[str] = None

    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
