"""REST API for the persona catalog and user-authored agents."""

import logging
import re
from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, or_, select

from genshai.core.database import get_session
from genshai.models.agent import CustomAgent
from genshai.services.blueprint import BlueprintService
from genshai.services.conversation_store import layers_of
from genshai.services.llm import get_llm_provider
from genshai.services.llm.base import BaseLLMProvider
from genshai.services.personas import STATIC_PERSONAS, build_layered_prompt, get_static_persona

router = APIRouter()
logger = logging.getLogger(__name__)


class AgentCreate(BaseModel):
    name: str = Field(min_length=1)
    domain: str = Field(min_length=1)
    slug: str | None = None
    era: str | None = None
    tagline: str | None = None
    image_url: str | None = None
    accent_color: str = "42 80% 52%"
    is_public: bool = False
    conversation_starters: list[str] = []
    layer_core_values: str | None = None
    layer_mental_models: str | None = None
    layer_reasoning_patterns: str | None = None
    layer_emotional_stance: str | None = None
    layer_language_dna: str | None = None
    layer_decision_history: str | None = None
    layer_knowledge_base: str | None = None
    created_by: str | None = None


class AgentUpdate(BaseModel):
    name: str | None = None
    domain: str | None = None
    era: str | None = None
    tagline: str | None = None
    image_url: str | None = None
    accent_color: str | None = None
    is_public: bool | None = None
    is_active: bool | None = None
    conversation_starters: list[str] | None = None
    layer_core_values: str | None = None
    layer_mental_models: str | None = None
    layer_reasoning_patterns: str | None = None
    layer_emotional_stance: str | None = None
    layer_language_dna: str | None = None
    layer_decision_history: str | None = None
    layer_knowledge_base: str | None = None


class BlueprintRequest(BaseModel):
    name: str = Field(min_length=1)
    type: Literal["person", "book"] = "person"
    extra: str = ""


_CLEARABLE = {"era", "tagline", "image_url"} | {f for f in AgentUpdate.model_fields if f.startswith("layer_")}


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def _serialize(agent: CustomAgent) -> dict:
    return {
        "id": agent.slug,
        "name": agent.name,
        "era": agent.era,
        "domain": agent.domain,
        "tagline": agent.tagline,
        "image_url": agent.image_url,
        "accent_color": agent.accent_color,
        "is_public": agent.is_public,
        "is_active": agent.is_active,
        "conversation_starters": agent.conversation_starters or [],
        "layers": {
            "core_values": agent.layer_core_values,
            "mental_models": agent.layer_mental_models,
            "reasoning_patterns": agent.layer_reasoning_patterns,
            "emotional_stance": agent.layer_emotional_stance,
            "language_dna": agent.layer_language_dna,
            "decision_history": agent.layer_decision_history,
            "knowledge_base": agent.layer_knowledge_base,
        },
        "system_prompt": build_layered_prompt(layers_of(agent), name=agent.name),
        "created_by": agent.created_by,
        "created_at": agent.created_at.isoformat(),
        "source": "custom",
    }


def _get_custom(session: Session, slug: str) -> CustomAgent | None:
    return session.exec(select(CustomAgent).where(CustomAgent.slug == slug)).first()


def _visible_to(agent: CustomAgent, created_by: str | None) -> bool:
    """Same rule as the catalog: active, and public or owned by the caller."""
    if not agent.is_active:
        return False
    return agent.is_public or (created_by is not None and agent.created_by == created_by)


def get_blueprint_service(
    provider: BaseLLMProvider = Depends(get_llm_provider),
) -> BlueprintService:
    return BlueprintService(provider)


@router.get("")
async def list_agents(
    created_by: str | None = Query(default=None, alias="createdBy"),
    session: Session = Depends(get_session),
):
    """Static personas first, then active custom agents visible to the caller."""
    visible = CustomAgent.is_public == True  # noqa: E712
    if created_by:
        visible = or_(visible, CustomAgent.created_by == created_by)
    custom = session.exec(
        select(CustomAgent)
        .where(CustomAgent.is_active == True, visible)  # noqa: E712
        .order_by(CustomAgent.created_at)  # type: ignore
    ).all()
    return [p.summary() for p in STATIC_PERSONAS.values()] + [_serialize(a) for a in custom]


@router.post("/blueprint")
async def create_blueprint(
    body: BlueprintRequest,
    service: BlueprintService = Depends(get_blueprint_service),
):
    """Draft a persona with the LLM. Nothing is saved."""
    blueprint = await service.generate(body.name, kind=body.type, extra=body.extra)
    return {"success": True, "blueprint": blueprint}


@router.get("/{agent_id}")
async def get_agent(
    agent_id: str,
    created_by: str | None = Query(default=None, alias="createdBy"),
    session: Session = Depends(get_session),
):
    persona = get_static_persona(agent_id)
    if persona:
        return persona.summary()

    agent = _get_custom(session, agent_id)
    if not agent or not _visible_to(agent, created_by):
        raise HTTPException(status_code=404, detail="Agent not found")
    return _serialize(agent)


@router.post("", status_code=201)
async def create_agent(body: AgentCreate, session: Session = Depends(get_session)):
    slug = slugify(body.slug or body.name)
    if not slug:
        raise HTTPException(status_code=400, detail="Agent slug is empty")
    if get_static_persona(slug) or _get_custom(session, slug):
        raise HTTPException(status_code=409, detail=f"Agent '{slug}' already exists")

    data = body.model_dump(exclude={"slug"})
    data["conversation_starters"] = [s for s in body.conversation_starters if s.strip()]
    agent = CustomAgent(slug=slug, **data)
    session.add(agent)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail=f"Agent '{slug}' already exists")
    session.refresh(agent)
    logger.info(f"Created custom agent {slug}")
    return _serialize(agent)


@router.put("/{slug}")
async def update_agent(slug: str, body: AgentUpdate, session: Session = Depends(get_session)):
    agent = _get_custom(session, slug)
    if not agent:
        raise HTTPException(status_code=404, detail="Agent not found")

    updates = {
        key: value
        for key, value in body.model_dump(exclude_unset=True).items()
        if value is not None or key in _CLEARABLE
    }
    if "conversation_starters" in updates:
        updates["conversation_starters"] = [s for s in updates["conversation_starters"] if s.strip()]
    for key, value in updates.items():
        setattr(agent, key, value)
    agent.updated_at = datetime.now(timezone.utc)

    session.add(agent)
    session.commit()
    session.refresh(agent)
    return _serialize(agent)


@router.delete("/{slug}")
async def delete_agent(slug: str, session: Session = Depends(get_session)):
    agent = _get_custom(session, slug)
    if not agent:
        raise HTTPException(status_code=404, detail="Agent not found")

    session.delete(agent)
    session.commit()
    logger.debug(f"Deleted custom agent {slug}")
    return {"status": "deleted"}
