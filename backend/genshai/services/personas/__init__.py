"""Persona lookup: compiled-in thinkers and user-authored layered personas."""

from genshai.services.personas.prompt import (
    FALLBACK_PROMPT,
    PersonaLayers,
    build_layered_prompt,
    resolve_system_prompt,
)
from genshai.services.personas.registry import STATIC_PERSONAS, StaticPersona, get_static_persona

__all__ = [
    "FALLBACK_PROMPT",
    "PersonaLayers",
    "STATIC_PERSONAS",
    "StaticPersona",
    "build_layered_prompt",
    "get_static_persona",
    "resolve_system_prompt",
]
