"""System prompt resolution for static and user-authored personas."""

from dataclasses import dataclass, fields

from genshai.services.personas.registry import get_static_persona

FALLBACK_PROMPT = (
    "You are a brilliant cognitive simulation of a great thinker. Apply their authentic "
    "mental models, reasoning patterns, and values to help the user with their specific situation."
)

FIRST_PERSON_INSTRUCTION = (
    "Respond in the first person, as this mind would: reason with these values and models, "
    "speak in this voice, and draw on these experiences when they help the user."
)


@dataclass
class PersonaLayers:
    core_values: str | None = None
    mental_models: str | None = None
    reasoning_patterns: str | None = None
    emotional_stance: str | None = None
    language_dna: str | None = None
    decision_history: str | None = None
    knowledge_base: str | None = None


LAYER_HEADERS = {
    "core_values": "CORE VALUES",
    "mental_models": "MENTAL MODELS",
    "reasoning_patterns": "REASONING PATTERNS",
    "emotional_stance": "EMOTIONAL STANCE",
    "language_dna": "LANGUAGE DNA",
    "decision_history": "DECISION HISTORY",
    "knowledge_base": "KNOWLEDGE DOMAINS",
}


def build_layered_prompt(layers: PersonaLayers, name: str | None = None) -> str:
    """Assemble a prompt from whichever layers are filled in, in layer order."""
    sections = []
    if name:
        sections.append(f"You are {name}. Your Cognitive OS:")
    for f in fields(layers):
        text = (getattr(layers, f.name) or "").strip()
        if text:
            sections.append(f"{LAYER_HEADERS[f.name]}:\n{text}")
    sections.append(FIRST_PERSON_INSTRUCTION)
    return "\n\n".join(sections)


def resolve_system_prompt(
    agent_id: str,
    custom_prompt: str | None = None,
    layers: PersonaLayers | None = None,
    name: str | None = None,
) -> str:
    """Pick the system prompt for a conversation. Never fails.

    Order: explicit caller prompt, compiled-in persona, stored layers, generic fallback.
    """
    if custom_prompt:
        return custom_prompt

    persona = get_static_persona(agent_id)
    if persona:
        return persona.prompt

    if layers is not None:
        return build_layered_prompt(layers, name=name)

    return FALLBACK_PROMPT
