"""Draft a seven-layer persona from a name, using Wikipedia context and the LLM gateway."""

import json
import logging
import re

import httpx

from genshai.core.config import settings
from genshai.core.errors import UpstreamTransportError
from genshai.services.llm.base import BaseLLMProvider, ModelRole, PromptMessage

logger = logging.getLogger(__name__)

WIKIPEDIA_API = "https://en.wikipedia.org/w/api.php"

SYSTEM_PROMPT = (
    "You are an expert in psychology, philosophy, and intellectual biography. "
    "Return only valid JSON with no markdown or code blocks."
)

BLUEPRINT_FIELDS = [
    "name",
    "era",
    "domain",
    "tagline",
    "accentColor",
    "conversationStarters",
    "layer_core_values",
    "layer_mental_models",
    "layer_reasoning_patterns",
    "layer_emotional_stance",
    "layer_language_dna",
    "layer_decision_history",
    "layer_knowledge_base",
]

_FENCE_START = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_END = re.compile(r"```\s*$")


def _build_prompt(name: str, kind: str, extra: str, wiki: str) -> str:
    subject = f'the author of "{name}"' if kind == "book" else f'"{name}"'
    focus = f". Focus: {extra}" if extra else ""
    context = f"Wikipedia:\n{wiki[:3000]}\n\n" if wiki else ""
    return f"""Build a "Cognitive OS" - a psychological/philosophical profile for: {subject}{focus}.

{context}Return JSON with exactly these fields (100-200 words per layer):
{{
  "name": "Full Name",
  "era": "YYYY – YYYY or present",
  "domain": "Domain (max 4 words)",
  "tagline": "One vivid sentence, max 20 words",
  "accentColor": "HSL values only e.g. '200 80% 52%'",
  "conversationStarters": ["Question 1", "Question 2", "Question 3"],
  "layer_core_values": "Core ethical/philosophical foundation",
  "layer_mental_models": "Key thinking frameworks with examples",
  "layer_reasoning_patterns": "How they reason step-by-step",
  "layer_emotional_stance": "How they relate to emotions and adversity",
  "layer_language_dna": "Voice, tone, vocabulary, rhetorical style",
  "layer_decision_history": "Key decisions that reveal their values",
  "layer_knowledge_base": "Core expertise, key works, key influences"
}}"""


def parse_blueprint(raw: str) -> dict:
    cleaned = _FENCE_END.sub("", _FENCE_START.sub("", raw.strip())).strip()
    try:
        blueprint = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise UpstreamTransportError(f"AI returned an invalid blueprint: {e}") from e
    if not isinstance(blueprint, dict):
        raise UpstreamTransportError("AI returned an invalid blueprint: not an object")
    return blueprint


class BlueprintService:
    def __init__(self, provider: BaseLLMProvider, transport: httpx.AsyncBaseTransport | None = None):
        self.provider = provider
        self._transport = transport

    async def wikipedia_intro(self, name: str) -> str:
        """Best-effort plain-text introduction of the closest Wikipedia article."""
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=10.0) as client:
                resp = await client.get(
                    WIKIPEDIA_API,
                    params={"action": "query", "list": "search", "srsearch": name, "srlimit": 1, "format": "json"},
                )
                resp.raise_for_status()
                results = resp.json().get("query", {}).get("search", [])
                if not results:
                    return ""

                resp = await client.get(
                    WIKIPEDIA_API,
                    params={
                        "action": "query",
                        "titles": results[0]["title"],
                        "prop": "extracts",
                        "explaintext": 1,
                        "exintro": 1,
                        "format": "json",
                    },
                )
                resp.raise_for_status()
                pages = resp.json().get("query", {}).get("pages", {})
                for page in pages.values():
                    return (page.get("extract") or "")[:6000]
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Wikipedia lookup failed for {name!r}: {e}")
        return ""

    async def generate(self, name: str, kind: str = "person", extra: str = "") -> dict:
        wiki = await self.wikipedia_intro(name)
        messages = [
            PromptMessage(role=ModelRole.SYSTEM, content=SYSTEM_PROMPT),
            PromptMessage(role=ModelRole.USER, content=_build_prompt(name, kind, extra, wiki)),
        ]
        raw = await self.provider.complete(messages, model=settings.blueprint_model, json_mode=True)
        blueprint = parse_blueprint(raw)
        missing = [f for f in BLUEPRINT_FIELDS if f not in blueprint]
        if missing:
            logger.info(f"Blueprint for {name!r} is missing fields: {', '.join(missing)}")
        return blueprint
