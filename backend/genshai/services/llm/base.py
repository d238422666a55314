"""Abstract LLM provider interface. All providers must implement this."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator

from genshai.models.conversation import MessageRole


class ModelRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


_TO_MODEL = {
    MessageRole.USER: ModelRole.USER,
    MessageRole.AGENT: ModelRole.ASSISTANT,
}
_TO_STORE = {model: store for store, model in _TO_MODEL.items()}


def to_model_role(role: MessageRole) -> ModelRole:
    return _TO_MODEL[role]


def to_store_role(role: ModelRole) -> MessageRole:
    """Inverse of to_model_role. System prompts are never stored, so SYSTEM raises."""
    try:
        return _TO_STORE[role]
    except KeyError:
        raise ValueError(f"{role.value!r} messages are not stored in conversations") from None


@dataclass
class PromptMessage:
    role: ModelRole
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role.value, "content": self.content}


class UpstreamStream(ABC):
    """An open token stream. The body must be relayed byte for byte."""

    @abstractmethod
    def aiter_bytes(self) -> AsyncIterator[bytes]:
        ...

    @abstractmethod
    async def aclose(self) -> None:
        ...


class BaseLLMProvider(ABC):
    @abstractmethod
    async def open_stream(self, messages: list[PromptMessage], model: str) -> UpstreamStream:
        """Start a streamed completion. Raises UpstreamError before any byte is returned."""
        ...

    @abstractmethod
    async def complete(
        self, messages: list[PromptMessage], model: str, json_mode: bool = False
    ) -> str:
        """Run a non-streamed completion and return the reply text."""
        ...
