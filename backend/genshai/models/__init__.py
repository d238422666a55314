from genshai.models.agent import CustomAgent
from genshai.models.conversation import Conversation, Message, MessageRole

__all__ = ["Conversation", "CustomAgent", "Message", "MessageRole"]
