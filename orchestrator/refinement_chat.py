"""
RefinementChat - post-pipeline feedback loop.

A message containing any modification keyword (case-insensitive substring)
is treated as an edit request, even if it also asks a question; everything
else is conversational.
"""

from dataclasses import dataclass
from enum import Enum

from api.base_client import BaseLLMClient
from api.streaming import DeltaStream
from orchestrator import prompts
from utils.errors import ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

MODIFICATION_KEYWORDS = (
    "make it",
    "change",
    "rewrite",
    "modify",
    "adjust",
    "improve",
    "enhance",
    "more professional",
    "more casual",
    "shorter",
    "longer",
    "simplify",
    "add more",
    "remove",
    "tone",
    "style",
    "formal",
    "informal",
)

MODIFICATION_ACK = (
    "I've updated your content based on your feedback. The changes have been applied "
    "to maintain the quality while addressing your specific requests."
)


class ChatMode(str, Enum):
    MODIFICATION = "modification"
    CONVERSATION = "conversation"


def classify_message(user_message: str) -> ChatMode:
    lowered = user_message.lower()
    if any(keyword in lowered for keyword in MODIFICATION_KEYWORDS):
        return ChatMode.MODIFICATION
    return ChatMode.CONVERSATION


@dataclass(frozen=True)
class ChatReply:
    reply_text: str
    updated_content: str | None = None
    mode: ChatMode = ChatMode.CONVERSATION

    @property
    def has_content_update(self) -> bool:
        return self.updated_content is not None


class RefinementChat:
    def __init__(self, llm_client: BaseLLMClient):
        self.llm_client = llm_client

    def _messages(
        self,
        mode: ChatMode,
        current_content: str,
        user_message: str,
        history: list[dict[str, str]],
        project_title: str,
        content_type: str,
    ) -> list[dict[str, str]]:
        if mode is ChatMode.MODIFICATION:
            return prompts.modification_messages(
                current_content, user_message, project_title, content_type
            )
        return prompts.conversation_messages(
            current_content, user_message, project_title, content_type, history
        )

    @staticmethod
    def _validate(current_content: str, user_message: str) -> None:
        if not current_content or not user_message or not user_message.strip():
            raise ValidationError("Missing required fields: content, userMessage")

    def respond(
        self,
        current_content: str,
        user_message: str,
        history: list[dict[str, str]] | None = None,
        *,
        project_title: str,
        content_type: str,
    ) -> ChatReply:
        """
        Answer one chat turn.

        Returns:
            ChatReply with ``updated_content`` set only for modification requests

        Raises:
            ValidationError: If content or message is empty
            ProviderError: If the LLM call fails after retries
        """
        self._validate(current_content, user_message)
        mode = classify_message(user_message)
        logger.info(f"Chat turn classified as {mode.value}")
        messages = self._messages(
            mode, current_content, user_message, history or [], project_title, content_type
        )
        text = self.llm_client.complete(messages)

        if mode is ChatMode.MODIFICATION:
            return ChatReply(reply_text=MODIFICATION_ACK, updated_content=text, mode=mode)
        return ChatReply(reply_text=text, mode=mode)

    def respond_streaming(
        self,
        current_content: str,
        user_message: str,
        history: list[dict[str, str]] | None = None,
        *,
        project_title: str,
        content_type: str,
    ) -> tuple[ChatMode, DeltaStream]:
        """Same classification as ``respond``; returns the mode and a delta stream."""
        self._validate(current_content, user_message)
        mode = classify_message(user_message)
        logger.info(f"Streaming chat turn classified as {mode.value}")
        messages = self._messages(
            mode, current_content, user_message, history or [], project_title, content_type
        )
        return mode, self.llm_client.complete_streaming(messages)
