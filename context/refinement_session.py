"""
RefinementSession - owns the final document and chat history after handoff.

History is kept as {"role": "user|assistant", "content": str} messages and
trimmed to the most recent ``max_messages``.
"""

import os

from orchestrator.pipeline import FinalContent
from orchestrator.refinement_chat import ChatReply, RefinementChat
from utils.logger import get_logger

logger = get_logger(__name__)


class RefinementSession:
    """
    Post-pipeline state for one project.

    Features:
    - Takes ownership of the pipeline's final content (draining a live
      coherence stream if one was handed over)
    - Applies chat replies: modification replies replace the document
    - Automatic trimming of conversation history
    """

    def __init__(
        self,
        chat: RefinementChat,
        *,
        project_title: str,
        content_type: str,
        content: str = "",
        max_messages: int | None = None,
    ):
        """
        Args:
            chat: RefinementChat used to answer turns
            project_title: Title passed into every prompt
            content_type: Content type passed into every prompt
            content: Initial document
            max_messages: History cap; reads MAX_CONTEXT_MESSAGES (default 20) when None
        """
        if max_messages is None:
            max_messages = int(os.getenv("MAX_CONTEXT_MESSAGES", "20"))

        self.chat = chat
        self.project_title = project_title
        self.content_type = content_type
        self.content = content
        self.max_messages = max_messages
        self.messages: list[dict[str, str]] = []
        logger.info(f"Initialized RefinementSession (max_messages={max_messages})")

    def take_final(self, final: FinalContent) -> str:
        """Adopt the pipeline's final document, draining its stream if still live."""
        self.content = final.read()
        return self.content

    def add_user(self, text: str) -> None:
        if not text or not text.strip():
            logger.warning("Attempted to add empty user message")
            return
        self.messages.append({"role": "user", "content": text.strip()})
        self._auto_trim()

    def add_assistant(self, text: str) -> None:
        if not text or not text.strip():
            logger.warning("Attempted to add empty assistant message")
            return
        self.messages.append({"role": "assistant", "content": text.strip()})
        self._auto_trim()

    def get_messages(self) -> list[dict[str, str]]:
        return self.messages.copy()

    def send(self, user_message: str) -> ChatReply:
        """
        Run one chat turn against the owned document.

        History passed to the model excludes the current message; both sides
        of the turn are recorded only after the call succeeds.
        """
        reply = self.chat.respond(
            self.content,
            user_message,
            self.get_messages(),
            project_title=self.project_title,
            content_type=self.content_type,
        )
        self.apply(user_message, reply)
        return reply

    def apply(self, user_message: str, reply: ChatReply) -> None:
        self.add_user(user_message)
        self.add_assistant(reply.reply_text)
        if reply.updated_content is not None:
            self.content = reply.updated_content
            logger.info(f"Document updated from feedback ({len(self.content)} chars)")

    def reset(self) -> None:
        self.messages = []
        logger.info("Reset refinement conversation")

    def get_conversation_summary(self, last_n: int = 10) -> str:
        if not self.messages:
            return "No conversation history"

        recent = self.messages[-last_n:]
        lines = [f"=== Conversation (last {len(recent)} of {len(self.messages)} messages) ==="]
        for i, msg in enumerate(recent, 1):
            content = msg["content"]
            if len(content) > 100:
                content = content[:97] + "..."
            lines.append(f"{i}. [{msg['role'].upper()}] {content}")
        return "\n".join(lines)

    def _auto_trim(self) -> None:
        if len(self.messages) > self.max_messages:
            to_remove = len(self.messages) - self.max_messages
            self.messages = self.messages[to_remove:]
            logger.info(f"Auto-trimmed conversation: removed {to_remove} old messages")
