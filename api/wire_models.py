"""Pydantic shapes of the chat-completions wire format (buffered and streamed)."""

from pydantic import BaseModel, Field


class ChatMessagePayload(BaseModel):
    role: str = "assistant"
    content: str


class ChatChoice(BaseModel):
    index: int = 0
    message: ChatMessagePayload
    finish_reason: str | None = None


class ChatUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatCompletionResponse(BaseModel):
    id: str | None = None
    model: str | None = None
    choices: list[ChatChoice] = Field(..., min_length=1)
    usage: ChatUsage | None = None


class StreamDelta(BaseModel):
    role: str | None = None
    content: str | None = None


class StreamChoice(BaseModel):
    index: int = 0
    delta: StreamDelta = Field(default_factory=StreamDelta)
    finish_reason: str | None = None


class StreamChunk(BaseModel):
    choices: list[StreamChoice] = Field(default_factory=list)

    @property
    def content(self) -> str | None:
        if not self.choices:
            return None
        return self.choices[0].delta.content
