"""Pydantic request models for FastAPI endpoints (camelCase on the wire)."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConversationHistoryItem(CamelModel):
    role: str = Field(..., pattern="^(user|assistant|system)$")
    content: str


class CoherenceSectionItem(CamelModel):
    title: str
    content: str


class WriteRequest(CamelModel):
    """
    Single pipeline step. Which fields are required depends on ``action``:

    - refine-sections: title, content_type, context, sections (outline titles)
    - write-section: section_title, section_description, key_points,
      project_title, project_content_type, project_context, estimated_length
    - refine-coherence: project_title, content_type, sections ({title, content})
    """

    action: str
    stream: bool = False

    title: str | None = None
    content_type: str | None = None
    context: str | None = None
    sections: list[str | CoherenceSectionItem] | None = None

    section_id: str | None = None
    section_title: str | None = None
    section_description: str | None = None
    key_points: list[str] = Field(default_factory=list)
    project_title: str | None = None
    project_content_type: str | None = None
    project_context: str | None = None
    estimated_length: int | None = Field(None, gt=0)


class PipelineRequest(CamelModel):
    title: str = Field(..., min_length=1)
    content_type: str = Field(..., min_length=1)
    outline: str = Field(..., min_length=1)
    source_text: str = ""
    url_content: str = ""
    file_texts: list[str] = Field(default_factory=list)
    stream: bool = False


class ChatRequest(CamelModel):
    content: str = Field(..., min_length=1)
    user_message: str = Field(..., min_length=1)
    project_title: str = Field(..., min_length=1)
    content_type: str = Field(..., min_length=1)
    conversation_history: list[ConversationHistoryItem] = Field(default_factory=list)
    stream: bool = False


class ScrapeRequest(CamelModel):
    url: str | None = None


class AnalysisRequest(CamelModel):
    text: str | None = None

