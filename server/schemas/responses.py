"""Pydantic response models (DTOs) for FastAPI endpoints."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelDTO(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponseDTO(BaseModel):
    status: str
    timestamp: str
    version: str


class ErrorResponseDTO(BaseModel):
    error: str
    details: str | None = None


class SectionSpecDTO(CamelDTO):
    id: str
    title: str
    description: str
    key_points: list[str]
    estimated_length: int

    @classmethod
    def from_spec(cls, spec):
        return cls(
            id=spec.id,
            title=spec.title,
            description=spec.description,
            key_points=list(spec.key_points),
            estimated_length=spec.estimated_length,
        )


class RefineSectionsResponseDTO(CamelDTO):
    success: bool = True
    data: list[SectionSpecDTO]


class ContentDataDTO(CamelDTO):
    content: str


class ContentResponseDTO(CamelDTO):
    success: bool = True
    data: ContentDataDTO


class SectionDTO(CamelDTO):
    id: str
    title: str
    content: str
    status: str


class PipelineResponseDTO(CamelDTO):
    content: str
    sections: list[SectionDTO]
    section_specs: list[SectionSpecDTO]
    progress: int
    coherence_applied: bool
    sections_refined: bool
    failed_sections: list[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result):
        """Convert a PipelineResult to DTO."""
        return cls(
            content=result.content,
            sections=[
                SectionDTO(id=s.id, title=s.title, content=s.content, status=s.status.value)
                for s in result.sections
            ],
            section_specs=[SectionSpecDTO.from_spec(spec) for spec in result.section_specs],
            progress=result.progress,
            coherence_applied=result.coherence_applied,
            sections_refined=result.sections_refined,
            failed_sections=result.failed_sections,
        )


class ChatDataDTO(CamelDTO):
    response: str
    updated_content: str | None = None
    has_content_update: bool = False


class ChatResponseDTO(CamelDTO):
    success: bool = True
    data: ChatDataDTO

    @classmethod
    def from_reply(cls, reply):
        return cls(
            data=ChatDataDTO(
                response=reply.reply_text,
                updated_content=reply.updated_content,
                has_content_update=reply.has_content_update,
            )
        )


class UploadDataDTO(CamelDTO):
    text: str
    file_name: str
    file_size: int
    page_count: int
    table_count: int
    figure_count: int


class UploadResponseDTO(CamelDTO):
    success: bool = True
    data: UploadDataDTO

    @classmethod
    def from_document(cls, doc):
        return cls(
            data=UploadDataDTO(
                text=doc.text,
                file_name=doc.file_name,
                file_size=doc.file_size,
                page_count=doc.page_count,
                table_count=doc.table_count,
                figure_count=doc.figure_count,
            )
        )


class ScrapeDataDTO(CamelDTO):
    url: str
    title: str
    text: str
    description: str
    author: str
    published_date: str
    word_count: int


class ScrapeResponseDTO(CamelDTO):
    success: bool = True
    data: ScrapeDataDTO

    @classmethod
    def from_page(cls, page):
        return cls(
            data=ScrapeDataDTO(
                url=page.url,
                title=page.title,
                text=page.text,
                description=page.description,
                author=page.author,
                published_date=page.published_date,
                word_count=page.word_count,
            )
        )


class RecommendationDTO(CamelDTO):
    action: str
    priority: str
    effort: str


class RiskDTO(CamelDTO):
    id: str
    title: str
    severity: str
    description: str
    original_text: str
    business_impact: str
    legal_risks: list[str]
    recommendations: list[RecommendationDTO]
    suggested_new_text: str
    location: str


class AnalysisResponseDTO(CamelDTO):
    total_risks: int
    risks: list[RiskDTO]
    summary: str
    analysis_complete: bool = True

    @classmethod
    def from_analysis(cls, analysis):
        """Risk ``description`` carries the detailed explanation."""
        return cls(
            total_risks=analysis.total_risks,
            risks=[
                RiskDTO(
                    id=r.id,
                    title=r.title,
                    severity=r.severity.value,
                    description=r.detailed_explanation,
                    original_text=r.original_text,
                    business_impact=r.business_impact,
                    legal_risks=list(r.legal_risks),
                    recommendations=[
                        RecommendationDTO(
                            action=rec.action,
                            priority=rec.priority.value,
                            effort=rec.effort.value,
                        )
                        for rec in r.recommendations
                    ],
                    suggested_new_text=r.suggested_new_text,
                    location=r.location,
                )
                for r in analysis.risks
            ],
            summary=analysis.summary,
        )
