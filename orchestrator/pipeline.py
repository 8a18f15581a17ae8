"""
PipelineOrchestrator - three-phase content pipeline.

States: refining-sections -> writing -> coherence -> complete.

A PipelineRun owns the Section list for one project and is the only thing
that advances section lifecycles. Sections are written strictly one after
another; progress is a deterministic function of phase and completed count
and never decreases.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

from api.base_client import BaseLLMClient
from api.streaming import DeltaStream
from models.project import ProjectSpec, Section, SectionSpec
from orchestrator.coherence_refiner import CoherenceRefiner, concatenate_sections
from orchestrator.pipeline_types import (
    PROGRESS_COHERENCE,
    PROGRESS_COMPLETE,
    PROGRESS_REFINING_ANALYSIS,
    PROGRESS_REFINING_RESULT,
    PROGRESS_START,
    PROGRESS_WRITING_START,
    EventType,
    PipelineEvent,
    PipelinePhase,
    error_event,
    writing_progress,
)
from orchestrator.section_refiner import SectionRefiner
from orchestrator.section_writer import SectionWriter
from tools.web.tavily_client import TavilySearchClient
from utils.errors import ContentPipelineError, ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

PLACEHOLDER_TEMPLATE = (
    "This section would cover {title}. Content generation failed, "
    "but the structure is in place for manual editing."
)


def placeholder_content(title: str) -> str:
    return PLACEHOLDER_TEMPLATE.format(title=title)


@dataclass
class FinalContent:
    """
    The document handed off at ``complete``.

    ``text`` is always usable: the finished document, or (while ``stream`` is
    still live) the raw concatenation of sections that the coherence stream
    will replace once drained.
    """

    text: str
    stream: DeltaStream | None = None
    coherence_applied: bool = False

    @property
    def is_streaming(self) -> bool:
        return self.stream is not None

    def resolve(self, refined: str) -> None:
        if refined.strip():
            self.text = refined
        else:
            logger.warning("Coherence stream produced no content; keeping concatenated sections")
            self.coherence_applied = False
        self.stream = None

    def abandon(self) -> None:
        self.coherence_applied = False
        self.stream = None

    def read(self) -> str:
        """Drain the live stream (if any) and return the final document."""
        if self.stream is None:
            return self.text
        stream = self.stream
        try:
            with stream:
                self.resolve(stream.read_all())
        except ContentPipelineError as e:
            logger.error(f"Coherence stream broke, keeping concatenated sections: {e}")
            self.abandon()
        return self.text


@dataclass
class PipelineResult:
    content: str
    sections: list[Section]
    section_specs: list[SectionSpec]
    progress: int
    coherence_applied: bool
    sections_refined: bool = False
    failed_sections: list[str] = field(default_factory=list)


class PipelineRun:
    """One pass of the state machine over one project."""

    def __init__(self, orchestrator: "PipelineOrchestrator", project: ProjectSpec, *, streaming: bool):
        self.orchestrator = orchestrator
        self.project = project
        self.streaming = streaming
        self.phase: PipelinePhase | None = None
        self.progress = 0
        self.section_specs: list[SectionSpec] = []
        self.sections: list[Section] = []
        self.sections_refined = False
        self.failed_sections: list[str] = []
        self.final: FinalContent | None = None
        self._started = False

    def _advance(self, phase: PipelinePhase, progress: int, message: str) -> PipelineEvent:
        self.phase = phase
        self.progress = max(self.progress, progress)
        logger.info(
            f"Pipeline phase {phase.value} ({self.progress}%): {message}",
            extra={"extra_fields": {"phase": phase.value, "progress": self.progress}},
        )
        return PipelineEvent(
            EventType.PHASE, {"phase": phase.value, "progress": self.progress, "message": message}
        )

    def _section_event(self, index: int, section: Section, **extra) -> PipelineEvent:
        return PipelineEvent(
            EventType.SECTION,
            {
                "sectionId": section.id,
                "index": index,
                "title": section.title,
                "status": section.status.value,
                "progress": self.progress,
                **extra,
            },
        )

    def events(self) -> Iterator[PipelineEvent]:
        """Drive the pipeline to ``complete``; afterwards ``self.final`` is set."""
        if self._started:
            raise RuntimeError("A pipeline run can only be iterated once")
        self._started = True

        yield from self._refining_phase()
        yield from self._writing_phase()
        yield from self._coherence_phase()

        yield self._advance(
            PipelinePhase.COMPLETE,
            PROGRESS_COMPLETE,
            "Content generation completed",
        ).with_data(
            coherenceApplied=self.final.coherence_applied,
            streaming=self.final.is_streaming,
        )

    def _refining_phase(self) -> Iterator[PipelineEvent]:
        project = self.project
        outline_titles = project.outline_titles()
        yield self._advance(
            PipelinePhase.REFINING_SECTIONS,
            PROGRESS_START,
            f"Analyzing {project.content_type} with {len(outline_titles)} outline sections",
        )
        yield self._advance(
            PipelinePhase.REFINING_SECTIONS,
            PROGRESS_REFINING_ANALYSIS,
            "Optimizing section structure",
        )

        specs, refined = self.orchestrator.refiner.refine_or_fallback(project)
        self.section_specs = specs
        self.sections_refined = refined
        message = (
            f"{len(specs)} sections optimized"
            if refined
            else "Error refining sections. Using original outline..."
        )
        yield self._advance(
            PipelinePhase.REFINING_SECTIONS, PROGRESS_REFINING_RESULT, message
        ).with_data(
            sections=[
                {
                    "id": s.id,
                    "title": s.title,
                    "description": s.description,
                    "keyPoints": list(s.key_points),
                    "estimatedLength": s.estimated_length,
                }
                for s in specs
            ],
            refined=refined,
        )

        self.sections = [Section.from_spec(spec) for spec in specs]
        yield self._advance(
            PipelinePhase.WRITING, PROGRESS_WRITING_START, "Preparing content generation"
        )

    def _writing_phase(self) -> Iterator[PipelineEvent]:
        total = len(self.sections)
        for index, (spec, section) in enumerate(zip(self.section_specs, self.sections)):
            section.start_writing()
            yield self._section_event(index, section)

            failed = False
            try:
                if self.streaming:
                    for event in self.orchestrator.writer.write_streaming(spec, self.project):
                        if event.type is EventType.CONTENT:
                            section.append(event.data["content"])
                        elif event.type is EventType.ERROR:
                            failed = True
                        yield event.with_data(sectionId=section.id)
                else:
                    section.append(self.orchestrator.writer.write(spec, self.project))
            except Exception as e:
                # A single section never aborts the run
                failed = True
                logger.error(
                    f"Section writing failed for '{spec.title}': {e}",
                    extra={"extra_fields": {"section": spec.id, "error_type": type(e).__name__}},
                )
                yield error_event(f"Section writing failed: {spec.title}").with_data(
                    sectionId=section.id
                )

            if section.content.strip():
                section.complete()
            else:
                section.complete(placeholder=placeholder_content(spec.title))
            if failed:
                self.failed_sections.append(section.id)

            self.progress = max(self.progress, writing_progress(index + 1, total))
            yield self._section_event(index, section, content=section.content)

    def _coherence_phase(self) -> Iterator[PipelineEvent]:
        yield self._advance(
            PipelinePhase.COHERENCE, PROGRESS_COHERENCE, "Final polish: standardizing the document"
        )
        coherence = self.orchestrator.coherence
        project = self.project
        fallback = concatenate_sections(self.sections)

        if not self.streaming:
            text, applied = coherence.refine_or_concatenate(
                project.title, project.content_type, self.sections
            )
            self.final = FinalContent(text=text, coherence_applied=applied)
            return

        try:
            stream = coherence.refine_streaming(project.title, project.content_type, self.sections)
            self.final = FinalContent(text=fallback, stream=stream, coherence_applied=True)
        except ContentPipelineError as e:
            logger.warning(f"Coherence refinement failed, using concatenation: {e}")
            self.final = FinalContent(text=fallback, coherence_applied=False)

    def stream_all(self) -> Iterator[PipelineEvent]:
        """
        Pipeline events, then the coherence pass as ``document`` deltas, then ``done``.

        A coherence stream that breaks midway yields an ``error`` event and the
        concatenated sections are kept.
        """
        yield from self.events()

        final = self.final
        if final.stream is not None:
            stream = final.stream
            parts: list[str] = []
            with stream:
                try:
                    for delta in stream:
                        parts.append(delta)
                        yield PipelineEvent(EventType.DOCUMENT, {"content": delta})
                except ContentPipelineError as e:
                    logger.error(f"Coherence stream broke: {e}")
                    final.abandon()
                    yield error_event("Coherence refinement failed")
            if final.stream is not None:
                final.resolve("".join(parts))

        yield PipelineEvent(
            EventType.DONE,
            {
                "content": final.text,
                "coherenceApplied": final.coherence_applied,
                "progress": self.progress,
            },
        )

    def result(self) -> PipelineResult:
        if self.final is None:
            raise RuntimeError("Pipeline run has not completed")
        return PipelineResult(
            content=self.final.read(),
            sections=self.sections,
            section_specs=self.section_specs,
            progress=self.progress,
            coherence_applied=self.final.coherence_applied,
            sections_refined=self.sections_refined,
            failed_sections=list(self.failed_sections),
        )


class PipelineOrchestrator:
    def __init__(
        self,
        llm_client: BaseLLMClient,
        search_client: TavilySearchClient,
        *,
        refiner: SectionRefiner | None = None,
        writer: SectionWriter | None = None,
        coherence: CoherenceRefiner | None = None,
    ):
        self.refiner = refiner or SectionRefiner(llm_client)
        self.writer = writer or SectionWriter(llm_client, search_client)
        self.coherence = coherence or CoherenceRefiner(llm_client)

    @staticmethod
    def validate_project(project: ProjectSpec) -> None:
        missing = [
            name
            for name, value in (
                ("title", project.title),
                ("contentType", project.content_type),
                ("outline", project.outline),
            )
            if not value or not value.strip()
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        if not project.outline_titles():
            raise ValidationError("Outline must contain at least one section title")

    def start(self, project: ProjectSpec, *, streaming: bool = True) -> PipelineRun:
        """
        Create a run for ``project``.

        Raises:
            ValidationError: If title, content type or outline is missing
        """
        self.validate_project(project)
        return PipelineRun(self, project, streaming=streaming)

    def run(self, project: ProjectSpec) -> PipelineResult:
        """Run the whole pipeline with buffered calls and return the finished document."""
        pipeline_run = self.start(project, streaming=False)
        for _ in pipeline_run.events():
            pass
        return pipeline_run.result()
