"""
Project, section and contract-risk records shared by the pipeline stages.

ProjectSpec and SectionSpec are immutable once created. Section is the only
mutable record and enforces its own lifecycle: pending -> writing -> completed,
content append-only while writing and frozen afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum

DEFAULT_SECTION_LENGTH = 300


class SectionStatus(str, Enum):
    PENDING = "pending"
    WRITING = "writing"
    COMPLETED = "completed"


_STATUS_ORDER = {
    SectionStatus.PENDING: 0,
    SectionStatus.WRITING: 1,
    SectionStatus.COMPLETED: 2,
}


@dataclass(frozen=True)
class ProjectSpec:
    title: str
    content_type: str
    source_text: str
    outline: str

    @classmethod
    def from_sources(
        cls,
        *,
        title: str,
        content_type: str,
        outline: str,
        text: str = "",
        url_content: str = "",
        file_texts: list[str] | None = None,
    ) -> "ProjectSpec":
        """Build a project whose source text concatenates every provided source."""
        parts: list[str] = []
        if text.strip():
            parts.append(f"Source Text: {text.strip()}")
        if url_content.strip():
            parts.append(f"URL Content: {url_content.strip()}")
        for idx, file_text in enumerate(file_texts or [], start=1):
            if file_text.strip():
                parts.append(f"File {idx} Content: {file_text.strip()}")
        return cls(
            title=title,
            content_type=content_type,
            source_text="\n\n".join(parts),
            outline=outline,
        )

    def outline_titles(self) -> list[str]:
        return [line.strip() for line in self.outline.split("\n") if line.strip()]

    @property
    def context(self) -> str:
        return self.source_text.strip() or "No source materials provided."


@dataclass(frozen=True)
class SectionSpec:
    id: str
    title: str
    description: str
    key_points: tuple[str, ...]
    estimated_length: int = DEFAULT_SECTION_LENGTH

    def __post_init__(self):
        if not isinstance(self.key_points, tuple):
            object.__setattr__(self, "key_points", tuple(self.key_points))
        if self.estimated_length <= 0:
            raise ValueError(f"estimated_length must be positive, got {self.estimated_length}")


@dataclass
class Section:
    id: str
    title: str
    content: str = ""
    status: SectionStatus = SectionStatus.PENDING

    @classmethod
    def from_spec(cls, spec: SectionSpec) -> "Section":
        return cls(id=spec.id, title=spec.title)

    def _advance(self, target: SectionStatus) -> None:
        if _STATUS_ORDER[target] < _STATUS_ORDER[self.status]:
            raise ValueError(
                f"Section {self.id!r} cannot move from {self.status.value} to {target.value}"
            )
        self.status = target

    def start_writing(self) -> None:
        self._advance(SectionStatus.WRITING)

    def append(self, delta: str) -> None:
        if self.status is not SectionStatus.WRITING:
            raise ValueError(f"Section {self.id!r} is {self.status.value}; content is not writable")
        self.content += delta

    def complete(self, placeholder: str | None = None) -> None:
        """Freeze the section. A placeholder replaces content only when one is given."""
        if self.status is SectionStatus.COMPLETED:
            return
        if placeholder is not None:
            self.content = placeholder
        self._advance(SectionStatus.COMPLETED)

    @property
    def is_completed(self) -> bool:
        return self.status is SectionStatus.COMPLETED


# ---------------------------------------------------------------------------
# Contract-analysis variant
# ---------------------------------------------------------------------------


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class RiskFinding:
    title: str
    severity: Severity
    original_text: str
    risk_type: str
    location: str


@dataclass(frozen=True)
class Recommendation:
    action: str
    priority: Severity = Severity.MEDIUM
    effort: Severity = Severity.MEDIUM


@dataclass(frozen=True)
class DetailedRisk:
    id: str
    title: str
    severity: Severity
    description: str
    original_text: str
    detailed_explanation: str
    business_impact: str
    location: str
    suggested_new_text: str
    legal_risks: list[str] = field(default_factory=list)
    recommendations: list[Recommendation] = field(default_factory=list)


@dataclass(frozen=True)
class ContractAnalysis:
    risks: list[DetailedRisk]
    summary: str

    @property
    def total_risks(self) -> int:
        return len(self.risks)
