"""
Models package for pipeline records and tagged provider results.
"""

from .project import (
    ContractAnalysis,
    DetailedRisk,
    ProjectSpec,
    Recommendation,
    RiskFinding,
    Section,
    SectionSpec,
    SectionStatus,
    Severity,
)
from .provider_result import NormalizedError, ProviderResult

__all__ = [
    "ContractAnalysis",
    "DetailedRisk",
    "NormalizedError",
    "ProjectSpec",
    "ProviderResult",
    "Recommendation",
    "RiskFinding",
    "Section",
    "SectionSpec",
    "SectionStatus",
    "Severity",
]
