"""Pydantic models for structured LLM responses, validated at the client boundary."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

SeverityLiteral = Literal["low", "medium", "high"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RefinedSectionItem(_CamelModel):
    id: str
    title: str
    description: str
    key_points: list[str] = Field(alias="keyPoints")
    estimated_length: int = Field(alias="estimatedLength", gt=0)

    @field_validator("estimated_length", mode="before")
    @classmethod
    def _round_length(cls, value):
        if isinstance(value, float):
            return round(value)
        return value


class RefinedSectionsPayload(_CamelModel):
    sections: list[RefinedSectionItem] = Field(..., min_length=1)


class KeywordsPayload(_CamelModel):
    keywords: list[str] = Field(default_factory=list)


class RiskItem(_CamelModel):
    title: str
    severity: SeverityLiteral
    original_text: str = Field(alias="originalText")
    risk_type: str = Field(alias="riskType")
    location: str

    @field_validator("severity", mode="before")
    @classmethod
    def _lower_severity(cls, value):
        return value.lower() if isinstance(value, str) else value


class RiskIdentificationPayload(_CamelModel):
    risks: list[RiskItem] = Field(default_factory=list)
    summary: str = ""


class RecommendationItem(_CamelModel):
    action: str
    priority: SeverityLiteral = "medium"
    effort: SeverityLiteral = "medium"


class RiskDetailPayload(_CamelModel):
    detailed_explanation: str = Field(alias="detailedExplanation")
    business_impact: str = Field(alias="businessImpact")
    legal_risks: list[str] = Field(default_factory=list, alias="legalRisks")
    recommendations: list[RecommendationItem] = Field(default_factory=list)
    suggested_new_text: str = Field(alias="suggestedNewText")
