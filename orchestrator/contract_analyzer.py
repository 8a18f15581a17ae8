"""
ContractAnalyzer - two-pass contract risk analysis.

Pass 1 identifies coarse findings with one structured call. Pass 2 expands
each finding independently; those calls have no ordering dependency and run
concurrently on a bounded thread pool. A failed or malformed detail call
degrades to a generic record instead of failing the analysis.
"""

import random
import string
import time
from concurrent.futures import ThreadPoolExecutor

from api.base_client import BaseLLMClient
from api.structured import parse_structured_output
from models.project import (
    ContractAnalysis,
    DetailedRisk,
    Recommendation,
    RiskFinding,
    Severity,
)
from orchestrator import prompts
from orchestrator.payloads import RiskDetailPayload, RiskIdentificationPayload
from utils.errors import ContentPipelineError, ProviderError, ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_WORKERS = 4
NO_RISKS_SUMMARY = "No significant risks identified in this contract."


def new_risk_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"risk_{int(time.time() * 1000)}_{suffix}"


def fallback_detail(finding: RiskFinding, explanation: str) -> DetailedRisk:
    return DetailedRisk(
        id=new_risk_id(),
        title=finding.title,
        severity=finding.severity,
        description=f"{finding.risk_type} risk identified in {finding.location}",
        original_text=finding.original_text,
        detailed_explanation=explanation,
        business_impact="Analysis of business impact was not available in structured format.",
        location=finding.location,
        suggested_new_text="Please consult with legal counsel for appropriate replacement text.",
        legal_risks=["Legal analysis was not available in structured format"],
        recommendations=[Recommendation(action="Review this clause with legal counsel")],
    )


class ContractAnalyzer:
    def __init__(self, llm_client: BaseLLMClient, *, max_workers: int = DEFAULT_MAX_WORKERS):
        self.llm_client = llm_client
        self.max_workers = max_workers

    def identify_risks(self, contract_text: str) -> tuple[list[RiskFinding], str]:
        """
        Raises:
            ProviderError: If the call fails or its output cannot be parsed
        """
        raw = self.llm_client.complete(
            prompts.risk_identification_messages(contract_text),
            prompts.RISK_IDENTIFICATION_SCHEMA,
            schema_name="contract_risks",
        )
        result = parse_structured_output(
            raw, RiskIdentificationPayload, provider=self.llm_client.provider_name
        )
        if result.is_error:
            raise ProviderError(
                f"Risk identification returned malformed output: {result.error.message}",
                provider=self.llm_client.provider_name,
                details=result.error.details,
            )

        findings = [
            RiskFinding(
                title=item.title,
                severity=Severity(item.severity),
                original_text=item.original_text,
                risk_type=item.risk_type,
                location=item.location,
            )
            for item in result.payload.risks
        ]
        return findings, result.payload.summary

    def analyze_risk(self, finding: RiskFinding, contract_text: str) -> DetailedRisk:
        """Expand one finding; never raises."""
        try:
            raw = self.llm_client.complete(prompts.risk_detail_messages(finding, contract_text))
        except ContentPipelineError as e:
            logger.warning(f"Detail analysis failed for '{finding.title}': {e}")
            return fallback_detail(finding, f"Detailed analysis unavailable: {e}")

        result = parse_structured_output(
            raw, RiskDetailPayload, provider=self.llm_client.provider_name
        )
        if result.is_error:
            logger.warning(
                f"Detail analysis for '{finding.title}' was not valid JSON; using raw text",
                extra={"extra_fields": {"risk_type": finding.risk_type}},
            )
            return fallback_detail(finding, raw)

        detail = result.payload
        return DetailedRisk(
            id=new_risk_id(),
            title=finding.title,
            severity=finding.severity,
            description=f"{finding.risk_type} risk identified in {finding.location}",
            original_text=finding.original_text,
            detailed_explanation=detail.detailed_explanation,
            business_impact=detail.business_impact,
            location=finding.location,
            suggested_new_text=detail.suggested_new_text,
            legal_risks=list(detail.legal_risks),
            recommendations=[
                Recommendation(
                    action=rec.action,
                    priority=Severity(rec.priority),
                    effort=Severity(rec.effort),
                )
                for rec in detail.recommendations
            ],
        )

    def analyze(self, contract_text: str) -> ContractAnalysis:
        """
        Identify risks, then expand each one concurrently.

        Raises:
            ValidationError: If the contract text is empty
            ProviderError: If risk identification fails
        """
        if not contract_text or not contract_text.strip():
            raise ValidationError("Contract text is required")

        logger.info("Step 1: Identifying risks...")
        findings, summary = self.identify_risks(contract_text)
        if not findings:
            return ContractAnalysis(risks=[], summary=summary or NO_RISKS_SUMMARY)

        logger.info(f"Step 2: Analyzing {len(findings)} risks in detail...")
        workers = max(1, min(self.max_workers, len(findings)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            detailed = list(
                executor.map(lambda finding: self.analyze_risk(finding, contract_text), findings)
            )

        logger.info("Contract analysis completed")
        return ContractAnalysis(risks=detailed, summary=summary)
