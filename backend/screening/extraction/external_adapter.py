"""
Layer 3: External Extraction Adapter

Last-resort extraction through an LLM provider. The narrative is
de-identified before it is sent, the reply must be a JSON object matching
the fact schema, and anything else is treated as a failure. The cascade
controller only runs this layer on escalation and only lets it fill gaps.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .base import ExtractionStrategy, StrategyResult
from .confidence import weighted_confidence
from .deidentify import deidentify_text, reidentify_text
from ..core.exceptions import ExternalServiceFailure
from ..schemas.api import ExtractionOptions
from ..schemas.codes import ComplicationCategory, ConditionCode, InfectiousTest
from ..schemas.profile import (
    CandidateProfile,
    EnvironmentalProfile,
    InfectiousDiseaseScreening,
    LifestyleProfile,
    PregnancyHistory,
    PsychologicalProfile,
)
from ..services.llm_service import LLMService, llm_service

logger = logging.getLogger(__name__)

EXTERNAL_FIELD_CONFIDENCE = 70.0

CODE_FENCE = re.compile(r"^\s*```(?:json)?\s*|\s*```\s*$", re.IGNORECASE)


class ExternalProfilePayload(BaseModel):
    """The subset of the fact schema an external provider may return."""
    model_config = ConfigDict(extra="forbid")

    age: Optional[int] = Field(None, ge=0, le=120)
    height_text: Optional[str] = None
    weight_lbs: Optional[float] = Field(None, gt=0)
    bmi: Optional[float] = Field(None, gt=0, le=100)
    pregnancy_history: Optional[PregnancyHistory] = None
    medical_conditions: List[ConditionCode] = Field(default_factory=list)
    pregnancy_specific_complications: Dict[ComplicationCategory, List[str]] = Field(default_factory=dict)
    psychological: Optional[PsychologicalProfile] = None
    lifestyle: Optional[LifestyleProfile] = None
    environmental: Optional[EnvironmentalProfile] = None
    infectious_disease: Optional[InfectiousDiseaseScreening] = None
    documentation_gaps: List[str] = Field(default_factory=list)

    def to_profile(self, confidence: float, candidate_name: Optional[str] = None) -> CandidateProfile:
        """
        Convert to a partial profile; only fields present in the reply are set.

        Gap notices get the candidate name back in place of the placeholder.
        """
        profile = CandidateProfile()
        for name in (
            "age", "height_text", "weight_lbs", "bmi", "pregnancy_history",
            "psychological", "lifestyle", "environmental", "infectious_disease",
        ):
            value = getattr(self, name)
            if value is not None:
                profile.set_field(name, value, confidence)

        for code in self.medical_conditions:
            profile.add_condition(code)
        if "medical_conditions" in self.model_fields_set:
            profile.mark_determined("medical_conditions", confidence)

        for category, mentions in self.pregnancy_specific_complications.items():
            for mention in mentions or [category.value]:
                profile.add_complication_evidence(category, mention)
        if self.pregnancy_specific_complications:
            profile.mark_determined("pregnancy_specific_complications", confidence)

        for gap in self.documentation_gaps:
            profile.add_gap(reidentify_text(gap, candidate_name))
        return profile


def _schema_prompt() -> str:
    conditions = ", ".join(code.value for code in ConditionCode)
    categories = ", ".join(category.value for category in ComplicationCategory)
    tests = ", ".join(test.value for test in InfectiousTest)
    return f"""Return a JSON object with ONLY these keys (omit any key you cannot determine):
{{
  "age": <integer>,
  "height_text": "<e.g. 5'6\\">",
  "weight_lbs": <number>,
  "bmi": <number>,
  "pregnancy_history": {{
    "has_completed_pregnancy": <bool>,
    "number_of_term_pregnancies": <integer>,
    "number_of_cesareans": <integer>,
    "number_of_complications": <integer>,
    "total_deliveries": <integer>,
    "complications": [{{"category": "<category>", "mentions": ["<text>"]}}]
  }},
  "medical_conditions": ["<condition code>"],
  "pregnancy_specific_complications": {{"<category>": ["<text>"]}},
  "psychological": {{"coercion_indicated": <bool>, "psychotropic_medication": <bool>, "bipolar_or_psychosis": <bool>,
                    "major_depression": <bool>, "substance_abuse": <bool>, "eating_disorder": <bool>,
                    "anxiety": <bool>, "abuse_history": <bool>, "adequate_support_system": <bool>}},
  "lifestyle": {{"current_smoker": <bool>, "excessive_alcohol": <bool>, "drug_use": <bool>, "recent_tattoos": <bool>}},
  "environmental": {{"housing_instability": <bool>, "relationship_instability": <bool>, "partner_not_supportive": <bool>,
                    "legal_issues": <bool>, "employment_instability": <bool>, "financial_instability": <bool>}},
  "infectious_disease": {{"tests_documented": ["<test>"], "positive_results": ["<test>"]}},
  "documentation_gaps": ["<missing record notice>"]
}}

Allowed condition codes: {conditions}
Allowed complication categories: {categories}
Allowed infectious tests: {tests}"""


SYSTEM_PROMPT = (
    "You are a medical record analyzer for gestational carrier screening. "
    "Extract ONLY facts stated in the records. Do not make recommendations. "
    "Preterm means delivery before 37 weeks. Routine membrane rupture at term is not a complication. "
    "Patient identifiers have been removed."
)


def parse_payload(raw: str) -> ExternalProfilePayload:
    """Parse and validate a provider reply. Raises ExternalServiceFailure."""
    cleaned = CODE_FENCE.sub("", raw.strip())
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ExternalServiceFailure(f"External response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ExternalServiceFailure("External response is not a JSON object")
    try:
        return ExternalProfilePayload.model_validate(data)
    except ValidationError as e:
        raise ExternalServiceFailure(f"External response does not match the fact schema: {e}") from e


class ExternalExtractionAdapter:
    """Client side of the external extraction contract."""

    def __init__(self, service: Optional[LLMService] = None):
        self.service = service or llm_service

    async def extract(
        self,
        text: str,
        credential: str,
        context_hints: Optional[Dict[str, Any]] = None,
        provider: Optional[str] = None,
        candidate_name: Optional[str] = None,
    ) -> ExternalProfilePayload:
        """Send de-identified text to the provider and validate the reply."""
        if not credential:
            raise ExternalServiceFailure("No credential supplied for the external extraction layer")

        prompt_parts = [_schema_prompt()]
        if context_hints:
            hints = "\n".join(f"- {key}: {value}" for key, value in sorted(context_hints.items()))
            prompt_parts.append(f"USER-PROVIDED INFORMATION:\n{hints}")
        prompt_parts.append(f"Medical Records:\n{deidentify_text(text, candidate_name)}")

        raw = await self.service.generate_json(
            "\n\n".join(prompt_parts),
            api_key=credential,
            provider=provider,
            system_prompt=SYSTEM_PROMPT,
        )
        return parse_payload(raw)


class ExternalExtractionStrategy(ExtractionStrategy):
    """Layer 3 strategy wrapping the external adapter."""

    layer = 3
    name = "external"
    escalation_only = True

    def __init__(self, adapter: Optional[ExternalExtractionAdapter] = None):
        self.adapter = adapter or ExternalExtractionAdapter()

    async def try_extract(
        self,
        text: str,
        current: CandidateProfile,
        options: ExtractionOptions,
    ) -> StrategyResult:
        payload = await self.adapter.extract(
            text,
            options.credential,
            context_hints=options.context_hints,
            provider=options.provider,
            candidate_name=options.candidate_name,
        )
        partial = payload.to_profile(EXTERNAL_FIELD_CONFIDENCE, options.candidate_name)
        partial.parsing_metadata.layers_used = [self.layer]
        logger.info("External layer returned %d populated fields", len(partial.parsing_metadata.per_field_confidence))
        return StrategyResult(
            profile=partial,
            confidence=weighted_confidence(partial),
            residual_text="",
            layer=self.layer,
        )
