from pydantic import BaseModel, Field, ValidationError
from typing import Any, Dict, List, Optional

from .codes import ComplicationCategory, ConditionCode, InfectiousTest
from ..core.exceptions import ExtractionGap, UnrecoverableInputError

# Fields the scorers cannot work without
REQUIRED_FIELDS = ("age", "pregnancy_history", "bmi", "medical_conditions")

# Fields a later extraction layer may only fill, never overwrite when confident
REPLACEABLE_FIELDS = (
    "age",
    "height_text",
    "weight_lbs",
    "bmi",
    "pregnancy_history",
    "psychological",
    "lifestyle",
    "environmental",
    "infectious_disease",
)

# Collections a later layer adds to without removing existing entries
ADDITIVE_FIELDS = ("medical_conditions", "pregnancy_specific_complications")

# More complications than this many per term pregnancy is flagged for review
IMPLAUSIBLE_COMPLICATION_RATIO = 3

MISSING_FIELD_GAPS = {
    "age": ExtractionGap("age", "Age not documented"),
    "pregnancy_history": ExtractionGap("pregnancy_history", "Pregnancy history not documented"),
    "bmi": ExtractionGap("bmi", "BMI not documented (no BMI, or height and weight, found)"),
    "medical_conditions": ExtractionGap("medical_conditions", "Medical history not documented"),
}


class ComplicationRecord(BaseModel):
    """One complication category from prior pregnancies, with its raw mentions."""
    category: ComplicationCategory
    mentions: List[str] = Field(default_factory=list)


class ComplicationEvidence(BaseModel):
    """Raw textual evidence for a complication category."""
    found: bool = False
    mentions: List[str] = Field(default_factory=list)


class PregnancyHistory(BaseModel):
    """Obstetric history summary."""
    has_completed_pregnancy: bool = False
    number_of_term_pregnancies: int = Field(0, ge=0)
    number_of_cesareans: int = Field(0, ge=0)
    number_of_complications: int = Field(0, ge=0)
    total_deliveries: int = Field(0, ge=0)
    complications: List[ComplicationRecord] = Field(default_factory=list)


class PsychologicalProfile(BaseModel):
    """Psychological screening attributes. None means not documented."""
    coercion_indicated: Optional[bool] = None
    psychotropic_medication: Optional[bool] = None
    bipolar_or_psychosis: Optional[bool] = None
    major_depression: Optional[bool] = None
    substance_abuse: Optional[bool] = None
    eating_disorder: Optional[bool] = None
    anxiety: Optional[bool] = None
    abuse_history: Optional[bool] = None
    adequate_support_system: Optional[bool] = None


class LifestyleProfile(BaseModel):
    current_smoker: Optional[bool] = None
    excessive_alcohol: Optional[bool] = None
    drug_use: Optional[bool] = None
    recent_tattoos: Optional[bool] = None


class EnvironmentalProfile(BaseModel):
    housing_instability: Optional[bool] = None
    relationship_instability: Optional[bool] = None
    partner_not_supportive: Optional[bool] = None
    legal_issues: Optional[bool] = None
    employment_instability: Optional[bool] = None
    financial_instability: Optional[bool] = None


class InfectiousDiseaseScreening(BaseModel):
    tests_documented: List[InfectiousTest] = Field(default_factory=list)
    positive_results: List[InfectiousTest] = Field(default_factory=list)


class ParsingMetadata(BaseModel):
    """How the profile was produced. Never read by the scorers."""
    layers_used: List[int] = Field(default_factory=list)
    final_confidence: float = Field(0.0, ge=0, le=100)
    per_field_confidence: Dict[str, float] = Field(default_factory=dict)


class CandidateProfile(BaseModel):
    """
    Canonical representation of an extracted surrogacy candidate.

    Built incrementally by the extraction layers, then treated as read-only
    input by every scorer. A field counts as determined only when it has an
    entry in parsing_metadata.per_field_confidence.
    """
    age: Optional[int] = None
    height_text: Optional[str] = None
    weight_lbs: Optional[float] = None
    bmi: Optional[float] = None
    pregnancy_history: Optional[PregnancyHistory] = None
    medical_conditions: List[ConditionCode] = Field(default_factory=list)
    pregnancy_specific_complications: Dict[ComplicationCategory, ComplicationEvidence] = Field(default_factory=dict)
    psychological: PsychologicalProfile = Field(default_factory=PsychologicalProfile)
    lifestyle: LifestyleProfile = Field(default_factory=LifestyleProfile)
    environmental: EnvironmentalProfile = Field(default_factory=EnvironmentalProfile)
    infectious_disease: Optional[InfectiousDiseaseScreening] = None
    documentation_gaps: List[str] = Field(default_factory=list)
    parsing_metadata: ParsingMetadata = Field(default_factory=ParsingMetadata)
    # Structured-input fields that failed validation, with the raw value
    invalid_fields: Dict[str, str] = Field(default_factory=dict)
    # Cosmetic only; may be stamped after scoring
    display_name: Optional[str] = None

    # -------------------------------------------------------------------------
    # Field bookkeeping
    # -------------------------------------------------------------------------

    def is_field_set(self, name: str) -> bool:
        return name in self.parsing_metadata.per_field_confidence

    def field_confidence(self, name: str) -> Optional[float]:
        return self.parsing_metadata.per_field_confidence.get(name)

    def set_field(self, name: str, value: Any, confidence: float) -> None:
        """Set a field and record its confidence, clamped to [0, 100]."""
        setattr(self, name, value)
        self.parsing_metadata.per_field_confidence[name] = clamp_confidence(confidence)

    def mark_determined(self, name: str, confidence: float) -> None:
        """Record that a field was resolved (possibly to an empty value)."""
        current = self.parsing_metadata.per_field_confidence.get(name, 0.0)
        self.parsing_metadata.per_field_confidence[name] = clamp_confidence(max(current, confidence))

    def add_gap(self, notice: str) -> None:
        if notice not in self.documentation_gaps:
            self.documentation_gaps.append(notice)

    def record_gaps(self) -> None:
        """Flag missing required fields and implausible complication counts."""
        for name, gap in MISSING_FIELD_GAPS.items():
            if not self.is_field_set(name):
                self.add_gap(str(gap))

        history = self.pregnancy_history
        if history is not None and history.number_of_complications > 0:
            if history.number_of_complications > IMPLAUSIBLE_COMPLICATION_RATIO * history.number_of_term_pregnancies:
                self.add_gap(
                    f"{history.number_of_complications} complications reported across "
                    f"{history.number_of_term_pregnancies} term pregnancies; verify records"
                )

    def add_condition(self, code: ConditionCode) -> bool:
        """Add a condition code once. Returns True when it was new."""
        if code in self.medical_conditions:
            return False
        self.medical_conditions.append(code)
        return True

    def add_complication_evidence(self, category: ComplicationCategory, mention: str) -> None:
        evidence = self.pregnancy_specific_complications.setdefault(category, ComplicationEvidence())
        evidence.found = True
        if mention not in evidence.mentions:
            evidence.mentions.append(mention)

    def refresh_complication_records(self) -> None:
        """Keep pregnancy_history.complications in line with the evidence map."""
        history = self.pregnancy_history
        if history is None:
            return

        existing = {record.category: record for record in history.complications}
        for category in ComplicationCategory:
            evidence = self.pregnancy_specific_complications.get(category)
            if evidence is None or not evidence.found:
                continue
            record = existing.get(category)
            if record is None:
                record = ComplicationRecord(category=category)
                history.complications.append(record)
                existing[category] = record
            for mention in evidence.mentions:
                if mention not in record.mentions:
                    record.mentions.append(mention)

        history.number_of_complications = max(history.number_of_complications, len(history.complications))

    def stamp_display_name(self, name: str) -> None:
        """Attach a display name after scoring. Not read by any scorer."""
        self.display_name = name

    # -------------------------------------------------------------------------
    # Structured input
    # -------------------------------------------------------------------------

    @classmethod
    def from_structured(cls, data: Any) -> "CandidateProfile":
        """
        Build a profile from pre-structured JSON, bypassing extraction.

        Fields that fail validation are dropped and listed in invalid_fields
        so the affected rules report insufficient data instead of aborting.
        """
        if not isinstance(data, dict):
            raise UnrecoverableInputError(
                f"Structured profile must be a JSON object, got {type(data).__name__}"
            )

        known = set(cls.model_fields)
        accepted = {k: v for k, v in data.items() if k in known and k not in ("parsing_metadata", "invalid_fields")}
        invalid: Dict[str, str] = {}

        for _ in range(len(accepted) + 1):
            try:
                profile = cls.model_validate(accepted)
                break
            except ValidationError as e:
                bad = {str(err["loc"][0]) for err in e.errors() if err.get("loc")}
                if not bad:
                    raise UnrecoverableInputError(f"Structured profile is invalid: {e}") from e
                for name in bad:
                    if name in accepted:
                        invalid[name] = repr(accepted.pop(name))
        else:
            raise UnrecoverableInputError("Structured profile could not be validated")

        for name in REPLACEABLE_FIELDS + ADDITIVE_FIELDS:
            if name in accepted and accepted[name] is not None:
                profile.parsing_metadata.per_field_confidence[name] = 100.0
        profile.record_gaps()
        profile.parsing_metadata.final_confidence = 100.0
        profile.invalid_fields = invalid
        return profile


def clamp_confidence(value: float) -> float:
    return max(0.0, min(100.0, float(value)))
