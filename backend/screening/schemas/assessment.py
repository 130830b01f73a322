from pydantic import BaseModel, Field, ConfigDict
from typing import Dict, List, Optional
from enum import Enum


class RiskLevel(str, Enum):
    """Guideline risk level, ordered by increasing severity."""
    ELIGIBLE = "ELIGIBLE"
    REQUIRES_COUNSELING = "REQUIRES_COUNSELING"
    HIGH_RISK = "HIGH_RISK"
    DISQUALIFIED = "DISQUALIFIED"

    @property
    def severity(self) -> int:
        return _RISK_ORDER.index(self)


_RISK_ORDER = [
    RiskLevel.ELIGIBLE,
    RiskLevel.REQUIRES_COUNSELING,
    RiskLevel.HIGH_RISK,
    RiskLevel.DISQUALIFIED,
]


def most_severe(levels: List[RiskLevel]) -> RiskLevel:
    return max(levels, key=lambda level: level.severity, default=RiskLevel.ELIGIBLE)


class AcceptanceLevel(str, Enum):
    """Likelihood that a clinic archetype accepts the candidate."""
    HIGHLY_LIKELY = "HIGHLY_LIKELY"
    LIKELY = "LIKELY"
    POSSIBLE = "POSSIBLE"
    UNLIKELY = "UNLIKELY"
    VERY_UNLIKELY = "VERY_UNLIKELY"

    @property
    def rank(self) -> int:
        """Higher is more favorable."""
        return len(_ACCEPTANCE_ORDER) - 1 - _ACCEPTANCE_ORDER.index(self)


_ACCEPTANCE_ORDER = [
    AcceptanceLevel.HIGHLY_LIKELY,
    AcceptanceLevel.LIKELY,
    AcceptanceLevel.POSSIBLE,
    AcceptanceLevel.UNLIKELY,
    AcceptanceLevel.VERY_UNLIKELY,
]


class IssueSeverity(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"
    DISQUALIFYING = "disqualifying"


class ClinicType(str, Enum):
    STRICT = "strict"
    MODERATE = "moderate"
    LENIENT = "lenient"


class MFMLikelihood(str, Enum):
    LIKELY_APPROVE = "LIKELY_APPROVE"
    POSSIBLY_APPROVE = "POSSIBLY_APPROVE"
    UNLIKELY_APPROVE = "UNLIKELY_APPROVE"
    LIKELY_DENY = "LIKELY_DENY"


class MFMReviewLevel(str, Enum):
    NOT_REQUIRED = "NOT_REQUIRED"
    RECOMMENDED = "RECOMMENDED"
    STRONGLY_RECOMMENDED = "STRONGLY_RECOMMENDED"
    REQUIRED = "REQUIRED"


class FindingSeverity(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


# =============================================================================
# RESULT MODELS
# =============================================================================

class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class GuidelineFinding(_Frozen):
    """One rule outcome within a guideline category."""
    status: RiskLevel
    message: str
    guideline: str


class OverallRisk(_Frozen):
    level: RiskLevel
    description: str


class ClinicIssue(_Frozen):
    severity: IssueSeverity
    message: str
    factor: str = Field(..., description="Profile attribute that triggered the issue")


class ClinicTypeResult(_Frozen):
    clinic_type: ClinicType
    acceptance_level: AcceptanceLevel
    score: int = Field(..., ge=0, le=100, description="Display only")
    issues: List[ClinicIssue] = Field(default_factory=list)
    summary: str = ""


class ClinicTypeAnalysis(_Frozen):
    strict: ClinicTypeResult
    moderate: ClinicTypeResult
    lenient: ClinicTypeResult
    best_match: ClinicType

    def by_type(self) -> Dict[ClinicType, ClinicTypeResult]:
        return {
            ClinicType.STRICT: self.strict,
            ClinicType.MODERATE: self.moderate,
            ClinicType.LENIENT: self.lenient,
        }


class MFMFinding(_Frozen):
    category: str
    concern: str
    mfm_view: str
    approvability: str
    severity: FindingSeverity


class MFMLikelihoodEstimate(_Frozen):
    level: MFMLikelihood
    description: str
    percentage: str


class MFMAssessment(_Frozen):
    consultation_needed: bool
    review_level: MFMReviewLevel
    likelihood: MFMLikelihoodEstimate
    findings: List[MFMFinding] = Field(default_factory=list)
    summary: str = ""
    questions_to_ask: List[str] = Field(default_factory=list)
    documentation_needed: List[str] = Field(default_factory=list)


class GuidelineAssessment(_Frozen):
    """Output of the guideline rule engine."""
    overall_risk: OverallRisk
    category_summaries: Dict[str, List[GuidelineFinding]]
    recommendations: List[str]
    insufficient_data: List[str] = Field(default_factory=list)


class AssessmentResult(_Frozen):
    """Complete, self-describing result for one candidate profile."""
    overall_risk: OverallRisk
    category_summaries: Dict[str, List[GuidelineFinding]]
    clinic_type_analysis: ClinicTypeAnalysis
    mfm_assessment: MFMAssessment
    recommendations: List[str]
    insufficient_data: List[str] = Field(default_factory=list)
    documentation_gaps: List[str] = Field(default_factory=list)
