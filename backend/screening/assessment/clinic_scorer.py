"""
Clinic-Type Differential Scorer

Scores the same profile against three clinic archetypes. Each archetype is
a ClinicProfile row of thresholds, a tier-to-severity map and a combination
policy; one scoring routine applies whichever row it is given.

Acceptance levels come from the weighted issue burden. The 0-100 score is
for display only.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..schemas.assessment import (
    AcceptanceLevel,
    ClinicIssue,
    ClinicType,
    ClinicTypeAnalysis,
    ClinicTypeResult,
    IssueSeverity,
)
from ..schemas.codes import BLOOD_BORNE_TESTS, ComplicationCategory, RiskTier, definition_for
from ..schemas.profile import CandidateProfile

logger = logging.getLogger(__name__)

S = IssueSeverity

# Burden weight per issue severity; disqualifying issues bypass the breakpoints
BURDEN_WEIGHTS: Dict[IssueSeverity, int] = {S.MINOR: 1, S.MODERATE: 2, S.MAJOR: 4}

# (max burden, level), checked in order
ACCEPTANCE_BREAKPOINTS = [
    (0, AcceptanceLevel.HIGHLY_LIKELY),
    (2, AcceptanceLevel.LIKELY),
    (4, AcceptanceLevel.POSSIBLE),
    (8, AcceptanceLevel.UNLIKELY),
]

MIN_LEGAL_AGE = 18


@dataclass
class ClinicProfile:
    """Thresholds and policies for one clinic archetype."""

    clinic_type: ClinicType
    label: str
    min_age: int
    max_age: int
    ideal_max_age: int
    ideal_age_severity: Optional[IssueSeverity]
    bmi_floor: float
    bmi_soft_ceiling: float
    bmi_soft_severity: IssueSeverity
    bmi_ceiling: float
    bmi_hard_ceiling: float
    cesarean_ceiling: int
    delivery_ceiling: int
    # Issue severity for a condition of each tier; None means not an issue
    tier_severity: Dict[RiskTier, Optional[IssueSeverity]]
    # Display-only score penalty per condition tier
    tier_penalty: Dict[RiskTier, int]
    # Severity for a complication category with no matching condition code
    default_complication_severity: IssueSeverity
    blood_borne_severity: IssueSeverity
    smoker_severity: IssueSeverity
    severity_penalty: Dict[IssueSeverity, int] = field(default_factory=lambda: {
        S.MINOR: 5, S.MODERATE: 12, S.MAJOR: 25, S.DISQUALIFYING: 100,
    })
    # Combination policy
    compound_major_threshold: Optional[int] = None
    concern_combination_threshold: Optional[int] = None
    downgrade_single_major: bool = False
    exponential_complication_penalty: int = 0
    max_score: int = 100


CLINIC_PROFILES: Dict[ClinicType, ClinicProfile] = {
    ClinicType.STRICT: ClinicProfile(
        clinic_type=ClinicType.STRICT,
        label="strict",
        min_age=21,
        max_age=40,
        ideal_max_age=35,
        ideal_age_severity=S.MODERATE,
        bmi_floor=19.0,
        bmi_soft_ceiling=27.0,
        bmi_soft_severity=S.MODERATE,
        bmi_ceiling=30.0,
        bmi_hard_ceiling=35.0,
        cesarean_ceiling=2,
        delivery_ceiling=5,
        tier_severity={
            RiskTier.SEVERE: S.DISQUALIFYING,
            RiskTier.HIGH: S.MAJOR,
            RiskTier.MODERATE: S.MAJOR,
            RiskTier.MINOR: S.MODERATE,
            RiskTier.MINIMAL: S.MINOR,
        },
        tier_penalty={RiskTier.SEVERE: 60, RiskTier.HIGH: 45, RiskTier.MODERATE: 25, RiskTier.MINOR: 12, RiskTier.MINIMAL: 5},
        default_complication_severity=S.MAJOR,
        blood_borne_severity=S.DISQUALIFYING,
        smoker_severity=S.MAJOR,
        severity_penalty={S.MINOR: 8, S.MODERATE: 15, S.MAJOR: 30, S.DISQUALIFYING: 100},
        compound_major_threshold=2,
        exponential_complication_penalty=10,
        max_score=95,
    ),
    ClinicType.MODERATE: ClinicProfile(
        clinic_type=ClinicType.MODERATE,
        label="moderate",
        min_age=21,
        max_age=42,
        ideal_max_age=37,
        ideal_age_severity=S.MINOR,
        bmi_floor=18.5,
        bmi_soft_ceiling=30.0,
        bmi_soft_severity=S.MINOR,
        bmi_ceiling=32.0,
        bmi_hard_ceiling=38.0,
        cesarean_ceiling=3,
        delivery_ceiling=5,
        tier_severity={
            RiskTier.SEVERE: S.DISQUALIFYING,
            RiskTier.HIGH: S.MAJOR,
            RiskTier.MODERATE: S.MODERATE,
            RiskTier.MINOR: S.MINOR,
            RiskTier.MINIMAL: S.MINOR,
        },
        tier_penalty={RiskTier.SEVERE: 50, RiskTier.HIGH: 30, RiskTier.MODERATE: 15, RiskTier.MINOR: 6, RiskTier.MINIMAL: 2},
        default_complication_severity=S.MODERATE,
        blood_borne_severity=S.DISQUALIFYING,
        smoker_severity=S.MAJOR,
        concern_combination_threshold=3,
        max_score=92,
    ),
    ClinicType.LENIENT: ClinicProfile(
        clinic_type=ClinicType.LENIENT,
        label="lenient",
        min_age=21,
        max_age=45,
        ideal_max_age=40,
        ideal_age_severity=S.MINOR,
        bmi_floor=18.0,
        bmi_soft_ceiling=32.0,
        bmi_soft_severity=S.MINOR,
        bmi_ceiling=35.0,
        bmi_hard_ceiling=40.0,
        cesarean_ceiling=4,
        delivery_ceiling=6,
        tier_severity={
            RiskTier.SEVERE: S.MAJOR,
            RiskTier.HIGH: S.MODERATE,
            RiskTier.MODERATE: S.MINOR,
            RiskTier.MINOR: S.MINOR,
            RiskTier.MINIMAL: None,
        },
        tier_penalty={RiskTier.SEVERE: 40, RiskTier.HIGH: 20, RiskTier.MODERATE: 8, RiskTier.MINOR: 3, RiskTier.MINIMAL: 0},
        default_complication_severity=S.MINOR,
        blood_borne_severity=S.MAJOR,
        smoker_severity=S.MAJOR,
        severity_penalty={S.MINOR: 3, S.MODERATE: 8, S.MAJOR: 18, S.DISQUALIFYING: 100},
        downgrade_single_major=True,
        max_score=90,
    ),
}

_SEVERITY_ORDER = [S.MINOR, S.MODERATE, S.MAJOR, S.DISQUALIFYING]


def acceptance_from_issues(issues: List[ClinicIssue]) -> AcceptanceLevel:
    """Map an issue list onto the five-point acceptance scale."""
    if any(issue.severity == S.DISQUALIFYING for issue in issues):
        return AcceptanceLevel.VERY_UNLIKELY
    burden = sum(BURDEN_WEIGHTS[issue.severity] for issue in issues)
    for limit, level in ACCEPTANCE_BREAKPOINTS:
        if burden <= limit:
            return level
    return AcceptanceLevel.VERY_UNLIKELY


def _summarize(clinic: ClinicProfile, issues: List[ClinicIssue]) -> str:
    counts = {severity: sum(1 for i in issues if i.severity == severity) for severity in _SEVERITY_ORDER}
    if counts[S.DISQUALIFYING]:
        return f"Unlikely to be accepted at {clinic.label} clinics due to {counts[S.DISQUALIFYING]} disqualifying factor(s)."
    if counts[S.MAJOR]:
        return f"May face significant challenges at {clinic.label} clinics due to {counts[S.MAJOR]} major issue(s)."
    if counts[S.MODERATE]:
        return f"May be accepted at {clinic.label} clinics with {counts[S.MODERATE]} moderate concern(s) requiring evaluation."
    if counts[S.MINOR]:
        return f"Good candidate for {clinic.label} clinics with {counts[S.MINOR]} minor consideration(s)."
    return f"Excellent candidate for {clinic.label} clinics."


def _less_favorable(a: AcceptanceLevel, b: AcceptanceLevel) -> AcceptanceLevel:
    return a if a.rank <= b.rank else b


class ClinicTypeScorer:
    """Scores a profile against each ClinicProfile."""

    def __init__(self, profiles: Optional[Dict[ClinicType, ClinicProfile]] = None):
        self.profiles = profiles or CLINIC_PROFILES

    def score_by_clinic_type(self, profile: CandidateProfile) -> ClinicTypeAnalysis:
        results = {clinic_type: self.score(profile, clinic) for clinic_type, clinic in self.profiles.items()}

        # Stricter archetypes are never more favorable than looser ones
        strict = results[ClinicType.STRICT]
        moderate = results[ClinicType.MODERATE]
        lenient = results[ClinicType.LENIENT]
        moderate_level = _less_favorable(moderate.acceptance_level, lenient.acceptance_level)
        strict_level = _less_favorable(strict.acceptance_level, moderate_level)
        if moderate_level != moderate.acceptance_level:
            moderate = moderate.model_copy(update={"acceptance_level": moderate_level})
        if strict_level != strict.acceptance_level:
            strict = strict.model_copy(update={"acceptance_level": strict_level})

        ordered = [strict, moderate, lenient]
        best = max(ordered, key=lambda r: (r.acceptance_level.rank, r.score))
        return ClinicTypeAnalysis(strict=strict, moderate=moderate, lenient=lenient, best_match=best.clinic_type)

    def score(self, profile: CandidateProfile, clinic: ClinicProfile) -> ClinicTypeResult:
        """Score one profile against one clinic archetype."""
        issues: List[ClinicIssue] = []
        penalty = 0

        def add(severity: Optional[IssueSeverity], message: str, factor: str, cost: Optional[int] = None) -> None:
            nonlocal penalty
            if severity is None:
                return
            issues.append(ClinicIssue(severity=severity, message=message, factor=factor))
            penalty += clinic.severity_penalty[severity] if cost is None else cost

        # ===== STEP 1: Age and BMI =====
        age = profile.age if "age" not in profile.invalid_fields else None
        if age is not None:
            if age < MIN_LEGAL_AGE:
                add(S.DISQUALIFYING, f"Age {age} is below legal age", "age")
            elif age < clinic.min_age or age > clinic.max_age:
                add(S.MAJOR, f"Age {age} outside {clinic.label} clinic range ({clinic.min_age}-{clinic.max_age})", "age")
            elif age > clinic.ideal_max_age:
                add(clinic.ideal_age_severity,
                    f"Age {age} above {clinic.label} clinic preference (<= {clinic.ideal_max_age})", "age")

        bmi = profile.bmi if "bmi" not in profile.invalid_fields else None
        if bmi is not None:
            shown = f"{bmi:g}"
            if bmi > clinic.bmi_hard_ceiling:
                add(S.DISQUALIFYING, f"BMI {shown} exceeds {clinic.label} clinic hard limit of {clinic.bmi_hard_ceiling:g}", "bmi")
            elif bmi > clinic.bmi_ceiling:
                add(S.MAJOR, f"BMI {shown} exceeds {clinic.label} clinic maximum of {clinic.bmi_ceiling:g}", "bmi")
            elif bmi > clinic.bmi_soft_ceiling:
                add(clinic.bmi_soft_severity,
                    f"BMI {shown} above {clinic.label} clinic preference of {clinic.bmi_soft_ceiling:g}", "bmi")
            elif bmi < clinic.bmi_floor:
                add(S.MAJOR if clinic.clinic_type == ClinicType.STRICT else S.MODERATE,
                    f"BMI {shown} below {clinic.label} clinic minimum of {clinic.bmi_floor:g}", "bmi")

        # ===== STEP 2: Obstetric history =====
        history = profile.pregnancy_history if "pregnancy_history" not in profile.invalid_fields else None
        if history is not None:
            if history.number_of_cesareans > clinic.cesarean_ceiling:
                add(S.MAJOR,
                    f"{history.number_of_cesareans} C-sections exceeds {clinic.label} clinic maximum of {clinic.cesarean_ceiling}",
                    "cesareans")
            if history.total_deliveries > clinic.delivery_ceiling:
                add(S.MAJOR,
                    f"{history.total_deliveries} previous deliveries exceeds {clinic.label} clinic maximum of {clinic.delivery_ceiling}",
                    "deliveries")

        # ===== STEP 3: Conditions and complications =====
        codes = profile.medical_conditions if "medical_conditions" not in profile.invalid_fields else []
        for code in codes:
            definition = definition_for(code)
            if definition.contraindicated:
                add(S.DISQUALIFYING, f"{definition.label} is a contraindication at all clinics", code.value)
                continue
            add(clinic.tier_severity[definition.tier],
                f"History of {definition.label.lower()} ({definition.tier.value} risk)",
                code.value, clinic.tier_penalty[definition.tier])

        covered = {definition_for(code).complication_category for code in codes}
        uncovered: List[ComplicationCategory] = []
        if history is not None:
            for record in history.complications:
                if record.category not in covered:
                    uncovered.append(record.category)
            for category in uncovered:
                add(clinic.default_complication_severity,
                    f"Previous pregnancy complication: {category.value.replace('_', ' ')}",
                    f"complication:{category.value}")
            undescribed = history.number_of_complications - len(history.complications)
            if undescribed > 0:
                add(clinic.default_complication_severity,
                    f"{undescribed} previous pregnancy complication(s) without documented category",
                    "complications")

            if clinic.exponential_complication_penalty and history.number_of_complications:
                penalty += clinic.exponential_complication_penalty * (2 ** min(history.number_of_complications, 4) - 1)

        # ===== STEP 4: Lifestyle and infectious disease =====
        if profile.lifestyle.current_smoker:
            add(clinic.smoker_severity, "Current smoking; clinics require a smoke-free period", "current_smoker")
        if profile.lifestyle.drug_use:
            add(S.DISQUALIFYING, "Current drug use", "drug_use")
        if profile.lifestyle.excessive_alcohol:
            add(S.DISQUALIFYING, "Excessive alcohol use", "excessive_alcohol")

        if profile.infectious_disease is not None:
            for test in profile.infectious_disease.positive_results:
                if test in BLOOD_BORNE_TESTS:
                    add(clinic.blood_borne_severity, f"Positive {test.value} result", test.value)
                else:
                    add(S.MODERATE, f"Positive {test.value} result; treat and retest", test.value)

        # ===== STEP 5: Combination policy =====
        issues = self._apply_combination_policy(clinic, issues)

        score = max(0, min(clinic.max_score, 100 - penalty))
        level = acceptance_from_issues(issues)
        logger.debug("%s clinic: %d issue(s), level %s", clinic.label, len(issues), level.value)
        return ClinicTypeResult(
            clinic_type=clinic.clinic_type,
            acceptance_level=level,
            score=score,
            issues=issues,
            summary=_summarize(clinic, issues),
        )

    def _apply_combination_policy(self, clinic: ClinicProfile, issues: List[ClinicIssue]) -> List[ClinicIssue]:
        majors = [i for i in issues if i.severity == S.MAJOR]
        disqualifying = [i for i in issues if i.severity == S.DISQUALIFYING]

        if clinic.compound_major_threshold and len(majors) >= clinic.compound_major_threshold:
            issues = issues + [ClinicIssue(
                severity=S.MAJOR,
                message=f"{len(majors)} major risk factors combined; {clinic.label} clinics do not accept combinations",
                factor="combination",
            )]

        if clinic.concern_combination_threshold:
            concerns = [i for i in issues if i.severity in (S.MODERATE, S.MAJOR, S.DISQUALIFYING)]
            if len(concerns) >= clinic.concern_combination_threshold:
                issues = issues + [ClinicIssue(
                    severity=S.MODERATE,
                    message=f"{len(concerns)} concerns combined require additional review",
                    factor="combination",
                )]

        if clinic.downgrade_single_major and len(majors) == 1 and not disqualifying:
            single = majors[0]
            issues = [
                ClinicIssue(severity=S.MODERATE, message=f"{single.message} (case-by-case review)", factor=single.factor)
                if issue is single else issue
                for issue in issues
            ]
        return issues


# Global instance
CLINIC_SCORER = ClinicTypeScorer()
