"""
Guideline Rule Engine

Evaluates a CandidateProfile against ASRM 2022 gestational carrier
guidelines. Each category is evaluated independently; a rule that cannot
read its field reports insufficient data instead of failing the run.

The overall risk is the most severe category status. Two or more
independent categories at HIGH_RISK compound to DISQUALIFIED.
"""

import logging
from enum import Enum
from typing import Callable, Dict, List, Optional

from ..core.exceptions import GuidelineEvaluationError
from ..schemas.assessment import (
    GuidelineAssessment,
    GuidelineFinding,
    OverallRisk,
    RiskLevel,
    most_severe,
)
from ..schemas.codes import (
    BLOOD_BORNE_TESTS,
    InfectiousTest,
    RiskTier,
    definition_for,
)
from ..schemas.profile import CandidateProfile, PregnancyHistory

logger = logging.getLogger(__name__)


class GuidelineCategory(str, Enum):
    AGE = "Age Requirements"
    PREGNANCY_HISTORY = "Pregnancy History"
    MEDICAL = "Medical Evaluation"
    INFECTIOUS_DISEASE = "Infectious Disease Screening"
    PSYCHOLOGICAL = "Psychological Evaluation"
    LIFESTYLE = "Lifestyle Factors"
    ENVIRONMENTAL = "Environmental Stability"


# Independent HIGH_RISK categories needed to compound into DISQUALIFIED
COMPOUNDING_HIGH_RISK_CATEGORIES = 2

MAX_DELIVERIES = 5
MAX_CESAREANS = 3

STANDARD_RECOMMENDATIONS = [
    "Complete medical evaluation by qualified reproductive endocrinologist required",
    "Psychological evaluation by mental health professional specializing in reproductive medicine required",
    "Independent legal counsel required before any contracts",
]

OVERALL_DESCRIPTIONS = {
    RiskLevel.ELIGIBLE: "Meets ASRM basic eligibility criteria",
    RiskLevel.REQUIRES_COUNSELING: "Generally meets guidelines; some factors need counseling or further evaluation",
    RiskLevel.HIGH_RISK: "Outside ASRM standard guidelines; requires case-by-case review and likely MFM clearance",
    RiskLevel.DISQUALIFIED: "Does not meet ASRM eligibility criteria",
}

# (attribute, status, message, guideline)
PSYCHOLOGICAL_RULES = [
    ("coercion_indicated", RiskLevel.HIGH_RISK,
     "Evidence of financial or emotional coercion",
     "ASRM 2022: Evidence of coercion disqualifies candidate"),
    ("psychotropic_medication", RiskLevel.HIGH_RISK,
     "Current psychotropic medication; requires stable period off medication or psychiatric clearance",
     "ASRM 2022: Current psychotropic medication is typically disqualifying"),
    ("bipolar_or_psychosis", RiskLevel.HIGH_RISK,
     "History of bipolar disorder or psychosis",
     "ASRM 2022: History of bipolar disorder or psychosis with impaired functioning"),
    ("major_depression", RiskLevel.HIGH_RISK,
     "History of major depression requires thorough evaluation and clearance",
     "ASRM 2022: Unresolved or untreated depression is disqualifying"),
    ("substance_abuse", RiskLevel.HIGH_RISK,
     "History of substance abuse must be resolved and treated",
     "ASRM 2022: Unresolved drug/alcohol abuse is disqualifying"),
    ("eating_disorder", RiskLevel.HIGH_RISK,
     "History of eating disorder must be resolved",
     "ASRM 2022: Unresolved eating disorders are disqualifying"),
    ("anxiety", RiskLevel.REQUIRES_COUNSELING,
     "History of anxiety disorder requires evaluation of current functioning",
     "ASRM 2022: Clinically significant anxiety with impaired functioning is disqualifying"),
    ("abuse_history", RiskLevel.REQUIRES_COUNSELING,
     "History of abuse requires psychological evaluation and treatment",
     "ASRM 2022: Unresolved abuse history is disqualifying"),
]

LIFESTYLE_RULES = [
    ("current_smoker", RiskLevel.HIGH_RISK,
     "Current tobacco use",
     "ASRM 2022: Tobacco use should be evaluated and typically requires cessation"),
    ("excessive_alcohol", RiskLevel.DISQUALIFIED,
     "Excessive alcohol use",
     "ASRM 2022: Substance abuse disqualifies candidate"),
    ("drug_use", RiskLevel.DISQUALIFIED,
     "Current recreational drug use",
     "ASRM 2022: Current drug use disqualifies candidate"),
    ("recent_tattoos", RiskLevel.REQUIRES_COUNSELING,
     "Recent tattoos or piercings may require deferral",
     "ASRM 2022: Recent non-sterile body modifications are concerning"),
]

ENVIRONMENTAL_RULES = [
    ("housing_instability", RiskLevel.HIGH_RISK,
     "Unstable housing situation",
     "ASRM 2022: Stable home environment required"),
    ("relationship_instability", RiskLevel.HIGH_RISK,
     "Current marital or relationship instability",
     "ASRM 2022: Relationship instability is disqualifying"),
    ("partner_not_supportive", RiskLevel.HIGH_RISK,
     "Partner does not support the surrogacy",
     "ASRM 2022: Adequate support required"),
    ("legal_issues", RiskLevel.HIGH_RISK,
     "Legal issues (bankruptcy, custody disputes, etc.)",
     "ASRM 2022: Ongoing legal disputes may be disqualifying"),
    ("employment_instability", RiskLevel.REQUIRES_COUNSELING,
     "Employment situation may not support the demands of surrogacy",
     "ASRM 2022: Employment must be flexible enough to support GC demands"),
    ("financial_instability", RiskLevel.REQUIRES_COUNSELING,
     "Financial situation requires evaluation for possible coercion",
     "ASRM 2022: Must assess for financial coercion"),
]

Rule = Callable[[CandidateProfile], List[GuidelineFinding]]


def _finding(status: RiskLevel, message: str, guideline: str) -> GuidelineFinding:
    return GuidelineFinding(status=status, message=message, guideline=guideline)


def _number(profile: CandidateProfile, name: str, label: str) -> float:
    """Read a numeric field or raise GuidelineEvaluationError."""
    if name in profile.invalid_fields:
        raise GuidelineEvaluationError(name, f"{label} value {profile.invalid_fields[name]} is not valid")
    value = getattr(profile, name)
    if value is None:
        raise GuidelineEvaluationError(name, f"{label} not documented")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise GuidelineEvaluationError(name, f"{label} value {value!r} is not numeric")
    return value


def _format_number(value: float) -> str:
    return f"{value:g}"


class GuidelineRuleEngine:
    """
    ASRM guideline evaluator.

    Rules are grouped by category and dispatched from a table; each rule
    returns its findings or raises GuidelineEvaluationError when the data
    it needs is missing or malformed.
    """

    def __init__(self):
        self.rules: Dict[GuidelineCategory, List[Rule]] = {
            GuidelineCategory.AGE: [self._evaluate_age],
            GuidelineCategory.PREGNANCY_HISTORY: [self._evaluate_pregnancy_history],
            GuidelineCategory.MEDICAL: [self._evaluate_medical_conditions],
            GuidelineCategory.INFECTIOUS_DISEASE: [self._evaluate_infectious_disease],
            GuidelineCategory.PSYCHOLOGICAL: [self._evaluate_psychological],
            GuidelineCategory.LIFESTYLE: [self._evaluate_bmi, self._evaluate_substance_use],
            GuidelineCategory.ENVIRONMENTAL: [self._evaluate_environmental],
        }

    # -------------------------------------------------------------------------
    # MAIN ENTRY POINT
    # -------------------------------------------------------------------------

    def assess(self, profile: CandidateProfile) -> GuidelineAssessment:
        """Evaluate every guideline category. Never mutates profile."""
        summaries: Dict[str, List[GuidelineFinding]] = {}
        insufficient: List[str] = []

        for category, rules in self.rules.items():
            findings: List[GuidelineFinding] = []
            for rule in rules:
                try:
                    findings.extend(rule(profile))
                except GuidelineEvaluationError as e:
                    logger.debug("Skipped %s rule: %s", category.value, e)
                    insufficient.append(f"{category.value}: {e}")
            if findings:
                summaries[category.value] = findings

        overall = self._determine_overall_risk(summaries)
        return GuidelineAssessment(
            overall_risk=overall,
            category_summaries=summaries,
            recommendations=self._generate_recommendations(summaries),
            insufficient_data=insufficient,
        )

    # =========================================================================
    # STEP 1: DEMOGRAPHICS
    # =========================================================================

    def _evaluate_age(self, profile: CandidateProfile) -> List[GuidelineFinding]:
        age = _number(profile, "age", "Age")
        if age < 18:
            return [_finding(RiskLevel.DISQUALIFIED, "Candidate must be of legal age (18+)",
                             "ASRM 2022: Carriers must be of legal age")]
        if age < 21:
            return [_finding(RiskLevel.HIGH_RISK, f"Age {_format_number(age)} is below the preferred minimum of 21",
                             "ASRM 2022: Preferably between ages 21-45")]
        if age <= 35:
            return [_finding(RiskLevel.ELIGIBLE, "Age is within ideal range",
                             "ASRM 2022: Ideally younger than 35")]
        if age <= 45:
            return [_finding(RiskLevel.REQUIRES_COUNSELING,
                             f"Age {_format_number(age)} is acceptable but above ideal range; "
                             "counseling recommended regarding advancing maternal age",
                             "ASRM 2022: Preferably between 21-45, ideally <35")]
        return [_finding(RiskLevel.HIGH_RISK,
                         f"Age {_format_number(age)} exceeds the standard maximum of 45",
                         "ASRM 2022: Carriers over 45 require all parties to be informed of risks")]

    def _evaluate_bmi(self, profile: CandidateProfile) -> List[GuidelineFinding]:
        bmi = _number(profile, "bmi", "BMI")
        shown = _format_number(bmi)
        if bmi < 19:
            return [_finding(RiskLevel.HIGH_RISK, f"BMI of {shown} is below recommended range",
                             "Standard practice: BMI typically 19-32 (varies by clinic)")]
        if bmi <= 27:
            return [_finding(RiskLevel.ELIGIBLE, f"BMI of {shown} is within ideal range",
                             "Standard practice: Preferably BMI 19-27")]
        if bmi <= 32:
            return [_finding(RiskLevel.REQUIRES_COUNSELING, f"BMI of {shown} is acceptable but above ideal range",
                             "Standard practice: Many programs accept BMI 19-32")]
        return [_finding(RiskLevel.HIGH_RISK, f"BMI of {shown} exceeds typical maximum for most programs",
                         "Standard practice: BMI >32 may be disqualifying")]

    # =========================================================================
    # STEP 2: OBSTETRIC HISTORY
    # =========================================================================

    def _evaluate_pregnancy_history(self, profile: CandidateProfile) -> List[GuidelineFinding]:
        if "pregnancy_history" in profile.invalid_fields:
            raise GuidelineEvaluationError("pregnancy_history", "Pregnancy history is not valid")
        history: Optional[PregnancyHistory] = profile.pregnancy_history
        if history is None:
            raise GuidelineEvaluationError("pregnancy_history", "Pregnancy history not documented")

        findings = []
        term = history.number_of_term_pregnancies
        complications = history.number_of_complications

        if not history.has_completed_pregnancy or term < 1:
            findings.append(_finding(
                RiskLevel.HIGH_RISK,
                "No previous term pregnancy; ASRM strongly recommends at least one",
                "ASRM 2022: Carrier should have had at least one term pregnancy",
            ))
        else:
            findings.append(_finding(
                RiskLevel.ELIGIBLE,
                f"Has completed {term} term pregnanc{'y' if term == 1 else 'ies'}",
                "ASRM 2022: Minimum one term pregnancy required",
            ))

        if complications > 0 and term >= 1 and complications >= term:
            findings.append(_finding(
                RiskLevel.HIGH_RISK,
                f"{complications} prior pregnancy complication(s) across {term} term pregnanc{'y' if term == 1 else 'ies'}; "
                "no uncomplicated delivery documented",
                "ASRM 2022: Carrier should have had at least one uncomplicated term pregnancy",
            ))
        elif complications > 0:
            findings.append(_finding(
                RiskLevel.REQUIRES_COUNSELING,
                f"{complications} prior pregnancy complication(s) require medical evaluation",
                "ASRM 2022: Pregnancy should be uncomplicated",
            ))

        if history.total_deliveries > MAX_DELIVERIES:
            findings.append(_finding(
                RiskLevel.HIGH_RISK,
                f"Candidate has had {history.total_deliveries} deliveries (more than {MAX_DELIVERIES})",
                "ASRM 2022: Ideally no more than 5 previous deliveries",
            ))
        if history.number_of_cesareans > MAX_CESAREANS:
            findings.append(_finding(
                RiskLevel.HIGH_RISK,
                f"Candidate has had {history.number_of_cesareans} cesarean sections (more than {MAX_CESAREANS})",
                "ASRM 2022: Ideally no more than 3 cesarean deliveries",
            ))
        return findings

    # =========================================================================
    # STEP 3: MEDICAL AND INFECTIOUS DISEASE
    # =========================================================================

    def _evaluate_medical_conditions(self, profile: CandidateProfile) -> List[GuidelineFinding]:
        if "medical_conditions" in profile.invalid_fields:
            raise GuidelineEvaluationError("medical_conditions", "Medical conditions list is not valid")
        if not profile.medical_conditions:
            if not profile.is_field_set("medical_conditions"):
                raise GuidelineEvaluationError("medical_conditions", "Medical history not documented")
            return [_finding(RiskLevel.ELIGIBLE, "No reported medical conditions",
                             "ASRM 2022: Complete medical evaluation required")]

        findings = []
        for code in profile.medical_conditions:
            definition = definition_for(code)
            if definition.contraindicated:
                findings.append(_finding(
                    RiskLevel.DISQUALIFIED,
                    f"Contraindicated condition: {definition.label}",
                    "ASRM 2022: Conditions that preclude safe pregnancy disqualify candidate",
                ))
            elif definition.tier in (RiskTier.SEVERE, RiskTier.HIGH):
                findings.append(_finding(
                    RiskLevel.HIGH_RISK,
                    f"Serious medical condition: {definition.label}",
                    "ASRM 2022: Serious medical condition that poses significant risk",
                ))
            elif definition.tier in (RiskTier.MODERATE, RiskTier.MINOR):
                findings.append(_finding(
                    RiskLevel.REQUIRES_COUNSELING,
                    f"Medical condition requiring evaluation: {definition.label}",
                    "ASRM 2022: Requires thorough medical evaluation and clearance",
                ))
            else:
                findings.append(_finding(
                    RiskLevel.ELIGIBLE,
                    f"Minor condition noted: {definition.label}",
                    "ASRM 2022: Complete medical evaluation required",
                ))
        return findings

    def _evaluate_infectious_disease(self, profile: CandidateProfile) -> List[GuidelineFinding]:
        if "infectious_disease" in profile.invalid_fields:
            raise GuidelineEvaluationError("infectious_disease", "Infectious disease results are not valid")
        screening = profile.infectious_disease
        if screening is None:
            raise GuidelineEvaluationError("infectious_disease", "Infectious disease screening not documented")

        findings = []
        missing = [test.value for test in InfectiousTest if test not in screening.tests_documented]
        if missing:
            findings.append(_finding(
                RiskLevel.REQUIRES_COUNSELING,
                f"Missing required infectious disease tests: {', '.join(missing)}",
                "ASRM 2022: All carriers must be tested for infectious diseases",
            ))

        for test in InfectiousTest:
            if test not in screening.positive_results:
                continue
            if test in BLOOD_BORNE_TESTS:
                findings.append(_finding(
                    RiskLevel.HIGH_RISK,
                    f"Positive test for {test.value}; transmission risk to the fetus",
                    "ASRM 2022: Positive HIV or Hepatitis generally disqualifies candidate",
                ))
            else:
                findings.append(_finding(
                    RiskLevel.REQUIRES_COUNSELING,
                    f"Positive test for {test.value}; must be treated, retested and deferred 3 months",
                    "ASRM 2022: Treatable STIs require treatment and 3-month deferral",
                ))

        if not findings:
            findings.append(_finding(
                RiskLevel.ELIGIBLE,
                "All infectious disease screening tests negative",
                "ASRM 2022: Comprehensive infectious disease screening completed",
            ))
        return findings

    # =========================================================================
    # STEP 4: PSYCHOSOCIAL
    # =========================================================================

    def _evaluate_psychological(self, profile: CandidateProfile) -> List[GuidelineFinding]:
        if "psychological" in profile.invalid_fields:
            raise GuidelineEvaluationError("psychological", "Psychological evaluation is not valid")
        psych = profile.psychological
        if all(value is None for value in psych.model_dump().values()):
            raise GuidelineEvaluationError("psychological", "Psychological evaluation not documented")

        findings = [
            _finding(status, message, guideline)
            for attribute, status, message, guideline in PSYCHOLOGICAL_RULES
            if getattr(psych, attribute) is True
        ]
        if psych.adequate_support_system is False:
            findings.append(_finding(
                RiskLevel.HIGH_RISK,
                "Insufficient emotional support system",
                "ASRM 2022: Insufficient emotional support disqualifies candidate",
            ))
        if not findings:
            findings.append(_finding(
                RiskLevel.ELIGIBLE,
                "No concerning psychological findings documented",
                "ASRM 2022: Comprehensive psychological evaluation required",
            ))
        return findings

    def _evaluate_substance_use(self, profile: CandidateProfile) -> List[GuidelineFinding]:
        if "lifestyle" in profile.invalid_fields:
            raise GuidelineEvaluationError("lifestyle", "Lifestyle information is not valid")
        lifestyle = profile.lifestyle
        if all(value is None for value in lifestyle.model_dump().values()):
            raise GuidelineEvaluationError("lifestyle", "Tobacco, alcohol and drug use not documented")

        findings = [
            _finding(status, message, guideline)
            for attribute, status, message, guideline in LIFESTYLE_RULES
            if getattr(lifestyle, attribute) is True
        ]
        if not findings:
            findings.append(_finding(
                RiskLevel.ELIGIBLE,
                "No tobacco, excessive alcohol or drug use reported",
                "ASRM 2022: Substance use must be evaluated",
            ))
        return findings

    def _evaluate_environmental(self, profile: CandidateProfile) -> List[GuidelineFinding]:
        if "environmental" in profile.invalid_fields:
            raise GuidelineEvaluationError("environmental", "Environmental information is not valid")
        environment = profile.environmental
        if all(value is None for value in environment.model_dump().values()):
            raise GuidelineEvaluationError("environmental", "Home and family environment not documented")

        findings = [
            _finding(status, message, guideline)
            for attribute, status, message, guideline in ENVIRONMENTAL_RULES
            if getattr(environment, attribute) is True
        ]
        if not findings:
            findings.append(_finding(
                RiskLevel.ELIGIBLE,
                "Stable family environment with adequate support",
                "ASRM 2022: Stable environment required",
            ))
        return findings

    # =========================================================================
    # STEP 5: OVERALL RISK AND RECOMMENDATIONS
    # =========================================================================

    def _determine_overall_risk(self, summaries: Dict[str, List[GuidelineFinding]]) -> OverallRisk:
        worst_by_category = {
            category: most_severe([finding.status for finding in findings])
            for category, findings in summaries.items()
        }
        level = most_severe(list(worst_by_category.values()))

        high_risk_categories = [
            category for category, worst in worst_by_category.items() if worst == RiskLevel.HIGH_RISK
        ]
        if level == RiskLevel.HIGH_RISK and len(high_risk_categories) >= COMPOUNDING_HIGH_RISK_CATEGORIES:
            return OverallRisk(
                level=RiskLevel.DISQUALIFIED,
                description=(
                    "Multiple independent high-risk factors compound: "
                    f"{', '.join(high_risk_categories)}"
                ),
            )
        return OverallRisk(level=level, description=OVERALL_DESCRIPTIONS[level])

    def _generate_recommendations(self, summaries: Dict[str, List[GuidelineFinding]]) -> List[str]:
        triggered = [
            finding
            for findings in summaries.values()
            for finding in findings
            if finding.status != RiskLevel.ELIGIBLE
        ]
        # Stable sort keeps category order within a severity
        triggered.sort(key=lambda finding: -finding.status.severity)

        recommendations: List[str] = []
        for finding in triggered:
            if finding.message not in recommendations:
                recommendations.append(finding.message)

        counts = {level: sum(1 for f in triggered if f.status == level) for level in RiskLevel}
        if counts[RiskLevel.DISQUALIFIED]:
            recommendations.append(
                f"CRITICAL: {counts[RiskLevel.DISQUALIFIED]} disqualifying factor(s) identified; "
                "candidacy not recommended without resolution"
            )
        if counts[RiskLevel.HIGH_RISK]:
            recommendations.append(
                f"{counts[RiskLevel.HIGH_RISK]} high-risk factor(s) require thorough evaluation and clearance"
            )
        if counts[RiskLevel.REQUIRES_COUNSELING]:
            recommendations.append(
                f"{counts[RiskLevel.REQUIRES_COUNSELING]} factor(s) require additional counseling or testing"
            )

        recommendations.extend(STANDARD_RECOMMENDATIONS)

        missing = [category.value for category in GuidelineCategory if category.value not in summaries]
        if missing:
            recommendations.append(f"INCOMPLETE ASSESSMENT: Missing evaluations for: {', '.join(missing)}")
        return recommendations


# Global instance
GUIDELINE_ENGINE = GuidelineRuleEngine()
