"""
Test file for the guideline rule engine

Run with: python -m pytest backend/screening/assessment/test_guidelines.py -v
Or simply: python backend/screening/assessment/test_guidelines.py
"""

import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from screening.assessment.guidelines import GUIDELINE_ENGINE, GuidelineCategory, STANDARD_RECOMMENDATIONS
from screening.schemas.assessment import RiskLevel
from screening.schemas.codes import ConditionCode, InfectiousTest
from screening.schemas.profile import (
    CandidateProfile,
    InfectiousDiseaseScreening,
    LifestyleProfile,
    PregnancyHistory,
)


def _history(term=2, cesareans=0, complications=0, deliveries=None):
    return PregnancyHistory(
        has_completed_pregnancy=term > 0,
        number_of_term_pregnancies=term,
        number_of_cesareans=cesareans,
        number_of_complications=complications,
        total_deliveries=term if deliveries is None else deliveries,
    )


def _category_status(result, category):
    return max((f.status for f in result.category_summaries[category.value]), key=lambda s: s.severity)


def test_age_bands():
    """Age thresholds: <18, 18-20, 21-35, 36-45, >45."""
    print("\n" + "="*60)
    print("TEST: Age Bands")
    print("="*60)

    expected = {
        17: RiskLevel.DISQUALIFIED,
        19: RiskLevel.HIGH_RISK,
        21: RiskLevel.ELIGIBLE,
        35: RiskLevel.ELIGIBLE,
        36: RiskLevel.REQUIRES_COUNSELING,
        45: RiskLevel.REQUIRES_COUNSELING,
        46: RiskLevel.HIGH_RISK,
    }
    for age, status in expected.items():
        result = GUIDELINE_ENGINE.assess(CandidateProfile(age=age))
        actual = _category_status(result, GuidelineCategory.AGE)
        print(f"Age {age}: {actual.value}")
        assert actual == status, f"Age {age}: expected {status}, got {actual}"

    print("\n[PASS] Age band tests passed!")


def test_bmi_bands():
    """BMI thresholds: <19, 19-27, >27-32, >32."""
    print("\n" + "="*60)
    print("TEST: BMI Bands")
    print("="*60)

    expected = {
        18.5: RiskLevel.HIGH_RISK,
        19.0: RiskLevel.ELIGIBLE,
        27.0: RiskLevel.ELIGIBLE,
        27.1: RiskLevel.REQUIRES_COUNSELING,
        32.0: RiskLevel.REQUIRES_COUNSELING,
        32.5: RiskLevel.HIGH_RISK,
    }
    for bmi, status in expected.items():
        result = GUIDELINE_ENGINE.assess(CandidateProfile(bmi=bmi))
        actual = _category_status(result, GuidelineCategory.LIFESTYLE)
        print(f"BMI {bmi}: {actual.value}")
        assert actual == status, f"BMI {bmi}: expected {status}, got {actual}"

    print("\n[PASS] BMI band tests passed!")


def test_pregnancy_history():
    """Term pregnancy, complication, delivery and cesarean rules."""
    print("\n" + "="*60)
    print("TEST: Pregnancy History")
    print("="*60)

    cases = [
        (_history(term=0), RiskLevel.HIGH_RISK),
        (_history(term=2), RiskLevel.ELIGIBLE),
        (_history(term=2, complications=1), RiskLevel.REQUIRES_COUNSELING),
        (_history(term=1, complications=1), RiskLevel.HIGH_RISK),
        (_history(term=6), RiskLevel.HIGH_RISK),
        (_history(term=4, cesareans=4), RiskLevel.HIGH_RISK),
        (_history(term=3, cesareans=3), RiskLevel.ELIGIBLE),
    ]
    for history, status in cases:
        result = GUIDELINE_ENGINE.assess(CandidateProfile(pregnancy_history=history))
        actual = _category_status(result, GuidelineCategory.PREGNANCY_HISTORY)
        print(f"{history.number_of_term_pregnancies} term, {history.number_of_cesareans} CS, "
              f"{history.number_of_complications} comp: {actual.value}")
        assert actual == status

    print("\n[PASS] Pregnancy history tests passed!")


def test_medical_conditions_by_tier():
    profile = CandidateProfile(medical_conditions=[ConditionCode.ASTHMA])
    assert _category_status(GUIDELINE_ENGINE.assess(profile), GuidelineCategory.MEDICAL) == RiskLevel.REQUIRES_COUNSELING

    profile = CandidateProfile(medical_conditions=[ConditionCode.CHRONIC_HYPERTENSION])
    assert _category_status(GUIDELINE_ENGINE.assess(profile), GuidelineCategory.MEDICAL) == RiskLevel.HIGH_RISK

    profile = CandidateProfile(medical_conditions=[ConditionCode.ACTIVE_CANCER])
    result = GUIDELINE_ENGINE.assess(profile)
    assert _category_status(result, GuidelineCategory.MEDICAL) == RiskLevel.DISQUALIFIED
    assert result.overall_risk.level == RiskLevel.DISQUALIFIED


def test_infectious_disease():
    complete = list(InfectiousTest)
    profile = CandidateProfile(infectious_disease=InfectiousDiseaseScreening(tests_documented=complete))
    assert _category_status(GUIDELINE_ENGINE.assess(profile), GuidelineCategory.INFECTIOUS_DISEASE) == RiskLevel.ELIGIBLE

    profile = CandidateProfile(infectious_disease=InfectiousDiseaseScreening(
        tests_documented=complete, positive_results=[InfectiousTest.CHLAMYDIA],
    ))
    assert _category_status(GUIDELINE_ENGINE.assess(profile), GuidelineCategory.INFECTIOUS_DISEASE) == RiskLevel.REQUIRES_COUNSELING

    profile = CandidateProfile(infectious_disease=InfectiousDiseaseScreening(
        tests_documented=complete, positive_results=[InfectiousTest.HEPATITIS_C_ANTIBODY],
    ))
    assert _category_status(GUIDELINE_ENGINE.assess(profile), GuidelineCategory.INFECTIOUS_DISEASE) == RiskLevel.HIGH_RISK

    profile = CandidateProfile(infectious_disease=InfectiousDiseaseScreening(tests_documented=[InfectiousTest.HIV_1]))
    findings = GUIDELINE_ENGINE.assess(profile).category_summaries[GuidelineCategory.INFECTIOUS_DISEASE.value]
    assert findings[0].status == RiskLevel.REQUIRES_COUNSELING
    assert "hiv_2" in findings[0].message


def test_overall_is_worst_category():
    """No category is more severe than the overall level."""
    profile = CandidateProfile(
        age=38,
        bmi=24,
        pregnancy_history=_history(term=2),
        lifestyle=LifestyleProfile(current_smoker=False, recent_tattoos=True),
    )
    result = GUIDELINE_ENGINE.assess(profile)
    print(f"\nOverall: {result.overall_risk}")

    assert result.overall_risk.level == RiskLevel.REQUIRES_COUNSELING
    for findings in result.category_summaries.values():
        for finding in findings:
            assert finding.status.severity <= result.overall_risk.level.severity


def test_two_high_risk_categories_compound():
    profile = CandidateProfile(age=19, pregnancy_history=_history(term=0))
    result = GUIDELINE_ENGINE.assess(profile)
    print(f"\nCompounded: {result.overall_risk.description}")

    assert result.overall_risk.level == RiskLevel.DISQUALIFIED
    assert "Age Requirements" in result.overall_risk.description

    single = GUIDELINE_ENGINE.assess(CandidateProfile(age=19, pregnancy_history=_history(term=2)))
    assert single.overall_risk.level == RiskLevel.HIGH_RISK


def test_missing_and_invalid_data():
    """Missing or malformed fields skip their rule instead of aborting."""
    profile = CandidateProfile.from_structured({"age": 30, "bmi": "heavy"})
    result = GUIDELINE_ENGINE.assess(profile)
    print(f"\nInsufficient data: {result.insufficient_data}")

    assert "bmi" in profile.invalid_fields
    assert GuidelineCategory.AGE.value in result.category_summaries
    assert GuidelineCategory.LIFESTYLE.value not in result.category_summaries
    assert any("BMI" in item for item in result.insufficient_data)
    assert result.recommendations[-1].startswith("INCOMPLETE ASSESSMENT")
    for item in STANDARD_RECOMMENDATIONS:
        assert item in result.recommendations


def test_recommendations_ordered_by_severity():
    profile = CandidateProfile(
        age=40,
        medical_conditions=[ConditionCode.ACTIVE_CANCER],
        lifestyle=LifestyleProfile(current_smoker=True),
    )
    recommendations = GUIDELINE_ENGINE.assess(profile).recommendations

    assert recommendations[0] == "Contraindicated condition: Active cancer"
    assert recommendations.index("Current tobacco use") < recommendations.index(
        "Age 40 is acceptable but above ideal range; counseling recommended regarding advancing maternal age"
    )
    assert any(r.startswith("CRITICAL: 1 disqualifying") for r in recommendations)


if __name__ == "__main__":
    print("\n" + "="*60)
    print("GUIDELINE RULE ENGINE - TEST SUITE")
    print("="*60)

    try:
        test_age_bands()
        test_bmi_bands()
        test_pregnancy_history()
        test_medical_conditions_by_tier()
        test_infectious_disease()
        test_overall_is_worst_category()
        test_two_high_risk_categories_compound()
        test_missing_and_invalid_data()
        test_recommendations_ordered_by_severity()

        print("\n" + "="*60)
        print("ALL TESTS PASSED!")
        print("="*60 + "\n")

    except AssertionError as e:
        print(f"\n[FAIL] TEST FAILED: {e}")
        sys.exit(1)
