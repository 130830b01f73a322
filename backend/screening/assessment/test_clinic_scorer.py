"""
Test file for the clinic-type differential scorer

Run with: python -m pytest backend/screening/assessment/test_clinic_scorer.py -v
"""

import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest

from screening.assessment.clinic_scorer import CLINIC_SCORER, acceptance_from_issues
from screening.schemas.assessment import AcceptanceLevel, ClinicIssue, IssueSeverity
from screening.schemas.codes import ComplicationCategory, ConditionCode, InfectiousTest
from screening.schemas.profile import (
    CandidateProfile,
    ComplicationRecord,
    InfectiousDiseaseScreening,
    LifestyleProfile,
    PregnancyHistory,
)


def _history(term=2, cesareans=0, complications=()):
    return PregnancyHistory(
        has_completed_pregnancy=term > 0,
        number_of_term_pregnancies=term,
        number_of_cesareans=cesareans,
        total_deliveries=term,
        number_of_complications=len(complications),
        complications=[ComplicationRecord(category=c, mentions=[c.value]) for c in complications],
    )


def _issue(severity):
    return ClinicIssue(severity=severity, message="test", factor="test")


@pytest.mark.parametrize("severities, expected", [
    ([], AcceptanceLevel.HIGHLY_LIKELY),
    ([IssueSeverity.MINOR, IssueSeverity.MINOR], AcceptanceLevel.LIKELY),
    ([IssueSeverity.MAJOR], AcceptanceLevel.POSSIBLE),
    ([IssueSeverity.MAJOR, IssueSeverity.MODERATE], AcceptanceLevel.UNLIKELY),
    ([IssueSeverity.MAJOR, IssueSeverity.MAJOR, IssueSeverity.MINOR], AcceptanceLevel.VERY_UNLIKELY),
    ([IssueSeverity.DISQUALIFYING], AcceptanceLevel.VERY_UNLIKELY),
])
def test_acceptance_breakpoints(severities, expected):
    assert acceptance_from_issues([_issue(s) for s in severities]) == expected


def test_clean_profile_is_highly_likely_everywhere():
    profile = CandidateProfile(age=28, bmi=23.0, pregnancy_history=_history(term=2))
    analysis = CLINIC_SCORER.score_by_clinic_type(profile)

    for clinic_type, result in analysis.by_type().items():
        print(f"{clinic_type.value}: {result.acceptance_level.value} ({result.score})")
        assert result.acceptance_level == AcceptanceLevel.HIGHLY_LIKELY
        assert result.issues == []
        assert result.summary.startswith("Excellent candidate")


def test_bmi_and_gestational_diabetes():
    """BMI 34 with prior GDM: moderate flags but does not auto-decline; strict cites BMI over 30."""
    print("\n" + "="*60)
    print("TEST: BMI 34 with Gestational Diabetes")
    print("="*60)

    profile = CandidateProfile(
        bmi=34.0,
        medical_conditions=[ConditionCode.GESTATIONAL_DIABETES],
        pregnancy_history=_history(term=1, cesareans=1, complications=[ComplicationCategory.DIABETES]),
    )
    analysis = CLINIC_SCORER.score_by_clinic_type(profile)
    for clinic_type, result in analysis.by_type().items():
        print(f"{clinic_type.value}: {result.acceptance_level.value}")
        for issue in result.issues:
            print(f"  - [{issue.severity.value}] {issue.message}")

    assert analysis.moderate.issues
    assert analysis.moderate.acceptance_level != AcceptanceLevel.VERY_UNLIKELY
    assert any(
        issue.factor == "bmi" and "maximum of 30" in issue.message for issue in analysis.strict.issues
    )
    assert analysis.best_match.value == "lenient"

    print("\n[PASS] BMI and GDM tests passed!")


def test_lenient_downgrades_single_major_flag():
    profile = CandidateProfile(age=30, bmi=24.0, lifestyle=LifestyleProfile(current_smoker=True))
    analysis = CLINIC_SCORER.score_by_clinic_type(profile)

    lenient_issue = analysis.lenient.issues[0]
    assert lenient_issue.severity == IssueSeverity.MODERATE
    assert "case-by-case" in lenient_issue.message
    assert analysis.moderate.issues[0].severity == IssueSeverity.MAJOR


def test_strict_compounds_major_issues():
    profile = CandidateProfile(
        age=41,
        bmi=31.0,
        pregnancy_history=_history(term=3, cesareans=3),
    )
    strict = CLINIC_SCORER.score_by_clinic_type(profile).strict

    assert any(issue.factor == "combination" for issue in strict.issues)
    assert strict.acceptance_level == AcceptanceLevel.VERY_UNLIKELY


def test_disqualifying_issues():
    profile = CandidateProfile(
        age=30,
        medical_conditions=[ConditionCode.ACTIVE_CANCER],
    )
    for result in CLINIC_SCORER.score_by_clinic_type(profile).by_type().values():
        assert result.acceptance_level == AcceptanceLevel.VERY_UNLIKELY

    profile = CandidateProfile(age=30, infectious_disease=InfectiousDiseaseScreening(
        tests_documented=list(InfectiousTest), positive_results=[InfectiousTest.HIV_1],
    ))
    analysis = CLINIC_SCORER.score_by_clinic_type(profile)
    assert analysis.strict.acceptance_level == AcceptanceLevel.VERY_UNLIKELY
    assert analysis.lenient.acceptance_level != AcceptanceLevel.VERY_UNLIKELY


@pytest.mark.parametrize("profile", [
    CandidateProfile(age=39, bmi=29.0),
    CandidateProfile(age=44, bmi=36.0, pregnancy_history=_history(term=5, cesareans=4)),
    CandidateProfile(bmi=18.2, medical_conditions=[ConditionCode.ASTHMA]),
    CandidateProfile(
        age=33,
        medical_conditions=[ConditionCode.PREECLAMPSIA, ConditionCode.HYPEREMESIS],
        pregnancy_history=_history(term=2, complications=[
            ComplicationCategory.HYPERTENSIVE, ComplicationCategory.HYPEREMESIS, ComplicationCategory.PRETERM,
        ]),
    ),
])
def test_strictness_is_monotone(profile):
    """Strict is never more favorable than moderate, nor moderate than lenient."""
    analysis = CLINIC_SCORER.score_by_clinic_type(profile)
    ranks = [analysis.strict.acceptance_level.rank, analysis.moderate.acceptance_level.rank,
             analysis.lenient.acceptance_level.rank]
    print(f"\nRanks strict/moderate/lenient: {ranks}")
    assert ranks[0] <= ranks[1] <= ranks[2]
    for result in analysis.by_type().values():
        assert 0 <= result.score <= 100


def test_uncovered_complication_category_is_an_issue():
    profile = CandidateProfile(pregnancy_history=_history(term=2, complications=[ComplicationCategory.PRETERM]))
    moderate = CLINIC_SCORER.score_by_clinic_type(profile).moderate

    assert [issue.factor for issue in moderate.issues] == ["complication:preterm"]


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
