"""
Test file for the MFM referral assessor

Run with: python -m pytest backend/screening/assessment/test_mfm.py -v
"""

import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from screening.assessment.mfm import BASE_DOCUMENTS, BASE_QUESTIONS, MFM_ASSESSOR, MFM_GUIDANCE
from screening.schemas.assessment import FindingSeverity, MFMLikelihood, MFMReviewLevel
from screening.schemas.codes import ConditionCode
from screening.schemas.profile import CandidateProfile, PregnancyHistory


def _history(term=2, cesareans=0, complications=0, deliveries=None):
    return PregnancyHistory(
        has_completed_pregnancy=term > 0,
        number_of_term_pregnancies=term,
        number_of_cesareans=cesareans,
        number_of_complications=complications,
        total_deliveries=term if deliveries is None else deliveries,
    )


def test_clean_profile_needs_no_review():
    result = MFM_ASSESSOR.assess(CandidateProfile(age=29, bmi=24.0, pregnancy_history=_history()))
    print(f"\nSummary: {result.summary}")

    assert result.consultation_needed is False
    assert result.review_level == MFMReviewLevel.NOT_REQUIRED
    assert result.likelihood.level == MFMLikelihood.LIKELY_APPROVE
    assert result.likelihood.percentage == "90-100%"
    assert result.findings == []
    assert result.questions_to_ask == BASE_QUESTIONS
    assert result.documentation_needed == BASE_DOCUMENTS


def test_more_than_one_complication_needs_consultation():
    result = MFM_ASSESSOR.assess(CandidateProfile(pregnancy_history=_history(term=3, complications=2)))

    assert result.consultation_needed is True
    assert result.review_level == MFMReviewLevel.STRONGLY_RECOMMENDED
    assert result.findings[0].category == "Previous Pregnancy Complications"


def test_complex_tier_condition_needs_consultation():
    result = MFM_ASSESSOR.assess(CandidateProfile(medical_conditions=[ConditionCode.CHRONIC_HYPERTENSION]))
    guidance = MFM_GUIDANCE[ConditionCode.CHRONIC_HYPERTENSION]

    assert result.consultation_needed is True
    assert result.review_level == MFMReviewLevel.REQUIRED
    assert result.findings[0].mfm_view == guidance.mfm_view
    assert result.findings[0].approvability == guidance.approvability
    assert result.likelihood.level == MFMLikelihood.UNLIKELY_APPROVE


def test_lookup_table_and_tier_defaults():
    """Table entries are authoritative; contraindicated codes without one are not approvable."""
    result = MFM_ASSESSOR.assess(CandidateProfile(medical_conditions=[ConditionCode.GESTATIONAL_DIABETES]))
    assert result.findings[0].severity == FindingSeverity.MODERATE
    assert result.review_level == MFMReviewLevel.RECOMMENDED
    assert any("a1c" in q.lower() for q in result.questions_to_ask)

    result = MFM_ASSESSOR.assess(CandidateProfile(medical_conditions=[ConditionCode.ACTIVE_CANCER]))
    assert result.findings[0].approvability == "Not approvable"
    assert result.likelihood.level == MFMLikelihood.LIKELY_DENY


def test_cesarean_and_bmi_findings():
    result = MFM_ASSESSOR.assess(CandidateProfile(pregnancy_history=_history(term=3, cesareans=3)))
    assert result.findings[0].severity == FindingSeverity.HIGH
    assert result.likelihood.level == MFMLikelihood.UNLIKELY_APPROVE

    result = MFM_ASSESSOR.assess(CandidateProfile(bmi=41.0))
    assert result.findings[0].category == "Obesity Class III"
    assert result.likelihood.level == MFMLikelihood.LIKELY_DENY

    result = MFM_ASSESSOR.assess(CandidateProfile(bmi=33.0))
    assert result.findings[0].severity == FindingSeverity.MODERATE


def test_multiple_moderate_factors_compound():
    profile = CandidateProfile(
        age=41,
        bmi=33.0,
        pregnancy_history=_history(term=2, cesareans=2),
    )
    result = MFM_ASSESSOR.assess(profile)
    categories = [f.category for f in result.findings]
    print(f"\nFindings: {categories}")

    assert "Multiple Risk Factors" in categories
    assert result.review_level == MFMReviewLevel.REQUIRED
    assert result.likelihood.level == MFMLikelihood.UNLIKELY_APPROVE


def test_low_severity_factor_recommends_review():
    """A single low-severity factor still yields an MFM recommendation."""
    result = MFM_ASSESSOR.assess(CandidateProfile(age=39, bmi=24.0, pregnancy_history=_history()))
    assert result.review_level == MFMReviewLevel.RECOMMENDED
    assert result.findings[0].category == "Age"


if __name__ == "__main__":
    import pytest
    sys.exit(pytest.main([__file__, "-v"]))
