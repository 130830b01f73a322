"""
Test file for the Layer 1 pattern extractor

Run with: python -m pytest backend/screening/extraction/test_pattern_extractor.py -v
Or simply: python backend/screening/extraction/test_pattern_extractor.py
"""

import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from screening.extraction.pattern_extractor import PatternExtractor, bmi_from_imperial, parse_height_inches
from screening.schemas.codes import ComplicationCategory, ConditionCode, InfectiousTest

EXTRACTOR = PatternExtractor()


def test_obstetric_shorthand():
    """G/P notation agreeing with delivery tokens."""
    print("\n" + "="*60)
    print("TEST: Obstetric Shorthand")
    print("="*60)

    result = EXTRACTOR.extract("G2P2, 2 SVD, no complications, BMI 22")
    profile = result.profile
    history = profile.pregnancy_history
    print(f"History: {history}")
    print(f"BMI: {profile.bmi}, conditions: {profile.medical_conditions}")

    assert history is not None
    assert history.number_of_term_pregnancies == 2
    assert history.number_of_cesareans == 0
    assert history.total_deliveries == 2
    assert profile.medical_conditions == []
    assert profile.is_field_set("medical_conditions"), "'no complications' should resolve the condition list"
    assert profile.bmi == 22.0
    assert profile.age is None

    print("\n[PASS] Obstetric shorthand tests passed!")


def test_gtpal_notation():
    """GTPAL term count, with and without dashes."""
    print("\n" + "="*60)
    print("TEST: GTPAL Notation")
    print("="*60)

    for text in ("G3P2012", "G3 P2-0-1-2"):
        history = EXTRACTOR.extract(text).profile.pregnancy_history
        print(f"{text}: {history}")
        assert history is not None
        assert history.number_of_term_pregnancies == 2
        assert history.has_completed_pregnancy

    profile = EXTRACTOR.extract("gravida 3 para 2").profile
    assert profile.pregnancy_history.number_of_term_pregnancies == 2
    assert any("cesarean count unknown" in gap for gap in profile.documentation_gaps)

    print("\n[PASS] GTPAL notation tests passed!")


def test_delivery_counts():
    """Spelled and numeric cesarean counts; VBAC implies a prior cesarean."""
    print("\n" + "="*60)
    print("TEST: Delivery Counts")
    print("="*60)

    history = EXTRACTOR.extract("She has had two c-sections.").profile.pregnancy_history
    print(f"two c-sections: {history}")
    assert history.number_of_cesareans == 2
    assert history.total_deliveries == 2

    history = EXTRACTOR.extract("Successful VBAC in 2020.").profile.pregnancy_history
    print(f"VBAC: {history}")
    assert history.number_of_cesareans >= 1

    profile = EXTRACTOR.extract("G2P2. One vaginal delivery.").profile
    print(f"Conflict gaps: {profile.documentation_gaps}")
    assert profile.pregnancy_history.total_deliveries == 1
    assert any("narrative count used" in gap for gap in profile.documentation_gaps)

    print("\n[PASS] Delivery count tests passed!")


def test_age_and_bmi():
    """Age phrasings, BMI plausibility and derived BMI."""
    print("\n" + "="*60)
    print("TEST: Age and BMI")
    print("="*60)

    for text in ("32 yo female", "age 32", "a 32-year-old", "aged 32", "Patient is 32.", "She is 32 and healthy"):
        age = EXTRACTOR.extract(text).profile.age
        print(f"{text!r}: age={age}")
        assert age == 32, f"Expected 32 from {text!r}, got {age}"

    assert EXTRACTOR.extract("Patient is 32 weeks pregnant.").profile.age is None

    profile = EXTRACTOR.extract("BMI 95").profile
    assert profile.bmi is None, "Implausible BMI must be rejected"

    profile = EXTRACTOR.extract("BMI: 31.4").profile
    assert profile.bmi == 31.4

    profile = EXTRACTOR.extract("Weight 150 lbs, height 5'6\"").profile
    print(f"Derived BMI: {profile.bmi} from {profile.weight_lbs} lbs, {profile.height_text}")
    assert profile.height_text == "5'6\""
    assert profile.bmi == bmi_from_imperial(150, 66) == 24.2
    assert profile.field_confidence("bmi") < profile.field_confidence("weight_lbs")

    print("\n[PASS] Age and BMI tests passed!")


def test_unitless_weight_is_less_confident():
    """A bare number gets lower confidence than a unit-qualified one."""
    print("\n" + "="*60)
    print("TEST: Unitless Weight Confidence")
    print("="*60)

    with_unit = EXTRACTOR.extract("150 lbs").profile
    bare = EXTRACTOR.extract("weight 150").profile
    print(f"150 lbs -> {with_unit.field_confidence('weight_lbs')}")
    print(f"weight 150 -> {bare.field_confidence('weight_lbs')}")
    assert with_unit.weight_lbs == bare.weight_lbs == 150.0
    assert bare.field_confidence("weight_lbs") < with_unit.field_confidence("weight_lbs")
    assert parse_height_inches("5'10\"") == 70

    print("\n[PASS] Unitless weight tests passed!")


def test_conditions_and_negation():
    """Named conditions, complication evidence and negated mentions."""
    print("\n" + "="*60)
    print("TEST: Conditions and Negation")
    print("="*60)

    profile = EXTRACTOR.extract("BMI 34, GDM in last pregnancy, 1 C-section").profile
    print(f"Conditions: {profile.medical_conditions}")
    assert ConditionCode.GESTATIONAL_DIABETES in profile.medical_conditions
    assert ComplicationCategory.DIABETES in profile.pregnancy_specific_complications
    assert profile.pregnancy_history.number_of_cesareans == 1
    assert profile.pregnancy_history.number_of_complications == 1

    profile = EXTRACTOR.extract("Denies hypertension or diabetes.").profile
    print(f"Negated: {profile.medical_conditions}")
    assert profile.medical_conditions == []
    assert profile.is_field_set("medical_conditions")

    for text in ("No medical problems.", "No health issues reported.", "PMH noncontributory."):
        profile = EXTRACTOR.extract(text).profile
        assert profile.medical_conditions == []
        assert profile.is_field_set("medical_conditions"), f"{text!r} should count as a negative history"

    profile = EXTRACTOR.extract("History of severe preeclampsia.").profile
    assert profile.medical_conditions == [ConditionCode.SEVERE_PREECLAMPSIA], "Longest phrase should win"

    print("\n[PASS] Condition and negation tests passed!")


def test_lifestyle_and_infectious():
    """Smoking flags and infectious disease results."""
    print("\n" + "="*60)
    print("TEST: Lifestyle and Infectious Disease")
    print("="*60)

    assert EXTRACTOR.extract("Current smoker.").profile.lifestyle.current_smoker is True
    assert EXTRACTOR.extract("Non-smoker.").profile.lifestyle.current_smoker is False
    assert EXTRACTOR.extract("G1P1").profile.lifestyle.current_smoker is None

    screening = EXTRACTOR.extract("Chlamydia positive, HIV negative.").profile.infectious_disease
    print(f"Screening: {screening}")
    assert InfectiousTest.CHLAMYDIA in screening.positive_results
    assert InfectiousTest.HIV_1 in screening.tests_documented
    assert InfectiousTest.HIV_1 not in screening.positive_results

    screening = EXTRACTOR.extract("Infectious disease panel negative.").profile.infectious_disease
    assert set(screening.tests_documented) == set(InfectiousTest)
    assert screening.positive_results == []

    print("\n[PASS] Lifestyle and infectious disease tests passed!")


def test_residual_text_and_determinism():
    """Matched spans are blanked; identical text gives identical output."""
    print("\n" + "="*60)
    print("TEST: Residual Text and Determinism")
    print("="*60)

    text = "28 yo, G1P1, NSVD. Had sugar in pregnancy."
    first = EXTRACTOR.extract(text)
    second = EXTRACTOR.extract(text)
    print(f"Residual: {first.residual_text!r}")

    assert len(first.residual_text) == len(text)
    assert "nsvd" not in first.residual_text.lower()
    assert "sugar in pregnancy" in first.residual_text
    assert first.profile.model_dump_json() == second.profile.model_dump_json()
    assert 0 <= first.confidence <= 100

    print("\n[PASS] Residual text tests passed!")


if __name__ == "__main__":
    print("\n" + "="*60)
    print("PATTERN EXTRACTOR - TEST SUITE")
    print("="*60)

    try:
        test_obstetric_shorthand()
        test_gtpal_notation()
        test_delivery_counts()
        test_age_and_bmi()
        test_unitless_weight_is_less_confident()
        test_conditions_and_negation()
        test_lifestyle_and_infectious()
        test_residual_text_and_determinism()

        print("\n" + "="*60)
        print("ALL TESTS PASSED!")
        print("="*60 + "\n")

    except AssertionError as e:
        print(f"\n[FAIL] TEST FAILED: {e}")
        sys.exit(1)
