"""
Test file for the Layer 2 glossary mapper and the medical glossary

Run with: python -m pytest backend/screening/extraction/test_glossary_mapper.py -v
"""

import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from screening.extraction.glossary import MEDICAL_GLOSSARY
from screening.extraction.glossary_mapper import (
    EXACT_MATCH_CONFIDENCE,
    FUZZY_MATCH_CONFIDENCE,
    GlossaryMapper,
)
from screening.schemas.codes import ComplicationCategory, ConditionCode
from screening.schemas.profile import CandidateProfile

MAPPER = GlossaryMapper()


def test_glossary_size():
    """The curated glossary carries at least 150 coded phrases."""
    coded = MEDICAL_GLOSSARY.coded_entries()
    print(f"\nCoded glossary entries: {len(coded)}")
    assert len(coded) >= 150
    assert all(entry.code is not None for entry in coded)


def test_exact_lay_phrase():
    """Lay phrasing maps to its condition code."""
    print("\n" + "="*60)
    print("TEST: Exact Lay Phrase")
    print("="*60)

    result = MAPPER.map_terms("Had sugar in pregnancy with her first.", CandidateProfile())
    profile = result.profile
    print(f"Conditions: {profile.medical_conditions}")
    assert profile.medical_conditions == [ConditionCode.GESTATIONAL_DIABETES]
    assert profile.field_confidence("medical_conditions") == EXACT_MATCH_CONFIDENCE
    assert ComplicationCategory.DIABETES in profile.pregnancy_specific_complications
    assert profile.parsing_metadata.layers_used == [2]
    assert "sugar in pregnancy" not in result.residual_text

    print("\n[PASS] Exact lay phrase tests passed!")


def test_fuzzy_misspelling():
    """A misspelled phrase is matched by difflib at lower confidence."""
    print("\n" + "="*60)
    print("TEST: Fuzzy Misspelling")
    print("="*60)

    profile = MAPPER.map_terms("Told she had pregnancy diabetis.", CandidateProfile()).profile
    print(f"Conditions: {profile.medical_conditions}")
    assert ConditionCode.GESTATIONAL_DIABETES in profile.medical_conditions
    assert profile.field_confidence("medical_conditions") == FUZZY_MATCH_CONFIDENCE

    print("\n[PASS] Fuzzy misspelling tests passed!")


def test_skips_negated_and_known_codes():
    """Negated phrases and codes already found by Layer 1 are not added."""
    print("\n" + "="*60)
    print("TEST: Negated and Known Codes")
    print("="*60)

    profile = MAPPER.map_terms("No sugar in pregnancy.", CandidateProfile()).profile
    assert profile.medical_conditions == []

    current = CandidateProfile(medical_conditions=[ConditionCode.GESTATIONAL_DIABETES])
    profile = MAPPER.map_terms("Had sugar in pregnancy.", current).profile
    assert profile.medical_conditions == []

    profile = MAPPER.map_terms("Nothing of note today.", CandidateProfile()).profile
    assert profile.medical_conditions == []
    assert not profile.is_field_set("medical_conditions")

    print("\n[PASS] Negation and known code tests passed!")


if __name__ == "__main__":
    try:
        test_glossary_size()
        test_exact_lay_phrase()
        test_fuzzy_misspelling()
        test_skips_negated_and_known_codes()
        print("\nALL TESTS PASSED!\n")
    except AssertionError as e:
        print(f"\n[FAIL] TEST FAILED: {e}")
        sys.exit(1)
