"""
Test file for the end-to-end assessment pipeline

Run with: python -m pytest backend/screening/assessment/test_pipeline.py -v
Or simply: python backend/screening/assessment/test_pipeline.py
"""

import asyncio
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest

from screening.assessment.pipeline import ASSESSMENT_PIPELINE
from screening.core.exceptions import UnrecoverableInputError
from screening.documents import DOCUMENT_SEPARATOR, DecodedDocument, PlainTextDecoder, combine_documents
from screening.schemas.assessment import AcceptanceLevel, RiskLevel
from screening.schemas.codes import ConditionCode


def _assess(text, **kwargs):
    return asyncio.run(ASSESSMENT_PIPELINE.assess_text(text, **kwargs))


def test_uncomplicated_history_is_eligible():
    """Two uncomplicated vaginal deliveries and a normal BMI."""
    print("\n" + "="*60)
    print("TEST: Uncomplicated History")
    print("="*60)

    profile, result = _assess("G2P2, 2 SVD, no complications, BMI 22")
    print(f"Overall: {result.overall_risk.level.value}")
    print(f"Categories: {list(result.category_summaries)}")

    assert profile.pregnancy_history.number_of_term_pregnancies == 2
    assert profile.pregnancy_history.number_of_cesareans == 0
    assert profile.medical_conditions == []
    assert profile.bmi == 22.0
    assert result.overall_risk.level == RiskLevel.ELIGIBLE
    assert "Age not documented" in result.documentation_gaps

    print("\n[PASS] Uncomplicated history tests passed!")


def test_bmi_and_gestational_diabetes():
    print("\n" + "="*60)
    print("TEST: BMI 34, GDM, one C-section")
    print("="*60)

    profile, result = _assess("BMI 34, GDM in last pregnancy, 1 C-section")
    analysis = result.clinic_type_analysis
    print(f"Conditions: {profile.medical_conditions}")
    print(f"Moderate: {analysis.moderate.acceptance_level.value}, strict issues: "
          f"{[i.message for i in analysis.strict.issues]}")

    assert ConditionCode.GESTATIONAL_DIABETES in profile.medical_conditions
    assert analysis.moderate.issues
    assert analysis.moderate.acceptance_level != AcceptanceLevel.VERY_UNLIKELY
    assert any(i.factor == "bmi" and "30" in i.message for i in analysis.strict.issues)
    assert analysis.strict.acceptance_level.rank <= analysis.lenient.acceptance_level.rank

    print("\n[PASS] BMI and GDM tests passed!")


def test_structured_input_matches_narrative():
    """A structured copy of an extracted profile scores identically."""
    text = "30 yo G3P2012, 2 NSVD. History of preeclampsia. BMI 29. Non-smoker."
    profile, narrative_result = _assess(text)

    structured_profile, structured_result = ASSESSMENT_PIPELINE.assess_structured(
        profile.model_dump(mode="json")
    )

    assert structured_profile.parsing_metadata.final_confidence == 100
    assert structured_result.model_dump_json() == narrative_result.model_dump_json()


def test_structured_input_records_gaps():
    """Hand-built structured profiles get the same gap checks as narratives."""
    data = {
        "age": 30,
        "bmi": 24,
        "medical_conditions": [],
        "pregnancy_history": {
            "has_completed_pregnancy": True,
            "number_of_term_pregnancies": 1,
            "number_of_complications": 5,
            "total_deliveries": 1,
        },
    }
    profile, result = ASSESSMENT_PIPELINE.assess_structured(data)
    print(f"\nGaps: {result.documentation_gaps}")

    assert any("5 complications reported across 1 term pregnancies" in gap for gap in result.documentation_gaps)
    assert profile.parsing_metadata.final_confidence == 100

    without_age = {key: value for key, value in data.items() if key != "age"}
    _, result = ASSESSMENT_PIPELINE.assess_structured(without_age)
    assert "Age not documented" in result.documentation_gaps


def test_structured_gaps_match_narrative():
    text = "G2P2, 2 SVD, no complications, BMI 22"
    profile, narrative_result = _assess(text)
    data = profile.model_dump(mode="json", exclude={"documentation_gaps", "parsing_metadata"})

    _, structured_result = ASSESSMENT_PIPELINE.assess_structured(data)

    assert narrative_result.documentation_gaps == ["Age not documented"]
    assert structured_result.documentation_gaps == narrative_result.documentation_gaps


def test_scoring_is_idempotent():
    profile, first = _assess("38 yo, G4P4, 3 c-sections and 1 vaginal delivery, BMI 33, smoker")
    before = profile.model_dump_json()
    second = ASSESSMENT_PIPELINE.assess_profile(profile)
    third = ASSESSMENT_PIPELINE.assess_profile(profile)

    assert first.model_dump_json() == second.model_dump_json() == third.model_dump_json()
    assert profile.model_dump_json() == before


def test_display_name_stamped_after_scoring():
    profile, result = _assess("29 yo G1P1", display_name="Candidate 7")
    assert profile.display_name == "Candidate 7"
    assert "Candidate 7" not in result.model_dump_json()


def test_documents_are_concatenated_in_order():
    documents = [
        DecodedDocument(success=True, text="32 yo G2P2.", filename="intake.txt"),
        DecodedDocument(success=False, error="encrypted", filename="records.pdf"),
        DecodedDocument(success=True, text="2 SVD, BMI 24.", filename="ob.txt"),
    ]
    combined, failures = combine_documents(documents)
    assert combined == "32 yo G2P2." + DOCUMENT_SEPARATOR + "2 SVD, BMI 24."
    assert failures == ["records.pdf: encrypted"]

    profile, _ = _assess(None, documents=documents)
    assert profile.age == 32
    assert profile.pregnancy_history.total_deliveries == 2


def test_plain_text_decoder(tmp_path):
    note = tmp_path / "note.txt"
    note.write_text("G1P1", encoding="utf-8")
    assert PlainTextDecoder().decode(note).text == "G1P1"

    scan = tmp_path / "scan.pdf"
    scan.write_bytes(b"%PDF-1.4")
    decoded = PlainTextDecoder().decode(scan)
    assert decoded.success is False
    assert "Unsupported" in decoded.error


@pytest.mark.parametrize("bad_input", ["", "   ", 42, b"bytes"])
def test_unrecoverable_narrative_input(bad_input):
    with pytest.raises(UnrecoverableInputError):
        _assess(bad_input)


@pytest.mark.parametrize("bad_input", ["not an object", [1, 2], None])
def test_unrecoverable_structured_input(bad_input):
    with pytest.raises(UnrecoverableInputError):
        ASSESSMENT_PIPELINE.assess_structured(bad_input)


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
