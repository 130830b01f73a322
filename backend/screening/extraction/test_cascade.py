"""
Test file for the cascade controller and the external adapter contract

Run with: python -m pytest backend/screening/extraction/test_cascade.py -v
"""

import asyncio
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest

from screening.core.exceptions import ExternalServiceFailure
from screening.extraction.base import ExtractionStrategy, StrategyResult
from screening.extraction.cascade import CascadeController, finalize_profile, merge_profiles
from screening.extraction.deidentify import PATIENT_PLACEHOLDER, deidentify_text, reidentify_text
from screening.extraction.external_adapter import ExternalExtractionAdapter, ExternalExtractionStrategy, parse_payload
from screening.extraction.glossary_mapper import GlossaryMapper
from screening.extraction.pattern_extractor import PatternExtractor
from screening.schemas.api import ExtractionOptions
from screening.schemas.codes import ConditionCode
from screening.schemas.profile import CandidateProfile, PregnancyHistory

SPARSE_TEXT = "Patient is interested in becoming a gestational carrier."


# =============================================================================
# FAKE EXTERNAL LAYERS
# =============================================================================

class SlowExternal(ExtractionStrategy):
    layer = 3
    name = "slow"
    escalation_only = True

    async def try_extract(self, text, current, options):
        await asyncio.sleep(5)
        raise AssertionError("should have timed out")


class FailingExternal(ExtractionStrategy):
    layer = 3
    name = "failing"
    escalation_only = True

    def __init__(self):
        self.calls = 0

    async def try_extract(self, text, current, options):
        self.calls += 1
        raise ExternalServiceFailure("malformed response")


class DisconnectingExternal(ExtractionStrategy):
    layer = 3
    name = "disconnecting"
    escalation_only = True

    async def try_extract(self, text, current, options):
        raise ConnectionError("socket reset")


class AnsweringExternal(ExtractionStrategy):
    layer = 3
    name = "answering"
    escalation_only = True

    def __init__(self):
        self.calls = 0
        self.seen_text = None

    async def try_extract(self, text, current, options):
        self.calls += 1
        self.seen_text = text
        profile = CandidateProfile()
        profile.set_field("age", 29, 70)
        profile.set_field("bmi", 40.0, 70)
        profile.add_condition(ConditionCode.ASTHMA)
        profile.mark_determined("medical_conditions", 70)
        profile.parsing_metadata.layers_used = [3]
        return StrategyResult(profile=profile, confidence=50, residual_text="", layer=3)


class FakeLLMService:
    def __init__(self, reply):
        self.reply = reply
        self.prompts = []

    async def generate_json(self, prompt, api_key, provider=None, system_prompt=None, temperature=0.1):
        self.prompts.append(prompt)
        return self.reply


def _controller(external):
    return CascadeController([PatternExtractor(), GlossaryMapper(), external])


def _escalating(**overrides):
    options = {"use_external_layer": True, "credential": "test-key", "timeout_seconds": 0.05}
    options.update(overrides)
    return ExtractionOptions(**options)


# =============================================================================
# CASCADE
# =============================================================================

def test_deterministic_without_external_layer():
    """Identical text gives a byte-identical profile when Layer 3 is off."""
    text = "31 yo G3P3, 2 NSVD and 1 c-section. Had sugar in pregnancy. BMI 27.5. Non-smoker."
    controller = CascadeController()
    first = asyncio.run(controller.extract(text))
    second = asyncio.run(controller.extract(text))
    print(f"\nProfile: {first.model_dump_json()[:200]}...")

    assert first.model_dump_json() == second.model_dump_json()
    assert first.parsing_metadata.layers_used == [1, 2]
    assert ConditionCode.GESTATIONAL_DIABETES in first.medical_conditions
    assert first.pregnancy_history.number_of_cesareans == 1


def test_timeout_falls_back_to_deterministic_profile():
    """A hanging external call yields the Layer 1/2 profile and no exception."""
    baseline = asyncio.run(_controller(SlowExternal()).extract(SPARSE_TEXT))
    escalated = asyncio.run(_controller(SlowExternal()).extract(SPARSE_TEXT, _escalating()))

    assert escalated.model_dump_json() == baseline.model_dump_json()
    assert 3 not in escalated.parsing_metadata.layers_used


def test_failure_falls_back_without_retry():
    external = FailingExternal()
    profile = asyncio.run(_controller(external).extract(SPARSE_TEXT, _escalating()))

    assert external.calls == 1
    assert profile.parsing_metadata.layers_used == [1, 2]


def test_transport_error_falls_back_to_deterministic_profile():
    """Errors outside the screening hierarchy are treated as a declined call."""
    baseline = asyncio.run(_controller(DisconnectingExternal()).extract("G1P1"))
    escalated = asyncio.run(_controller(DisconnectingExternal()).extract("G1P1", _escalating()))

    assert escalated.model_dump_json() == baseline.model_dump_json()
    assert escalated.parsing_metadata.layers_used == [1, 2]


def test_escalation_requires_opt_in_and_credential():
    for options in (
        ExtractionOptions(),
        ExtractionOptions(use_external_layer=True),
        ExtractionOptions(credential="test-key"),
    ):
        external = AnsweringExternal()
        asyncio.run(_controller(external).extract(SPARSE_TEXT, options))
        assert external.calls == 0, f"External layer ran with {options}"


def test_no_escalation_above_threshold():
    external = AnsweringExternal()
    text = "32 yo, G2P2, 2 SVD, no complications, BMI 22"
    asyncio.run(_controller(external).extract(text, _escalating(escalation_threshold=10)))
    assert external.calls == 0


def test_external_layer_fills_gaps_only():
    """Layer 3 fills unset fields but never overrides confident Layer 1 values."""
    external = AnsweringExternal()
    profile = asyncio.run(_controller(external).extract("BMI 22. " + SPARSE_TEXT, _escalating()))

    assert external.calls == 1
    assert profile.age == 29
    assert profile.bmi == 22.0, "Confident Layer 1 BMI must not be replaced"
    assert ConditionCode.ASTHMA in profile.medical_conditions
    assert profile.parsing_metadata.layers_used == [1, 2, 3]


def test_user_overrides_are_authoritative():
    options = ExtractionOptions(provided_age=34, provided_bmi=26.04)
    profile = asyncio.run(CascadeController().extract("28 yo, BMI 31", options))

    assert profile.age == 34
    assert profile.bmi == 26.0
    assert profile.field_confidence("age") == 100


def test_confidence_clamped_and_monotone():
    """Confidence stays in [0, 100] and does not rise as required fields go missing."""
    controller = CascadeController()
    full = asyncio.run(controller.extract("32 yo, G2P2, 2 SVD, no complications, BMI 22"))
    partial = asyncio.run(controller.extract("G2P2, 2 SVD, no complications, BMI 22"))
    empty = asyncio.run(controller.extract(SPARSE_TEXT))

    scores = [p.parsing_metadata.final_confidence for p in (full, partial, empty)]
    print(f"\nConfidence: {scores}")
    assert all(0 <= s <= 100 for s in scores)
    assert scores[0] >= scores[1] >= scores[2]
    assert "Age not documented" in partial.documentation_gaps
    assert "Age not documented" not in full.documentation_gaps


# =============================================================================
# MERGE RULES
# =============================================================================

def test_merge_replaces_only_low_confidence_fields():
    base = CandidateProfile()
    base.set_field("age", 30, 85)
    base.set_field("bmi", 45.0, 40)
    incoming = CandidateProfile()
    incoming.set_field("age", 41, 70)
    incoming.set_field("bmi", 25.0, 70)
    incoming.set_field("weight_lbs", 150.0, 70)

    merged = merge_profiles(base, incoming, threshold=60)

    assert merged.age == 30
    assert merged.bmi == 25.0
    assert merged.weight_lbs == 150.0
    assert base.bmi == 45.0, "merge must not mutate its inputs"


def test_implausible_complication_count_is_flagged():
    profile = CandidateProfile()
    profile.set_field(
        "pregnancy_history",
        PregnancyHistory(has_completed_pregnancy=True, number_of_term_pregnancies=1, number_of_complications=4),
        85,
    )
    finalize_profile(profile)
    assert any("verify records" in gap for gap in profile.documentation_gaps)


# =============================================================================
# EXTERNAL ADAPTER CONTRACT
# =============================================================================

def test_parse_payload_accepts_fenced_json():
    payload = parse_payload('```json\n{"age": 33, "medical_conditions": ["asthma"]}\n```')
    assert payload.age == 33
    assert payload.medical_conditions == [ConditionCode.ASTHMA]


@pytest.mark.parametrize("raw", [
    "not json at all",
    "[1, 2, 3]",
    '{"age": "thirty"}',
    '{"medical_conditions": ["made_up_condition"]}',
    '{"favorite_color": "blue"}',
])
def test_parse_payload_rejects_nonconforming(raw):
    with pytest.raises(ExternalServiceFailure):
        parse_payload(raw)


def test_adapter_deidentifies_before_sending():
    service = FakeLLMService('{"age": 35}')
    adapter = ExternalExtractionAdapter(service=service)
    text = "Jane Doe (jane@example.com, 555-123-4567) delivered on 03/14/2019."

    payload = asyncio.run(adapter.extract(text, "test-key", candidate_name="Jane Doe"))

    assert payload.age == 35
    sent = service.prompts[0]
    assert "Jane" not in sent and "Doe" not in sent
    assert "jane@example.com" not in sent
    assert "555-123-4567" not in sent
    assert "03/14/2019" not in sent and "2019" in sent


def test_deidentify_round_trip_name():
    text = deidentify_text("Sarah Connor had two c-sections; Sarah is 34.", "Sarah Connor")
    assert "Sarah" not in text
    assert text.count(PATIENT_PLACEHOLDER) == 2
    assert reidentify_text(f"{PATIENT_PLACEHOLDER} is eligible", "Sarah").startswith("Sarah")


def test_external_gap_notices_are_reidentified():
    reply = '{"documentation_gaps": ["PATIENT_A prenatal records for 2019 missing"]}'
    service = FakeLLMService(reply)
    strategy = ExternalExtractionStrategy(ExternalExtractionAdapter(service=service))
    options = ExtractionOptions(credential="test-key", candidate_name="Jane Doe")

    result = asyncio.run(strategy.try_extract("Jane Doe, G1P1.", CandidateProfile(), options))

    assert "Jane" not in service.prompts[0]
    assert result.profile.documentation_gaps == ["Jane Doe prenatal records for 2019 missing"]


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
