from typing import Dict

from ..schemas.profile import CandidateProfile, clamp_confidence

# Weight of each field in the aggregate confidence; an unset field contributes 0
FIELD_WEIGHTS: Dict[str, float] = {
    "age": 20,
    "pregnancy_history": 30,
    "medical_conditions": 20,
    "bmi": 15,
    "psychological": 5,
    "lifestyle": 5,
    "environmental": 5,
}

BASELINE_CONFIDENCE = 85.0

# Per-field reductions from the baseline
EXPLICIT_PENALTY = 5.0      # unit-qualified or labelled value
DERIVED_PENALTY = 15.0      # computed from other fields
CONFLICT_PENALTY = 20.0     # sources disagree
AMBIGUOUS_PENALTY = 30.0    # bare number or loose phrasing


def field_confidence(penalty: float = 0.0) -> float:
    return clamp_confidence(BASELINE_CONFIDENCE - penalty)


def weighted_confidence(profile: CandidateProfile) -> float:
    """Weighted combination of per-field confidences, clamped to [0, 100]."""
    total = sum(FIELD_WEIGHTS.values())
    score = sum(
        weight * (profile.field_confidence(name) or 0.0)
        for name, weight in FIELD_WEIGHTS.items()
    )
    return clamp_confidence(round(score / total, 1))
