"""
Candidate Assessment Module

Rule-based scoring of a CandidateProfile: guideline categories, clinic-type
acceptance and MFM review. The pipeline wires extraction and scoring.
"""

from .guidelines import (
    GuidelineRuleEngine,
    GuidelineCategory,
    GUIDELINE_ENGINE,
)
from .clinic_scorer import (
    ClinicTypeScorer,
    ClinicProfile,
    CLINIC_PROFILES,
    CLINIC_SCORER,
    acceptance_from_issues,
)
from .mfm import (
    MFMAssessor,
    MFMGuidance,
    MFM_ASSESSOR,
    estimate_likelihood,
)
from .pipeline import (
    AssessmentPipeline,
    ASSESSMENT_PIPELINE,
    assess_profile,
)

__all__ = [
    # Engines
    "GuidelineRuleEngine",
    "ClinicTypeScorer",
    "MFMAssessor",
    "AssessmentPipeline",

    # Data classes
    "GuidelineCategory",
    "ClinicProfile",
    "MFMGuidance",
    "CLINIC_PROFILES",

    # Convenience functions
    "acceptance_from_issues",
    "estimate_likelihood",
    "assess_profile",

    # Global instances
    "GUIDELINE_ENGINE",
    "CLINIC_SCORER",
    "MFM_ASSESSOR",
    "ASSESSMENT_PIPELINE",
]
