"""
Assessment pipeline: narrative or structured input in, AssessmentResult out.

Scoring runs the guideline engine, the clinic-type scorer and the MFM
assessor over one read-only CandidateProfile.
"""

import logging
from typing import Any, Iterable, Optional, Tuple

from .clinic_scorer import CLINIC_SCORER, ClinicTypeScorer
from .guidelines import GUIDELINE_ENGINE, GuidelineRuleEngine
from .mfm import MFM_ASSESSOR, MFMAssessor
from ..core.exceptions import UnrecoverableInputError
from ..documents import DecodedDocument, combine_documents
from ..extraction.cascade import CascadeController
from ..schemas.api import ExtractionOptions
from ..schemas.assessment import AssessmentResult
from ..schemas.profile import CandidateProfile

logger = logging.getLogger(__name__)


class AssessmentPipeline:
    """Wires extraction and scoring together."""

    def __init__(
        self,
        cascade: Optional[CascadeController] = None,
        guidelines: GuidelineRuleEngine = GUIDELINE_ENGINE,
        clinic_scorer: ClinicTypeScorer = CLINIC_SCORER,
        mfm_assessor: MFMAssessor = MFM_ASSESSOR,
    ):
        self._cascade = cascade
        self.guidelines = guidelines
        self.clinic_scorer = clinic_scorer
        self.mfm_assessor = mfm_assessor

    @property
    def cascade(self) -> CascadeController:
        # Compiling the keyword tables is only needed for narrative input
        if self._cascade is None:
            self._cascade = CascadeController()
        return self._cascade

    def assess_profile(self, profile: CandidateProfile) -> AssessmentResult:
        """Score a profile. Idempotent; the profile is not modified."""
        guideline_result = self.guidelines.assess(profile)
        clinic_analysis = self.clinic_scorer.score_by_clinic_type(profile)
        mfm_assessment = self.mfm_assessor.assess(profile)

        logger.info(
            "Assessment complete: overall %s, best clinic match %s, MFM %s",
            guideline_result.overall_risk.level.value,
            clinic_analysis.best_match.value,
            mfm_assessment.review_level.value,
        )
        return AssessmentResult(
            overall_risk=guideline_result.overall_risk,
            category_summaries=guideline_result.category_summaries,
            clinic_type_analysis=clinic_analysis,
            mfm_assessment=mfm_assessment,
            recommendations=guideline_result.recommendations,
            insufficient_data=guideline_result.insufficient_data,
            documentation_gaps=list(profile.documentation_gaps),
        )

    async def extract_text(
        self,
        text: Any,
        options: Optional[ExtractionOptions] = None,
        documents: Iterable[DecodedDocument] = (),
    ) -> CandidateProfile:
        """Run the extraction cascade over text and any decoded documents."""
        narrative = self._narrative(text, documents)
        return await self.cascade.extract(narrative, options or ExtractionOptions())

    async def assess_text(
        self,
        text: Any,
        options: Optional[ExtractionOptions] = None,
        documents: Iterable[DecodedDocument] = (),
        display_name: Optional[str] = None,
    ) -> Tuple[CandidateProfile, AssessmentResult]:
        profile = await self.extract_text(text, options, documents)
        result = self.assess_profile(profile)
        if display_name:
            profile.stamp_display_name(display_name)
        return profile, result

    def assess_structured(
        self,
        data: Any,
        display_name: Optional[str] = None,
    ) -> Tuple[CandidateProfile, AssessmentResult]:
        """Score a pre-structured profile, skipping extraction."""
        profile = CandidateProfile.from_structured(data)
        if profile.invalid_fields:
            logger.info("Structured profile has invalid fields: %s", ", ".join(sorted(profile.invalid_fields)))
        result = self.assess_profile(profile)
        if display_name:
            profile.stamp_display_name(display_name)
        return profile, result

    @staticmethod
    def _narrative(text: Any, documents: Iterable[DecodedDocument]) -> str:
        if text is not None and not isinstance(text, str):
            raise UnrecoverableInputError(f"Narrative input must be text, got {type(text).__name__}")

        combined, failures = combine_documents(documents)
        for failure in failures:
            logger.warning("Document could not be decoded: %s", failure)

        parts = [part for part in ((text or "").strip(), combined) if part]
        if not parts:
            raise UnrecoverableInputError("No narrative text supplied")
        return "\n\n".join(parts)


# Global instance
ASSESSMENT_PIPELINE = AssessmentPipeline()


def assess_profile(profile: CandidateProfile) -> AssessmentResult:
    """Score a profile with the default engines."""
    return ASSESSMENT_PIPELINE.assess_profile(profile)
