"""
Cascade Controller

Runs the extraction strategies in order, merges their partial profiles and
decides whether to escalate to the external layer:

    Layer 1 (patterns) -> Layer 2 (glossary) -> [Layer 3 (external)]

Later layers only fill gaps. A field already set is replaced only when its
confidence is low and the incoming value is more confident. The external
layer is optional and any failure there falls back to the deterministic
result.
"""

import asyncio
import logging
from typing import List, Optional

from pydantic import BaseModel

from .base import ExtractionStrategy, StrategyResult
from .confidence import weighted_confidence
from .external_adapter import ExternalExtractionStrategy
from .glossary_mapper import GlossaryMapper
from .pattern_extractor import PatternExtractor
from ..core.config import settings
from ..core.exceptions import ExternalServiceFailure
from ..schemas.api import ExtractionOptions
from ..schemas.profile import REPLACEABLE_FIELDS, CandidateProfile

logger = logging.getLogger(__name__)

# A set field is only replaceable below this confidence (or the escalation threshold, if lower)
LOW_CONFIDENCE_CEILING = 50.0
USER_PROVIDED_CONFIDENCE = 100.0


def merge_profiles(base: CandidateProfile, incoming: CandidateProfile, threshold: float) -> CandidateProfile:
    """
    Merge a later layer's partial profile into base. Returns a new profile.

    Replaceable fields are filled when unset, or replaced when base holds a
    low-confidence value and incoming is more confident. Condition codes and
    complication evidence are unioned. Documentation gaps accumulate.
    """
    merged = base.model_copy(deep=True)
    replace_below = min(LOW_CONFIDENCE_CEILING, threshold)

    for name in REPLACEABLE_FIELDS:
        if not incoming.is_field_set(name):
            continue
        incoming_confidence = incoming.field_confidence(name)
        if merged.is_field_set(name):
            current_confidence = merged.field_confidence(name)
            if current_confidence >= replace_below or incoming_confidence <= current_confidence:
                continue
            logger.debug("Replacing low-confidence %s (%.0f -> %.0f)", name, current_confidence, incoming_confidence)
        value = getattr(incoming, name)
        if isinstance(value, BaseModel):
            value = value.model_copy(deep=True)
        merged.set_field(name, value, incoming_confidence)

    for code in incoming.medical_conditions:
        merged.add_condition(code)
    if incoming.is_field_set("medical_conditions"):
        merged.mark_determined("medical_conditions", incoming.field_confidence("medical_conditions"))

    for category, evidence in incoming.pregnancy_specific_complications.items():
        if not evidence.found:
            continue
        for mention in evidence.mentions:
            merged.add_complication_evidence(category, mention)
    if incoming.is_field_set("pregnancy_specific_complications"):
        merged.mark_determined(
            "pregnancy_specific_complications", incoming.field_confidence("pregnancy_specific_complications")
        )

    for gap in incoming.documentation_gaps:
        merged.add_gap(gap)

    layers = set(merged.parsing_metadata.layers_used) | set(incoming.parsing_metadata.layers_used)
    merged.parsing_metadata.layers_used = sorted(layers)
    merged.refresh_complication_records()
    return merged


def apply_user_overrides(profile: CandidateProfile, options: ExtractionOptions) -> None:
    """Caller-supplied age and BMI are trusted over extracted values."""
    if options.provided_age is not None:
        profile.set_field("age", options.provided_age, USER_PROVIDED_CONFIDENCE)
    if options.provided_bmi is not None:
        profile.set_field("bmi", round(options.provided_bmi, 1), USER_PROVIDED_CONFIDENCE)


def finalize_profile(profile: CandidateProfile) -> CandidateProfile:
    """Record gaps for missing required fields and compute the final confidence."""
    profile.record_gaps()
    profile.parsing_metadata.final_confidence = weighted_confidence(profile)
    return profile


class CascadeController:
    """
    Orchestrates the extraction strategies.

    Each run builds its own profile, so one controller can serve concurrent
    requests.
    """

    def __init__(self, strategies: Optional[List[ExtractionStrategy]] = None):
        if strategies is None:
            strategies = [PatternExtractor(), GlossaryMapper(), ExternalExtractionStrategy()]
        self.strategies = sorted(strategies, key=lambda s: s.layer)

    def _threshold(self, options: ExtractionOptions) -> float:
        if options.escalation_threshold is not None:
            return options.escalation_threshold
        return settings.ESCALATION_CONFIDENCE_THRESHOLD

    def _timeout(self, options: ExtractionOptions) -> float:
        if options.timeout_seconds is not None:
            return options.timeout_seconds
        return settings.EXTERNAL_EXTRACTION_TIMEOUT_SECONDS

    async def extract(self, text: str, options: Optional[ExtractionOptions] = None) -> CandidateProfile:
        """Extract a CandidateProfile from narrative text."""
        options = options or ExtractionOptions()
        threshold = self._threshold(options)

        # ===== STEP 1: Deterministic layers =====
        profile = CandidateProfile()
        residual = text
        for strategy in self.strategies:
            if strategy.escalation_only:
                continue
            source = residual if strategy.reads_residual_text else text
            result = await strategy.try_extract(source, profile, options)
            profile = merge_profiles(profile, result.profile, threshold)
            residual = result.residual_text
            logger.debug("Layer %d (%s) confidence %.1f", strategy.layer, strategy.name, result.confidence)

        # ===== STEP 2: User-provided overrides =====
        apply_user_overrides(profile, options)
        confidence = weighted_confidence(profile)

        # ===== STEP 3: Escalation =====
        if confidence < threshold:
            if not options.use_external_layer:
                logger.info("Confidence %.1f below %.1f; external layer not enabled", confidence, threshold)
            elif not options.credential:
                logger.info("Confidence %.1f below %.1f; no credential for external layer", confidence, threshold)
            else:
                logger.info("Confidence %.1f below %.1f; escalating to external layer", confidence, threshold)
                profile = await self._escalate(text, profile, options, threshold)

        return finalize_profile(profile)

    async def _escalate(
        self,
        text: str,
        profile: CandidateProfile,
        options: ExtractionOptions,
        threshold: float,
    ) -> CandidateProfile:
        for strategy in self.strategies:
            if not strategy.escalation_only:
                continue
            try:
                result: StrategyResult = await asyncio.wait_for(
                    strategy.try_extract(text, profile, options),
                    timeout=self._timeout(options),
                )
            except asyncio.TimeoutError:
                logger.warning("External layer (%s) timed out; using deterministic result", strategy.name)
                continue
            except ExternalServiceFailure as e:
                logger.warning("External layer (%s) failed: %s; using deterministic result", strategy.name, e)
                continue
            except Exception as e:
                # Transport errors from any external strategy count as a decline
                logger.warning(
                    "External layer (%s) raised %s: %s; using deterministic result",
                    strategy.name, type(e).__name__, e,
                )
                continue
            profile = merge_profiles(profile, result.profile, threshold)
        return profile
