"""
Layer 1: Pattern Extractor

Deterministic regex and keyword extraction of demographics, obstetric
notation, delivery history, named conditions and screening attributes.
It never raises and never touches the network; text it cannot interpret
simply leaves fields unset.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from .base import ExtractionStrategy, StrategyResult
from .confidence import (
    AMBIGUOUS_PENALTY,
    CONFLICT_PENALTY,
    DERIVED_PENALTY,
    EXPLICIT_PENALTY,
    field_confidence,
    weighted_confidence,
)
from .dictionaries import MEDICAL_DICTIONARY, MedicalDictionary
from .patterns import OBSTETRIC_PATTERNS, ObstetricPatterns, compile_word, parse_count
from .text_utils import (
    Span,
    TermMatch,
    blank_spans,
    clause_end,
    clause_start,
    compile_negations,
    is_negated,
    overlaps,
    select_longest,
    sentence_index,
)
from ..schemas.api import ExtractionOptions
from ..schemas.codes import InfectiousTest, complication_category_for
from ..schemas.profile import (
    CandidateProfile,
    EnvironmentalProfile,
    InfectiousDiseaseScreening,
    LifestyleProfile,
    PregnancyHistory,
    PsychologicalProfile,
)

logger = logging.getLogger(__name__)

MIN_PLAUSIBLE_AGE = 14
MAX_PLAUSIBLE_AGE = 65
MIN_PLAUSIBLE_BMI = 12.0
MAX_PLAUSIBLE_BMI = 70.0
MIN_PLAUSIBLE_WEIGHT_LBS = 70.0
MAX_PLAUSIBLE_WEIGHT_LBS = 500.0
LBS_PER_KG = 2.20462

# Delivery modes are scanned in this order so longer phrases claim their spans first
DELIVERY_MODE_ORDER = ("vbac", "repeat_cesarean", "cesarean", "operative", "vaginal")


@dataclass
class ObstetricNotation:
    """Parsed G/P or GTPAL notation."""
    text: str
    gravida: int
    term: int
    preterm: int = 0

    @property
    def deliveries(self) -> int:
        return self.term + self.preterm


@dataclass
class DeliveryCounts:
    """Deliveries described in the narrative."""
    vaginal: int = 0
    cesarean: int = 0
    operative: int = 0
    mentioned: bool = False

    @property
    def total(self) -> int:
        return self.vaginal + self.cesarean + self.operative


def parse_height_inches(height_text: Optional[str]) -> Optional[int]:
    """Convert normalized height text (5'6") to inches."""
    if not height_text:
        return None
    m = re.match(r"(\d)'(\d{1,2})", height_text)
    if not m:
        return None
    return int(m.group(1)) * 12 + int(m.group(2))


def bmi_from_imperial(weight_lbs: float, height_inches: int) -> float:
    return round(weight_lbs * 703 / (height_inches ** 2), 1)


class PatternExtractor(ExtractionStrategy):
    """Layer 1 strategy: regex patterns and the condition keyword dictionary."""

    layer = 1
    name = "pattern"

    def __init__(
        self,
        dictionary: MedicalDictionary = MEDICAL_DICTIONARY,
        patterns: ObstetricPatterns = OBSTETRIC_PATTERNS,
    ):
        self.dictionary = dictionary
        self.patterns = patterns
        self._negations = compile_negations(dictionary.negation_terms)

        self._condition_terms = [
            (code, keyword, compile_word(keyword))
            for code, keywords in dictionary.conditions.items()
            for keyword in keywords
        ]
        self._negative_history = [compile_word(p) for p in dictionary.negative_history_phrases]

        self._delivery_patterns = {
            mode: [re.compile(ObstetricPatterns.count_prefix(token)) for token in tokens]
            for mode, tokens in patterns.delivery_tokens.items()
        }

        self._psych_terms = self._compile_flag_terms(dictionary.psychological_terms)
        self._support_absent = [compile_word(t) for t in dictionary.support_absent_terms]
        self._support_present = [compile_word(t) for t in dictionary.support_present_terms]
        self._lifestyle_positive = self._compile_flag_terms(dictionary.lifestyle_positive_terms)
        self._lifestyle_negative = self._compile_flag_terms(dictionary.lifestyle_negative_terms)
        self._environmental_terms = self._compile_flag_terms(dictionary.environmental_terms)

        # A token may document several tests ("hiv 1/2")
        tests_by_token: Dict[str, List[InfectiousTest]] = {}
        for test, tokens in dictionary.infectious_tests.items():
            for token in tokens:
                tests_by_token.setdefault(token, []).append(test)
        self._infectious_terms = [
            (token, tuple(tests), compile_word(token)) for token, tests in tests_by_token.items()
        ]
        self._panel_terms = [compile_word(t) for t in dictionary.infectious_panel_terms]
        self._result_terms = (
            [(compile_word(t), True) for t in dictionary.positive_result_terms]
            + [(compile_word(t), False) for t in dictionary.negative_result_terms]
        )

    @staticmethod
    def _compile_flag_terms(terms: Dict[str, List[str]]) -> List[Tuple[str, str, "re.Pattern[str]"]]:
        return [
            (attribute, term, compile_word(term))
            for attribute, attribute_terms in terms.items()
            for term in attribute_terms
        ]

    # -------------------------------------------------------------------------
    # MAIN ENTRY POINT
    # -------------------------------------------------------------------------

    async def try_extract(
        self,
        text: str,
        current: CandidateProfile,
        options: ExtractionOptions,
    ) -> StrategyResult:
        return self.extract(text)

    def extract(self, text: str) -> StrategyResult:
        """Run every Layer 1 pass over text. Pure function of its input."""
        lowered = text.lower()
        profile = CandidateProfile()
        consumed: List[Span] = []

        self._extract_age(lowered, profile, consumed)
        self._extract_body_metrics(lowered, profile, consumed)
        self._extract_conditions(text, lowered, profile, consumed)
        self._extract_pregnancy_history(lowered, profile, consumed)
        self._extract_psychological(lowered, profile, consumed)
        self._extract_lifestyle(lowered, profile, consumed)
        self._extract_environmental(lowered, profile, consumed)
        self._extract_infectious(lowered, profile, consumed)

        profile.refresh_complication_records()
        profile.parsing_metadata.layers_used = [self.layer]
        confidence = weighted_confidence(profile)
        profile.parsing_metadata.final_confidence = confidence

        logger.debug(
            "Layer 1 resolved %d fields (confidence %.1f)",
            len(profile.parsing_metadata.per_field_confidence), confidence,
        )
        return StrategyResult(
            profile=profile,
            confidence=confidence,
            residual_text=blank_spans(text, consumed),
            layer=self.layer,
        )

    # =========================================================================
    # STEP 1: DEMOGRAPHICS AND BODY METRICS
    # =========================================================================

    def _extract_age(self, lowered: str, profile: CandidateProfile, consumed: List[Span]) -> None:
        for pattern_list, penalty in (
            (self.patterns.age_patterns, EXPLICIT_PENALTY),
            (self.patterns.ambiguous_age_patterns, AMBIGUOUS_PENALTY),
        ):
            for pattern in pattern_list:
                for m in re.finditer(pattern, lowered):
                    age = int(m.group(1))
                    if MIN_PLAUSIBLE_AGE <= age <= MAX_PLAUSIBLE_AGE:
                        profile.set_field("age", age, field_confidence(penalty))
                        consumed.append(m.span())
                        return

    def _first_number(
        self,
        patterns: List[str],
        lowered: str,
        consumed: List[Span],
        low: float,
        high: float,
    ) -> Optional[float]:
        for pattern in patterns:
            for m in re.finditer(pattern, lowered):
                if overlaps(m.span(), consumed):
                    continue
                value = float(m.group(1))
                if low <= value <= high:
                    consumed.append(m.span())
                    return value
        return None

    def _extract_body_metrics(self, lowered: str, profile: CandidateProfile, consumed: List[Span]) -> None:
        p = self.patterns

        bmi = self._first_number(p.bmi_patterns, lowered, consumed, MIN_PLAUSIBLE_BMI, MAX_PLAUSIBLE_BMI)
        if bmi is not None:
            profile.set_field("bmi", bmi, field_confidence(EXPLICIT_PENALTY))

        weight = self._first_number(
            p.weight_patterns, lowered, consumed, MIN_PLAUSIBLE_WEIGHT_LBS, MAX_PLAUSIBLE_WEIGHT_LBS
        )
        if weight is not None:
            profile.set_field("weight_lbs", weight, field_confidence(EXPLICIT_PENALTY))
        else:
            kg = self._first_number(
                p.weight_kg_patterns, lowered, consumed,
                MIN_PLAUSIBLE_WEIGHT_LBS / LBS_PER_KG, MAX_PLAUSIBLE_WEIGHT_LBS / LBS_PER_KG,
            )
            if kg is not None:
                profile.set_field("weight_lbs", round(kg * LBS_PER_KG, 1), field_confidence(EXPLICIT_PENALTY * 2))
            else:
                bare = self._first_number(
                    p.unitless_weight_patterns, lowered, consumed,
                    MIN_PLAUSIBLE_WEIGHT_LBS, MAX_PLAUSIBLE_WEIGHT_LBS,
                )
                if bare is not None:
                    profile.set_field("weight_lbs", bare, field_confidence(AMBIGUOUS_PENALTY))

        for pattern in p.height_patterns:
            m = re.search(pattern, lowered)
            if m and int(m.group(2)) < 12:
                profile.set_field(
                    "height_text", f"{m.group(1)}'{int(m.group(2))}\"", field_confidence(EXPLICIT_PENALTY)
                )
                consumed.append(m.span())
                break

        # BMI derived from weight and height when not stated
        inches = parse_height_inches(profile.height_text)
        if profile.bmi is None and profile.weight_lbs is not None and inches:
            derived = bmi_from_imperial(profile.weight_lbs, inches)
            if MIN_PLAUSIBLE_BMI <= derived <= MAX_PLAUSIBLE_BMI:
                source_confidence = min(
                    profile.field_confidence("weight_lbs") or 0.0,
                    profile.field_confidence("height_text") or 0.0,
                )
                profile.set_field("bmi", derived, source_confidence - DERIVED_PENALTY)

    # =========================================================================
    # STEP 2: NAMED CONDITIONS AND PREGNANCY COMPLICATIONS
    # =========================================================================

    def _extract_conditions(
        self,
        text: str,
        lowered: str,
        profile: CandidateProfile,
        consumed: List[Span],
    ) -> None:
        matches = [
            TermMatch(m.start(), m.end(), keyword, code)
            for code, keyword, pattern in self._condition_terms
            for m in pattern.finditer(lowered)
        ]

        saw_negated = False
        for match in select_longest(matches, consumed):
            consumed.append(match.span)
            if is_negated(lowered, match.start, self._negations):
                saw_negated = True
                continue

            profile.add_condition(match.value)
            category = complication_category_for(match.value)
            if category is not None:
                profile.add_complication_evidence(category, text[match.start:match.end])

        if profile.medical_conditions:
            profile.mark_determined("medical_conditions", field_confidence())
        elif any(p.search(lowered) for p in self._negative_history):
            profile.mark_determined("medical_conditions", field_confidence(EXPLICIT_PENALTY))
        elif saw_negated:
            profile.mark_determined("medical_conditions", field_confidence(AMBIGUOUS_PENALTY))

        if profile.pregnancy_specific_complications:
            profile.mark_determined("pregnancy_specific_complications", field_confidence())

    # =========================================================================
    # STEP 3: OBSTETRIC HISTORY
    # Narrative delivery counts win over G/P notation when they disagree
    # =========================================================================

    def _extract_pregnancy_history(self, lowered: str, profile: CandidateProfile, consumed: List[Span]) -> None:
        notation = self._match_obstetric_notation(lowered, consumed)
        deliveries = self._count_deliveries(lowered, consumed)

        if deliveries.mentioned:
            total = deliveries.total
            preterm = notation.preterm if notation else 0
            term = max(total - preterm, 0)
            penalty = EXPLICIT_PENALTY
            if notation is not None:
                if notation.deliveries == total:
                    penalty = 0.0
                else:
                    penalty = CONFLICT_PENALTY
                    profile.add_gap(
                        f"Obstetric notation {notation.text.upper()} reports {notation.deliveries} "
                        f"deliveries but the narrative describes {total}; narrative count used"
                    )
            history = PregnancyHistory(
                has_completed_pregnancy=total > 0,
                number_of_term_pregnancies=term,
                number_of_cesareans=deliveries.cesarean,
                total_deliveries=total,
            )
            profile.set_field("pregnancy_history", history, field_confidence(penalty))
            return

        if notation is not None:
            history = PregnancyHistory(
                has_completed_pregnancy=notation.deliveries > 0,
                number_of_term_pregnancies=notation.term,
                total_deliveries=notation.deliveries,
            )
            if notation.deliveries > 0:
                profile.add_gap("Delivery records (mode of delivery) not documented; cesarean count unknown")
            profile.set_field("pregnancy_history", history, field_confidence(EXPLICIT_PENALTY))
            return

        for pattern in self.patterns.nulliparous_patterns:
            m = re.search(pattern, lowered)
            if m:
                consumed.append(m.span())
                profile.set_field("pregnancy_history", PregnancyHistory(), field_confidence(EXPLICIT_PENALTY))
                return

        for pattern in self.patterns.pregnancy_count_patterns:
            m = re.search(pattern, lowered)
            count = parse_count(m.group(1)) if m else None
            if count is not None:
                consumed.append(m.span())
                history = PregnancyHistory(
                    has_completed_pregnancy=count > 0,
                    number_of_term_pregnancies=count,
                    total_deliveries=count,
                )
                profile.add_gap("Obstetric notation and delivery records not documented")
                profile.set_field("pregnancy_history", history, field_confidence(AMBIGUOUS_PENALTY))
                return

    def _match_obstetric_notation(self, lowered: str, consumed: List[Span]) -> Optional[ObstetricNotation]:
        for pattern in self.patterns.gtpal_patterns:
            m = re.search(pattern, lowered)
            if m:
                consumed.append(m.span())
                gravida, term, preterm = int(m.group(1)), int(m.group(2)), int(m.group(3))
                return ObstetricNotation(text=m.group(0), gravida=gravida, term=term, preterm=preterm)

        for pattern in self.patterns.gravida_para_patterns:
            m = re.search(pattern, lowered)
            if m:
                consumed.append(m.span())
                return ObstetricNotation(text=m.group(0), gravida=int(m.group(1)), term=int(m.group(2)))

        return None

    def _count_deliveries(self, lowered: str, consumed: List[Span]) -> DeliveryCounts:
        """
        Count deliveries per mode. An explicit count ("2 svd", "c/s x2") wins;
        otherwise each sentence mentioning the mode counts once.
        """
        counts: Dict[str, int] = {}
        mentioned = False
        taken: List[Span] = list(consumed)

        for mode in DELIVERY_MODE_ORDER:
            matches = [
                TermMatch(m.start(), m.end(), m.group(0), m)
                for pattern in self._delivery_patterns[mode]
                for m in pattern.finditer(lowered)
            ]
            explicit: List[int] = []
            sentences: Set[int] = set()
            for match in select_longest(matches, taken):
                taken.append(match.span)
                consumed.append(match.span)
                mentioned = True
                if is_negated(lowered, match.start, self._negations):
                    continue
                found = match.value
                count = parse_count(found.group(1))
                if count is None:
                    count = parse_count(found.group(2))
                if count is not None:
                    explicit.append(count)
                else:
                    sentences.add(sentence_index(lowered, match.start))
            counts[mode] = max(explicit) if explicit else len(sentences)

        cesarean = counts["cesarean"] + counts["repeat_cesarean"]
        if counts["repeat_cesarean"] and not counts["cesarean"]:
            # a repeat cesarean implies a primary one
            cesarean += 1
        vaginal = counts["vaginal"] + counts["vbac"]
        if counts["vbac"] and cesarean == 0:
            cesarean = 1

        return DeliveryCounts(
            vaginal=vaginal,
            cesarean=cesarean,
            operative=counts["operative"],
            mentioned=mentioned,
        )

    # =========================================================================
    # STEP 4: PSYCHOLOGICAL, LIFESTYLE AND ENVIRONMENTAL FLAGS
    # =========================================================================

    def _scan_flags(
        self,
        lowered: str,
        terms: List[Tuple[str, str, "re.Pattern[str]"]],
        consumed: List[Span],
        values: Dict[str, bool],
    ) -> None:
        """Set attribute True on a mention, False on a negated mention."""
        matches = [
            TermMatch(m.start(), m.end(), term, attribute)
            for attribute, term, pattern in terms
            for m in pattern.finditer(lowered)
        ]
        for match in select_longest(matches, consumed):
            consumed.append(match.span)
            if is_negated(lowered, match.start, self._negations):
                values.setdefault(match.value, False)
            else:
                values[match.value] = True

    def _extract_psychological(self, lowered: str, profile: CandidateProfile, consumed: List[Span]) -> None:
        values: Dict[str, bool] = {}

        for pattern in self._support_absent:
            for m in pattern.finditer(lowered):
                if not overlaps(m.span(), consumed):
                    consumed.append(m.span())
                    values["adequate_support_system"] = False
        for pattern in self._support_present:
            for m in pattern.finditer(lowered):
                if overlaps(m.span(), consumed):
                    continue
                consumed.append(m.span())
                if is_negated(lowered, m.start(), self._negations):
                    values["adequate_support_system"] = False
                else:
                    values.setdefault("adequate_support_system", True)

        self._scan_flags(lowered, self._psych_terms, consumed, values)
        if values:
            profile.set_field("psychological", PsychologicalProfile(**values), field_confidence(EXPLICIT_PENALTY))

    def _extract_lifestyle(self, lowered: str, profile: CandidateProfile, consumed: List[Span]) -> None:
        values: Dict[str, bool] = {}

        # Explicit negative phrases ("non-smoker") claim their spans first
        for attribute, _, pattern in self._lifestyle_negative:
            for m in pattern.finditer(lowered):
                if not overlaps(m.span(), consumed):
                    consumed.append(m.span())
                    values.setdefault(attribute, False)

        self._scan_flags(lowered, self._lifestyle_positive, consumed, values)
        if values:
            profile.set_field("lifestyle", LifestyleProfile(**values), field_confidence(EXPLICIT_PENALTY))

    def _extract_environmental(self, lowered: str, profile: CandidateProfile, consumed: List[Span]) -> None:
        values: Dict[str, bool] = {}
        self._scan_flags(lowered, self._environmental_terms, consumed, values)
        if values:
            profile.set_field("environmental", EnvironmentalProfile(**values), field_confidence(EXPLICIT_PENALTY))

    # =========================================================================
    # STEP 5: INFECTIOUS DISEASE SCREENING
    # =========================================================================

    def _extract_infectious(self, lowered: str, profile: CandidateProfile, consumed: List[Span]) -> None:
        matches = [
            TermMatch(m.start(), m.end(), token, tests)
            for token, tests, pattern in self._infectious_terms
            for m in pattern.finditer(lowered)
        ]

        documented: Set[InfectiousTest] = set()
        positive: Set[InfectiousTest] = set()
        for match in select_longest(matches, consumed):
            consumed.append(match.span)
            documented.update(match.value)
            if self._is_positive_result(lowered, match):
                positive.update(match.value)

        for pattern in self._panel_terms:
            m = pattern.search(lowered)
            if m and not is_negated(lowered, m.start(), self._negations):
                documented.update(InfectiousTest)
                break

        if not documented:
            return

        screening = InfectiousDiseaseScreening(
            tests_documented=[t for t in InfectiousTest if t in documented],
            positive_results=[t for t in InfectiousTest if t in positive],
        )
        profile.set_field("infectious_disease", screening, field_confidence())

    def _is_positive_result(self, lowered: str, match: TermMatch) -> bool:
        """The nearest result word after the test name decides; else look for 'positive for'."""
        after_end = min(clause_end(lowered, match.end), match.end + 30)
        after = lowered[match.end:after_end]

        results = [
            TermMatch(m.start(), m.end(), m.group(0), is_positive)
            for pattern, is_positive in self._result_terms
            for m in pattern.finditer(after)
        ]
        nearest = select_longest(results)
        if nearest:
            return nearest[0].value

        before = lowered[clause_start(lowered, match.start):match.start]
        return re.search(r"\b(?:positive|reactive)\s+(?:for|to)\s*$", before) is not None
