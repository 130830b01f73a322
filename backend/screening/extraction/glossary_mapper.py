"""
Layer 2: Glossary Mapper

Resolves conditions Layer 1 left unmatched by comparing phrase windows of
the residual text against the curated glossary and the canonical condition
labels. Exact phrase hits come first; remaining windows are fuzzy-matched
with difflib. Overlapping candidates resolve to the longest phrase.
"""

import logging
import re
from difflib import get_close_matches
from typing import Dict, List, Sequence

from .base import ExtractionStrategy, StrategyResult
from .confidence import weighted_confidence
from .dictionaries import MEDICAL_DICTIONARY, MedicalDictionary
from .glossary import CHRONIC, MEDICAL_GLOSSARY, PREGNANCY, GlossaryEntry, MedicalGlossary
from .patterns import compile_word
from .text_utils import (
    CLAUSE_BREAK,
    Span,
    TermMatch,
    blank_spans,
    compile_negations,
    is_negated,
    overlaps,
    select_longest,
)
from ..schemas.api import ExtractionOptions
from ..schemas.codes import CONDITION_DEFINITIONS, complication_category_for
from ..schemas.profile import CandidateProfile

logger = logging.getLogger(__name__)

# Glossary hits are indirect, so they rank below a Layer 1 pattern hit
EXACT_MATCH_CONFIDENCE = 70.0
FUZZY_MATCH_CONFIDENCE = 55.0

DEFAULT_FUZZY_CUTOFF = 0.88
MIN_FUZZY_LENGTH = 6
MAX_WINDOW_WORDS = 6

WORD = re.compile(r"[a-z0-9][a-z0-9'&/-]*")


def _label_entries() -> List[GlossaryEntry]:
    """Canonical condition labels double as glossary terms."""
    entries = []
    for code, definition in CONDITION_DEFINITIONS.items():
        category = PREGNANCY if definition.complication_category else CHRONIC
        entries.append(GlossaryEntry(definition.label.lower(), definition.label, category, code))
    return entries


class GlossaryMapper(ExtractionStrategy):
    """Layer 2 strategy: curated glossary lookup over residual text."""

    layer = 2
    name = "glossary"
    reads_residual_text = True

    def __init__(
        self,
        glossary: MedicalGlossary = MEDICAL_GLOSSARY,
        dictionary: MedicalDictionary = MEDICAL_DICTIONARY,
        fuzzy_cutoff: float = DEFAULT_FUZZY_CUTOFF,
    ):
        self.fuzzy_cutoff = fuzzy_cutoff
        self._negations = compile_negations(dictionary.negation_terms)

        self._by_term: Dict[str, GlossaryEntry] = {}
        for entry in glossary.coded_entries() + _label_entries():
            self._by_term.setdefault(entry.term, entry)

        self._exact = [(entry, compile_word(term)) for term, entry in self._by_term.items()]

        # Fuzzy candidates are grouped by word count so windows compare like with like
        self._terms_by_words: Dict[int, List[str]] = {}
        for term in self._by_term:
            if len(term) >= MIN_FUZZY_LENGTH:
                self._terms_by_words.setdefault(len(term.split()), []).append(term)
        for terms in self._terms_by_words.values():
            terms.sort()

    async def try_extract(
        self,
        text: str,
        current: CandidateProfile,
        options: ExtractionOptions,
    ) -> StrategyResult:
        return self.map_terms(text, current)

    def map_terms(self, residual_text: str, current: CandidateProfile) -> StrategyResult:
        """Map glossary phrases in residual_text to codes not already in current."""
        lowered = residual_text.lower()

        exact = [
            TermMatch(m.start(), m.end(), entry.term, (entry, True))
            for entry, pattern in self._exact
            for m in pattern.finditer(lowered)
        ]
        fuzzy = self._fuzzy_matches(lowered, [match.span for match in exact])

        partial = CandidateProfile()
        used: List[Span] = []
        confidence = 0.0
        for match in select_longest(exact + fuzzy):
            entry, is_exact = match.value
            used.append(match.span)
            if is_negated(lowered, match.start, self._negations):
                continue
            if entry.code in current.medical_conditions:
                continue

            partial.add_condition(entry.code)
            match_confidence = EXACT_MATCH_CONFIDENCE if is_exact else FUZZY_MATCH_CONFIDENCE
            confidence = max(confidence, match_confidence)

            category = complication_category_for(entry.code)
            if category is not None:
                partial.add_complication_evidence(category, residual_text[match.start:match.end].strip())
            logger.debug(
                "Glossary %s match '%s' -> %s", "exact" if is_exact else "fuzzy", entry.term, entry.code.value
            )

        if partial.medical_conditions:
            partial.mark_determined("medical_conditions", confidence)
        if partial.pregnancy_specific_complications:
            partial.mark_determined("pregnancy_specific_complications", confidence)
        partial.parsing_metadata.layers_used = [self.layer]

        return StrategyResult(
            profile=partial,
            confidence=weighted_confidence(partial),
            residual_text=blank_spans(residual_text, used),
            layer=self.layer,
        )

    def _fuzzy_matches(self, lowered: str, blocked: Sequence[Span]) -> List[TermMatch]:
        words = [m.span() for m in WORD.finditer(lowered)]
        results: List[TermMatch] = []

        for i in range(len(words)):
            for size in range(1, MAX_WINDOW_WORDS + 1):
                j = i + size
                if j > len(words):
                    break
                start, end = words[i][0], words[j - 1][1]
                if CLAUSE_BREAK.search(lowered, start, end):
                    break
                window = " ".join(lowered[s:e] for s, e in words[i:j])
                if len(window) < MIN_FUZZY_LENGTH or overlaps((start, end), blocked):
                    continue
                candidates = self._terms_by_words.get(size)
                if not candidates:
                    continue
                close = get_close_matches(window, candidates, n=1, cutoff=self.fuzzy_cutoff)
                if close:
                    results.append(TermMatch(start, end, close[0], (self._by_term[close[0]], False)))

        return results
