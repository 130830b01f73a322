"""
Medical Fact Extraction Module

Cascading extraction of a CandidateProfile from clinical narrative:
regex patterns (Layer 1), a curated glossary (Layer 2) and an optional
external LLM provider (Layer 3), coordinated by the cascade controller.
"""

from .base import ExtractionStrategy, StrategyResult
from .cascade import CascadeController, merge_profiles
from .deidentify import deidentify_text, reidentify_text
from .dictionaries import MEDICAL_DICTIONARY, MedicalDictionary
from .external_adapter import ExternalExtractionAdapter, ExternalExtractionStrategy
from .glossary import MEDICAL_GLOSSARY, GlossaryEntry, MedicalGlossary
from .glossary_mapper import GlossaryMapper
from .pattern_extractor import PatternExtractor
from .patterns import OBSTETRIC_PATTERNS, ObstetricPatterns

__all__ = [
    # Strategies
    "ExtractionStrategy",
    "StrategyResult",
    "PatternExtractor",
    "GlossaryMapper",
    "ExternalExtractionStrategy",
    "ExternalExtractionAdapter",

    # Controller
    "CascadeController",
    "merge_profiles",

    # Data classes
    "MedicalDictionary",
    "MedicalGlossary",
    "GlossaryEntry",
    "ObstetricPatterns",

    # Helpers
    "deidentify_text",
    "reidentify_text",

    # Global instances
    "MEDICAL_DICTIONARY",
    "MEDICAL_GLOSSARY",
    "OBSTETRIC_PATTERNS",
]
