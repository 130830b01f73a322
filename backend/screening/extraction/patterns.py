"""
Regex patterns for obstetric notation and numeric facts.

All patterns are applied to lower-cased text.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

NUMBER_WORDS: Dict[str, int] = {
    "zero": 0, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
    "single": 1, "once": 1, "twice": 2, "a": 1, "an": 1,
}

_COUNT = r"(\d{1,2}|zero|one|two|three|four|five|six|seven|eight|nine|ten|a|an|single)"


def parse_count(token: Optional[str]) -> Optional[int]:
    """Turn a digit string or number word into an int."""
    if token is None:
        return None
    token = token.strip().lower()
    if token.isdigit():
        return int(token)
    return NUMBER_WORDS.get(token)


@dataclass
class ObstetricPatterns:
    """Obstetric shorthand and delivery-mode patterns."""

    # G3P2012 / G3 P2-0-1-2 (GTPAL), T is the term count
    gtpal_patterns: List[str] = field(default_factory=lambda: [
        r"\bg\s*(\d{1,2})\s*p\s*(\d)(\d)(\d)(\d)\b",
        r"\bg\s*(\d{1,2})\s*,?\s*p\s*(\d{1,2})\s*-\s*(\d{1,2})\s*-\s*(\d{1,2})\s*-\s*(\d{1,2})\b",
    ])

    # G3P2 / gravida 3 para 2
    gravida_para_patterns: List[str] = field(default_factory=lambda: [
        r"\bg\s*(\d{1,2})\s*,?\s*p\s*(\d{1,2})\b",
        r"\bgravida\s*:?\s*(\d{1,2})\s*,?\s*para\s*:?\s*(\d{1,2})\b",
    ])

    # Delivery tokens by mode; a count may precede ("2 svd") or follow ("c/s x2")
    delivery_tokens: Dict[str, List[str]] = field(default_factory=lambda: {
        "vaginal": [
            r"nsvd", r"svd", r"nsd", r"vd", r"vaginal deliver(?:y|ies)", r"vaginal births?",
            r"normal deliver(?:y|ies)", r"spontaneous vaginal deliver(?:y|ies)",
        ],
        "cesarean": [
            r"c/s", r"cs", r"lscs", r"lsc/s", r"c-sections?", r"c sections?", r"csections?",
            r"cesareans?(?: sections?| deliver(?:y|ies))?",
            r"caesareans?(?: sections?| deliver(?:y|ies))?",
            r"cesarians?(?: sections?)?",
        ],
        "repeat_cesarean": [
            r"rcs", r"repeat c-sections?", r"repeat cesareans?", r"repeat c/s",
        ],
        "operative": [
            r"forceps(?: deliver(?:y|ies)| assisted)?", r"vacuum(?: deliver(?:y|ies)| assisted)?",
            r"ovd", r"operative vaginal deliver(?:y|ies)",
        ],
        "vbac": [
            r"vbacs?", r"vaginal births? after (?:cesarean|c-section|caesarean)",
        ],
    })

    # "2 healthy pregnancies", "three children"
    pregnancy_count_patterns: List[str] = field(default_factory=lambda: [
        rf"\b{_COUNT}\s+(?:(?:prior|previous|successful|healthy|uncomplicated|full[- ]term|term|live)\s+)*"
        r"(?:pregnancies|pregnancy|deliveries|delivery|births|birth|children|child|kids|babies)\b",
    ])
    nulliparous_patterns: List[str] = field(default_factory=lambda: [
        r"\bnulliparous\b", r"\bnullip\b", r"\bnever (?:been )?pregnant\b",
        r"\bno prior (?:pregnancies|deliveries)\b", r"\bg0\b",
    ])

    age_patterns: List[str] = field(default_factory=lambda: [
        r"\b(\d{2})\s*(?:yo|y/o|y\.o\.?|yrs? old|years? old|-year-old|-yr-old|year-old|yr old)\b",
        r"(?<!gestational )(?<!maternal )(?<!fetal )\bage\s*(?:is|of|:|=)?\s*(\d{2})\b",
        r"\baged\s+(\d{2})\b",
        # "Patient is 29." but not "is 29 weeks"
        r"\b(?:patient|pt\.?|she|candidate)\s+is\s+(\d{2})\b(?!\.\d)(?!\s*(?:weeks?|wks?|days?|months?|%|lbs?|pounds|kg|cm|in\b|inches|years? ago))",
    ])
    # "32F" is ambiguous shorthand
    ambiguous_age_patterns: List[str] = field(default_factory=lambda: [
        r"\b(\d{2})\s?(?:f|female)\b",
    ])

    bmi_patterns: List[str] = field(default_factory=lambda: [
        r"\bbmi\s*(?:of|is|was|:|=|~)?\s*(\d{2}(?:\.\d{1,2})?)",
        r"\b(\d{2}(?:\.\d{1,2})?)\s*kg/m(?:2|²)",
    ])

    weight_patterns: List[str] = field(default_factory=lambda: [
        r"\b(\d{2,3}(?:\.\d)?)\s*(?:lbs?|pounds)\b",
    ])
    weight_kg_patterns: List[str] = field(default_factory=lambda: [
        r"\b(\d{2,3}(?:\.\d)?)\s*(?:kg|kilograms?)\b(?!/)",
    ])
    # "weight 150" with no unit
    unitless_weight_patterns: List[str] = field(default_factory=lambda: [
        r"\b(?:weight|wt|weighs)\s*(?:is|of|:|=)?\s*(\d{2,3}(?:\.\d)?)\b(?!\s*(?:lbs?|pounds|kg))",
    ])

    height_patterns: List[str] = field(default_factory=lambda: [
        r"\b([4-6])\s*'\s*(\d{1,2})\s*(?:\"|''|”)?",
        r"\b([4-6])\s*(?:ft|feet|foot)\s*,?\s*(\d{1,2})\s*(?:in|inches)?\b",
    ])

    @staticmethod
    def count_prefix(token_pattern: str) -> str:
        """Wrap a delivery token with optional leading and trailing counts."""
        return (
            rf"(?:\b{_COUNT}\s*(?:x\s*)?(?:(?:prior|previous|uncomplicated|term|primary|emergency|elective)\s+)*)?"
            rf"(?<![\w/-])(?:{token_pattern})(?![\w/])"
            r"(?:\s*(?:x|×)\s*(\d{1,2}))?"
        )


# Global instance
OBSTETRIC_PATTERNS = ObstetricPatterns()


def compile_word(term: str) -> "re.Pattern[str]":
    """Case-insensitive, word-boundary-aware pattern for a literal term."""
    return re.compile(rf"(?<!\w){re.escape(term)}(?!\w)", re.IGNORECASE)
