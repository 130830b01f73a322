"""
De-identification of narrative text before it leaves the process.

Dates are reduced to their year, direct identifiers (e-mail, phone,
record numbers) are replaced by placeholders, and a supplied candidate
name is replaced by PATIENT_A.
"""

import re
from typing import Optional

PATIENT_PLACEHOLDER = "PATIENT_A"

_MONTHS = (
    r"(?:january|february|march|april|may|june|july|august|september|october|november|december"
    r"|jan|feb|mar|apr|jun|jul|aug|sept|sep|oct|nov|dec)"
)

DATE_PATTERNS = [
    # 03/14/2019, 3-14-2019
    re.compile(r"\b\d{1,2}[/-]\d{1,2}[/-](\d{4})\b"),
    # 2019-03-14
    re.compile(r"\b(\d{4})-\d{1,2}-\d{1,2}\b"),
    # March 14, 2019
    re.compile(rf"\b{_MONTHS}\.?\s+\d{{1,2}}(?:st|nd|rd|th)?,?\s+(\d{{4}})\b", re.IGNORECASE),
    # 14 March 2019
    re.compile(rf"\b\d{{1,2}}\s+{_MONTHS}\.?,?\s+(\d{{4}})\b", re.IGNORECASE),
]

EMAIL_PATTERN = re.compile(r"\b[\w.+-]+@[\w-]+(?:\.[\w-]+)+\b")
PHONE_PATTERN = re.compile(r"(?<!\d)(?:\+?1[\s.-]?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]\d{4}(?!\d)")
SSN_PATTERN = re.compile(r"\b\d{3}-\d{2}-\d{4}\b")
MRN_PATTERN = re.compile(r"\b(?:mrn|medical record (?:number|no\.?)|patient id|acct)\s*[:#]?\s*[a-z0-9-]{4,}\b", re.IGNORECASE)


def deidentify_text(text: str, candidate_name: Optional[str] = None) -> str:
    """Strip identifiers from narrative text."""
    result = text
    for pattern in DATE_PATTERNS:
        result = pattern.sub(r"\1", result)

    result = EMAIL_PATTERN.sub("[EMAIL]", result)
    result = SSN_PATTERN.sub("[ID]", result)
    result = MRN_PATTERN.sub("[ID]", result)
    result = PHONE_PATTERN.sub("[PHONE]", result)

    if not candidate_name or not candidate_name.strip():
        return result

    name = candidate_name.strip()
    result = re.compile(re.escape(name), re.IGNORECASE).sub(PATIENT_PLACEHOLDER, result)

    # First and last names on their own
    parts = name.split()
    if len(parts) >= 2:
        for part in (parts[0], parts[-1]):
            if len(part) < 2:
                continue
            result = re.compile(rf"\b{re.escape(part)}\b", re.IGNORECASE).sub(PATIENT_PLACEHOLDER, result)

    return result


def reidentify_text(text: str, candidate_name: Optional[str] = None) -> str:
    """Put a display name back in place of the placeholder."""
    replacement = candidate_name.strip() if candidate_name and candidate_name.strip() else "The candidate"
    return text.replace(PATIENT_PLACEHOLDER, replacement)
