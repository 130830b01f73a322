"""
Surrogacy Candidate Screening

Extracts a structured candidate profile from clinical narrative and scores
it against practice guidelines, clinic-type acceptance criteria and
Maternal-Fetal Medicine review triggers.
"""

__version__ = "0.1.0"
