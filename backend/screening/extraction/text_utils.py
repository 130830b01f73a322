"""Span bookkeeping and negation helpers shared by the deterministic layers."""

import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Sequence, Tuple

Span = Tuple[int, int]

CLAUSE_BREAK = re.compile(r"[.;,:\n()]|\bbut\b|\bhowever\b")
SENTENCE_BREAK = re.compile(r"[.;\n]")
EXCEPTION_CUES = re.compile(r"\b(?:except|other than|apart from|aside from|besides|but)\b")

# Negation cues only reach this far back
NEGATION_WINDOW = 60


@dataclass(frozen=True)
class TermMatch:
    start: int
    end: int
    term: str
    value: Any

    @property
    def span(self) -> Span:
        return (self.start, self.end)

    @property
    def length(self) -> int:
        return self.end - self.start


def overlaps(span: Span, taken: Iterable[Span]) -> bool:
    start, end = span
    return any(start < t_end and t_start < end for t_start, t_end in taken)


def select_longest(matches: Sequence[TermMatch], taken: Sequence[Span] = ()) -> List[TermMatch]:
    """
    Keep the longest non-overlapping matches, returned in text order.
    Ties on length go to the earlier match.
    """
    accepted: List[TermMatch] = []
    blocked: List[Span] = list(taken)
    for match in sorted(matches, key=lambda m: (-m.length, m.start, m.term)):
        if overlaps(match.span, blocked):
            continue
        accepted.append(match)
        blocked.append(match.span)
    return sorted(accepted, key=lambda m: m.start)


def clause_start(text: str, position: int) -> int:
    """Index where the clause containing position begins."""
    start = 0
    for m in CLAUSE_BREAK.finditer(text, 0, position):
        start = m.end()
    return max(start, position - NEGATION_WINDOW)


def clause_end(text: str, position: int) -> int:
    m = CLAUSE_BREAK.search(text, position)
    return m.start() if m else len(text)


def sentence_index(text: str, position: int) -> int:
    return len(SENTENCE_BREAK.findall(text, 0, position))


def compile_negations(terms: Iterable[str]) -> List["re.Pattern[str]"]:
    return [re.compile(rf"(?<!\w){re.escape(t)}(?!\w)") for t in sorted(set(terms), key=len, reverse=True)]


def is_negated(text: str, position: int, negations: Sequence["re.Pattern[str]"]) -> bool:
    """
    True when a negation cue precedes position within the same clause and
    no exception cue ("except", "other than") follows that cue.
    """
    start = clause_start(text, position)
    prefix = text[start:position]
    last_cue = -1
    for pattern in negations:
        for m in pattern.finditer(prefix):
            last_cue = max(last_cue, m.end())
    if last_cue < 0:
        return False
    return EXCEPTION_CUES.search(prefix, last_cue) is None


def blank_spans(text: str, spans: Iterable[Span]) -> str:
    """Replace spans with spaces, keeping offsets stable."""
    chars = list(text)
    for start, end in spans:
        for i in range(start, min(end, len(chars))):
            chars[i] = " "
    return "".join(chars)
