"""Abstract base class for extraction strategies."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..schemas.api import ExtractionOptions
from ..schemas.profile import CandidateProfile


@dataclass
class StrategyResult:
    """Partial profile produced by one strategy."""
    profile: CandidateProfile
    confidence: float
    residual_text: str
    layer: int


class ExtractionStrategy(ABC):
    """
    One step of the extraction cascade.

    A strategy only reports what it found; the cascade controller decides
    how its partial profile merges into the accumulated one.
    """

    layer: int = 0
    name: str = ""
    # Only run when the cascade decides to escalate
    escalation_only: bool = False
    # Read the text left unmatched by earlier layers instead of the original
    reads_residual_text: bool = False

    @abstractmethod
    async def try_extract(
        self,
        text: str,
        current: CandidateProfile,
        options: ExtractionOptions,
    ) -> StrategyResult:
        """Extract what this strategy can from text.

        Args:
            text: Narrative (original or residual, see reads_residual_text)
            current: Profile accumulated so far; must not be mutated
            options: Per-call extraction options

        Returns:
            StrategyResult with a fresh partial profile
        """
        pass
