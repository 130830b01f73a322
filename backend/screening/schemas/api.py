from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from .assessment import AssessmentResult
from .profile import CandidateProfile


class ExtractionOptions(BaseModel):
    """
    Per-call extraction options.

    Credentials and parser mode travel here explicitly; the cascade never
    reads them from ambient state.
    """
    use_external_layer: bool = False
    credential: Optional[str] = Field(None, description="API key for the external extraction provider")
    provider: Optional[str] = Field(None, description="'groq' or 'gemini'; defaults to settings")
    context_hints: Dict[str, Any] = Field(default_factory=dict)
    candidate_name: Optional[str] = Field(None, description="Removed from text sent to the external layer")
    provided_age: Optional[int] = Field(None, ge=0, le=120)
    provided_bmi: Optional[float] = Field(None, gt=0, le=100)
    escalation_threshold: Optional[float] = Field(None, ge=0, le=100)
    timeout_seconds: Optional[float] = Field(None, gt=0)


class DocumentInput(BaseModel):
    """A document that has already been decoded to text by the caller."""
    filename: str
    text: str
    file_type: str = "txt"


class TextAssessmentRequest(BaseModel):
    """Free-text narrative, optionally split across several documents."""
    text: Optional[str] = None
    documents: List[DocumentInput] = Field(default_factory=list)
    options: ExtractionOptions = Field(default_factory=ExtractionOptions)
    display_name: Optional[str] = None


class ProfileAssessmentRequest(BaseModel):
    """Pre-structured candidate profile; extraction is skipped."""
    profile: Dict[str, Any]
    display_name: Optional[str] = None


class AssessmentResponse(BaseModel):
    profile: CandidateProfile
    result: AssessmentResult


class ExtractionResponse(BaseModel):
    profile: CandidateProfile


class GlossaryTerm(BaseModel):
    term: str
    definition: str
    condition_code: Optional[str] = None
    severity: Optional[str] = Field(None, description="Risk tier of the mapped condition")


class GlossaryResponse(BaseModel):
    vocabulary_version: str
    categories: Dict[str, List[GlossaryTerm]]
