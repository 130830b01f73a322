from fastapi import APIRouter
from typing import Dict, List

from ...assessment.pipeline import ASSESSMENT_PIPELINE
from ...documents import DecodedDocument
from ...extraction.glossary import MEDICAL_GLOSSARY
from ...schemas.api import (
    AssessmentResponse,
    ExtractionResponse,
    GlossaryResponse,
    GlossaryTerm,
    ProfileAssessmentRequest,
    TextAssessmentRequest,
)
from ...schemas.codes import CONDITION_VOCABULARY_VERSION

router = APIRouter()


def _documents(request: TextAssessmentRequest) -> List[DecodedDocument]:
    return [
        DecodedDocument(success=True, text=doc.text, file_type=doc.file_type, filename=doc.filename)
        for doc in request.documents
    ]


@router.post("/text", response_model=AssessmentResponse)
async def assess_text(request: TextAssessmentRequest):
    """
    Extract a candidate profile from narrative text and score it.

    Documents are concatenated after the free text, in submission order.
    The external layer only runs when options.use_external_layer is set and
    a credential is supplied.
    """
    profile, result = await ASSESSMENT_PIPELINE.assess_text(
        request.text,
        request.options,
        documents=_documents(request),
        display_name=request.display_name,
    )
    return AssessmentResponse(profile=profile, result=result)


@router.post("/profile", response_model=AssessmentResponse)
async def assess_profile(request: ProfileAssessmentRequest):
    """Score a pre-structured candidate profile without extraction."""
    profile, result = ASSESSMENT_PIPELINE.assess_structured(request.profile, display_name=request.display_name)
    return AssessmentResponse(profile=profile, result=result)


@router.post("/extract", response_model=ExtractionResponse)
async def extract_profile(request: TextAssessmentRequest):
    """Run extraction only and return the profile with its parsing metadata."""
    profile = await ASSESSMENT_PIPELINE.extract_text(request.text, request.options, documents=_documents(request))
    return ExtractionResponse(profile=profile)


@router.get("/glossary", response_model=GlossaryResponse)
async def glossary():
    """Glossary terms grouped by category."""
    categories: Dict[str, List[GlossaryTerm]] = {}
    for category, entries in MEDICAL_GLOSSARY.by_category().items():
        categories[category] = [
            GlossaryTerm(
                term=entry.term,
                definition=entry.definition,
                condition_code=entry.code.value if entry.code else None,
                severity=entry.severity.value if entry.severity else None,
            )
            for entry in entries
        ]
    return GlossaryResponse(vocabulary_version=CONDITION_VOCABULARY_VERSION, categories=categories)
