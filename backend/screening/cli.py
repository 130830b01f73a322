"""
Command-line screening.

Reads a narrative (or, with --profile, a structured JSON profile) from a
file or stdin and prints the assessment.

    python -m screening.cli notes.txt
    cat profile.json | python -m screening.cli --profile --json
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .assessment.pipeline import ASSESSMENT_PIPELINE
from .core.exceptions import UnrecoverableInputError
from .core.logging_config import configure_logging
from .documents import PlainTextDecoder
from .schemas.api import AssessmentResponse, ExtractionOptions
from .schemas.assessment import AssessmentResult
from .schemas.profile import CandidateProfile

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Screen a surrogacy candidate from clinical narrative"
    )
    parser.add_argument(
        "files",
        nargs="*",
        type=Path,
        help="Text files to read, concatenated in order (default: stdin)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the profile and result as JSON",
    )
    parser.add_argument(
        "--profile",
        action="store_true",
        help="Treat input as a structured JSON profile and skip extraction",
    )
    parser.add_argument(
        "--external",
        action="store_true",
        help="Allow escalation to the external extraction provider",
    )
    parser.add_argument(
        "--provider",
        choices=["groq", "gemini"],
        default=None,
        help="External provider (default from settings)",
    )
    parser.add_argument(
        "--api-key",
        default=None,
        help="Credential for the external provider",
    )
    parser.add_argument(
        "--age",
        type=int,
        default=None,
        help="Candidate age, trusted over extracted values",
    )
    parser.add_argument(
        "--bmi",
        type=float,
        default=None,
        help="Candidate BMI, trusted over extracted values",
    )
    parser.add_argument(
        "--name",
        default=None,
        help="Candidate name; removed before external calls and shown on the report",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default from settings)",
    )
    return parser


def format_report(profile: CandidateProfile, result: AssessmentResult) -> str:
    lines: List[str] = []
    title = f"Screening report: {profile.display_name}" if profile.display_name else "Screening report"
    lines.append(title)
    lines.append("=" * len(title))
    lines.append(f"Overall risk: {result.overall_risk.level.value}")
    lines.append(f"  {result.overall_risk.description}")
    lines.append(f"Extraction confidence: {profile.parsing_metadata.final_confidence:.0f}%")
    lines.append("")

    for category, findings in result.category_summaries.items():
        lines.append(f"{category}:")
        for finding in findings:
            lines.append(f"  [{finding.status.value}] {finding.message}")
    lines.append("")

    analysis = result.clinic_type_analysis
    lines.append("Clinic acceptance:")
    for clinic_type, clinic_result in analysis.by_type().items():
        marker = " (best match)" if clinic_type == analysis.best_match else ""
        lines.append(f"  {clinic_type.value}: {clinic_result.acceptance_level.value}{marker}")
        for issue in clinic_result.issues:
            lines.append(f"    - [{issue.severity.value}] {issue.message}")
    lines.append("")

    mfm = result.mfm_assessment
    lines.append(f"MFM review: {mfm.review_level.value} ({mfm.likelihood.level.value}, {mfm.likelihood.percentage})")
    for finding in mfm.findings:
        lines.append(f"  - {finding.category}: {finding.concern}")
    lines.append("")

    lines.append("Recommendations:")
    for recommendation in result.recommendations:
        lines.append(f"  - {recommendation}")

    if result.documentation_gaps:
        lines.append("")
        lines.append("Documentation gaps:")
        for gap in result.documentation_gaps:
            lines.append(f"  - {gap}")
    return "\n".join(lines)


def _read_input(files: List[Path]) -> str:
    if not files:
        return sys.stdin.read()

    decoder = PlainTextDecoder()
    texts = []
    for path in files:
        document = decoder.decode(path)
        if not document.success:
            raise UnrecoverableInputError(f"{document.filename}: {document.error}")
        texts.append(document.text)
    return "\n\n".join(texts)


async def run(args: argparse.Namespace) -> AssessmentResponse:
    raw = _read_input(args.files)

    if args.profile:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise UnrecoverableInputError(f"Profile input is not valid JSON: {e}") from e
        profile, result = ASSESSMENT_PIPELINE.assess_structured(data, display_name=args.name)
    else:
        options = ExtractionOptions(
            use_external_layer=args.external,
            credential=args.api_key,
            provider=args.provider,
            candidate_name=args.name,
            provided_age=args.age,
            provided_bmi=args.bmi,
        )
        profile, result = await ASSESSMENT_PIPELINE.assess_text(raw, options, display_name=args.name)

    return AssessmentResponse(profile=profile, result=result)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        response = asyncio.run(run(args))
    except UnrecoverableInputError as e:
        logger.error("Cannot assess input: %s", e)
        return 2

    if args.json:
        print(response.model_dump_json(indent=2))
    else:
        print(format_report(response.profile, response.result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
