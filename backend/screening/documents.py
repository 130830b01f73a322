"""
Document decoding contract.

Byte-level decoding of PDF/DOC files lives outside this service; a decoder
only has to satisfy DocumentDecoder. Decoded texts are concatenated in
submission order into one narrative before extraction.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Tuple, Union

logger = logging.getLogger(__name__)

DOCUMENT_SEPARATOR = "\n\n--- DOCUMENT BREAK ---\n\n"

TEXT_SUFFIXES = {".txt", ".text", ".md", ".csv", ".json"}


@dataclass(frozen=True)
class DecodedDocument:
    success: bool
    text: str = ""
    file_type: str = ""
    error: Optional[str] = None
    filename: str = ""


class DocumentDecoder(Protocol):
    def decode(self, file: Union[str, Path, bytes], filename: str = "") -> DecodedDocument:
        ...


class PlainTextDecoder:
    """Decodes UTF-8 text files. Anything else is reported as a failed decode."""

    def decode(self, file: Union[str, Path, bytes], filename: str = "") -> DecodedDocument:
        if isinstance(file, bytes):
            data = file
        else:
            path = Path(file)
            filename = filename or path.name
            if path.suffix.lower() not in TEXT_SUFFIXES:
                return DecodedDocument(
                    success=False, file_type=path.suffix.lstrip("."), filename=filename,
                    error=f"Unsupported file type: {path.suffix or 'none'}",
                )
            try:
                data = path.read_bytes()
            except OSError as e:
                return DecodedDocument(success=False, file_type="txt", filename=filename, error=str(e))

        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            return DecodedDocument(success=False, file_type="txt", filename=filename, error=f"Not UTF-8 text: {e}")
        return DecodedDocument(success=True, text=text, file_type="txt", filename=filename)


def combine_documents(documents: Iterable[DecodedDocument]) -> Tuple[str, List[str]]:
    """
    Concatenate successfully decoded texts in submission order.

    Returns the combined narrative and a list of decode failures.
    """
    texts: List[str] = []
    failures: List[str] = []
    for document in documents:
        if not document.success:
            failures.append(f"{document.filename or 'document'}: {document.error or 'decode failed'}")
            logger.warning("Skipping document %s: %s", document.filename or "<unnamed>", document.error)
            continue
        if document.text.strip():
            texts.append(document.text.strip())
    return DOCUMENT_SEPARATOR.join(texts), failures
