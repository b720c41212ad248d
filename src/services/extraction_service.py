"""Document upload → field extraction.

Coordinates the upstream half of the app: decode and normalise the
uploaded image and run the extraction provider.  Nothing is persisted
here; the user reviews the result and saves the chosen fields through
the vault endpoints.
"""

from __future__ import annotations

import base64
import binascii

from src.interfaces.extraction_provider import IExtractionProvider
from src.models.vault import DocumentType, ExtractionResult
from src.utils.errors import ExtractionError, InvalidImageError
from src.utils.image_preprocessor import ImagePreprocessor
from src.utils.logging import get_logger


def parse_document_type(value: DocumentType | str | None) -> DocumentType:
    """Return *value* as a :class:`DocumentType`.

    ``None`` or an empty string means :attr:`DocumentType.OTHER`.

    Raises:
        ValueError: If *value* is not a known document type.
    """
    if isinstance(value, DocumentType):
        return value
    if not value:
        return DocumentType.OTHER
    try:
        return DocumentType(value.strip().lower())
    except ValueError:
        allowed = ", ".join(t.value for t in DocumentType)
        raise ValueError(f"Unsupported document type: {value}. Allowed: {allowed}") from None


def decode_image_payload(image_base64: str) -> bytes:
    """Decode a base64 image, with or without a ``data:...;base64,`` prefix."""
    payload = image_base64.strip()
    if payload.startswith("data:"):
        _, _, payload = payload.partition(",")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidImageError("Image data is not valid base64") from exc


class DocumentExtractionService:
    """Runs extraction for uploaded document images."""

    def __init__(
        self,
        extraction_provider: IExtractionProvider,
        preprocessor: ImagePreprocessor | None = None,
    ) -> None:
        self._provider = extraction_provider
        self._preprocessor = preprocessor or ImagePreprocessor()
        self._logger = get_logger(__name__)

    def is_available(self) -> bool:
        return self._provider.is_available()

    async def extract(
        self,
        image_bytes: bytes,
        document_type: DocumentType | str | None,
        language: str = "en",
    ) -> ExtractionResult:
        """Extract fields from an uploaded document image.

        Raises:
            ValueError: Unknown document type.
            InvalidImageError: The bytes are not a decodable image.
            ExtractionError: No vision provider is configured, or it failed.
        """
        doc_type = parse_document_type(document_type)
        if not self._provider.is_available():
            raise ExtractionError(
                "No vision-capable LLM provider is configured",
                provider_name=self._provider.get_provider_name(),
            )

        prepared = self._preprocessor.prepare_for_extraction(image_bytes)
        self._logger.info(
            "document_processing_started",
            document_type=doc_type.value,
            language=language,
            original_bytes=len(image_bytes),
            prepared_bytes=len(prepared),
        )
        return await self._provider.extract_fields(prepared, doc_type, language)
