"""Abstract base class for document field-extraction providers.

An extraction provider turns a document image into a structured
:class:`ExtractionResult` (raw text plus categorised fields with confidence
scores).  OCR and language understanding both happen inside the external
model; this repo only prompts and parses.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.vault import DocumentType, ExtractionResult


# Concrete implementation: LLMVisionExtractionProvider
# Located in: src/providers/extraction/
class IExtractionProvider(ABC):
    """Contract for services that extract form fields from document images."""

    @abstractmethod
    async def extract_fields(
        self,
        image_bytes: bytes,
        document_type: DocumentType,
        language: str = "en",
    ) -> ExtractionResult:
        """Run extraction on *image_bytes* and return the structured result.

        Implementations must not raise on an unparseable model response;
        they return a low-confidence result carrying the raw text instead.

        Raises
        ------
        src.utils.errors.ExtractionError
            If the provider cannot process the image at all.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider can accept requests."""
