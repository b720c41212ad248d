"""LLM Vision extraction provider for identity and academic documents.

Sends the document image to a vision-capable LLM with an instruction to
return strictly structured JSON (raw text, categorised fields, confidence
scores).  OCR and field understanding happen entirely inside the model;
this module owns the prompt and tolerant parsing of the reply.
"""

from __future__ import annotations

import json
import re
import time

from pydantic import ValidationError

from src.interfaces.extraction_provider import IExtractionProvider
from src.interfaces.llm_provider import ILLMProvider
from src.models.vault import DocumentType, ExtractedField, ExtractionResult
from src.utils.errors import ExtractionError, LLMError, RateLimitError
from src.utils.logging import get_logger

_SYSTEM_PROMPT = """\
You are an expert document analyzer and OCR specialist. Your task is to:
1. Accurately extract ALL text from the document image
2. Understand the document structure and context
3. Identify and categorize different fields (name, date of birth, address, ID numbers, academic scores, etc.)
4. Return the data in a structured JSON format

For the extracted data, categorize each field into one of these categories:
- personal: Name, date of birth, gender, father's name, mother's name
- identity: ID numbers (Aadhaar, PAN, passport, voter ID), registration numbers
- contact: Address, phone, email, city, state, pincode
- academic: Grades, marks, subjects, institution names, roll numbers, years

IMPORTANT:
- Be extremely accurate with numbers, dates, and names
- If text is unclear, include a confidence score (0-100)
- Flag any fields that need user verification
- Extract ALL visible text, even if partially obscured

Respond ONLY with valid JSON in this exact format:
{
  "rawText": "full extracted text from document",
  "documentType": "detected document type",
  "fields": [
    {
      "category": "personal|identity|contact|academic",
      "fieldName": "field name in English",
      "fieldValue": "extracted value",
      "confidence": 95,
      "needsVerification": false,
      "originalLabel": "label as shown in document"
    }
  ],
  "overallConfidence": 90,
  "warnings": ["any warnings or issues detected"]
}"""

# Models wrap JSON in ```json fences more often than not.
_CODE_FENCE = re.compile(r"```(?:json)?\n?|\n?```")

_FALLBACK_CONFIDENCE = 50.0
_FALLBACK_WARNING = "Could not structure the extracted data properly"
_FIELDS_NOT_LIST_WARNING = "The reply listed no readable fields"


class LLMVisionExtractionProvider(IExtractionProvider):
    """Extraction provider that delegates to a vision-capable LLM.

    An "adapter of an adapter": it composes any :class:`ILLMProvider`
    that supports vision.
    """

    def __init__(self, llm_provider: ILLMProvider) -> None:
        self._llm_provider = llm_provider
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # IExtractionProvider interface
    # ------------------------------------------------------------------

    async def extract_fields(
        self,
        image_bytes: bytes,
        document_type: DocumentType,
        language: str = "en",
    ) -> ExtractionResult:
        """Extract structured fields from a document image."""
        start = time.perf_counter()
        self._logger.debug(
            "running_llm_vision_extraction",
            document_type=document_type.value,
            language=language,
            llm=self._llm_provider.get_provider_name(),
        )
        try:
            content = await self._llm_provider.vision_extract(
                image_bytes=image_bytes,
                prompt=self._build_user_prompt(document_type, language),
                system_prompt=_SYSTEM_PROMPT,
            )
        except RateLimitError:
            raise
        except LLMError as exc:
            self._logger.error(
                "document_extraction_failed",
                provider=self.get_provider_name(),
                error=str(exc),
            )
            raise ExtractionError(
                f"Document extraction failed: {exc.message}",
                provider_name=self.get_provider_name(),
            ) from exc

        result = self.parse_response(content, document_type)
        self._logger.info(
            "document_extraction_complete",
            provider=self.get_provider_name(),
            document_type=document_type.value,
            num_fields=len(result.fields),
            overall_confidence=result.overall_confidence,
            processing_time=round(time.perf_counter() - start, 3),
        )
        return result

    def get_provider_name(self) -> str:
        return "llm_vision"

    def is_available(self) -> bool:
        """Available only if the underlying LLM is configured and supports vision."""
        return self._llm_provider.is_available() and self._llm_provider.supports_vision()

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse_response(self, content: str, document_type: DocumentType) -> ExtractionResult:
        """Parse the model's JSON reply into an :class:`ExtractionResult`.

        Never raises.  Malformed JSON yields a fallback result that keeps
        the raw reply as ``raw_text`` with confidence 50 and a warning.
        Individual malformed fields are dropped and noted in ``warnings``.
        """
        cleaned = _CODE_FENCE.sub("", content).strip()
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError:
            self._logger.warning(
                "extraction_response_unparseable",
                preview=content[:200],
            )
            return self._fallback(content, document_type)
        if not isinstance(data, dict):
            return self._fallback(content, document_type)

        fields: list[ExtractedField] = []
        raw_warnings = data.get("warnings") or []
        raw_fields = data.get("fields") or []
        warnings = [str(w) for w in raw_warnings if w] if isinstance(raw_warnings, list) else []
        if not isinstance(raw_fields, list):
            warnings.append(_FIELDS_NOT_LIST_WARNING)
            raw_fields = []
        for raw_field in raw_fields:
            try:
                fields.append(ExtractedField.model_validate(raw_field))
            except ValidationError:
                warnings.append(f"Skipped an unreadable field: {str(raw_field)[:60]}")

        return ExtractionResult(
            raw_text=str(data.get("rawText") or ""),
            document_type=str(data.get("documentType") or document_type.value),
            fields=fields,
            overall_confidence=data.get("overallConfidence", 0),
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _build_user_prompt(document_type: DocumentType, language: str) -> str:
        prompt = (
            f"Analyze this {document_type.label} image and extract all information. "
            "Return structured data in JSON format."
        )
        if language and language != "en":
            prompt += f" The document may be written in '{language}'; give fieldName in English."
        return prompt

    @staticmethod
    def _fallback(content: str, document_type: DocumentType) -> ExtractionResult:
        return ExtractionResult(
            raw_text=content,
            document_type=document_type.value,
            fields=[],
            overall_confidence=_FALLBACK_CONFIDENCE,
            warnings=[_FALLBACK_WARNING],
        )
