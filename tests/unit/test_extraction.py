"""Unit tests for the LLM vision extraction provider and extraction service."""

from __future__ import annotations

import base64
import json

import pytest

from src.models.vault import DocumentType
from src.providers.extraction.llm_vision_provider import LLMVisionExtractionProvider
from src.services.extraction_service import (
    DocumentExtractionService,
    decode_image_payload,
    parse_document_type,
)
from src.utils.errors import ExtractionError, InvalidImageError, LLMError, RateLimitError
from tests.conftest import FakeLLMProvider, make_image_bytes

_REPLY = {
    "rawText": "GOVERNMENT OF INDIA\nRahul Kumar Sharma\nDOB: 15/08/2002",
    "documentType": "aadhaar",
    "fields": [
        {
            "category": "personal",
            "fieldName": "Full Name",
            "fieldValue": "Rahul Kumar Sharma",
            "confidence": 96,
            "needsVerification": False,
            "originalLabel": "Name",
        },
        {
            "category": "identity",
            "fieldName": "Aadhaar Number",
            "fieldValue": "1234 5678 9012",
            "confidence": 70,
            "needsVerification": True,
        },
    ],
    "overallConfidence": 88,
    "warnings": ["Photo area is glossy"],
}


# ======================================================================
# LLMVisionExtractionProvider.parse_response
# ======================================================================


class TestParseResponse:
    @pytest.fixture()
    def provider(self) -> LLMVisionExtractionProvider:
        return LLMVisionExtractionProvider(FakeLLMProvider())

    def test_plain_json(self, provider) -> None:
        result = provider.parse_response(json.dumps(_REPLY), DocumentType.AADHAAR)
        assert result.document_type == "aadhaar"
        assert [f.field_name for f in result.fields] == ["Full Name", "Aadhaar Number"]
        assert result.fields[1].needs_verification is True
        assert result.overall_confidence == 88.0
        assert result.warnings == ["Photo area is glossy"]

    def test_fenced_json(self, provider) -> None:
        content = "```json\n" + json.dumps(_REPLY) + "\n```"
        result = provider.parse_response(content, DocumentType.AADHAAR)
        assert len(result.fields) == 2

    def test_unparseable_reply_falls_back(self, provider) -> None:
        result = provider.parse_response("I can see a card with a name on it.", DocumentType.PAN)
        assert result.raw_text == "I can see a card with a name on it."
        assert result.document_type == "pan"
        assert result.fields == []
        assert result.overall_confidence == 50.0
        assert result.warnings == ["Could not structure the extracted data properly"]

    def test_non_object_json_falls_back(self, provider) -> None:
        result = provider.parse_response("[1, 2, 3]", DocumentType.OTHER)
        assert result.overall_confidence == 50.0

    def test_bad_field_skipped_with_warning(self, provider) -> None:
        reply = {"fields": [{"fieldValue": "no name"}, {"fieldName": "Gender", "fieldValue": "M"}]}
        result = provider.parse_response(json.dumps(reply), DocumentType.OTHER)
        assert [f.field_name for f in result.fields] == ["Gender"]
        assert result.warnings[0].startswith("Skipped an unreadable field")
        assert result.document_type == "other"

    def test_non_list_fields_and_warnings(self, provider) -> None:
        result = provider.parse_response('{"fields": 5, "warnings": 3}', DocumentType.PAN)
        assert result.fields == []
        assert result.warnings == ["The reply listed no readable fields"]
        assert result.document_type == "pan"


# ======================================================================
# LLMVisionExtractionProvider.extract_fields
# ======================================================================


class TestExtractFields:
    @pytest.mark.asyncio
    async def test_sends_prompt_and_image(self) -> None:
        llm = FakeLLMProvider(vision_reply=json.dumps(_REPLY))
        provider = LLMVisionExtractionProvider(llm)
        result = await provider.extract_fields(b"img", DocumentType.AADHAAR)

        call = llm.vision_calls[0]
        assert call["image_bytes"] == b"img"
        assert call["prompt"].startswith("Analyze this Aadhaar Card image")
        assert "expert document analyzer" in call["system_prompt"]
        assert len(result.fields) == 2

    @pytest.mark.asyncio
    async def test_language_hint(self) -> None:
        llm = FakeLLMProvider(vision_reply="{}")
        await LLMVisionExtractionProvider(llm).extract_fields(b"img", DocumentType.MARKSHEET, "hi")
        assert "'hi'" in llm.vision_calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_llm_error_wrapped(self, failing_llm) -> None:
        with pytest.raises(ExtractionError) as exc_info:
            await LLMVisionExtractionProvider(failing_llm).extract_fields(b"i", DocumentType.PAN)
        assert exc_info.value.provider_name == "llm_vision"

    @pytest.mark.asyncio
    async def test_rate_limit_propagates(self) -> None:
        llm = FakeLLMProvider(vision_reply=RateLimitError("slow down"))
        with pytest.raises(RateLimitError):
            await LLMVisionExtractionProvider(llm).extract_fields(b"i", DocumentType.PAN)

    def test_availability_requires_vision(self) -> None:
        assert LLMVisionExtractionProvider(FakeLLMProvider()).is_available() is True
        assert LLMVisionExtractionProvider(FakeLLMProvider(vision=False)).is_available() is False
        assert LLMVisionExtractionProvider(FakeLLMProvider(available=False)).is_available() is False


# ======================================================================
# Extraction service helpers
# ======================================================================


class TestParseDocumentType:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, DocumentType.OTHER),
            ("", DocumentType.OTHER),
            ("PAN", DocumentType.PAN),
            (" voter_id ", DocumentType.VOTER_ID),
            (DocumentType.PASSPORT, DocumentType.PASSPORT),
        ],
    )
    def test_known(self, value, expected) -> None:
        assert parse_document_type(value) is expected

    def test_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unsupported document type"):
            parse_document_type("library_card")


class TestDecodeImagePayload:
    def test_plain_base64(self) -> None:
        assert decode_image_payload(base64.b64encode(b"abc").decode()) == b"abc"

    def test_data_uri(self) -> None:
        payload = "data:image/png;base64," + base64.b64encode(b"png-bytes").decode()
        assert decode_image_payload(payload) == b"png-bytes"

    def test_invalid(self) -> None:
        with pytest.raises(InvalidImageError):
            decode_image_payload("not*base64!")


# ======================================================================
# DocumentExtractionService
# ======================================================================


class TestDocumentExtractionService:
    def _service(self, llm: FakeLLMProvider) -> DocumentExtractionService:
        return DocumentExtractionService(extraction_provider=LLMVisionExtractionProvider(llm))

    @pytest.mark.asyncio
    async def test_extract(self) -> None:
        llm = FakeLLMProvider(vision_reply=json.dumps(_REPLY))
        result = await self._service(llm).extract(make_image_bytes(), "aadhaar")
        assert result.fields[0].field_value == "Rahul Kumar Sharma"

    @pytest.mark.asyncio
    async def test_invalid_image_rejected_before_llm(self) -> None:
        llm = FakeLLMProvider()
        with pytest.raises(InvalidImageError):
            await self._service(llm).extract(b"not an image", DocumentType.PAN)
        assert llm.vision_calls == []

    @pytest.mark.asyncio
    async def test_no_vision_provider(self) -> None:
        with pytest.raises(ExtractionError, match="No vision-capable"):
            await self._service(FakeLLMProvider(vision=False)).extract(
                make_image_bytes(), DocumentType.PAN
            )

    @pytest.mark.asyncio
    async def test_unknown_document_type(self) -> None:
        with pytest.raises(ValueError):
            await self._service(FakeLLMProvider()).extract(make_image_bytes(), "ration_card")

    @pytest.mark.asyncio
    async def test_extraction_failure_surfaces(self) -> None:
        llm = FakeLLMProvider(vision_reply=LLMError("model down"))
        with pytest.raises(ExtractionError):
            await self._service(llm).extract(make_image_bytes(), DocumentType.PAN)
