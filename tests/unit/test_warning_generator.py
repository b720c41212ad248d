"""Unit tests for the two-phase warning generator."""

from __future__ import annotations

import asyncio

import pytest

from src.config.form_templates import COLLEGE_ADMISSION, GOVT_EXAM
from src.models.forms import FieldState, FieldStatus
from src.services import reconciliation
from src.services.assistant_service import AssistantService
from src.services.warning_generator import (
    WarningGenerator,
    build_advisory_message,
    clean_advisory_line,
)
from src.utils.errors import LLMError, RateLimitError
from tests.conftest import FakeLLMProvider, make_item


class _SlowLLM(FakeLLMProvider):
    async def complete(self, system_prompt, user_prompt, temperature=0.3, max_tokens=4000):
        await asyncio.sleep(5)
        return "too late"


def _generator(reply: str | Exception = "", **kwargs) -> tuple[WarningGenerator, FakeLLMProvider]:
    llm = FakeLLMProvider(complete_reply=reply)
    return WarningGenerator(advisor=AssistantService(llm), **kwargs), llm


# ======================================================================
# Helpers
# ======================================================================


class TestCleanAdvisoryLine:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("- Check the DOB", "Check the DOB"),
            ("• Check the DOB", "Check the DOB"),
            ("* Check the DOB", "Check the DOB"),
            ("1. Check the DOB", "Check the DOB"),
            ("2) Check the DOB", "Check the DOB"),
            ("   Check the DOB  ", "Check the DOB"),
        ],
    )
    def test_strips_one_marker(self, raw: str, expected: str) -> None:
        assert clean_advisory_line(raw) == expected

    def test_only_leading_marker_removed(self) -> None:
        assert clean_advisory_line("- Use a - not a slash") == "Use a - not a slash"


class TestBuildAdvisoryMessage:
    def test_lists_only_filled_fields(self) -> None:
        status_map = reconciliation.auto_fill(GOVT_EXAM, [make_item("Full Name", "asha rao")])
        message = build_advisory_message(GOVT_EXAM, status_map)
        assert "Form type: Government Exam Registration" in message
        assert "name: ASHA RAO" in message
        assert "pincode:" not in message


# ======================================================================
# Local phase
# ======================================================================


class TestLocalWarnings:
    def test_every_required_empty_field_reported(self) -> None:
        generator = WarningGenerator()
        warnings = generator.local_warnings(GOVT_EXAM, reconciliation.auto_fill(GOVT_EXAM, []))
        assert len(warnings) == len(GOVT_EXAM.fields)
        assert warnings[0] == (
            '"Candidate Name (as per Aadhaar)" is required but missing from your vault'
        )

    def test_complete_vault_has_no_local_warnings(self, complete_vault) -> None:
        status_map = reconciliation.auto_fill(GOVT_EXAM, complete_vault)
        assert WarningGenerator().local_warnings(GOVT_EXAM, status_map) == []

    def test_invalid_field_reported_with_its_warning(self, complete_vault) -> None:
        items = [i for i in complete_vault if i.field_name != "Date of Birth"]
        items.append(make_item("DOB", "2002-08-15"))
        status_map = reconciliation.auto_fill(GOVT_EXAM, items)
        warnings = WarningGenerator().local_warnings(GOVT_EXAM, status_map)
        assert warnings == [
            '"Date of Birth" format may cause rejection: Format mismatch: expected DD/MM/YYYY'
        ]

    def test_static_checks_follow_field_warnings(self, complete_vault) -> None:
        status_map = reconciliation.auto_fill(GOVT_EXAM, complete_vault)
        status_map["name"] = FieldStatus(value="rahul sharma", status=FieldState.FILLED)
        status_map["pincode"] = FieldStatus(value="", status=FieldState.EMPTY)
        warnings = WarningGenerator().local_warnings(GOVT_EXAM, status_map)
        assert warnings == [
            '"PIN Code" is required but missing from your vault',
            "Name should be in UPPERCASE for government forms",
        ]

    def test_aadhaar_length_check_ignores_spaces(self, complete_vault) -> None:
        status_map = reconciliation.auto_fill(GOVT_EXAM, complete_vault)
        status_map["aadhaar"] = reconciliation.edit_field("aadhaar", "1234 5678 901", GOVT_EXAM)
        warnings = WarningGenerator().local_warnings(GOVT_EXAM, status_map)
        assert "Aadhaar must be exactly 12 digits" in warnings

    def test_templates_without_rules_have_no_static_checks(self) -> None:
        status_map = reconciliation.auto_fill(
            COLLEGE_ADMISSION, [make_item("Full Name", "x")]
        )
        status_map["name"] = FieldStatus(value="lowercase", status=FieldState.FILLED)
        warnings = WarningGenerator().local_warnings(COLLEGE_ADMISSION, status_map)
        assert "Name should be in UPPERCASE for government forms" not in warnings


# ======================================================================
# Advisory phase
# ======================================================================


class TestAdvisoryWarnings:
    @pytest.mark.asyncio
    async def test_keeps_first_three_non_blank_lines(self, complete_vault) -> None:
        generator, _ = _generator("- Check DOB\n\n2. Name spelled oddly\n* Third one\n- Fourth")
        status_map = reconciliation.auto_fill(GOVT_EXAM, complete_vault)
        lines = await generator.advisory_warnings(GOVT_EXAM, status_map)
        assert lines == ["Check DOB", "Name spelled oddly", "Third one"]

    @pytest.mark.asyncio
    async def test_sends_form_context(self, complete_vault) -> None:
        generator, llm = _generator("Looks fine")
        status_map = reconciliation.auto_fill(GOVT_EXAM, complete_vault)
        await generator.advisory_warnings(GOVT_EXAM, status_map)
        call = llm.complete_calls[0]
        assert "Current context: Mock form validation" in call["system_prompt"]
        assert "name: RAHUL KUMAR SHARMA" in call["user_prompt"]

    @pytest.mark.asyncio
    async def test_duplicates_of_local_warnings_dropped(self) -> None:
        existing = ['"Date of Birth" format may cause rejection: Format mismatch']
        generator, _ = _generator(
            '"Date of Birth" format may be wrong\nConsider verifying your PIN code'
        )
        status_map = reconciliation.auto_fill(GOVT_EXAM, [])
        lines = await generator.advisory_warnings(GOVT_EXAM, status_map, existing=existing)
        assert lines == ["Consider verifying your PIN code"]

    @pytest.mark.asyncio
    async def test_duplicate_lines_within_reply_dropped(self) -> None:
        generator, _ = _generator("Check your father's name\nCheck your father's name again")
        lines = await generator.advisory_warnings(GOVT_EXAM, {})
        assert lines == ["Check your father's name"]

    @pytest.mark.asyncio
    async def test_short_line_does_not_swallow_later_lines(self) -> None:
        generator, _ = _generator(
            "- OK\n- Check the DOB is OK for this exam\n- Mobile looks fine",
            dedup_threshold=1.0,
        )
        lines = await generator.advisory_warnings(GOVT_EXAM, {})
        assert lines == ["OK", "Check the DOB is OK for this exam", "Mobile looks fine"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "reply",
        [
            LLMError("boom"),
            RateLimitError("slow down"),
            "",
            "   \n  ",
        ],
    )
    async def test_failures_yield_no_lines(self, reply) -> None:
        generator, _ = _generator(reply)
        assert await generator.advisory_warnings(GOVT_EXAM, {}) == []

    @pytest.mark.asyncio
    async def test_timeout_yields_no_lines(self) -> None:
        generator = WarningGenerator(advisor=AssistantService(_SlowLLM()), timeout_seconds=0.01)
        assert await generator.advisory_warnings(GOVT_EXAM, {}) == []

    @pytest.mark.asyncio
    async def test_disabled_without_advisor(self) -> None:
        generator = WarningGenerator(advisor=None)
        assert generator.advisory_enabled is False
        assert await generator.advisory_warnings(GOVT_EXAM, {}) == []

    @pytest.mark.asyncio
    async def test_disabled_by_flag(self) -> None:
        generator, llm = _generator("Something", enabled=False)
        assert await generator.advisory_warnings(GOVT_EXAM, {}) == []
        assert llm.complete_calls == []

    @pytest.mark.asyncio
    async def test_generate_warnings_orders_local_first(self) -> None:
        generator, _ = _generator("Double-check your category certificate")
        status_map = reconciliation.auto_fill(GOVT_EXAM, [])
        report = await generator.generate_warnings(GOVT_EXAM, status_map)
        assert len(report.local) == len(GOVT_EXAM.fields)
        assert report.advisory == ["Double-check your category certificate"]
        assert report.all_warnings[-1] == "Double-check your category certificate"


# ======================================================================
# Duplicate heuristic
# ======================================================================


class TestIsDuplicate:
    def test_exact_prefix_at_full_threshold(self) -> None:
        generator = WarningGenerator(dedup_threshold=1.0)
        existing = ["Name should be in UPPERCASE for government forms"]
        assert generator.is_duplicate("Name should be in UPPERCASE everywhere", existing)

    def test_full_threshold_is_case_sensitive(self) -> None:
        existing = ["Name should be in UPPERCASE for government forms"]
        line = "name should be in uppercase everywhere"
        assert not WarningGenerator(dedup_threshold=1.0).is_duplicate(line, existing)

    def test_short_existing_warning_never_matches(self) -> None:
        generator = WarningGenerator(dedup_threshold=1.0)
        assert not generator.is_duplicate("Check DOB is OK for the exam", ["OK"])
        assert not WarningGenerator().is_duplicate("Check DOB is OK for the exam", ["OK"])

    def test_near_prefix_needs_lower_threshold(self) -> None:
        existing = ["Name should be in UPPERCASE for government forms"]
        line = "Name shuold be in UPPERCASE"
        assert not WarningGenerator(dedup_threshold=1.0).is_duplicate(line, existing)
        assert WarningGenerator(dedup_threshold=0.8).is_duplicate(line, existing)

    def test_unrelated_line_kept(self) -> None:
        existing = ['"PIN Code" is required but missing from your vault']
        assert not WarningGenerator().is_duplicate("Upload a recent photograph", existing)

    def test_empty_existing(self) -> None:
        assert not WarningGenerator().is_duplicate("Anything", [])

    @pytest.mark.parametrize("threshold", [-0.1, 1.5])
    def test_threshold_out_of_range(self, threshold: float) -> None:
        with pytest.raises(ValueError):
            WarningGenerator(dedup_threshold=threshold)
