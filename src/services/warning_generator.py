"""Human-readable warnings for a reconciled form.

Warnings are produced in two phases:

1. **Local** (synchronous, deterministic): one line per required field that
   is empty and per field that failed validation, in template order, then
   the template's static checks from the rule-set registry.
2. **Advisory** (async, best-effort): the filled values are sent to the
   assistant with a request for 2-3 short warnings.  Up to
   ``max_lines`` non-blank reply lines are kept after stripping list
   markers, and lines that look like an existing warning are dropped.

Local warnings always come first.  The advisory phase never raises: a
disabled advisor, a timeout, a provider error or an empty reply all yield
no advisory lines and a log entry.

Duplicate detection is a heuristic.  The first ``dedup_prefix_chars``
characters of a candidate line are compared with each existing warning at
least as long as that prefix, using rapidfuzz ``partial_ratio``; at or above
``dedup_threshold`` the line is dropped.  A threshold of 1.0 is a plain,
case-sensitive substring test.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Mapping, Sequence

from rapidfuzz import fuzz

from src.config.form_templates import get_rule_set
from src.models.forms import FieldState, FieldStatus, FormTemplate, WarningReport
from src.services.assistant_service import AssistantService
from src.utils.errors import AdvisoryUnavailableError, SmartFormError
from src.utils.logging import get_logger

ADVISORY_CONTEXT = "Mock form validation"

# Leading "-", "•", "*" bullets and "1." / "2)" numbering.
_LIST_MARKER = re.compile(r"^\s*(?:[-•*]|\d+[.)])\s*")


def clean_advisory_line(line: str) -> str:
    """Strip one leading list marker and surrounding whitespace."""
    return _LIST_MARKER.sub("", line, count=1).strip()


def build_advisory_message(template: FormTemplate, status_map: Mapping[str, FieldStatus]) -> str:
    """Build the advisory request: template name plus ``id: value`` lines.

    Only fields with a value are listed, in template order.
    """
    filled_lines = []
    for descriptor in template.fields:
        status = status_map.get(descriptor.id)
        if status is not None and status.value:
            filled_lines.append(f"{descriptor.id}: {status.value}")
    fields_block = "\n".join(filled_lines)
    return (
        f"Analyze this form data for potential issues. Form type: {template.name}. "
        f"Fields:\n{fields_block}\n\n"
        "Provide 2-3 brief warnings about potential errors or mismatches."
    )


class WarningGenerator:
    """Builds local and advisory warnings for a status map."""

    def __init__(
        self,
        advisor: AssistantService | None = None,
        enabled: bool = True,
        timeout_seconds: float = 20.0,
        max_lines: int = 3,
        dedup_threshold: float = 0.9,
        dedup_prefix_chars: int = 20,
    ) -> None:
        if not 0.0 <= dedup_threshold <= 1.0:
            raise ValueError("dedup_threshold must be between 0.0 and 1.0")
        self._advisor = advisor
        self._enabled = enabled and advisor is not None
        self._timeout = timeout_seconds
        self._max_lines = max_lines
        self._dedup_threshold = dedup_threshold
        self._dedup_prefix_chars = dedup_prefix_chars
        self._logger = get_logger(__name__)

    @property
    def advisory_enabled(self) -> bool:
        return self._enabled

    # ------------------------------------------------------------------
    # Phase 1: local
    # ------------------------------------------------------------------

    def local_warnings(
        self,
        template: FormTemplate,
        status_map: Mapping[str, FieldStatus],
    ) -> list[str]:
        """Return the deterministic warnings for *status_map*."""
        warnings: list[str] = []
        for descriptor in template.fields:
            status = status_map.get(descriptor.id)
            if status is None:
                continue
            if descriptor.required and status.status == FieldState.EMPTY:
                warnings.append(f'"{descriptor.label}" is required but missing from your vault')
            elif status.status == FieldState.INVALID:
                warnings.append(
                    f'"{descriptor.label}" format may cause rejection: {status.warning}'
                )

        for check in get_rule_set(template.id).static_checks:
            status = status_map.get(check.field_id)
            if status is not None and check.violated_by(status.value):
                warnings.append(check.message)
        return warnings

    # ------------------------------------------------------------------
    # Phase 2: advisory
    # ------------------------------------------------------------------

    async def advisory_warnings(
        self,
        template: FormTemplate,
        status_map: Mapping[str, FieldStatus],
        existing: Sequence[str] = (),
    ) -> list[str]:
        """Return up to ``max_lines`` new advisory warnings, or ``[]``.

        Never raises; every failure is logged as ``advisory_skipped``.
        """
        if not self._enabled:
            return []
        try:
            reply = await self._request_advisory(template, status_map)
        except AdvisoryUnavailableError as exc:
            self._logger.info("advisory_skipped", template_id=template.id, reason=exc.message)
            return []

        accepted: list[str] = []
        seen = list(existing)
        candidates = [line for line in reply.splitlines() if line.strip()][: self._max_lines]
        for raw_line in candidates:
            line = clean_advisory_line(raw_line)
            if not line or self.is_duplicate(line, seen):
                continue
            accepted.append(line)
            seen.append(line)

        self._logger.debug(
            "advisory_received",
            template_id=template.id,
            candidates=len(candidates),
            accepted=len(accepted),
        )
        return accepted

    async def generate_warnings(
        self,
        template: FormTemplate,
        status_map: Mapping[str, FieldStatus],
    ) -> WarningReport:
        """Run both phases and return them as one report (local first)."""
        local = self.local_warnings(template, status_map)
        advisory = await self.advisory_warnings(template, status_map, existing=local)
        return WarningReport(local=local, advisory=advisory)

    def is_duplicate(self, line: str, existing: Sequence[str]) -> bool:
        """Return ``True`` if *line* resembles any warning in *existing*.

        Warnings shorter than the prefix never count as a match.
        """
        prefix = line[: self._dedup_prefix_chars]
        if not prefix:
            return False
        for warning in existing:
            if len(warning) < len(prefix):
                continue
            if self._dedup_threshold >= 1.0:
                if prefix in warning:
                    return True
            elif fuzz.partial_ratio(prefix, warning) / 100.0 >= self._dedup_threshold:
                return True
        return False

    async def _request_advisory(
        self,
        template: FormTemplate,
        status_map: Mapping[str, FieldStatus],
    ) -> str:
        message = build_advisory_message(template, status_map)
        try:
            reply = await asyncio.wait_for(
                self._advisor.ask(message, context=ADVISORY_CONTEXT),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise AdvisoryUnavailableError(f"timed out after {self._timeout}s") from exc
        except SmartFormError as exc:
            raise AdvisoryUnavailableError(str(exc)) from exc

        if not isinstance(reply, str) or not reply.strip():
            raise AdvisoryUnavailableError("empty advisory reply")
        return reply
