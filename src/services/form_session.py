"""Server-side state of one mock-form view.

A :class:`FormSession` holds the selected template, the current status map
and the two warning phases for one user.  Every mutation (template
selection, manual edit, reset) bumps ``generation``; the advisory call is
tagged with the generation it was started under and its result is
discarded if the session has moved on by the time it arrives.

Sessions live in a :class:`FormSessionRegistry` (``cachetools.TTLCache``),
are owned by exactly one user, and expire after a period of inactivity.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from cachetools import TTLCache

from src.models.forms import (
    ChecklistItem,
    FieldState,
    FieldStatus,
    FormTemplate,
    StatusMap,
    SubmissionCheck,
    WarningReport,
)
from src.models.vault import UserSession, VaultItem
from src.services import reconciliation
from src.services.checklist import build_checklist
from src.services.warning_generator import WarningGenerator
from src.utils.errors import SessionNotFoundError
from src.utils.logging import get_logger

_MAX_LISTED_ISSUES = 3
_READY_MESSAGE = "All fields validated. You can now fill the actual form."


class FormSession:
    """One user's mock-form state for a selected template."""

    def __init__(
        self,
        session_id: str,
        user: UserSession,
        template: FormTemplate,
        vault_items: Sequence[VaultItem],
        warning_generator: WarningGenerator,
        transform_manual_edits: bool = False,
    ) -> None:
        self.session_id = session_id
        self.user = user
        self._warnings = warning_generator
        self._transform_manual_edits = transform_manual_edits
        self._vault_items: list[VaultItem] = list(vault_items)
        self._generation = 0
        self._template = template
        self._status_map: StatusMap = {}
        self._local: list[str] = []
        self._advisory: list[str] = []
        self._advisory_pending = False
        self._logger = get_logger(__name__)
        self.select_template(template)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def template(self) -> FormTemplate:
        return self._template

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def status_map(self) -> StatusMap:
        return dict(self._status_map)

    @property
    def readiness(self) -> int:
        return reconciliation.compute_readiness(self._template, self._status_map)

    @property
    def checklist(self) -> list[ChecklistItem]:
        return build_checklist(self._template, self._status_map)

    @property
    def warnings(self) -> WarningReport:
        return WarningReport(local=list(self._local), advisory=list(self._advisory))

    @property
    def advisory_pending(self) -> bool:
        """True until advisory lines for the current generation are applied."""
        return self._advisory_pending

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def select_template(
        self,
        template: FormTemplate,
        vault_items: Sequence[VaultItem] | None = None,
    ) -> int:
        """Auto-fill *template* from the vault and start a new generation.

        Advisory warnings from the previous template are cleared.  Returns
        the new generation, which the caller passes to :meth:`run_advisory`.
        """
        if vault_items is not None:
            self._vault_items = list(vault_items)
        self._generation += 1
        self._template = template
        self._status_map = reconciliation.auto_fill(template, self._vault_items)
        self._local = self._warnings.local_warnings(template, self._status_map)
        self._advisory = []
        self._advisory_pending = self._warnings.advisory_enabled
        self._logger.debug(
            "form_template_selected",
            session_id=self.session_id,
            template_id=template.id,
            generation=self._generation,
        )
        return self._generation

    def reset(self, vault_items: Sequence[VaultItem] | None = None) -> int:
        """Discard manual edits and restore values from the vault."""
        return self.select_template(self._template, vault_items)

    def edit_field(self, field_id: str, value: str) -> FieldStatus:
        """Apply a manual edit to one field.

        Local warnings are recomputed.  Advisory warnings already shown are
        kept, but any advisory call still in flight is now stale.

        Raises
        ------
        FieldNotFoundError
            If *field_id* is not part of the selected template.
        """
        status = reconciliation.edit_field(
            field_id,
            value,
            self._template,
            apply_transform=self._transform_manual_edits,
        )
        self._generation += 1
        self._status_map[field_id] = status
        self._local = self._warnings.local_warnings(self._template, self._status_map)
        self._advisory_pending = False
        return status

    def apply_advisory(self, generation: int, lines: Sequence[str]) -> bool:
        """Attach advisory lines produced for *generation*.

        Returns ``False`` (and changes nothing) if the session has been
        mutated since that generation started.
        """
        if generation != self._generation:
            self._logger.info(
                "advisory_discarded_stale",
                session_id=self.session_id,
                requested_generation=generation,
                current_generation=self._generation,
            )
            return False
        self._advisory = list(lines)
        self._advisory_pending = False
        return True

    async def run_advisory(self, generation: int) -> bool:
        """Fetch advisory warnings for *generation* and apply them if still current.

        The template and status map are captured before the await so the
        request describes the state the generation was started under.
        """
        if generation != self._generation or not self._warnings.advisory_enabled:
            return False
        template = self._template
        status_map = dict(self._status_map)
        existing = list(self._local)
        lines = await self._warnings.advisory_warnings(template, status_map, existing=existing)
        return self.apply_advisory(generation, lines)

    # ------------------------------------------------------------------
    # Submission check
    # ------------------------------------------------------------------

    def submission_check(self) -> SubmissionCheck:
        """Return the readiness verdict shown when the user clicks "check".

        Required fields that are empty are listed by label; invalid fields
        are listed as ``"<label> (format error)"``.
        """
        issues: list[str] = []
        for descriptor in self._template.fields:
            status = self._status_map.get(descriptor.id, FieldStatus())
            if descriptor.required and (not status.value or status.status == FieldState.EMPTY):
                issues.append(descriptor.label)
            if status.status == FieldState.INVALID:
                issues.append(f"{descriptor.label} (format error)")

        if not issues:
            return SubmissionCheck(ready=True, issues=[], message=_READY_MESSAGE)

        message = f"Please fix: {', '.join(issues[:_MAX_LISTED_ISSUES])}"
        if len(issues) > _MAX_LISTED_ISSUES:
            message += f" and {len(issues) - _MAX_LISTED_ISSUES} more"
        return SubmissionCheck(ready=False, issues=issues, message=message)


class FormSessionRegistry:
    """TTL-bounded store of live form sessions, keyed by session id.

    Parameters
    ----------
    warning_generator:
        Shared by every session the registry creates.
    max_sessions:
        Oldest sessions are evicted beyond this count.
    ttl_seconds:
        Idle lifetime; each successful :meth:`get` restarts the clock.
    transform_manual_edits:
        Passed to every new session.
    """

    def __init__(
        self,
        warning_generator: WarningGenerator,
        max_sessions: int = 1000,
        ttl_seconds: int = 3600,
        transform_manual_edits: bool = False,
    ) -> None:
        self._warning_generator = warning_generator
        self._transform_manual_edits = transform_manual_edits
        self._sessions: TTLCache[str, FormSession] = TTLCache(
            maxsize=max_sessions, ttl=ttl_seconds
        )
        self._logger = get_logger(__name__)

    def create(
        self,
        user: UserSession,
        template: FormTemplate,
        vault_items: Sequence[VaultItem],
    ) -> FormSession:
        session = FormSession(
            session_id=str(uuid.uuid4()),
            user=user,
            template=template,
            vault_items=vault_items,
            warning_generator=self._warning_generator,
            transform_manual_edits=self._transform_manual_edits,
        )
        self._sessions[session.session_id] = session
        self._logger.info(
            "form_session_created",
            session_id=session.session_id,
            user_id=user.user_id,
            template_id=template.id,
        )
        return session

    def get(self, session_id: str, user_id: str) -> FormSession:
        """Return the session if it exists and belongs to *user_id*.

        Raises
        ------
        SessionNotFoundError
            For unknown, expired, or foreign session ids.  Foreign ids are
            indistinguishable from unknown ones.
        """
        session = self._sessions.get(session_id)
        if session is None or session.user.user_id != user_id:
            raise SessionNotFoundError(session_id)
        # Re-inserting restarts the TTL.
        self._sessions[session_id] = session
        return session

    def discard(self, session_id: str, user_id: str) -> None:
        """Drop a session when its view closes.

        Raises
        ------
        SessionNotFoundError
            For unknown, expired, or foreign session ids.
        """
        self.get(session_id, user_id)
        del self._sessions[session_id]

    def __len__(self) -> int:
        return len(self._sessions)
