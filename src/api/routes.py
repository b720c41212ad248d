"""FastAPI API routes for SmartForm Vault.

Provides REST endpoints for document extraction, vault management,
assisted filling, mock form sessions, the form-filling assistant,
translation and health.  Service dependencies are resolved from
``app.state`` via FastAPI's ``Depends`` using the ``Annotated`` pattern.

# ─── API ROUTE MAP (Junior Developer Guide) ───────────────────────────
#
# Endpoint                                   Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/health                             GET     Health check + provider status
# /api/v1/documents/process                  POST    Base64 image → extracted fields
# /api/v1/documents/upload                   POST    Multipart image → extracted fields
# /api/v1/vault                              GET     Vault grouped by category
# /api/v1/vault/items                        POST    Save reviewed fields
# /api/v1/vault/items/{item_id}              DELETE  Remove one vault item
# /api/v1/assisted                           GET     Copy-ready vault entries (?q=)
# /api/v1/forms/templates                    GET     Mock form templates
# /api/v1/forms/sessions                     POST    Start a mock form session
# /api/v1/forms/sessions/{sid}               GET     Current session view
# /api/v1/forms/sessions/{sid}               DELETE  Close a session
# /api/v1/forms/sessions/{sid}/template      POST    Switch template
# /api/v1/forms/sessions/{sid}/fields/{fid}  PUT     Manual field edit
# /api/v1/forms/sessions/{sid}/reset         POST    Restore values from the vault
# /api/v1/forms/sessions/{sid}/submission-check GET  Readiness verdict
# /api/v1/assistant/chat                     POST    Ask the assistant
# /api/v1/translate                          POST    Translate text
#
# DEPENDENCY INJECTION PATTERN:
# Each route function declares its dependencies as type-annotated params.
# FastAPI resolves these via Depends() which calls helper functions that
# read from app.state (populated at startup in main.py's _build_all).
#
# AUTHENTICATION:
# Every route except /health resolves the current user through
# CurrentUserDep.  With SESSION_SECRET set, the user comes from a signed
# "Authorization: Bearer" token; without it (development) from X-User-Id.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    Form,
    Header,
    HTTPException,
    Query,
    Request,
    UploadFile,
)

from src.api.schemas import (
    AssistedEntryResponse,
    AssistedResponse,
    ChatRequest,
    ChatResponse,
    CreateFormSessionRequest,
    EditFieldRequest,
    ErrorResponse,
    FormSessionResponse,
    HealthResponse,
    ProcessDocumentRequest,
    ProcessDocumentResponse,
    SaveVaultItemsRequest,
    SaveVaultItemsResponse,
    SelectTemplateRequest,
    SubmissionCheckResponse,
    TemplatesResponse,
    TranslateRequest,
    TranslateResponse,
    VaultItemDeletedResponse,
    VaultResponse,
    WarningsResponse,
)
from src.config.form_templates import get_template, list_templates
from src.config.settings import Settings
from src.interfaces.vault_store import IVaultStore
from src.models.forms import FormTemplate
from src.models.vault import DocumentType, ExtractionResult, UserSession, VaultItem
from src.services import assisted_filling
from src.services.assistant_service import AssistantService
from src.services.extraction_service import (
    DocumentExtractionService,
    decode_image_payload,
    parse_document_type,
)
from src.services.form_session import FormSession, FormSessionRegistry
from src.services.translation_service import TranslationService
from src.utils.auth import validate_user_token
from src.utils.errors import (
    AuthenticationError,
    FieldNotFoundError,
    InvalidImageError,
    SessionNotFoundError,
    TemplateNotFoundError,
    VaultItemNotFoundError,
)
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# All routes in this file are prefixed with /api/v1.
# Example: @router.get("/vault") → GET /api/v1/vault
router = APIRouter(prefix="/api/v1")

# --- Upload validation constants ---
_ALLOWED_CONTENT_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})

# Read multipart uploads in 64 KB increments to reject oversized files
# early without buffering the entire payload into memory.
_UPLOAD_CHUNK_SIZE = 64 * 1024


# ---------------------------------------------------------------------------
# Dependency injection helpers: resolve singletons from app.state
# ---------------------------------------------------------------------------
# JUNIOR DEV NOTE: FastAPI Dependency Injection
# -----------------------------------------------
# The pattern:
#   1. Write a helper function that extracts a service from app.state
#   2. Create an Annotated type alias: XDep = Annotated[XType, Depends(helper)]
#   3. Declare XDep as a route param → FastAPI calls helper() automatically
#
# Optional services (everything that needs an LLM) are read with
# getattr(..., None) and the route answers 503 when they are missing.
# ---------------------------------------------------------------------------


def _get_settings(request: Request) -> Settings:
    """Return the application settings from application state."""
    return request.app.state.settings


def _get_vault_store(request: Request) -> IVaultStore:
    """Return the vault store from application state."""
    return request.app.state.vault_store


def _get_form_sessions(request: Request) -> FormSessionRegistry:
    """Return the mock form session registry from application state."""
    return request.app.state.form_sessions


SettingsDep = Annotated[Settings, Depends(_get_settings)]
VaultStoreDep = Annotated[IVaultStore, Depends(_get_vault_store)]
FormSessionsDep = Annotated[FormSessionRegistry, Depends(_get_form_sessions)]


def _get_extraction_service(request: Request) -> DocumentExtractionService | None:
    """Return the extraction service from application state, or ``None``."""
    return getattr(request.app.state, "extraction_service", None)


def _get_assistant_service(request: Request) -> AssistantService | None:
    """Return the assistant service from application state, or ``None``."""
    return getattr(request.app.state, "assistant_service", None)


def _get_translation_service(request: Request) -> TranslationService | None:
    """Return the translation service from application state, or ``None``."""
    return getattr(request.app.state, "translation_service", None)


ExtractionServiceDep = Annotated[
    DocumentExtractionService | None, Depends(_get_extraction_service)
]
AssistantServiceDep = Annotated[AssistantService | None, Depends(_get_assistant_service)]
TranslationServiceDep = Annotated[
    TranslationService | None, Depends(_get_translation_service)
]


def _get_current_user(
    settings: SettingsDep,
    authorization: Annotated[str | None, Header()] = None,
    x_user_id: Annotated[str | None, Header()] = None,
) -> UserSession:
    """Resolve the calling user or answer 401."""
    if settings.session_secret:
        scheme, _, token = (authorization or "").partition(" ")
        if scheme.lower() != "bearer" or not token:
            raise HTTPException(status_code=401, detail="Missing bearer token")
        try:
            user_id = validate_user_token(
                token.strip(), settings.session_secret, ttl_hours=settings.session_ttl_hours
            )
        except AuthenticationError as exc:
            raise HTTPException(status_code=401, detail=exc.message) from exc
        return UserSession(user_id=user_id)

    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return UserSession(user_id=x_user_id.strip())


CurrentUserDep = Annotated[UserSession, Depends(_get_current_user)]


def _require(service: Any, what: str) -> Any:
    if service is None:
        raise HTTPException(
            status_code=503,
            detail=f"{what} is not available: no LLM provider is configured",
        )
    return service


# ---------------------------------------------------------------------------
# Response builders
# ---------------------------------------------------------------------------


def _session_view(session: FormSession) -> FormSessionResponse:
    report = session.warnings
    return FormSessionResponse(
        session_id=session.session_id,
        template_id=session.template.id,
        template_name=session.template.name,
        generation=session.generation,
        fields=session.status_map,
        readiness=session.readiness,
        checklist=session.checklist,
        warnings=WarningsResponse(
            local=report.local,
            advisory=report.advisory,
            all=report.all_warnings,
        ),
        advisory_pending=session.advisory_pending,
    )


def _vault_view(items: list[VaultItem]) -> VaultResponse:
    by_category: dict[str, list[VaultItem]] = {}
    for item in items:
        by_category.setdefault(item.category, []).append(item)
    counts = assisted_filling.counts(items)
    return VaultResponse(
        by_category=by_category,
        total=counts.total,
        verified=counts.verified,
        pending=counts.pending,
    )


def _lookup_template(template_id: str) -> FormTemplate:
    try:
        return get_template(template_id)
    except TemplateNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc


def _lookup_session(
    registry: FormSessionRegistry, session_id: str, user: UserSession
) -> FormSession:
    try:
        return registry.get(session_id, user.user_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc


# ---------------------------------------------------------------------------
# Background task helpers
# ---------------------------------------------------------------------------


async def _run_advisory(session: FormSession, generation: int) -> None:
    """Fetch advisory warnings after the response has been sent.

    # JUNIOR DEV NOTE: BackgroundTasks
    # The client gets the local warnings immediately and polls the session
    # until ``advisory_pending`` turns False.  If the user edits the form
    # meanwhile, the session discards this result as stale.
    """
    try:
        await session.run_advisory(generation)
    except Exception as exc:
        _logger.error(
            "background_advisory_failed",
            session_id=session.session_id,
            generation=generation,
            error=str(exc),
        )


def _schedule_advisory(
    background_tasks: BackgroundTasks, session: FormSession, generation: int
) -> None:
    if session.advisory_pending:
        background_tasks.add_task(_run_advisory, session, generation)


# ---------------------------------------------------------------------------
# System endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider availability."""
    providers: dict[str, Any] = {}
    if hasattr(request.app.state, "provider_registry"):
        providers = dict(request.app.state.provider_registry)
    return HealthResponse(
        status="healthy",
        version=request.app.version,
        providers=providers,
    )


# ---------------------------------------------------------------------------
# Document endpoints
# ---------------------------------------------------------------------------


async def _extract(
    service: DocumentExtractionService | None,
    settings: Settings,
    image_bytes: bytes,
    document_type: DocumentType,
    language: str,
    user: UserSession,
) -> ProcessDocumentResponse:
    service = _require(service, "Document extraction")
    if len(image_bytes) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Image too large. Maximum: {settings.max_upload_bytes} bytes.",
        )
    try:
        result: ExtractionResult = await service.extract(image_bytes, document_type, language)
    except InvalidImageError as exc:
        raise HTTPException(status_code=422, detail=exc.message) from exc

    _logger.info(
        "document_processed",
        user_id=user.user_id,
        document_type=document_type.value,
        field_count=len(result.fields),
        confidence=result.overall_confidence,
    )
    return ProcessDocumentResponse(data=result)


@router.post(
    "/documents/process",
    response_model=ProcessDocumentResponse,
    responses={
        413: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Extract fields from a base64-encoded document image",
)
async def process_document(
    body: ProcessDocumentRequest,
    user: CurrentUserDep,
    settings: SettingsDep,
    service: ExtractionServiceDep,
) -> ProcessDocumentResponse:
    """Run vision extraction and return the fields for review (nothing is saved)."""
    try:
        image_bytes = decode_image_payload(body.image_base64)
    except InvalidImageError as exc:
        raise HTTPException(status_code=422, detail=exc.message) from exc
    return await _extract(
        service, settings, image_bytes, body.document_type, body.language, user
    )


@router.post(
    "/documents/upload",
    response_model=ProcessDocumentResponse,
    responses={
        413: {"model": ErrorResponse},
        415: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Extract fields from an uploaded document image",
)
async def upload_document(
    file: UploadFile,
    user: CurrentUserDep,
    settings: SettingsDep,
    service: ExtractionServiceDep,
    document_type: Annotated[str, Form()] = DocumentType.OTHER.value,
    language: Annotated[str, Form()] = "en",
) -> ProcessDocumentResponse:
    """Accept a document photo as multipart form data and run extraction."""
    # --- Validate content type (security: reject non-image files) ---
    content_type = file.content_type or ""
    if content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=415,
            detail=(
                f"Unsupported file type: {content_type}. "
                f"Allowed: {', '.join(sorted(_ALLOWED_CONTENT_TYPES))}"
            ),
        )

    try:
        doc_type = parse_document_type(document_type)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    # --- Stream upload in chunks, reject oversized files early --------
    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await file.read(_UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > settings.max_upload_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Maximum: {settings.max_upload_bytes} bytes.",
            )
        chunks.append(chunk)

    return await _extract(service, settings, b"".join(chunks), doc_type, language, user)


# ---------------------------------------------------------------------------
# Vault endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/vault",
    response_model=VaultResponse,
    summary="List the user's vault grouped by category",
)
async def get_vault(user: CurrentUserDep, vault_store: VaultStoreDep) -> VaultResponse:
    items = await vault_store.list_items(user.user_id)
    return _vault_view(items)


@router.post(
    "/vault/items",
    response_model=SaveVaultItemsResponse,
    status_code=201,
    summary="Save reviewed extracted fields to the vault",
)
async def save_vault_items(
    body: SaveVaultItemsRequest,
    user: CurrentUserDep,
    vault_store: VaultStoreDep,
) -> SaveVaultItemsResponse:
    """Upsert the fields; an existing (category, field_name) row is overwritten."""
    saved = await vault_store.upsert_fields(user.user_id, body.fields)
    return SaveVaultItemsResponse(saved=saved, count=len(saved))


@router.delete(
    "/vault/items/{item_id}",
    response_model=VaultItemDeletedResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete one vault item",
)
async def delete_vault_item(
    item_id: str,
    user: CurrentUserDep,
    vault_store: VaultStoreDep,
) -> VaultItemDeletedResponse:
    try:
        await vault_store.delete_item(user.user_id, item_id)
    except VaultItemNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    return VaultItemDeletedResponse(id=item_id)


# ---------------------------------------------------------------------------
# Assisted filling
# ---------------------------------------------------------------------------


@router.get(
    "/assisted",
    response_model=AssistedResponse,
    summary="Copy-ready vault entries for filling an external form",
)
async def get_assisted_entries(
    user: CurrentUserDep,
    vault_store: VaultStoreDep,
    q: Annotated[str, Query(max_length=200)] = "",
) -> AssistedResponse:
    """Return vault entries grouped by category, filtered by *q*.

    Counts always describe the whole vault, not the filtered view.
    """
    items = await vault_store.list_items(user.user_id)
    groups = {
        category: [
            AssistedEntryResponse(
                id=entry.item.id,
                category=entry.item.category,
                field_name=entry.item.field_name,
                field_value=entry.item.field_value,
                is_verified=entry.item.is_verified,
                display_name=entry.display_name,
                copy_value=entry.copy_value,
                format_hint=entry.format_hint,
                warning=entry.warning,
            )
            for entry in category_entries
        ]
        for category, category_entries in assisted_filling.entries(items, q).items()
    }
    counts = assisted_filling.counts(items)
    return AssistedResponse(
        query=q,
        groups=groups,
        total=counts.total,
        verified=counts.verified,
        pending=counts.pending,
    )


# ---------------------------------------------------------------------------
# Mock form endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/forms/templates",
    response_model=TemplatesResponse,
    summary="List mock form templates",
)
async def get_form_templates(user: CurrentUserDep) -> TemplatesResponse:
    return TemplatesResponse(templates=list(list_templates()))


@router.post(
    "/forms/sessions",
    response_model=FormSessionResponse,
    status_code=201,
    responses={404: {"model": ErrorResponse}},
    summary="Start a mock form session",
)
async def create_form_session(
    body: CreateFormSessionRequest,
    background_tasks: BackgroundTasks,
    user: CurrentUserDep,
    vault_store: VaultStoreDep,
    registry: FormSessionsDep,
) -> FormSessionResponse:
    """Auto-fill the template from the vault; advisory warnings follow in the background."""
    template = _lookup_template(body.template_id)
    items = await vault_store.list_items(user.user_id)
    session = registry.create(user, template, items)
    _schedule_advisory(background_tasks, session, session.generation)
    return _session_view(session)


@router.get(
    "/forms/sessions/{session_id}",
    response_model=FormSessionResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get the current mock form session view",
)
async def get_form_session(
    session_id: str,
    user: CurrentUserDep,
    registry: FormSessionsDep,
) -> FormSessionResponse:
    return _session_view(_lookup_session(registry, session_id, user))


@router.delete(
    "/forms/sessions/{session_id}",
    status_code=204,
    responses={404: {"model": ErrorResponse}},
    summary="Close a mock form session",
)
async def delete_form_session(
    session_id: str,
    user: CurrentUserDep,
    registry: FormSessionsDep,
) -> None:
    try:
        registry.discard(session_id, user.user_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc


@router.post(
    "/forms/sessions/{session_id}/template",
    response_model=FormSessionResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Switch the session to a different template",
)
async def select_form_template(
    session_id: str,
    body: SelectTemplateRequest,
    background_tasks: BackgroundTasks,
    user: CurrentUserDep,
    vault_store: VaultStoreDep,
    registry: FormSessionsDep,
) -> FormSessionResponse:
    session = _lookup_session(registry, session_id, user)
    template = _lookup_template(body.template_id)
    items = await vault_store.list_items(user.user_id)
    generation = session.select_template(template, items)
    _schedule_advisory(background_tasks, session, generation)
    return _session_view(session)


@router.put(
    "/forms/sessions/{session_id}/fields/{field_id}",
    response_model=FormSessionResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Manually edit one form field",
)
async def edit_form_field(
    session_id: str,
    field_id: str,
    body: EditFieldRequest,
    user: CurrentUserDep,
    registry: FormSessionsDep,
) -> FormSessionResponse:
    """Re-validate the edited field and recompute local warnings.

    Advisory warnings already shown are kept; no new advisory call is made.
    """
    session = _lookup_session(registry, session_id, user)
    try:
        session.edit_field(field_id, body.value)
    except FieldNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc
    return _session_view(session)


@router.post(
    "/forms/sessions/{session_id}/reset",
    response_model=FormSessionResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Discard manual edits and restore values from the vault",
)
async def reset_form_session(
    session_id: str,
    background_tasks: BackgroundTasks,
    user: CurrentUserDep,
    vault_store: VaultStoreDep,
    registry: FormSessionsDep,
) -> FormSessionResponse:
    session = _lookup_session(registry, session_id, user)
    items = await vault_store.list_items(user.user_id)
    generation = session.reset(items)
    _schedule_advisory(background_tasks, session, generation)
    return _session_view(session)


@router.get(
    "/forms/sessions/{session_id}/submission-check",
    response_model=SubmissionCheckResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Check whether the form is ready to submit",
)
async def check_form_submission(
    session_id: str,
    user: CurrentUserDep,
    registry: FormSessionsDep,
) -> SubmissionCheckResponse:
    session = _lookup_session(registry, session_id, user)
    verdict = session.submission_check()
    return SubmissionCheckResponse(
        session_id=session_id,
        ready=verdict.ready,
        issues=verdict.issues,
        message=verdict.message,
    )


# ---------------------------------------------------------------------------
# Assistant & translation
# ---------------------------------------------------------------------------


@router.post(
    "/assistant/chat",
    response_model=ChatResponse,
    responses={
        422: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Ask the form-filling assistant",
)
async def assistant_chat(
    body: ChatRequest,
    user: CurrentUserDep,
    vault_store: VaultStoreDep,
    assistant: AssistantServiceDep,
) -> ChatResponse:
    """Answer a question, grounded in the user's vault unless ``includeVault`` is false."""
    assistant = _require(assistant, "The assistant")
    vault_items = await vault_store.list_items(user.user_id) if body.include_vault else None
    try:
        reply = await assistant.ask(body.message, context=body.context, vault_items=vault_items)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return ChatResponse(message=reply)


@router.post(
    "/translate",
    response_model=TranslateResponse,
    responses={
        422: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Translate text between languages",
)
async def translate_text(
    body: TranslateRequest,
    user: CurrentUserDep,
    translator: TranslationServiceDep,
) -> TranslateResponse:
    translator = _require(translator, "Translation")
    try:
        translated = await translator.translate(
            body.text, body.target_language, source_language=body.source_language
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return TranslateResponse(translated_text=translated)
