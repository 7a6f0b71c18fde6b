"""
Configurator API routes — catalog options, one-shot submission, stored order
requests, and server-side wizard sessions backed by save-points.
"""
import logging
import uuid
from typing import Any, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import ESTIMATED_RESPONSE_TIME, PRODUCT_TYPES
from app.db import get_db
from app.models.configurator_schema import ClientContact
from app.services.catalog_repository import CategoryRepository
from app.services.errors import (
    CollaboratorError,
    InvalidSelectionError,
    ProductTypeNotFoundError,
)
from app.services.order_request_store import OrderRequestStore
from app.services.savepoint_store import InMemorySavePointBackend, SavePointStore
from app.services.validation_engine import validate_complete_configuration
from app.services.wizard_engine import WizardSession

router = APIRouter(prefix="/api/configurator", tags=["Configurator"])
logger = logging.getLogger("configurator-routes")

_SAVEPOINTS = InMemorySavePointBackend()

_INVALID_PRODUCT_TYPE = 'Invalid product type. Must be "kitchen" or "wardrobe"'
_SUBMITTED_MESSAGE = "Configuration submitted successfully. We will contact you shortly."


# ── Dependencies ─────────────────────────────────────────────────────────────

def get_category_repository(db: AsyncSession = Depends(get_db)) -> CategoryRepository:
    return CategoryRepository(db)


def get_order_store(db: AsyncSession = Depends(get_db)) -> OrderRequestStore:
    return OrderRequestStore(db)


def get_savepoint_backend() -> InMemorySavePointBackend:
    return _SAVEPOINTS


# ── Request bodies ───────────────────────────────────────────────────────────

class SubmitRequest(BaseModel):
    productType: Optional[str] = None
    configurationData: Optional[dict] = None
    clientData: Optional[dict] = None
    notes: Optional[str] = None


class StartSessionRequest(BaseModel):
    productType: str


class SelectionUpdateRequest(BaseModel):
    value: Any = None


class OptionPickRequest(BaseModel):
    optionId: str


class NavigateRequest(BaseModel):
    step: int


class SessionSubmitRequest(BaseModel):
    clientData: dict = Field(default_factory=dict)
    notes: Optional[str] = None


# ── Helpers ──────────────────────────────────────────────────────────────────

def _check_product_type(product_type: Optional[str]) -> str:
    if not product_type:
        raise HTTPException(status_code=400, detail="Product type is required")
    if product_type not in PRODUCT_TYPES:
        raise HTTPException(status_code=400, detail=_INVALID_PRODUCT_TYPE)
    return product_type


def _client_contact(data: Optional[dict]) -> ClientContact:
    try:
        return ClientContact.model_validate(data or {})
    except ValidationError as e:
        details = [err["msg"].removeprefix("Value error, ") for err in e.errors()]
        raise HTTPException(
            status_code=400,
            detail={"error": "Invalid client data", "details": details},
        )


def _unavailable(e: CollaboratorError) -> HTTPException:
    return HTTPException(
        status_code=503,
        detail={"error": str(e), "retryable": e.retryable},
    )


def _session_view(session: WizardSession) -> dict:
    state = session.state
    current = session.current_category
    return {
        "sessionId": session.session_id,
        "productType": state.product_type,
        "status": state.status.value,
        "currentStep": state.current_step,
        "totalSteps": state.total_steps,
        "currentCategory": current.name if current else None,
        "onSummaryStep": session.on_summary_step,
        "stepComplete": session.is_step_complete(),
        "steps": [c.model_dump(by_alias=True) for c in state.visible_categories],
        "selections": state.selections,
        "errorsByStep": state.errors_by_step,
    }


def _open_session(
    session_id: str,
    backend: InMemorySavePointBackend,
    repo: CategoryRepository,
    store: OrderRequestStore,
    product_type: Optional[str] = None,
) -> WizardSession:
    session = WizardSession(
        repo, store, SavePointStore(backend, namespace=session_id), session_id=session_id
    )
    if not session.restore(product_type):
        raise HTTPException(status_code=404, detail="Configurator session not found or expired")
    return session


# ── Catalog / order requests ─────────────────────────────────────────────────

@router.get("/options")
async def get_options(
    productType: Optional[str] = Query(None),
    repo: CategoryRepository = Depends(get_category_repository),
):
    """Option categories (with available options) for a product type, in step order."""
    product_type = _check_product_type(productType)
    try:
        product = await repo.get_active_product_type(product_type)
        categories = await repo.get_categories(product_type)
    except ProductTypeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CollaboratorError as e:
        raise _unavailable(e)

    return {
        "productType": product.name,
        "productDisplayName": product.display_name,
        "categories": [c.model_dump(by_alias=True) for c in categories],
    }


@router.post("/submit")
async def submit_configuration(
    req: SubmitRequest,
    store: OrderRequestStore = Depends(get_order_store),
):
    """
    Validate and persist a complete configuration as an order request.

    400 — missing fields, bad product type or client data.
    422 — configuration rule violations (full list in ``details``).
    """
    if not req.productType or req.configurationData is None or req.clientData is None:
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: productType, configurationData, and clientData are required",
        )
    product_type = _check_product_type(req.productType)
    contact = _client_contact(req.clientData)

    config = req.configurationData
    errors = []
    if config.get("productType") != product_type:
        errors.append("Product type mismatch in configuration data")
    selections = config.get("selections")
    if not isinstance(selections, dict):
        errors.append("Configuration selections are required")
    else:
        errors.extend(validate_complete_configuration(selections, product_type).errors)
    if errors:
        raise HTTPException(
            status_code=422,
            detail={"error": "Invalid configuration data", "details": errors},
        )

    notes = req.notes or config.get("notes")
    try:
        receipt = await store.submit(product_type, selections, contact.model_dump(), notes)
    except ProductTypeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CollaboratorError as e:
        raise _unavailable(e)

    return {
        "success": True,
        "orderRequestId": receipt["id"],
        "message": _SUBMITTED_MESSAGE,
        "estimatedResponseTime": ESTIMATED_RESPONSE_TIME,
    }


@router.get("/request/{order_request_id}")
async def get_order_request(
    order_request_id: str,
    store: OrderRequestStore = Depends(get_order_store),
):
    try:
        snapshot = await store.get_by_id(order_request_id)
    except CollaboratorError as e:
        raise _unavailable(e)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Order request not found")
    return snapshot


# ── Wizard sessions ──────────────────────────────────────────────────────────

@router.post("/sessions", status_code=201)
async def start_session(
    req: StartSessionRequest,
    repo: CategoryRepository = Depends(get_category_repository),
    store: OrderRequestStore = Depends(get_order_store),
    backend: InMemorySavePointBackend = Depends(get_savepoint_backend),
):
    product_type = _check_product_type(req.productType)
    session_id = str(uuid.uuid4())
    session = WizardSession(
        repo, store, SavePointStore(backend, namespace=session_id), session_id=session_id
    )
    try:
        await session.initialize(product_type)
    except ProductTypeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CollaboratorError as e:
        raise _unavailable(e)
    return _session_view(session)


@router.get("/sessions/{session_id}")
async def get_session(
    session_id: str,
    productType: Optional[str] = Query(None),
    repo: CategoryRepository = Depends(get_category_repository),
    store: OrderRequestStore = Depends(get_order_store),
    backend: InMemorySavePointBackend = Depends(get_savepoint_backend),
):
    """Resume a session; with ``productType`` a session of another type is discarded (404)."""
    product_type = _check_product_type(productType) if productType is not None else None
    return _session_view(_open_session(session_id, backend, repo, store, product_type))


@router.put("/sessions/{session_id}/selections/{category}")
async def update_selection(
    session_id: str,
    category: str,
    req: SelectionUpdateRequest,
    repo: CategoryRepository = Depends(get_category_repository),
    store: OrderRequestStore = Depends(get_order_store),
    backend: InMemorySavePointBackend = Depends(get_savepoint_backend),
):
    session = _open_session(session_id, backend, repo, store)
    try:
        session.update_selection(category, req.value)
    except InvalidSelectionError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _session_view(session)


@router.post("/sessions/{session_id}/options/{category}")
async def pick_option(
    session_id: str,
    category: str,
    req: OptionPickRequest,
    repo: CategoryRepository = Depends(get_category_repository),
    store: OrderRequestStore = Depends(get_order_store),
    backend: InMemorySavePointBackend = Depends(get_savepoint_backend),
):
    session = _open_session(session_id, backend, repo, store)
    try:
        session.select_option(category, req.optionId)
    except InvalidSelectionError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _session_view(session)


@router.post("/sessions/{session_id}/navigate")
async def navigate(
    session_id: str,
    req: NavigateRequest,
    repo: CategoryRepository = Depends(get_category_repository),
    store: OrderRequestStore = Depends(get_order_store),
    backend: InMemorySavePointBackend = Depends(get_savepoint_backend),
):
    session = _open_session(session_id, backend, repo, store)
    moved = session.navigate_to(req.step)
    return {**_session_view(session), "moved": moved}


@router.post("/sessions/{session_id}/next")
async def next_step(
    session_id: str,
    repo: CategoryRepository = Depends(get_category_repository),
    store: OrderRequestStore = Depends(get_order_store),
    backend: InMemorySavePointBackend = Depends(get_savepoint_backend),
):
    session = _open_session(session_id, backend, repo, store)
    moved = session.next_step()
    return {**_session_view(session), "moved": moved}


@router.post("/sessions/{session_id}/back")
async def previous_step(
    session_id: str,
    repo: CategoryRepository = Depends(get_category_repository),
    store: OrderRequestStore = Depends(get_order_store),
    backend: InMemorySavePointBackend = Depends(get_savepoint_backend),
):
    session = _open_session(session_id, backend, repo, store)
    moved = session.previous_step()
    return {**_session_view(session), "moved": moved}


@router.get("/sessions/{session_id}/summary")
async def session_summary(
    session_id: str,
    repo: CategoryRepository = Depends(get_category_repository),
    store: OrderRequestStore = Depends(get_order_store),
    backend: InMemorySavePointBackend = Depends(get_savepoint_backend),
):
    session = _open_session(session_id, backend, repo, store)
    return session.summary()


@router.post("/sessions/{session_id}/submit")
async def submit_session(
    session_id: str,
    req: SessionSubmitRequest,
    repo: CategoryRepository = Depends(get_category_repository),
    store: OrderRequestStore = Depends(get_order_store),
    backend: InMemorySavePointBackend = Depends(get_savepoint_backend),
):
    session = _open_session(session_id, backend, repo, store)
    contact = _client_contact(req.clientData)
    try:
        result = await session.submit(contact, req.notes)
    except ProductTypeNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CollaboratorError as e:
        raise _unavailable(e)

    if not result.submitted:
        raise HTTPException(
            status_code=422,
            detail={"error": "Invalid configuration data", "details": result.errors},
        )
    return {
        "success": True,
        "orderRequestId": result.order_request_id,
        "message": _SUBMITTED_MESSAGE,
        "estimatedResponseTime": ESTIMATED_RESPONSE_TIME,
    }


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    backend: InMemorySavePointBackend = Depends(get_savepoint_backend),
):
    SavePointStore(backend, namespace=session_id).clear()
    return Response(status_code=204)
