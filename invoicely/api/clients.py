"""Clients API: per-user client CRUD."""

import logging

from fastapi import APIRouter, Depends

from invoicely.api.deps import get_database
from invoicely.core.auth import CurrentUser, get_current_user
from invoicely.core.database import InvoicelyDB
from invoicely.models.requests import ClientRequest
from invoicely.services.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.get("")
async def list_clients(
    user: CurrentUser = Depends(get_current_user),
    db: InvoicelyDB = Depends(get_database),
):
    return {"clients": db.list_clients(user.id)}


@router.post("", status_code=201)
async def create_client(
    request: ClientRequest,
    user: CurrentUser = Depends(get_current_user),
    db: InvoicelyDB = Depends(get_database),
):
    return db.create_client(user.id, request.model_dump())


@router.get("/{client_id}")
async def get_client(
    client_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: InvoicelyDB = Depends(get_database),
):
    client = db.find_client(user.id, client_id)
    if not client:
        raise NotFoundError("Client", client_id)
    return client


@router.put("/{client_id}")
async def update_client(
    client_id: str,
    request: ClientRequest,
    user: CurrentUser = Depends(get_current_user),
    db: InvoicelyDB = Depends(get_database),
):
    if not db.find_client(user.id, client_id):
        raise NotFoundError("Client", client_id)
    return db.update_client(user.id, client_id, **request.model_dump())


@router.delete("/{client_id}")
async def delete_client(
    client_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: InvoicelyDB = Depends(get_database),
):
    if not db.find_client(user.id, client_id):
        raise NotFoundError("Client", client_id)
    if db.count_client_invoices(client_id) > 0:
        raise ConflictError("Cannot delete client with existing invoices")
    db.delete_client(user.id, client_id)
    logger.info("Deleted client %s for user %s", client_id, user.id)
    return {"success": True}
