"""Company profile API."""

from fastapi import APIRouter, Depends

from invoicely.api.deps import get_database
from invoicely.core.auth import CurrentUser, get_current_user
from invoicely.core.database import InvoicelyDB
from invoicely.models.requests import CompanyRequest

router = APIRouter(prefix="/api/company", tags=["company"])


@router.get("")
async def get_company(
    user: CurrentUser = Depends(get_current_user),
    db: InvoicelyDB = Depends(get_database),
):
    return {"company": db.find_company_by_user(user.id)}


@router.put("")
async def upsert_company(
    request: CompanyRequest,
    user: CurrentUser = Depends(get_current_user),
    db: InvoicelyDB = Depends(get_database),
):
    return {"company": db.upsert_company(user.id, request.model_dump())}
