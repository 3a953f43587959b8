"""
Currency API

Selector options and on-demand conversion through the rate cache.
"""

import logging

from fastapi import APIRouter, Depends, Query

from invoicely.api.deps import get_converter
from invoicely.models.requests import ConvertRequest
from invoicely.services.currency import get_currency_options, validate_currency_code
from invoicely.services.errors import ValidationFailedError
from invoicely.services.exchange_rates import CurrencyConverter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/currency", tags=["currency"])


@router.get("/options")
async def currency_options():
    return {"currencies": get_currency_options()}


@router.get("/convert")
async def convert_query(
    from_currency: str = Query(..., alias="from"),
    to_currency: str = Query(..., alias="to"),
    amount: float = Query(...),
    converter: CurrencyConverter = Depends(get_converter),
):
    for field, code in (("from", from_currency), ("to", to_currency)):
        if not validate_currency_code(code):
            raise ValidationFailedError(field, f"Unsupported currency: {code}")
    if amount < 0:
        raise ValidationFailedError("amount", "Amount must be non-negative")

    rate = await converter.get_exchange_rate(from_currency, to_currency)
    return {
        "amount": amount,
        "from": from_currency.upper(),
        "to": to_currency.upper(),
        "rate": rate,
        "converted": await converter.convert_currency(amount, from_currency, to_currency),
    }


@router.post("/convert")
async def convert_body(
    request: ConvertRequest,
    converter: CurrencyConverter = Depends(get_converter),
):
    if request.amounts is not None:
        total = await converter.convert_multiple_currencies(request.amounts, request.to_currency)
        return {"to": request.to_currency, "total": total, "count": len(request.amounts)}

    rate = await converter.get_exchange_rate(request.from_currency, request.to_currency)
    return {
        "amount": request.amount,
        "from": request.from_currency,
        "to": request.to_currency,
        "rate": rate,
        "converted": await converter.convert_currency(
            request.amount, request.from_currency, request.to_currency
        ),
    }
