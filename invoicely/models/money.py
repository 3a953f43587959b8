"""Monetary amounts exchanged with the converter."""
from pydantic import Field, field_validator
from invoicely.models.base import InvoicelyModel


class MonetaryAmount(InvoicelyModel):
    """An amount always paired with its currency."""
    amount: float = Field(..., ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, value: str) -> str:
        return value.upper()
