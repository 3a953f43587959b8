"""API request models."""
from datetime import date
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import EmailStr, Field, field_validator, model_validator

from invoicely.models.base import InvoicelyModel
from invoicely.models.invoice import InvoiceStatus
from invoicely.models.money import MonetaryAmount
from invoicely.services.currency import validate_currency_code


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class RegisterRequest(InvoicelyModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: Optional[str] = Field(default=None, max_length=100)


class LoginRequest(InvoicelyModel):
    email: EmailStr
    password: str


class ClientRequest(InvoicelyModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = Field(default=None, max_length=500)

    @field_validator("email", "phone", "address", mode="before")
    @classmethod
    def optional_blank(cls, value):
        return _blank_to_none(value)


class CompanyRequest(InvoicelyModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=50)
    address: Optional[str] = Field(default=None, max_length=500)
    website: Optional[str] = None
    default_currency: str = "USD"

    @field_validator("email", "phone", "address", "website", mode="before")
    @classmethod
    def optional_blank(cls, value):
        return _blank_to_none(value)

    @field_validator("website")
    @classmethod
    def validate_website(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("Invalid website URL")
        return value

    @field_validator("default_currency")
    @classmethod
    def validate_default_currency(cls, value: str) -> str:
        if not validate_currency_code(value):
            raise ValueError(f"Unsupported currency: {value}")
        return value.upper()


class InvoiceItemRequest(InvoicelyModel):
    description: str = Field(..., min_length=1)
    quantity: float = Field(..., ge=0.01)
    unit_price: float = Field(..., ge=0.01)


class InvoiceCreateRequest(InvoicelyModel):
    client_id: str = Field(..., min_length=1)
    issue_date: date
    due_date: date
    items: List[InvoiceItemRequest] = Field(..., min_length=1)
    notes: Optional[str] = None
    tax_rate: float = Field(default=0, ge=0, le=100)
    template_id: Optional[str] = None
    currency: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if not validate_currency_code(value):
            raise ValueError(f"Unsupported currency: {value}")
        return value.upper()


class InvoiceStatusRequest(InvoicelyModel):
    status: InvoiceStatus


class ConvertRequest(InvoicelyModel):
    """Either a single {amount, from_currency} or a batch of amounts, into to_currency."""
    to_currency: str
    amount: Optional[float] = Field(default=None, ge=0)
    from_currency: Optional[str] = None
    amounts: Optional[List[MonetaryAmount]] = None

    @field_validator("to_currency", "from_currency")
    @classmethod
    def validate_code(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if not validate_currency_code(value):
            raise ValueError(f"Unsupported currency: {value}")
        return value.upper()

    @field_validator("amounts")
    @classmethod
    def validate_amount_currencies(cls, value: Optional[List[MonetaryAmount]]):
        for item in value or []:
            if not validate_currency_code(item.currency):
                raise ValueError(f"Unsupported currency: {item.currency}")
        return value

    @model_validator(mode="after")
    def one_shape(self):
        single = self.amount is not None and self.from_currency is not None
        if single == (self.amounts is not None):
            raise ValueError("Provide either amount and from_currency, or amounts")
        return self
