from invoicely.models.base import InvoicelyModel
from invoicely.models.money import MonetaryAmount
from invoicely.models.invoice import ClientInfo, CompanyInfo, InvoiceData, InvoiceStatus, LineItem
from invoicely.models.requests import (
    ClientRequest,
    CompanyRequest,
    ConvertRequest,
    InvoiceCreateRequest,
    InvoiceItemRequest,
    InvoiceStatusRequest,
    LoginRequest,
    RegisterRequest,
)

__all__ = [
    "ClientInfo",
    "ClientRequest",
    "CompanyInfo",
    "CompanyRequest",
    "ConvertRequest",
    "InvoiceCreateRequest",
    "InvoiceData",
    "InvoiceItemRequest",
    "InvoiceStatus",
    "InvoiceStatusRequest",
    "InvoicelyModel",
    "LineItem",
    "LoginRequest",
    "MonetaryAmount",
    "RegisterRequest",
]
