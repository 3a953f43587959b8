"""
Invoice projection used for rendering.

InvoiceData is rebuilt from persisted records on every render request and
is never stored. Numeric fields are typed loosely on purpose: the renderer
coerces whatever arrives (None, NaN, numeric strings) instead of rejecting it.
"""
from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

Number = Union[int, float, str, None]


class InvoiceStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"


@dataclass
class CompanyInfo:
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None


@dataclass
class ClientInfo:
    name: str
    email: Optional[str] = None
    address: Optional[str] = None


@dataclass
class LineItem:
    description: str
    quantity: Number = 0
    unit_price: Number = 0
    amount: Number = 0


@dataclass
class InvoiceData:
    """Read-only rendering input assembled from invoice, client, company and items."""
    number: str
    issue_date: Union[date, datetime]
    due_date: Union[date, datetime]
    company: CompanyInfo
    client: ClientInfo
    items: List[LineItem] = field(default_factory=list)
    currency: str = "USD"
    subtotal: Number = 0
    tax_rate: Number = 0
    tax_amount: Number = 0
    total: Number = 0
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["issue_date"] = self.issue_date.isoformat()
        data["due_date"] = self.due_date.isoformat()
        return data
