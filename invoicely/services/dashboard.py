"""
Dashboard Aggregator

Normalizes PAID invoice totals from mixed currencies into one reporting
currency and computes month-over-month deltas. Counts come straight from
the store.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from invoicely.core import settings
from invoicely.core.database import InvoicelyDB
from invoicely.models.money import MonetaryAmount
from invoicely.services.exchange_rates import CurrencyConverter

logger = logging.getLogger(__name__)

RECENT_INVOICE_LIMIT = 5


def percentage_change(current: float, previous: float) -> float:
    """Relative change in percent; 0 when there is no positive baseline."""
    if previous > 0:
        return (current - previous) / previous * 100
    return 0.0


def month_windows(now: datetime) -> Tuple[datetime, datetime]:
    """Start of the current calendar month and of the previous one."""
    current_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if current_start.month == 1:
        previous_start = current_start.replace(year=current_start.year - 1, month=12)
    else:
        previous_start = current_start.replace(month=current_start.month - 1)
    return current_start, previous_start


def reporting_currency(company: Optional[Dict[str, Any]]) -> str:
    if company and company.get("default_currency"):
        return str(company["default_currency"]).upper()
    return settings.DEFAULT_CURRENCY


@dataclass
class RevenueSummary:
    current: float
    previous: float
    change: float
    currency: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current": self.current,
            "previous": self.previous,
            "change": self.change,
            "currency": self.currency,
        }


class DashboardAggregator:
    def __init__(self, converter: CurrencyConverter):
        self.converter = converter

    async def revenue_summary(
        self,
        current: Sequence[MonetaryAmount],
        previous: Sequence[MonetaryAmount],
        target_currency: str,
    ) -> RevenueSummary:
        current_total, previous_total = await asyncio.gather(
            self.converter.convert_multiple_currencies(current, target_currency),
            self.converter.convert_multiple_currencies(previous, target_currency),
        )
        return RevenueSummary(
            current=current_total,
            previous=previous_total,
            change=percentage_change(current_total, previous_total),
            currency=target_currency,
        )


def _amounts(rows: List[Dict[str, Any]]) -> List[MonetaryAmount]:
    return [
        MonetaryAmount(
            amount=float(row.get("total") or 0),
            currency=row.get("currency") or settings.DEFAULT_CURRENCY,
        )
        for row in rows
    ]


def _recent_invoice(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "number": row.get("number") or f"INV-{row['id'][-6:]}",
        "client": {
            "name": row.get("client_name") or "Unknown Client",
            "email": row.get("client_email"),
        },
        "status": row.get("status"),
        "total": float(row.get("total") or 0),
        "currency": row.get("currency") or settings.DEFAULT_CURRENCY,
        "due_date": row.get("due_date"),
        "created_at": row.get("created_at"),
    }


class DashboardService:
    """Builds the dashboard payload for one user."""

    def __init__(
        self,
        db: InvoicelyDB,
        aggregator: DashboardAggregator,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db
        self.aggregator = aggregator
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def get_dashboard(self, user_id: str) -> Dict[str, Any]:
        current_start, previous_start = month_windows(self._clock())
        currency = reporting_currency(self.db.find_company_by_user(user_id))

        revenue = await self.aggregator.revenue_summary(
            _amounts(self.db.list_paid_totals(user_id, current_start)),
            _amounts(self.db.list_paid_totals(user_id, previous_start, current_start)),
            currency,
        )

        sent_current = self.db.count_invoices(user_id, current_start)
        sent_previous = self.db.count_invoices(user_id, previous_start, current_start)

        logger.debug(
            "Dashboard for %s: revenue %.2f %s (%+.1f%%)",
            user_id, revenue.current, currency, revenue.change,
        )

        return {
            "metrics": {
                "total_revenue": revenue.to_dict(),
                "invoices_sent": {
                    "current": sent_current,
                    "change": percentage_change(sent_current, sent_previous),
                },
                "pending_invoices": {
                    "current": self.db.count_by_status(user_id, ["PENDING", "OVERDUE"]),
                    "overdue": self.db.count_by_status(user_id, ["OVERDUE"]),
                },
            },
            "recent_invoices": [
                _recent_invoice(row)
                for row in self.db.list_recent_invoices(user_id, RECENT_INVOICE_LIMIT)
            ],
        }
