"""
Invoicely Database

Single source of truth for users, company profiles, clients, invoices and
invoice line items.
"""
from __future__ import annotations

import logging
import math
import os
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from invoicely.core import settings

try:
    import psycopg
    from psycopg.rows import dict_row
    HAS_POSTGRES = True
except ImportError:  # pragma: no cover
    psycopg = None
    dict_row = None
    HAS_POSTGRES = False

logger = logging.getLogger(__name__)

INVOICE_COLUMNS = (
    "id, number, status, issue_date, due_date, currency, subtotal, tax_rate, tax_amount, "
    "total, notes, template_id, user_id, company_id, client_id, created_at, updated_at"
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class InvoicelyDB:
    def __init__(self, db_path: str = "invoicely.db", dsn: Optional[str] = None):
        self.dsn = dsn if dsn is not None else settings.DATABASE_URL
        self.db_path = db_path
        normalized = (self.dsn or "").strip().lower()
        self.use_postgres = bool(
            HAS_POSTGRES
            and normalized
            and (normalized.startswith("postgres://") or normalized.startswith("postgresql://"))
        )
        self._initialized = False

    def _sqlite_connection(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def connect(self):
        if self.use_postgres:
            conn = psycopg.connect(self.dsn, row_factory=dict_row)
        else:
            conn = self._sqlite_connection()
        try:
            yield conn
        finally:
            conn.close()

    def _prepare_sql(self, sql: str) -> str:
        if self.use_postgres:
            return sql.replace("?", "%s")
        return sql

    def _fetchone(self, sql: str, params: Iterable[Any] = ()) -> Optional[Dict[str, Any]]:
        with self.connect() as conn:
            cur = conn.cursor()
            cur.execute(self._prepare_sql(sql), tuple(params))
            row = cur.fetchone()
        return dict(row) if row else None

    def _fetchall(self, sql: str, params: Iterable[Any] = ()) -> List[Dict[str, Any]]:
        with self.connect() as conn:
            cur = conn.cursor()
            cur.execute(self._prepare_sql(sql), tuple(params))
            rows = cur.fetchall()
        return [dict(row) for row in rows]

    def _execute(self, sql: str, params: Iterable[Any] = ()) -> int:
        with self.connect() as conn:
            cur = conn.cursor()
            cur.execute(self._prepare_sql(sql), tuple(params))
            conn.commit()
            return cur.rowcount

    def _count(self, sql: str, params: Iterable[Any] = ()) -> int:
        row = self._fetchone(sql, params)
        return int(row["n"]) if row else 0

    def initialize(self) -> None:
        if self._initialized:
            return
        with self.connect() as conn:
            cur = conn.cursor()

            cur.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    name TEXT,
                    password_hash TEXT NOT NULL,
                    created_at TEXT,
                    updated_at TEXT
                )
            """)

            cur.execute("""
                CREATE TABLE IF NOT EXISTS companies (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL UNIQUE,
                    name TEXT NOT NULL,
                    email TEXT,
                    phone TEXT,
                    address TEXT,
                    website TEXT,
                    logo TEXT,
                    default_currency TEXT DEFAULT 'USD',
                    created_at TEXT,
                    updated_at TEXT
                )
            """)

            cur.execute("""
                CREATE TABLE IF NOT EXISTS clients (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    email TEXT,
                    phone TEXT,
                    address TEXT,
                    created_at TEXT,
                    updated_at TEXT
                )
            """)

            cur.execute("""
                CREATE TABLE IF NOT EXISTS invoices (
                    id TEXT PRIMARY KEY,
                    number TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'DRAFT',
                    issue_date TEXT NOT NULL,
                    due_date TEXT NOT NULL,
                    currency TEXT DEFAULT 'USD',
                    subtotal REAL DEFAULT 0,
                    tax_rate REAL DEFAULT 0,
                    tax_amount REAL DEFAULT 0,
                    total REAL DEFAULT 0,
                    notes TEXT,
                    template_id TEXT,
                    user_id TEXT NOT NULL,
                    company_id TEXT NOT NULL,
                    client_id TEXT NOT NULL,
                    created_at TEXT,
                    updated_at TEXT
                )
            """)

            cur.execute("""
                CREATE TABLE IF NOT EXISTS invoice_items (
                    id TEXT PRIMARY KEY,
                    invoice_id TEXT NOT NULL,
                    position INTEGER DEFAULT 0,
                    description TEXT NOT NULL,
                    quantity REAL DEFAULT 0,
                    unit_price REAL DEFAULT 0,
                    amount REAL DEFAULT 0
                )
            """)

            cur.execute("CREATE INDEX IF NOT EXISTS idx_clients_user ON clients(user_id)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_invoices_user_created ON invoices(user_id, created_at)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_invoices_user_status ON invoices(user_id, status)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_invoice_items_invoice ON invoice_items(invoice_id)")

            conn.commit()

        self._initialized = True

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def create_user(self, email: str, password_hash: str, name: Optional[str] = None) -> Dict[str, Any]:
        self.initialize()
        now = _now()
        user_id = f"USR-{uuid.uuid4().hex}"
        self._execute(
            """
            INSERT INTO users (id, email, name, password_hash, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (user_id, email.strip().lower(), name, password_hash, now, now),
        )
        return self.get_user(user_id)

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        self.initialize()
        return self._fetchone("SELECT * FROM users WHERE id = ?", (user_id,))

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        self.initialize()
        return self._fetchone("SELECT * FROM users WHERE email = ?", (email.strip().lower(),))

    # ------------------------------------------------------------------
    # Company profile
    # ------------------------------------------------------------------

    def find_company_by_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        self.initialize()
        return self._fetchone("SELECT * FROM companies WHERE user_id = ?", (user_id,))

    def upsert_company(self, user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.initialize()
        now = _now()
        fields = ("name", "email", "phone", "address", "website", "logo", "default_currency")
        existing = self.find_company_by_user(user_id)
        if existing:
            updates = {key: payload.get(key) for key in fields if key in payload}
            if updates:
                updates["updated_at"] = now
                set_clause = ", ".join(f"{key} = ?" for key in updates)
                self._execute(
                    f"UPDATE companies SET {set_clause} WHERE user_id = ?",
                    (*updates.values(), user_id),
                )
        else:
            self._execute(
                """
                INSERT INTO companies
                (id, user_id, name, email, phone, address, website, logo, default_currency, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    f"CMP-{uuid.uuid4().hex}",
                    user_id,
                    payload.get("name"),
                    payload.get("email"),
                    payload.get("phone"),
                    payload.get("address"),
                    payload.get("website"),
                    payload.get("logo"),
                    payload.get("default_currency") or settings.DEFAULT_CURRENCY,
                    now,
                    now,
                ),
            )
        return self.find_company_by_user(user_id)

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------

    def list_clients(self, user_id: str) -> List[Dict[str, Any]]:
        self.initialize()
        return self._fetchall(
            """
            SELECT c.*, (SELECT COUNT(*) FROM invoices i WHERE i.client_id = c.id) AS invoice_count
            FROM clients c WHERE c.user_id = ? ORDER BY c.created_at DESC
            """,
            (user_id,),
        )

    def find_client(self, user_id: str, client_id: str) -> Optional[Dict[str, Any]]:
        self.initialize()
        return self._fetchone(
            "SELECT * FROM clients WHERE id = ? AND user_id = ?", (client_id, user_id)
        )

    def create_client(self, user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.initialize()
        now = _now()
        client_id = f"CLI-{uuid.uuid4().hex}"
        self._execute(
            """
            INSERT INTO clients (id, user_id, name, email, phone, address, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                client_id,
                user_id,
                payload.get("name"),
                payload.get("email"),
                payload.get("phone"),
                payload.get("address"),
                now,
                now,
            ),
        )
        return self.find_client(user_id, client_id)

    def update_client(self, user_id: str, client_id: str, **kwargs) -> Optional[Dict[str, Any]]:
        self.initialize()
        if kwargs:
            kwargs["updated_at"] = _now()
            set_clause = ", ".join(f"{key} = ?" for key in kwargs)
            self._execute(
                f"UPDATE clients SET {set_clause} WHERE id = ? AND user_id = ?",
                (*kwargs.values(), client_id, user_id),
            )
        return self.find_client(user_id, client_id)

    def delete_client(self, user_id: str, client_id: str) -> bool:
        self.initialize()
        return self._execute(
            "DELETE FROM clients WHERE id = ? AND user_id = ?", (client_id, user_id)
        ) > 0

    def count_client_invoices(self, client_id: str) -> int:
        self.initialize()
        return self._count("SELECT COUNT(*) AS n FROM invoices WHERE client_id = ?", (client_id,))

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------

    def _invoice_filter(
        self,
        user_id: str,
        status: Optional[str],
        search: Optional[str],
    ):
        clauses = ["i.user_id = ?"]
        params: List[Any] = [user_id]
        if status and status.lower() != "all":
            clauses.append("i.status = ?")
            params.append(status.upper())
        if search:
            needle = f"%{search.lower()}%"
            clauses.append(
                "(LOWER(i.number) LIKE ? OR LOWER(c.name) LIKE ? OR LOWER(COALESCE(c.email, '')) LIKE ?)"
            )
            params.extend([needle, needle, needle])
        return " AND ".join(clauses), params

    def list_invoices(
        self,
        user_id: str,
        status: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        """Page through a user's invoices, newest first, with client name/email."""
        self.initialize()
        page = max(1, int(page or 1))
        limit = max(1, min(int(limit or 10), 100))
        where, params = self._invoice_filter(user_id, status, search)

        total = self._count(
            f"SELECT COUNT(*) AS n FROM invoices i LEFT JOIN clients c ON c.id = i.client_id WHERE {where}",
            params,
        )
        rows = self._fetchall(
            f"""
            SELECT i.*, c.name AS client_name, c.email AS client_email
            FROM invoices i LEFT JOIN clients c ON c.id = i.client_id
            WHERE {where}
            ORDER BY i.created_at DESC
            LIMIT ? OFFSET ?
            """,
            (*params, limit, (page - 1) * limit),
        )
        return {
            "invoices": rows,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit),
            },
        }

    def get_invoice(self, user_id: str, invoice_id: str) -> Optional[Dict[str, Any]]:
        """Invoice row with nested client, company and ordered items."""
        self.initialize()
        invoice = self._fetchone(
            "SELECT * FROM invoices WHERE id = ? AND user_id = ?", (invoice_id, user_id)
        )
        if not invoice:
            return None
        invoice["client"] = self._fetchone(
            "SELECT * FROM clients WHERE id = ?", (invoice["client_id"],)
        )
        invoice["company"] = self._fetchone(
            "SELECT * FROM companies WHERE id = ?", (invoice["company_id"],)
        )
        invoice["items"] = self._fetchall(
            "SELECT * FROM invoice_items WHERE invoice_id = ? ORDER BY position",
            (invoice_id,),
        )
        return invoice

    def create_invoice(self, payload: Dict[str, Any], items: List[Dict[str, Any]]) -> Dict[str, Any]:
        self.initialize()
        now = _now()
        invoice_id = payload.get("id") or f"INVC-{uuid.uuid4().hex}"
        created_at = payload.get("created_at") or now
        invoice_sql = self._prepare_sql(f"""
            INSERT INTO invoices ({INVOICE_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)
        item_sql = self._prepare_sql("""
            INSERT INTO invoice_items (id, invoice_id, position, description, quantity, unit_price, amount)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """)
        values = (
            invoice_id,
            payload["number"],
            payload.get("status") or "DRAFT",
            payload["issue_date"],
            payload["due_date"],
            payload.get("currency") or settings.DEFAULT_CURRENCY,
            payload.get("subtotal") or 0,
            payload.get("tax_rate") or 0,
            payload.get("tax_amount") or 0,
            payload.get("total") or 0,
            payload.get("notes"),
            payload.get("template_id") or settings.DEFAULT_TEMPLATE_ID,
            payload["user_id"],
            payload["company_id"],
            payload["client_id"],
            created_at,
            now,
        )
        with self.connect() as conn:
            cur = conn.cursor()
            cur.execute(invoice_sql, values)
            for position, item in enumerate(items):
                cur.execute(
                    item_sql,
                    (
                        f"ITM-{uuid.uuid4().hex}",
                        invoice_id,
                        position,
                        item.get("description"),
                        item.get("quantity") or 0,
                        item.get("unit_price") or 0,
                        item.get("amount") or 0,
                    ),
                )
            conn.commit()
        logger.info("Created invoice %s (%s) for user %s", payload["number"], invoice_id, payload["user_id"])
        return self.get_invoice(payload["user_id"], invoice_id)

    def update_invoice_status(self, user_id: str, invoice_id: str, status: str) -> bool:
        self.initialize()
        return self._execute(
            "UPDATE invoices SET status = ?, updated_at = ? WHERE id = ? AND user_id = ?",
            (status, _now(), invoice_id, user_id),
        ) > 0

    def delete_invoice(self, user_id: str, invoice_id: str) -> bool:
        self.initialize()
        with self.connect() as conn:
            cur = conn.cursor()
            cur.execute(
                self._prepare_sql("SELECT id FROM invoices WHERE id = ? AND user_id = ?"),
                (invoice_id, user_id),
            )
            if not cur.fetchone():
                return False
            cur.execute(self._prepare_sql("DELETE FROM invoice_items WHERE invoice_id = ?"), (invoice_id,))
            cur.execute(self._prepare_sql("DELETE FROM invoices WHERE id = ?"), (invoice_id,))
            conn.commit()
        return True

    def get_last_invoice_number(self, user_id: str) -> Optional[str]:
        self.initialize()
        row = self._fetchone(
            "SELECT number FROM invoices WHERE user_id = ? ORDER BY created_at DESC, number DESC LIMIT 1",
            (user_id,),
        )
        return row["number"] if row else None

    # ------------------------------------------------------------------
    # Dashboard aggregates
    # ------------------------------------------------------------------

    def list_paid_totals(
        self,
        user_id: str,
        start: datetime,
        end: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """(total, currency) of PAID invoices created in [start, end)."""
        self.initialize()
        sql = "SELECT total, currency FROM invoices WHERE user_id = ? AND status = 'PAID' AND created_at >= ?"
        params: List[Any] = [user_id, start.isoformat()]
        if end is not None:
            sql += " AND created_at < ?"
            params.append(end.isoformat())
        return self._fetchall(sql, params)

    def count_invoices(
        self,
        user_id: str,
        start: datetime,
        end: Optional[datetime] = None,
    ) -> int:
        self.initialize()
        sql = "SELECT COUNT(*) AS n FROM invoices WHERE user_id = ? AND created_at >= ?"
        params: List[Any] = [user_id, start.isoformat()]
        if end is not None:
            sql += " AND created_at < ?"
            params.append(end.isoformat())
        return self._count(sql, params)

    def count_by_status(self, user_id: str, statuses: Iterable[str]) -> int:
        self.initialize()
        statuses = list(statuses)
        if not statuses:
            return 0
        placeholders = ", ".join("?" for _ in statuses)
        return self._count(
            f"SELECT COUNT(*) AS n FROM invoices WHERE user_id = ? AND status IN ({placeholders})",
            (user_id, *statuses),
        )

    def list_recent_invoices(self, user_id: str, limit: int = 5) -> List[Dict[str, Any]]:
        self.initialize()
        return self._fetchall(
            """
            SELECT i.*, c.name AS client_name, c.email AS client_email
            FROM invoices i LEFT JOIN clients c ON c.id = i.client_id
            WHERE i.user_id = ?
            ORDER BY i.created_at DESC
            LIMIT ?
            """,
            (user_id, limit),
        )


_DB_INSTANCE: Optional[InvoicelyDB] = None


def get_db() -> InvoicelyDB:
    global _DB_INSTANCE
    if _DB_INSTANCE is None:
        _DB_INSTANCE = InvoicelyDB(db_path=os.getenv("INVOICELY_DB_PATH", settings.DB_PATH))
    return _DB_INSTANCE
