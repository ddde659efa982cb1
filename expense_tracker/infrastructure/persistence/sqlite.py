import json
import logging
import sqlite3
import threading
import uuid
from dataclasses import asdict
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ...domain.errors import DuplicateKey, NotFound
from ...domain.models import (
    Address,
    Category,
    CategoryTotal,
    CategoryType,
    Gender,
    MonthlyTotal,
    OAuthProvider,
    Preferences,
    Transaction,
    TransactionFilter,
    TransactionPage,
    TransactionStatus,
    TransactionType,
    TypeTotals,
    User,
    utcnow,
)
from ...domain.ports.persistence import PersistenceGateway
from ...services.passwords import PasswordHasher

logger = logging.getLogger(__name__)

_OAUTH_COLUMNS = {
    OAuthProvider.GOOGLE: "google_id",
    OAuthProvider.FACEBOOK: "facebook_id",
}

_UPDATABLE_COLUMNS = {
    "email",
    "name",
    "password_hash",
    "google_id",
    "facebook_id",
    "avatar_url",
    "phone",
    "date_of_birth",
    "gender",
    "address",
    "is_email_verified",
    "email_verification_token_hash",
    "email_verification_expires_at",
    "password_reset_token_hash",
    "password_reset_expires_at",
    "failed_login_count",
    "locked_until",
    "is_guest",
    "guest_data",
    "preferences",
    "is_active",
    "last_login_at",
}

_TRANSACTION_COLUMNS = {"type", "amount", "category", "description", "date", "tags", "notes", "status"}

_CATEGORY_COLUMNS = {"name", "icon", "color", "type", "description", "is_active"}


def _to_iso(value: Optional[datetime]) -> Optional[str]:
    # Fixed-width UTC strings so that SQL string comparison orders timestamps.
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _from_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _to_column(key: str, value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, datetime):
        return _to_iso(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Preferences):
        return json.dumps(value.to_dict())
    if isinstance(value, Address):
        return json.dumps(asdict(value))
    if isinstance(value, list):
        return json.dumps(value, ensure_ascii=False)
    if key == "guest_data":
        return json.dumps(value, default=str, ensure_ascii=False)
    return value


class SQLitePersistence(PersistenceGateway):
    """SQLite-backed implementation of the persistence gateway."""

    def __init__(self, path: Path, password_hasher: Optional[PasswordHasher] = None) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._hasher = password_hasher or PasswordHasher()
        self._initialize()

    def _initialize(self) -> None:
        with self._conn:
            self._conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE COLLATE NOCASE,
                    name TEXT NOT NULL,
                    password_hash TEXT,
                    google_id TEXT UNIQUE,
                    facebook_id TEXT UNIQUE,
                    avatar_url TEXT,
                    phone TEXT,
                    date_of_birth TEXT,
                    gender TEXT NOT NULL DEFAULT 'prefer-not-to-say',
                    address TEXT,
                    is_email_verified INTEGER NOT NULL DEFAULT 0,
                    email_verification_token_hash TEXT,
                    email_verification_expires_at TEXT,
                    password_reset_token_hash TEXT,
                    password_reset_expires_at TEXT,
                    failed_login_count INTEGER NOT NULL DEFAULT 0,
                    locked_until TEXT,
                    is_guest INTEGER NOT NULL DEFAULT 0,
                    guest_data TEXT,
                    preferences TEXT,
                    is_active INTEGER NOT NULL DEFAULT 1,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    last_login_at TEXT
                );

                CREATE INDEX IF NOT EXISTS idx_users_password_reset
                    ON users(password_reset_token_hash);

                CREATE INDEX IF NOT EXISTS idx_users_email_verification
                    ON users(email_verification_token_hash);

                CREATE INDEX IF NOT EXISTS idx_users_created_at
                    ON users(created_at DESC);

                CREATE TABLE IF NOT EXISTS transactions (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL REFERENCES users(id),
                    type TEXT NOT NULL,
                    amount REAL NOT NULL,
                    category TEXT NOT NULL,
                    description TEXT NOT NULL,
                    date TEXT NOT NULL,
                    tags TEXT,
                    notes TEXT,
                    status TEXT NOT NULL DEFAULT 'active',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_transactions_user_date
                    ON transactions(user_id, date DESC);

                CREATE INDEX IF NOT EXISTS idx_transactions_user_type_date
                    ON transactions(user_id, type, date DESC);

                CREATE INDEX IF NOT EXISTS idx_transactions_user_category_date
                    ON transactions(user_id, category, date DESC);

                CREATE TABLE IF NOT EXISTS categories (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL UNIQUE COLLATE NOCASE,
                    icon TEXT NOT NULL,
                    color TEXT NOT NULL,
                    type TEXT NOT NULL,
                    description TEXT,
                    is_default INTEGER NOT NULL DEFAULT 0,
                    is_active INTEGER NOT NULL DEFAULT 1,
                    usage_count INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_categories_type_active
                    ON categories(type, is_active);
                """
            )

    def close(self) -> None:
        self._conn.close()

    # Lookups ----------------------------------------------------------------
    def get_by_id(self, user_id: str) -> Optional[User]:
        return self._fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))

    def find_by_email(self, email: str) -> Optional[User]:
        return self._fetch_one("SELECT * FROM users WHERE email = ?", (email.strip().lower(),))

    def find_by_oauth_id(self, provider: OAuthProvider, provider_id: str) -> Optional[User]:
        column = _OAUTH_COLUMNS[OAuthProvider(provider)]
        return self._fetch_one(f"SELECT * FROM users WHERE {column} = ?", (provider_id,))

    def find_by_password_reset_hash(self, token_hash: str, now: datetime) -> Optional[User]:
        return self._fetch_one(
            "SELECT * FROM users WHERE password_reset_token_hash = ? AND password_reset_expires_at > ?",
            (token_hash, _to_iso(now)),
        )

    def find_by_verification_hash(self, token_hash: str, now: datetime) -> Optional[User]:
        return self._fetch_one(
            "SELECT * FROM users WHERE email_verification_token_hash = ? "
            "AND email_verification_expires_at > ?",
            (token_hash, _to_iso(now)),
        )

    # Writes -----------------------------------------------------------------
    def insert(self, user: User, password: Optional[str] = None) -> User:
        user_id = user.id or str(uuid.uuid4())
        now = utcnow()
        password_hash = self._hasher.hash(password) if password else user.password_hash
        values: Dict[str, Any] = {
            "id": user_id,
            "email": user.email.strip().lower(),
            "name": user.name,
            "password_hash": password_hash,
            "google_id": user.google_id,
            "facebook_id": user.facebook_id,
            "avatar_url": user.avatar_url,
            "phone": user.phone,
            "date_of_birth": user.date_of_birth,
            "gender": user.gender,
            "address": user.address,
            "is_email_verified": user.is_email_verified,
            "email_verification_token_hash": user.email_verification_token_hash,
            "email_verification_expires_at": user.email_verification_expires_at,
            "password_reset_token_hash": user.password_reset_token_hash,
            "password_reset_expires_at": user.password_reset_expires_at,
            "failed_login_count": user.failed_login_count,
            "locked_until": user.locked_until,
            "is_guest": user.is_guest,
            "guest_data": user.guest_data,
            "preferences": user.preferences,
            "is_active": user.is_active,
            "created_at": now,
            "updated_at": now,
            "last_login_at": user.last_login_at,
        }
        self._insert_row("users", values)
        logger.debug("Inserted user %s (%s)", user_id, values["email"])
        return self._require(user_id)

    def update(self, user_id: str, **fields: Any) -> User:
        password = fields.pop("password", None)
        if password is not None:
            fields["password_hash"] = self._hasher.hash(password)
            fields["password_reset_token_hash"] = None
            fields["password_reset_expires_at"] = None
        if fields.get("is_email_verified") is True:
            fields["email_verification_token_hash"] = None
            fields["email_verification_expires_at"] = None
        if "email" in fields and fields["email"]:
            fields["email"] = fields["email"].strip().lower()

        unknown = set(fields) - _UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unknown user fields: {', '.join(sorted(unknown))}")

        fields["updated_at"] = utcnow()
        assignments = ", ".join(f"{column} = ?" for column in fields)
        params = tuple(_to_column(key, value) for key, value in fields.items()) + (user_id,)
        try:
            with self._lock, self._conn:
                cur = self._conn.execute(f"UPDATE users SET {assignments} WHERE id = ?", params)
        except sqlite3.IntegrityError as exc:
            raise DuplicateKey(self._unique_field(exc)) from exc
        if cur.rowcount == 0:
            raise NotFound(f"User {user_id} not found")
        return self._require(user_id)

    def record_failed_login(
        self,
        user_id: str,
        max_attempts: int,
        lock_until: datetime,
        now: datetime,
    ) -> User:
        now_iso = _to_iso(now)
        # A single statement; SQLite evaluates every SET expression against the old row.
        with self._lock, self._conn:
            cur = self._conn.execute(
                """
                UPDATE users SET
                    failed_login_count = CASE
                        WHEN locked_until IS NOT NULL AND locked_until <= :now THEN 1
                        ELSE failed_login_count + 1
                    END,
                    locked_until = CASE
                        WHEN locked_until IS NOT NULL AND locked_until <= :now THEN NULL
                        WHEN failed_login_count + 1 >= :max_attempts AND locked_until IS NULL
                            THEN :lock_until
                        ELSE locked_until
                    END,
                    updated_at = :now
                WHERE id = :user_id
                """,
                {
                    "now": now_iso,
                    "max_attempts": max_attempts,
                    "lock_until": _to_iso(lock_until),
                    "user_id": user_id,
                },
            )
        if cur.rowcount == 0:
            raise NotFound(f"User {user_id} not found")
        return self._require(user_id)

    def reset_login_attempts(self, user_id: str, now: datetime) -> User:
        return self.update(user_id, failed_login_count=0, locked_until=None, last_login_at=now)

    # Transactions -----------------------------------------------------------
    def insert_transaction(self, transaction: Transaction) -> Transaction:
        transaction_id = transaction.id or str(uuid.uuid4())
        now = utcnow()
        values: Dict[str, Any] = {
            "id": transaction_id,
            "user_id": transaction.user_id,
            "type": transaction.type,
            "amount": transaction.amount,
            "category": transaction.category,
            "description": transaction.description,
            "date": transaction.date,
            "tags": list(transaction.tags),
            "notes": transaction.notes,
            "status": transaction.status,
            "created_at": now,
            "updated_at": now,
        }
        self._insert_row("transactions", values)
        created = self.get_transaction(transaction.user_id, transaction_id)
        if created is None:
            raise NotFound("Transaction not found")
        return created

    def get_transaction(self, user_id: str, transaction_id: str) -> Optional[Transaction]:
        rows = self._fetch_rows(
            "SELECT * FROM transactions WHERE id = ? AND user_id = ?", (transaction_id, user_id)
        )
        return self._row_to_transaction(rows[0]) if rows else None

    def list_transactions(
        self, user_id: str, filters: TransactionFilter, page: int, limit: int
    ) -> TransactionPage:
        where, params = self._transaction_where(
            user_id,
            transaction_type=filters.type,
            category=filters.category,
            start_date=filters.start_date,
            end_date=filters.end_date,
        )
        offset = (page - 1) * limit
        with self._lock:
            total = self._conn.execute(f"SELECT COUNT(*) FROM transactions WHERE {where}", params).fetchone()[0]
            rows = self._conn.execute(
                f"SELECT * FROM transactions WHERE {where} "
                "ORDER BY date DESC, created_at DESC LIMIT ? OFFSET ?",
                params + (limit, offset),
            ).fetchall()
        return TransactionPage(
            items=[self._row_to_transaction(row) for row in rows], total=total, page=page, limit=limit
        )

    def update_transaction(self, user_id: str, transaction_id: str, **fields: Any) -> Optional[Transaction]:
        unknown = set(fields) - _TRANSACTION_COLUMNS
        if unknown:
            raise ValueError(f"Unknown transaction fields: {', '.join(sorted(unknown))}")
        if fields:
            fields["updated_at"] = utcnow()
            assignments = ", ".join(f"{column} = ?" for column in fields)
            params = tuple(_to_column(key, value) for key, value in fields.items())
            with self._lock, self._conn:
                self._conn.execute(
                    f"UPDATE transactions SET {assignments} WHERE id = ? AND user_id = ?",
                    params + (transaction_id, user_id),
                )
        return self.get_transaction(user_id, transaction_id)

    def delete_transaction(self, user_id: str, transaction_id: str) -> bool:
        with self._lock, self._conn:
            cur = self._conn.execute(
                "DELETE FROM transactions WHERE id = ? AND user_id = ?", (transaction_id, user_id)
            )
        return cur.rowcount > 0

    def totals_by_type(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
    ) -> Dict[TransactionType, TypeTotals]:
        where, params = self._transaction_where(
            user_id, category=category, start_date=start_date, end_date=end_date
        )
        rows = self._fetch_rows(
            f"SELECT type, SUM(amount) AS total, COUNT(*) AS count, AVG(amount) AS average "
            f"FROM transactions WHERE {where} GROUP BY type",
            params,
        )
        totals = {transaction_type: TypeTotals() for transaction_type in TransactionType}
        for row in rows:
            totals[TransactionType(row["type"])] = TypeTotals(
                total=round(row["total"], 2), count=row["count"], average=round(row["average"], 2)
            )
        return totals

    def totals_by_category(
        self,
        user_id: str,
        transaction_type: TransactionType,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: int = 10,
    ) -> List[CategoryTotal]:
        where, params = self._transaction_where(
            user_id, transaction_type=transaction_type, start_date=start_date, end_date=end_date
        )
        rows = self._fetch_rows(
            f"SELECT category, SUM(amount) AS total, COUNT(*) AS count, AVG(amount) AS average "
            f"FROM transactions WHERE {where} GROUP BY category ORDER BY total DESC, category LIMIT ?",
            params + (limit,),
        )
        return [
            CategoryTotal(
                category=row["category"],
                total=round(row["total"], 2),
                count=row["count"],
                average=round(row["average"], 2),
            )
            for row in rows
        ]

    def monthly_totals(
        self, user_id: str, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> List[MonthlyTotal]:
        where, params = self._transaction_where(user_id, start_date=start_date, end_date=end_date)
        rows = self._fetch_rows(
            f"SELECT substr(date, 1, 7) AS month, type, SUM(amount) AS total, COUNT(*) AS count "
            f"FROM transactions WHERE {where} GROUP BY month, type ORDER BY month, type",
            params,
        )
        monthly = []
        for row in rows:
            year, month = row["month"].split("-")
            monthly.append(
                MonthlyTotal(
                    year=int(year),
                    month=int(month),
                    type=TransactionType(row["type"]),
                    total=round(row["total"], 2),
                    count=row["count"],
                )
            )
        return monthly

    def count_transactions_in_category(self, category: str) -> int:
        with self._lock:
            row = self._conn.execute(
                "SELECT COUNT(*) FROM transactions WHERE category = ? COLLATE NOCASE", (category,)
            ).fetchone()
        return row[0]

    # Categories -------------------------------------------------------------
    def count_categories(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0]

    def insert_category(self, category: Category) -> Category:
        category_id = category.id or str(uuid.uuid4())
        now = utcnow()
        values: Dict[str, Any] = {
            "id": category_id,
            "name": category.name,
            "icon": category.icon,
            "color": category.color,
            "type": category.type,
            "description": category.description,
            "is_default": category.is_default,
            "is_active": category.is_active,
            "usage_count": category.usage_count,
            "created_at": now,
            "updated_at": now,
        }
        self._insert_row("categories", values)
        return self._require_category(category_id)

    def get_category(self, category_id: str) -> Optional[Category]:
        rows = self._fetch_rows("SELECT * FROM categories WHERE id = ?", (category_id,))
        return self._row_to_category(rows[0]) if rows else None

    def find_category_by_name(self, name: str) -> Optional[Category]:
        rows = self._fetch_rows("SELECT * FROM categories WHERE name = ?", (name.strip(),))
        return self._row_to_category(rows[0]) if rows else None

    def list_categories(
        self,
        category_type: Optional[CategoryType] = None,
        active_only: bool = True,
        defaults_only: bool = False,
    ) -> List[Category]:
        clauses: List[str] = []
        params: List[Any] = []
        if active_only:
            clauses.append("is_active = 1")
        if defaults_only:
            clauses.append("is_default = 1")
        if category_type is not None and category_type is not CategoryType.BOTH:
            clauses.append("type IN (?, ?)")
            params.extend([category_type.value, CategoryType.BOTH.value])
        where = " AND ".join(clauses) or "1 = 1"
        rows = self._fetch_rows(
            f"SELECT * FROM categories WHERE {where} ORDER BY is_default DESC, name", tuple(params)
        )
        return [self._row_to_category(row) for row in rows]

    def popular_categories(self, limit: int) -> List[Category]:
        rows = self._fetch_rows(
            "SELECT * FROM categories WHERE is_active = 1 ORDER BY usage_count DESC, name LIMIT ?", (limit,)
        )
        return [self._row_to_category(row) for row in rows]

    def update_category(self, category_id: str, **fields: Any) -> Category:
        unknown = set(fields) - _CATEGORY_COLUMNS
        if unknown:
            raise ValueError(f"Unknown category fields: {', '.join(sorted(unknown))}")
        fields["updated_at"] = utcnow()
        assignments = ", ".join(f"{column} = ?" for column in fields)
        params = tuple(_to_column(key, value) for key, value in fields.items()) + (category_id,)
        try:
            with self._lock, self._conn:
                cur = self._conn.execute(f"UPDATE categories SET {assignments} WHERE id = ?", params)
        except sqlite3.IntegrityError as exc:
            raise DuplicateKey(self._unique_field(exc)) from exc
        if cur.rowcount == 0:
            raise NotFound("Category not found")
        return self._require_category(category_id)

    def delete_category(self, category_id: str) -> None:
        with self._lock, self._conn:
            cur = self._conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
        if cur.rowcount == 0:
            raise NotFound("Category not found")

    def increment_category_usage(self, name: str) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                "UPDATE categories SET usage_count = usage_count + 1 WHERE name = ?", (name.strip(),)
            )

    # Helpers ----------------------------------------------------------------
    def _require(self, user_id: str) -> User:
        user = self.get_by_id(user_id)
        if user is None:
            raise NotFound(f"User {user_id} not found")
        return user

    def _fetch_one(self, query: str, params: tuple) -> Optional[User]:
        with self._lock:
            cur = self._conn.execute(query, params)
            row = cur.fetchone()
        return self._row_to_user(row) if row else None

    def _require_category(self, category_id: str) -> Category:
        category = self.get_category(category_id)
        if category is None:
            raise NotFound("Category not found")
        return category

    def _insert_row(self, table: str, values: Dict[str, Any]) -> None:
        columns = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)
        params = tuple(_to_column(key, value) for key, value in values.items())
        try:
            with self._lock, self._conn:
                self._conn.execute(f"INSERT INTO {table} ({columns}) VALUES ({placeholders})", params)
        except sqlite3.IntegrityError as exc:
            raise DuplicateKey(self._unique_field(exc)) from exc

    def _fetch_rows(self, query: str, params: tuple) -> List[sqlite3.Row]:
        with self._lock:
            return self._conn.execute(query, params).fetchall()

    @staticmethod
    def _transaction_where(
        user_id: str,
        transaction_type: Optional[TransactionType] = None,
        category: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Tuple[str, tuple]:
        clauses = ["user_id = ?"]
        params: List[Any] = [user_id]
        if transaction_type is not None:
            clauses.append("type = ?")
            params.append(TransactionType(transaction_type).value)
        if category:
            clauses.append("category = ? COLLATE NOCASE")
            params.append(category)
        if start_date is not None:
            clauses.append("date >= ?")
            params.append(start_date.isoformat())
        if end_date is not None:
            clauses.append("date <= ?")
            params.append(end_date.isoformat())
        return " AND ".join(clauses), tuple(params)

    @staticmethod
    def _unique_field(exc: sqlite3.IntegrityError) -> str:
        # e.g. "UNIQUE constraint failed: users.email"
        message = str(exc)
        if "UNIQUE constraint failed:" in message:
            return message.rsplit(".", 1)[-1].strip()
        return "unknown"

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        date_of_birth = date.fromisoformat(row["date_of_birth"]) if row["date_of_birth"] else None
        address = Address(**json.loads(row["address"])) if row["address"] else None
        return User(
            id=row["id"],
            email=row["email"],
            name=row["name"],
            password_hash=row["password_hash"],
            google_id=row["google_id"],
            facebook_id=row["facebook_id"],
            avatar_url=row["avatar_url"],
            phone=row["phone"],
            date_of_birth=date_of_birth,
            gender=Gender(row["gender"]),
            address=address,
            is_email_verified=bool(row["is_email_verified"]),
            email_verification_token_hash=row["email_verification_token_hash"],
            email_verification_expires_at=_from_iso(row["email_verification_expires_at"]),
            password_reset_token_hash=row["password_reset_token_hash"],
            password_reset_expires_at=_from_iso(row["password_reset_expires_at"]),
            failed_login_count=row["failed_login_count"],
            locked_until=_from_iso(row["locked_until"]),
            is_guest=bool(row["is_guest"]),
            guest_data=json.loads(row["guest_data"]) if row["guest_data"] else None,
            preferences=Preferences.from_dict(json.loads(row["preferences"]) if row["preferences"] else None),
            is_active=bool(row["is_active"]),
            created_at=_from_iso(row["created_at"]),
            updated_at=_from_iso(row["updated_at"]),
            last_login_at=_from_iso(row["last_login_at"]),
        )

    @staticmethod
    def _row_to_transaction(row: sqlite3.Row) -> Transaction:
        return Transaction(
            id=row["id"],
            user_id=row["user_id"],
            type=TransactionType(row["type"]),
            amount=row["amount"],
            category=row["category"],
            description=row["description"],
            date=date.fromisoformat(row["date"]),
            tags=json.loads(row["tags"]) if row["tags"] else [],
            notes=row["notes"],
            status=TransactionStatus(row["status"]),
            created_at=_from_iso(row["created_at"]),
            updated_at=_from_iso(row["updated_at"]),
        )

    @staticmethod
    def _row_to_category(row: sqlite3.Row) -> Category:
        return Category(
            id=row["id"],
            name=row["name"],
            icon=row["icon"],
            color=row["color"],
            type=CategoryType(row["type"]),
            description=row["description"],
            is_default=bool(row["is_default"]),
            is_active=bool(row["is_active"]),
            usage_count=row["usage_count"],
            created_at=_from_iso(row["created_at"]),
            updated_at=_from_iso(row["updated_at"]),
        )
