"""
PostgreSQL repository adapter - Implements AccountRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL.

Consistency Design:
-------------------
1. **Case-insensitive uniqueness**: A unique index on ``lower(email)`` is the
   authoritative duplicate check. ``UniqueViolation`` on insert or email
   update is translated to the domain's ``ConflictError``, so a racing
   pre-check in the domain can never let a duplicate through.

2. **Verification columns**: ``email_verified``, ``verification_code_hash``
   and ``verification_expires_at`` are always written together from the
   domain's verification variant. CHECK constraints reject a verified row
   that still carries a pending code.

3. **Cascading delete**: Authored content is removed before the account row
   inside one transaction, so a failure leaves either everything or nothing.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from psycopg import errors, sql
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from src.domain.exceptions import ConflictError
from src.domain.models import (
    AccountRecord,
    PendingVerification,
    StatEntry,
    UpcomingItem,
    Unverified,
    Verified,
    VerificationStatus,
)

logger = logging.getLogger(__name__)

_SELECT_ACCOUNT = """
    SELECT id, email, credential_hash, email_verified, verification_code_hash,
           verification_expires_at, name, role, location, bio, stats,
           focus_areas, upcoming, created_at
    FROM accounts
"""

# AccountRecord attributes that map 1:1 onto a column
_PLAIN_COLUMNS = {
    "email": "email",
    "credential_hash": "credential_hash",
    "name": "name",
    "role": "role",
    "location": "location",
    "bio": "bio",
}
_JSON_COLUMNS = {"stats", "focus_areas", "upcoming"}

# Author-scoped deletes, in dependency order. Comments on the account's own
# posts go with the posts via ON DELETE CASCADE.
_CONTENT_DELETES = (
    "DELETE FROM blog_comments WHERE author_id = %s",
    "DELETE FROM blog_posts WHERE author_id = %s",
    "DELETE FROM events WHERE author_id = %s",
    "DELETE FROM messages WHERE sender_id = %s OR recipient_id = %s",
)


def _verification_columns(status: VerificationStatus) -> dict[str, Any]:
    if isinstance(status, Verified):
        return {
            "email_verified": True,
            "verification_code_hash": None,
            "verification_expires_at": None,
        }
    if isinstance(status, PendingVerification):
        return {
            "email_verified": False,
            "verification_code_hash": status.code_hash,
            "verification_expires_at": status.expires_at,
        }
    return {
        "email_verified": False,
        "verification_code_hash": None,
        "verification_expires_at": None,
    }


def _json_value(attribute: str, value: Any) -> Jsonb:
    if attribute == "stats":
        return Jsonb([{"label": entry.label, "value": entry.value} for entry in value])
    if attribute == "upcoming":
        return Jsonb([{"title": item.title, "detail": item.detail} for item in value])
    return Jsonb(list(value))


def _row_to_record(row: dict[str, Any]) -> AccountRecord:
    if row["email_verified"]:
        verification: VerificationStatus = Verified()
    elif row["verification_code_hash"]:
        verification = PendingVerification(
            code_hash=row["verification_code_hash"],
            expires_at=row["verification_expires_at"],
        )
    else:
        verification = Unverified()

    return AccountRecord(
        id=row["id"],
        email=row["email"],
        credential_hash=row["credential_hash"],
        verification=verification,
        name=row["name"],
        role=row["role"],
        location=row["location"],
        bio=row["bio"],
        stats=tuple(StatEntry(label=s["label"], value=s["value"]) for s in row["stats"] or []),
        focus_areas=tuple(row["focus_areas"] or []),
        upcoming=tuple(
            UpcomingItem(title=u["title"], detail=u["detail"]) for u in row["upcoming"] or []
        ),
        created_at=row["created_at"],
    )


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def get_by_email(self, email: str) -> AccountRecord | None:
        query = _SELECT_ACCOUNT + " WHERE lower(email) = lower(%s)"
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(query, (email,))
            row = cursor.fetchone()
        return _row_to_record(row) if row is not None else None

    def get_by_id(self, account_id: str) -> AccountRecord | None:
        query = _SELECT_ACCOUNT + " WHERE id = %s"
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(query, (account_id,))
            row = cursor.fetchone()
        return _row_to_record(row) if row is not None else None

    def list_all(self) -> list[AccountRecord]:
        query = _SELECT_ACCOUNT + " ORDER BY created_at, id"
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(query)
            rows = cursor.fetchall()
        return [_row_to_record(row) for row in rows]

    def insert(self, record: AccountRecord) -> None:
        """
        Insert a new account row.

        Raises:
            ConflictError: If the unique index on lower(email) rejects the row
        """
        insert_sql = """
            INSERT INTO accounts (
                id, email, credential_hash, email_verified, verification_code_hash,
                verification_expires_at, name, role, location, bio, stats,
                focus_areas, upcoming, created_at
            ) VALUES (
                %(id)s, %(email)s, %(credential_hash)s, %(email_verified)s,
                %(verification_code_hash)s, %(verification_expires_at)s, %(name)s,
                %(role)s, %(location)s, %(bio)s, %(stats)s, %(focus_areas)s,
                %(upcoming)s, %(created_at)s
            )
        """
        params = {
            "id": record.id,
            "email": record.email,
            "credential_hash": record.credential_hash,
            "name": record.name,
            "role": record.role,
            "location": record.location,
            "bio": record.bio,
            "stats": _json_value("stats", record.stats),
            "focus_areas": _json_value("focus_areas", record.focus_areas),
            "upcoming": _json_value("upcoming", record.upcoming),
            "created_at": record.created_at,
            **_verification_columns(record.verification),
        }

        try:
            with self._pool.connection() as conn:
                conn.execute(insert_sql, params)
                conn.commit()
        except errors.UniqueViolation as e:
            raise ConflictError("An account with this email already exists.") from e

    def update(self, account_id: str, fields: Mapping[str, Any]) -> AccountRecord | None:
        """
        Overwrite the given fields and return the updated record.

        Raises:
            ConflictError: If an email change collides with another account
            ValueError: If a field name is not an updatable attribute
        """
        columns: dict[str, Any] = {}
        for attribute, value in fields.items():
            if attribute == "verification":
                columns.update(_verification_columns(value))
            elif attribute in _JSON_COLUMNS:
                columns[attribute] = _json_value(attribute, value)
            elif attribute in _PLAIN_COLUMNS:
                columns[_PLAIN_COLUMNS[attribute]] = value
            else:
                raise ValueError(f"Unknown account field: {attribute}")

        if not columns:
            return self.get_by_id(account_id)

        assignments = sql.SQL(", ").join(
            sql.SQL("{} = {}").format(sql.Identifier(column), sql.Placeholder(column))
            for column in columns
        )
        update_sql = sql.SQL("UPDATE accounts SET {} WHERE id = {} RETURNING id").format(
            assignments, sql.Placeholder("account_id")
        )

        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(update_sql, {**columns, "account_id": account_id})
                updated = cursor.fetchone()
                conn.commit()
        except errors.UniqueViolation as e:
            raise ConflictError("An account with this email already exists.") from e

        if updated is None:
            return None
        return self.get_by_id(account_id)

    def delete(self, account_id: str) -> bool:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM accounts WHERE id = %s", (account_id,))
            conn.commit()
            return cursor.rowcount == 1

    def delete_with_content(self, account_id: str) -> bool:
        """
        Remove authored content and then the account, atomically.

        Returns:
            True if the account row was removed
        """
        with self._pool.connection() as conn:
            with conn.transaction(), conn.cursor() as cursor:
                for statement in _CONTENT_DELETES:
                    cursor.execute(statement, (account_id,) * statement.count("%s"))
                    if cursor.rowcount:
                        logger.debug(
                            "Removed %d row(s) for account %s: %s",
                            cursor.rowcount,
                            account_id,
                            statement.split()[2],
                        )
                cursor.execute("DELETE FROM accounts WHERE id = %s", (account_id,))
                removed = cursor.rowcount == 1
        return removed


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
