# Overview: Unit-of-work helpers: row locks, SQLite write locks and retry on concurrency failures.

from __future__ import annotations

import time

from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; acquire_write_lock covers it there.
    """
    return query.with_for_update()


def acquire_write_lock() -> None:
    """
    Take the database write lock up front on SQLite (BEGIN IMMEDIATE).

    SQLite has no row locks, so concurrent units that read-then-write stock or
    court schedules are serialized here instead. No-op on other dialects and
    when the connection already holds an open transaction.
    """
    if db.engine.dialect.name != "sqlite":
        return
    dbapi_conn = db.session.connection().connection.dbapi_connection
    if getattr(dbapi_conn, "in_transaction", False):
        return
    db.session.execute(text("BEGIN IMMEDIATE"))


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks) and StaleDataError
    (optimistic locking conflicts).
    """
    last_exc = None
    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError) as exc:
            db.session.rollback()
            last_exc = exc
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
    if last_exc:
        raise last_exc


def run_atomic(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Run func as one unit of work: commit on success, roll back on any error.

    Every multi-row mutation in the service layer goes through here, so a
    failure part way through (stock conflict, short payment, overlap) leaves
    no partial writes behind.
    """
    def _op():
        try:
            acquire_write_lock()
            result = func()
            db.session.commit()
            return result
        except Exception:
            db.session.rollback()
            raise

    return run_with_retry(_op, attempts=attempts, backoff_base=backoff_base)
