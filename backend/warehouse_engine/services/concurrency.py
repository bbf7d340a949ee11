# Overview: Service-layer operations for concurrency; transaction retry and row locking helpers.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1, timeout_seconds: float | None = None):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, lock timeouts), StaleDataError
    (optimistic locking conflicts) and IntegrityError (a concurrent writer
    inserted the same idempotency key first; the retry finds that row and
    replays). Every failed attempt is rolled back in full.

    No new attempt starts once timeout_seconds (default
    TRANSACTION_TIMEOUT_SECONDS) have passed since the first one; the last
    error is raised instead.
    """
    if timeout_seconds is None:
        timeout_seconds = current_app.config["TRANSACTION_TIMEOUT_SECONDS"]
    deadline = time.monotonic() + timeout_seconds

    for attempt in range(attempts):
        try:
            return func()
        except (OperationalError, StaleDataError, IntegrityError):
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            delay = backoff_base * (2 ** attempt)
            if time.monotonic() + delay >= deadline:
                current_app.logger.warning(
                    "Transaction retry budget of %ss exhausted after %s attempt(s)", timeout_seconds, attempt + 1
                )
                raise
            time.sleep(delay)
        except Exception:
            db.session.rollback()
            raise
