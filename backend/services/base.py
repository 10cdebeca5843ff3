# backend/services/base.py
import logging
from typing import Callable, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from schemas.common import StoreResult
from services.errors import StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# driver codes for duplicate keys: PostgreSQL SQLSTATE, MySQL errno, SQL Server error numbers
_UNIQUE_SQLSTATE = "23505"
_MYSQL_DUPLICATE = 1062
_MSSQL_DUPLICATE = ("2601", "2627")


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the integrity error comes from a unique or primary key clash."""
    orig = exc.orig
    if getattr(orig, "pgcode", None) == _UNIQUE_SQLSTATE or getattr(orig, "sqlstate", None) == _UNIQUE_SQLSTATE:
        return True
    args = getattr(orig, "args", ()) or ()
    if args and args[0] == _MYSQL_DUPLICATE:
        return True
    text = str(orig)
    if any(code in text for code in _MSSQL_DUPLICATE):
        return True
    # sqlite: "UNIQUE constraint failed: users.username"
    return "UNIQUE constraint failed" in text or "duplicate key" in text.lower()


class TransactionalStore:
    """Runs each operation in its own pooled session and transaction."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _run(
        self,
        operation: str,
        work: Callable[[Session], StoreResult],
        failure_message: str,
        conflict_message: str = "Conflicting record already exists.",
    ) -> StoreResult:
        try:
            with self._session_factory() as db:
                with db.begin():
                    return work(db)
        except StoreError as e:
            logger.warning(f"{operation} rejected ({e.kind}): {e.message}")
            return StoreResult.fail(e.kind, e.message)
        except IntegrityError as e:
            if is_unique_violation(e):
                logger.warning(f"{operation} rolled back on duplicate key: {e.orig}")
                return StoreResult.fail("conflict", conflict_message)
            logger.error(f"{operation} rolled back on integrity error: {e.orig}")
            return StoreResult.fail("storage", failure_message)
        except DBAPIError as e:
            if e.connection_invalidated:
                logger.error(f"{operation}: database connection lost")
                raise
            logger.exception(f"{operation} rolled back")
            return StoreResult.fail("storage", failure_message)
        except SQLAlchemyError:
            logger.exception(f"{operation} rolled back")
            return StoreResult.fail("storage", failure_message)
