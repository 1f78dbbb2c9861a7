"""Unit-of-work coordinator over SQLAlchemy sessions."""

import threading
from typing import Callable, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from orderflow.core.config import settings
from orderflow.core.deadline import Deadline
from orderflow.core.logging import get_logger
from orderflow.db.repositories import build_repositories
from orderflow.domain.errors import DeadlineExceeded, DomainError, LockTimeout, StoreUnavailable
from orderflow.domain.repositories import TransactionalRepositories, TransactionManager

logger = get_logger(__name__)

T = TypeVar("T")

# lock_not_available, query_canceled
_LOCK_SQLSTATES = {"55P03", "57014"}

RepositoriesFactory = Callable[[Session, Deadline | None], TransactionalRepositories]


class SqlTransactionManager(TransactionManager):
    """Runs a unit of work in one database transaction.

    A new session, and a new set of repositories bound to it, is created for
    every call. The session is committed only when the work returns.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        repositories_factory: RepositoriesFactory = build_repositories,
        lock_timeout_ms: int = settings.DB_LOCK_TIMEOUT_MS,
    ):
        self.session_factory = session_factory
        self.repositories_factory = repositories_factory
        self.lock_timeout_ms = lock_timeout_ms
        self._local = threading.local()

    def with_transaction(
        self,
        work: Callable[[TransactionalRepositories], T],
        deadline: Deadline | None = None,
    ) -> T:
        if getattr(self._local, "active", False):
            raise RuntimeError("nested transactions are not supported")
        if deadline is not None:
            deadline.check()

        self._local.active = True
        session = self.session_factory()
        try:
            with session.begin():
                self._apply_lock_timeout(session, deadline)
                repos = self.repositories_factory(session, deadline)
                result = work(repos)
                if deadline is not None:
                    deadline.check()
            return result
        except DomainError as exc:
            logger.debug("transaction rolled back", code=exc.code)
            raise
        except OperationalError as exc:
            raise self._translate(exc, deadline) from exc
        except DBAPIError as exc:
            logger.error("store error, transaction rolled back", error=str(exc.orig))
            raise StoreUnavailable() from exc
        finally:
            session.close()
            self._local.active = False

    def _apply_lock_timeout(self, session: Session, deadline: Deadline | None) -> None:
        if session.get_bind().dialect.name != "postgresql":
            return
        timeout_ms = self.lock_timeout_ms
        remaining = deadline.remaining() if deadline is not None else None
        if remaining is not None:
            timeout_ms = min(timeout_ms, int(remaining * 1000))
        # 0 disables the timeout in PostgreSQL
        timeout_ms = max(1, timeout_ms)
        session.execute(
            text("SELECT set_config('lock_timeout', :value, true)"),
            {"value": f"{timeout_ms}ms"},
        )

    def _translate(self, exc: OperationalError, deadline: Deadline | None) -> DomainError:
        sqlstate = getattr(exc.orig, "sqlstate", None)
        message = str(exc.orig).lower()
        if sqlstate in _LOCK_SQLSTATES or "database is locked" in message:
            if deadline is not None and deadline.expired():
                logger.warning("deadline exceeded waiting for lock")
                return DeadlineExceeded()
            logger.warning("lock wait timed out", sqlstate=sqlstate)
            return LockTimeout()
        logger.error("store unavailable", error=str(exc.orig))
        return StoreUnavailable()
