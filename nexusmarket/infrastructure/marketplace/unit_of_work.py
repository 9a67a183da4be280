"""
Adapter: SQLAlchemy unit of work.

Implements the UnitOfWork port. One instance owns one session (one
database transaction) per `with` block; every repository it exposes
writes through that session, so commit publishes all of their changes
together and anything short of commit publishes none of them.

An in-memory SQLite engine (StaticPool) hands the same DBAPI connection
to every session. Units of work on such an engine run one at a time,
process-wide, so no session sees or rolls back another's pending writes.
"""

import logging
import threading
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from nexusmarket.domain.marketplace.ports import UnitOfWork
from nexusmarket.infrastructure.marketplace.identity_repository import (
    SqlAlchemyIdentityRepository,
)
from nexusmarket.infrastructure.marketplace.item_repository import SqlAlchemyItemRepository
from nexusmarket.infrastructure.marketplace.trade_request_repository import (
    SqlAlchemyTradeRequestRepository,
)
from nexusmarket.infrastructure.marketplace.transaction_repository import (
    SqlAlchemyTransactionRepository,
)

logger = logging.getLogger(__name__)

_shared_connection_lock = threading.RLock()


def _uses_shared_connection(session: Session) -> bool:
    return isinstance(session.get_bind().pool, StaticPool)


class SqlAlchemyUnitOfWork(UnitOfWork):
    """Unit of work backed by a single SQLAlchemy session."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._session: Optional[Session] = None
        self._serialized = False

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        if self._session is not None:
            raise RuntimeError("Unit of work is already active")
        session = self._session_factory()
        if _uses_shared_connection(session):
            _shared_connection_lock.acquire()
            self._serialized = True
        self._session = session
        self.identities = SqlAlchemyIdentityRepository(session)
        self.items = SqlAlchemyItemRepository(session)
        self.trade_requests = SqlAlchemyTradeRequestRepository(session)
        self.transactions = SqlAlchemyTransactionRepository(session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            self._session.close()
            self._session = None
            if self._serialized:
                self._serialized = False
                _shared_connection_lock.release()

    def commit(self) -> None:
        self._active_session().commit()

    def rollback(self) -> None:
        session = self._active_session()
        if session.in_transaction():
            logger.debug("Discarding uncommitted unit of work")
        session.rollback()

    def _active_session(self) -> Session:
        if self._session is None:
            raise RuntimeError("Unit of work used outside of a `with` block")
        return self._session
