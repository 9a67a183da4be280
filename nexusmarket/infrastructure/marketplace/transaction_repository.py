"""
Adapter: Transaction log.

Implements TransactionRepository port. Insert-only.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from nexusmarket.domain.marketplace.entities import Transaction
from nexusmarket.domain.marketplace.ports import TransactionRepository
from nexusmarket.infrastructure.marketplace.orm_models import TransactionModel


class SqlAlchemyTransactionRepository(TransactionRepository):
    """SQLAlchemy implementation of the append-only transaction log."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def append(self, transaction: Transaction) -> None:
        self._session.add(TransactionModel.from_entity(transaction))
        self._session.flush()

    def list_all(self) -> list[Transaction]:
        stmt = select(TransactionModel).order_by(TransactionModel.seq.desc())
        return [model.to_entity() for model in self._session.execute(stmt).scalars()]
