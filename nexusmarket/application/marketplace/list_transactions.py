"""
Use case: Read the transaction log.

Input: None
Output: list[TransactionResult], newest first
Side effects: None.
Failure cases: None.
"""

from collections.abc import Callable

from nexusmarket.application.marketplace.dtos import TransactionResult
from nexusmarket.application.marketplace.mappers import to_transaction_result
from nexusmarket.domain.marketplace.ports import UnitOfWork


class ListTransactionsUseCase:
    def __init__(self, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self) -> list[TransactionResult]:
        with self._uow_factory() as uow:
            transactions = uow.transactions.list_all()
        return [to_transaction_result(tx) for tx in transactions]
