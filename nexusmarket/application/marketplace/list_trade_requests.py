"""
Use case: List the trade requests an identity is party to.

Input: ListTradeRequestsQuery (identity_id)
Output: list[TradeRequestResult], newest first
Side effects: None.
Failure cases: None. An unknown identity yields an empty list.
"""

from collections.abc import Callable

from nexusmarket.application.marketplace.dtos import (
    ListTradeRequestsQuery,
    TradeRequestResult,
)
from nexusmarket.application.marketplace.mappers import to_trade_request_result
from nexusmarket.domain.marketplace.ports import ImageUrlResolver, UnitOfWork


class ListTradeRequestsUseCase:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        image_resolver: ImageUrlResolver,
    ) -> None:
        self._uow_factory = uow_factory
        self._image_resolver = image_resolver

    def execute(self, query: ListTradeRequestsQuery) -> list[TradeRequestResult]:
        with self._uow_factory() as uow:
            requests = uow.trade_requests.list_for_identity(query.identity_id)
        return [to_trade_request_result(request, self._image_resolver) for request in requests]
