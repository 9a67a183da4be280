"""
Adapter: Trade request ledger.

Implements TradeRequestRepository port on top of a SQLAlchemy session.
Requests are never deleted; only status and resolved_at change.
"""

from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from nexusmarket.domain.marketplace.entities import TradeRequest
from nexusmarket.domain.marketplace.errors import NotFoundError
from nexusmarket.domain.marketplace.ports import TradeRequestRepository
from nexusmarket.infrastructure.marketplace.orm_models import TradeRequestModel


class SqlAlchemyTradeRequestRepository(TradeRequestRepository):
    """SQLAlchemy implementation of the trade request ledger."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _load(self, request_id: str, for_update: bool = False) -> Optional[TradeRequestModel]:
        stmt = select(TradeRequestModel).where(TradeRequestModel.id == request_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self._session.execute(stmt).scalar_one_or_none()

    def add(self, request: TradeRequest) -> None:
        self._session.add(TradeRequestModel.from_entity(request))
        self._session.flush()

    def get(self, request_id: str, for_update: bool = False) -> Optional[TradeRequest]:
        model = self._load(request_id, for_update)
        return model.to_entity() if model else None

    def list_for_identity(self, identity_id: str) -> list[TradeRequest]:
        stmt = (
            select(TradeRequestModel)
            .where(
                or_(
                    TradeRequestModel.buyer_id == identity_id,
                    TradeRequestModel.seller_id == identity_id,
                )
            )
            .order_by(TradeRequestModel.seq.desc())
        )
        return [model.to_entity() for model in self._session.execute(stmt).scalars()]

    def save(self, request: TradeRequest) -> None:
        """Persist the status change of an existing request.

        Raises:
            NotFoundError: If the request does not exist.
        """
        model = self._load(request.id)
        if model is None:
            raise NotFoundError("TradeRequest", request.id)
        model.status = request.status.value
        model.resolved_at = request.resolved_at
        self._session.flush()
