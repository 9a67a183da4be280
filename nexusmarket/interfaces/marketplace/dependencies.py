"""
Dependency injection for the marketplace bounded context.

Provides FastAPI dependency functions that wire infrastructure
adapters into use cases via constructor injection.
These are the composition root for the marketplace context.

Tests swap the database by overriding get_uow_factory.
"""

from collections.abc import Callable
from functools import lru_cache

from fastapi import Depends
from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from nexusmarket.application.marketplace.authenticate_identity import (
    AuthenticateIdentityUseCase,
)
from nexusmarket.application.marketplace.create_trade_request import (
    CreateTradeRequestUseCase,
)
from nexusmarket.application.marketplace.get_identity import GetIdentityUseCase
from nexusmarket.application.marketplace.get_item import GetItemUseCase
from nexusmarket.application.marketplace.list_items import ListItemsUseCase
from nexusmarket.application.marketplace.list_trade_requests import (
    ListTradeRequestsUseCase,
)
from nexusmarket.application.marketplace.list_transactions import (
    ListTransactionsUseCase,
)
from nexusmarket.application.marketplace.mint_item import MintItemUseCase
from nexusmarket.application.marketplace.register_identity import (
    RegisterIdentityUseCase,
)
from nexusmarket.application.marketplace.respond_to_trade_request import (
    RespondToTradeRequestUseCase,
)
from nexusmarket.application.marketplace.toggle_saved_item import (
    ToggleSavedItemUseCase,
)
from nexusmarket.application.marketplace.top_up_balance import TopUpBalanceUseCase
from nexusmarket.application.marketplace.update_identity_profile import (
    UpdateIdentityProfileUseCase,
)
from nexusmarket.application.marketplace.update_item_listing import (
    UpdateItemListingUseCase,
)
from nexusmarket.core.config import settings
from nexusmarket.domain.marketplace.ports import UnitOfWork
from nexusmarket.domain.marketplace.settlement import SettlementEngine
from nexusmarket.infrastructure.marketplace.credential_hasher import (
    BcryptCredentialHasher,
)
from nexusmarket.infrastructure.marketplace.database import (
    build_engine,
    build_session_factory,
)
from nexusmarket.infrastructure.marketplace.image_resolver import (
    PrefixImageUrlResolver,
)
from nexusmarket.infrastructure.marketplace.locks import KeyedLockRegistry
from nexusmarket.infrastructure.marketplace.unit_of_work import SqlAlchemyUnitOfWork

# One registry per process so every request serializes on the same keys.
_lock_registry = KeyedLockRegistry()

UowFactory = Callable[[], UnitOfWork]


@lru_cache
def get_db_engine() -> Engine:
    """Build the SQLAlchemy engine from application settings, once."""
    return build_engine(settings.database_url, echo=settings.database_echo)


@lru_cache
def _get_session_factory() -> sessionmaker[Session]:
    return build_session_factory(get_db_engine())


def get_uow_factory() -> UowFactory:
    """Return a callable producing a fresh unit of work per call."""
    session_factory = _get_session_factory()
    return lambda: SqlAlchemyUnitOfWork(session_factory)


def get_lock_manager() -> KeyedLockRegistry:
    return _lock_registry


@lru_cache
def get_credential_hasher() -> BcryptCredentialHasher:
    return BcryptCredentialHasher(rounds=settings.bcrypt_rounds)


@lru_cache
def get_image_resolver() -> PrefixImageUrlResolver:
    return PrefixImageUrlResolver(settings.image_base_url)


@lru_cache
def get_settlement_engine() -> SettlementEngine:
    return SettlementEngine(
        max_images_per_item=settings.max_images_per_item,
        currency_symbol=settings.currency_symbol,
    )


# ── Identities ───────────────────────────────────────────────────────


def get_register_identity_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> RegisterIdentityUseCase:
    """Build RegisterIdentityUseCase with its infrastructure dependencies."""
    return RegisterIdentityUseCase(
        uow_factory=uow_factory,
        hasher=get_credential_hasher(),
        image_resolver=get_image_resolver(),
        starting_balance=settings.starting_balance,
    )


def get_authenticate_identity_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> AuthenticateIdentityUseCase:
    """Build AuthenticateIdentityUseCase with its infrastructure dependencies."""
    return AuthenticateIdentityUseCase(
        uow_factory=uow_factory,
        hasher=get_credential_hasher(),
        image_resolver=get_image_resolver(),
    )


def get_get_identity_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> GetIdentityUseCase:
    """Build GetIdentityUseCase with its infrastructure dependencies."""
    return GetIdentityUseCase(uow_factory=uow_factory, image_resolver=get_image_resolver())


def get_top_up_balance_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> TopUpBalanceUseCase:
    """Build TopUpBalanceUseCase with its infrastructure dependencies."""
    return TopUpBalanceUseCase(
        uow_factory=uow_factory,
        locks=get_lock_manager(),
        image_resolver=get_image_resolver(),
    )


def get_update_identity_profile_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> UpdateIdentityProfileUseCase:
    """Build UpdateIdentityProfileUseCase with its infrastructure dependencies."""
    return UpdateIdentityProfileUseCase(
        uow_factory=uow_factory,
        locks=get_lock_manager(),
        hasher=get_credential_hasher(),
        image_resolver=get_image_resolver(),
    )


# ── Items ────────────────────────────────────────────────────────────


def get_mint_item_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> MintItemUseCase:
    """Build MintItemUseCase with its infrastructure dependencies."""
    return MintItemUseCase(
        uow_factory=uow_factory,
        engine=get_settlement_engine(),
        image_resolver=get_image_resolver(),
    )


def get_list_items_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> ListItemsUseCase:
    """Build ListItemsUseCase with its infrastructure dependencies."""
    return ListItemsUseCase(uow_factory=uow_factory, image_resolver=get_image_resolver())


def get_get_item_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> GetItemUseCase:
    """Build GetItemUseCase with its infrastructure dependencies."""
    return GetItemUseCase(uow_factory=uow_factory, image_resolver=get_image_resolver())


def get_update_item_listing_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> UpdateItemListingUseCase:
    """Build UpdateItemListingUseCase with its infrastructure dependencies."""
    return UpdateItemListingUseCase(
        uow_factory=uow_factory,
        locks=get_lock_manager(),
        image_resolver=get_image_resolver(),
    )


def get_toggle_saved_item_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> ToggleSavedItemUseCase:
    """Build ToggleSavedItemUseCase with its infrastructure dependencies."""
    return ToggleSavedItemUseCase(
        uow_factory=uow_factory,
        locks=get_lock_manager(),
        image_resolver=get_image_resolver(),
    )


# ── Trade requests and transactions ──────────────────────────────────


def get_create_trade_request_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> CreateTradeRequestUseCase:
    """Build CreateTradeRequestUseCase with its infrastructure dependencies."""
    return CreateTradeRequestUseCase(
        uow_factory=uow_factory,
        locks=get_lock_manager(),
        engine=get_settlement_engine(),
        image_resolver=get_image_resolver(),
    )


def get_list_trade_requests_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> ListTradeRequestsUseCase:
    """Build ListTradeRequestsUseCase with its infrastructure dependencies."""
    return ListTradeRequestsUseCase(
        uow_factory=uow_factory, image_resolver=get_image_resolver()
    )


def get_respond_to_trade_request_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> RespondToTradeRequestUseCase:
    """Build RespondToTradeRequestUseCase with its infrastructure dependencies."""
    return RespondToTradeRequestUseCase(
        uow_factory=uow_factory,
        locks=get_lock_manager(),
        engine=get_settlement_engine(),
        image_resolver=get_image_resolver(),
    )


def get_list_transactions_use_case(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> ListTransactionsUseCase:
    """Build ListTransactionsUseCase with its infrastructure dependencies."""
    return ListTransactionsUseCase(uow_factory=uow_factory)
