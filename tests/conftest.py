"""
Shared fixtures for the marketplace test suite.

Every test gets its own in-memory SQLite database. Settings are
pinned through environment variables before the application modules
are imported: rate limiting off, cheap bcrypt rounds.
"""

import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from nexusmarket.application.marketplace.create_trade_request import (  # noqa: E402
    CreateTradeRequestUseCase,
)
from nexusmarket.application.marketplace.dtos import (  # noqa: E402
    CreateTradeRequestCommand,
    GetIdentityQuery,
    GetItemQuery,
    MintItemCommand,
    RegisterIdentityCommand,
    RespondToTradeRequestCommand,
)
from nexusmarket.application.marketplace.get_identity import GetIdentityUseCase  # noqa: E402
from nexusmarket.application.marketplace.get_item import GetItemUseCase  # noqa: E402
from nexusmarket.application.marketplace.mint_item import MintItemUseCase  # noqa: E402
from nexusmarket.application.marketplace.register_identity import (  # noqa: E402
    RegisterIdentityUseCase,
)
from nexusmarket.application.marketplace.respond_to_trade_request import (  # noqa: E402
    RespondToTradeRequestUseCase,
)
from nexusmarket.domain.marketplace.settlement import SettlementEngine  # noqa: E402
from nexusmarket.infrastructure.marketplace.credential_hasher import (  # noqa: E402
    BcryptCredentialHasher,
)
from nexusmarket.infrastructure.marketplace.database import (  # noqa: E402
    build_engine,
    build_session_factory,
    init_schema,
)
from nexusmarket.infrastructure.marketplace.image_resolver import (  # noqa: E402
    PrefixImageUrlResolver,
)
from nexusmarket.infrastructure.marketplace.locks import KeyedLockRegistry  # noqa: E402
from nexusmarket.infrastructure.marketplace.unit_of_work import (  # noqa: E402
    SqlAlchemyUnitOfWork,
)
from nexusmarket.interfaces.marketplace.dependencies import get_uow_factory  # noqa: E402
from nexusmarket.main import app  # noqa: E402


class Marketplace:
    """Thin driver over the use cases, for arranging test scenarios."""

    def __init__(self, uow_factory, locks, hasher, resolver, settlement) -> None:
        self.uow_factory = uow_factory
        self.locks = locks
        self.hasher = hasher
        self.resolver = resolver
        self.settlement = settlement

    def register(self, name: str, email: str | None = None, secret: str = "pw"):
        email = email or f"{name.lower()}@example.com"
        use_case = RegisterIdentityUseCase(
            self.uow_factory, self.hasher, self.resolver, starting_balance=Decimal("100")
        )
        return use_case.execute(RegisterIdentityCommand(name=name, email=email, secret=secret))

    def mint(
        self,
        owner_id: str,
        category: str = "ART",
        price: Decimal = Decimal("10"),
        is_for_sale: bool = True,
        name: str = "Sunset",
        image_refs: list[str] | None = None,
        creator: str = "Studio",
    ):
        use_case = MintItemUseCase(self.uow_factory, self.settlement, self.resolver)
        return use_case.execute(
            MintItemCommand(
                owner_id=owner_id,
                category=category,
                name=name,
                description="",
                creator=creator,
                price=price,
                is_for_sale=is_for_sale,
                image_refs=image_refs if image_refs is not None else ["a.png"],
            )
        )

    def request(self, item_id: str, buyer_id: str):
        use_case = CreateTradeRequestUseCase(
            self.uow_factory, self.locks, self.settlement, self.resolver
        )
        return use_case.execute(CreateTradeRequestCommand(item_id=item_id, buyer_id=buyer_id))

    def respond(self, request_id: str, decision: str):
        use_case = RespondToTradeRequestUseCase(
            self.uow_factory, self.locks, self.settlement, self.resolver
        )
        return use_case.execute(
            RespondToTradeRequestCommand(request_id=request_id, decision=decision)
        )

    def identity(self, identity_id: str):
        return GetIdentityUseCase(self.uow_factory, self.resolver).execute(
            GetIdentityQuery(identity_id=identity_id)
        )

    def item(self, item_id: str):
        return GetItemUseCase(self.uow_factory, self.resolver).execute(
            GetItemQuery(item_id=item_id)
        )


@pytest.fixture
def db_engine():
    """Fresh in-memory database with the marketplace schema."""
    engine = build_engine("sqlite://")
    init_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def uow_factory(db_engine):
    session_factory = build_session_factory(db_engine)
    return lambda: SqlAlchemyUnitOfWork(session_factory)


@pytest.fixture
def locks() -> KeyedLockRegistry:
    return KeyedLockRegistry()


@pytest.fixture
def hasher() -> BcryptCredentialHasher:
    return BcryptCredentialHasher(rounds=4)


@pytest.fixture
def resolver() -> PrefixImageUrlResolver:
    return PrefixImageUrlResolver("/uploads")


class TickingClock:
    """Clock that advances one second per reading, so creation order is unambiguous."""

    def __init__(self, start: datetime) -> None:
        self._now = start

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


@pytest.fixture
def settlement() -> SettlementEngine:
    return SettlementEngine(clock=TickingClock(datetime(2024, 5, 1, tzinfo=timezone.utc)))


@pytest.fixture
def build_market(locks, hasher, resolver, settlement):
    """Return a function wrapping any unit-of-work factory in a Marketplace driver."""

    def build(factory) -> Marketplace:
        return Marketplace(factory, locks, hasher, resolver, settlement)

    return build


@pytest.fixture
def market(uow_factory, build_market) -> Marketplace:
    return build_market(uow_factory)


@pytest.fixture
def client(uow_factory):
    """TestClient whose routes use the per-test database."""
    app.dependency_overrides[get_uow_factory] = lambda: uow_factory
    yield TestClient(app)
    app.dependency_overrides.clear()
