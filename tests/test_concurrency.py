"""
Concurrency tests for keyed locks and trade settlement.

Settlement races run on a file-backed SQLite database so that every
thread gets its own connection.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from nexusmarket.domain.marketplace.errors import (
    AlreadyProcessedError,
    DataIntegrityError,
)
from nexusmarket.infrastructure.marketplace.database import (
    build_engine,
    build_session_factory,
    init_schema,
)
from nexusmarket.infrastructure.marketplace.locks import KeyedLockRegistry
from nexusmarket.infrastructure.marketplace.unit_of_work import SqlAlchemyUnitOfWork


@pytest.fixture
def file_market(tmp_path, build_market):
    engine = build_engine(f"sqlite:///{tmp_path / 'market.db'}")
    init_schema(engine)
    session_factory = build_session_factory(engine)
    yield build_market(lambda: SqlAlchemyUnitOfWork(session_factory))
    engine.dispose()


def _outcomes(calls):
    """Run callables concurrently; return (results, exceptions)."""
    barrier = threading.Barrier(len(calls))

    def run(call):
        barrier.wait()
        try:
            return call(), None
        except Exception as exc:  # noqa: BLE001
            return None, exc

    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        pairs = list(pool.map(run, calls))
    return [r for r, _ in pairs if r is not None], [e for _, e in pairs if e is not None]


class TestKeyedLockRegistry:
    """Tests for the in-process keyed lock manager."""

    def test_same_key_is_exclusive(self) -> None:
        """Two holders of one key never overlap."""
        registry = KeyedLockRegistry()
        inside = []
        overlaps = []

        def worker() -> None:
            with registry.hold("item:A"):
                if inside:
                    overlaps.append(True)
                inside.append(True)
                time.sleep(0.01)
                inside.pop()

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert overlaps == []
        assert registry.active_keys() == 0

    def test_overlapping_key_sets_do_not_deadlock(self) -> None:
        """Keys given in opposite orders are still acquired safely."""
        registry = KeyedLockRegistry()
        done = []

        def forward() -> None:
            for _ in range(50):
                with registry.hold("a", "b"):
                    pass
            done.append("forward")

        def backward() -> None:
            for _ in range(50):
                with registry.hold("b", "a"):
                    pass
            done.append("backward")

        threads = [threading.Thread(target=forward), threading.Thread(target=backward)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)
        assert sorted(done) == ["backward", "forward"]

    def test_released_on_error(self) -> None:
        """Locks are released when the guarded block raises."""
        registry = KeyedLockRegistry()
        with pytest.raises(RuntimeError):
            with registry.hold("x", "x"):
                raise RuntimeError("boom")
        assert registry.active_keys() == 0
        with registry.hold("x"):
            pass


class TestConcurrentSettlement:
    """Races between settlements on the same item or request."""

    def test_concurrent_accepts_of_competing_requests(self, file_market) -> None:
        """Of several requests for one item, exactly one settles."""
        market = file_market
        seller = market.register("Seller")
        buyers = [market.register(f"Buyer{n}") for n in range(4)]
        item = market.mint(seller.id, price=Decimal("10"))
        requests = [market.request(item.id, buyer.id) for buyer in buyers]

        results, errors = _outcomes(
            [lambda r=r: market.respond(r.id, "ACCEPT") for r in requests]
        )

        assert len(results) == 1
        assert len(errors) == len(requests) - 1
        assert all(isinstance(e, DataIntegrityError) for e in errors)

        winner = results[0].buyer_id
        assert market.item(item.id).owner_id == winner
        assert market.identity(seller.id).balance == Decimal("110")
        balances = {b.id: market.identity(b.id).balance for b in buyers}
        assert balances.pop(winner) == Decimal("90")
        assert set(balances.values()) == {Decimal("100")}

    def test_concurrent_accepts_of_one_request(self, file_market) -> None:
        """The same request accepted twice at once settles once."""
        market = file_market
        seller = market.register("Seller")
        buyer = market.register("Buyer")
        item = market.mint(seller.id, price=Decimal("10"))
        request = market.request(item.id, buyer.id)

        results, errors = _outcomes(
            [lambda: market.respond(request.id, "ACCEPT") for _ in range(3)]
        )

        assert len(results) == 1
        assert all(isinstance(e, AlreadyProcessedError) for e in errors)
        assert market.identity(buyer.id).balance == Decimal("90")
        assert len(market.item(item.id).history) == 1


class TestInMemoryUnitOfWork:
    """Units of work on an in-memory database share one connection."""

    def test_reader_waits_for_pending_writer(self, market) -> None:
        """A concurrent reader never sees, nor discards, uncommitted writes."""
        alice = market.register("Alice")
        seen = []

        def read_balance() -> None:
            with market.uow_factory() as uow:
                seen.append(uow.identities.get(alice.id).balance)

        with market.uow_factory() as writer:
            writer.identities.adjust_balance(alice.id, Decimal("-50"))
            reader = threading.Thread(target=read_balance)
            reader.start()
            reader.join(timeout=0.2)
            assert reader.is_alive()
            writer.identities.adjust_balance(alice.id, Decimal("-1"))
            writer.commit()

        reader.join(timeout=5)
        assert seen == [Decimal("49")]
        assert market.identity(alice.id).balance == Decimal("49")
