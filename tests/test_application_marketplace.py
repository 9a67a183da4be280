"""
Tests for the marketplace application layer (use cases).

Identity, catalog and watchlist use cases run against an in-memory
SQLite unit of work. Settlement scenarios live in test_settlement.py.
"""

from decimal import Decimal

import pytest

from nexusmarket.application.marketplace.authenticate_identity import (
    AuthenticateIdentityUseCase,
)
from nexusmarket.application.marketplace.dtos import (
    AuthenticateCommand,
    ListItemsQuery,
    ListTradeRequestsQuery,
    ToggleSavedCommand,
    TopUpCommand,
    UpdateListingCommand,
    UpdateProfileCommand,
)
from nexusmarket.application.marketplace.list_items import ListItemsUseCase
from nexusmarket.application.marketplace.list_trade_requests import ListTradeRequestsUseCase
from nexusmarket.application.marketplace.toggle_saved_item import ToggleSavedItemUseCase
from nexusmarket.application.marketplace.top_up_balance import TopUpBalanceUseCase
from nexusmarket.application.marketplace.update_identity_profile import (
    UpdateIdentityProfileUseCase,
)
from nexusmarket.application.marketplace.update_item_listing import UpdateItemListingUseCase
from nexusmarket.domain.marketplace.errors import (
    DuplicateIdentityError,
    InvalidAmountError,
    InvalidCredentialsError,
    InvalidSecretError,
    NotFoundError,
    NotOwnerError,
)


class TestRegisterIdentityUseCase:
    """Tests for the RegisterIdentityUseCase."""

    def test_new_identity_gets_starting_balance(self, market) -> None:
        """A fresh identity has the starting balance, a wallet and no saved items."""
        alice = market.register("Alice", email="Alice@Example.com")
        assert alice.id.startswith("U-")
        assert alice.email == "alice@example.com"
        assert alice.balance == Decimal("100")
        assert alice.wallet_address.startswith("0x")
        assert len(alice.wallet_address) == 42
        assert alice.saved_item_ids == []
        assert alice.avatar_url is None
        assert not hasattr(alice, "credential_hash")

    def test_duplicate_email_is_case_insensitive(self, market) -> None:
        """The same email in different case cannot register twice."""
        market.register("Alice", email="alice@example.com")
        with pytest.raises(DuplicateIdentityError):
            market.register("Other", email="ALICE@example.com")

    def test_secret_over_72_bytes_rejected(self, market) -> None:
        """A short secret of multi-byte characters can still exceed bcrypt's limit."""
        with pytest.raises(InvalidSecretError):
            market.register("Alice", secret="\u00e9" * 40)
        assert market.register("Alice", secret="s3cret").email == "alice@example.com"


class TestAuthenticateIdentityUseCase:
    """Tests for the AuthenticateIdentityUseCase."""

    def test_valid_credentials(self, market) -> None:
        """Correct email and secret return the identity."""
        alice = market.register("Alice", secret="s3cret")
        use_case = AuthenticateIdentityUseCase(market.uow_factory, market.hasher, market.resolver)
        result = use_case.execute(AuthenticateCommand(email="ALICE@example.com", secret="s3cret"))
        assert result.id == alice.id

    @pytest.mark.parametrize(
        "email,secret",
        [("alice@example.com", "wrong"), ("nobody@example.com", "s3cret")],
    )
    def test_invalid_credentials(self, market, email, secret) -> None:
        """Wrong secret and unknown email fail the same way."""
        market.register("Alice", secret="s3cret")
        use_case = AuthenticateIdentityUseCase(market.uow_factory, market.hasher, market.resolver)
        with pytest.raises(InvalidCredentialsError):
            use_case.execute(AuthenticateCommand(email=email, secret=secret))


class TestTopUpBalanceUseCase:
    """Tests for the TopUpBalanceUseCase."""

    def _use_case(self, market) -> TopUpBalanceUseCase:
        return TopUpBalanceUseCase(market.uow_factory, market.locks, market.resolver)

    def test_top_up_credits_balance(self, market) -> None:
        """A positive amount is added to the balance."""
        alice = market.register("Alice")
        result = self._use_case(market).execute(
            TopUpCommand(identity_id=alice.id, amount=Decimal("12.5"))
        )
        assert result.balance == Decimal("112.5")
        assert market.identity(alice.id).balance == Decimal("112.5")

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_non_positive_amount_rejected(self, market, amount) -> None:
        """Zero and negative amounts are refused and the balance is unchanged."""
        alice = market.register("Alice")
        with pytest.raises(InvalidAmountError):
            self._use_case(market).execute(TopUpCommand(identity_id=alice.id, amount=amount))
        assert market.identity(alice.id).balance == Decimal("100")

    def test_unknown_identity(self, market) -> None:
        """Topping up a missing identity is NotFound."""
        with pytest.raises(NotFoundError):
            self._use_case(market).execute(
                TopUpCommand(identity_id="U-NOBODY", amount=Decimal("1"))
            )


class TestUpdateIdentityProfileUseCase:
    """Tests for the UpdateIdentityProfileUseCase."""

    def test_secret_change_takes_effect(self, market) -> None:
        """After a secret change only the new secret authenticates."""
        alice = market.register("Alice", secret="old")
        UpdateIdentityProfileUseCase(
            market.uow_factory, market.locks, market.hasher, market.resolver
        ).execute(UpdateProfileCommand(identity_id=alice.id, secret="new"))

        auth = AuthenticateIdentityUseCase(market.uow_factory, market.hasher, market.resolver)
        assert auth.execute(AuthenticateCommand(email=alice.email, secret="new")).id == alice.id
        with pytest.raises(InvalidCredentialsError):
            auth.execute(AuthenticateCommand(email=alice.email, secret="old"))

    def test_avatar_is_resolved_and_balance_untouched(self, market) -> None:
        """Avatar refs resolve to URLs; profile edits never change the balance."""
        alice = market.register("Alice")
        result = UpdateIdentityProfileUseCase(
            market.uow_factory, market.locks, market.hasher, market.resolver
        ).execute(UpdateProfileCommand(identity_id=alice.id, avatar_ref="me.png"))
        assert result.avatar_url == "/uploads/me.png"
        assert result.balance == Decimal("100")

    def test_unknown_identity(self, market) -> None:
        """Updating a missing identity is NotFound."""
        use_case = UpdateIdentityProfileUseCase(
            market.uow_factory, market.locks, market.hasher, market.resolver
        )
        with pytest.raises(NotFoundError):
            use_case.execute(UpdateProfileCommand(identity_id="U-NOBODY", avatar_ref="x"))


class TestListItemsUseCase:
    """Tests for the ListItemsUseCase."""

    def _list(self, market, **kwargs):
        return ListItemsUseCase(market.uow_factory, market.resolver).execute(
            ListItemsQuery(**kwargs)
        )

    def test_filters_and_sorting(self, market) -> None:
        """Category ALL returns everything; NEWEST is the default order."""
        alice = market.register("Alice")
        first = market.mint(alice.id, name="Gold Ticket", category="TICKET")
        second = market.mint(alice.id, name="Skyline", category="ART")

        assert [i.id for i in self._list(market)] == [second.id, first.id]
        assert [i.id for i in self._list(market, sort="OLDEST")] == [first.id, second.id]
        assert [i.id for i in self._list(market, category="ALL")] == [second.id, first.id]
        assert [i.id for i in self._list(market, category="ticket")] == [first.id]
        assert [i.id for i in self._list(market, search="SKY")] == [second.id]

    def test_unknown_category_matches_nothing(self, market) -> None:
        """An unrecognised category yields an empty list, not an error."""
        alice = market.register("Alice")
        market.mint(alice.id)
        assert self._list(market, category="SPACESHIP") == []


class TestUpdateItemListingUseCase:
    """Tests for the UpdateItemListingUseCase."""

    def test_owner_can_relist(self, market) -> None:
        """The owner may change price and sale flag."""
        alice = market.register("Alice")
        item = market.mint(alice.id, is_for_sale=False)
        result = UpdateItemListingUseCase(market.uow_factory, market.locks, market.resolver).execute(
            UpdateListingCommand(
                item_id=item.id,
                acting_identity_id=alice.id,
                price=Decimal("42"),
                is_for_sale=True,
            )
        )
        assert result.price == Decimal("42")
        assert result.is_for_sale is True

    def test_non_owner_rejected(self, market) -> None:
        """Someone other than the owner cannot change the listing."""
        alice = market.register("Alice")
        bob = market.register("Bob")
        item = market.mint(alice.id)
        with pytest.raises(NotOwnerError):
            UpdateItemListingUseCase(market.uow_factory, market.locks, market.resolver).execute(
                UpdateListingCommand(item_id=item.id, acting_identity_id=bob.id, is_for_sale=False)
            )
        assert market.item(item.id).is_for_sale is True

    def test_unknown_item(self, market) -> None:
        """Updating a missing item is NotFound."""
        with pytest.raises(NotFoundError):
            UpdateItemListingUseCase(market.uow_factory, market.locks, market.resolver).execute(
                UpdateListingCommand(item_id="ZZZZZZ", price=Decimal("1"))
            )


class TestToggleSavedItemUseCase:
    """Tests for the ToggleSavedItemUseCase."""

    def test_toggle_adds_and_removes(self, market) -> None:
        """Two toggles return the watchlist to its original state."""
        alice = market.register("Alice")
        bob = market.register("Bob")
        item = market.mint(alice.id)
        use_case = ToggleSavedItemUseCase(market.uow_factory, market.locks, market.resolver)

        saved = use_case.execute(ToggleSavedCommand(item_id=item.id.lower(), identity_id=bob.id))
        assert saved.saved_item_ids == [item.id]
        assert market.identity(bob.id).saved_item_ids == [item.id]

        cleared = use_case.execute(ToggleSavedCommand(item_id=item.id, identity_id=bob.id))
        assert cleared.saved_item_ids == []
        assert market.identity(bob.id).saved_item_ids == []

    def test_unknown_item_or_identity(self, market) -> None:
        """Saving a missing item, or for a missing identity, is NotFound."""
        alice = market.register("Alice")
        item = market.mint(alice.id)
        use_case = ToggleSavedItemUseCase(market.uow_factory, market.locks, market.resolver)
        with pytest.raises(NotFoundError):
            use_case.execute(ToggleSavedCommand(item_id="ZZZZZZ", identity_id=alice.id))
        with pytest.raises(NotFoundError):
            use_case.execute(ToggleSavedCommand(item_id=item.id, identity_id="U-NOBODY"))


class TestListTradeRequestsUseCase:
    """Tests for the ListTradeRequestsUseCase."""

    def test_lists_both_sides_newest_first(self, market) -> None:
        """Buyer and seller both see the request; newest comes first."""
        alice = market.register("Alice")
        bob = market.register("Bob")
        first = market.request(market.mint(alice.id, name="One").id, bob.id)
        second = market.request(market.mint(alice.id, name="Two").id, bob.id)

        use_case = ListTradeRequestsUseCase(market.uow_factory, market.resolver)
        for identity_id in (alice.id, bob.id):
            results = use_case.execute(ListTradeRequestsQuery(identity_id=identity_id))
            assert [r.id for r in results] == [second.id, first.id]

    def test_unknown_identity_gets_empty_list(self, market) -> None:
        """No requests, no error."""
        use_case = ListTradeRequestsUseCase(market.uow_factory, market.resolver)
        assert use_case.execute(ListTradeRequestsQuery(identity_id="U-NOBODY")) == []
