"""
FastAPI routers for the marketplace bounded context.

One router per resource: identities, items, trade requests and
transactions. All routes delegate to use cases. No business logic here.
Input validation is handled by Pydantic schemas.
Error mapping is handled by centralized error handlers.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, Request

from nexusmarket.application.marketplace.authenticate_identity import (
    AuthenticateIdentityUseCase,
)
from nexusmarket.application.marketplace.create_trade_request import (
    CreateTradeRequestUseCase,
)
from nexusmarket.application.marketplace.dtos import (
    AttributeData,
    AuthenticateCommand,
    CreateTradeRequestCommand,
    GetIdentityQuery,
    GetItemQuery,
    IdentityResult,
    ItemResult,
    ListItemsQuery,
    ListTradeRequestsQuery,
    MintItemCommand,
    RegisterIdentityCommand,
    RespondToTradeRequestCommand,
    ToggleSavedCommand,
    TopUpCommand,
    TradeRequestResult,
    TransactionResult,
    UpdateListingCommand,
    UpdateProfileCommand,
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
from nexusmarket.interfaces.marketplace.dependencies import (
    get_authenticate_identity_use_case,
    get_create_trade_request_use_case,
    get_get_identity_use_case,
    get_get_item_use_case,
    get_list_items_use_case,
    get_list_trade_requests_use_case,
    get_list_transactions_use_case,
    get_mint_item_use_case,
    get_register_identity_use_case,
    get_respond_to_trade_request_use_case,
    get_toggle_saved_item_use_case,
    get_top_up_balance_use_case,
    get_update_identity_profile_use_case,
    get_update_item_listing_use_case,
)
from nexusmarket.interfaces.marketplace.schemas import (
    AuthenticateRequest,
    CreateTradeRequestRequest,
    ErrorResponse,
    IdentityResponse,
    ItemResponse,
    MintItemRequest,
    RegisterIdentityRequest,
    RespondToTradeRequestRequest,
    ToggleSavedRequest,
    TopUpRequest,
    TradeRequestResponse,
    TransactionResponse,
    UpdateListingRequest,
    UpdateProfileRequest,
)
from nexusmarket.shared.security.rate_limiting import WRITE_RATE_LIMIT, limiter

identities_router = APIRouter(prefix="/identities", tags=["identities"])
items_router = APIRouter(prefix="/items", tags=["items"])
trade_requests_router = APIRouter(tags=["trade-requests"])
transactions_router = APIRouter(prefix="/transactions", tags=["transactions"])

NOT_FOUND = {404: {"model": ErrorResponse}}


def _identity_response(result: IdentityResult) -> IdentityResponse:
    return IdentityResponse.model_validate(result, from_attributes=True)


def _item_response(result: ItemResult) -> ItemResponse:
    return ItemResponse.model_validate(result, from_attributes=True)


def _trade_request_response(result: TradeRequestResult) -> TradeRequestResponse:
    return TradeRequestResponse.model_validate(result, from_attributes=True)


def _transaction_response(result: TransactionResult) -> TransactionResponse:
    return TransactionResponse.model_validate(result, from_attributes=True)


# ── Identities ───────────────────────────────────────────────────────


@identities_router.post(
    "",
    status_code=201,
    response_model=IdentityResponse,
    responses={409: {"model": ErrorResponse}},
    summary="Register an identity",
    description="Create an identity with the starting balance and a fresh wallet address.",
)
@limiter.limit(WRITE_RATE_LIMIT)
def register_identity(
    request: Request,
    payload: RegisterIdentityRequest,
    use_case: RegisterIdentityUseCase = Depends(get_register_identity_use_case),
) -> IdentityResponse:
    """Register a new identity."""
    result = use_case.execute(
        RegisterIdentityCommand(name=payload.name, email=payload.email, secret=payload.secret)
    )
    return _identity_response(result)


@identities_router.post(
    "/authenticate",
    response_model=IdentityResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Authenticate an identity",
)
@limiter.limit(WRITE_RATE_LIMIT)
def authenticate_identity(
    request: Request,
    payload: AuthenticateRequest,
    use_case: AuthenticateIdentityUseCase = Depends(get_authenticate_identity_use_case),
) -> IdentityResponse:
    """Check an email/secret pair and return the identity."""
    result = use_case.execute(AuthenticateCommand(email=payload.email, secret=payload.secret))
    return _identity_response(result)


@identities_router.get(
    "/{identity_id}",
    response_model=IdentityResponse,
    responses=NOT_FOUND,
    summary="Get an identity",
)
def get_identity(
    identity_id: str,
    use_case: GetIdentityUseCase = Depends(get_get_identity_use_case),
) -> IdentityResponse:
    return _identity_response(use_case.execute(GetIdentityQuery(identity_id=identity_id)))


@identities_router.post(
    "/{identity_id}/top-up",
    response_model=IdentityResponse,
    responses={**NOT_FOUND, 422: {"model": ErrorResponse}},
    summary="Top up a balance",
    description="Credit a strictly positive amount to an identity's balance.",
)
@limiter.limit(WRITE_RATE_LIMIT)
def top_up_balance(
    request: Request,
    identity_id: str,
    payload: TopUpRequest,
    use_case: TopUpBalanceUseCase = Depends(get_top_up_balance_use_case),
) -> IdentityResponse:
    """Credit an identity's balance."""
    result = use_case.execute(TopUpCommand(identity_id=identity_id, amount=payload.amount))
    return _identity_response(result)


@identities_router.patch(
    "/{identity_id}",
    response_model=IdentityResponse,
    responses=NOT_FOUND,
    summary="Update profile",
    description="Change the secret and/or avatar of an identity.",
)
@limiter.limit(WRITE_RATE_LIMIT)
def update_identity_profile(
    request: Request,
    identity_id: str,
    payload: UpdateProfileRequest,
    use_case: UpdateIdentityProfileUseCase = Depends(get_update_identity_profile_use_case),
) -> IdentityResponse:
    """Update an identity's profile."""
    result = use_case.execute(
        UpdateProfileCommand(
            identity_id=identity_id,
            secret=payload.secret,
            avatar_ref=payload.avatar_ref,
        )
    )
    return _identity_response(result)


# ── Items ────────────────────────────────────────────────────────────


@items_router.post(
    "",
    status_code=201,
    response_model=ItemResponse,
    responses={**NOT_FOUND, 422: {"model": ErrorResponse}},
    summary="Mint an item",
    description="Create a new item owned by an existing identity and record a MINT transaction.",
)
@limiter.limit(WRITE_RATE_LIMIT)
def mint_item(
    request: Request,
    payload: MintItemRequest,
    use_case: MintItemUseCase = Depends(get_mint_item_use_case),
) -> ItemResponse:
    """Mint a new item."""
    command = MintItemCommand(
        owner_id=payload.owner_id,
        category=payload.category,
        name=payload.name,
        description=payload.description,
        creator=payload.creator,
        price=payload.price,
        is_for_sale=payload.is_for_sale,
        image_refs=list(payload.image_refs),
        attributes=[
            AttributeData(trait_type=attr.trait_type, value=attr.value)
            for attr in payload.attributes
        ],
        size=payload.size,
    )
    return _item_response(use_case.execute(command))


@items_router.get(
    "",
    response_model=list[ItemResponse],
    summary="Browse the catalog",
    description="Filter by search text, category and mint date; sort NEWEST or OLDEST.",
)
def list_items(
    search: str | None = Query(default=None, max_length=200),
    category: str | None = Query(default=None, max_length=32),
    sort: str | None = Query(default=None, max_length=16),
    created_on: date | None = Query(default=None),
    use_case: ListItemsUseCase = Depends(get_list_items_use_case),
) -> list[ItemResponse]:
    results = use_case.execute(
        ListItemsQuery(search=search, category=category, sort=sort, created_on=created_on)
    )
    return [_item_response(r) for r in results]


@items_router.get(
    "/{item_id}",
    response_model=ItemResponse,
    responses=NOT_FOUND,
    summary="Get an item",
)
def get_item(
    item_id: str,
    use_case: GetItemUseCase = Depends(get_get_item_use_case),
) -> ItemResponse:
    return _item_response(use_case.execute(GetItemQuery(item_id=item_id)))


@items_router.patch(
    "/{item_id}/listing",
    response_model=ItemResponse,
    responses={**NOT_FOUND, 403: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Update a listing",
    description="Change an item's price and/or sale flag.",
)
@limiter.limit(WRITE_RATE_LIMIT)
def update_item_listing(
    request: Request,
    item_id: str,
    payload: UpdateListingRequest,
    use_case: UpdateItemListingUseCase = Depends(get_update_item_listing_use_case),
) -> ItemResponse:
    """Update the listing state of an item."""
    result = use_case.execute(
        UpdateListingCommand(
            item_id=item_id,
            acting_identity_id=payload.acting_identity_id,
            price=payload.price,
            is_for_sale=payload.is_for_sale,
        )
    )
    return _item_response(result)


@items_router.post(
    "/{item_id}/toggle-saved",
    response_model=IdentityResponse,
    responses=NOT_FOUND,
    summary="Save or unsave an item",
)
@limiter.limit(WRITE_RATE_LIMIT)
def toggle_saved_item(
    request: Request,
    item_id: str,
    payload: ToggleSavedRequest,
    use_case: ToggleSavedItemUseCase = Depends(get_toggle_saved_item_use_case),
) -> IdentityResponse:
    """Toggle an item in the identity's watchlist."""
    result = use_case.execute(ToggleSavedCommand(item_id=item_id, identity_id=payload.identity_id))
    return _identity_response(result)


# ── Trade requests ───────────────────────────────────────────────────


@trade_requests_router.post(
    "/trade-requests",
    status_code=201,
    response_model=TradeRequestResponse,
    responses={**NOT_FOUND, 400: {"model": ErrorResponse}},
    summary="Request to buy an item",
    description="Open a PENDING request at the item's current listing price.",
)
@limiter.limit(WRITE_RATE_LIMIT)
def create_trade_request(
    request: Request,
    payload: CreateTradeRequestRequest,
    use_case: CreateTradeRequestUseCase = Depends(get_create_trade_request_use_case),
) -> TradeRequestResponse:
    """Open a trade request."""
    result = use_case.execute(
        CreateTradeRequestCommand(item_id=payload.item_id, buyer_id=payload.buyer_id)
    )
    return _trade_request_response(result)


@trade_requests_router.get(
    "/identities/{identity_id}/trade-requests",
    response_model=list[TradeRequestResponse],
    summary="List trade requests",
    description="Requests where the identity is buyer or seller, newest first.",
)
def list_trade_requests(
    identity_id: str,
    use_case: ListTradeRequestsUseCase = Depends(get_list_trade_requests_use_case),
) -> list[TradeRequestResponse]:
    results = use_case.execute(ListTradeRequestsQuery(identity_id=identity_id))
    return [_trade_request_response(r) for r in results]


@trade_requests_router.post(
    "/trade-requests/{request_id}/response",
    response_model=TradeRequestResponse,
    responses={
        **NOT_FOUND,
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Accept or reject a trade request",
    description="ACCEPT settles the trade atomically; REJECT closes the request.",
)
@limiter.limit(WRITE_RATE_LIMIT)
def respond_to_trade_request(
    request: Request,
    request_id: str,
    payload: RespondToTradeRequestRequest,
    use_case: RespondToTradeRequestUseCase = Depends(get_respond_to_trade_request_use_case),
) -> TradeRequestResponse:
    """Apply the seller's decision."""
    result = use_case.execute(
        RespondToTradeRequestCommand(request_id=request_id, decision=payload.decision)
    )
    return _trade_request_response(result)


# ── Transactions ─────────────────────────────────────────────────────


@transactions_router.get(
    "",
    response_model=list[TransactionResponse],
    summary="Transaction log",
    description="Every mint and sale, newest first.",
)
def list_transactions(
    use_case: ListTransactionsUseCase = Depends(get_list_transactions_use_case),
) -> list[TransactionResponse]:
    return [_transaction_response(r) for r in use_case.execute()]
