"""
Centralized error handlers for FastAPI.

Maps marketplace domain errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse schema: the error field
carries the stable error code, detail the human-readable message.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from nexusmarket.domain.marketplace.errors import (
    AlreadyProcessedError,
    DataIntegrityError,
    DuplicateIdentityError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidCredentialsError,
    InvalidListingError,
    InvalidMintError,
    InvalidSecretError,
    MarketplaceDomainError,
    NotFoundError,
    NotListedError,
    NotOwnerError,
    SelfTradeError,
)

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_401 = 401
HTTP_403 = 403
HTTP_404 = 404
HTTP_409 = 409
HTTP_422 = 422
HTTP_500 = 500


def _error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | None] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(_request: Request, exc: NotFoundError) -> JSONResponse:
        """Handle missing identities, items and trade requests."""
        logger.warning("%s not found: %s", exc.entity, exc.entity_id)
        return _error_response(HTTP_404, exc.code, exc.message)

    @app.exception_handler(DuplicateIdentityError)
    async def handle_duplicate_identity(
        _request: Request, exc: DuplicateIdentityError
    ) -> JSONResponse:
        """Handle registration conflicts."""
        logger.warning("Duplicate identity registration")
        return _error_response(HTTP_409, exc.code, "Email already registered")

    @app.exception_handler(InvalidCredentialsError)
    async def handle_invalid_credentials(
        _request: Request, exc: InvalidCredentialsError
    ) -> JSONResponse:
        """Handle failed authentication. Never reveals which field was wrong."""
        logger.warning("Authentication failed")
        return _error_response(HTTP_401, exc.code, exc.message)

    @app.exception_handler(InvalidListingError)
    async def handle_invalid_listing(
        _request: Request, exc: InvalidListingError
    ) -> JSONResponse:
        """Handle listing changes that break a catalog invariant."""
        logger.warning("Invalid listing: item=%s reason=%s", exc.item_id, exc.reason)
        return _error_response(HTTP_422, exc.code, exc.message)

    @app.exception_handler(InvalidMintError)
    async def handle_invalid_mint(_request: Request, exc: InvalidMintError) -> JSONResponse:
        """Handle incomplete or malformed mint input."""
        logger.warning("Invalid mint: %s", exc.reason)
        return _error_response(HTTP_422, exc.code, exc.message)

    @app.exception_handler(InvalidAmountError)
    async def handle_invalid_amount(
        _request: Request, exc: InvalidAmountError
    ) -> JSONResponse:
        """Handle non-positive top-up amounts."""
        logger.warning("Invalid amount: %s", exc.amount)
        return _error_response(HTTP_422, exc.code, exc.message)

    @app.exception_handler(InvalidSecretError)
    async def handle_invalid_secret(
        _request: Request, exc: InvalidSecretError
    ) -> JSONResponse:
        """Handle secrets bcrypt cannot accept."""
        logger.warning("Invalid secret rejected")
        return _error_response(HTTP_422, exc.code, exc.message)

    @app.exception_handler(NotOwnerError)
    async def handle_not_owner(_request: Request, exc: NotOwnerError) -> JSONResponse:
        """Handle listing updates attempted by someone other than the owner."""
        logger.warning("Identity %s is not the owner of item %s", exc.identity_id, exc.item_id)
        return _error_response(HTTP_403, exc.code, exc.message)

    @app.exception_handler(NotListedError)
    async def handle_not_listed(_request: Request, exc: NotListedError) -> JSONResponse:
        """Handle trade requests on items that are not for sale."""
        logger.warning("Item not for sale: %s", exc.item_id)
        return _error_response(HTTP_400, exc.code, exc.message)

    @app.exception_handler(SelfTradeError)
    async def handle_self_trade(_request: Request, exc: SelfTradeError) -> JSONResponse:
        """Handle owners requesting to buy their own items."""
        logger.warning("Self trade rejected: item=%s", exc.item_id)
        return _error_response(HTTP_400, exc.code, exc.message)

    @app.exception_handler(InsufficientFundsError)
    async def handle_insufficient_funds(
        _request: Request, exc: InsufficientFundsError
    ) -> JSONResponse:
        """Handle insufficient funds errors."""
        logger.warning("Insufficient funds")
        return _error_response(HTTP_400, exc.code, "Insufficient funds")

    @app.exception_handler(AlreadyProcessedError)
    async def handle_already_processed(
        _request: Request, exc: AlreadyProcessedError
    ) -> JSONResponse:
        """Handle responses to requests that were already settled."""
        logger.warning("Trade request already processed: %s", exc.request_id)
        return _error_response(HTTP_409, exc.code, exc.message)

    @app.exception_handler(DataIntegrityError)
    async def handle_data_integrity(
        _request: Request, exc: DataIntegrityError
    ) -> JSONResponse:
        """Handle inconsistent stored state. Always logged loudly."""
        logger.error("Data integrity error: %s", exc.reason)
        return _error_response(HTTP_500, exc.code, "Data integrity error")

    @app.exception_handler(MarketplaceDomainError)
    async def handle_marketplace_domain(
        _request: Request, exc: MarketplaceDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled marketplace domain errors."""
        logger.error("Unhandled marketplace domain error: %s", exc.message)
        return _error_response(HTTP_500, "InternalError", "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "InternalError", "Internal server error")
