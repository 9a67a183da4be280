"""
Use case: Read one identity.

Input: GetIdentityQuery (identity_id)
Output: IdentityResult
Side effects: None.
Failure cases: NotFoundError.
"""

from collections.abc import Callable

from nexusmarket.application.marketplace.dtos import GetIdentityQuery, IdentityResult
from nexusmarket.application.marketplace.mappers import to_identity_result
from nexusmarket.domain.marketplace.errors import NotFoundError
from nexusmarket.domain.marketplace.ports import ImageUrlResolver, UnitOfWork


class GetIdentityUseCase:
    """Loads an identity by id."""

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        image_resolver: ImageUrlResolver,
    ) -> None:
        self._uow_factory = uow_factory
        self._image_resolver = image_resolver

    def execute(self, query: GetIdentityQuery) -> IdentityResult:
        with self._uow_factory() as uow:
            identity = uow.identities.get(query.identity_id)
        if identity is None:
            raise NotFoundError("Identity", query.identity_id)
        return to_identity_result(identity, self._image_resolver)
