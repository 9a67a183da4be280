"""
Adapter: Image URL resolution.

Implements ImageUrlResolver port for image references produced by an
external upload service. Absolute URLs pass through untouched; bare
file names are joined to the configured base URL.
"""

from nexusmarket.domain.marketplace.ports import ImageUrlResolver

_ABSOLUTE_PREFIXES = ("http://", "https://", "data:", "/")


class PrefixImageUrlResolver(ImageUrlResolver):
    """Resolves relative image references against a base URL."""

    def __init__(self, base_url: str) -> None:
        self._base_url = base_url.rstrip("/")

    def resolve(self, image_ref: str) -> str:
        if not image_ref or image_ref.startswith(_ABSOLUTE_PREFIXES):
            return image_ref
        return f"{self._base_url}/{image_ref}"
