"""
Adapter: bcrypt credential hashing.

Implements CredentialHasher port. Secrets are never stored or logged
in clear text.
"""

import bcrypt

from nexusmarket.domain.marketplace.errors import InvalidSecretError
from nexusmarket.domain.marketplace.ports import CredentialHasher

BCRYPT_MAX_SECRET_BYTES = 72


class BcryptCredentialHasher(CredentialHasher):
    """Hashes identity secrets with bcrypt."""

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def hash(self, secret: str) -> str:
        """Return a salted bcrypt hash of the secret.

        Raises:
            InvalidSecretError: If the encoded secret exceeds bcrypt's 72-byte input limit.
        """
        encoded = secret.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_SECRET_BYTES:
            raise InvalidSecretError(
                f"longer than {BCRYPT_MAX_SECRET_BYTES} bytes when UTF-8 encoded"
            )
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self._rounds)).decode("ascii")

    def verify(self, secret: str, hashed: str) -> bool:
        encoded = secret.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_SECRET_BYTES:
            return False
        return bcrypt.checkpw(encoded, hashed.encode("ascii"))
