"""
Identifier and display-token generation.

Item ids are short and human-enterable so that owners can type them
into the verifier. Wallet addresses and transaction hashes are cosmetic
display strings with no cryptographic meaning.
"""

import secrets
import string

_ID_ALPHABET = string.ascii_uppercase + string.digits

ITEM_ID_LENGTH = 6
IDENTITY_ID_PREFIX = "U-"
REQUEST_ID_PREFIX = "REQ-"
TRANSACTION_ID_PREFIX = "TX-"


def _random_token(length: int) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def new_identity_id() -> str:
    return IDENTITY_ID_PREFIX + _random_token(6)


def new_item_id() -> str:
    return _random_token(ITEM_ID_LENGTH)


def new_request_id() -> str:
    return REQUEST_ID_PREFIX + _random_token(6)


def new_transaction_id() -> str:
    return TRANSACTION_ID_PREFIX + _random_token(9)


def new_wallet_address() -> str:
    return "0x" + secrets.token_hex(20)


def new_tx_hash() -> str:
    return "0x" + secrets.token_hex(32)


def normalize_item_id(raw: str) -> str:
    """Normalize a user-entered item id for lookup."""
    return raw.strip().upper()
