"""
Lock key naming shared by the use cases that mutate balances,
listings and trade requests.
"""


def item_key(item_id: str) -> str:
    return f"item:{item_id}"


def identity_key(identity_id: str) -> str:
    return f"identity:{identity_id}"


def request_key(request_id: str) -> str:
    return f"request:{request_id}"
