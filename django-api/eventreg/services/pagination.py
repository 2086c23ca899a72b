"""Continuation tokens for catalog listings.

A token wraps the store's composite resume key. It is signed with the
project SECRET_KEY so callers cannot forge or edit one; its structure is not
part of the API.
"""

from django.core import signing

from eventreg.domain.errors import InvalidRequestError
from eventreg.stores.interfaces import PARTITION_KEY, SORT_KEY, Key

TOKEN_SALT = "eventreg.catalog.continuation"


def encode_token(key: Key) -> str:
    payload = {"pk": key[PARTITION_KEY], "sk": key[SORT_KEY]}
    return signing.dumps(payload, salt=TOKEN_SALT, compress=True)


def decode_token(token: str) -> Key:
    """Recover the resume key.

    Raises:
        InvalidRequestError: If the token was not issued by this service.
    """
    try:
        payload = signing.loads(token, salt=TOKEN_SALT)
    except signing.BadSignature as e:
        raise InvalidRequestError("Invalid continuation token") from e
    if not isinstance(payload, dict) or not {"pk", "sk"} <= payload.keys():
        raise InvalidRequestError("Invalid continuation token")
    return {PARTITION_KEY: payload["pk"], SORT_KEY: payload["sk"]}
