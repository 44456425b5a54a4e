"""Request signing for the Cloudinary upload API."""

import hashlib
from collections.abc import Mapping

from cloudy.errors import SignatureError

# Sent with the request but never part of the signed string.
UNSIGNED_PARAMS = frozenset({"api_key", "signature", "file"})


def string_to_sign(params: Mapping[str, str | None]) -> str:
    """
    Build the canonical ``key=value&key=value`` string for a parameter set.

    Keys are sorted by code point, which matches the byte-wise ordering the
    API requires. ``None`` values are treated as absent and left out; empty
    strings are kept.
    """
    pairs = sorted(
        (key, value)
        for key, value in params.items()
        if key not in UNSIGNED_PARAMS and value is not None
    )
    return "&".join(f"{key}={value}" for key, value in pairs)


def sign_params(params: Mapping[str, str | None], api_secret: str) -> str:
    """
    Compute the request signature.

    Args:
        params: Every parameter that will be sent to the server
        api_secret: Account API secret

    Returns:
        Lowercase hex SHA-1 of the canonical string followed by the secret

    Raises:
        SignatureError: If the parameters or secret cannot be UTF-8 encoded
    """
    try:
        payload = (string_to_sign(params) + api_secret).encode("utf-8")
    except UnicodeEncodeError as e:
        raise SignatureError(f"Cannot encode upload parameters for signing: {e}") from e
    return hashlib.sha1(payload).hexdigest()
