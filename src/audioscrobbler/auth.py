"""Last.fm request signing.

This module implements the two signing schemes used by the Last.fm services:

Legacy handshake token:
    md5(api_secret + unix_timestamp) sent as the ``a`` parameter of the
    submission protocol handshake.

REST API signature:
    1. Take every request parameter except ``api_sig`` and ``format``
    2. Sort parameters by key, comparing keys as strings
    3. Concatenate ``key + value`` for each parameter; list values contribute
       their elements in transmission order
    4. Append the API secret
    5. Send the MD5 hex digest as ``api_sig``

Example:
    >>> from src.audioscrobbler.auth import sign_params
    >>> sign_params({"a": "b"}, "c")
    '900150983cd24fb0d6963f7d28e17f72'

Security Notes:
    - The secret is never transmitted, only the digest
    - Signatures must be computed on finalized parameters (method, api_key
      and sk already present)
"""

import hashlib
from typing import Any, Iterable, Mapping, Tuple, Union

# Fields that never take part in the signature
UNSIGNED_PARAMS = frozenset({"api_sig", "format"})


def md5(text: str) -> str:
    """Return the lowercase MD5 hex digest of a UTF-8 string."""
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def generate_handshake_token(api_secret: str, timestamp: Union[int, str]) -> str:
    """Generate the legacy handshake authentication token.

    Args:
        api_secret: Shared API secret
        timestamp: Unix timestamp sent as ``t`` in the same handshake

    Returns:
        32 hex char MD5 of secret followed by the timestamp string

    Example:
        >>> generate_handshake_token("ab", "c")
        '900150983cd24fb0d6963f7d28e17f72'
    """
    return md5(f"{api_secret}{timestamp}")


def _signature_pairs(params: Mapping[str, Any]) -> Iterable[Tuple[str, Any]]:
    signed = [(str(key), value) for key, value in params.items() if str(key) not in UNSIGNED_PARAMS]
    return sorted(signed, key=lambda pair: pair[0])


def build_method_signature(params: Mapping[str, Any], api_secret: str) -> str:
    """Build the string that is hashed into ``api_sig``.

    Keys are sorted as strings, so ``"10"`` sorts before ``"9"``. A list value
    is flattened in order after its key, matching how it is transmitted.

    Args:
        params: Finalized request parameters
        api_secret: Shared API secret

    Returns:
        Concatenated signature base string (not hashed)
    """
    parts = []
    for key, value in _signature_pairs(params):
        parts.append(key)
        if isinstance(value, (list, tuple)):
            parts.extend("" if item is None else str(item) for item in value)
        elif value is not None:
            parts.append(str(value))
    parts.append(api_secret)
    return "".join(parts)


def sign_params(params: Mapping[str, Any], api_secret: str) -> str:
    """Compute the REST ``api_sig`` for a parameter mapping.

    Args:
        params: Finalized request parameters (``api_sig`` and ``format`` ignored)
        api_secret: Shared API secret

    Returns:
        MD5 hex digest of the signature base string
    """
    return md5(build_method_signature(params, api_secret))


def verify_signature(params: Mapping[str, Any], api_secret: str, signature: str) -> bool:
    """Check that ``signature`` matches the parameters and secret.

    This is used for testing; the server is the one verifying in production.
    """
    return sign_params(params, api_secret) == signature
