"""Bearer-token authorization gate.

The check is pure: it looks at the raw ``Authorization`` header value and the
configured credential and nothing else. It never logs either value.
"""

import hmac
from enum import Enum

from sttgate.constants import BEARER_PREFIX


class AuthDecision(Enum):
    ALLOW = "allow"
    DENY = "deny"


def extract_bearer_token(header: str | None) -> str | None:
    """Return the token following the ``Bearer `` prefix, or None.

    Only the fixed prefix is removed; the token itself is not trimmed.
    """
    if not header or not header.startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX):]


def authorize(header: str | None, credential: str) -> AuthDecision:
    """Decide whether a request carrying ``header`` may proceed.

    Args:
        header: Raw value of the Authorization header, None when absent.
        credential: Configured API key. Empty disables the check.

    Returns:
        AuthDecision.ALLOW or AuthDecision.DENY.
    """
    if not credential:
        return AuthDecision.ALLOW

    token = extract_bearer_token(header)
    if token is None:
        return AuthDecision.DENY

    # surrogateescape restores the exact wire bytes of headers that are not valid UTF-8.
    if hmac.compare_digest(
        token.encode("utf-8", "surrogateescape"), credential.encode("utf-8")
    ):
        return AuthDecision.ALLOW
    return AuthDecision.DENY


def is_allowed(header: str | None, credential: str) -> bool:
    """Shorthand for ``authorize(...) is AuthDecision.ALLOW``."""
    return authorize(header, credential) is AuthDecision.ALLOW


def header_text(value: str | None) -> str | None:
    """Re-read a header value that the ASGI layer decoded as latin-1.

    HTTP header values are bytes; Starlette exposes them as latin-1 text.
    Round-tripping through latin-1 recovers the wire bytes, which are then
    read as UTF-8 so they compare equal to a UTF-8 credential. Bytes that are
    not valid UTF-8 are kept as surrogates and never match.
    """
    if value is None:
        return None
    return value.encode("latin-1").decode("utf-8", "surrogateescape")
