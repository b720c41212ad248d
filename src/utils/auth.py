"""HMAC-signed user tokens.

# ─── HOW USER TOKENS WORK ────────────────────────────────────────────
#
# Sign-in itself is delegated to an external identity provider.  After
# the callback, the frontend exchanges the provider's user id for a
# token signed with SESSION_SECRET and sends it on every API call:
#
#     Authorization: Bearer {user_id}:{unix_timestamp}:{hmac_hex_digest}
#
#   - user_id:   opaque id issued by the identity provider (no ":")
#   - timestamp: when the token was issued (UTC epoch seconds)
#   - hmac:      HMAC-SHA256(secret, "{user_id}:{timestamp}")
#
# Validation checks:
#   1. Token format matches expected pattern
#   2. Timestamp is within the TTL window
#   3. HMAC signature is valid (constant-time comparison)
#
# Stateless: no session table is needed to verify a request.
# ─────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import hashlib
import hmac
import time

from src.utils.errors import AuthenticationError


def _sign(secret: str, payload: str) -> str:
    return hmac.new(
        secret.encode("utf-8"),
        payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def create_user_token(user_id: str, secret: str, issued_at: int | None = None) -> str:
    """Create a signed token for *user_id*.

    Parameters
    ----------
    user_id:
        The identity provider's user id.  Must be non-empty and must not
        contain ``":"``.
    secret:
        The shared signing secret.
    issued_at:
        Issue time in epoch seconds; defaults to now.

    Returns
    -------
    Token string in the format ``{user_id}:{timestamp}:{hmac_hex}``.
    """
    if not user_id or ":" in user_id:
        raise ValueError("user_id must be non-empty and must not contain ':'")
    timestamp = str(int(time.time()) if issued_at is None else issued_at)
    payload = f"{user_id}:{timestamp}"
    return f"{payload}:{_sign(secret, payload)}"


def validate_user_token(token: str, secret: str, ttl_hours: int = 168) -> str:
    """Validate *token* and return the user id it was issued for.

    Raises
    ------
    AuthenticationError
        If the token is malformed, expired, or carries a bad signature.
    """
    parts = token.split(":") if token else []
    if len(parts) != 3 or not parts[0]:
        raise AuthenticationError("Malformed session token")

    user_id, timestamp_str, provided_hmac = parts
    try:
        timestamp = int(timestamp_str)
    except ValueError:
        raise AuthenticationError("Malformed session token") from None

    if time.time() - timestamp > ttl_hours * 3600:
        raise AuthenticationError("Session token expired")

    expected_hmac = _sign(secret, f"{user_id}:{timestamp_str}")
    if not hmac.compare_digest(provided_hmac, expected_hmac):
        raise AuthenticationError("Invalid session token")
    return user_id
