"""
JWT verification for identities issued by the auth collaborator.

HS* algorithms use the shared ``jwt_secret``; RS*/ES* algorithms read PEM
keys from disk. ``create_access_token`` mirrors what the collaborator issues
and is used by tooling and tests.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import jwt

from microlearn.config import get_settings

_signing_key: str | None = None
_verifying_key: str | None = None


def _load_keys() -> tuple[str, str]:
    """Resolve signing/verifying keys for the configured algorithm (cached)."""
    global _signing_key, _verifying_key  # noqa: PLW0603
    if _signing_key is None or _verifying_key is None:
        settings = get_settings()
        if settings.jwt_algorithm.startswith("HS"):
            _signing_key = _verifying_key = settings.jwt_secret
        else:
            private_path = Path(settings.jwt_private_key_path)
            _signing_key = private_path.read_text() if private_path.exists() else ""
            _verifying_key = Path(settings.jwt_public_key_path).read_text()
    return _signing_key, _verifying_key


def reset_keys() -> None:
    """Reset cached keys (useful for testing)."""
    global _signing_key, _verifying_key  # noqa: PLW0603
    _signing_key = None
    _verifying_key = None


def create_access_token(user_id: int, tier: str = "FREE") -> str:
    """
    Create an access token the way the auth collaborator does.

    Args:
        user_id: The user's database ID.
        tier: Subscription tier at issue time (informational only; the core
            always re-reads the tier from the store).

    Returns:
        Encoded JWT string.
    """
    signing_key, _ = _load_keys()
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "tier": tier,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_access_token_expire_minutes),
        "iss": settings.jwt_issuer,
        "type": "access",
    }
    return jwt.encode(payload, signing_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str, expected_type: str = "access") -> dict[str, Any]:
    """
    Verify and decode a JWT token.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or wrong type.
    """
    _, verifying_key = _load_keys()
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            verifying_key,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    if payload.get("type") != expected_type:
        msg = f"Expected token type '{expected_type}', got '{payload.get('type')}'"
        raise jwt.InvalidTokenError(msg)

    return payload
