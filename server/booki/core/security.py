"""Password hashing and access token helpers."""

import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from .config import settings

JWT_ALGORITHM = "HS256"
PBKDF2_ITERATIONS = 260_000


def hash_password(password: str) -> str:
    """Hash a password as ``pbkdf2:sha256:<iterations>$<salt>$<hex digest>``."""
    salt = secrets.token_hex(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"pbkdf2:sha256:{PBKDF2_ITERATIONS}${salt}${dk.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash or not password_hash.startswith("pbkdf2:sha256:"):
        return False
    parts = password_hash.split("$")
    if len(parts) != 3:
        return False
    header, salt, stored = parts
    try:
        iterations = int(header.rsplit(":", 1)[1])
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations)
    return hmac.compare_digest(dk.hex(), stored)


@dataclass(frozen=True)
class TokenClaims:
    """Decoded access token."""

    user_id: int
    session_id: int
    role: str
    expires_at: datetime


def create_access_token(
    user_id: int,
    session_id: int,
    role: str,
    expires_at: datetime,
) -> str:
    payload = {
        "sub": str(user_id),
        "sid": session_id,
        "role": role,
        "iat": int(datetime.now(timezone.utc).timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> TokenClaims:
    """
    Decode and validate an access token.

    Raises:
        jwt.InvalidTokenError: If the signature, expiry or claims are invalid
    """
    payload = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[JWT_ALGORITHM],
        options={"require": ["sub", "sid", "exp"]},
    )
    try:
        return TokenClaims(
            user_id=int(payload["sub"]),
            session_id=int(payload["sid"]),
            role=str(payload.get("role", "")),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
    except (TypeError, ValueError) as exc:
        raise jwt.InvalidTokenError("Malformed token claims") from exc


def session_expiry(now: datetime | None = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now + timedelta(minutes=settings.access_token_ttl_minutes)


def generate_agency_unique_id() -> str:
    """Public agency handle such as ``AG-7F3K9Q2M``."""
    alphabet = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
    return "AG-" + "".join(secrets.choice(alphabet) for _ in range(8))
