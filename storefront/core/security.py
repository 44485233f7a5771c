# File: storefront/core/security.py

"""
Security helpers for the storefront API.

Password hashing uses bcrypt with a configurable cost factor. Session tokens
are HS256 JWTs signed with the server secret, carrying the subject id, email
and role of the user. Tokens are stateless: nothing is stored server side, so
a token stays valid until its ``exp`` claim passes.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from storefront.core.config import settings
from storefront.core.exceptions import PasswordHashingError, TokenExpired, TokenInvalid
from storefront.core.logging import get_logger

logger = get_logger(__name__)

# bcrypt only looks at the first 72 bytes of a password.
BCRYPT_MAX_BYTES = 72
REQUIRED_CLAIMS = ["sub", "email", "role", "iat", "exp"]


@dataclass(frozen=True)
class Identity:
    """
    Verified claims of a session token.

    Attributes:
        subject_id: User id the token was issued to
        email: User email at issuance time
        role: User role at issuance time ("admin" or "customer")
        issued_at: Issued-at timestamp
        expires_at: Expiration timestamp
        jti: Unique token id
    """
    subject_id: str
    email: str
    role: str
    issued_at: datetime
    expires_at: datetime
    jti: str


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """
    Hash a plaintext password with a fresh bcrypt salt.

    Raises PasswordHashingError if bcrypt fails for any reason; callers must
    not persist anything in that case.
    """
    try:
        salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
        return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")
    except Exception as exc:
        logger.error("password_hashing_failed", exc_info=True)
        raise PasswordHashingError() from exc


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a plaintext password against a stored bcrypt hash.

    The comparison is constant-time inside bcrypt. A malformed stored hash is
    treated as a mismatch.
    """
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("password_hash_malformed")
        return False


# Built once at import so no failed login pays for salt generation.
DUMMY_PASSWORD_HASH = hash_password(secrets.token_urlsafe(16))


def burn_password_check(password: str) -> None:
    """
    Run a bcrypt comparison against a throwaway hash.

    Used when the email is unknown so that a failed login costs the same
    whether or not the account exists.
    """
    verify_password(password, DUMMY_PASSWORD_HASH)


def create_access_token(
    *,
    subject: str,
    email: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))

    payload = {
        "sub": subject,
        "email": email,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
        "jti": secrets.token_urlsafe(16),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Identity:
    """
    Verify signature and expiry of a session token and return its claims.

    Raises:
        TokenExpired: the ``exp`` claim is in the past
        TokenInvalid: bad signature, malformed token or missing claims
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError as exc:
        logger.info("token_rejected", reason="expired")
        raise TokenExpired() from exc
    except jwt.InvalidTokenError as exc:
        logger.info("token_rejected", reason="invalid", error=str(exc))
        raise TokenInvalid() from exc

    return Identity(
        subject_id=str(payload["sub"]),
        email=payload["email"],
        role=payload["role"],
        issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        jti=payload.get("jti", ""),
    )
