import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

from jobboard.config import Settings, settings
from jobboard.core.exceptions import TokenExpiredError, TokenInvalidError


@dataclass(frozen=True)
class Identity:
    """Who a verified token says the caller is."""

    id: int
    role: str


def _prehash(password: str) -> bytes:
    """Pre-hash to avoid bcrypt's 72-byte limit."""
    return hashlib.sha256(password.encode()).digest()


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt()).decode()


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_prehash(plain), hashed.encode())
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password(secrets.token_urlsafe(16))


def verify_password_for_missing_user(plain: str | None) -> bool:
    """Spend a full bcrypt check when there is no user, so timing does not leak usernames."""
    verify_password(plain or "", _dummy_hash())
    return False


def create_access_token(user_id: int, role: str, cfg: Settings = settings) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=cfg.access_token_expire_minutes)
    to_encode = {"sub": str(user_id), "role": role, "exp": expire}
    return jwt.encode(to_encode, cfg.secret_key, algorithm=cfg.algorithm)


def decode_access_token(token: str, cfg: Settings = settings) -> Identity:
    """Verify signature and expiry and return the embedded identity.

    Raises TokenExpiredError for an expired token and TokenInvalidError for
    anything else that fails verification or lacks the expected claims.
    """
    try:
        payload = jwt.decode(token, cfg.secret_key, algorithms=[cfg.algorithm])
    except ExpiredSignatureError as e:
        raise TokenExpiredError() from e
    except JWTError as e:
        raise TokenInvalidError() from e

    sub = payload.get("sub")
    role = payload.get("role")
    if sub is None or not role:
        raise TokenInvalidError()
    try:
        user_id = int(sub)
    except (TypeError, ValueError) as e:
        raise TokenInvalidError() from e
    return Identity(id=user_id, role=role)
