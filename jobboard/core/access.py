"""Capability checks composed in front of protected routes.

Both gates are pure: they take what they need, return ``Authorized`` or
``Denied``, and never touch the request or the database. The FastAPI
wrappers in ``jobboard.dependencies`` turn a ``Denied`` into its error.
"""

import logging
from dataclasses import dataclass

from jobboard.config import Settings, settings
from jobboard.core.exceptions import (
    JobBoardError,
    NoTokenError,
    NotAdminError,
    TokenExpiredError,
    TokenFailedError,
    TokenInvalidError,
)
from jobboard.core.security import Identity, decode_access_token
from jobboard.models.user import ROLE_ADMIN

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Authorized:
    identity: Identity


@dataclass(frozen=True)
class Denied:
    error: JobBoardError

    @property
    def reason(self) -> str:
        return type(self.error).__name__


def authenticate(credentials, cfg: Settings = settings) -> Authorized | Denied:
    """Check bearer credentials (an ``HTTPAuthorizationCredentials`` or None)."""
    if credentials is None or not getattr(credentials, "credentials", None):
        logger.info("Auth failed: missing bearer credentials")
        return Denied(NoTokenError())
    if (getattr(credentials, "scheme", "Bearer") or "").lower() != "bearer":
        logger.info("Auth failed: unsupported authorization scheme")
        return Denied(NoTokenError())
    try:
        identity = decode_access_token(credentials.credentials, cfg)
    except TokenExpiredError:
        logger.info("Auth failed: token expired")
        return Denied(TokenFailedError())
    except TokenInvalidError:
        logger.info("Auth failed: token invalid")
        return Denied(TokenFailedError())
    return Authorized(identity)


def require_admin(identity: Identity) -> Authorized | Denied:
    """Role check only; the token was already verified by ``authenticate``."""
    if identity.role != ROLE_ADMIN:
        logger.info("Admin check failed for user=%s role=%s", identity.id, identity.role)
        return Denied(NotAdminError())
    return Authorized(identity)
