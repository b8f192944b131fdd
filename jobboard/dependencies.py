from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from jobboard.config import settings
from jobboard.core.access import Denied, authenticate, require_admin
from jobboard.core.security import Identity

security = HTTPBearer(auto_error=False)


def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Identity:
    result = authenticate(credentials, settings)
    if isinstance(result, Denied):
        raise result.error
    return result.identity


def get_current_admin(
    identity: Identity = Depends(get_current_identity),
) -> Identity:
    """Require an authenticated caller whose role is admin."""
    result = require_admin(identity)
    if isinstance(result, Denied):
        raise result.error
    return result.identity
