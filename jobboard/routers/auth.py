import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from jobboard.database import get_db
from jobboard.dependencies import get_current_identity
from jobboard.core.exceptions import InvalidCredentialsError, MissingFieldError, ValidationError
from jobboard.core.security import (
    Identity,
    create_access_token,
    verify_password,
    verify_password_for_missing_user,
)
from jobboard.models.user import User
from jobboard.repos.user_repo import create as create_user, get_by_username
from jobboard.schemas.auth import (
    MIN_PASSWORD_LENGTH,
    USERNAME_RE,
    IdentityResponse,
    Token,
    UserCredentials,
    UserResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])


def _token_response(user: User) -> Token:
    token = create_access_token(user.id, user.role)
    return Token(token=token, user=UserResponse.model_validate(user))


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(data: UserCredentials, db: Session = Depends(get_db)):
    if not data.username or not data.password:
        raise MissingFieldError("Please provide username and password")
    if not USERNAME_RE.match(data.username):
        raise ValidationError(
            "Username must be 3-30 characters and contain only letters, numbers, and underscores"
        )
    if len(data.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    user = create_user(db, data.username, data.password)
    logger.info("User registered: %s", user.username)
    return _token_response(user)


@router.post("/login", response_model=Token)
def login(data: UserCredentials, db: Session = Depends(get_db)):
    # Unknown user and wrong password share one response.
    user = get_by_username(db, data.username) if data.username else None
    if not user:
        verify_password_for_missing_user(data.password)
        logger.info("Login failed for username=%s", data.username)
        raise InvalidCredentialsError()
    if not data.password or not verify_password(data.password, user.password_hash):
        logger.info("Login failed for username=%s", data.username)
        raise InvalidCredentialsError()
    logger.info("User logged in: %s", user.username)
    return _token_response(user)


@router.get("/me", response_model=IdentityResponse)
def get_me(identity: Identity = Depends(get_current_identity)):
    return IdentityResponse(id=identity.id, role=identity.role)
