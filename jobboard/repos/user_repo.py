import logging

from sqlalchemy import update as sql_update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobboard.core.exceptions import DuplicateUsernameError, NotFoundOrAlreadyAdminError
from jobboard.core.security import hash_password
from jobboard.models.user import ROLE_ADMIN, ROLE_USER, User

logger = logging.getLogger(__name__)


def get_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def get_by_id(db: Session, user_id: int) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def create(db: Session, username: str, password: str) -> User:
    """Insert a new user with role ``user``.

    The username pre-check is an early exit; the unique constraint decides.
    """
    if get_by_username(db, username):
        raise DuplicateUsernameError()
    user = User(
        username=username,
        password_hash=hash_password(password),
        role=ROLE_USER,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info("Register lost uniqueness race for username=%s", username)
        raise DuplicateUsernameError() from e
    db.refresh(user)
    return user


def get_all_users(db: Session) -> list[User]:
    """List all users for admin, oldest first."""
    return db.query(User).order_by(User.id.asc()).all()


def promote_to_admin(db: Session, user_id: int) -> None:
    """Flip role user -> admin.

    Only rows whose role is exactly ``user`` are touched; zero affected rows
    means the user is missing or already an admin, and the two cases are
    reported the same way.
    """
    result = db.execute(
        sql_update(User)
        .where(User.id == user_id, User.role == ROLE_USER)
        .values(role=ROLE_ADMIN)
    )
    db.commit()
    if not result.rowcount:
        raise NotFoundOrAlreadyAdminError()
    logger.info("User %s promoted to admin", user_id)
