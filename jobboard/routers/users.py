import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jobboard.database import get_db
from jobboard.dependencies import get_current_admin
from jobboard.core.security import Identity
from jobboard.repos.user_repo import get_all_users, promote_to_admin
from jobboard.schemas.auth import UserResponse
from jobboard.schemas.job import MessageResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    admin: Identity = Depends(get_current_admin),
):
    """List users without password hashes. Admin only."""
    return [UserResponse.model_validate(u) for u in get_all_users(db)]


@router.put("/{user_id}/promote", response_model=MessageResponse)
def promote_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: Identity = Depends(get_current_admin),
):
    """Promote a user to admin. Admin only."""
    promote_to_admin(db, user_id)
    logger.info("Admin %s promoted user %s", admin.id, user_id)
    return MessageResponse(message=f"User {user_id} has been promoted to admin.")
