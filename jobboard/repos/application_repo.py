import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobboard.core.exceptions import (
    ApplicationNotFoundError,
    DuplicateApplicationError,
    InvalidStatusError,
)
from jobboard.models.application import APPLICATION_STATUSES, STATUS_PENDING, Application
from jobboard.models.job import Job
from jobboard.models.user import User

logger = logging.getLogger(__name__)


def get_existing(db: Session, job_id: int, user_id: int) -> Application | None:
    return (
        db.query(Application)
        .filter(
            Application.job_id == job_id,
            Application.user_id == user_id,
        )
        .first()
    )


def get_by_id(db: Session, application_id: int) -> Application | None:
    return db.query(Application).filter(Application.id == application_id).first()


def create(
    db: Session,
    job_id: int,
    user_id: int,
    cover_letter: str,
    cv_url: str,
) -> Application:
    """Insert an application.

    A concurrent submission for the same (job, user) can slip past any
    pre-check; the unique constraint catches it here and it is reported as
    the same DuplicateApplicationError.
    """
    application = Application(
        job_id=job_id,
        user_id=user_id,
        cover_letter=cover_letter,
        cv_url=cv_url,
        status=STATUS_PENDING,
        application_date=datetime.now(timezone.utc),
    )
    db.add(application)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info("Duplicate application rejected by constraint: job=%s user=%s", job_id, user_id)
        raise DuplicateApplicationError(job_id, user_id) from e
    db.refresh(application)
    return application


def get_for_job(db: Session, job_id: int) -> list[dict]:
    rows = (
        db.query(Application, User.username)
        .join(User, Application.user_id == User.id)
        .filter(Application.job_id == job_id)
        .order_by(Application.application_date.desc(), Application.id.desc())
        .all()
    )
    return [_to_dict(a, username=username) for a, username in rows]


def get_all(db: Session) -> list[dict]:
    rows = (
        db.query(Application, User.username, Job.title, Job.company_name)
        .join(User, Application.user_id == User.id)
        .join(Job, Application.job_id == Job.id)
        .order_by(Application.application_date.desc(), Application.id.desc())
        .all()
    )
    return [
        _to_dict(a, username=username, job_title=title, company_name=company)
        for a, username, title, company in rows
    ]


def get_for_user(db: Session, user_id: int) -> list[dict]:
    rows = (
        db.query(Application, Job.title, Job.company_name)
        .join(Job, Application.job_id == Job.id)
        .filter(Application.user_id == user_id)
        .order_by(Application.application_date.desc(), Application.id.desc())
        .all()
    )
    return [_to_dict(a, job_title=title, company_name=company) for a, title, company in rows]


def update_status(db: Session, application_id: int, status: str) -> Application:
    """Overwrite status. Any of the four values may follow any other."""
    if status not in APPLICATION_STATUSES:
        raise InvalidStatusError()
    application = get_by_id(db, application_id)
    if not application:
        raise ApplicationNotFoundError()
    application.status = status
    db.commit()
    db.refresh(application)
    logger.info("Application %s status -> %s", application_id, status)
    return application


def _to_dict(a: Application, **extra) -> dict:
    out = {
        "id": a.id,
        "job_id": a.job_id,
        "user_id": a.user_id,
        "cover_letter": a.cover_letter,
        "cv_url": a.cv_url,
        "status": a.status,
        "application_date": a.application_date.isoformat() if a.application_date else None,
    }
    out.update(extra)
    return out
