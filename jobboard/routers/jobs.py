import logging
import math

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from jobboard.config import settings
from jobboard.database import get_db
from jobboard.dependencies import get_current_admin, get_current_identity
from jobboard.core.exceptions import (
    DuplicateApplicationError,
    JobNotFoundError,
    MissingFieldError,
    ValidationError,
)
from jobboard.core.security import Identity
from jobboard.repos import application_repo, job_repo
from jobboard.repos.job_repo import JobFilter
from jobboard.schemas.job import (
    ApplicationCreated,
    ApplicationOut,
    ApplicationStatusUpdate,
    JobCreated,
    JobIn,
    JobOut,
    JobPage,
    MessageResponse,
)
from jobboard.services.cv_storage import delete_cv, save_cv, validate_cv

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/jobs", tags=["jobs"])

MAX_COVER_LETTER_LENGTH = 1000


# ---- Public ----
@router.get("", response_model=JobPage)
def list_jobs(
    search: str | None = None,
    location: str | None = None,
    tags: str | None = None,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    """Non-archived jobs, newest first, with optional filters and pagination."""
    limit = min(limit or settings.default_page_size, settings.max_page_size)
    offset = (page - 1) * limit
    filters = JobFilter(search=search, location=location, tags=tags)
    jobs, total = job_repo.list_public(db, filters, limit=limit, offset=offset)
    logger.debug("GET /api/jobs filters=%s page=%d limit=%d total=%d", filters, page, limit, total)
    return JobPage(
        data=[JobOut.model_validate(j) for j in jobs],
        totalPages=math.ceil(total / limit),
        currentPage=page,
    )


# ---- Static paths; registered before /{job_id} so they are matched first ----
@router.get("/admin/all", response_model=list[JobOut])
def list_all_jobs(
    db: Session = Depends(get_db),
    admin: Identity = Depends(get_current_admin),
):
    """Every job including archived ones. Admin only."""
    return [JobOut.model_validate(j) for j in job_repo.get_all(db)]


@router.get("/admin/all-applications", response_model=list[ApplicationOut])
def list_all_applications(
    db: Session = Depends(get_db),
    admin: Identity = Depends(get_current_admin),
):
    """Applications across all jobs with applicant and job details. Admin only."""
    return application_repo.get_all(db)


@router.get("/user/applications", response_model=list[ApplicationOut])
def list_my_applications(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """The caller's own applications, used to mark jobs already applied to."""
    return application_repo.get_for_user(db, identity.id)


@router.put("/applications/{app_id}", response_model=MessageResponse)
def update_application_status(
    app_id: int,
    body: ApplicationStatusUpdate,
    db: Session = Depends(get_db),
    admin: Identity = Depends(get_current_admin),
):
    """Set an application's status. Admin only."""
    application_repo.update_status(db, app_id, body.status)
    logger.info("Admin %s set application %s to %s", admin.id, app_id, body.status)
    return MessageResponse(message=f"Application {app_id} status updated to {body.status}")


# ---- Admin job management ----
@router.post("", response_model=JobCreated, status_code=status.HTTP_201_CREATED)
def create_job(
    body: JobIn,
    db: Session = Depends(get_db),
    admin: Identity = Depends(get_current_admin),
):
    """Create a job. Admin only."""
    job = job_repo.create(db, **body.model_dump())
    return JobCreated(id=job.id)


@router.get("/{job_id}", response_model=JobOut)
def get_job(job_id: int, db: Session = Depends(get_db)):
    job = job_repo.get_public_by_id(db, job_id)
    if not job:
        raise JobNotFoundError()
    return JobOut.model_validate(job)


@router.put("/{job_id}", response_model=MessageResponse)
def update_job(
    job_id: int,
    body: JobIn,
    db: Session = Depends(get_db),
    admin: Identity = Depends(get_current_admin),
):
    """Overwrite every field of a job. Admin only."""
    if not job_repo.update(db, job_id, **body.model_dump()):
        raise JobNotFoundError("Job not found")
    return MessageResponse(message=f"Job {job_id} updated successfully")


@router.delete("/{job_id}", response_model=MessageResponse)
def archive_job(
    job_id: int,
    db: Session = Depends(get_db),
    admin: Identity = Depends(get_current_admin),
):
    """Archive (soft delete) a job. Admin only."""
    if not job_repo.archive(db, job_id):
        raise JobNotFoundError("Job not found")
    return MessageResponse(message=f"Job {job_id} archived successfully")


@router.get("/{job_id}/applications", response_model=list[ApplicationOut])
def list_job_applications(
    job_id: int,
    db: Session = Depends(get_db),
    admin: Identity = Depends(get_current_admin),
):
    """Applications for one job with applicant usernames. Admin only."""
    return application_repo.get_for_job(db, job_id)


# ---- Applying ----
@router.post("/{job_id}/apply", response_model=ApplicationCreated, status_code=status.HTTP_201_CREATED)
def apply_to_job(
    job_id: int,
    cover_letter: str | None = Form(None),
    cv_file: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    """Submit a cover letter and a PDF CV for a job. Any authenticated user."""
    if not cover_letter or not cover_letter.strip() or cv_file is None or not cv_file.filename:
        raise MissingFieldError("Please provide a cover letter and a CV file")
    cover_letter = cover_letter.strip()
    if len(cover_letter) > MAX_COVER_LETTER_LENGTH:
        raise ValidationError(f"Cover letter must not exceed {MAX_COVER_LETTER_LENGTH} characters")

    if not job_repo.get_public_by_id(db, job_id):
        raise JobNotFoundError()
    if application_repo.get_existing(db, job_id, identity.id):
        raise DuplicateApplicationError(job_id, identity.id)

    content = cv_file.file.read()
    validate_cv(cv_file.filename, content, settings)
    cv_url, path = save_cv(cv_file.filename, content, settings)
    try:
        application = application_repo.create(db, job_id, identity.id, cover_letter, cv_url)
    except Exception:
        # No row references the file.
        delete_cv(path)
        raise
    logger.info("User %s applied to job %s (application %s)", identity.id, job_id, application.id)
    return ApplicationCreated(applicationId=application.id)
