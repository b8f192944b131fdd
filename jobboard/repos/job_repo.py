import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone

from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from jobboard.models.job import Job

logger = logging.getLogger(__name__)

# Fields an admin sets on create and overwrites on update.
MUTABLE_FIELDS = (
    "title",
    "company_name",
    "company_description",
    "job_description",
    "location",
    "requirements",
    "salary",
    "tags",
    "deadline",
)


def _term(value: str | None) -> str | None:
    if value and value.strip():
        return value.strip()
    return None


@dataclass(frozen=True)
class JobFilter:
    """Public listing predicate.

    The same instance narrows both the count query and the page query, so
    ``total`` always describes the rows being paged through.
    """

    search: str | None = None
    location: str | None = None
    tags: str | None = None

    def apply(self, q: Query) -> Query:
        q = q.filter(Job.is_archived.is_(False))
        search = _term(self.search)
        if search:
            q = q.filter(
                or_(
                    Job.title.icontains(search, autoescape=True),
                    Job.company_description.icontains(search, autoescape=True),
                )
            )
        location = _term(self.location)
        if location:
            q = q.filter(Job.location.icontains(location, autoescape=True))
        tags = _term(self.tags)
        if tags:
            q = q.filter(Job.tags.icontains(tags, autoescape=True))
        return q


def list_public(
    db: Session,
    filters: JobFilter,
    limit: int = 10,
    offset: int = 0,
) -> tuple[list[Job], int]:
    """Non-archived jobs matching ``filters``, newest first. Returns (items, total)."""
    q = filters.apply(db.query(Job))
    total = q.count()
    items = (
        q.order_by(Job.date_posted.desc(), Job.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return items, total


def get_public_by_id(db: Session, job_id: int) -> Job | None:
    """Archived jobs are invisible here, same as missing ones."""
    return (
        db.query(Job)
        .filter(Job.id == job_id, Job.is_archived.is_(False))
        .first()
    )


def get_by_id(db: Session, job_id: int) -> Job | None:
    return db.query(Job).filter(Job.id == job_id).first()


def get_all(db: Session) -> list[Job]:
    """All jobs for admin, archived included."""
    return db.query(Job).order_by(Job.date_posted.desc(), Job.id.desc()).all()


def create(
    db: Session,
    *,
    title: str,
    company_name: str,
    company_description: str,
    job_description: str,
    location: str,
    requirements: str | None = None,
    salary: str | None = None,
    tags: str | None = None,
    deadline: date | None = None,
) -> Job:
    job = Job(
        title=title,
        company_name=company_name,
        company_description=company_description,
        job_description=job_description,
        location=location,
        requirements=requirements,
        salary=salary,
        tags=tags,
        deadline=deadline,
        date_posted=datetime.now(timezone.utc),
        is_archived=False,
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    logger.info("Job created: id=%s title=%s", job.id, job.title)
    return job


def update(db: Session, job_id: int, **fields) -> Job | None:
    """Full overwrite of every mutable field; omitted ones become NULL."""
    job = get_by_id(db, job_id)
    if not job:
        return None
    for name in MUTABLE_FIELDS:
        setattr(job, name, fields.get(name))
    db.commit()
    db.refresh(job)
    return job


def archive(db: Session, job_id: int) -> bool:
    """Soft delete. Returns False if the job does not exist."""
    job = get_by_id(db, job_id)
    if not job:
        return False
    job.is_archived = True
    db.commit()
    logger.info("Job archived: id=%s", job_id)
    return True
