from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from jobboard.database import Base

STATUS_PENDING = "pending"
STATUS_REVIEWED = "reviewed"
STATUS_ACCEPTED = "accepted"
STATUS_REJECTED = "rejected"
APPLICATION_STATUSES = (STATUS_PENDING, STATUS_REVIEWED, STATUS_ACCEPTED, STATUS_REJECTED)


class Application(Base):
    """A user's submission to a job. One per (job, user)."""

    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("job_id", "user_id", name="uq_applications_job_user"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    cover_letter = Column(Text, nullable=False)
    cv_url = Column(String(500), nullable=False)
    status = Column(String(16), nullable=False, default=STATUS_PENDING, server_default=STATUS_PENDING)
    application_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    job = relationship("Job", back_populates="applications")
    user = relationship("User", back_populates="applications")
