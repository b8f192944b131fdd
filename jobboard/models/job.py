from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String, Text, false
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from jobboard.database import Base


class Job(Base):
    """A posting created by an admin. Archiving hides it from the public board."""

    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    company_name = Column(String(200), nullable=False)
    company_description = Column(Text, nullable=False)
    job_description = Column(Text, nullable=False)
    location = Column(String(200), nullable=False)
    requirements = Column(Text)
    salary = Column(String(100))
    tags = Column(String(500))  # comma-separated
    deadline = Column(Date)
    date_posted = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    is_archived = Column(Boolean, nullable=False, default=False, server_default=false())

    applications = relationship("Application", back_populates="job")
