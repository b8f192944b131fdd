from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator


class JobIn(BaseModel):
    """Create/update body. Update is a full overwrite, so it takes the same shape."""

    title: str = Field(min_length=1, max_length=200)
    company_name: str = Field(min_length=1, max_length=200)
    company_description: str = Field(min_length=1)
    job_description: str = Field(min_length=1)
    location: str = Field(min_length=1, max_length=200)
    requirements: str | None = None
    salary: str | None = Field(default=None, max_length=100)
    tags: str | None = Field(default=None, max_length=500)
    deadline: date | None = None

    @field_validator("title", "company_name", "company_description", "job_description", "location")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("deadline", mode="before")
    @classmethod
    def empty_deadline_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class JobOut(BaseModel):
    id: int
    title: str
    company_name: str
    company_description: str
    job_description: str
    location: str
    requirements: str | None = None
    salary: str | None = None
    tags: str | None = None
    deadline: date | None = None
    date_posted: datetime | None = None
    is_archived: bool = False

    class Config:
        from_attributes = True


class JobPage(BaseModel):
    data: list[JobOut]
    totalPages: int
    currentPage: int


class JobCreated(BaseModel):
    id: int


class ApplicationOut(BaseModel):
    id: int
    job_id: int
    user_id: int
    cover_letter: str
    cv_url: str
    status: str
    application_date: str | None = None
    username: str | None = None
    job_title: str | None = None
    company_name: str | None = None


class ApplicationCreated(BaseModel):
    message: str = "Application submitted successfully"
    applicationId: int


class ApplicationStatusUpdate(BaseModel):
    # Checked against the allowed statuses in the repo so the API returns
    # its own 400 "Invalid status" instead of a 422.
    status: str | None = None


class MessageResponse(BaseModel):
    message: str
