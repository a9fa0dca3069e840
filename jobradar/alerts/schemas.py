"""Saved-search alert schemas."""

from uuid import UUID

from pydantic import Field

from ..jobs.schemas import CamelModel, ExperienceLevel, JobSearchQuery


class AlertFilterFields(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    query: str = Field(..., min_length=1, max_length=200)
    city: str | None = None
    experience: ExperienceLevel | None = None
    remote_only: bool | None = None
    salary_min: int | None = Field(None, ge=0)
    salary_max: int | None = Field(None, ge=0)


class AlertFilterCreate(AlertFilterFields):
    token: str = Field(..., min_length=1)


class AlertFilter(AlertFilterFields):
    id: str
    created_at: str

    def to_search_query(self) -> JobSearchQuery:
        return JobSearchQuery(
            keyword=self.query,
            city=self.city,
            experience=self.experience,
            remote_only=self.remote_only,
            salary_min=self.salary_min,
            salary_max=self.salary_max,
        )


class AlertDeleteRequest(CamelModel):
    filter_id: UUID
    token: str = Field(..., min_length=1)


class JobSummary(CamelModel):
    id: str
    title: str
    company: str
    city: str
    remote: bool


class Notification(CamelModel):
    id: str
    filter_id: str
    filter_name: str
    jobs: list[JobSummary]
    count: int
    timestamp: str
