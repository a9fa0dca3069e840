"""Job search schemas."""

import enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ExperienceLevel(str, enum.Enum):
    """hh.ru experience ids."""

    NO_EXPERIENCE = "noExperience"
    BETWEEN_1_AND_3 = "between1And3"
    BETWEEN_3_AND_6 = "between3And6"
    MORE_THAN_6 = "moreThan6"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Employer(CamelModel):
    id: str = ""
    name: str = ""
    logo: str | None = None
    trusted: bool | None = None


class Job(CamelModel):
    id: str
    title: str
    company: str = ""
    city: str = ""
    remote: bool = False
    experience: ExperienceLevel | None = None
    salary_min: int | None = None
    salary_max: int | None = None
    currency: str = "RUB"
    tags: list[str] = Field(default_factory=list)
    description: str = ""
    published_at: str = ""
    url: str = ""
    apply_url: str = ""
    employer: Employer = Field(default_factory=Employer)


class JobSearchQuery(BaseModel):
    keyword: str | None = None
    city: str | None = None
    salary_min: int | None = Field(None, ge=0)
    salary_max: int | None = Field(None, ge=0)
    experience: ExperienceLevel | None = None
    remote_only: bool | None = None


class Facets(CamelModel):
    cities: list[str] = Field(default_factory=list)
    salary_min: int = 0
    salary_max: int = 0


class JobSearchResult(CamelModel):
    items: list[Job]
    total: int
    next_cursor: str | None = None
    facets: Facets = Field(default_factory=Facets)


class JobsQueryParams(CamelModel):
    """Raw ``GET /jobs`` query string."""

    q: str | None = None
    city: str | None = None
    salary_min: int | None = Field(None, ge=0)
    salary_max: int | None = Field(None, ge=0)
    experience: ExperienceLevel | None = None
    remote: Literal["true", "false"] | None = None
    cursor: str | None = None
    limit: int = Field(20, ge=1, le=50)

    def to_query(self) -> JobSearchQuery:
        return JobSearchQuery(
            keyword=self.q,
            city=self.city,
            salary_min=self.salary_min,
            salary_max=self.salary_max,
            experience=self.experience,
            remote_only=None if self.remote is None else self.remote == "true",
        )
