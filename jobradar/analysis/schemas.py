"""Analysis request/response schemas."""

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator, model_validator
from pydantic.alias_generators import to_camel

EXPLANATION_MAX_LENGTH = 2_000


class LlmVacancyAnalysis(BaseModel):
    """The exact object the model must return. Extra keys are rejected."""

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)

    stress_free_score: StrictInt = Field(..., ge=0, le=100)
    remote_friendliness_score: StrictInt = Field(..., ge=0, le=100)
    learning_opportunities_score: StrictInt = Field(..., ge=0, le=100)
    explanation: str = Field(..., min_length=1, max_length=EXPLANATION_MAX_LENGTH)


class VacancyAnalysis(BaseModel):
    """Scored analysis as cached and returned to clients. Never mutated."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    stress_free_score: int = Field(..., ge=0, le=100)
    remote_friendliness_score: int = Field(..., ge=0, le=100)
    learning_opportunities_score: int = Field(..., ge=0, le=100)
    compatibility_score: int = Field(..., ge=0, le=100)
    explanation: str = Field(..., min_length=1, max_length=EXPLANATION_MAX_LENGTH)


class AnalyzeResult(BaseModel):
    fingerprint: str
    cached: bool
    analysis: VacancyAnalysis


class VacancyRef(BaseModel):
    id: str | int | None = None
    description: str = Field(..., min_length=1)

    @field_validator("id")
    @classmethod
    def id_not_empty(cls, value: str | int | None) -> str | int | None:
        if isinstance(value, str) and not value:
            raise ValueError("'vacancy.id' must not be empty")
        return value


class AnalyzeRequest(BaseModel):
    """Either a raw description or the id of a stored vacancy."""

    id: str | int | None = None
    description: str | None = Field(None, min_length=1)
    vacancy: VacancyRef | None = None

    @model_validator(mode="after")
    def require_description_or_id(self) -> "AnalyzeRequest":
        if isinstance(self.id, str) and not self.id:
            raise ValueError("'id' must not be empty")
        if not (self.description or self.vacancy or self.id is not None):
            raise ValueError("Expected either 'description'/'vacancy.description' or 'id'")
        return self

    @property
    def vacancy_id(self) -> str | None:
        raw = self.vacancy.id if self.vacancy and self.vacancy.id is not None else self.id
        return None if raw is None else str(raw)

    @property
    def inline_description(self) -> str | None:
        if self.vacancy is not None:
            return self.vacancy.description
        return self.description
