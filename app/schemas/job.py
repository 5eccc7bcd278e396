from pydantic import BaseModel, Field, field_validator

JOB_TYPES = ("ACADEMIC_PROJECT", "STARTUP_COLLABORATION", "PART_TIME_JOB", "COMPETITION_HACKATHON")


def _check_type(v: str | None) -> str | None:
    if v is not None and v not in JOB_TYPES:
        raise ValueError(f"type must be one of {', '.join(JOB_TYPES)}")
    return v


def _check_tags(v: list[str] | None) -> list[str] | None:
    if v is None:
        return v
    v = [t.strip() for t in v if t and t.strip()]
    if len(v) > 15:
        raise ValueError("Maximum 15 tags allowed")
    return v


class JobCreate(BaseModel):
    title: str
    type: str
    description: str
    requirements: str | None = None
    duration: str | None = None
    compensation: str | None = None
    location: str | None = None
    team_size: str | None = Field(default=None, alias="teamSize")
    tags: list[str] = []
    is_draft: bool = Field(default=False, alias="isDraft")

    class Config:
        populate_by_name = True

    @field_validator("title")
    @classmethod
    def title_length(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 5:
            raise ValueError("Title must be at least 5 characters")
        if len(v) > 200:
            raise ValueError("Title must be less than 200 characters")
        return v

    @field_validator("type")
    @classmethod
    def type_valid(cls, v: str) -> str:
        return _check_type(v)

    @field_validator("description")
    @classmethod
    def description_length(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 50:
            raise ValueError("Description must be at least 50 characters")
        if len(v) > 5000:
            raise ValueError("Description must be less than 5000 characters")
        return v

    @field_validator("tags")
    @classmethod
    def tags_limit(cls, v: list[str]) -> list[str]:
        return _check_tags(v)


class JobUpdate(BaseModel):
    title: str | None = None
    type: str | None = None
    description: str | None = None
    requirements: str | None = None
    duration: str | None = None
    compensation: str | None = None
    location: str | None = None
    team_size: str | None = Field(default=None, alias="teamSize")
    tags: list[str] | None = None
    is_draft: bool | None = Field(default=None, alias="isDraft")

    class Config:
        populate_by_name = True

    @field_validator("type")
    @classmethod
    def type_valid(cls, v: str | None) -> str | None:
        return _check_type(v)

    @field_validator("tags")
    @classmethod
    def tags_limit(cls, v: list[str] | None) -> list[str] | None:
        return _check_tags(v)


class JobPaymentRequest(BaseModel):
    amount: float | None = None
