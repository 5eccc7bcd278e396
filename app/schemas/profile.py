import re

from pydantic import BaseModel, field_validator

_NAME_RE = re.compile(r"^[a-zA-Z\s'-]+$")


def _clean_list(values: list[str], label: str) -> list[str]:
    cleaned = [v.strip() for v in values if v and v.strip()]
    if len(cleaned) > 20:
        raise ValueError(f"Maximum 20 {label} allowed")
    for v in cleaned:
        if len(v) > 50:
            raise ValueError(f"Each {label[:-1]} must be at most 50 characters")
    return cleaned


class ProfileCreate(BaseModel):
    full_name: str
    role: str
    skills: list[str]
    interests: list[str]
    bio: str | None = None
    department: str | None = None
    year: str | None = None
    avatar_url: str | None = None

    @field_validator("full_name")
    @classmethod
    def full_name_valid(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        if len(v) > 100:
            raise ValueError("Name must be less than 100 characters")
        if not _NAME_RE.match(v):
            raise ValueError("Name can only contain letters, spaces, hyphens, and apostrophes")
        return v

    @field_validator("role")
    @classmethod
    def role_valid(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in ("FINDER", "SEEKER"):
            raise ValueError("Role must be FINDER or SEEKER")
        return v

    @field_validator("skills")
    @classmethod
    def skills_valid(cls, v: list[str]) -> list[str]:
        v = _clean_list(v, "skills")
        if not v:
            raise ValueError("At least one skill is required")
        return v

    @field_validator("interests")
    @classmethod
    def interests_valid(cls, v: list[str]) -> list[str]:
        v = _clean_list(v, "interests")
        if not v:
            raise ValueError("At least one interest is required")
        return v

    @field_validator("bio")
    @classmethod
    def bio_length(cls, v: str | None) -> str | None:
        if v is not None and len(v) > 500:
            raise ValueError("Bio must be less than 500 characters")
        return v


class ProfileUpdate(BaseModel):
    full_name: str | None = None
    bio: str | None = None
    skills: list[str] | None = None
    interests: list[str] | None = None
    department: str | None = None
    year: str | None = None
    avatar_url: str | None = None

    @field_validator("full_name")
    @classmethod
    def full_name_min(cls, v: str | None) -> str | None:
        if v is not None and len(v.strip()) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v.strip() if v is not None else v

    @field_validator("bio")
    @classmethod
    def bio_length(cls, v: str | None) -> str | None:
        if v is not None and len(v) > 500:
            raise ValueError("Bio must be less than 500 characters")
        return v

    @field_validator("skills", "interests")
    @classmethod
    def list_limit(cls, v: list[str] | None, info) -> list[str] | None:
        if v is None:
            return v
        return _clean_list(v, info.field_name)
