"""
Pydantic request / response schemas for the API layer.
Kept separate from ORM models to avoid coupling transport to storage.

Embedded entries (likes, comments, experience, education) are validated with
these models before they are written into the aggregate's JSON columns, so
stored documents always have the same shape as API responses.
"""
from datetime import date, datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


# ──────────────────────────── Users / Auth ────────────────────────────────

class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name can't be blank.")
        return v.strip()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    token: str


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    avatar: Optional[str]
    date: datetime

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    id: str
    name: str
    avatar: Optional[str]

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    msg: str


# ──────────────────────────── Posts ───────────────────────────────────────

class TextBody(BaseModel):
    """Body of POST /api/posts and PUT /api/posts/comment/{id}."""
    text: str = Field(..., min_length=1)

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Text is required")
        return v


class Like(BaseModel):
    user: str


class Comment(BaseModel):
    id: str
    user: str
    text: str
    name: Optional[str] = None
    avatar: Optional[str] = None
    date: datetime


class PostResponse(BaseModel):
    id: str
    user: str = Field(validation_alias="user_id")
    text: str
    name: Optional[str]
    avatar: Optional[str]
    likes: list[Like]
    comments: list[Comment]
    date: datetime

    model_config = ConfigDict(from_attributes=True)


# ──────────────────────────── Profiles ────────────────────────────────────

SOCIAL_PLATFORMS = ("youtube", "twitter", "facebook", "linkedin", "instagram")


class ProfileUpsert(BaseModel):
    status: str = Field(..., min_length=1)
    # Either a list or a comma-separated string, e.g. "python, sql"
    skills: Union[list[str], str]
    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    github_username: Optional[str] = None
    youtube: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None

    @field_validator("skills")
    @classmethod
    def _split_skills(cls, v: Union[list[str], str]) -> list[str]:
        raw = v.split(",") if isinstance(v, str) else v
        skills = [s.strip() for s in raw if s and s.strip()]
        if not skills:
            raise ValueError("Skills is required")
        return skills


class ExperienceCreate(BaseModel):
    title: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    location: Optional[str] = None
    from_date: date = Field(..., alias="from")
    to_date: Optional[date] = Field(None, alias="to")
    current: bool = False
    description: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class Experience(ExperienceCreate):
    id: str


class EducationCreate(BaseModel):
    school: str = Field(..., min_length=1)
    degree: str = Field(..., min_length=1)
    field_of_study: str = Field(..., min_length=1)
    from_date: date = Field(..., alias="from")
    to_date: Optional[date] = Field(None, alias="to")
    current: bool = False
    description: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class Education(EducationCreate):
    id: str


class ProfileResponse(BaseModel):
    id: str
    user: UserSummary
    company: Optional[str]
    website: Optional[str]
    location: Optional[str]
    status: str
    skills: list[str]
    bio: Optional[str]
    github_username: Optional[str]
    social: dict[str, str]
    experience: list[Experience]
    education: list[Education]
    date: datetime

    model_config = ConfigDict(from_attributes=True)


# ──────────────────────────── GitHub ──────────────────────────────────────

class GithubRepo(BaseModel):
    """Subset of the GitHub repository object shown on profile pages."""
    id: int
    name: str
    html_url: str
    description: Optional[str] = None
    stargazers_count: int = 0
    watchers_count: int = 0
    forks_count: int = 0
