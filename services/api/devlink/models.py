"""
SQLAlchemy ORM models.

Each aggregate is stored as a single row; its embedded collections live in
JSON columns so the aggregate is always read and written as one unit:

  users    — account (unique email, password hash, avatar)
  posts    — post text + likes[] + comments[]
  profiles — profile fields + skills[] + social{} + experience[] + education[]

Posts and profiles carry a ``version`` counter used by SQLAlchemy's
optimistic concurrency check: an UPDATE against a stale version raises
``StaleDataError`` instead of silently overwriting a concurrent write.
"""
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devlink.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar: Mapped[Optional[str]] = mapped_column(String(500))
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, nullable=False)


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    # Author snapshot taken at creation time
    name: Mapped[Optional[str]] = mapped_column(String(255))
    avatar: Mapped[Optional[str]] = mapped_column(String(500))
    # [{"user": id}], newest first
    likes: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    # [{"id", "user", "text", "name", "avatar", "date"}], newest first
    comments: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("idx_posts_user", "user_id"),
        Index("idx_posts_date", "date"),
    )


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), unique=True, nullable=False
    )
    company: Mapped[Optional[str]] = mapped_column(String(255))
    website: Mapped[Optional[str]] = mapped_column(String(500))
    location: Mapped[Optional[str]] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(255), nullable=False)
    skills: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    bio: Mapped[Optional[str]] = mapped_column(Text)
    github_username: Mapped[Optional[str]] = mapped_column(String(100))
    # {"youtube": uri, "twitter": uri, ...}; absent platforms are omitted
    social: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    experience: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    education: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    user = relationship("User", lazy="joined")

    __mapper_args__ = {"version_id_col": version}
