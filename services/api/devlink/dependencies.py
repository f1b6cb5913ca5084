"""
FastAPI dependencies that assemble services from per-app state.

``create_app`` puts the Settings, the Database and the GitHub client on
``app.state``; services get them injected here per request.
"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from devlink.config import Settings
from devlink.database import get_db
from devlink.services.posts import PostService
from devlink.services.profiles import ProfileService
from devlink.services.users import UserService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> UserService:
    return UserService(db, settings)


def get_post_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> PostService:
    return PostService(db, settings)


def get_profile_service(
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ProfileService:
    return ProfileService(db, settings, github=request.app.state.github_client)
