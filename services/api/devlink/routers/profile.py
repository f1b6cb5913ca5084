"""
Profile endpoints:
  GET    /api/profile/me                    — own profile (private)
  POST   /api/profile                       — create / update own profile (private)
  GET    /api/profile                       — all profiles
  GET    /api/profile/user/{user_id}        — profile by user id
  DELETE /api/profile                       — delete posts, profile and account (private)
  PUT    /api/profile/experience            — add experience (private)
  DELETE /api/profile/experience/{exp_id}   — remove experience (private)
  PUT    /api/profile/education             — add education (private)
  DELETE /api/profile/education/{edu_id}    — remove education (private)
  GET    /api/profile/github/{username}     — latest GitHub repositories
"""
import logging

from fastapi import APIRouter, Depends
from opentelemetry import trace

from devlink.dependencies import get_profile_service
from devlink.schemas import (
    EducationCreate,
    ExperienceCreate,
    GithubRepo,
    MessageResponse,
    ProfileResponse,
    ProfileUpsert,
)
from devlink.security import Identity, get_current_identity
from devlink.services.profiles import ProfileService

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.get("/me", response_model=ProfileResponse)
async def my_profile(
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
):
    return await service.get_by_user(identity.id)


@router.post("", response_model=ProfileResponse)
async def upsert_profile(
    body: ProfileUpsert,
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
):
    with tracer.start_as_current_span("upsert_profile"):
        return await service.upsert(identity.id, body)


@router.get("", response_model=list[ProfileResponse])
async def list_profiles(service: ProfileService = Depends(get_profile_service)):
    return await service.list_profiles()


@router.get("/user/{user_id}", response_model=ProfileResponse)
async def profile_by_user(user_id: str, service: ProfileService = Depends(get_profile_service)):
    return await service.get_by_user(user_id)


@router.delete("", response_model=MessageResponse)
async def delete_account(
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
):
    with tracer.start_as_current_span("delete_account"):
        await service.delete_cascade(identity.id)
        return MessageResponse(msg="User deleted")


@router.put("/experience", response_model=ProfileResponse)
async def add_experience(
    body: ExperienceCreate,
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
):
    return await service.add_experience(identity.id, body)


@router.delete("/experience/{exp_id}", response_model=ProfileResponse)
async def remove_experience(
    exp_id: str,
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
):
    return await service.remove_experience(identity.id, exp_id)


@router.put("/education", response_model=ProfileResponse)
async def add_education(
    body: EducationCreate,
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
):
    return await service.add_education(identity.id, body)


@router.delete("/education/{edu_id}", response_model=ProfileResponse)
async def remove_education(
    edu_id: str,
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service),
):
    return await service.remove_education(identity.id, edu_id)


@router.get("/github/{username}", response_model=list[GithubRepo])
async def github_repos(username: str, service: ProfileService = Depends(get_profile_service)):
    with tracer.start_as_current_span("github_repos") as span:
        span.set_attribute("github.username", username)
        return await service.github_repos(username)
