"""
Account endpoints:
  POST /api/users — register, returns a token
  POST /api/auth  — log in, returns a token
  GET  /api/auth  — the authenticated user (without password)
"""
import logging

from fastapi import APIRouter, Depends
from opentelemetry import trace

from devlink.dependencies import get_user_service
from devlink.schemas import LoginRequest, TokenResponse, UserCreate, UserResponse
from devlink.security import Identity, get_current_identity
from devlink.services.users import UserService

logger = logging.getLogger(__name__)
users_router = APIRouter()
auth_router = APIRouter()
tracer = trace.get_tracer(__name__)


@users_router.post("", response_model=TokenResponse)
async def register(body: UserCreate, service: UserService = Depends(get_user_service)):
    with tracer.start_as_current_span("register_user"):
        token = await service.register(body.name, body.email, body.password)
        return TokenResponse(token=token)


@auth_router.post("", response_model=TokenResponse)
async def login(body: LoginRequest, service: UserService = Depends(get_user_service)):
    with tracer.start_as_current_span("login"):
        token = await service.authenticate(body.email, body.password)
        return TokenResponse(token=token)


@auth_router.get("", response_model=UserResponse)
async def current_user(
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
):
    return await service.get_user(identity)
