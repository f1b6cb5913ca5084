"""
Post endpoints (all private):
  POST   /api/posts                             — create a post
  GET    /api/posts                             — all posts, newest first
  GET    /api/posts/{id}                        — one post
  DELETE /api/posts/{id}                        — delete own post
  PUT    /api/posts/like/{id}                   — like, returns likes
  PUT    /api/posts/unlike/{id}                 — unlike, returns likes
  PUT    /api/posts/comment/{id}                — comment, returns comments
  PUT    /api/posts/uncomment/{post_id}/{com_id} — remove a comment
"""
import logging

from fastapi import APIRouter, Depends
from opentelemetry import trace

from devlink.dependencies import get_post_service
from devlink.schemas import Comment, Like, MessageResponse, PostResponse, TextBody
from devlink.security import Identity, get_current_identity
from devlink.services.posts import PostService

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(get_current_identity)])
tracer = trace.get_tracer(__name__)


@router.post("", response_model=PostResponse)
async def create_post(
    body: TextBody,
    identity: Identity = Depends(get_current_identity),
    service: PostService = Depends(get_post_service),
):
    with tracer.start_as_current_span("create_post") as span:
        post = await service.create_post(identity, body.text)
        span.set_attribute("post.id", post.id)
        span.set_attribute("post.user_id", post.user_id)
        return post


@router.get("", response_model=list[PostResponse])
async def list_posts(service: PostService = Depends(get_post_service)):
    return await service.list_posts()


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: str, service: PostService = Depends(get_post_service)):
    return await service.get_post(post_id)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: str,
    identity: Identity = Depends(get_current_identity),
    service: PostService = Depends(get_post_service),
):
    with tracer.start_as_current_span("delete_post"):
        await service.delete_post(post_id, identity)
        return MessageResponse(msg="Post removed")


@router.put("/like/{post_id}", response_model=list[Like])
async def like_post(
    post_id: str,
    identity: Identity = Depends(get_current_identity),
    service: PostService = Depends(get_post_service),
):
    with tracer.start_as_current_span("like_post"):
        return await service.like(post_id, identity)


@router.put("/unlike/{post_id}", response_model=list[Like])
async def unlike_post(
    post_id: str,
    identity: Identity = Depends(get_current_identity),
    service: PostService = Depends(get_post_service),
):
    with tracer.start_as_current_span("unlike_post"):
        return await service.unlike(post_id, identity)


@router.put("/comment/{post_id}", response_model=list[Comment])
async def comment_post(
    post_id: str,
    body: TextBody,
    identity: Identity = Depends(get_current_identity),
    service: PostService = Depends(get_post_service),
):
    with tracer.start_as_current_span("comment_post"):
        return await service.add_comment(post_id, identity, body.text)


@router.put("/uncomment/{post_id}/{comment_id}", response_model=list[Comment])
async def uncomment_post(
    post_id: str,
    comment_id: str,
    identity: Identity = Depends(get_current_identity),
    service: PostService = Depends(get_post_service),
):
    with tracer.start_as_current_span("uncomment_post"):
        return await service.remove_comment(post_id, comment_id, identity)
