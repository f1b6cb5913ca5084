"""
Post aggregate service.

State machine of a post with respect to a user u:

  like      u not in likes  → likes = [{u}] + likes
            u in likes      → AlreadyLiked
  unlike    u in likes      → likes minus u's entry (order kept)
            u not in likes  → NotLiked
  comment                   → comments = [new comment] + comments
  uncomment comment missing → NotFound
            u owns post or comment → comment removed
            otherwise       → Forbidden, nothing written
  delete    u owns post     → post removed
            otherwise       → Forbidden

Every write goes through ``commit_with_retry`` so two users liking the same
post at once cannot overwrite each other's entry.
"""
import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from devlink.config import Settings
from devlink.errors import (
    AlreadyLiked,
    DevlinkError,
    Forbidden,
    NotFound,
    NotLiked,
)
from devlink.models import Post, User
from devlink.schemas import Comment, Like
from devlink.security import Identity
from devlink.services.base import commit, commit_with_retry
from devlink.telemetry import POST_MUTATIONS_TOTAL, POSTS_CREATED_TOTAL

logger = logging.getLogger(__name__)


def _index_of_like(likes: list[dict], user_id: str) -> int:
    for i, like in enumerate(likes):
        if like.get("user") == user_id:
            return i
    return -1


def _index_of_comment(comments: list[dict], comment_id: str) -> int:
    for i, comment in enumerate(comments):
        if comment.get("id") == comment_id:
            return i
    return -1


class PostService:
    def __init__(self, session: AsyncSession, settings: Settings) -> None:
        self.session = session
        self.settings = settings

    # ── Reads ──────────────────────────────────────────────────────────────

    async def list_posts(self) -> list[Post]:
        rows = await self.session.execute(
            select(Post).order_by(Post.date.desc(), Post.id)
        )
        return list(rows.scalars().all())

    async def get_post(self, post_id: str) -> Post:
        return await self._load(post_id)

    async def _load(self, post_id: str, refresh: bool = False) -> Post:
        post = await self.session.get(Post, post_id, populate_existing=refresh)
        if post is None:
            raise NotFound("Post not found")
        return post

    async def _load_user(self, user_id: str) -> User:
        user = await self.session.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    # ── Writes ─────────────────────────────────────────────────────────────

    async def create_post(self, identity: Identity, text: str) -> Post:
        user = await self._load_user(identity.id)
        post = Post(
            user_id=user.id,
            text=text,
            name=user.name,
            avatar=user.avatar,
            likes=[],
            comments=[],
        )
        self.session.add(post)
        await commit(self.session, "post")

        POSTS_CREATED_TOTAL.inc()
        logger.info("Post created: %s by user %s", post.id, user.id)
        return post

    async def delete_post(self, post_id: str, identity: Identity) -> None:
        async def mutation(refresh: bool) -> None:
            post = await self._load(post_id, refresh)
            if post.user_id != identity.id:
                raise Forbidden()
            await self.session.delete(post)

        await self._run("delete", post_id, mutation)
        logger.info("Post deleted: %s by user %s", post_id, identity.id)

    async def like(self, post_id: str, identity: Identity) -> list[dict]:
        async def mutation(refresh: bool) -> list[dict]:
            post = await self._load(post_id, refresh)
            if _index_of_like(post.likes, identity.id) != -1:
                raise AlreadyLiked()
            like = Like(user=identity.id).model_dump()
            post.likes = [like] + list(post.likes)
            return post.likes

        return await self._run("like", post_id, mutation)

    async def unlike(self, post_id: str, identity: Identity) -> list[dict]:
        async def mutation(refresh: bool) -> list[dict]:
            post = await self._load(post_id, refresh)
            index = _index_of_like(post.likes, identity.id)
            if index == -1:
                raise NotLiked()
            likes = list(post.likes)
            del likes[index]
            post.likes = likes
            return post.likes

        return await self._run("unlike", post_id, mutation)

    async def add_comment(self, post_id: str, identity: Identity, text: str) -> list[dict]:
        user = await self._load_user(identity.id)
        # plain values: a rollback between attempts expires the ORM object
        user_id, name, avatar = user.id, user.name, user.avatar

        async def mutation(refresh: bool) -> list[dict]:
            post = await self._load(post_id, refresh)
            comment = Comment(
                id=uuid.uuid4().hex,
                user=user_id,
                text=text,
                name=name,
                avatar=avatar,
                date=datetime.now(timezone.utc),
            )
            post.comments = [comment.model_dump(mode="json")] + list(post.comments)
            return post.comments

        return await self._run("comment", post_id, mutation)

    async def remove_comment(
        self, post_id: str, comment_id: str, identity: Identity
    ) -> list[dict]:
        async def mutation(refresh: bool) -> list[dict]:
            post = await self._load(post_id, refresh)
            index = _index_of_comment(post.comments, comment_id)
            if index == -1:
                raise NotFound("Comment does not exist")
            comment_owner = post.comments[index].get("user")
            if identity.id not in (post.user_id, comment_owner):
                raise Forbidden()
            comments = list(post.comments)
            del comments[index]
            post.comments = comments
            return post.comments

        return await self._run("uncomment", post_id, mutation)

    async def _run(self, operation: str, post_id: str, mutation):  # noqa: ANN001
        try:
            result = await commit_with_retry(
                self.session,
                mutation,
                aggregate="post",
                max_attempts=self.settings.max_write_retries,
            )
        except DevlinkError as exc:
            POST_MUTATIONS_TOTAL.labels(operation=operation, outcome=type(exc).__name__).inc()
            logger.info("%s refused on post %s: %s", operation, post_id, exc.message)
            raise
        POST_MUTATIONS_TOTAL.labels(operation=operation, outcome="ok").inc()
        return result
