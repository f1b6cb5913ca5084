"""
Profile aggregate service.

A profile belongs to exactly one user and owns its skills, social links,
experience and education entries. Entries get their own id on insertion
and are removed by that id.
"""
import logging
import uuid
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from devlink.clients.github_client import GithubClient
from devlink.config import Settings
from devlink.errors import InternalError, NotFound
from devlink.models import Post, Profile, User
from devlink.schemas import (
    SOCIAL_PLATFORMS,
    Education,
    EducationCreate,
    Experience,
    ExperienceCreate,
    ProfileUpsert,
)
from devlink.services.base import commit, commit_with_retry

logger = logging.getLogger(__name__)

# Plain profile columns that an upsert may overwrite
PROFILE_FIELDS = ("company", "website", "location", "status", "bio", "github_username")


class ProfileService:
    def __init__(
        self,
        session: AsyncSession,
        settings: Settings,
        github: Optional[GithubClient] = None,
    ) -> None:
        self.session = session
        self.settings = settings
        self.github = github

    # ── Reads ──────────────────────────────────────────────────────────────

    async def list_profiles(self) -> list[Profile]:
        rows = await self.session.execute(select(Profile).order_by(Profile.date))
        return list(rows.unique().scalars().all())

    async def get_by_user(self, user_id: str) -> Profile:
        return await self._load(user_id)

    async def _find(self, user_id: str, refresh: bool = False) -> Optional[Profile]:
        stmt = select(Profile).where(Profile.user_id == user_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        rows = await self.session.execute(stmt)
        return rows.unique().scalar_one_or_none()

    async def _load(self, user_id: str, refresh: bool = False) -> Profile:
        profile = await self._find(user_id, refresh)
        if profile is None:
            raise NotFound("There is no profile for this user")
        return profile

    async def github_repos(self, username: str) -> list[dict]:
        if self.github is None:
            raise NotFound("No Github profile found")
        return await self.github.list_repos(username)

    # ── Writes ─────────────────────────────────────────────────────────────

    async def upsert(self, owner_id: str, fields: ProfileUpsert) -> Profile:
        """
        Create the owner's profile, or merge the given fields into it.

        Only fields that were actually provided (non-empty) overwrite stored
        values; social links are merged per platform.
        """
        provided = {
            k: v for k, v in fields.model_dump(exclude_unset=True).items()
            if v not in (None, "")
        }
        social = {p: provided.pop(p) for p in SOCIAL_PLATFORMS if p in provided}

        def merge(profile: Profile) -> Profile:
            for name in PROFILE_FIELDS:
                if name in provided:
                    setattr(profile, name, provided[name])
            if "skills" in provided:
                profile.skills = list(provided["skills"])
            if social:
                profile.social = {**profile.social, **social}
            return profile

        async def mutation(refresh: bool) -> Profile:
            profile = await self._find(owner_id, refresh)
            if profile is not None:
                logger.info("Updating profile for user %s", owner_id)
                return merge(profile)

            user = await self.session.get(User, owner_id)
            if user is None:
                raise NotFound("User not found")
            profile = merge(
                Profile(user=user, skills=[], social={}, experience=[], education=[])
            )
            self.session.add(profile)
            try:
                await self.session.flush()
            except IntegrityError as exc:
                # lost a race with a concurrent create for the same owner
                await self.session.rollback()
                profile = await self._find(owner_id, refresh=True)
                if profile is None:
                    logger.exception("Failed to create profile for user %s", owner_id)
                    raise InternalError() from exc
                logger.info("Profile for user %s created concurrently, merging into it", owner_id)
                return merge(profile)
            logger.info("Creating profile for user %s", owner_id)
            return profile

        return await commit_with_retry(
            self.session,
            mutation,
            aggregate="profile",
            max_attempts=self.settings.max_write_retries,
        )

    async def add_experience(self, owner_id: str, entry: ExperienceCreate) -> Profile:
        item = Experience(id=uuid.uuid4().hex, **entry.model_dump())

        async def mutation(refresh: bool) -> Profile:
            profile = await self._load(owner_id, refresh)
            profile.experience = [item.model_dump(mode="json", by_alias=True)] + list(
                profile.experience
            )
            return profile

        return await self._write(mutation)

    async def remove_experience(self, owner_id: str, experience_id: str) -> Profile:
        async def mutation(refresh: bool) -> Profile:
            profile = await self._load(owner_id, refresh)
            profile.experience = [
                e for e in profile.experience if e.get("id") != experience_id
            ]
            return profile

        return await self._write(mutation)

    async def add_education(self, owner_id: str, entry: EducationCreate) -> Profile:
        item = Education(id=uuid.uuid4().hex, **entry.model_dump())

        async def mutation(refresh: bool) -> Profile:
            profile = await self._load(owner_id, refresh)
            profile.education = [item.model_dump(mode="json", by_alias=True)] + list(
                profile.education
            )
            return profile

        return await self._write(mutation)

    async def remove_education(self, owner_id: str, education_id: str) -> Profile:
        async def mutation(refresh: bool) -> Profile:
            profile = await self._load(owner_id, refresh)
            profile.education = [
                e for e in profile.education if e.get("id") != education_id
            ]
            return profile

        return await self._write(mutation)

    async def delete_cascade(self, owner_id: str) -> None:
        """
        Remove the user's posts, then the profile, then the account.

        Each step is committed on its own: a failure part-way leaves the
        earlier deletions in place.
        """
        await self.session.execute(delete(Post).where(Post.user_id == owner_id))
        await commit(self.session, "posts")
        await self.session.execute(delete(Profile).where(Profile.user_id == owner_id))
        await commit(self.session, "profile")
        await self.session.execute(delete(User).where(User.id == owner_id))
        await commit(self.session, "user")
        logger.info("Deleted user %s with posts and profile", owner_id)

    async def _write(self, mutation) -> Profile:  # noqa: ANN001
        return await commit_with_retry(
            self.session,
            mutation,
            aggregate="profile",
            max_attempts=self.settings.max_write_retries,
        )
