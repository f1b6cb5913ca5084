"""
Profile aggregate service: upsert merge rules, experience / education
entries and the cascade delete of an account.
"""
from datetime import date

import pytest
from sqlalchemy import func, select

from devlink.errors import NotFound
from devlink.models import Post, Profile, User
from devlink.schemas import EducationCreate, ExperienceCreate, ProfileUpsert
from devlink.services.posts import PostService
from devlink.services.profiles import ProfileService


@pytest.fixture
def service(session, settings):
    return ProfileService(session, settings)


@pytest.fixture
async def alice(add_user):
    return await add_user("alice", "alice@example.com")


def _experience(title: str = "Engineer") -> ExperienceCreate:
    return ExperienceCreate(title=title, company="Acme", from_date=date(2020, 1, 1))


@pytest.mark.asyncio
async def test_upsert_creates_profile(service, alice):
    profile = await service.upsert(
        alice.id,
        ProfileUpsert(status="Developer", skills="python, sql , ,docker", twitter="https://t.test/a"),
    )
    assert profile.user_id == alice.id
    assert profile.status == "Developer"
    assert profile.skills == ["python", "sql", "docker"]
    assert profile.social == {"twitter": "https://t.test/a"}
    assert profile.user.name == "alice"


@pytest.mark.asyncio
async def test_upsert_merges_only_provided_fields(service, alice):
    await service.upsert(
        alice.id,
        ProfileUpsert(
            status="Developer",
            skills=["python"],
            company="Acme",
            location="Berlin",
            twitter="https://t.test/a",
        ),
    )
    profile = await service.upsert(
        alice.id,
        ProfileUpsert(status="Senior Developer", skills=["python", "go"], youtube="https://y.test/a"),
    )

    assert profile.status == "Senior Developer"
    assert profile.skills == ["python", "go"]
    assert profile.company == "Acme"
    assert profile.location == "Berlin"
    assert profile.social == {"twitter": "https://t.test/a", "youtube": "https://y.test/a"}

    count = await service.session.scalar(select(func.count()).select_from(Profile))
    assert count == 1


def test_skills_are_required():
    with pytest.raises(ValueError):
        ProfileUpsert(status="Developer", skills=" , ")


@pytest.mark.asyncio
async def test_add_experience_requires_profile(service, alice):
    with pytest.raises(NotFound):
        await service.add_experience(alice.id, _experience())


@pytest.mark.asyncio
async def test_experience_is_added_at_head_and_removed_by_id(service, alice):
    await service.upsert(alice.id, ProfileUpsert(status="Developer", skills=["python"]))

    await service.add_experience(alice.id, _experience("Junior"))
    profile = await service.add_experience(alice.id, _experience("Senior"))
    assert [e["title"] for e in profile.experience] == ["Senior", "Junior"]
    assert profile.experience[0]["from"] == "2020-01-01"

    senior_id = profile.experience[0]["id"]
    profile = await service.remove_experience(alice.id, senior_id)
    assert [e["title"] for e in profile.experience] == ["Junior"]


@pytest.mark.asyncio
async def test_removing_unknown_entry_is_a_no_op(service, alice):
    await service.upsert(alice.id, ProfileUpsert(status="Developer", skills=["python"]))
    await service.add_experience(alice.id, _experience())

    profile = await service.remove_experience(alice.id, "does-not-exist")
    assert len(profile.experience) == 1
    profile = await service.remove_education(alice.id, "does-not-exist")
    assert profile.education == []


@pytest.mark.asyncio
async def test_education_round(service, alice):
    await service.upsert(alice.id, ProfileUpsert(status="Developer", skills=["python"]))
    profile = await service.add_education(
        alice.id,
        EducationCreate(
            school="MIT",
            degree="BSc",
            field_of_study="CS",
            from_date=date(2015, 9, 1),
            to_date=date(2019, 6, 30),
        ),
    )
    entry = profile.education[0]
    assert entry["school"] == "MIT"
    assert entry["to"] == "2019-06-30"

    profile = await service.remove_education(alice.id, entry["id"])
    assert profile.education == []


@pytest.mark.asyncio
async def test_delete_cascade_removes_posts_profile_and_user(service, session, settings, alice, add_user):
    bob = await add_user("bob", "bob@example.com")
    posts = PostService(session, settings)
    await posts.create_post(alice, "one")
    await posts.create_post(alice, "two")
    bobs_post = await posts.create_post(bob, "bob's")
    await service.upsert(alice.id, ProfileUpsert(status="Developer", skills=["python"]))

    await service.delete_cascade(alice.id)

    remaining = (await session.execute(select(Post))).scalars().all()
    assert [p.id for p in remaining] == [bobs_post.id]
    with pytest.raises(NotFound):
        await service.get_by_user(alice.id)
    assert await session.get(User, alice.id, populate_existing=True) is None


@pytest.mark.asyncio
async def test_stale_experience_write_is_retried(database, settings, service, alice):
    # ``service`` still holds the profile at version 1 after creating it
    await service.upsert(alice.id, ProfileUpsert(status="Developer", skills=["python"]))
    async with database.sessionmaker() as other_session:
        await ProfileService(other_session, settings).add_experience(alice.id, _experience("Other"))

    profile = await service.add_experience(alice.id, _experience("Mine"))
    assert [e["title"] for e in profile.experience] == ["Mine", "Other"]

    async with database.sessionmaker() as fresh:
        stored = (
            await fresh.execute(select(Profile).where(Profile.user_id == alice.id))
        ).unique().scalar_one()
        assert [e["title"] for e in stored.experience] == ["Mine", "Other"]
        assert stored.version == 3


@pytest.mark.asyncio
async def test_concurrent_create_becomes_update(database, settings, service, alice, monkeypatch):
    async with database.sessionmaker() as other_session:
        await ProfileService(other_session, settings).upsert(
            alice.id, ProfileUpsert(status="Developer", skills=["python"], company="Acme")
        )

    # the first lookup misses the row the other writer just created
    find = service._find

    async def find_after_create(user_id, refresh=False):
        if not refresh:
            return None
        return await find(user_id, refresh)

    monkeypatch.setattr(service, "_find", find_after_create)

    profile = await service.upsert(alice.id, ProfileUpsert(status="Senior Developer", skills=["go"]))
    assert profile.status == "Senior Developer"
    assert profile.skills == ["go"]
    assert profile.company == "Acme"

    count = await service.session.scalar(select(func.count()).select_from(Profile))
    assert count == 1
