"""Profile routes, the account cascade delete and the GitHub lookup."""
import httpx
import pytest

from devlink.clients.github_client import GithubClient


@pytest.fixture
async def alice(make_user):
    return await make_user("Alice", "alice@example.com")


async def _create_profile(client, user, **extra):
    body = {"status": "Developer", "skills": "python, fastapi", **extra}
    resp = await client.post("/api/profile", json=body, headers=user["headers"])
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_profile_create_and_read(client, alice):
    created = await _create_profile(client, alice, company="Acme", linkedin="https://li.test/alice")
    assert created["skills"] == ["python", "fastapi"]
    assert created["social"] == {"linkedin": "https://li.test/alice"}
    assert created["user"]["name"] == "Alice"

    me = await client.get("/api/profile/me", headers=alice["headers"])
    assert me.status_code == 200
    assert me.json()["id"] == created["id"]

    public = await client.get(f"/api/profile/user/{alice['id']}")
    assert public.status_code == 200
    assert public.json()["company"] == "Acme"

    listed = await client.get("/api/profile")
    assert [p["id"] for p in listed.json()] == [created["id"]]


@pytest.mark.asyncio
async def test_profile_requires_status_and_skills(client, alice):
    resp = await client.post("/api/profile", json={"skills": ""}, headers=alice["headers"])
    assert resp.status_code == 400
    params = {e["param"] for e in resp.json()["errors"]}
    assert {"status", "skills"} <= params


@pytest.mark.asyncio
async def test_missing_profile_is_404(client, alice):
    resp = await client.get("/api/profile/me", headers=alice["headers"])
    assert resp.status_code == 404
    resp = await client.get("/api/profile/user/nobody")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_experience_and_education(client, alice):
    await _create_profile(client, alice)

    resp = await client.put(
        "/api/profile/experience",
        json={"title": "Engineer", "company": "Acme", "from": "2020-01-01", "current": True},
        headers=alice["headers"],
    )
    assert resp.status_code == 200
    experience = resp.json()["experience"]
    assert experience[0]["title"] == "Engineer"
    assert experience[0]["from"] == "2020-01-01"
    assert experience[0]["to"] is None

    resp = await client.put(
        "/api/profile/education",
        json={"school": "MIT", "degree": "BSc", "field_of_study": "CS", "from": "2015-09-01"},
        headers=alice["headers"],
    )
    assert resp.status_code == 200
    education = resp.json()["education"]
    assert education[0]["school"] == "MIT"

    resp = await client.delete(
        f"/api/profile/experience/{experience[0]['id']}", headers=alice["headers"]
    )
    assert resp.json()["experience"] == []
    resp = await client.delete(
        f"/api/profile/education/{education[0]['id']}", headers=alice["headers"]
    )
    assert resp.json()["education"] == []


@pytest.mark.asyncio
async def test_experience_validation(client, alice):
    await _create_profile(client, alice)
    resp = await client.put(
        "/api/profile/experience", json={"company": "Acme"}, headers=alice["headers"]
    )
    assert resp.status_code == 400
    params = {e["param"] for e in resp.json()["errors"]}
    assert {"title", "from"} <= params


@pytest.mark.asyncio
async def test_delete_account_cascades(client, alice, make_user):
    bob = await make_user("Bob", "bob@example.com")
    await _create_profile(client, alice)
    post = (await client.post("/api/posts", json={"text": "bye"}, headers=alice["headers"])).json()

    resp = await client.delete("/api/profile", headers=alice["headers"])
    assert resp.status_code == 200
    assert resp.json() == {"msg": "User deleted"}

    assert (await client.get(f"/api/posts/{post['id']}", headers=bob["headers"])).status_code == 404
    assert (await client.get(f"/api/profile/user/{alice['id']}")).status_code == 404
    # the token outlives the account
    assert (await client.get("/api/auth", headers=alice["headers"])).status_code == 401


@pytest.mark.asyncio
async def test_github_repos(app, client, settings):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/users/octocat/repos":
            assert request.url.params["per_page"] == "5"
            return httpx.Response(
                200,
                json=[{"id": 1, "name": "hello-world", "html_url": "https://github.test/octocat/hello-world",
                       "description": None, "stargazers_count": 3, "watchers_count": 3, "forks_count": 1}],
            )
        return httpx.Response(404, json={"message": "Not Found"})

    github = GithubClient(settings, transport=httpx.MockTransport(handler))
    await github.start()
    app.state.github_client = github
    try:
        ok = await client.get("/api/profile/github/octocat")
        assert ok.status_code == 200
        assert ok.json()[0]["name"] == "hello-world"

        missing = await client.get("/api/profile/github/ghost")
        assert missing.status_code == 404
        assert missing.json() == {"msg": "No Github profile found"}
    finally:
        await github.stop()
