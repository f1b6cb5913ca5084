#!/usr/bin/env python3
"""
Seed script — creates a small dataset for trying out the API.

Creates:
  • 6 users (password: password123)
  • A profile with one experience entry for each user
  • 3 posts per user
  • Random likes and comments across posts

Run against a running server:
  python scripts/seed_data.py --api-url http://localhost:8000

Tokens are printed so you can use them in curl commands.
"""
import argparse
import json
import random
import time
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Optional


BASE_USERS = [
    ("Alice Chen", "alice@example.com", "Backend Developer", "python, fastapi, postgres"),
    ("Bob Martinez", "bob@example.com", "Frontend Developer", "react, typescript, css"),
    ("Carol Singh", "carol@example.com", "Data Engineer", "python, spark, airflow"),
    ("Dave Kim", "dave@example.com", "DevOps Engineer", "kubernetes, terraform, go"),
    ("Eve Johnson", "eve@example.com", "Student or Learning", "javascript, html"),
    ("Frank Williams", "frank@example.com", "Senior Developer", "java, kotlin, sql"),
]

SAMPLE_POSTS = [
    "Just shipped a new feature to production. Zero downtime deploys are beautiful.",
    "TIL: optimistic locking with a version column saves you from lost updates.",
    "Anyone else pairing on code reviews? It changed how our team works.",
    "Finally wrote tests for that legacy module. Sleeping better already.",
    "Hot take: the best documentation is a small, runnable example.",
    "Looking for recommendations on async Python resources.",
    "Refactored 400 lines into 80 today. Deleting code is the best feeling.",
    "Conference talk accepted! Topic: building APIs people enjoy using.",
    "The hardest part of software is naming things and cache invalidation.",
]

SAMPLE_COMMENTS = ["Nice!", "Congrats!", "Totally agree.", "Thanks for sharing.", "Great point."]


@dataclass
class ApiClient:
    base_url: str

    def request(self, method: str, path: str, data: Optional[dict] = None, token: str = "") -> dict:
        url = f"{self.base_url}{path}"
        body = json.dumps(data).encode() if data is not None else None
        headers = {"Content-Type": "application/json"}
        if token:
            headers["x-auth-token"] = token
        req = urllib.request.Request(url, data=body, headers=headers, method=method)
        try:
            with urllib.request.urlopen(req, timeout=10) as resp:
                return json.loads(resp.read())
        except urllib.error.HTTPError as e:
            print(f"  HTTP {e.code} on {method} {path}: {e.read().decode()}")
            return {}

    def post(self, path: str, data: dict, token: str = "") -> dict:
        return self.request("POST", path, data, token)

    def put(self, path: str, data: Optional[dict] = None, token: str = "") -> dict:
        return self.request("PUT", path, data, token)

    def get(self, path: str, token: str = "") -> dict:
        return self.request("GET", path, token=token)


def wait_for_api(client: ApiClient, retries: int = 15) -> None:
    print(f"Waiting for API at {client.base_url} ...")
    for i in range(retries):
        try:
            result = client.get("/health")
            if result.get("status") == "ok":
                print("  API is ready!\n")
                return
        except Exception:
            pass
        time.sleep(3)
    raise RuntimeError(f"API not reachable at {client.base_url} after {retries} retries")


def main(api_url: str) -> None:
    client = ApiClient(api_url)
    wait_for_api(client)

    # ── Register users + profiles ─────────────────────────────────────────
    print("Registering users...")
    tokens: dict[str, str] = {}
    for name, email, status, skills in BASE_USERS:
        result = client.post("/api/users", {"name": name, "email": email, "password": "password123"})
        if not result.get("token"):
            # already registered on a previous run
            result = client.post("/api/auth", {"email": email, "password": "password123"})
        token = result.get("token", "")
        if not token:
            print(f"  ✗ Failed to register {email}")
            continue
        tokens[email] = token
        client.post("/api/profile", {"status": status, "skills": skills}, token=token)
        client.put(
            "/api/profile/experience",
            {"title": status, "company": "Acme Corp", "from": "2021-01-01", "current": True},
            token=token,
        )
        print(f"  ✓ {name} <{email}>")

    if not tokens:
        print("No users registered — aborting")
        return

    # ── Create posts ──────────────────────────────────────────────────────
    print("\nCreating posts...")
    post_ids: list[str] = []
    posts = random.sample(SAMPLE_POSTS, k=len(SAMPLE_POSTS))
    idx = 0
    for token in tokens.values():
        for _ in range(3):
            result = client.post("/api/posts", {"text": posts[idx % len(posts)]}, token=token)
            idx += 1
            if result.get("id"):
                post_ids.append(result["id"])
    print(f"  ✓ {len(post_ids)} posts created")

    # ── Likes and comments ────────────────────────────────────────────────
    print("\nAdding likes and comments...")
    likes = comments = 0
    all_tokens = list(tokens.values())
    for post_id in post_ids:
        for token in random.sample(all_tokens, k=random.randint(0, len(all_tokens))):
            if client.put(f"/api/posts/like/{post_id}", token=token):
                likes += 1
        for token in random.sample(all_tokens, k=random.randint(0, 2)):
            client.put(f"/api/posts/comment/{post_id}", {"text": random.choice(SAMPLE_COMMENTS)}, token=token)
            comments += 1
    print(f"  ✓ {likes} likes, {comments} comments added")

    # ── Print summary ─────────────────────────────────────────────────────
    print("\n" + "=" * 60)
    print("Seed complete! Here are some commands to try:\n")
    email, token = next(iter(tokens.items()))
    print(f"# List posts as {email}:")
    print(f"  curl -s '{api_url}/api/posts' -H 'x-auth-token: {token}' | python3 -m json.tool\n")
    print("# Browse profiles:")
    print(f"  curl -s '{api_url}/api/profile' | python3 -m json.tool\n")
    print(f"# Prometheus metrics: {api_url}/metrics")
    print("=" * 60)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the DevLink API")
    parser.add_argument("--api-url", default="http://localhost:8000", help="API base URL")
    args = parser.parse_args()
    main(args.api_url)
