"""
Authors, roles, newsletter, and stats endpoints.
"""

from __future__ import annotations

import pytest

from blogdesk.db.models import RoleRank
from conftest import bearer, make_user


@pytest.mark.asyncio
async def test_admin_creates_author(client, app_sessions, settings):
    admin = await make_user(app_sessions, email="admin@example.com", role=RoleRank.admin)
    writer = await make_user(app_sessions, email="w@example.com", role=RoleRank.staff, name="Wes")
    payload = {
        "userId": writer.id,
        "description": "Covers markets",
        "network": {"twitter": "@wes"},
    }

    r = await client.post("/api/blog/author", json=payload, headers=bearer(settings, admin))
    assert r.status_code == 201
    author = r.json()
    assert author["userId"] == writer.id
    assert author["name"] == "Wes"
    assert author["network"] == {"twitter": "@wes"}

    r = await client.post("/api/blog/author", json=payload, headers=bearer(settings, admin))
    assert r.status_code == 409
    assert r.json() == {"message": "User is already an author"}

    r = await client.get("/api/blog/author")
    assert [a["id"] for a in r.json()] == [author["id"]]

    r = await client.get(f"/api/blog/author/{author['id']}")
    assert r.status_code == 200
    assert r.json()["description"] == "Covers markets"


@pytest.mark.asyncio
async def test_author_creation_errors(client, app_sessions, settings):
    staff = await make_user(app_sessions, email="staff@example.com", role=RoleRank.staff)
    admin = await make_user(app_sessions, email="admin@example.com", role=RoleRank.admin)

    r = await client.post(
        "/api/blog/author", json={"userId": staff.id}, headers=bearer(settings, staff)
    )
    assert r.status_code == 403

    r = await client.post(
        "/api/blog/author", json={"userId": 777}, headers=bearer(settings, admin)
    )
    assert r.status_code == 404
    assert r.json() == {"message": "User not found"}

    r = await client.get("/api/blog/author/777")
    assert r.status_code == 404
    assert r.json() == {"message": "Author not found"}


@pytest.mark.asyncio
async def test_roles_listing_requires_a_role(client, app_sessions, settings):
    nobody = await make_user(app_sessions, email="nobody@example.com", role=None)
    staff = await make_user(app_sessions, email="staff@example.com", role=RoleRank.staff)

    r = await client.get("/api/roles", headers=bearer(settings, nobody))
    assert r.status_code == 403

    r = await client.get("/api/roles", headers=bearer(settings, staff))
    assert r.status_code == 200
    assert [(x["id"], x["name"]) for x in r.json()] == [(1, "staff"), (2, "admin"), (3, "ceo")]


@pytest.mark.asyncio
async def test_newsletter_subscribe_and_list(client, app_sessions, settings):
    r = await client.post("/api/newsletter/subscribe", json={"email": "reader@example.com"})
    assert r.status_code == 200
    assert r.json() == {"message": "Successfully subscribed to newsletter"}

    r = await client.post("/api/newsletter/subscribe", json={"email": "reader@example.com"})
    assert r.status_code == 409
    assert r.json() == {"message": "This email is already subscribed to the newsletter"}

    r = await client.post("/api/newsletter/subscribe", json={"email": "nope"})
    assert r.status_code == 400

    r = await client.get("/api/newsletter")
    assert r.status_code == 401

    staff = await make_user(app_sessions, email="staff@example.com", role=RoleRank.staff)
    r = await client.get("/api/newsletter", headers=bearer(settings, staff))
    assert r.status_code == 200
    assert [s["email"] for s in r.json()] == ["reader@example.com"]


@pytest.mark.asyncio
async def test_stats_counts(client, app_sessions):
    await make_user(app_sessions, email="a@example.com", role=RoleRank.staff)
    await make_user(app_sessions, email="b@example.com", role=None)
    await client.post("/api/newsletter/subscribe", json={"email": "reader@example.com"})

    r = await client.get("/api/stats")

    assert r.status_code == 200
    assert r.json() == {
        "stats": {"totalPosts": 0, "totalNewsletterSubscribers": 1, "totalUsers": 2}
    }
