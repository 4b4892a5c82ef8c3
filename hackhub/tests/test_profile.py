"""
Profile self-service and resource listing.
"""
from datetime import timedelta

import pytest

from hackhub.core.db_types import utcnow
from hackhub.errors import AuthorizationError, ConflictError, ValidationError
from hackhub.orm.resource import Resource
from hackhub.services import profile_service, resource_service
from hackhub.tests.conftest import auth_headers, make_profile


class TestProfileService:

    async def test_update_fields(self, db, user):
        profile = await profile_service.update_profile(
            db, user.id, {"bio": "Backend dev", "skills": ["python", "sql"]}
        )

        assert profile.bio == "Backend dev"
        assert profile.skills == ["python", "sql"]

    async def test_cannot_change_admin_flag(self, db, user):
        with pytest.raises(AuthorizationError):
            await profile_service.update_profile(db, user.id, {"is_admin": True})

        refreshed = await profile_service.get_profile(db, user.id)
        assert refreshed.is_admin is False

    async def test_username_taken(self, db, user):
        await make_profile(db, "bob")

        with pytest.raises(ConflictError) as exc_info:
            await profile_service.update_profile(db, user.id, {"username": "bob"})

        assert exc_info.value.code == "USERNAME_TAKEN"

    async def test_keeping_own_username_is_allowed(self, db, user):
        profile = await profile_service.update_profile(db, user.id, {"username": "alice", "full_name": "Alice L"})

        assert profile.full_name == "Alice L"

    async def test_unknown_fields_ignored(self, db, user):
        profile = await profile_service.update_profile(db, user.id, {"email": "new@example.com"})

        assert profile.email == "alice@example.com"


class TestProfileEndpoints:

    async def test_get_own(self, client, user):
        response = await client.get("/api/profile", headers=auth_headers(user))

        assert response.status_code == 200
        assert response.json()["username"] == "alice"
        assert response.json()["email"] == "alice@example.com"

    async def test_get_own_requires_auth(self, client):
        response = await client.get("/api/profile")

        assert response.status_code == 401

    async def test_patch_is_admin_forbidden(self, client, user):
        response = await client.patch("/api/profile", json={"is_admin": True}, headers=auth_headers(user))

        assert response.status_code == 403
        assert response.json()["error"] == "Cannot modify admin status"

    async def test_patch_username_conflict(self, client, db, user):
        await make_profile(db, "bob")

        response = await client.patch("/api/profile", json={"username": "bob"}, headers=auth_headers(user))

        assert response.status_code == 409

    async def test_patch(self, client, user):
        response = await client.patch(
            "/api/profile", json={"github_url": "https://github.com/alice"}, headers=auth_headers(user)
        )

        assert response.status_code == 200
        assert response.json()["github_url"] == "https://github.com/alice"

    async def test_public_profile_hides_private_fields(self, client, db, user):
        other = await make_profile(db, "bob", bio="hidden")

        response = await client.get(f"/api/profile/{other.id}", headers=auth_headers(user))

        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "bob"
        assert "email" not in data
        assert "is_admin" not in data

    async def test_public_profile_missing(self, client, user):
        response = await client.get("/api/profile/missing", headers=auth_headers(user))

        assert response.status_code == 404
        assert response.json()["code"] == "PROFILE_NOT_FOUND"


@pytest.fixture
async def resources(db):
    now = utcnow()
    rows = [
        Resource(title="Intro to APIs", description="d", content_url="https://x/1", category="guides",
                 created_at=now - timedelta(days=2)),
        Resource(title="Starter kit", description="d", content_url="https://x/2", category="templates",
                 created_at=now - timedelta(days=1)),
        Resource(title="Pitching", description="d", content_url="https://x/3", category="guides",
                 created_at=now),
    ]
    db.add_all(rows)
    await db.commit()
    return rows


class TestResources:

    async def test_newest_first(self, db, resources):
        items, total = await resource_service.list_resources(db)

        assert total == 3
        assert [r.title for r in items] == ["Pitching", "Starter kit", "Intro to APIs"]

    async def test_category_filter(self, db, resources):
        items, total = await resource_service.list_resources(db, category="guides")

        assert total == 2
        assert {r.category for r in items} == {"guides"}

    async def test_limit_bounds(self, db):
        with pytest.raises(ValidationError):
            await resource_service.list_resources(db, limit=51)

    async def test_endpoint(self, client, user, resources):
        response = await client.get(
            "/api/resources", params={"category": "guides", "limit": 1}, headers=auth_headers(user)
        )

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"]["total"] == 2
        assert body["pagination"]["total_pages"] == 2
        assert body["data"][0]["title"] == "Pitching"

    async def test_endpoint_requires_auth(self, client):
        response = await client.get("/api/resources")

        assert response.status_code == 401
