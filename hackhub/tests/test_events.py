"""
Event listing, display status and admin lifecycle.
"""
import asyncio
from datetime import timedelta

import pytest
from sqlalchemy import select, func

from hackhub.core.db_types import utcnow
from hackhub.errors import NotFoundError, ValidationError
from hackhub.orm.event import EventStatus
from hackhub.orm.leaderboard import LeaderboardEntry
from hackhub.orm.registration import Registration
from hackhub.services import event_service, leaderboard_service, registration_service
from hackhub.tests.conftest import auth_headers, make_event, make_profile


def event_body(**overrides):
    start = utcnow() + timedelta(days=10)
    body = {
        "title": "Autumn Hack",
        "location": "Lisbon",
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(days=2)).isoformat(),
        "max_participants": 50,
        "themes": ["climate", "health"],
    }
    body.update(overrides)
    return body


class TestDisplayStatus:

    async def test_status_from_dates(self, db):
        upcoming = await make_event(db, title="Later", starts_in_days=5)
        live = await make_event(db, title="Now", starts_in_days=-1, duration_days=3)
        past = await make_event(db, title="Before", starts_in_days=-10, duration_days=2)

        assert upcoming.status_at() == EventStatus.UPCOMING
        assert live.status_at() == EventStatus.LIVE
        assert past.status_at() == EventStatus.PAST

    async def test_list_filtered_by_status(self, db):
        await make_event(db, title="Later", starts_in_days=5)
        await make_event(db, title="Now", starts_in_days=-1, duration_days=3)
        await make_event(db, title="Before", starts_in_days=-10, duration_days=2)

        live, total = await event_service.list_events(db, status="live")

        assert total == 1
        assert live[0]["title"] == "Now"
        assert live[0]["status"] == "live"

    async def test_invalid_status_filter(self, db):
        with pytest.raises(ValidationError):
            await event_service.list_events(db, status="cancelled")


class TestListing:

    async def test_pagination_and_order(self, db):
        for offset in (3, 1, 2):
            await make_event(db, title=f"Day {offset}", starts_in_days=offset)

        first_page, total = await event_service.list_events(db, page=1, limit=2)
        second_page, _ = await event_service.list_events(db, page=2, limit=2)

        assert total == 3
        assert [e["title"] for e in first_page] == ["Day 1", "Day 2"]
        assert [e["title"] for e in second_page] == ["Day 3"]

    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (1, 101)])
    async def test_invalid_pagination(self, db, page, limit):
        with pytest.raises(ValidationError):
            await event_service.list_events(db, page=page, limit=limit)

    async def test_participant_count_is_confirmed_only(self, db):
        event = await make_event(db, max_participants=1)
        for name in ("x", "y"):
            profile = await make_profile(db, name)
            await registration_service.register(db, profile.id, event.id, "Team", "Idea")

        detail = await event_service.get_event_detail(db, event.id)

        assert detail["participant_count"] == 1

    async def test_list_endpoint_shape(self, client, db):
        await make_event(db)

        response = await client.get("/api/events", params={"limit": 10})

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"] == {"page": 1, "limit": 10, "total": 1, "total_pages": 1}
        assert body["data"][0]["participant_count"] == 0

    async def test_list_endpoint_rejects_large_limit(self, client):
        response = await client.get("/api/events", params={"limit": 500})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_detail_not_found(self, client):
        response = await client.get("/api/events/missing")

        assert response.status_code == 404
        assert response.json()["code"] == "EVENT_NOT_FOUND"


class TestAdminLifecycle:

    async def test_create_requires_admin(self, client, user):
        response = await client.post("/api/events", json=event_body(), headers=auth_headers(user))

        assert response.status_code == 403

    async def test_create(self, client, admin):
        response = await client.post("/api/events", json=event_body(), headers=auth_headers(admin))

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Autumn Hack"
        assert data["status"] == "upcoming"
        assert data["participant_count"] == 0
        assert data["themes"] == ["climate", "health"]

    @pytest.mark.parametrize("overrides", [
        {"max_participants": 0},
        {"title": "   "},
        {"location": ""},
    ])
    async def test_create_invalid(self, client, admin, overrides):
        response = await client.post("/api/events", json=event_body(**overrides), headers=auth_headers(admin))

        assert response.status_code == 400

    async def test_create_end_before_start(self, client, admin):
        start = utcnow() + timedelta(days=10)
        body = event_body(start_date=start.isoformat(), end_date=(start - timedelta(days=1)).isoformat())

        response = await client.post("/api/events", json=body, headers=auth_headers(admin))

        assert response.status_code == 400

    async def test_update(self, client, admin, event):
        response = await client.patch(
            f"/api/events/{event.id}",
            json={"registration_open": False, "max_participants": 10},
            headers=auth_headers(admin)
        )

        assert response.status_code == 200
        data = response.json()
        assert data["registration_open"] is False
        assert data["max_participants"] == 10
        assert data["title"] == event.title

    async def test_update_missing(self, client, admin):
        response = await client.patch("/api/events/missing", json={"title": "X"}, headers=auth_headers(admin))

        assert response.status_code == 404

    async def test_update_rejects_null_required_field(self, db, event):
        with pytest.raises(ValidationError):
            await event_service.update_event(db, event.id, {"title": None})

    async def test_delete_cascades(self, client, db, session_factory, admin, user, event):
        await registration_service.register(db, user.id, event.id, "Team", "Idea")
        await leaderboard_service.upsert_entry(db, event.id, user.id, 10)

        response = await client.delete(f"/api/events/{event.id}", headers=auth_headers(admin))

        assert response.status_code == 204
        async with session_factory() as session:
            registrations = await session.execute(
                select(func.count(Registration.id)).where(Registration.event_id == event.id)
            )
            entries = await session.execute(
                select(func.count(LeaderboardEntry.id)).where(LeaderboardEntry.event_id == event.id)
            )
            assert registrations.scalar() == 0
            assert entries.scalar() == 0
            with pytest.raises(NotFoundError):
                await event_service.get_event(session, event.id)

    async def test_delete_missing(self, client, admin):
        response = await client.delete("/api/events/missing", headers=auth_headers(admin))

        assert response.status_code == 404

    async def test_register_after_delete_is_not_found(self, db, user, event):
        user_id, event_id = user.id, event.id
        await event_service.delete_event(db, event_id)

        with pytest.raises(NotFoundError):
            await registration_service.register(db, user_id, event_id, "Team", "Idea")

    async def test_delete_racing_registration(self, db, session_factory, user, event):
        user_id, event_id = user.id, event.id

        async def register():
            async with session_factory() as session:
                return await registration_service.register(session, user_id, event_id, "Team", "Idea")

        async def delete():
            async with session_factory() as session:
                await event_service.delete_event(session, event_id)

        results = await asyncio.gather(register(), delete(), return_exceptions=True)

        registered, deleted = results
        assert deleted is None
        assert registered is not None
        if isinstance(registered, Exception):
            assert isinstance(registered, NotFoundError)
        async with session_factory() as session:
            remaining = await session.execute(
                select(func.count(Registration.id)).where(Registration.event_id == event_id)
            )
            assert remaining.scalar() == 0
