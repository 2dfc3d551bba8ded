"""Tests for cache behavior.

Run with: pytest tests/test_cache.py -v
"""

import uuid

import pytest
from django.core.cache import cache

from festivals import cache as festival_cache
from festivals import models
from festivals.domain import Role


@pytest.fixture
def organizer(login_as):
    return login_as("olga", Role.ORGANIZER)


@pytest.fixture
def festival_id(organizer):
    client, _ = organizer
    return client.post("/api/festivals", {"name": "Rockwave"}).json()["id"]


@pytest.mark.django_db
class TestCacheInvalidation:
    """Tests for cache invalidation on writes."""

    def test_detail_is_cached(self, organizer, festival_id):
        client, _ = organizer
        client.get(f"/api/festivals/{festival_id}")
        assert cache.get(festival_cache.festival_key(festival_id))["phase"] == "CREATED"

    def test_transition_invalidates_detail_cache(self, organizer, festival_id):
        """A compare-and-swap update drops the festivals:{id} key."""
        client, _ = organizer
        client.get(f"/api/festivals/{festival_id}")
        client.post(f"/api/festivals/{festival_id}/start-submission")
        assert cache.get(festival_cache.festival_key(festival_id)) is None
        assert client.get(f"/api/festivals/{festival_id}").json()["phase"] == "SUBMISSION"

    def test_create_invalidates_list_cache(self, organizer, festival_id):
        client, _ = organizer
        assert len(client.get("/api/festivals").json()) == 1
        client.post("/api/festivals", {"name": "Jazzfest"})
        assert cache.get(festival_cache.FESTIVAL_LIST_KEY) is None
        assert len(client.get("/api/festivals").json()) == 2

    def test_orm_save_invalidates_detail_cache(self, organizer, festival_id):
        """Saving through the ORM directly also drops the cached festival."""
        client, _ = organizer
        client.get(f"/api/festivals/{festival_id}")
        festival = models.Festival.objects.get(pk=uuid.UUID(festival_id))
        festival.venue = "Dock"
        festival.save()
        assert client.get(f"/api/festivals/{festival_id}").json()["venue"] == "Dock"

    def test_performance_changes_invalidate_list(self, login_as, organizer, festival_id):
        artist_client, _ = login_as("arlo", Role.ARTIST)
        url = f"/api/festivals/{festival_id}/performances"
        assert artist_client.get(url).json() == []

        performance = artist_client.post("/api/performances", {"festival_id": festival_id, "name": "Night Set"}).json()
        assert [p["id"] for p in artist_client.get(url).json()] == [performance["id"]]

        artist_client.put(f"/api/performances/{performance['id']}", {"genre": "jazz"})
        assert artist_client.get(url).json()[0]["genre"] == "jazz"
        assert artist_client.get(f"/api/performances/{performance['id']}").json()["genre"] == "jazz"

        artist_client.delete(f"/api/performances/{performance['id']}")
        assert artist_client.get(url).json() == []

    def test_deleting_staff_invalidates_assigned_performance(self, login_as, organizer, festival_id):
        """Nulling staff_assigned on user delete drops the cached performance."""
        organizer_client, _ = organizer
        admin_client, _ = login_as("ada", Role.ADMIN)
        artist_client, _ = login_as("arlo", Role.ARTIST)
        _, staff_id = login_as("sam", Role.STAFF)
        performance_id = artist_client.post(
            "/api/performances", {"festival_id": festival_id, "name": "Night Set"}
        ).json()["id"]
        organizer_client.post(f"/api/performances/{performance_id}/assign-staff", {"staff_id": staff_id})
        list_url = f"/api/festivals/{festival_id}/performances"
        assert artist_client.get(f"/api/performances/{performance_id}").json()["staff_assigned_id"] == staff_id
        assert artist_client.get(list_url).json()[0]["staff_assigned_id"] == staff_id

        assert admin_client.delete(f"/api/users/{staff_id}").status_code == 204

        assert artist_client.get(f"/api/performances/{performance_id}").json()["staff_assigned_id"] is None
        assert artist_client.get(list_url).json()[0]["staff_assigned_id"] is None

    def test_deleting_organizer_invalidates_festival(self, login_as, organizer, festival_id):
        """Removing the organizer row on user delete drops the cached festival."""
        organizer_client, organizer_id = organizer
        admin_client, _ = login_as("ada", Role.ADMIN)
        assert organizer_client.get(f"/api/festivals/{festival_id}").json()["organizers"] == [organizer_id]
        assert organizer_client.get("/api/festivals").json()[0]["organizers"] == [organizer_id]

        assert admin_client.delete(f"/api/users/{organizer_id}").status_code == 204

        assert admin_client.get(f"/api/festivals/{festival_id}").json()["organizers"] == []
        assert admin_client.get("/api/festivals").json()[0]["organizers"] == []
