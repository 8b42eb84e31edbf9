"""
Tests for Event Routes

Tests event creation (with token pairs for private events), listing,
updates of past events, slug conflicts and cascading deletion.
"""

from datetime import date, timedelta

from conftest import future_date, future_datetime


class TestCreateEvent:
    """Test POST /events"""

    def test_create_public_event(self, client, auth_headers):
        response = client.post(
            "/events",
            json={"name": "Annual Conference", "date": future_date(), "description": "Yearly meetup"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["event"]["slug"] == "annual-conference"
        assert data["event"]["visibility"] == "public"
        assert data["event"]["status"] == "upcoming"
        assert data["event"]["token_expiration_date"] is None
        assert data["tokens"] is None

    def test_create_private_event_returns_token_pair(self, client, auth_headers):
        expires = future_datetime(days=60)
        response = client.post(
            "/events",
            json={
                "name": "Board Retreat",
                "date": future_date(),
                "visibility": "private",
                "token_expiration_date": expires,
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        tokens = response.json()["tokens"]
        organizer, participant = tokens["organizer"], tokens["participant"]
        assert organizer["type"] == "organizer"
        assert participant["type"] == "participant"
        assert len(organizer["token"]) == 21
        assert organizer["token"] != participant["token"]
        assert organizer["expires_at"] == participant["expires_at"]
        assert organizer["use_count"] == 0

    def test_private_event_requires_expiration(self, client, auth_headers):
        response = client.post(
            "/events",
            json={"name": "Board Retreat", "date": future_date(), "visibility": "private"},
            headers=auth_headers,
        )
        assert response.status_code == 422

    def test_private_event_expiration_must_be_future(self, client, auth_headers):
        response = client.post(
            "/events",
            json={
                "name": "Board Retreat",
                "date": future_date(),
                "visibility": "private",
                "token_expiration_date": future_datetime(days=-1),
            },
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_FAILED"

    def test_public_event_rejects_expiration(self, client, auth_headers):
        response = client.post(
            "/events",
            json={"name": "Open Day", "date": future_date(), "token_expiration_date": future_datetime()},
            headers=auth_headers,
        )
        assert response.status_code == 422

    def test_generated_slugs_stay_unique(self, client, auth_headers, make_event):
        make_event(name="Tech Summit")
        second = make_event(name="Tech Summit")
        third = make_event(name="Tech Summit")
        assert second["event"]["slug"] == "tech-summit-2"
        assert third["event"]["slug"] == "tech-summit-3"

    def test_duplicate_explicit_slug_conflicts(self, client, auth_headers, make_event):
        make_event(slug="summer-gala")
        response = client.post(
            "/events",
            json={"name": "Another Gala", "date": future_date(), "slug": "summer-gala"},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "CONFLICT"

    def test_invalid_slug_rejected(self, client, auth_headers):
        response = client.post(
            "/events", json={"name": "Gala", "date": future_date(), "slug": "Not A Slug"}, headers=auth_headers
        )
        assert response.status_code == 422

    def test_date_before_2020_rejected(self, client, auth_headers):
        response = client.post("/events", json={"name": "Old", "date": "2019-12-31"}, headers=auth_headers)
        assert response.status_code == 422

    def test_requires_admin(self, client):
        response = client.post("/events", json={"name": "Gala", "date": future_date()})
        assert response.status_code == 401


class TestListEvents:
    """Test GET /events"""

    def test_pagination(self, client, auth_headers, make_event):
        for i in range(5):
            make_event(name=f"Event {i}", date=future_date(days=10 + i))

        response = client.get("/events?limit=2&offset=2", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert [e["name"] for e in data["events"]] == ["Event 2", "Event 3"]
        assert data["pagination"] == {"page": 2, "limit": 2, "total": 5}

    def test_status_filter(self, client, auth_headers, make_event):
        make_event(name="Upcoming Event")
        make_event(name="Past Event", date="2021-05-01")

        upcoming = client.get("/events?status=upcoming", headers=auth_headers).json()
        past = client.get("/events?status=past", headers=auth_headers).json()

        assert [e["name"] for e in upcoming["events"]] == ["Upcoming Event"]
        assert [e["name"] for e in past["events"]] == ["Past Event"]
        assert past["events"][0]["status"] == "past"

    def test_search_and_sort(self, client, auth_headers, make_event):
        make_event(name="Python Meetup", date=future_date(days=5))
        make_event(name="Python Conference", date=future_date(days=50))
        make_event(name="Design Day")

        response = client.get("/events?search=python&sort=date-desc", headers=auth_headers)

        assert [e["name"] for e in response.json()["events"]] == ["Python Conference", "Python Meetup"]

    def test_invalid_sort_rejected(self, client, auth_headers):
        response = client.get("/events?sort=name", headers=auth_headers)
        assert response.status_code == 400

    def test_invalid_status_rejected(self, client, auth_headers):
        response = client.get("/events?status=archived", headers=auth_headers)
        assert response.status_code == 400


class TestGetEvent:
    def test_get_with_hierarchy(self, client, auth_headers, make_event, make_session, make_speech):
        event = make_event()["event"]
        session = make_session(event["id"])
        make_speech(session["id"], title="Opening")

        response = client.get(f"/events/{event['id']}?include=hierarchy", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["sessions"][0]["title"] == "Morning Session"
        assert data["sessions"][0]["speeches"][0]["title"] == "Opening"
        assert data["sessions"][0]["speeches"][0]["slide_count"] == 0

    def test_unknown_event(self, client, auth_headers):
        response = client.get("/events/9999", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["error_code"] == "RESOURCE_NOT_FOUND"


class TestUpdateEvent:
    """Test PUT /events/{id}"""

    def test_update_upcoming_event(self, client, auth_headers, make_event):
        event = make_event()["event"]
        response = client.put(f"/events/{event['id']}", json={"name": "Renamed"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"

    def test_past_event_needs_confirmation(self, client, auth_headers, make_event):
        event = make_event(name="Last Year", date="2021-05-01")["event"]

        response = client.put(f"/events/{event['id']}", json={"name": "Edited"}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "CONFIRMATION_REQUIRED"

        response = client.put(
            f"/events/{event['id']}", json={"name": "Edited", "confirm_past": True}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Edited"

    def test_moving_event_into_past_is_allowed(self, client, auth_headers, make_event):
        event = make_event()["event"]
        yesterday = (date.today() - timedelta(days=1)).isoformat()
        response = client.put(f"/events/{event['id']}", json={"date": yesterday}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "past"

    def test_slug_conflict_on_update(self, client, auth_headers, make_event):
        make_event(slug="taken-slug")
        event = make_event(name="Other")["event"]
        response = client.put(f"/events/{event['id']}", json={"slug": "taken-slug"}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "CONFLICT"

    def test_making_event_private_issues_tokens(self, client, auth_headers, make_event):
        event = make_event()["event"]

        response = client.put(
            f"/events/{event['id']}",
            json={"visibility": "private", "token_expiration_date": future_datetime()},
            headers=auth_headers,
        )
        assert response.status_code == 200

        tokens = client.get(f"/events/{event['id']}/tokens", headers=auth_headers).json()
        assert sorted(t["type"] for t in tokens["tokens"]) == ["organizer", "participant"]

    def test_making_event_private_requires_expiration(self, client, auth_headers, make_event):
        event = make_event()["event"]
        response = client.put(f"/events/{event['id']}", json={"visibility": "private"}, headers=auth_headers)
        assert response.status_code == 400

    def test_making_event_public_clears_expiration(self, client, auth_headers, make_event):
        event = make_event(
            name="Private", visibility="private", token_expiration_date=future_datetime()
        )["event"]
        response = client.put(f"/events/{event['id']}", json={"visibility": "public"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["token_expiration_date"] is None


class TestDeleteEvent:
    def test_delete_cascades(self, client, auth_headers, make_event, make_session, make_speech, upload_slide):
        event = make_event()["event"]
        session = make_session(event["id"])
        speech = make_speech(session["id"])
        assert upload_slide(speech["id"]).status_code == 201

        response = client.delete(f"/events/{event['id']}", headers=auth_headers)

        assert response.status_code == 204
        assert client.get(f"/events/{event['id']}", headers=auth_headers).status_code == 404
        assert client.get(f"/sessions/{session['id']}", headers=auth_headers).status_code == 404
        assert client.get(f"/speeches/{speech['id']}", headers=auth_headers).status_code == 404

    def test_delete_survives_missing_storage_object(
        self, client, auth_headers, make_event, make_session, make_speech, upload_slide, tmp_path
    ):
        event = make_event()["event"]
        speech = make_speech(make_session(event["id"])["id"])
        upload_slide(speech["id"])
        for stored in (tmp_path / "storage").rglob("*.pdf"):
            stored.unlink()

        response = client.delete(f"/events/{event['id']}", headers=auth_headers)
        assert response.status_code == 204
