"""
Tests for Access Token Routes

Tests token issuance, validation outcomes, revocation, QR codes, usage
tracking and what organizer and participant tokens may do.
"""

import asyncio
from datetime import timedelta

import pytest
from sqlalchemy import update

from conftest import future_date, future_datetime
from sharehub.models.access_token import AccessToken
from sharehub.services.usage_recorder import usage_recorder
from sharehub.utils.timeutils import utcnow


@pytest.fixture
def private_event(make_event):
    return make_event(name="Board Retreat", visibility="private", token_expiration_date=future_datetime())


def expire_token(session_factory, token_id: int):
    async def _expire():
        async with session_factory() as session:
            await session.execute(
                update(AccessToken).where(AccessToken.id == token_id).values(expires_at=utcnow() - timedelta(hours=1))
            )
            await session.commit()

    asyncio.run(_expire())


class TestIssueTokens:
    """Test POST /events/{event_id}/tokens"""

    def test_issue_pair(self, client, auth_headers, private_event):
        event_id = private_event["event"]["id"]
        response = client.post(
            f"/events/{event_id}/tokens", json={"expires_at": future_datetime(days=10)}, headers=auth_headers
        )
        assert response.status_code == 201
        assert sorted(t["type"] for t in response.json()["tokens"]) == ["organizer", "participant"]

    def test_issue_single_token(self, client, auth_headers, private_event):
        event_id = private_event["event"]["id"]
        response = client.post(
            f"/events/{event_id}/tokens",
            json={"type": "participant", "expires_at": future_datetime(days=10)},
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["total"] == 1

    def test_expiry_must_be_future(self, client, auth_headers, private_event):
        event_id = private_event["event"]["id"]
        response = client.post(
            f"/events/{event_id}/tokens", json={"expires_at": future_datetime(days=-1)}, headers=auth_headers
        )
        assert response.status_code == 400

    def test_list_newest_first(self, client, auth_headers, private_event):
        event_id = private_event["event"]["id"]
        client.post(
            f"/events/{event_id}/tokens",
            json={"type": "participant", "expires_at": future_datetime(days=10)},
            headers=auth_headers,
        )
        tokens = client.get(f"/events/{event_id}/tokens", headers=auth_headers).json()
        assert tokens["total"] == 3
        ids = [t["id"] for t in tokens["tokens"]]
        assert ids[0] == max(ids)


class TestValidateToken:
    """Test POST /tokens/validate"""

    def test_valid_token(self, client, private_event):
        participant = private_event["tokens"]["participant"]
        response = client.post("/tokens/validate", json={"token": participant["token"]})
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["token"]["id"] == participant["id"]

    def test_unknown_token(self, client, seeded):
        response = client.post("/tokens/validate", json={"token": "a" * 21})
        assert response.json() == {"valid": False, "token": None, "error": "Token not found"}

    def test_wrong_event(self, client, private_event):
        participant = private_event["tokens"]["participant"]
        response = client.post(
            "/tokens/validate", json={"token": participant["token"], "event_id": participant["event_id"] + 1}
        )
        assert response.json()["error"] == "Token does not belong to this event"

    def test_expired_token(self, client, session_factory, private_event):
        participant = private_event["tokens"]["participant"]
        expire_token(session_factory, participant["id"])

        response = client.post("/tokens/validate", json={"token": participant["token"]})
        assert response.json() == {"valid": False, "token": None, "error": "Token has expired"}

    def test_revoked_beats_expired(self, client, auth_headers, session_factory, private_event):
        participant = private_event["tokens"]["participant"]
        client.post(f"/tokens/{participant['id']}/revoke", headers=auth_headers)
        expire_token(session_factory, participant["id"])

        response = client.post("/tokens/validate", json={"token": participant["token"]})
        assert response.json()["error"] == "Token has been revoked"

    def test_usage_is_recorded(self, client, auth_headers, private_event):
        participant = private_event["tokens"]["participant"]
        client.post("/tokens/validate", json={"token": participant["token"]})
        client.post("/tokens/validate", json={"token": participant["token"]})

        assert asyncio.run(usage_recorder.process_pending()) == 2

        tokens = client.get(f"/events/{participant['event_id']}/tokens", headers=auth_headers).json()["tokens"]
        used = next(t for t in tokens if t["id"] == participant["id"])
        assert used["use_count"] == 2
        assert used["last_used_at"] is not None


class TestRevokeToken:
    def test_revoke_is_idempotent(self, client, auth_headers, seeded, private_event):
        participant = private_event["tokens"]["participant"]

        first = client.post(f"/tokens/{participant['id']}/revoke", headers=auth_headers).json()
        second = client.post(f"/tokens/{participant['id']}/revoke", headers=auth_headers).json()

        assert first["revoked_at"] is not None
        assert first["revoked_by"] == seeded["admin_id"]
        assert second["revoked_at"] == first["revoked_at"]

    def test_revocation_logged_once(self, client, auth_headers, private_event):
        participant = private_event["tokens"]["participant"]
        event_id = private_event["event"]["id"]

        client.post(f"/tokens/{participant['id']}/revoke", headers=auth_headers)
        client.post(f"/tokens/{participant['id']}/revoke", headers=auth_headers)

        activity = client.get(f"/events/{event_id}/dashboard", headers=auth_headers).json()["activity"]
        revocations = [a for a in activity if a["action_type"] == "token_revoked"]
        assert len(revocations) == 1

    def test_revoked_token_loses_access(self, client, auth_headers, private_event):
        participant = private_event["tokens"]["participant"]
        event_id = private_event["event"]["id"]
        assert client.get(f"/events/{event_id}?token={participant['token']}").status_code == 200

        client.post(f"/tokens/{participant['id']}/revoke", headers=auth_headers)

        response = client.get(f"/events/{event_id}?token={participant['token']}")
        assert response.status_code == 403
        assert response.json()["message"] == "Token has been revoked"


class TestTokenQr:
    """Test GET /tokens/{id}/qr"""

    def test_participant_qr_png(self, client, auth_headers, private_event):
        participant = private_event["tokens"]["participant"]
        response = client.get(f"/tokens/{participant['id']}/qr", headers=auth_headers)
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content.startswith(b"\x89PNG")

    def test_organizer_qr_refused(self, client, auth_headers, private_event):
        organizer = private_event["tokens"]["organizer"]
        response = client.get(f"/tokens/{organizer['id']}/qr", headers=auth_headers)
        assert response.status_code == 400

    def test_revoked_qr_refused(self, client, auth_headers, private_event):
        participant = private_event["tokens"]["participant"]
        client.post(f"/tokens/{participant['id']}/revoke", headers=auth_headers)
        response = client.get(f"/tokens/{participant['id']}/qr", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Token has been revoked"


class TestTokenHolderAccess:
    """What organizer and participant tokens can do"""

    def test_bearer_token_reads_event(self, client, private_event):
        participant = private_event["tokens"]["participant"]
        response = client.get(
            f"/events/{private_event['event']['id']}",
            headers={"Authorization": f"Bearer {participant['token']}"},
        )
        assert response.status_code == 200

    def test_organizer_can_add_sessions(self, client, private_event):
        organizer = private_event["tokens"]["organizer"]
        response = client.post(
            f"/events/{private_event['event']['id']}/sessions?token={organizer['token']}",
            json={"title": "Organizer Session"},
        )
        assert response.status_code == 201

    def test_participant_is_read_only(self, client, private_event):
        participant = private_event["tokens"]["participant"]
        response = client.post(
            f"/events/{private_event['event']['id']}/sessions?token={participant['token']}",
            json={"title": "Sneaky Session"},
        )
        assert response.status_code == 403
        assert response.json()["message"] == "This action requires organizer access"

    def test_token_cannot_reach_other_events(self, client, make_event, private_event):
        other = make_event(name="Other Event", date=future_date(days=40))["event"]
        organizer = private_event["tokens"]["organizer"]
        response = client.get(f"/events/{other['id']}?token={organizer['token']}")
        assert response.status_code == 404

    def test_token_cannot_manage_tokens(self, client, private_event):
        organizer = private_event["tokens"]["organizer"]
        response = client.get(
            f"/events/{private_event['event']['id']}/tokens",
            headers={"Authorization": f"Bearer {organizer['token']}"},
        )
        assert response.status_code == 401
