"""HTTP-level tests: authentication, status mapping, and response envelopes."""

import uuid

import pytest

API = "/api/v1"


def _slot_body(seed, start="2026-07-01T10:00:00Z", end="2026-07-01T11:00:00Z", **extra):
    return {"edition_id": str(seed.edition_id), "start_utc": start, "end_utc": end, **extra}


class TestAuthentication:
    @pytest.mark.asyncio
    async def test_missing_token_is_unauthorized(self, client, seed):
        response = await client.get(f"{API}/invitations")

        assert response.status_code == 401
        assert response.json()["errors"][0]["code"] == "AUTHORIZATION_REQUIRED"

    @pytest.mark.asyncio
    async def test_invalid_token_is_unauthorized(self, client, seed):
        response = await client.get(f"{API}/invitations", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["errors"][0]["code"] == "INVALID_JWT_TOKEN"


class TestTimeSlotEndpoints:
    @pytest.mark.asyncio
    async def test_create_and_conflict(self, client, seed, auth_headers):
        headers = auth_headers(seed.manager_schedule_id)
        url = f"{API}/stages/{seed.main_stage_id}/time-slots"

        created = await client.post(url, json=_slot_body(seed), headers=headers)
        assert created.status_code == 201
        data = created.json()["data"]
        assert data["type"] == "time_slot"
        assert data["attributes"]["slot_type"] == "performance"

        overlapping = await client.post(
            url,
            json=_slot_body(seed, "2026-07-01T10:30:00Z", "2026-07-01T11:30:00Z"),
            headers=headers,
        )
        assert overlapping.status_code == 409
        assert overlapping.json()["errors"][0]["code"] == "TIME_SLOT_OVERLAP"

        adjacent = await client.post(
            url,
            json=_slot_body(seed, "2026-07-01T11:00:00Z", "2026-07-01T12:00:00Z"),
            headers=headers,
        )
        assert adjacent.status_code == 201

        listing = await client.get(url, params={"edition_id": str(seed.edition_id)}, headers=headers)
        assert listing.status_code == 200
        assert listing.json()["meta"]["total"] == 2

    @pytest.mark.asyncio
    async def test_offsets_are_normalised_to_utc(self, client, seed, auth_headers):
        response = await client.post(
            f"{API}/stages/{seed.main_stage_id}/time-slots",
            json=_slot_body(seed, "2026-07-01T12:00:00+02:00", "2026-07-01T13:00:00+02:00"),
            headers=auth_headers(seed.manager_schedule_id),
        )

        assert response.status_code == 201
        slot_id = response.json()["data"]["id"]
        fetched = await client.get(f"{API}/time-slots/{slot_id}", headers=auth_headers(seed.viewer_schedule_id))
        assert fetched.json()["data"]["attributes"]["start_utc"].startswith("2026-07-01T10:00:00")

    @pytest.mark.asyncio
    async def test_status_mapping(self, client, seed, auth_headers):
        url = f"{API}/stages/{seed.main_stage_id}/time-slots"

        forbidden = await client.post(url, json=_slot_body(seed), headers=auth_headers(seed.viewer_schedule_id))
        assert forbidden.status_code == 403
        assert forbidden.json()["errors"][0]["code"] == "FORBIDDEN"

        not_found = await client.post(
            f"{API}/stages/{uuid.uuid4()}/time-slots",
            json=_slot_body(seed),
            headers=auth_headers(seed.manager_schedule_id),
        )
        assert not_found.status_code == 404
        assert not_found.json()["errors"][0]["code"] == "STAGE_NOT_FOUND"

        inverted = await client.post(
            url,
            json=_slot_body(seed, "2026-07-01T12:00:00Z", "2026-07-01T11:00:00Z"),
            headers=auth_headers(seed.manager_schedule_id),
        )
        assert inverted.status_code == 400
        assert inverted.json()["errors"][0]["code"] == "INVALID_TIME_RANGE"

        naive = await client.post(
            url,
            json=_slot_body(seed, "2026-07-01T10:00:00", "2026-07-01T11:00:00"),
            headers=auth_headers(seed.manager_schedule_id),
        )
        assert naive.status_code == 400
        assert naive.json()["errors"][0]["code"] == "VALIDATION_FAILED"

    @pytest.mark.asyncio
    async def test_delete_time_slot(self, client, seed, auth_headers):
        headers = auth_headers(seed.manager_schedule_id)
        created = await client.post(
            f"{API}/stages/{seed.main_stage_id}/time-slots", json=_slot_body(seed), headers=headers
        )
        slot_id = created.json()["data"]["id"]

        deleted = await client.delete(f"{API}/time-slots/{slot_id}", headers=headers)
        assert deleted.status_code == 204

        missing = await client.get(f"{API}/time-slots/{slot_id}", headers=headers)
        assert missing.status_code == 404


class TestEngagementAndScheduleEndpoints:
    @pytest.mark.asyncio
    async def test_engage_publish_and_read(self, client, seed, auth_headers):
        headers = auth_headers(seed.manager_schedule_id)
        created = await client.post(
            f"{API}/stages/{seed.main_stage_id}/time-slots", json=_slot_body(seed), headers=headers
        )
        slot_id = created.json()["data"]["id"]

        engaged = await client.post(
            f"{API}/time-slots/{slot_id}/engagement",
            json={"artist_id": str(seed.headliner_id), "notes": "Headline set"},
            headers=headers,
        )
        assert engaged.status_code == 201
        engagement_id = engaged.json()["data"]["id"]

        again = await client.post(
            f"{API}/time-slots/{slot_id}/engagement",
            json={"artist_id": str(seed.opener_id)},
            headers=headers,
        )
        assert again.status_code == 409
        assert again.json()["errors"][0]["code"] == "TIME_SLOT_ALREADY_ENGAGED"

        updated = await client.patch(
            f"{API}/engagements/{engagement_id}", json={"notes": "Extended set"}, headers=headers
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["attributes"]["notes"] == "Extended set"

        before = await client.get(f"{API}/editions/{seed.edition_id}/schedule", headers=headers)
        assert before.status_code == 200
        assert before.json()["data"]["attributes"]["is_published"] is False
        assert before.json()["data"]["attributes"]["version"] == 1

        for expected_version in (1, 2):
            published = await client.post(f"{API}/editions/{seed.edition_id}/schedule/publish", headers=headers)
            assert published.status_code == 200
            assert published.json()["data"]["attributes"]["version"] == expected_version

        detail = await client.get(f"{API}/editions/{seed.edition_id}/schedule/detail", headers=headers)
        assert detail.status_code == 200
        attributes = detail.json()["data"]["attributes"]
        assert attributes["is_published"] is True
        assert attributes["items"][0]["artist_name"] == "The Headliners"

    @pytest.mark.asyncio
    async def test_cross_festival_artist_is_bad_request(self, client, seed, auth_headers):
        headers = auth_headers(seed.manager_schedule_id)
        created = await client.post(
            f"{API}/stages/{seed.main_stage_id}/time-slots", json=_slot_body(seed), headers=headers
        )
        slot_id = created.json()["data"]["id"]

        response = await client.post(
            f"{API}/time-slots/{slot_id}/engagement",
            json={"artist_id": str(seed.foreign_artist_id)},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "ARTIST_FESTIVAL_MISMATCH"


class TestPermissionEndpoints:
    @pytest.mark.asyncio
    async def test_invitation_round_trip(self, client, seed, auth_headers):
        invited = await client.post(
            f"{API}/festivals/{seed.festival_id}/permissions",
            json={"email": "invitee@example.com", "role": "administrator", "scope": "venues"},
            headers=auth_headers(seed.owner_id),
        )
        assert invited.status_code == 201
        permission = invited.json()["data"]
        assert permission["type"] == "festival_permission"
        assert permission["attributes"]["role"] == "administrator"
        assert permission["attributes"]["scope"] == "all"
        assert permission["attributes"]["status"] == "pending"

        mine = await client.get(f"{API}/invitations", headers=auth_headers(seed.invitee_id))
        assert [p["id"] for p in mine.json()["data"]] == [permission["id"]]

        stranger = await client.post(
            f"{API}/invitations/{permission['id']}/accept", headers=auth_headers(seed.outsider_id)
        )
        assert stranger.status_code == 403

        accepted = await client.post(
            f"{API}/invitations/{permission['id']}/accept", headers=auth_headers(seed.invitee_id)
        )
        assert accepted.status_code == 200
        assert accepted.json()["data"]["attributes"]["status"] == "active"

        listing = await client.get(
            f"{API}/festivals/{seed.festival_id}/permissions", headers=auth_headers(seed.invitee_id)
        )
        assert listing.json()["meta"]["total"] == 6

    @pytest.mark.asyncio
    async def test_invitation_request_validation(self, client, seed, auth_headers):
        headers = auth_headers(seed.owner_id)
        url = f"{API}/festivals/{seed.festival_id}/permissions"

        neither = await client.post(url, json={"role": "viewer"}, headers=headers)
        assert neither.status_code == 400

        bad_role = await client.post(url, json={"user_id": str(seed.invitee_id), "role": "superuser"}, headers=headers)
        assert bad_role.status_code == 400

        owner = await client.post(url, json={"user_id": str(seed.invitee_id), "role": "owner"}, headers=headers)
        assert owner.status_code == 400
        assert owner.json()["errors"][0]["code"] == "OWNER_NOT_INVITABLE"

        duplicate = await client.post(url, json={"user_id": str(seed.admin_id), "role": "viewer"}, headers=headers)
        assert duplicate.status_code == 409

        boolean_role = await client.post(url, json={"user_id": str(seed.invitee_id), "role": True}, headers=headers)
        assert boolean_role.status_code == 400

        boolean_scope = await client.post(
            url, json={"user_id": str(seed.invitee_id), "role": "viewer", "scope": False}, headers=headers
        )
        assert boolean_scope.status_code == 400

        numeric_role = await client.post(url, json={"user_id": str(seed.invitee_id), "role": 1}, headers=headers)
        assert numeric_role.status_code == 201
        assert numeric_role.json()["data"]["attributes"]["role"] == "manager"

    @pytest.mark.asyncio
    async def test_transfer_ownership(self, client, seed, auth_headers):
        url = f"{API}/festivals/{seed.festival_id}/transfer-ownership"

        refused = await client.post(
            url, json={"new_owner_id": str(seed.invitee_id)}, headers=auth_headers(seed.admin_id)
        )
        assert refused.status_code == 403

        transferred = await client.post(
            url, json={"new_owner_id": str(seed.admin_id)}, headers=auth_headers(seed.owner_id)
        )
        assert transferred.status_code == 200
        assert transferred.json()["data"]["attributes"]["role"] == "owner"

    @pytest.mark.asyncio
    async def test_update_and_revoke(self, client, seed, auth_headers):
        listing = await client.get(
            f"{API}/festivals/{seed.festival_id}/permissions", headers=auth_headers(seed.admin_id)
        )
        viewer = next(
            p for p in listing.json()["data"] if p["attributes"]["user_id"] == str(seed.viewer_schedule_id)
        )

        updated = await client.patch(
            f"{API}/permissions/{viewer['id']}", json={"role": "manager"}, headers=auth_headers(seed.admin_id)
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["attributes"]["role"] == "manager"
        assert updated.json()["data"]["attributes"]["scope"] == "schedule"

        revoked = await client.delete(f"{API}/permissions/{viewer['id']}", headers=auth_headers(seed.admin_id))
        assert revoked.status_code == 200
        assert revoked.json()["data"]["attributes"]["status"] == "revoked"

        gone = await client.patch(
            f"{API}/permissions/{viewer['id']}", json={"role": "viewer"}, headers=auth_headers(seed.admin_id)
        )
        assert gone.status_code == 404
