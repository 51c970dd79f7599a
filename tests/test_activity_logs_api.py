"""Tests for audit recording as seen through the /v1/activity-logs endpoints."""

import datetime

import pytest

from conftest import ADMIN_UUID


@pytest.fixture
def logged(client, auth_headers, seed_permissions):
    seed_permissions("view_users")
    client.post(
        "/v1/roles",
        json=[{"name": "Viewer", "permissions": ["view_users"]}],
        headers=auth_headers,
    )
    client.get("/v1/roles/999", headers=auth_headers)


def today():
    return datetime.datetime.now(datetime.timezone.utc).date()


class TestActivityLogs:
    def test_requires_token(self, client):
        assert client.get("/v1/activity-logs").status_code == 401

    def test_lists_newest_first(self, client, auth_headers, logged):
        response = client.get("/v1/activity-logs", headers=auth_headers)

        body = response.json()
        assert body["meta"]["message"] == "Activity logs retrieved successfully."
        assert [entry["event"] for entry in body["result"]] == [
            "Role Not Found",
            "Roles Created",
            "Permissions Created",
        ]

    def test_entries_carry_actor_and_address(self, client, auth_headers, logged):
        entries = client.get("/v1/activity-logs", headers=auth_headers).json()["result"]

        assert all(entry["causer_id"] == ADMIN_UUID for entry in entries)
        assert all(entry["properties"]["ip_address"] == "testclient" for entry in entries)

    def test_not_found_entry(self, client, auth_headers, logged):
        entries = client.get("/v1/activity-logs", headers=auth_headers).json()["result"]

        assert entries[0]["log_name"] == "Role"
        assert entries[0]["description"] == "Failed to retrieve role with ID: 999"
        assert entries[0]["properties"]["role_id"] == 999

    def test_validation_failure_is_logged(self, client, auth_headers):
        client.post("/v1/permissions", json=[{"name": ""}], headers=auth_headers)

        entries = client.get("/v1/activity-logs", headers=auth_headers).json()["result"]

        assert len(entries) == 1
        assert entries[0]["event"] == "Validation Failed"
        assert entries[0]["properties"]["errors"] == {
            "0.name": ["The 0.name field is required."]
        }

    def test_by_log_name(self, client, auth_headers, logged):
        response = client.get(
            "/v1/activity-logs/log-name/Permission", headers=auth_headers
        )

        entries = response.json()["result"]
        assert [entry["event"] for entry in entries] == ["Permissions Created"]

    def test_by_unknown_log_name(self, client, auth_headers, logged):
        response = client.get("/v1/activity-logs/log-name/Nothing", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["result"] == []


class TestDateRange:
    def test_includes_both_days(self, client, auth_headers, logged):
        day = today().isoformat()

        response = client.get(
            "/v1/activity-logs/date-range",
            params={"start_date": day, "end_date": day},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert len(response.json()["result"]) == 3

    def test_range_in_the_past(self, client, auth_headers, logged):
        start = today() - datetime.timedelta(days=10)
        end = today() - datetime.timedelta(days=5)

        response = client.get(
            "/v1/activity-logs/date-range",
            params={"start_date": start.isoformat(), "end_date": end.isoformat()},
            headers=auth_headers,
        )

        assert response.json()["result"] == []

    def test_reversed_range(self, client, auth_headers):
        response = client.get(
            "/v1/activity-logs/date-range",
            params={"start_date": "2024-05-02", "end_date": "2024-05-01"},
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert response.json()["errors"] == {
            "end_date": ["The end_date field must be a date after or equal to start_date."]
        }

    def test_missing_dates(self, client, auth_headers):
        response = client.get("/v1/activity-logs/date-range", headers=auth_headers)

        assert response.status_code == 422
        assert response.json()["errors"] == {
            "start_date": ["The start_date field is required."],
            "end_date": ["The end_date field is required."],
        }


class TestRejectedRequests:
    def test_malformed_permission_id(self, client, auth_headers):
        response = client.get("/v1/permissions/abc", headers=auth_headers)

        assert response.status_code == 422
        entries = client.get("/v1/activity-logs", headers=auth_headers).json()["result"]
        assert len(entries) == 1
        assert entries[0]["log_name"] == "Permission"
        assert entries[0]["event"] == "Validation Failed"
        assert entries[0]["description"] == "Rejected request to get a permission."
        assert entries[0]["causer_id"] == ADMIN_UUID
        assert entries[0]["properties"] == {
            "ip_address": "testclient",
            "errors": {"permission_id": ["The permission_id field must be an integer."]},
        }

    def test_malformed_role_id(self, client, auth_headers):
        client.put("/v1/roles/xyz", json={"name": "Writer"}, headers=auth_headers)

        entries = client.get("/v1/activity-logs", headers=auth_headers).json()["result"]
        assert [entry["log_name"] for entry in entries] == ["Role"]
        assert entries[0]["properties"]["errors"] == {
            "role_id": ["The role_id field must be an integer."]
        }

    def test_undecodable_body(self, client, auth_headers):
        response = client.post(
            "/v1/roles",
            content="[{",
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 422
        entries = client.get("/v1/activity-logs", headers=auth_headers).json()["result"]
        assert len(entries) == 1
        assert entries[0]["log_name"] == "Role"
        assert entries[0]["properties"]["errors"] == {
            "body": ["The body field must be valid JSON."]
        }

    def test_undecodable_body_without_token(self, client, auth_headers):
        client.post(
            "/v1/permissions",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )

        entries = client.get("/v1/activity-logs", headers=auth_headers).json()["result"]
        assert len(entries) == 1
        assert entries[0]["causer_id"] is None

    def test_activity_log_routes_are_not_audited(self, client, auth_headers):
        client.get(
            "/v1/activity-logs/date-range",
            params={"start_date": "yesterday", "end_date": "today"},
            headers=auth_headers,
        )

        assert client.get("/v1/activity-logs", headers=auth_headers).json()["result"] == []
