# tests/v1/test_moderation.py
"""Tests for moderation-related endpoints."""

from fastapi import status
from fastapi.testclient import TestClient


def _file_report(client: TestClient, headers, **overrides):
    payload = {"content_id": "post-1", "content_type": "post", "reason": "spam"}
    payload.update(overrides)
    return client.post("/api/v1/moderation/reports", json=payload, headers=headers)


def _vote(client: TestClient, headers, report_id: str, decision: str):
    return client.post(
        f"/api/v1/moderation/reports/{report_id}/votes",
        json={"decision": decision},
        headers=headers,
    )


def test_create_report(client, auth_headers, test_post) -> None:
    response = _file_report(client, auth_headers("reporter-1"), description="Bot account")

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["status"] == "pending"
    assert data["reporter_id"] == "reporter-1"
    assert data["description"] == "Bot account"
    assert data["remove_count"] == 0
    assert data["votes"] == []


def test_create_report_requires_auth(client, test_post) -> None:
    response = _file_report(client, {})
    assert response.status_code in {status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN}


def test_create_report_rejects_bad_token(client, test_post) -> None:
    response = _file_report(client, {"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_create_report_unknown_content(client, auth_headers) -> None:
    response = _file_report(client, auth_headers("reporter-1"), content_id="missing")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_create_report_self_report_forbidden(client, auth_headers, test_post) -> None:
    response = _file_report(client, auth_headers("author-1"))
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_create_report_other_requires_description(client, auth_headers, test_post) -> None:
    response = _file_report(client, auth_headers("reporter-1"), reason="other")
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_create_report_rejects_unknown_reason(client, auth_headers, test_post) -> None:
    response = _file_report(client, auth_headers("reporter-1"), reason="boring")
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_vote_flow_resolves_report(client, auth_headers, test_post) -> None:
    report_id = _file_report(client, auth_headers("reporter-1")).json()["id"]

    for i, decision in enumerate(["remove", "remove", "keep", "remove"]):
        response = _vote(client, auth_headers(f"voter-{i}"), report_id, decision)
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["status"] == "pending"

    response = _vote(client, auth_headers("voter-4"), report_id, "keep")
    data = response.json()
    assert data["status"] == "resolved_removed"
    assert data["resolution_cause"] == "vote_threshold"
    assert (data["remove_count"], data["keep_count"]) == (3, 2)

    late = _vote(client, auth_headers("voter-5"), report_id, "keep")
    assert late.status_code == status.HTTP_409_CONFLICT

    content = client.get("/api/v1/content/post-1").json()
    assert content["status"] == "removed"


def test_vote_unknown_report(client, auth_headers) -> None:
    response = _vote(client, auth_headers("voter-1"), "unknown", "remove")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_vote_invalid_decision(client, auth_headers, test_post) -> None:
    report_id = _file_report(client, auth_headers("reporter-1")).json()["id"]
    response = _vote(client, auth_headers("voter-1"), report_id, "maybe")
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_get_and_list_reports(client, auth_headers, test_post, test_comment) -> None:
    first = _file_report(client, auth_headers("reporter-1")).json()
    second = _file_report(
        client,
        auth_headers("reporter-1"),
        content_id="comment-1",
        content_type="comment",
        reason="harassment",
    ).json()

    response = client.get(f"/api/v1/moderation/reports/{first['id']}")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["content_id"] == "post-1"

    listed = client.get("/api/v1/moderation/reports", params={"content_type": "comment"})
    assert [r["id"] for r in listed.json()] == [second["id"]]

    by_status = client.get("/api/v1/moderation/reports", params={"status": "pending"})
    assert {r["id"] for r in by_status.json()} == {first["id"], second["id"]}

    assert client.get("/api/v1/moderation/reports/missing").status_code == status.HTTP_404_NOT_FOUND


def test_list_reports_limit_is_bounded(client) -> None:
    response = client.get("/api/v1/moderation/reports", params={"limit": 500})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_voting_status(client, auth_headers, test_post) -> None:
    report_id = _file_report(client, auth_headers("reporter-1")).json()["id"]
    _vote(client, auth_headers("voter-1"), report_id, "keep")

    anonymous = client.get(f"/api/v1/moderation/reports/{report_id}/voting-status").json()
    assert anonymous["total"] == 1
    assert anonymous["user_vote"] is None
    assert anonymous["time_remaining_seconds"] == 24 * 60 * 60

    mine = client.get(
        f"/api/v1/moderation/reports/{report_id}/voting-status",
        headers=auth_headers("voter-1"),
    ).json()
    assert mine["user_vote"] == "keep"


def test_moderator_notes(client, auth_headers, test_post) -> None:
    report_id = _file_report(client, auth_headers("reporter-1")).json()["id"]

    response = client.put(
        f"/api/v1/moderation/reports/{report_id}/notes",
        json={"notes": "Checked the account history"},
        headers=auth_headers("mod-1"),
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["moderator_notes"] == "Checked the account history"

    too_long = client.put(
        f"/api/v1/moderation/reports/{report_id}/notes",
        json={"notes": "x" * 1001},
        headers=auth_headers("mod-1"),
    )
    assert too_long.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_expire_endpoint(client, auth_headers, clock, test_post) -> None:
    report_id = _file_report(client, auth_headers("reporter-1")).json()["id"]
    clock.advance(days=1)

    response = client.post("/api/v1/moderation/reports/expire", headers=auth_headers("mod-1"))

    assert response.status_code == status.HTTP_200_OK
    assert [r["id"] for r in response.json()] == [report_id]
    assert response.json()[0]["status"] == "rejected"
    assert client.get("/api/v1/content/post-1").json()["status"] == "active"


def test_check_content(client) -> None:
    clean = client.post("/api/v1/moderation/check", json={"text": "Whales are great"})
    assert clean.status_code == status.HTTP_200_OK
    assert clean.json() == {"is_allowed": True, "confidence": 0.0, "flags": []}


def test_stats_and_thresholds(client, auth_headers, test_post) -> None:
    report_id = _file_report(client, auth_headers("reporter-1")).json()["id"]
    _vote(client, auth_headers("voter-1"), report_id, "remove")

    stats = client.get("/api/v1/moderation/stats").json()
    assert stats["total_reports"] == 1
    assert stats["pending_reports"] == 1
    assert stats["community_votes"] == 1
    assert stats["average_response_time"] == 0.0

    thresholds = client.get("/api/v1/moderation/thresholds").json()
    assert thresholds == {
        "min_votes_required": 5,
        "removal_threshold": 0.6,
        "ai_confidence_threshold": 0.9,
        "voting_period_seconds": 86400.0,
    }
