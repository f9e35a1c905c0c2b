"""
Admin panel API tests: user errors, system logs and email logs.
"""
from __future__ import annotations

import json
from datetime import datetime
from uuid import uuid4

import pytest
from httpx import AsyncClient


# ---------------------------------------------------------------------------
# Error capture
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_capture_is_accepted_and_stored(client: AsyncClient, make_profile, auth_headers, user_error_repo) -> None:
    profile = make_profile(preferred_language="es")

    response = await client.post(
        "/api/v1/errors/capture",
        json={"message": "No se pudo reservar", "context": {"service": "hidroterapia"}},
        headers={
            **auth_headers(profile),
            "referer": "http://testserver/reservas?paso=2",
            "user-agent": "pytest-browser",
        },
    )

    assert response.status_code == 202
    assert response.json() == {"captured": True}
    [row] = user_error_repo.rows.values()
    assert row.user_email == profile.email
    assert row.user_agent == "pytest-browser"
    assert row.error_context["page"] == "/reservas"
    assert row.error_context["language"] == "es"
    assert row.error_context["service"] == "hidroterapia"


@pytest.mark.asyncio
async def test_anonymous_capture_is_a_silent_no_op(client: AsyncClient, user_error_repo) -> None:
    response = await client.post("/api/v1/errors/capture", json={"message": "boom"})

    assert response.status_code == 202
    assert response.json() == {"captured": False}
    assert user_error_repo.inserts == 0


@pytest.mark.asyncio
async def test_capture_storage_failure_still_answers_202(client: AsyncClient, make_profile, auth_headers, user_error_repo) -> None:
    user_error_repo.fail = True

    response = await client.post(
        "/api/v1/errors/capture",
        json={"message": "boom"},
        headers=auth_headers(make_profile()),
    )

    assert response.status_code == 202
    assert response.json() == {"captured": False}


# ---------------------------------------------------------------------------
# Error review
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_clients_cannot_review_errors(client: AsyncClient, make_profile, auth_headers) -> None:
    response = await client.get("/api/v1/errors", headers=auth_headers(make_profile("cliente")))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_lists_filters_and_reviews_errors(client: AsyncClient, make_profile, auth_headers, user_error_repo) -> None:
    reporter = make_profile()
    admin = make_profile("admin")
    for message in ("Pago rechazado", "Calendario vacío"):
        await client.post(
            "/api/v1/errors/capture",
            json={"message": message},
            headers=auth_headers(reporter),
        )

    listing = await client.get(
        "/api/v1/errors",
        params={"search": "pago", "status": "pending"},
        headers=auth_headers(admin),
    )
    assert listing.status_code == 200, listing.text
    body = listing.json()
    assert body["pagination"] == {"total": 1, "offset": 0, "limit": 100}
    [item] = body["items"]
    assert item["error_message"] == "Pago rechazado"

    review = await client.patch(
        f"/api/v1/errors/{item['id']}",
        json={"status": "needs_review", "review_notes": "Revisar con la pasarela"},
        headers=auth_headers(admin),
    )
    assert review.status_code == 200
    assert review.json()["success"] is True
    stored = next(r for r in user_error_repo.rows.values() if r.error_message == "Pago rechazado")
    assert stored.status == "needs_review"
    assert stored.reviewed_by == admin.id


@pytest.mark.asyncio
async def test_review_rejects_unknown_status_value(client: AsyncClient, make_profile, auth_headers) -> None:
    response = await client.patch(
        f"/api/v1/errors/{uuid4()}",
        json={"status": "pending"},
        headers=auth_headers(make_profile("admin")),
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_delete_unknown_error_answers_200_with_failure(client: AsyncClient, make_profile, auth_headers) -> None:
    response = await client.delete(f"/api/v1/errors/{uuid4()}", headers=auth_headers(make_profile("admin")))

    assert response.status_code == 200
    assert response.json() == {
        "success": False,
        "error": "No se encontró el registro",
        "code": "not_found",
        "affected": None,
    }


@pytest.mark.asyncio
async def test_list_errors_maps_storage_failure_to_503(client: AsyncClient, make_profile, auth_headers, user_error_repo) -> None:
    user_error_repo.fail = True

    response = await client.get("/api/v1/errors", headers=auth_headers(make_profile("super")))

    assert response.status_code == 503


# ---------------------------------------------------------------------------
# System logs
# ---------------------------------------------------------------------------

async def _seed_system_logs(system_log_repo) -> None:
    await system_log_repo.insert(
        {"error_type": "DATABASE_ERROR", "error_message": "deadlock detected", "component": "BookingService"}
    )
    await system_log_repo.insert(
        {"error_type": "EMAIL_ERROR", "error_message": "SMTP timeout", "component": "send_email",
         "user_email": "laia@example.com", "error_code": "TIMEOUT"}
    )


@pytest.mark.asyncio
async def test_system_logs_are_super_only(client: AsyncClient, make_profile, auth_headers) -> None:
    response = await client.get("/api/v1/system-logs", headers=auth_headers(make_profile("admin")))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_system_logs_listing_and_search(client: AsyncClient, make_profile, auth_headers, system_log_repo) -> None:
    await _seed_system_logs(system_log_repo)

    response = await client.get(
        "/api/v1/system-logs",
        params={"search": "laia"},
        headers=auth_headers(make_profile("super")),
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["pagination"]["total"] == 1
    assert body["items"][0]["error_type"] == "EMAIL_ERROR"


@pytest.mark.asyncio
async def test_system_logs_csv_export_is_an_attachment(client: AsyncClient, make_profile, auth_headers, system_log_repo) -> None:
    await _seed_system_logs(system_log_repo)

    response = await client.get(
        "/api/v1/system-logs/export",
        params={"format": "csv"},
        headers=auth_headers(make_profile("super")),
    )

    assert response.status_code == 200, response.text
    assert response.headers["content-type"].startswith("text/csv")
    disposition = response.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="system-logs-')
    assert disposition.endswith('.csv"')
    lines = response.text.splitlines()
    assert lines[0] == "ID,Fecha,Usuario,Tipo,Código,Mensaje,Componente"
    assert len(lines) == 3


@pytest.mark.asyncio
async def test_system_logs_json_export(client: AsyncClient, make_profile, auth_headers, system_log_repo) -> None:
    await _seed_system_logs(system_log_repo)

    response = await client.get(
        "/api/v1/system-logs/export",
        params={"format": "json", "error_type": "DATABASE_ERROR"},
        headers=auth_headers(make_profile("super")),
    )

    assert response.status_code == 200
    payload = json.loads(response.text)
    assert [item["error_type"] for item in payload] == ["DATABASE_ERROR"]


@pytest.mark.asyncio
async def test_system_logs_delete_and_clear(client: AsyncClient, make_profile, auth_headers, system_log_repo) -> None:
    await _seed_system_logs(system_log_repo)
    headers = auth_headers(make_profile("super"))

    deleted = await client.delete("/api/v1/system-logs/1", headers=headers)
    cleared = await client.delete("/api/v1/system-logs", headers=headers)

    assert deleted.json()["success"] is True
    assert cleared.json() == {"success": True, "error": None, "code": None, "affected": 1}
    assert system_log_repo.rows == {}


# ---------------------------------------------------------------------------
# Email logs
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_email_logs_listing_filters_by_status(client: AsyncClient, make_profile, auth_headers, email_log_repo) -> None:
    email_log_repo.add(email_type="welcome", status="sent", recipient_email="a@example.com")
    email_log_repo.add(email_type="welcome", status="failed", recipient_email="laia@example.com")

    response = await client.get(
        "/api/v1/email-logs",
        params={"status": "failed", "recipient_email": "LAIA"},
        headers=auth_headers(make_profile("admin")),
    )

    assert response.status_code == 200, response.text
    [item] = response.json()["items"]
    assert item["recipient_email"] == "laia@example.com"


@pytest.mark.asyncio
async def test_email_stats_default_window(client: AsyncClient, make_profile, auth_headers, email_log_repo) -> None:
    email_log_repo.add(email_type="welcome", status="sent", recipient_email="a@example.com")
    email_log_repo.add(email_type="welcome", status="pending", recipient_email="b@example.com",
                       created_at=datetime(2000, 1, 1))

    response = await client.get("/api/v1/email-logs/stats", headers=auth_headers(make_profile("admin")))

    assert response.status_code == 200
    assert response.json() == {
        "total_emails": 1,
        "total_sent": 1,
        "total_failed": 0,
        "total_pending": 0,
        "success_rate": 100.0,
        "days": 30,
    }


@pytest.mark.asyncio
async def test_email_retry_queues_new_send(client: AsyncClient, make_profile, auth_headers, email_log_repo, dispatcher) -> None:
    log = email_log_repo.add(email_type="welcome", status="failed", recipient_email="a@example.com")

    response = await client.post(
        f"/api/v1/email-logs/{log.id}/retry",
        headers=auth_headers(make_profile("admin")),
    )

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert dispatcher.payloads[0]["to"] == "a@example.com"


@pytest.mark.asyncio
async def test_clients_cannot_read_email_logs(client: AsyncClient, make_profile, auth_headers) -> None:
    response = await client.get("/api/v1/email-logs", headers=auth_headers(make_profile()))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_error_list_accepts_zulu_date_bounds(client: AsyncClient, make_profile, auth_headers) -> None:
    await client.post(
        "/api/v1/errors/capture",
        json={"message": "Reserva duplicada"},
        headers=auth_headers(make_profile()),
    )

    response = await client.get(
        "/api/v1/errors",
        params={"start_date": "2024-01-01T00:00:00Z"},
        headers=auth_headers(make_profile("admin")),
    )

    assert response.status_code == 200, response.text
    assert [item["error_message"] for item in response.json()["items"]] == ["Reserva duplicada"]


@pytest.mark.asyncio
async def test_oversized_capture_is_accepted_and_truncated(
    client: AsyncClient, make_profile, auth_headers, user_error_repo
) -> None:
    response = await client.post(
        "/api/v1/errors/capture",
        json={"message": "x" * 6000},
        headers=auth_headers(make_profile()),
    )

    assert response.status_code == 202
    assert response.json() == {"captured": True}
    [row] = user_error_repo.rows.values()
    assert len(row.error_message) == 5000


@pytest.mark.asyncio
async def test_null_capture_message_is_a_no_op(client: AsyncClient, make_profile, auth_headers, user_error_repo) -> None:
    response = await client.post(
        "/api/v1/errors/capture",
        json={"message": None},
        headers=auth_headers(make_profile()),
    )

    assert response.status_code == 202
    assert response.json() == {"captured": False}
    assert user_error_repo.inserts == 0
