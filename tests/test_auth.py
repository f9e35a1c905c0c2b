"""
Authentication and profile API tests.
"""
from __future__ import annotations

from typing import Any

import pytest
from httpx import AsyncClient

VALID_REGISTRATION: dict[str, Any] = {
    "email": "laia@example.com",
    "password": "Gossos#2024",
    "confirm_password": "Gossos#2024",
    "nombre_completo": "Laia Puig",
    "telefono": "612 345 678",
    "pais_codigo": "ES",
    "preferred_language": "ca",
}


async def _register(client: AsyncClient, **overrides: Any):
    return await client.post("/api/v1/auth/register", json={**VALID_REGISTRATION, **overrides})


async def _login(client: AsyncClient, email: str, password: str) -> dict[str, Any]:
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": password},
    )
    assert response.status_code == 200, response.text
    return response.json()


@pytest.mark.asyncio
async def test_register_creates_client_profile_and_queues_welcome(client: AsyncClient, dispatcher) -> None:
    response = await _register(client)

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["email"] == "laia@example.com"
    assert body["role"] == "cliente"
    assert body["pais_nombre"] == "España"
    assert "hashed_password" not in body

    assert dispatcher.payloads == [
        {
            "email_type": "welcome",
            "to": "laia@example.com",
            "recipient_name": "Laia Puig",
            "language": "ca",
            "user_id": body["id"],
        }
    ]


@pytest.mark.asyncio
async def test_register_succeeds_when_welcome_email_cannot_be_queued(client: AsyncClient, dispatcher) -> None:
    dispatcher.error = RuntimeError("broker down")

    response = await _register(client)

    assert response.status_code == 201, response.text


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("overrides", "detail"),
    [
        ({"email": "laia<x>@example.com"}, "Caracteres no permitidos: <, >"),
        ({"email": "laia..puig@example.com"}, "No se permiten puntos consecutivos"),
        ({"nombre_completo": "   "}, "El nombre completo es obligatorio"),
        ({"telefono": "512345678"}, "Formato incorrecto: 9 dígitos, empezando por 6 o 7"),
        ({"telefono": "61234"}, "El teléfono debe tener 9 dígitos"),
        ({"password": "abcdefg1", "confirm_password": "abcdefg1"}, "La contraseña no cumple los requisitos"),
        ({"confirm_password": "Gossos#2025"}, "Las contraseñas no coinciden"),
        ({"preferred_language": "fr"}, "Idioma no soportado: fr"),
    ],
)
async def test_register_reports_first_validation_failure(
    client: AsyncClient,
    overrides: dict[str, Any],
    detail: str,
) -> None:
    response = await _register(client, **overrides)

    assert response.status_code == 422, response.text
    assert response.json()["detail"] == detail


@pytest.mark.asyncio
async def test_register_rejects_duplicate_email(client: AsyncClient) -> None:
    assert (await _register(client)).status_code == 201

    response = await _register(client, email="LAIA@example.com")

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_login_returns_bearer_token_usable_on_me(client: AsyncClient) -> None:
    await _register(client)

    tokens = await _login(client, "laia@example.com", "Gossos#2024")

    assert tokens["token_type"] == "bearer"
    assert tokens["access_token"]
    assert tokens["expires_in"] > 0

    me = await client.get(
        "/api/v1/users/me",
        headers={"Authorization": f"Bearer {tokens['access_token']}"},
    )
    assert me.status_code == 200, me.text
    assert me.json()["email"] == "laia@example.com"


@pytest.mark.asyncio
async def test_login_rejects_wrong_password(client: AsyncClient) -> None:
    await _register(client)

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "laia@example.com", "password": "wrong"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_rejects_disabled_profile(client: AsyncClient, make_profile) -> None:
    profile = make_profile(is_active=False)

    response = await client.post(
        "/api/v1/auth/login",
        json={"email": profile.email, "password": "Secret123!"},
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_me_requires_token(client: AsyncClient) -> None:
    response = await client.get("/api/v1/users/me")

    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_update_me_validates_phone_against_country(client: AsyncClient, make_profile, auth_headers) -> None:
    profile = make_profile()

    bad = await client.patch(
        "/api/v1/users/me",
        json={"telefono": "612345678", "pais_codigo": "GB"},
        headers=auth_headers(profile),
    )
    assert bad.status_code == 422
    assert bad.json()["detail"] == "El teléfono debe tener 10 dígitos"

    good = await client.patch(
        "/api/v1/users/me",
        json={"telefono": "7123456789", "pais_codigo": "GB"},
        headers=auth_headers(profile),
    )
    assert good.status_code == 200, good.text
    assert good.json()["pais_nombre"] == "Reino Unido"


@pytest.mark.asyncio
async def test_language_preference_round_trip_sets_cookie(client: AsyncClient, make_profile, auth_headers) -> None:
    profile = make_profile(preferred_language="ca")

    current = await client.get("/api/v1/users/me/language", headers=auth_headers(profile))
    assert current.json() == {"language": "ca"}

    changed = await client.put(
        "/api/v1/users/me/language",
        json={"language": "en"},
        headers=auth_headers(profile),
    )
    assert changed.status_code == 200, changed.text
    assert changed.json() == {"language": "en"}
    assert "i18nextLng=en" in changed.headers["set-cookie"]
    assert profile.preferred_language == "en"


@pytest.mark.asyncio
async def test_language_preference_rejects_unsupported_language(client: AsyncClient, make_profile, auth_headers) -> None:
    profile = make_profile(preferred_language="es")

    response = await client.put(
        "/api/v1/users/me/language",
        json={"language": "de"},
        headers=auth_headers(profile),
    )

    assert response.status_code == 422
    assert profile.preferred_language == "es"
