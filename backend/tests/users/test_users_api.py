"""
Tests d'intégration pour les endpoints de l'API du module Utilisateur.
"""
import pytest
from httpx import AsyncClient
from fastapi import status

from eletrica.config import settings

API_PREFIX = settings.API_V1_PREFIX

pytestmark = pytest.mark.asyncio


async def test_register_user(test_client: AsyncClient):
    user_data = {
        "email": "novo@example.com",
        "password": "senha123",
        "name": "Novo Eletricista",
        "phone": "11999990000",
    }
    response = await test_client.post(f"{API_PREFIX}/users/", json=user_data)
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["email"] == user_data["email"]
    assert data["is_active"] is True
    assert "id" in data
    # Le mot de passe n'est jamais retourné
    assert "password" not in data
    assert "password_hash" not in data

async def test_register_duplicate_email(test_client: AsyncClient, test_user_id: int):
    response = await test_client.post(
        f"{API_PREFIX}/users/",
        json={"email": "eletricista@example.com", "password": "senha123"},
    )
    assert response.status_code == status.HTTP_409_CONFLICT

async def test_register_short_password(test_client: AsyncClient):
    response = await test_client.post(
        f"{API_PREFIX}/users/", json={"email": "curto@example.com", "password": "123"}
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

async def test_read_me(test_client: AsyncClient, auth_headers_user: dict, test_user_id: int):
    response = await test_client.get(f"{API_PREFIX}/users/me", headers=auth_headers_user)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["id"] == test_user_id
    assert data["email"] == "eletricista@example.com"

async def test_update_me_profile_fields(test_client: AsyncClient, auth_headers_user: dict, test_user_id: int):
    response = await test_client.put(
        f"{API_PREFIX}/users/me",
        json={"name": "Eletricista Renomeado", "phone": "11911112222"},
        headers=auth_headers_user,
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["id"] == test_user_id
    assert data["name"] == "Eletricista Renomeado"
    assert data["phone"] == "11911112222"
    assert data["email"] == "eletricista@example.com"
    assert data["updated_at"] is not None

async def test_update_me_email_already_taken(
    test_client: AsyncClient, auth_headers_user: dict, test_user_2_id: int
):
    response = await test_client.put(
        f"{API_PREFIX}/users/me", json={"email": "outro@example.com"}, headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_409_CONFLICT

async def test_update_me_password_requires_current_password(
    test_client: AsyncClient, auth_headers_user: dict
):
    response = await test_client.put(
        f"{API_PREFIX}/users/me", json={"new_password": "novasenha"}, headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = await test_client.put(
        f"{API_PREFIX}/users/me",
        json={"current_password": "errada", "new_password": "novasenha"},
        headers=auth_headers_user,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

async def test_update_me_password_change(test_client: AsyncClient, auth_headers_user: dict):
    response = await test_client.put(
        f"{API_PREFIX}/users/me",
        json={"current_password": "testpassword", "new_password": "novasenha"},
        headers=auth_headers_user,
    )
    assert response.status_code == status.HTTP_200_OK

    response = await test_client.post(
        f"{API_PREFIX}/auth/token", data={"username": "eletricista@example.com", "password": "novasenha"}
    )
    assert response.status_code == status.HTTP_200_OK
    response = await test_client.post(
        f"{API_PREFIX}/auth/token", data={"username": "eletricista@example.com", "password": "testpassword"}
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

async def test_update_me_requires_auth(test_client: AsyncClient):
    response = await test_client.put(f"{API_PREFIX}/users/me", json={"name": "Anônimo"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

async def test_check_email_availability(test_client: AsyncClient, test_user_id: int):
    response = await test_client.post(f"{API_PREFIX}/users/check-email", json={"email": "eletricista@example.com"})
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"email": "eletricista@example.com", "available": False}

    response = await test_client.post(f"{API_PREFIX}/users/check-email", json={"email": "livre@example.com"})
    assert response.json()["available"] is True

    response = await test_client.post(f"{API_PREFIX}/users/check-email", json={"email": "pas-un-email"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
