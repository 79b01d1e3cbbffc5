"""
Tests d'intégration pour les endpoints de l'API du module Client.
"""
import pytest
from httpx import AsyncClient
from fastapi import status

from eletrica.config import settings

API_PREFIX = settings.API_V1_PREFIX

pytestmark = pytest.mark.asyncio

# --- Création ---

async def test_create_client_generates_public_access(
    test_client: AsyncClient, auth_headers_user: dict, client_payload: dict
):
    response = await test_client.post(f"{API_PREFIX}/clients/", json=client_payload, headers=auth_headers_user)
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["full_name"] == client_payload["full_name"]
    assert data["state"] == "SP"
    assert data["is_active"] is True
    assert len(data["public_link"]) == 12
    assert data["public_link"].isalnum()
    assert len(data["access_code"]) == 6
    assert data["access_code"].isdigit()
    assert data["public_url"].endswith(f"/cliente/{data['public_link']}")

@pytest.mark.parametrize("field, value", [
    ("full_name", "M"),
    ("phone", "1234-5678"),
    ("cep", "0131"),
    ("street", "Av"),
    ("neighborhood", "B"),
    ("city", "S"),
    ("state", "SPX"),
    ("email", "pas-un-email"),
])
async def test_create_client_validation(
    test_client: AsyncClient, auth_headers_user: dict, client_payload: dict, field: str, value: str
):
    payload = {**client_payload, field: value}
    response = await test_client.post(f"{API_PREFIX}/clients/", json=payload, headers=auth_headers_user)
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

async def test_create_client_duplicate_cpf(
    test_client: AsyncClient, auth_headers_user: dict, client_payload: dict, client_record: dict
):
    payload = {**client_payload, "email": "outra@example.com"}
    response = await test_client.post(f"{API_PREFIX}/clients/", json=payload, headers=auth_headers_user)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "cpf_cnpj" in response.json()["detail"]

async def test_same_cpf_allowed_for_another_professional(
    test_client: AsyncClient, auth_headers_user_2: dict, client_payload: dict, client_record: dict
):
    response = await test_client.post(f"{API_PREFIX}/clients/", json=client_payload, headers=auth_headers_user_2)
    assert response.status_code == status.HTTP_201_CREATED

# --- Lecture et listage ---

async def test_client_is_scoped_by_owner(
    test_client: AsyncClient, auth_headers_user_2: dict, client_record: dict
):
    response = await test_client.get(f"{API_PREFIX}/clients/{client_record['id']}", headers=auth_headers_user_2)
    assert response.status_code == status.HTTP_404_NOT_FOUND

async def test_list_clients_search_and_active_filter(
    test_client: AsyncClient, auth_headers_user: dict, client_payload: dict, client_record: dict
):
    other = {**client_payload, "full_name": "João Souza", "email": "joao@example.com", "cpf_cnpj": None}
    created = (await test_client.post(f"{API_PREFIX}/clients/", json=other, headers=auth_headers_user)).json()
    await test_client.patch(f"{API_PREFIX}/clients/{created['id']}/deactivate", headers=auth_headers_user)

    response = await test_client.get(f"{API_PREFIX}/clients/", headers=auth_headers_user)
    assert response.json()["total"] == 2
    assert response.headers["content-range"] == "clients 0-1/2"

    response = await test_client.get(f"{API_PREFIX}/clients/", params={"search": "joão"}, headers=auth_headers_user)
    assert [c["id"] for c in response.json()["items"]] == [created["id"]]

    response = await test_client.get(f"{API_PREFIX}/clients/", params={"is_active": True}, headers=auth_headers_user)
    assert [c["id"] for c in response.json()["items"]] == [client_record["id"]]

async def test_client_stats(test_client: AsyncClient, auth_headers_user: dict, client_record: dict):
    await test_client.patch(f"{API_PREFIX}/clients/{client_record['id']}/deactivate", headers=auth_headers_user)
    response = await test_client.get(f"{API_PREFIX}/clients/stats", headers=auth_headers_user)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "total_clients": 1,
        "active_clients": 0,
        "inactive_clients": 1,
        "recent_clients": 1,
    }

# --- Mise à jour ---

async def test_update_client(test_client: AsyncClient, auth_headers_user: dict, client_record: dict):
    response = await test_client.put(
        f"{API_PREFIX}/clients/{client_record['id']}",
        json={"city": "Campinas", "requires_invoice": True},
        headers=auth_headers_user,
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["city"] == "Campinas"
    assert data["requires_invoice"] is True
    assert data["full_name"] == client_record["full_name"]

async def test_regenerate_link(test_client: AsyncClient, auth_headers_user: dict, client_record: dict):
    response = await test_client.post(
        f"{API_PREFIX}/clients/{client_record['id']}/regenerate-link", headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["public_link"] != client_record["public_link"]

# --- Suppression ---

async def test_delete_client_without_dependents(
    test_client: AsyncClient, auth_headers_user: dict, client_record: dict
):
    response = await test_client.delete(f"{API_PREFIX}/clients/{client_record['id']}", headers=auth_headers_user)
    assert response.status_code == status.HTTP_204_NO_CONTENT
    response = await test_client.get(f"{API_PREFIX}/clients/{client_record['id']}", headers=auth_headers_user)
    assert response.status_code == status.HTTP_404_NOT_FOUND

async def test_delete_client_with_budget_is_blocked(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    response = await test_client.delete(
        f"{API_PREFIX}/clients/{budget_record['client_id']}", headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
