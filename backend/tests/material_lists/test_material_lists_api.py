"""
Tests d'intégration pour les endpoints des listes de matériel.
"""
from decimal import Decimal

import pytest
from httpx import AsyncClient
from fastapi import status

from eletrica.config import settings

API_PREFIX = settings.API_V1_PREFIX

pytestmark = pytest.mark.asyncio


def money(value) -> Decimal:
    return Decimal(str(value))

async def _create_material(test_client: AsyncClient, headers: dict, name: str, price: str) -> int:
    response = await test_client.post(
        f"{API_PREFIX}/materials/", json={"name": name, "price": price, "unit": "UNIT"}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()["id"]

async def _create_service(test_client: AsyncClient, headers: dict, name: str, price: str) -> int:
    response = await test_client.post(
        f"{API_PREFIX}/services/", json={"name": name, "price": price}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()["id"]

async def _create_list(test_client: AsyncClient, headers: dict, client_id: int, name: str = "Materiais obra") -> dict:
    response = await test_client.post(
        f"{API_PREFIX}/material-lists/", json={"name": name, "client_id": client_id}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()

# --- Dérivation depuis un orçamento ---

async def test_derive_copies_only_material_items(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    budget_id = budget_record["id"]
    items_url = f"{API_PREFIX}/budgets/{budget_id}/items"
    for name, price in (("Instalação chuveiro", "120.00"), ("Troca de quadro", "300.00")):
        service_id = await _create_service(test_client, auth_headers_user, name, price)
        await test_client.post(items_url, json={"service_id": service_id, "quantity": "1"}, headers=auth_headers_user)
    for name, price, quantity in (("Disjuntor 20A", "25.00", "2"), ("Cabo 4mm", "5.00", "10"), ("Caixa 4x2", "2.50", "4")):
        material_id = await _create_material(test_client, auth_headers_user, name, price)
        await test_client.post(items_url, json={"material_id": material_id, "quantity": quantity}, headers=auth_headers_user)

    response = await test_client.post(f"{API_PREFIX}/material-lists/from-budget/{budget_id}", headers=auth_headers_user)
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["budget_id"] == budget_id
    assert data["client_id"] == budget_record["client_id"]
    assert data["status"] == "PENDING"
    assert data["name"] == "Lista de Materiais - Reforma elétrica"
    assert data["notes"] == "Criada a partir do orçamento: Reforma elétrica"
    assert [i["name"] for i in data["items"]] == ["Disjuntor 20A", "Cabo 4mm", "Caixa 4x2"]
    assert all(i["material_id"] is not None for i in data["items"])
    assert money(data["subtotal"]) == Decimal("110")
    assert money(data["total_value"]) == money(data["subtotal"])

async def test_derive_with_custom_name(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    response = await test_client.post(
        f"{API_PREFIX}/material-lists/from-budget/{budget_record['id']}",
        json={"name": "Compra loja"},
        headers=auth_headers_user,
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["name"] == "Compra loja"
    assert data["items"] == []
    assert money(data["total_value"]) == 0

async def test_derive_from_foreign_budget(
    test_client: AsyncClient, auth_headers_user_2: dict, budget_record: dict
):
    response = await test_client.post(
        f"{API_PREFIX}/material-lists/from-budget/{budget_record['id']}", headers=auth_headers_user_2
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND

async def test_deleting_budget_keeps_derived_list(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    derived = (await test_client.post(
        f"{API_PREFIX}/material-lists/from-budget/{budget_record['id']}", headers=auth_headers_user
    )).json()

    response = await test_client.delete(f"{API_PREFIX}/budgets/{budget_record['id']}", headers=auth_headers_user)
    assert response.status_code == status.HTTP_204_NO_CONTENT

    response = await test_client.get(f"{API_PREFIX}/material-lists/{derived['id']}", headers=auth_headers_user)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["budget_id"] is None

# --- Items et totaux ---

async def test_items_update_list_totals(
    test_client: AsyncClient, auth_headers_user: dict, client_record: dict, material_record: dict
):
    material_list = await _create_list(test_client, auth_headers_user, client_record["id"])
    list_id = material_list["id"]

    response = await test_client.post(
        f"{API_PREFIX}/material-lists/{list_id}/items",
        json={"material_id": material_record["id"], "quantity": "20"},
        headers=auth_headers_user,
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert money(data["subtotal"]) == Decimal("70")
    item_id = data["items"][0]["id"]

    response = await test_client.patch(
        f"{API_PREFIX}/material-lists/{list_id}/items/{item_id}", json={"unit_price": "4.00"}, headers=auth_headers_user
    )
    data = response.json()
    assert money(data["items"][0]["total_price"]) == Decimal("80")
    assert money(data["total_value"]) == Decimal("80")

    response = await test_client.delete(f"{API_PREFIX}/material-lists/{list_id}/items/{item_id}", headers=auth_headers_user)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["items"] == []
    assert money(data["total_value"]) == 0

    response = await test_client.get(f"{API_PREFIX}/material-lists/{list_id}", headers=auth_headers_user)
    assert response.json()["items"] == []

async def test_remove_item_from_derived_list(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    budget_id = budget_record["id"]
    for name, price, quantity in (("Disjuntor 20A", "25.00", "2"), ("Cabo 4mm", "5.00", "10")):
        material_id = await _create_material(test_client, auth_headers_user, name, price)
        await test_client.post(
            f"{API_PREFIX}/budgets/{budget_id}/items",
            json={"material_id": material_id, "quantity": quantity},
            headers=auth_headers_user,
        )
    derived = (await test_client.post(
        f"{API_PREFIX}/material-lists/from-budget/{budget_id}", headers=auth_headers_user
    )).json()
    assert money(derived["subtotal"]) == Decimal("100")

    response = await test_client.delete(
        f"{API_PREFIX}/material-lists/{derived['id']}/items/{derived['items'][0]['id']}", headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [i["name"] for i in data["items"]] == ["Cabo 4mm"]
    assert money(data["subtotal"]) == Decimal("50")
    assert money(data["total_value"]) == Decimal("50")

    # L'orçamento source garde ses deux items
    budget = (await test_client.get(f"{API_PREFIX}/budgets/{budget_id}", headers=auth_headers_user)).json()
    assert len(budget["items"]) == 2

async def test_approved_list_is_read_only(
    test_client: AsyncClient, auth_headers_user: dict, client_record: dict
):
    list_id = (await _create_list(test_client, auth_headers_user, client_record["id"]))["id"]
    await test_client.patch(
        f"{API_PREFIX}/material-lists/{list_id}/status", json={"status": "APPROVED"}, headers=auth_headers_user
    )

    response = await test_client.post(
        f"{API_PREFIX}/material-lists/{list_id}/items",
        json={"name": "Fita isolante", "quantity": "1", "unit_price": "8"},
        headers=auth_headers_user,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

async def test_duplicate_material_list(
    test_client: AsyncClient, auth_headers_user: dict, client_record: dict
):
    list_id = (await _create_list(test_client, auth_headers_user, client_record["id"]))["id"]
    await test_client.post(
        f"{API_PREFIX}/material-lists/{list_id}/items",
        json={"name": "Fita isolante", "quantity": "2", "unit_price": "8"},
        headers=auth_headers_user,
    )

    response = await test_client.post(
        f"{API_PREFIX}/material-lists/{list_id}/duplicate", json={"name": "Materiais obra 2"}, headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_201_CREATED
    copy = response.json()
    assert copy["id"] != list_id
    assert copy["name"] == "Materiais obra 2"
    assert money(copy["total_value"]) == Decimal("16")
    assert copy["items"][0]["name"] == "Fita isolante"

async def test_list_filters_by_budget(
    test_client: AsyncClient, auth_headers_user: dict, client_record: dict, budget_record: dict
):
    await _create_list(test_client, auth_headers_user, client_record["id"])
    await test_client.post(f"{API_PREFIX}/material-lists/from-budget/{budget_record['id']}", headers=auth_headers_user)

    response = await test_client.get(f"{API_PREFIX}/material-lists/", headers=auth_headers_user)
    assert response.json()["total"] == 2

    response = await test_client.get(
        f"{API_PREFIX}/material-lists/", params={"budget_id": budget_record["id"]}, headers=auth_headers_user
    )
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["budget_id"] == budget_record["id"]

async def test_material_list_summary(
    test_client: AsyncClient, auth_headers_user: dict, client_record: dict
):
    await _create_list(test_client, auth_headers_user, client_record["id"])
    response = await test_client.get(f"{API_PREFIX}/material-lists/summary", headers=auth_headers_user)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["by_status"]["PENDING"] == 1
