"""
Tests d'intégration pour les endpoints des orçamentos.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from httpx import AsyncClient
from fastapi import status

from eletrica.config import settings

API_PREFIX = settings.API_V1_PREFIX

pytestmark = pytest.mark.asyncio


def money(value) -> Decimal:
    return Decimal(str(value))

async def _add_item(test_client: AsyncClient, headers: dict, budget_id: int, **payload):
    return await test_client.post(f"{API_PREFIX}/budgets/{budget_id}/items", json=payload, headers=headers)

# --- Création et lecture ---

async def test_create_budget_starts_pending_with_zero_totals(
    test_client: AsyncClient, auth_headers_user: dict, client_record: dict
):
    response = await test_client.post(
        f"{API_PREFIX}/budgets/",
        json={"name": "Quadro de distribuição", "client_id": client_record["id"], "valid_until": "2030-12-31"},
        headers=auth_headers_user,
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["status"] == "PENDING"
    assert money(data["subtotal"]) == 0
    assert money(data["total_value"]) == 0
    assert data["items"] == []
    assert data["valid_until"] == "2030-12-31"
    assert len(data["access_link"]) >= 32

async def test_create_budget_for_unknown_client(test_client: AsyncClient, auth_headers_user: dict):
    response = await test_client.post(
        f"{API_PREFIX}/budgets/", json={"name": "Sem cliente", "client_id": 999}, headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND

async def test_create_budget_requires_auth(test_client: AsyncClient, client_record: dict):
    response = await test_client.post(
        f"{API_PREFIX}/budgets/", json={"name": "Anônimo", "client_id": client_record["id"]}
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.headers.get("www-authenticate") == "Bearer"

async def test_create_budget_rejects_negative_discount(
    test_client: AsyncClient, auth_headers_user: dict, client_record: dict
):
    response = await test_client.post(
        f"{API_PREFIX}/budgets/",
        json={"name": "Remise", "client_id": client_record["id"], "discount": "-5", "discount_type": "FIXED"},
        headers=auth_headers_user,
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

async def test_budget_of_other_user_is_not_found(
    test_client: AsyncClient, auth_headers_user_2: dict, budget_record: dict
):
    response = await test_client.get(f"{API_PREFIX}/budgets/{budget_record['id']}", headers=auth_headers_user_2)
    assert response.status_code == status.HTTP_404_NOT_FOUND

# --- Recalcul des totaux ---

async def test_totals_follow_items_and_discount(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    budget_id = budget_record["id"]

    response = await _add_item(test_client, auth_headers_user, budget_id, name="Tomada", quantity="3", unit_price="10")
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert money(data["subtotal"]) == Decimal("30")
    assert money(data["total_value"]) == Decimal("30")

    response = await test_client.post(
        f"{API_PREFIX}/budgets/{budget_id}/discount",
        json={"discount": "10", "discount_type": "PERCENTAGE", "discount_reason": "Cliente fiel"},
        headers=auth_headers_user,
    )
    assert response.status_code == status.HTTP_200_OK
    assert money(response.json()["total_value"]) == Decimal("27")

    response = await _add_item(test_client, auth_headers_user, budget_id, name="Interruptor", quantity="1", unit_price="20")
    data = response.json()
    assert money(data["subtotal"]) == Decimal("50")
    assert money(data["total_value"]) == Decimal("45")
    assert len(data["items"]) == 2

    response = await test_client.delete(f"{API_PREFIX}/budgets/{budget_id}/discount", headers=auth_headers_user)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert money(data["total_value"]) == Decimal("50")
    assert data["discount"] is None
    assert data["discount_type"] is None

async def test_fixed_discount_larger_than_subtotal_gives_zero(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    budget_id = budget_record["id"]
    await _add_item(test_client, auth_headers_user, budget_id, name="Tomada", quantity="1", unit_price="20")
    response = await test_client.post(
        f"{API_PREFIX}/budgets/{budget_id}/discount",
        json={"discount": "50", "discount_type": "FIXED"},
        headers=auth_headers_user,
    )
    assert money(response.json()["total_value"]) == 0

async def test_update_item_recomputes_line_and_budget(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    budget_id = budget_record["id"]
    data = (await _add_item(test_client, auth_headers_user, budget_id, name="Tomada", quantity="3", unit_price="10")).json()
    item_id = data["items"][0]["id"]

    response = await test_client.patch(
        f"{API_PREFIX}/budgets/{budget_id}/items/{item_id}", json={"quantity": "5"}, headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    item = data["items"][0]
    assert money(item["unit_price"]) == Decimal("10")
    assert money(item["total_price"]) == Decimal("50")
    assert money(data["subtotal"]) == Decimal("50")

async def test_remove_item_recomputes_budget(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    budget_id = budget_record["id"]
    data = (await _add_item(test_client, auth_headers_user, budget_id, name="Tomada", quantity="3", unit_price="10")).json()
    first_item_id = data["items"][0]["id"]
    await test_client.post(
        f"{API_PREFIX}/budgets/{budget_id}/discount",
        json={"discount": "10", "discount_type": "PERCENTAGE"},
        headers=auth_headers_user,
    )
    data = (await _add_item(test_client, auth_headers_user, budget_id, name="Interruptor", quantity="1", unit_price="20")).json()
    assert money(data["total_value"]) == Decimal("45")

    response = await test_client.delete(
        f"{API_PREFIX}/budgets/{budget_id}/items/{first_item_id}", headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [i["name"] for i in data["items"]] == ["Interruptor"]
    assert money(data["subtotal"]) == Decimal("20")
    assert money(data["total_value"]) == Decimal("18")

    # La suppression est bien validée en base
    response = await test_client.get(f"{API_PREFIX}/budgets/{budget_id}", headers=auth_headers_user)
    data = response.json()
    assert len(data["items"]) == 1
    assert money(data["subtotal"]) == sum(money(i["total_price"]) for i in data["items"])
    assert money(data["total_value"]) == Decimal("18")

    response = await test_client.delete(
        f"{API_PREFIX}/budgets/{budget_id}/items/{first_item_id}", headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND

async def test_remove_last_item_leaves_zero_totals(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    budget_id = budget_record["id"]
    data = (await _add_item(test_client, auth_headers_user, budget_id, name="Spot", quantity="2", unit_price="15")).json()
    item_id = data["items"][0]["id"]

    response = await test_client.delete(f"{API_PREFIX}/budgets/{budget_id}/items/{item_id}", headers=auth_headers_user)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["items"] == []
    assert money(data["subtotal"]) == 0
    assert money(data["total_value"]) == 0

async def test_fixed_discount_matches_equivalent_percentage(
    test_client: AsyncClient, auth_headers_user: dict, client_record: dict, budget_record: dict
):
    other = await test_client.post(
        f"{API_PREFIX}/budgets/", json={"name": "Comparação", "client_id": client_record["id"]}, headers=auth_headers_user
    )
    totals = {}
    for budget_id, discount, discount_type in (
        (budget_record["id"], "12.50", "FIXED"),
        (other.json()["id"], "25", "PERCENTAGE"),
    ):
        await _add_item(test_client, auth_headers_user, budget_id, name="Tomada", quantity="5", unit_price="10")
        response = await test_client.post(
            f"{API_PREFIX}/budgets/{budget_id}/discount",
            json={"discount": discount, "discount_type": discount_type},
            headers=auth_headers_user,
        )
        assert response.status_code == status.HTTP_200_OK
        totals[discount_type] = money(response.json()["total_value"])

    # 12.50 sur un sous-total de 50 correspond à 25 %
    assert totals["FIXED"] == totals["PERCENTAGE"] == Decimal("37.5")

async def test_item_of_another_budget_is_not_found(
    test_client: AsyncClient, auth_headers_user: dict, client_record: dict, budget_record: dict
):
    other = await test_client.post(
        f"{API_PREFIX}/budgets/", json={"name": "Outro", "client_id": client_record["id"]}, headers=auth_headers_user
    )
    other_id = other.json()["id"]
    data = (await _add_item(test_client, auth_headers_user, other_id, name="Tomada", quantity="1", unit_price="10")).json()
    foreign_item_id = data["items"][0]["id"]

    response = await test_client.patch(
        f"{API_PREFIX}/budgets/{budget_record['id']}/items/{foreign_item_id}",
        json={"quantity": "2"},
        headers=auth_headers_user,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND

# --- Catalogue ---

async def test_add_item_from_catalog_snapshots_values(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict, service_record: dict
):
    budget_id = budget_record["id"]
    response = await _add_item(test_client, auth_headers_user, budget_id, service_id=service_record["id"], quantity="2")
    assert response.status_code == status.HTTP_201_CREATED
    item = response.json()["items"][0]
    assert item["name"] == service_record["name"]
    assert money(item["unit_price"]) == Decimal("50")
    assert money(item["total_price"]) == Decimal("100")
    assert item["service_id"] == service_record["id"]

    # Une modification du catalogue ne change pas l'item existant
    await test_client.put(
        f"{API_PREFIX}/services/{service_record['id']}", json={"price": "80.00"}, headers=auth_headers_user
    )
    response = await test_client.get(f"{API_PREFIX}/budgets/{budget_id}", headers=auth_headers_user)
    assert money(response.json()["items"][0]["unit_price"]) == Decimal("50")

async def test_add_item_catalog_override_wins(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict, material_record: dict
):
    response = await _add_item(
        test_client, auth_headers_user, budget_record["id"],
        material_id=material_record["id"], quantity="10", unit_price="3.00",
    )
    item = response.json()["items"][0]
    assert money(item["unit_price"]) == Decimal("3")
    assert item["unit"] == "METER"
    assert money(item["total_price"]) == Decimal("30")

async def test_add_item_unknown_catalog_entry(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    response = await _add_item(test_client, auth_headers_user, budget_record["id"], service_id=4242, quantity="1")
    assert response.status_code == status.HTTP_404_NOT_FOUND

async def test_add_item_without_name_or_price(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    response = await _add_item(test_client, auth_headers_user, budget_record["id"], quantity="1", unit_price="10")
    assert response.status_code == status.HTTP_400_BAD_REQUEST

async def test_add_item_rejects_non_positive_quantity(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    response = await _add_item(test_client, auth_headers_user, budget_record["id"], name="Tomada", quantity="0", unit_price="10")
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

# --- Statut ---

async def test_non_pending_budget_is_read_only(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    budget_id = budget_record["id"]
    response = await test_client.patch(
        f"{API_PREFIX}/budgets/{budget_id}/status", json={"status": "APPROVED"}, headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_200_OK

    response = await _add_item(test_client, auth_headers_user, budget_id, name="Tomada", quantity="1", unit_price="10")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "PENDING" in response.json()["detail"]

    response = await test_client.post(
        f"{API_PREFIX}/budgets/{budget_id}/discount",
        json={"discount": "5", "discount_type": "FIXED"},
        headers=auth_headers_user,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = await test_client.put(
        f"{API_PREFIX}/budgets/{budget_id}", json={"name": "Novo nome"}, headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    # Le statut reste modifiable: retour à PENDING puis édition possible
    response = await test_client.patch(
        f"{API_PREFIX}/budgets/{budget_id}/status", json={"status": "PENDING"}, headers=auth_headers_user
    )
    assert response.json()["approved_at"] is None
    response = await test_client.put(
        f"{API_PREFIX}/budgets/{budget_id}", json={"name": "Novo nome"}, headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["name"] == "Novo nome"

async def test_status_timestamps_are_exclusive(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    budget_id = budget_record["id"]
    data = (await test_client.patch(
        f"{API_PREFIX}/budgets/{budget_id}/status", json={"status": "APPROVED"}, headers=auth_headers_user
    )).json()
    assert data["approved_at"] is not None
    assert data["rejected_at"] is None

    data = (await test_client.patch(
        f"{API_PREFIX}/budgets/{budget_id}/status",
        json={"status": "REJECTED", "rejection_reason": "Orçamento acima do esperado"},
        headers=auth_headers_user,
    )).json()
    assert data["status"] == "REJECTED"
    assert data["approved_at"] is None
    assert data["rejected_at"] is not None
    assert data["rejection_reason"] == "Orçamento acima do esperado"

async def test_invalid_status_is_rejected(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    response = await test_client.patch(
        f"{API_PREFIX}/budgets/{budget_record['id']}/status", json={"status": "DONE"}, headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

# --- Duplication ---

async def test_duplicate_budget_is_independent(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    budget_id = budget_record["id"]
    await _add_item(test_client, auth_headers_user, budget_id, name="Tomada", quantity="3", unit_price="10")
    await test_client.post(
        f"{API_PREFIX}/budgets/{budget_id}/discount",
        json={"discount": "10", "discount_type": "PERCENTAGE"},
        headers=auth_headers_user,
    )
    await test_client.patch(f"{API_PREFIX}/budgets/{budget_id}/status", json={"status": "APPROVED"}, headers=auth_headers_user)

    response = await test_client.post(
        f"{API_PREFIX}/budgets/{budget_id}/duplicate", json={"name": "Reforma elétrica (cópia)"}, headers=auth_headers_user
    )
    assert response.status_code == status.HTTP_201_CREATED
    copy = response.json()
    assert copy["id"] != budget_id
    assert copy["name"] == "Reforma elétrica (cópia)"
    assert copy["status"] == "PENDING"
    assert copy["approved_at"] is None
    assert copy["access_link"] != budget_record["access_link"]
    assert copy["notes"] == budget_record["notes"]
    assert money(copy["subtotal"]) == Decimal("30")
    assert money(copy["total_value"]) == Decimal("27")
    assert len(copy["items"]) == 1

    # Modifier la copie ne touche pas l'original
    copy_item_id = copy["items"][0]["id"]
    await test_client.patch(
        f"{API_PREFIX}/budgets/{copy['id']}/items/{copy_item_id}", json={"quantity": "10"}, headers=auth_headers_user
    )
    original = (await test_client.get(f"{API_PREFIX}/budgets/{budget_id}", headers=auth_headers_user)).json()
    assert original["status"] == "APPROVED"
    assert money(original["items"][0]["quantity"]) == Decimal("3")
    assert money(original["subtotal"]) == Decimal("30")

# --- Listage, synthèse et suppression ---

async def test_list_budgets_with_filters(
    test_client: AsyncClient, auth_headers_user: dict, client_record: dict, budget_record: dict
):
    await test_client.post(
        f"{API_PREFIX}/budgets/", json={"name": "Iluminação jardim", "client_id": client_record["id"]}, headers=auth_headers_user
    )
    await test_client.patch(
        f"{API_PREFIX}/budgets/{budget_record['id']}/status", json={"status": "APPROVED"}, headers=auth_headers_user
    )

    response = await test_client.get(f"{API_PREFIX}/budgets/", headers=auth_headers_user)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["total"] == 2
    assert response.headers["content-range"] == "budgets 0-1/2"

    response = await test_client.get(f"{API_PREFIX}/budgets/", params={"status": "APPROVED"}, headers=auth_headers_user)
    assert [b["id"] for b in response.json()["items"]] == [budget_record["id"]]

    response = await test_client.get(f"{API_PREFIX}/budgets/", params={"search": "jardim"}, headers=auth_headers_user)
    assert [b["name"] for b in response.json()["items"]] == ["Iluminação jardim"]

    response = await test_client.get(f"{API_PREFIX}/budgets/", params={"search": "Maria"}, headers=auth_headers_user)
    assert response.json()["total"] == 2

async def test_list_budgets_by_creation_date(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    now = datetime.now(timezone(timedelta(hours=-3)))
    url = f"{API_PREFIX}/budgets/"

    response = await test_client.get(
        url,
        params={"date_from": (now - timedelta(days=1)).isoformat(), "date_to": (now + timedelta(days=1)).isoformat()},
        headers=auth_headers_user,
    )
    assert response.status_code == status.HTTP_200_OK
    assert [b["id"] for b in response.json()["items"]] == [budget_record["id"]]

    response = await test_client.get(
        url, params={"date_to": (now - timedelta(days=1)).isoformat()}, headers=auth_headers_user
    )
    assert response.json()["total"] == 0

    # Date sans fuseau: interprétée comme UTC
    response = await test_client.get(
        url, params={"date_from": (datetime.now(timezone.utc) + timedelta(hours=1)).replace(tzinfo=None).isoformat()},
        headers=auth_headers_user,
    )
    assert response.json()["total"] == 0

async def test_budget_summary(
    test_client: AsyncClient, auth_headers_user: dict, client_record: dict, budget_record: dict
):
    await _add_item(test_client, auth_headers_user, budget_record["id"], name="Tomada", quantity="3", unit_price="10")
    await test_client.patch(
        f"{API_PREFIX}/budgets/{budget_record['id']}/status", json={"status": "APPROVED"}, headers=auth_headers_user
    )
    await test_client.post(
        f"{API_PREFIX}/budgets/", json={"name": "Pendente", "client_id": client_record["id"]}, headers=auth_headers_user
    )

    response = await test_client.get(f"{API_PREFIX}/budgets/summary", headers=auth_headers_user)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["total"] == 2
    assert data["by_status"] == {"PENDING": 1, "APPROVED": 1, "REJECTED": 0, "EXPIRED": 0}
    assert money(data["approved_value"]) == Decimal("30")

async def test_delete_budget(
    test_client: AsyncClient, auth_headers_user: dict, budget_record: dict
):
    budget_id = budget_record["id"]
    await _add_item(test_client, auth_headers_user, budget_id, name="Tomada", quantity="1", unit_price="10")

    response = await test_client.delete(f"{API_PREFIX}/budgets/{budget_id}", headers=auth_headers_user)
    assert response.status_code == status.HTTP_204_NO_CONTENT

    response = await test_client.get(f"{API_PREFIX}/budgets/{budget_id}", headers=auth_headers_user)
    assert response.status_code == status.HTTP_404_NOT_FOUND
