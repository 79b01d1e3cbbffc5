"""
Routes API des orçamentos (devis) du professionnel authentifié.
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, status, Query, Path, Response

from eletrica.auth.dependencies import CurrentUserDep
from eletrica.budgets.dependencies import BudgetServiceDep
from eletrica.budgets.models import (
    BudgetCreate,
    BudgetFilters,
    BudgetItemCreate,
    BudgetItemUpdate,
    BudgetRead,
    BudgetUpdate,
    PaginatedBudgetRead,
)
from eletrica.config import settings
from eletrica.quotes.constants import QuoteStatus
from eletrica.quotes.errors import QUOTE_DOMAIN_ERRORS, to_http_exception
from eletrica.quotes.models import DiscountApply, DuplicateRequest, QuoteSummary, StatusUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


def _internal_error(action: str, error: Exception) -> HTTPException:
    logger.error(f"Erreur API {action}: {error}", exc_info=True)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Erreur interne {action}.")


@router.post("/", response_model=BudgetRead, status_code=status.HTTP_201_CREATED)
async def create_budget(
    budget_service: BudgetServiceDep,
    current_user: CurrentUserDep,
    budget_in: BudgetCreate,
):
    """Crée un orçamento PENDING, sans items, pour un client du professionnel."""
    logger.info(f"API create_budget pour user ID: {current_user.id}, client ID: {budget_in.client_id}")
    try:
        return await budget_service.create_budget(current_user.id, budget_in)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error("création orçamento", e)


@router.get("/", response_model=PaginatedBudgetRead)
async def list_budgets(
    budget_service: BudgetServiceDep,
    current_user: CurrentUserDep,
    response: Response,
    client_id: Optional[int] = Query(None, ge=1),
    status_filter: Optional[QuoteStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, description="Recherche par nom, notes ou nom du client"),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
):
    filters = BudgetFilters(
        client_id=client_id, status=status_filter, search=search, date_from=date_from, date_to=date_to
    )
    result = await budget_service.list_budgets(current_user.id, filters, limit=limit, offset=offset)
    end_range = offset + len(result.items) - 1 if result.items else offset
    response.headers["Content-Range"] = f"budgets {offset}-{end_range}/{result.total}"
    return result


@router.get("/summary", response_model=QuoteSummary)
async def read_budget_summary(budget_service: BudgetServiceDep, current_user: CurrentUserDep):
    """Nombre d'orçamentos par statut et valeurs approuvées / en attente."""
    return await budget_service.get_summary(current_user.id)


@router.get("/{budget_id}", response_model=BudgetRead)
async def read_budget(
    budget_service: BudgetServiceDep,
    current_user: CurrentUserDep,
    budget_id: int = Path(..., ge=1),
):
    try:
        return await budget_service.get_budget(budget_id, current_user.id)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)


@router.put("/{budget_id}", response_model=BudgetRead)
async def update_budget(
    budget_service: BudgetServiceDep,
    current_user: CurrentUserDep,
    budget_in: BudgetUpdate,
    budget_id: int = Path(..., ge=1),
):
    try:
        return await budget_service.update_budget(budget_id, current_user.id, budget_in)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"MAJ orçamento {budget_id}", e)


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_budget(
    budget_service: BudgetServiceDep,
    current_user: CurrentUserDep,
    budget_id: int = Path(..., ge=1),
):
    logger.info(f"API delete_budget: ID={budget_id} par user {current_user.id}")
    try:
        await budget_service.delete_budget(budget_id, current_user.id)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"suppression orçamento {budget_id}", e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Items ---

@router.post("/{budget_id}/items", response_model=BudgetRead, status_code=status.HTTP_201_CREATED)
async def add_budget_item(
    budget_service: BudgetServiceDep,
    current_user: CurrentUserDep,
    item_in: BudgetItemCreate,
    budget_id: int = Path(..., ge=1),
):
    """Ajoute un item (libre ou copié du catalogue) et renvoie l'orçamento recalculé."""
    try:
        return await budget_service.add_item(budget_id, current_user.id, item_in)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"ajout item orçamento {budget_id}", e)


@router.patch("/{budget_id}/items/{item_id}", response_model=BudgetRead)
async def update_budget_item(
    budget_service: BudgetServiceDep,
    current_user: CurrentUserDep,
    item_in: BudgetItemUpdate,
    budget_id: int = Path(..., ge=1),
    item_id: int = Path(..., ge=1),
):
    try:
        return await budget_service.update_item(budget_id, item_id, current_user.id, item_in)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"MAJ item {item_id}", e)


@router.delete("/{budget_id}/items/{item_id}", response_model=BudgetRead)
async def remove_budget_item(
    budget_service: BudgetServiceDep,
    current_user: CurrentUserDep,
    budget_id: int = Path(..., ge=1),
    item_id: int = Path(..., ge=1),
):
    try:
        return await budget_service.remove_item(budget_id, item_id, current_user.id)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"suppression item {item_id}", e)


# --- Remise ---

@router.post("/{budget_id}/discount", response_model=BudgetRead)
async def apply_budget_discount(
    budget_service: BudgetServiceDep,
    current_user: CurrentUserDep,
    discount_in: DiscountApply,
    budget_id: int = Path(..., ge=1),
):
    try:
        return await budget_service.apply_discount(budget_id, current_user.id, discount_in)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"remise orçamento {budget_id}", e)


@router.delete("/{budget_id}/discount", response_model=BudgetRead)
async def remove_budget_discount(
    budget_service: BudgetServiceDep,
    current_user: CurrentUserDep,
    budget_id: int = Path(..., ge=1),
):
    try:
        return await budget_service.remove_discount(budget_id, current_user.id)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"retrait remise orçamento {budget_id}", e)


# --- Statut et duplication ---

@router.patch("/{budget_id}/status", response_model=BudgetRead)
async def update_budget_status(
    budget_service: BudgetServiceDep,
    current_user: CurrentUserDep,
    status_in: StatusUpdate,
    budget_id: int = Path(..., ge=1),
):
    try:
        return await budget_service.update_status(budget_id, current_user.id, status_in)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"statut orçamento {budget_id}", e)


@router.post("/{budget_id}/duplicate", response_model=BudgetRead, status_code=status.HTTP_201_CREATED)
async def duplicate_budget(
    budget_service: BudgetServiceDep,
    current_user: CurrentUserDep,
    duplicate_in: DuplicateRequest,
    budget_id: int = Path(..., ge=1),
):
    try:
        return await budget_service.duplicate_budget(budget_id, current_user.id, duplicate_in.name)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"duplication orçamento {budget_id}", e)


budget_router = router
