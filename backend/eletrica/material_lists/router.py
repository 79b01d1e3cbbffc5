"""
Routes API des listes de matériel du professionnel authentifié.
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, status, Query, Path, Response

from eletrica.auth.dependencies import CurrentUserDep
from eletrica.config import settings
from eletrica.material_lists.dependencies import MaterialListServiceDep
from eletrica.material_lists.models import (
    DeriveMaterialListRequest,
    MaterialListCreate,
    MaterialListFilters,
    MaterialListItemCreate,
    MaterialListItemUpdate,
    MaterialListRead,
    MaterialListUpdate,
    PaginatedMaterialListRead,
)
from eletrica.quotes.constants import QuoteStatus
from eletrica.quotes.errors import QUOTE_DOMAIN_ERRORS, to_http_exception
from eletrica.quotes.models import DuplicateRequest, QuoteSummary, StatusUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


def _internal_error(action: str, error: Exception) -> HTTPException:
    logger.error(f"Erreur API {action}: {error}", exc_info=True)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Erreur interne {action}.")


@router.post("/", response_model=MaterialListRead, status_code=status.HTTP_201_CREATED)
async def create_material_list(
    material_list_service: MaterialListServiceDep,
    current_user: CurrentUserDep,
    list_in: MaterialListCreate,
):
    logger.info(f"API create_material_list pour user ID: {current_user.id}")
    try:
        return await material_list_service.create_material_list(current_user.id, list_in)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error("création liste", e)


@router.post("/from-budget/{budget_id}", response_model=MaterialListRead, status_code=status.HTTP_201_CREATED)
async def derive_material_list(
    material_list_service: MaterialListServiceDep,
    current_user: CurrentUserDep,
    budget_id: int = Path(..., ge=1),
    derive_in: Optional[DeriveMaterialListRequest] = None,
):
    """Crée une liste de matériel à partir des items matériel d'un orçamento."""
    name = derive_in.name if derive_in else None
    try:
        return await material_list_service.derive_from_budget(budget_id, current_user.id, name=name)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"dérivation orçamento {budget_id}", e)


@router.get("/", response_model=PaginatedMaterialListRead)
async def list_material_lists(
    material_list_service: MaterialListServiceDep,
    current_user: CurrentUserDep,
    response: Response,
    client_id: Optional[int] = Query(None, ge=1),
    budget_id: Optional[int] = Query(None, ge=1),
    status_filter: Optional[QuoteStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
):
    filters = MaterialListFilters(
        client_id=client_id,
        budget_id=budget_id,
        status=status_filter,
        search=search,
        date_from=date_from,
        date_to=date_to,
    )
    result = await material_list_service.list_material_lists(current_user.id, filters, limit=limit, offset=offset)
    end_range = offset + len(result.items) - 1 if result.items else offset
    response.headers["Content-Range"] = f"material-lists {offset}-{end_range}/{result.total}"
    return result


@router.get("/summary", response_model=QuoteSummary)
async def read_material_list_summary(material_list_service: MaterialListServiceDep, current_user: CurrentUserDep):
    return await material_list_service.get_summary(current_user.id)


@router.get("/{material_list_id}", response_model=MaterialListRead)
async def read_material_list(
    material_list_service: MaterialListServiceDep,
    current_user: CurrentUserDep,
    material_list_id: int = Path(..., ge=1),
):
    try:
        return await material_list_service.get_material_list(material_list_id, current_user.id)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)


@router.put("/{material_list_id}", response_model=MaterialListRead)
async def update_material_list(
    material_list_service: MaterialListServiceDep,
    current_user: CurrentUserDep,
    list_in: MaterialListUpdate,
    material_list_id: int = Path(..., ge=1),
):
    try:
        return await material_list_service.update_material_list(material_list_id, current_user.id, list_in)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"MAJ liste {material_list_id}", e)


@router.delete("/{material_list_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_material_list(
    material_list_service: MaterialListServiceDep,
    current_user: CurrentUserDep,
    material_list_id: int = Path(..., ge=1),
):
    try:
        await material_list_service.delete_material_list(material_list_id, current_user.id)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"suppression liste {material_list_id}", e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Items ---

@router.post("/{material_list_id}/items", response_model=MaterialListRead, status_code=status.HTTP_201_CREATED)
async def add_material_list_item(
    material_list_service: MaterialListServiceDep,
    current_user: CurrentUserDep,
    item_in: MaterialListItemCreate,
    material_list_id: int = Path(..., ge=1),
):
    try:
        return await material_list_service.add_item(material_list_id, current_user.id, item_in)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"ajout item liste {material_list_id}", e)


@router.patch("/{material_list_id}/items/{item_id}", response_model=MaterialListRead)
async def update_material_list_item(
    material_list_service: MaterialListServiceDep,
    current_user: CurrentUserDep,
    item_in: MaterialListItemUpdate,
    material_list_id: int = Path(..., ge=1),
    item_id: int = Path(..., ge=1),
):
    try:
        return await material_list_service.update_item(material_list_id, item_id, current_user.id, item_in)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"MAJ item {item_id}", e)


@router.delete("/{material_list_id}/items/{item_id}", response_model=MaterialListRead)
async def remove_material_list_item(
    material_list_service: MaterialListServiceDep,
    current_user: CurrentUserDep,
    material_list_id: int = Path(..., ge=1),
    item_id: int = Path(..., ge=1),
):
    try:
        return await material_list_service.remove_item(material_list_id, item_id, current_user.id)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"suppression item {item_id}", e)


# --- Statut et duplication ---

@router.patch("/{material_list_id}/status", response_model=MaterialListRead)
async def update_material_list_status(
    material_list_service: MaterialListServiceDep,
    current_user: CurrentUserDep,
    status_in: StatusUpdate,
    material_list_id: int = Path(..., ge=1),
):
    try:
        return await material_list_service.update_status(material_list_id, current_user.id, status_in)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"statut liste {material_list_id}", e)


@router.post("/{material_list_id}/duplicate", response_model=MaterialListRead, status_code=status.HTTP_201_CREATED)
async def duplicate_material_list(
    material_list_service: MaterialListServiceDep,
    current_user: CurrentUserDep,
    duplicate_in: DuplicateRequest,
    material_list_id: int = Path(..., ge=1),
):
    try:
        return await material_list_service.duplicate_material_list(material_list_id, current_user.id, duplicate_in.name)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"duplication liste {material_list_id}", e)


material_list_router = router
