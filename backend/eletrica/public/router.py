"""
Routes publiques (sans authentification) destinées aux clients finaux.

L'accès est limité par le lien d'accès de chaque orçamento / liste de matériel,
ou par le lien public du client pour le portail.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, status, Path

from eletrica.budgets.dependencies import BudgetServiceDep
from eletrica.budgets.models import BudgetRead
from eletrica.clients.exceptions import ClientNotFoundException
from eletrica.clients.models import ClientPortalRead
from eletrica.material_lists.dependencies import MaterialListServiceDep
from eletrica.material_lists.models import MaterialListRead
from eletrica.public.dependencies import PublicPortalServiceDep
from eletrica.quotes.constants import QuoteStatus
from eletrica.quotes.errors import QUOTE_DOMAIN_ERRORS, to_http_exception
from eletrica.quotes.models import PublicRejection

logger = logging.getLogger(__name__)

router = APIRouter()


def _internal_error(action: str, error: Exception) -> HTTPException:
    logger.error(f"Erreur API publique {action}: {error}", exc_info=True)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Erreur interne {action}.")


# --- Portail client ---

@router.get("/clients/{link}", response_model=ClientPortalRead)
async def read_client_portal(portal_service: PublicPortalServiceDep, link: str = Path(..., min_length=1)):
    """Portail du client: orçamentos et listes PENDING ou APPROVED."""
    try:
        return await portal_service.get_client_portal(link)
    except ClientNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.get("/clients/{link}/budgets/{budget_id}", response_model=BudgetRead)
async def read_portal_budget(
    portal_service: PublicPortalServiceDep,
    link: str = Path(..., min_length=1),
    budget_id: int = Path(..., ge=1),
):
    try:
        return await portal_service.get_budget(link, budget_id)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)


@router.post("/clients/{link}/budgets/{budget_id}/approve", response_model=BudgetRead)
async def approve_portal_budget(
    portal_service: PublicPortalServiceDep,
    link: str = Path(..., min_length=1),
    budget_id: int = Path(..., ge=1),
):
    logger.info(f"Portail client: approbation orçamento {budget_id}")
    try:
        return await portal_service.decide_budget(link, budget_id, QuoteStatus.APPROVED)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"approbation orçamento {budget_id}", e)


@router.post("/clients/{link}/budgets/{budget_id}/reject", response_model=BudgetRead)
async def reject_portal_budget(
    portal_service: PublicPortalServiceDep,
    link: str = Path(..., min_length=1),
    budget_id: int = Path(..., ge=1),
    rejection_in: Optional[PublicRejection] = None,
):
    logger.info(f"Portail client: refus orçamento {budget_id}")
    reason = rejection_in.reason if rejection_in else None
    try:
        return await portal_service.decide_budget(link, budget_id, QuoteStatus.REJECTED, reason)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"refus orçamento {budget_id}", e)


@router.get("/clients/{link}/material-lists", response_model=List[MaterialListRead])
async def read_portal_material_lists(portal_service: PublicPortalServiceDep, link: str = Path(..., min_length=1)):
    """Listes PENDING ou APPROVED du client, avec leurs items."""
    try:
        return await portal_service.list_material_lists(link)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)


@router.get("/clients/{link}/material-lists/{material_list_id}", response_model=MaterialListRead)
async def read_portal_material_list(
    portal_service: PublicPortalServiceDep,
    link: str = Path(..., min_length=1),
    material_list_id: int = Path(..., ge=1),
):
    try:
        return await portal_service.get_material_list(link, material_list_id)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)


@router.post("/clients/{link}/material-lists/{material_list_id}/approve", response_model=MaterialListRead)
async def approve_portal_material_list(
    portal_service: PublicPortalServiceDep,
    link: str = Path(..., min_length=1),
    material_list_id: int = Path(..., ge=1),
):
    logger.info(f"Portail client: approbation liste {material_list_id}")
    try:
        return await portal_service.decide_material_list(link, material_list_id, QuoteStatus.APPROVED)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"approbation liste {material_list_id}", e)


@router.post("/clients/{link}/material-lists/{material_list_id}/reject", response_model=MaterialListRead)
async def reject_portal_material_list(
    portal_service: PublicPortalServiceDep,
    link: str = Path(..., min_length=1),
    material_list_id: int = Path(..., ge=1),
    rejection_in: Optional[PublicRejection] = None,
):
    logger.info(f"Portail client: refus liste {material_list_id}")
    reason = rejection_in.reason if rejection_in else None
    try:
        return await portal_service.decide_material_list(link, material_list_id, QuoteStatus.REJECTED, reason)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"refus liste {material_list_id}", e)


# --- Orçamentos ---

@router.get("/budgets/{access_link}", response_model=BudgetRead)
async def read_public_budget(budget_service: BudgetServiceDep, access_link: str = Path(..., min_length=1)):
    try:
        return await budget_service.get_public_budget(access_link)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)


@router.post("/budgets/{access_link}/{budget_id}/approve", response_model=BudgetRead)
async def approve_public_budget(
    budget_service: BudgetServiceDep,
    access_link: str = Path(..., min_length=1),
    budget_id: int = Path(..., ge=1),
):
    logger.info(f"API publique: approbation orçamento {budget_id}")
    try:
        return await budget_service.set_status_public(access_link, budget_id, QuoteStatus.APPROVED)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"approbation orçamento {budget_id}", e)


@router.post("/budgets/{access_link}/{budget_id}/reject", response_model=BudgetRead)
async def reject_public_budget(
    budget_service: BudgetServiceDep,
    access_link: str = Path(..., min_length=1),
    budget_id: int = Path(..., ge=1),
    rejection_in: Optional[PublicRejection] = None,
):
    logger.info(f"API publique: refus orçamento {budget_id}")
    reason = rejection_in.reason if rejection_in else None
    try:
        return await budget_service.set_status_public(access_link, budget_id, QuoteStatus.REJECTED, reason)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"refus orçamento {budget_id}", e)


# --- Listes de matériel ---

@router.get("/material-lists/{access_link}", response_model=MaterialListRead)
async def read_public_material_list(
    material_list_service: MaterialListServiceDep, access_link: str = Path(..., min_length=1)
):
    try:
        return await material_list_service.get_public_material_list(access_link)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)


@router.post("/material-lists/{access_link}/{material_list_id}/approve", response_model=MaterialListRead)
async def approve_public_material_list(
    material_list_service: MaterialListServiceDep,
    access_link: str = Path(..., min_length=1),
    material_list_id: int = Path(..., ge=1),
):
    logger.info(f"API publique: approbation liste {material_list_id}")
    try:
        return await material_list_service.set_status_public(access_link, material_list_id, QuoteStatus.APPROVED)
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"approbation liste {material_list_id}", e)


@router.post("/material-lists/{access_link}/{material_list_id}/reject", response_model=MaterialListRead)
async def reject_public_material_list(
    material_list_service: MaterialListServiceDep,
    access_link: str = Path(..., min_length=1),
    material_list_id: int = Path(..., ge=1),
    rejection_in: Optional[PublicRejection] = None,
):
    logger.info(f"API publique: refus liste {material_list_id}")
    reason = rejection_in.reason if rejection_in else None
    try:
        return await material_list_service.set_status_public(
            access_link, material_list_id, QuoteStatus.REJECTED, reason
        )
    except QUOTE_DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    except Exception as e:
        raise _internal_error(f"refus liste {material_list_id}", e)


public_router = router
