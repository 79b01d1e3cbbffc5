import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, status, Query, Path, Response

from eletrica.auth.dependencies import CurrentUserDep
from eletrica.clients.dependencies import ClientServiceDep
from eletrica.clients.exceptions import (
    ClientHasDependentsException,
    ClientNotFoundException,
    DuplicateClientException,
)
from eletrica.clients.models import ClientCreate, ClientRead, ClientStats, ClientUpdate, PaginatedClientRead
from eletrica.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
async def create_client(
    client_service: ClientServiceDep,
    current_user: CurrentUserDep,
    client_in: ClientCreate,
):
    """Crée un nouveau client pour le professionnel authentifié."""
    logger.info(f"API create_client pour user ID: {current_user.id}")
    try:
        return await client_service.create_client(current_user.id, client_in)
    except DuplicateClientException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception as e:
        logger.error(f"Erreur API create_client pour user {current_user.id}: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne création client.")


@router.get("/", response_model=PaginatedClientRead)
async def list_clients(
    client_service: ClientServiceDep,
    current_user: CurrentUserDep,
    response: Response,
    search: Optional[str] = Query(None, description="Recherche par nom, email, téléphone ou CPF/CNPJ"),
    is_active: Optional[bool] = Query(None),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
):
    """Liste les clients du professionnel authentifié."""
    result = await client_service.list_clients(
        current_user.id, search=search, is_active=is_active, limit=limit, offset=offset
    )
    end_range = offset + len(result.items) - 1 if result.items else offset
    response.headers["Content-Range"] = f"clients {offset}-{end_range}/{result.total}"
    return result


@router.get("/stats", response_model=ClientStats)
async def read_client_stats(client_service: ClientServiceDep, current_user: CurrentUserDep):
    return await client_service.get_stats(current_user.id)


@router.get("/{client_id}", response_model=ClientRead)
async def read_client(
    client_service: ClientServiceDep,
    current_user: CurrentUserDep,
    client_id: int = Path(..., ge=1),
):
    try:
        return await client_service.get_client(client_id, current_user.id)
    except ClientNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.put("/{client_id}", response_model=ClientRead)
async def update_client(
    client_service: ClientServiceDep,
    current_user: CurrentUserDep,
    client_in: ClientUpdate,
    client_id: int = Path(..., ge=1),
):
    logger.info(f"API update_client: ID={client_id} par user {current_user.id}")
    try:
        return await client_service.update_client(client_id, current_user.id, client_in)
    except ClientNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except DuplicateClientException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception as e:
        logger.error(f"Erreur API update_client {client_id}: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne MAJ client.")


@router.patch("/{client_id}/activate", response_model=ClientRead)
async def activate_client(
    client_service: ClientServiceDep,
    current_user: CurrentUserDep,
    client_id: int = Path(..., ge=1),
):
    try:
        return await client_service.set_active(client_id, current_user.id, True)
    except ClientNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.patch("/{client_id}/deactivate", response_model=ClientRead)
async def deactivate_client(
    client_service: ClientServiceDep,
    current_user: CurrentUserDep,
    client_id: int = Path(..., ge=1),
):
    try:
        return await client_service.set_active(client_id, current_user.id, False)
    except ClientNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.post("/{client_id}/regenerate-link", response_model=ClientRead)
async def regenerate_client_link(
    client_service: ClientServiceDep,
    current_user: CurrentUserDep,
    client_id: int = Path(..., ge=1),
):
    """Génère un nouveau lien public et un nouveau code d'accès."""
    try:
        return await client_service.regenerate_public_link(client_id, current_user.id)
    except ClientNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_service: ClientServiceDep,
    current_user: CurrentUserDep,
    client_id: int = Path(..., ge=1),
):
    logger.info(f"API delete_client: ID={client_id} par user {current_user.id}")
    try:
        await client_service.delete_client(client_id, current_user.id)
    except ClientNotFoundException as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except ClientHasDependentsException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception as e:
        logger.error(f"Erreur API delete_client {client_id}: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne suppression client.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


client_router = router
