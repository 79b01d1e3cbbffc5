"""
Routes API du catalogue.

Les services et les matériels exposent les mêmes endpoints; chaque routeur est
construit avec la dépendance qui fournit le CatalogService correspondant.
"""
import logging
from typing import Annotated, Callable, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query, Path, Response

from eletrica.auth.dependencies import CurrentUserDep
from eletrica.catalog.dependencies import get_material_catalog_service, get_service_catalog_service
from eletrica.catalog.exceptions import (
    CatalogEntryInUseException,
    CatalogEntryNotFoundException,
    DuplicateCatalogEntryException,
)
from eletrica.catalog.models import CatalogEntryCreate, CatalogEntryRead, CatalogEntryUpdate, PaginatedCatalogRead
from eletrica.catalog.service import CatalogService
from eletrica.config import settings

logger = logging.getLogger(__name__)


def build_catalog_router(service_provider: Callable[..., CatalogService], resource: str) -> APIRouter:
    router = APIRouter()
    CatalogServiceDep = Annotated[CatalogService, Depends(service_provider)]

    @router.post("/", response_model=CatalogEntryRead, status_code=status.HTTP_201_CREATED)
    async def create_entry(
        catalog_service: CatalogServiceDep,
        current_user: CurrentUserDep,
        entry_in: CatalogEntryCreate,
    ):
        logger.info(f"API create {resource} pour user ID: {current_user.id}")
        try:
            return await catalog_service.create_entry(current_user.id, entry_in)
        except DuplicateCatalogEntryException as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
        except Exception as e:
            logger.error(f"Erreur API create {resource} pour user {current_user.id}: {e}", exc_info=True)
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne création catalogue.")

    @router.get("/", response_model=PaginatedCatalogRead)
    async def list_entries(
        catalog_service: CatalogServiceDep,
        current_user: CurrentUserDep,
        response: Response,
        search: Optional[str] = Query(None),
        category: Optional[str] = Query(None),
        is_active: Optional[bool] = Query(None),
        limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
        offset: int = Query(0, ge=0),
    ):
        result = await catalog_service.list_entries(
            current_user.id, search=search, category=category, is_active=is_active, limit=limit, offset=offset
        )
        end_range = offset + len(result.items) - 1 if result.items else offset
        response.headers["Content-Range"] = f"{resource} {offset}-{end_range}/{result.total}"
        return result

    @router.get("/categories", response_model=List[str])
    async def list_categories(catalog_service: CatalogServiceDep, current_user: CurrentUserDep):
        return await catalog_service.list_categories(current_user.id)

    @router.get("/{entry_id}", response_model=CatalogEntryRead)
    async def read_entry(
        catalog_service: CatalogServiceDep,
        current_user: CurrentUserDep,
        entry_id: int = Path(..., ge=1),
    ):
        try:
            return await catalog_service.get_entry(entry_id, current_user.id)
        except CatalogEntryNotFoundException as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

    @router.put("/{entry_id}", response_model=CatalogEntryRead)
    async def update_entry(
        catalog_service: CatalogServiceDep,
        current_user: CurrentUserDep,
        entry_in: CatalogEntryUpdate,
        entry_id: int = Path(..., ge=1),
    ):
        try:
            return await catalog_service.update_entry(entry_id, current_user.id, entry_in)
        except CatalogEntryNotFoundException as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
        except DuplicateCatalogEntryException as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
        except Exception as e:
            logger.error(f"Erreur API update {resource} {entry_id}: {e}", exc_info=True)
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne MAJ catalogue.")

    @router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_entry(
        catalog_service: CatalogServiceDep,
        current_user: CurrentUserDep,
        entry_id: int = Path(..., ge=1),
    ):
        try:
            await catalog_service.delete_entry(entry_id, current_user.id)
        except CatalogEntryNotFoundException as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
        except CatalogEntryInUseException as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
        except Exception as e:
            logger.error(f"Erreur API delete {resource} {entry_id}: {e}", exc_info=True)
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erreur interne suppression catalogue.")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


service_router = build_catalog_router(get_service_catalog_service, "services")
material_router = build_catalog_router(get_material_catalog_service, "materials")
