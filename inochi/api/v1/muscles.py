from fastapi import APIRouter, Depends
from typing import List

from inochi.core.dependencies import get_current_user, get_catalog_service
from inochi.core.rbac import require_admin
from inochi.schemas.auth import CurrentUser
from inochi.schemas.catalog import MuscleCreate, MuscleRead
from inochi.services.catalog_service import CatalogService

router = APIRouter(tags=["muscles"])


@router.get("", response_model=List[MuscleRead])
async def list_muscles(
    current_user: CurrentUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.list_muscles()


@router.get("/{slug}", response_model=MuscleRead)
async def get_muscle(
    slug: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.get_muscle(slug)


@router.post("", response_model=MuscleRead, status_code=201)
async def create_muscle(
    muscle_data: MuscleCreate,
    current_user: CurrentUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.create_muscle(muscle_data)
