from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from inochi.core.dependencies import get_current_user, get_catalog_service
from inochi.core.rbac import require_admin
from inochi.schemas.auth import CurrentUser
from inochi.schemas.catalog import EquipmentCreate, EquipmentRead, EquipmentGrouped
from inochi.services.catalog_service import CatalogService

router = APIRouter(tags=["equipment"])


@router.get("", response_model=List[EquipmentRead])
async def list_equipment(
    category: Optional[str] = Query(None, description="Фильтр по категории"),
    current_user: CurrentUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.list_equipment(category)


@router.get("/grouped", response_model=EquipmentGrouped)
async def list_equipment_grouped(
    current_user: CurrentUser = Depends(get_current_user),
    service: CatalogService = Depends(get_catalog_service),
):
    """Оборудование, сгруппированное по категориям (для диалога выбора)"""
    groups = await service.list_equipment_grouped()
    return EquipmentGrouped(groups={
        category: [EquipmentRead.model_validate(item) for item in items]
        for category, items in groups.items()
    })


@router.post("", response_model=EquipmentRead, status_code=201)
async def create_equipment(
    equipment_data: EquipmentCreate,
    current_user: CurrentUser = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    return await service.create_equipment(equipment_data)
