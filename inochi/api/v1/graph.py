from fastapi import APIRouter, Depends

from inochi.core.dependencies import get_current_user, get_skill_graph_service
from inochi.schemas.auth import CurrentUser
from inochi.schemas.graph import GraphResponse, EdgeRequest, EdgeChangeResponse, EdgeKind
from inochi.services.skill_graph import SkillGraphService

router = APIRouter(tags=["graph"])


@router.get("", response_model=GraphResponse)
async def get_graph(
    current_user: CurrentUser = Depends(get_current_user),
    service: SkillGraphService = Depends(get_skill_graph_service),
):
    """Граф пререквизитов и вариантов с найденными циклами"""
    return await service.get_graph()


@router.post("/edges", response_model=EdgeChangeResponse)
async def add_edge(
    edge: EdgeRequest,
    current_user: CurrentUser = Depends(get_current_user),
    service: SkillGraphService = Depends(get_skill_graph_service),
):
    return await service.add_edge(edge.source_id, edge.target_id, edge.kind)


@router.delete("/edges/{kind}/{source_id}/{target_id}")
async def remove_edge(
    kind: EdgeKind,
    source_id: int,
    target_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    service: SkillGraphService = Depends(get_skill_graph_service),
):
    await service.remove_edge(source_id, target_id, kind)
    return {"message": "Связь удалена"}
