from fastapi import APIRouter
from inochi.api.v1.skills import router as skills_router
from inochi.api.v1.muscles import router as muscles_router
from inochi.api.v1.equipment import router as equipment_router
from inochi.api.v1.submissions import router as submissions_router
from inochi.api.v1.private_skills import router as private_skills_router
from inochi.api.v1.graph import router as graph_router
from inochi.api.v1.live import router as live_router

api_router = APIRouter()

api_router.include_router(skills_router, prefix="/skills", tags=["skills"])
api_router.include_router(muscles_router, prefix="/muscles", tags=["muscles"])
api_router.include_router(equipment_router, prefix="/equipment", tags=["equipment"])
api_router.include_router(submissions_router, prefix="/submissions", tags=["submissions"])
api_router.include_router(private_skills_router, prefix="/private-skills", tags=["private-skills"])
api_router.include_router(graph_router, prefix="/graph", tags=["graph"])
api_router.include_router(live_router, prefix="/live", tags=["live"])
