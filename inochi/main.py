import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inochi.api.router import api_router
from inochi.core import settings
from inochi.core.database import init_database
from inochi.core.db import AsyncSessionLocal
from inochi.core.logging_config import setup_logging
from inochi.core.seed_catalog import seed_catalog
from inochi.repositories.catalog_repository import CatalogRepository

logger = logging.getLogger(__name__)

app = FastAPI(title="Inochi - calisthenics skill tracker")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    setup_logging()
    await init_database()

    if settings.SEED_CATALOG:
        async with AsyncSessionLocal() as session:
            result = await seed_catalog(CatalogRepository(session))
        if result["skipped"]:
            logger.info("Справочники уже заполнены, сидирование пропущено")
        else:
            logger.info(f"Справочники заполнены: {result['muscles']} мышц, {result['equipment']} единиц оборудования")

    logger.info("Приложение запущено")


@app.get("/")
async def root():
    base_url = "http://localhost:8000"

    return {
        "app": "Inochi",
        "message": "Inochi - calisthenics skill tracker",
        "links": {
            "skills": f"{base_url}/api/v1/skills",
            "muscles": f"{base_url}/api/v1/muscles",
            "equipment": f"{base_url}/api/v1/equipment/grouped",
            "submissions": f"{base_url}/api/v1/submissions",
            "private_skills": f"{base_url}/api/v1/private-skills",
            "graph": f"{base_url}/api/v1/graph",
            "docs": f"{base_url}/docs",
            "redoc": f"{base_url}/redoc",
        }
    }
