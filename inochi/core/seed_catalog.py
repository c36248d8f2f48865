"""
Скрипт для загрузки начального справочника мышц и оборудования
"""
import asyncio
import logging

from inochi.core.db import AsyncSessionLocal
from inochi.core.initial_catalog import INITIAL_MUSCLES, INITIAL_EQUIPMENT
from inochi.models.muscle import Muscle
from inochi.models.equipment import Equipment
from inochi.repositories.catalog_repository import CatalogRepository
from inochi.services.catalog_service import slugify

logger = logging.getLogger(__name__)


async def seed_catalog(catalog: CatalogRepository) -> dict:
    """Загрузить начальные мышцы и оборудование, если справочник пуст."""
    if await catalog.count_muscles() > 0 or await catalog.count_equipment() > 0:
        logger.info("Справочник уже заполнен. Пропускаем загрузку.")
        return {"skipped": True, "muscles": 0, "equipment": 0}

    muscles = [
        Muscle(
            name=item["name"],
            slug=slugify(item["name"]),
            recommended_rest_hours=item["recommended_rest_hours"],
            parts=item.get("parts", []),
            muscle_group=item.get("muscle_group"),
        )
        for item in INITIAL_MUSCLES
    ]
    equipment = [
        Equipment(name=item["name"], slug=slugify(item["name"]), category=item["category"])
        for item in INITIAL_EQUIPMENT
    ]
    await catalog.add_all(muscles + equipment)

    logger.info(f"Загружено {len(muscles)} мышц и {len(equipment)} единиц оборудования")
    return {"skipped": False, "muscles": len(muscles), "equipment": len(equipment)}


async def main():
    async with AsyncSessionLocal() as session:
        await seed_catalog(CatalogRepository(session))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
