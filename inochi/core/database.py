import logging

from sqlalchemy import text

from inochi.core.base import Base
from inochi.core.config import settings
from inochi.core.db import engine

# Импортируем ВСЕ модели, чтобы metadata знала о таблицах
from inochi.models.muscle import Muscle  # noqa: F401
from inochi.models.equipment import Equipment  # noqa: F401
from inochi.models.skill import Skill  # noqa: F401
from inochi.models.private_skill import PrivateSkill  # noqa: F401
from inochi.models.submission import UserSubmission  # noqa: F401

logger = logging.getLogger(__name__)


async def init_database():
    """Инициализация базы данных"""
    async with engine.begin() as conn:
        # Триграммные индексы поиска по title/description требуют pg_trgm
        if conn.dialect.name == "postgresql":
            await conn.execute(text("CREATE EXTENSION IF NOT EXISTS pg_trgm"))

        # Удаляем все таблицы если RESET_DATABASE=true
        if settings.RESET_DATABASE:
            logger.warning("RESET_DATABASE=true - пересоздаем БД")
            await conn.run_sync(Base.metadata.drop_all)

        await conn.run_sync(Base.metadata.create_all)
        logger.info("Таблицы БД созданы/проверены")
