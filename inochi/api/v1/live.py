"""
Живая подписка на список скиллов по WebSocket.

Клиент подключается к /api/v1/live/skills?token=...&q=...&level=...,
сразу получает текущий снимок, а затем новый снимок после каждой
мутации скиллов. Подписка снимается при закрытии соединения.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError

from inochi.core.db import AsyncSessionLocal
from inochi.core.dependencies import decode_identity_token
from inochi.models.skill import LevelEnum
from inochi.repositories.catalog_repository import CatalogRepository
from inochi.repositories.skill_repository import SkillRepository
from inochi.schemas.skill import SkillFilters, SkillEnriched
from inochi.services.live_queries import live_hub, SKILLS_TOPIC
from inochi.services.skill_search import SkillSearchService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["live"])


async def fetch_skill_snapshot(search_query: Optional[str], filters: SkillFilters) -> List[SkillEnriched]:
    # Каждый снимок читается в собственной сессии: соединение живёт дольше запроса
    async with AsyncSessionLocal() as session:
        service = SkillSearchService(SkillRepository(session), CatalogRepository(session))
        return await service.search_skills(search_query, filters)


@router.websocket("/skills")
async def live_skills(
    websocket: WebSocket,
    token: str = Query(...),
    q: str = Query(""),
    level: Optional[LevelEnum] = Query(None),
    min_difficulty: Optional[int] = Query(None),
    max_difficulty: Optional[int] = Query(None),
):
    try:
        current_user = decode_identity_token(token)
        filters = SkillFilters(level=level, min_difficulty=min_difficulty, max_difficulty=max_difficulty)
    except (HTTPException, ValidationError):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()

    async def fetch():
        return await fetch_skill_snapshot(q, filters)

    async def send(snapshot: List[SkillEnriched]):
        await websocket.send_json({"topic": SKILLS_TOPIC, "skills": jsonable_encoder(snapshot)})

    subscription = await live_hub.subscribe(SKILLS_TOPIC, fetch, send)
    logger.info(f"Пользователь {current_user.id} подписался на живой список скиллов")
    try:
        while True:
            # Входящие сообщения не обрабатываются, ждём закрытия соединения
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        subscription.close()
        logger.info(f"Подписка пользователя {current_user.id} закрыта")
