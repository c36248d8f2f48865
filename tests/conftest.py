"""
Общие фикстуры для всех тестов Inochi backend.

Стратегия:
- Тестовое FastAPI-приложение создаётся без startup-событий (нет подключения к БД).
- SkillRepository, CatalogRepository, SubmissionRepository и PrivateSkillRepository
  заменяются на
  AsyncMock(spec=...) через dependency_overrides фабрик репозиториев.
- get_current_user заменяется на лямбду с нужным пользователем; для проверки
  настоящей валидации токенов используется make_auth_headers().
- Мутирующие методы моков (create/stage/update/save) ведут себя как репозиторий:
  назначают id и применяют изменения к переданной записи.
"""

import pytest
from unittest.mock import AsyncMock
from httpx import AsyncClient, ASGITransport
from fastapi import FastAPI
from datetime import datetime
from itertools import count
from typing import AsyncGenerator, Optional
from jose import jwt

from inochi.api.router import api_router
from inochi.core.config import settings
from inochi.core.dependencies import (
    get_current_user,
    get_skill_repository,
    get_catalog_repository,
    get_submission_repository,
    get_private_skill_repository,
)
from inochi.models.skill import Skill, LevelEnum
from inochi.models.muscle import Muscle
from inochi.models.equipment import Equipment
from inochi.models.private_skill import PrivateSkill
from inochi.models.submission import UserSubmission, SubmissionTypeEnum, SubmissionStatusEnum
from inochi.repositories.skill_repository import SkillRepository
from inochi.repositories.catalog_repository import CatalogRepository
from inochi.repositories.private_skill_repository import PrivateSkillRepository
from inochi.repositories.submission_repository import SubmissionRepository
from inochi.schemas.auth import CurrentUser, RoleEnum
from inochi.services.live_queries import QueryHub


# ---------------------------------------------------------------------------
# Вспомогательные функции
# ---------------------------------------------------------------------------

def create_test_app() -> FastAPI:
    """Тестовое FastAPI-приложение без startup-событий."""
    test_app = FastAPI(title="Inochi Test App")
    test_app.include_router(api_router, prefix="/api/v1")
    return test_app


def make_auth_headers(user: CurrentUser, secret: Optional[str] = None) -> dict:
    """Заголовки авторизации с токеном, как его выдал бы провайдер идентификации."""
    token = jwt.encode(
        {"sub": user.id, "role": user.role.value, "name": user.name},
        secret or settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )
    return {"Authorization": f"Bearer {token}"}


def make_skill(skill_id: int, **overrides) -> Skill:
    """ORM-скилл со всеми обязательными полями (дефолты колонок без БД не применяются)."""
    now = datetime(2024, 1, 1, 12, 0, 0)
    data = dict(
        id=skill_id,
        title=f"Skill {skill_id}",
        description=f"Description of skill {skill_id}",
        level=LevelEnum.beginner,
        difficulty=3,
        muscles=[],
        equipment=[],
        embedded_videos=[],
        prerequisites=[],
        variants=[],
        tips=[],
        created_at=now,
        updated_at=now,
        created_by="user_1",
    )
    data.update(overrides)
    return Skill(**data)


def make_submission(submission_id: int, **overrides) -> UserSubmission:
    data = dict(
        id=submission_id,
        title="Pseudo Planche Push-up",
        description="Push-up with the hands turned out and shoulders leaning forward",
        level=LevelEnum.intermediate,
        difficulty=5,
        muscles=[],
        equipment=[],
        embedded_videos=[],
        prerequisites=[],
        variants=[],
        tips=[],
        submission_type=SubmissionTypeEnum.create,
        status=SubmissionStatusEnum.pending,
        original_skill_id=None,
        private_skill_id=None,
        submitted_by="user_1",
        submitted_at=datetime(2024, 1, 2, 9, 30, 0),
        reviewed_by=None,
        reviewed_at=None,
        rejection_reason=None,
    )
    data.update(overrides)
    return UserSubmission(**data)


def make_private_skill(private_skill_id: int, **overrides) -> PrivateSkill:
    now = datetime(2024, 1, 3, 18, 0, 0)
    data = dict(
        id=private_skill_id,
        title=f"Draft {private_skill_id}",
        description=f"Work in progress {private_skill_id}",
        level=LevelEnum.beginner,
        difficulty=2,
        muscles=[],
        equipment=[],
        embedded_videos=[],
        prerequisites=[],
        variants=[],
        tips=[],
        created_at=now,
        updated_at=now,
        user_id="user_1",
    )
    data.update(overrides)
    return PrivateSkill(**data)


def make_muscle(muscle_id: int, name: str = "Chest", **overrides) -> Muscle:
    data = dict(
        id=muscle_id,
        name=name,
        slug=name.lower().replace(" ", "-"),
        recommended_rest_hours=48,
        parts=[],
        muscle_group="upper_body_push",
    )
    data.update(overrides)
    return Muscle(**data)


def make_equipment(equipment_id: int, name: str = "Pull-up Bar", category: str = "basic") -> Equipment:
    return Equipment(
        id=equipment_id,
        name=name,
        slug=name.lower().replace(" ", "-"),
        category=category,
    )


# ---------------------------------------------------------------------------
# Фикстуры пользователей
# ---------------------------------------------------------------------------

@pytest.fixture
def user_fixture() -> CurrentUser:
    """Обычный пользователь с ролью 'user'."""
    return CurrentUser(id="user_1", role=RoleEnum.user, name="Tester")


@pytest.fixture
def other_user_fixture() -> CurrentUser:
    """Второй обычный пользователь (чужие заявки)."""
    return CurrentUser(id="user_2", role=RoleEnum.user, name="Other")


@pytest.fixture
def moderator_fixture() -> CurrentUser:
    """Модератор: ревью заявок и удаление скиллов."""
    return CurrentUser(id="moderator_1", role=RoleEnum.moderator, name="Moderator")


@pytest.fixture
def admin_fixture() -> CurrentUser:
    """Администратор с ролью 'admin'."""
    return CurrentUser(id="admin_1", role=RoleEnum.admin, name="Admin")


# ---------------------------------------------------------------------------
# Фикстуры для зависимостей
# ---------------------------------------------------------------------------

@pytest.fixture
def hub() -> QueryHub:
    """Отдельный хаб живых запросов, чтобы тесты не делили подписчиков."""
    return QueryHub()


@pytest.fixture
def skill_repo() -> AsyncMock:
    """Мокированный SkillRepository."""
    repo = AsyncMock(spec=SkillRepository)
    ids = count(100)

    async def create(skill, *args, **kwargs):
        if skill.id is None:
            skill.id = next(ids)
        return skill

    async def update(skill, changes, commit=True):
        for field, value in changes.items():
            setattr(skill, field, value)
        return skill

    repo.get_by_id.return_value = None
    repo.get_by_ids.return_value = []
    repo.existing_ids.return_value = set()
    repo.list_skills.return_value = []
    repo.search.return_value = []
    repo.list_all.return_value = []
    repo.create.side_effect = create
    repo.stage.side_effect = create
    repo.update.side_effect = update
    return repo


@pytest.fixture
def catalog_repo() -> AsyncMock:
    """Мокированный CatalogRepository."""
    repo = AsyncMock(spec=CatalogRepository)
    ids = count(500)

    async def create(record):
        if record.id is None:
            record.id = next(ids)
        return record

    repo.list_muscles.return_value = []
    repo.list_equipment.return_value = []
    repo.get_muscle_by_slug.return_value = None
    repo.get_equipment_by_slug.return_value = None
    repo.get_muscles_by_ids.return_value = []
    repo.get_equipment_by_ids.return_value = []
    repo.count_muscles.return_value = 0
    repo.count_equipment.return_value = 0
    repo.create_muscle.side_effect = create
    repo.create_equipment.side_effect = create
    return repo


@pytest.fixture
def submission_repo() -> AsyncMock:
    """Мокированный SubmissionRepository."""
    repo = AsyncMock(spec=SubmissionRepository)
    ids = count(900)

    async def create(submission):
        if submission.id is None:
            submission.id = next(ids)
        return submission

    async def save(submission):
        return submission

    repo.get_by_id.return_value = None
    repo.list_all.return_value = []
    repo.list_by_status.return_value = []
    repo.list_by_user.return_value = []
    repo.list_by_user_and_status.return_value = []
    repo.find_pending_edit.return_value = None
    repo.find_pending_for_private_skill.return_value = None
    repo.claim_for_review.return_value = True
    repo.create.side_effect = create
    repo.save.side_effect = save
    return repo


@pytest.fixture
def private_skill_repo() -> AsyncMock:
    """Мокированный PrivateSkillRepository."""
    return mock_private_skill_repository()


def mock_private_skill_repository() -> AsyncMock:
    repo = AsyncMock(spec=PrivateSkillRepository)
    ids = count(700)

    async def create(private_skill):
        if private_skill.id is None:
            private_skill.id = next(ids)
        return private_skill

    async def update(private_skill, changes):
        for field, value in changes.items():
            setattr(private_skill, field, value)
        return private_skill

    repo.get_by_id.return_value = None
    repo.list_by_user.return_value = []
    repo.search.return_value = []
    repo.create.side_effect = create
    repo.update.side_effect = update
    return repo


# ---------------------------------------------------------------------------
# HTTP-клиенты
# ---------------------------------------------------------------------------

def build_test_app(skill_repo, catalog_repo, submission_repo, current_user=None, private_skill_repo=None) -> FastAPI:
    app = create_test_app()
    if private_skill_repo is None:
        private_skill_repo = mock_private_skill_repository()
    app.dependency_overrides[get_private_skill_repository] = lambda: private_skill_repo
    app.dependency_overrides[get_skill_repository] = lambda: skill_repo
    app.dependency_overrides[get_catalog_repository] = lambda: catalog_repo
    app.dependency_overrides[get_submission_repository] = lambda: submission_repo
    if current_user is not None:
        app.dependency_overrides[get_current_user] = lambda: current_user
    return app


@pytest.fixture
async def client(skill_repo, catalog_repo, submission_repo, private_skill_repo) -> AsyncGenerator[AsyncClient, None]:
    """
    Клиент без подмены get_current_user: токен проверяется по-настоящему.
    Используется с make_auth_headers() и для проверок 401/403 без токена.
    """
    app = build_test_app(skill_repo, catalog_repo, submission_repo, private_skill_repo=private_skill_repo)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def user_client(user_fixture, skill_repo, catalog_repo, submission_repo, private_skill_repo) -> AsyncGenerator[AsyncClient, None]:
    """Клиент, аутентифицированный как обычный пользователь."""
    app = build_test_app(skill_repo, catalog_repo, submission_repo, user_fixture, private_skill_repo)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def other_user_client(other_user_fixture, skill_repo, catalog_repo, submission_repo, private_skill_repo) -> AsyncGenerator[AsyncClient, None]:
    """Клиент второго обычного пользователя."""
    app = build_test_app(skill_repo, catalog_repo, submission_repo, other_user_fixture, private_skill_repo)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def moderator_client(moderator_fixture, skill_repo, catalog_repo, submission_repo, private_skill_repo) -> AsyncGenerator[AsyncClient, None]:
    """Клиент, аутентифицированный как модератор."""
    app = build_test_app(skill_repo, catalog_repo, submission_repo, moderator_fixture, private_skill_repo)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def admin_client(admin_fixture, skill_repo, catalog_repo, submission_repo, private_skill_repo) -> AsyncGenerator[AsyncClient, None]:
    """Клиент, аутентифицированный как администратор."""
    app = build_test_app(skill_repo, catalog_repo, submission_repo, admin_fixture, private_skill_repo)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
