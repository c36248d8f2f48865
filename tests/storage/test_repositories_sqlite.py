"""
Тесты хранилища на SQLite в памяти (aiosqlite).

Настоящие репозитории и ограничения схемы, без моков:
- CHECK на диапазон сложности и согласованность заявок
- уникальность slug в справочниках
- поиск по title/description с фильтрами и лимитом, экранирование % и _
- порядок и индексы заявок (by_user, by_status, by_user_and_status)
- сидирование справочников идемпотентно
- одобрение заявки атомарно: скилл и статус коммитятся вместе или никак
- два модератора одобряют одну заявку: скилл появляется один раз
- удаление скилла не стирает историю заявок (внешние ключи включены)
- личные скиллы: выборки по владельцу, одобрение переносит черновик в каталог
"""

import pytest
from datetime import datetime, timedelta
from sqlalchemy import event, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi import HTTPException

from inochi.core.base import Base
from inochi.core.seed_catalog import seed_catalog
from inochi.models import (
    Muscle, Skill, LevelEnum, PrivateSkill, UserSubmission, SubmissionTypeEnum, SubmissionStatusEnum,
)
from inochi.repositories.catalog_repository import CatalogRepository
from inochi.repositories.private_skill_repository import PrivateSkillRepository
from inochi.repositories.skill_repository import SkillRepository
from inochi.repositories.submission_repository import SubmissionRepository
from inochi.schemas.auth import CurrentUser, RoleEnum
from inochi.services.live_queries import QueryHub
from inochi.services.skill_service import SkillService
from inochi.services.submission_review import SubmissionService

pytestmark = pytest.mark.storage

MODERATOR = CurrentUser(id="moderator_1", role=RoleEnum.moderator)


@pytest.fixture
async def db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
    await engine.dispose()


def new_skill(title: str, **overrides) -> Skill:
    data = dict(
        title=title,
        description=f"{title} description",
        level=LevelEnum.beginner,
        difficulty=3,
        created_by="user_1",
    )
    data.update(overrides)
    return Skill(**data)


def new_submission(**overrides) -> UserSubmission:
    data = dict(
        title="Skin the Cat",
        description="Rotation through the rings",
        level=LevelEnum.intermediate,
        difficulty=5,
        submission_type=SubmissionTypeEnum.create,
        submitted_by="user_1",
    )
    data.update(overrides)
    return UserSubmission(**data)


# ---------------------------------------------------------------------------
# Ограничения схемы
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("difficulty", [0, 11])
async def test_skill_difficulty_check(db, difficulty):
    with pytest.raises(IntegrityError):
        await SkillRepository(db).create(new_skill("Bad", difficulty=difficulty))


@pytest.mark.asyncio
async def test_skill_list_columns_default_to_empty(db):
    skill = await SkillRepository(db).create(new_skill("Plank"))
    assert skill.muscles == []
    assert skill.tips == []
    assert skill.created_at is not None


@pytest.mark.asyncio
async def test_create_submission_cannot_carry_original(db):
    skill = await SkillRepository(db).create(new_skill("Handstand"))
    with pytest.raises(IntegrityError):
        await SubmissionRepository(db).create(new_submission(original_skill_id=skill.id))


@pytest.mark.asyncio
async def test_edit_submission_cannot_carry_private_skill(db):
    skill = await SkillRepository(db).create(new_skill("Handstand"))
    draft = await PrivateSkillRepository(db).create(PrivateSkill(title="Draft", user_id="user_1"))
    with pytest.raises(IntegrityError):
        await SubmissionRepository(db).create(new_submission(
            submission_type=SubmissionTypeEnum.edit, original_skill_id=skill.id, private_skill_id=draft.id,
        ))


@pytest.mark.asyncio
async def test_rejected_submission_requires_reason(db):
    with pytest.raises(IntegrityError):
        await SubmissionRepository(db).create(new_submission(status=SubmissionStatusEnum.rejected))


@pytest.mark.asyncio
async def test_muscle_slug_unique(db):
    catalog = CatalogRepository(db)
    await catalog.create_muscle(Muscle(name="Chest", slug="chest"))
    with pytest.raises(IntegrityError):
        await catalog.create_muscle(Muscle(name="Chest again", slug="chest"))


# ---------------------------------------------------------------------------
# SkillRepository
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_search_title_all_terms_with_filters(db):
    repo = SkillRepository(db)
    await repo.create(new_skill("Front Lever", level=LevelEnum.advanced, difficulty=7))
    await repo.create(new_skill("Tuck Front Lever", level=LevelEnum.intermediate, difficulty=5))
    await repo.create(new_skill("Back Lever", level=LevelEnum.advanced, difficulty=6))

    result = await repo.search("title", "front LEVER")
    assert [s.title for s in result] == ["Front Lever", "Tuck Front Lever"]

    result = await repo.search("title", "lever", level=LevelEnum.advanced, min_difficulty=7)
    assert [s.title for s in result] == ["Front Lever"]


@pytest.mark.asyncio
async def test_search_respects_limit(db):
    repo = SkillRepository(db)
    for i in range(5):
        await repo.create(new_skill(f"Pull-up {i}"))

    result = await repo.search("title", "pull-up", limit=3)

    assert len(result) == 3


@pytest.mark.asyncio
async def test_search_escapes_wildcards(db):
    repo = SkillRepository(db)
    await repo.create(new_skill("100% Hollow Hold"))
    await repo.create(new_skill("100 Hollow Rocks"))

    result = await repo.search("title", "100%")

    assert [s.title for s in result] == ["100% Hollow Hold"]


@pytest.mark.asyncio
async def test_search_description_field(db):
    repo = SkillRepository(db)
    await repo.create(new_skill("Dead Hang", description="Passive hang from the bar"))

    assert len(await repo.search("description", "hang from")) == 1
    assert await repo.search("title", "hang from") == []


@pytest.mark.asyncio
async def test_search_unknown_field(db):
    with pytest.raises(ValueError):
        await SkillRepository(db).search("tips", "anything")


@pytest.mark.asyncio
async def test_list_skills_by_difficulty_range(db):
    repo = SkillRepository(db)
    for difficulty in (2, 5, 8):
        await repo.create(new_skill(f"D{difficulty}", difficulty=difficulty))

    result = await repo.list_skills(min_difficulty=3, max_difficulty=8)

    assert [s.difficulty for s in result] == [5, 8]


@pytest.mark.asyncio
async def test_existing_ids(db):
    repo = SkillRepository(db)
    skill = await repo.create(new_skill("Squat"))

    assert await repo.existing_ids([skill.id, 999]) == {skill.id}
    assert await repo.existing_ids([]) == set()


# ---------------------------------------------------------------------------
# SubmissionRepository
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_submissions_listed_newest_first(db):
    repo = SubmissionRepository(db)
    now = datetime.utcnow()
    old = await repo.create(new_submission(title="Old", submitted_at=now - timedelta(days=1)))
    new = await repo.create(new_submission(title="New", submitted_at=now))
    await repo.create(new_submission(title="Foreign", submitted_by="user_2", submitted_at=now))

    result = await repo.list_by_user("user_1")

    assert [s.id for s in result] == [new.id, old.id]


@pytest.mark.asyncio
async def test_find_pending_edit(db):
    skill = await SkillRepository(db).create(new_skill("Handstand"))
    repo = SubmissionRepository(db)
    edit = await repo.create(new_submission(submission_type=SubmissionTypeEnum.edit, original_skill_id=skill.id))

    assert (await repo.find_pending_edit("user_1", skill.id)).id == edit.id
    assert await repo.find_pending_edit("user_2", skill.id) is None

    edit.status = SubmissionStatusEnum.approved
    await repo.save(edit)
    assert await repo.find_pending_edit("user_1", skill.id) is None
    assert [s.id for s in await repo.list_by_user_and_status("user_1", SubmissionStatusEnum.approved)] == [edit.id]


# ---------------------------------------------------------------------------
# Сидирование и одобрение
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_seed_catalog_is_idempotent(db):
    catalog = CatalogRepository(db)

    first = await seed_catalog(catalog)
    second = await seed_catalog(catalog)

    assert first["skipped"] is False
    assert await catalog.count_muscles() == first["muscles"]
    assert second["skipped"] is True
    assert await catalog.get_equipment_by_slug("pull-up-bar") is not None


@pytest.mark.asyncio
async def test_approve_commits_skill_and_status_together(db):
    submissions = SubmissionRepository(db)
    skills = SkillRepository(db)
    service = SubmissionService(submissions, skills, CatalogRepository(db), QueryHub())
    submission = await submissions.create(new_submission(tips=["Go slow"]))

    skill = await service.approve_submission(submission.id, MODERATOR)

    stored = await skills.get_by_id(skill.id)
    assert stored.title == "Skin the Cat"
    assert stored.tips == ["Go slow"]
    assert (await submissions.get_by_id(submission.id)).status == SubmissionStatusEnum.approved


@pytest.mark.asyncio
async def test_failed_approval_leaves_nothing_behind(db):
    """Если исходный скилл правки удалён, ни скилл, ни статус заявки не меняются."""
    skills = SkillRepository(db)
    submissions = SubmissionRepository(db)
    original = await skills.create(new_skill("Crow"))
    submission = await submissions.create(new_submission(
        submission_type=SubmissionTypeEnum.edit, original_skill_id=original.id,
    ))
    submission_id = submission.id
    await db.execute(Skill.__table__.delete().where(Skill.id == original.id))
    await db.commit()

    service = SubmissionService(submissions, skills, CatalogRepository(db), QueryHub())
    with pytest.raises(HTTPException) as exc:
        await service.approve_submission(submission_id, MODERATOR)

    assert exc.value.status_code == 409
    assert await skills.list_all() == []
    assert (await submissions.get_by_id(submission_id)).status == SubmissionStatusEnum.pending


# ---------------------------------------------------------------------------
# Одновременные решения по одной заявке (файл SQLite, отдельные соединения)
# ---------------------------------------------------------------------------

OTHER_MODERATOR = CurrentUser(id="moderator_2", role=RoleEnum.moderator)


@pytest.fixture
async def file_sessions(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'inochi.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


async def load_in_parallel_sessions(submission_id, *sessions):
    """Каждая сессия видит заявку в статусе pending до того, как кто-то её рассмотрит."""
    services = []
    for session in sessions:
        submissions = SubmissionRepository(session)
        assert (await submissions.get_by_id(submission_id)).status == SubmissionStatusEnum.pending
        services.append(SubmissionService(submissions, SkillRepository(session), CatalogRepository(session), QueryHub()))
    return services


@pytest.mark.asyncio
async def test_concurrent_approvals_materialize_one_skill(file_sessions):
    async with file_sessions() as setup:
        submission_id = (await SubmissionRepository(setup).create(new_submission())).id

    async with file_sessions() as first, file_sessions() as second:
        first_service, second_service = await load_in_parallel_sessions(submission_id, first, second)

        skill = await first_service.approve_submission(submission_id, MODERATOR)
        with pytest.raises(HTTPException) as exc:
            await second_service.approve_submission(submission_id, OTHER_MODERATOR)
        assert exc.value.status_code == 409

    async with file_sessions() as check:
        assert [s.id for s in await SkillRepository(check).list_all()] == [skill.id]
        stored = await SubmissionRepository(check).get_by_id(submission_id)
        assert stored.status == SubmissionStatusEnum.approved
        assert stored.reviewed_by == "moderator_1"


@pytest.mark.asyncio
async def test_reject_after_concurrent_approval_conflicts(file_sessions):
    async with file_sessions() as setup:
        submission_id = (await SubmissionRepository(setup).create(new_submission())).id

    async with file_sessions() as first, file_sessions() as second:
        first_service, second_service = await load_in_parallel_sessions(submission_id, first, second)

        await first_service.approve_submission(submission_id, MODERATOR)
        with pytest.raises(HTTPException) as exc:
            await second_service.reject_submission(submission_id, OTHER_MODERATOR, "Duplicate")
        assert exc.value.status_code == 409

    async with file_sessions() as check:
        stored = await SubmissionRepository(check).get_by_id(submission_id)
        assert stored.status == SubmissionStatusEnum.approved
        assert stored.rejection_reason is None


# ---------------------------------------------------------------------------
# Внешние ключи: удаление скилла и история заявок
# ---------------------------------------------------------------------------

@pytest.fixture
async def fk_db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest.mark.asyncio
async def test_deleting_skill_keeps_submission_history(fk_db):
    skills = SkillRepository(fk_db)
    submissions = SubmissionRepository(fk_db)
    skill = await skills.create(new_skill("Crow"))
    approved = await submissions.create(new_submission(
        submission_type=SubmissionTypeEnum.edit,
        original_skill_id=skill.id,
        status=SubmissionStatusEnum.approved,
        reviewed_by="moderator_1",
        reviewed_at=datetime.utcnow(),
    ))
    pending = await submissions.create(new_submission(
        submission_type=SubmissionTypeEnum.edit,
        original_skill_id=skill.id,
        submitted_by="user_2",
    ))

    await SkillService(skills, CatalogRepository(fk_db), QueryHub()).delete_skill(skill.id, MODERATOR)

    rows = await fk_db.execute(
        select(UserSubmission.id, UserSubmission.original_skill_id).order_by(UserSubmission.id)
    )
    assert [tuple(row) for row in rows.all()] == [(approved.id, None), (pending.id, None)]


@pytest.mark.asyncio
async def test_pending_edit_of_deleted_skill_cannot_be_approved(fk_db):
    skills = SkillRepository(fk_db)
    submissions = SubmissionRepository(fk_db)
    skill = await skills.create(new_skill("Crow"))
    pending = await submissions.create(new_submission(
        submission_type=SubmissionTypeEnum.edit, original_skill_id=skill.id,
    ))
    await SkillService(skills, CatalogRepository(fk_db), QueryHub()).delete_skill(skill.id, MODERATOR)
    fk_db.expire_all()

    service = SubmissionService(submissions, skills, CatalogRepository(fk_db), QueryHub())
    with pytest.raises(HTTPException) as exc:
        await service.approve_submission(pending.id, MODERATOR)

    assert exc.value.status_code == 409
    assert (await submissions.get_by_id(pending.id)).status == SubmissionStatusEnum.pending


# ---------------------------------------------------------------------------
# Личные скиллы
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_private_skills_are_scoped_to_owner(db):
    repo = PrivateSkillRepository(db)
    mine = await repo.create(PrivateSkill(title="Tuck Planche", description="Knees to chest", user_id="user_1"))
    await repo.create(PrivateSkill(title="Tuck Planche", description="Someone else's", user_id="user_2"))
    await repo.create(PrivateSkill(title="Hard one", user_id="user_1", level=LevelEnum.elite, difficulty=9))

    assert mine.level == LevelEnum.beginner
    assert mine.difficulty == 1
    assert [s.title for s in await repo.list_by_user("user_1")] == ["Tuck Planche", "Hard one"]
    assert [s.title for s in await repo.list_by_user("user_1", min_difficulty=5)] == ["Hard one"]
    assert [s.id for s in await repo.search("user_1", "title", "planche")] == [mine.id]
    assert await repo.search("user_3", "title", "planche") == []


@pytest.mark.asyncio
async def test_private_skill_difficulty_check(db):
    with pytest.raises(IntegrityError):
        await PrivateSkillRepository(db).create(PrivateSkill(title="Bad", difficulty=0, user_id="user_1"))


@pytest.mark.asyncio
async def test_approved_private_skill_moves_to_catalog(db):
    private_skills = PrivateSkillRepository(db)
    submissions = SubmissionRepository(db)
    skills = SkillRepository(db)
    service = SubmissionService(submissions, skills, CatalogRepository(db), QueryHub(), private_skills=private_skills)
    draft = await private_skills.create(PrivateSkill(
        title="Elbow Lever", description="Balance on bent arms", tips=["Lean forward"], user_id="user_1",
    ))
    draft_id = draft.id

    submission = await service.submit_private_skill(draft_id, CurrentUser(id="user_1"))
    skill = await service.approve_submission(submission.id, MODERATOR)

    stored = await skills.get_by_id(skill.id)
    assert stored.title == "Elbow Lever"
    assert stored.tips == ["Lean forward"]
    assert stored.created_by == "user_1"
    assert await private_skills.get_by_id(draft_id) is None
    assert (await submissions.get_by_id(submission.id)).status == SubmissionStatusEnum.approved
