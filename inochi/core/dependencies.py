from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from inochi.core.db import get_db
from inochi.core.config import settings
from inochi.repositories.catalog_repository import CatalogRepository
from inochi.repositories.private_skill_repository import PrivateSkillRepository
from inochi.repositories.skill_repository import SkillRepository
from inochi.repositories.submission_repository import SubmissionRepository
from inochi.schemas.auth import CurrentUser
from inochi.services.catalog_service import CatalogService
from inochi.services.private_skills import PrivateSkillService
from inochi.services.skill_graph import SkillGraphService
from inochi.services.skill_search import SkillSearchService
from inochi.services.skill_service import SkillService
from inochi.services.submission_review import SubmissionService


security = HTTPBearer()


def get_skill_repository(db: AsyncSession = Depends(get_db)) -> SkillRepository:
    """Фабрика репозитория, инжектируется в эндпоинты через Depends."""
    return SkillRepository(db)


def get_catalog_repository(db: AsyncSession = Depends(get_db)) -> CatalogRepository:
    return CatalogRepository(db)


def get_submission_repository(db: AsyncSession = Depends(get_db)) -> SubmissionRepository:
    return SubmissionRepository(db)


def get_private_skill_repository(db: AsyncSession = Depends(get_db)) -> PrivateSkillRepository:
    return PrivateSkillRepository(db)


def get_catalog_service(
        catalog: CatalogRepository = Depends(get_catalog_repository),
) -> CatalogService:
    return CatalogService(catalog)


def get_skill_search_service(
        skills: SkillRepository = Depends(get_skill_repository),
        catalog: CatalogRepository = Depends(get_catalog_repository),
) -> SkillSearchService:
    return SkillSearchService(skills, catalog)


def get_skill_service(
        skills: SkillRepository = Depends(get_skill_repository),
        catalog: CatalogRepository = Depends(get_catalog_repository),
) -> SkillService:
    return SkillService(skills, catalog)


def get_submission_service(
        submissions: SubmissionRepository = Depends(get_submission_repository),
        skills: SkillRepository = Depends(get_skill_repository),
        catalog: CatalogRepository = Depends(get_catalog_repository),
        private_skills: PrivateSkillRepository = Depends(get_private_skill_repository),
) -> SubmissionService:
    return SubmissionService(submissions, skills, catalog, private_skills=private_skills)


def get_private_skill_service(
        private_skills: PrivateSkillRepository = Depends(get_private_skill_repository),
        skills: SkillRepository = Depends(get_skill_repository),
        catalog: CatalogRepository = Depends(get_catalog_repository),
) -> PrivateSkillService:
    return PrivateSkillService(private_skills, skills, catalog)


def get_skill_graph_service(
        skills: SkillRepository = Depends(get_skill_repository),
) -> SkillGraphService:
    return SkillGraphService(skills)


def decode_identity_token(token: str) -> CurrentUser:
    """Проверить токен провайдера идентификации и собрать пользователя из claims."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Невалидный токен доступа",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
        user_id = payload.get("sub")
        if user_id is None:
            raise credentials_exception
        return CurrentUser(
            id=str(user_id),
            role=payload.get("role") or "user",
            name=payload.get("name"),
            email=payload.get("email"),
        )
    except (JWTError, ValidationError):
        raise credentials_exception


async def get_current_user(
        credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CurrentUser:
    return decode_identity_token(credentials.credentials)
