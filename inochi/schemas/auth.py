from pydantic import BaseModel, EmailStr
from enum import Enum
from typing import Optional


class RoleEnum(str, Enum):
    user = "user"
    moderator = "moderator"
    admin = "admin"


class CurrentUser(BaseModel):
    """Пользователь из claims токена провайдера идентификации."""
    id: str
    role: RoleEnum = RoleEnum.user
    name: Optional[str] = None
    email: Optional[EmailStr] = None

    @property
    def is_moderator(self) -> bool:
        return self.role in (RoleEnum.moderator, RoleEnum.admin)
