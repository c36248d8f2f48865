from fastapi import Depends, HTTPException, status

from inochi.core.dependencies import get_current_user
from inochi.schemas.auth import CurrentUser, RoleEnum


def require_role(*allowed_roles: RoleEnum):
    """Фабрика зависимостей для проверки роли пользователя."""
    async def role_checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Недостаточно прав для выполнения этого действия"
            )
        return current_user
    return role_checker


require_admin = require_role(RoleEnum.admin)
require_moderator = require_role(RoleEnum.moderator, RoleEnum.admin)
