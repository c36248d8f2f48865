from inochi.core.config import settings
from inochi.core.base import Base
from inochi.core.db import engine, get_db

__all__ = ["settings", "engine", "Base", "get_db"]
