from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql://inochi_user:inochi_password@db:5432/inochi_db"
    # Общий секрет с провайдером идентификации: им подписаны bearer-токены
    SECRET_KEY: str = "SECRET_KEY_FOR_INOCHI"
    ALGORITHM: str = "HS256"
    # При продакшн/обычной разработке лучше не пересоздавать БД на каждом старте
    RESET_DATABASE: bool = False
    SEED_CATALOG: bool = True
    SQL_ECHO: bool = False
    LOG_LEVEL: str = "INFO"
    SEARCH_RESULT_LIMIT: int = 50
    # Сколько ждать выборку и отправку снимка одному подписчику живого запроса
    LIVE_QUERY_TIMEOUT: float = 5.0
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8081",
    ]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"


settings = Settings()
