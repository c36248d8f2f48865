import logging

from inochi.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging() -> None:
    """Настройка корневого логгера по LOG_LEVEL из настроек."""
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)
    # SQL-эхо управляется отдельно через SQL_ECHO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
