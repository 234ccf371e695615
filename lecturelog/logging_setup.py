import sys

from loguru import logger

from lecturelog.config import settings


def configure_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with one honouring ``settings.log_level``."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=(level or settings.log_level).upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{function} - {message}",
    )
