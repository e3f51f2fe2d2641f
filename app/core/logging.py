import sys
from loguru import logger

from app.core.config import settings

def configure_logging() -> None:
    """Replace loguru's default sink with stderr and a rotating file"""
    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL)
    if settings.LOG_FILE:
        logger.add(settings.LOG_FILE, level=settings.LOG_LEVEL, rotation="500 MB")
