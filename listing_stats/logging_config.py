import sys
from pathlib import Path
from loguru import logger

from listing_stats import config


def configure_logger(level: str = "INFO", log_file: str = "listing_stats.log", log_dir: str = "logs"):
    """
    Configure the loguru logger for the API and batch runs.
    """
    Path(log_dir).mkdir(parents=True, exist_ok=True)

    # Drop the default handler so messages are not printed twice
    logger.remove()

    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level,
    )

    logger.add(
        Path(log_dir) / log_file,
        rotation="10 MB",
        retention="10 days",
        level=level,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
    )


_configured = False


def setup_default_logging():
    global _configured
    if not _configured:
        configure_logger(level=config.LOG_LEVEL, log_file=config.LOG_FILE)
        _configured = True
