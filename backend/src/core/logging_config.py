"""
Structured Logging Configuration
Loguru sinks tagged with the acting wallet, standard logging intercepted
"""
import sys
import logging
from pathlib import Path
from typing import Optional

from loguru import logger

from .config import settings


NO_WALLET = "-"

HUMAN_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[wallet]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
PLAIN_FORMAT = "{time} | {level} | {extra[wallet]} | {name}:{function}:{line} | {message}"


class InterceptHandler(logging.Handler):
    """Intercept standard logging and redirect to Loguru"""
    
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        
        # Walk out of the logging module to the real caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1
        
        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def wallet_logger(wallet_address: Optional[str]):
    """Logger whose records carry the wallet they act for"""
    return logger.bind(wallet=wallet_address or NO_WALLET)


def configure_logging():
    """Configure Loguru logging"""
    logger.remove()
    logger.configure(extra={"wallet": NO_WALLET})
    
    json_output = settings.LOG_JSON_FORMAT and settings.ENVIRONMENT == "production"
    if json_output:
        logger.add(
            sys.stdout,
            format=PLAIN_FORMAT,
            level=settings.LOG_LEVEL,
            serialize=True,
        )
    else:
        logger.add(
            sys.stdout,
            format=HUMAN_FORMAT,
            level=settings.LOG_LEVEL,
            colorize=True,
        )
    
    if settings.LOG_TO_FILE:
        logger.add(
            str(Path(settings.LOG_DIR) / "tracker_{time:YYYY-MM-DD}.log"),
            rotation="00:00",
            retention="30 days",
            level=settings.LOG_LEVEL,
            format=PLAIN_FORMAT,
            serialize=settings.LOG_JSON_FORMAT,
        )
    
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    
    for logger_name in ["uvicorn", "uvicorn.access", "uvicorn.error"]:
        logging.getLogger(logger_name).handlers = [InterceptHandler()]
    
    # SQL echo only in debug
    engine_logger = logging.getLogger("sqlalchemy.engine")
    engine_logger.handlers = [InterceptHandler()]
    engine_logger.setLevel(logging.INFO if settings.DEBUG else logging.WARNING)
    
    logger.info(
        f"Logging configured: level={settings.LOG_LEVEL}, json={json_output}, "
        f"file={settings.LOG_TO_FILE}"
    )


# Initialize logging on import
configure_logging()
