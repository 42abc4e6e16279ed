"""
Logging de la librería.

Consola siempre (con colores si DEBUG), archivo rotativo opcional con
LOG_FILE_PATH y formato JSON para ese archivo en producción.
"""

import json
import logging
import logging.config
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from shopify_webhooks.core.config import Settings, get_settings

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s"

# Atributos propios de LogRecord; lo demás llegó por extra=
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime", "taskName"}


class ColoredFormatter(logging.Formatter):
    """Colorea el nombre del nivel cuando stderr es una terminal."""

    RESET = "\033[0m"
    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }

    def format(self, record):
        text = super().format(record)
        if not (hasattr(sys.stderr, "isatty") and sys.stderr.isatty()):
            return text
        color = self.LEVEL_COLORS.get(record.levelname, self.RESET)
        return text.replace(record.levelname, f"{color}{record.levelname}{self.RESET}")


class StructuredFormatter(logging.Formatter):
    """Una línea JSON por record; los campos de extra= van bajo "extra"."""

    def format(self, record):
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }

        extra = {key: value for key, value in vars(record).items() if key not in _RESERVED_ATTRS}
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, ensure_ascii=False, default=str)


def get_logging_configuration(settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Arma el dict para logging.config.dictConfig.

    Args:
        settings: Configuración (por defecto la global)
    """
    settings = settings or get_settings()
    level = settings.LOG_LEVEL

    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "colored" if settings.DEBUG else "standard",
            "stream": "ext://sys.stdout",
        }
    }

    if settings.LOG_FILE_PATH:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "json" if settings.is_production else "detailed",
            "filename": settings.LOG_FILE_PATH,
            "maxBytes": settings.LOG_MAX_SIZE_MB * 1024 * 1024,
            "backupCount": settings.LOG_BACKUP_COUNT,
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": settings.LOG_FORMAT, "datefmt": DATE_FORMAT},
            "detailed": {"format": DETAILED_FORMAT, "datefmt": DATE_FORMAT},
            "colored": {"()": ColoredFormatter, "format": settings.LOG_FORMAT, "datefmt": DATE_FORMAT},
            "json": {"()": StructuredFormatter},
        },
        "handlers": handlers,
        "loggers": {
            "shopify_webhooks": {"level": level, "propagate": True},
            "aiohttp": {"level": "WARNING", "propagate": True},
        },
        "root": {"level": level, "handlers": list(handlers)},
    }


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Aplica la configuración de logging; crea el directorio del archivo si hace falta."""
    settings = settings or get_settings()

    if settings.LOG_FILE_PATH:
        Path(settings.LOG_FILE_PATH).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(get_logging_configuration(settings))

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configurado en nivel {settings.LOG_LEVEL}")
    if settings.LOG_FILE_PATH:
        logger.info(f"Escribiendo logs en {settings.LOG_FILE_PATH}")
