# registre_backend/app/logging_config.py
import logging
from contextvars import ContextVar
from typing import Any, Dict, Optional

# Set per request by the middleware in main.py
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUP_COUNT = 5


class RequestIdFilter(logging.Filter):
    """Stamps each record with the id of the request being served."""

    def filter(self, record):
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()
        return True


def get_logging_config(
    log_level: str = "INFO", log_file: Optional[str] = None
) -> Dict[str, Any]:
    """
    Build the dictConfig shared by uvicorn and the service loggers.

    ``log_level`` applies to the ``registre_backend`` loggers only; third-party
    libraries stay at INFO, WeasyPrint at WARNING. With ``log_file`` every
    application record is also written to a rotating file.
    """
    level = log_level.upper()
    app_handlers = ["console", "stderr"]

    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "console",
            "stream": "ext://sys.stdout",
            "filters": ["request_id"],
        },
        "access": {
            "class": "logging.StreamHandler",
            "formatter": "access",
            "stream": "ext://sys.stdout",
            "filters": ["request_id"],
        },
        "stderr": {
            "class": "logging.StreamHandler",
            "formatter": "detailed",
            "stream": "ext://sys.stderr",
            "level": "ERROR",
            "filters": ["request_id"],
        },
    }
    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "detailed",
            "filename": log_file,
            "maxBytes": LOG_FILE_MAX_BYTES,
            "backupCount": LOG_FILE_BACKUP_COUNT,
            "encoding": "utf-8",
            "filters": ["request_id"],
        }
        app_handlers.append("file")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request_id": {"()": RequestIdFilter}},
        "formatters": {
            "console": {
                "()": "uvicorn.logging.DefaultFormatter",
                "fmt": "%(levelprefix)s %(asctime)s [%(name)s] [%(request_id)s] %(message)s",
                "datefmt": LOG_DATE_FORMAT,
            },
            "access": {
                "()": "uvicorn.logging.AccessFormatter",
                "fmt": '%(levelprefix)s %(asctime)s [%(request_id)s] %(client_addr)s - "%(request_line)s" %(status_code)s',
                "datefmt": LOG_DATE_FORMAT,
            },
            "detailed": {
                "format": "%(levelname)s %(asctime)s [%(name)s] [%(request_id)s] [%(module)s:%(lineno)d] - %(message)s",
                "datefmt": LOG_DATE_FORMAT,
            },
        },
        "handlers": handlers,
        "loggers": {
            "": {"handlers": ["console", "stderr"], "level": "INFO"},
            "uvicorn.access": {
                "handlers": ["access"],
                "level": "INFO",
                "propagate": False,
            },
            "weasyprint": {"level": "WARNING"},
            "fontTools": {"level": "WARNING"},
            "registre_backend": {
                "handlers": app_handlers,
                "level": level,
                "propagate": False,
            },
        },
    }
