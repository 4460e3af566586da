import logging
from typing import Optional

import structlog
from pythonjsonlogger.json import JsonFormatter

from event_registration.core.settings import MonitoringSettings

_configured = False


def setup_logging(monitoring: MonitoringSettings, force: bool = False) -> None:
    """Configure root logging (JSON or console) and structlog once per process."""
    global _configured
    if _configured and not force:
        return

    handler: logging.Handler
    if monitoring.LOG_FILE:
        handler = logging.FileHandler(monitoring.LOG_FILE, encoding="utf-8")
    else:
        handler = logging.StreamHandler()

    formatter: Optional[logging.Formatter]
    if monitoring.LOG_FORMAT == "json":
        formatter = JsonFormatter(
            "%(levelname)s %(asctime)s %(message)s %(name)s %(processName)s "
            "%(filename)s %(lineno)d",
            rename_fields={
                "levelname": "level",
                "asctime": "time",
                "name": "loggerName",
                "lineno": "lineNumber",
                "filename": "fileName",
            },
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    handler.setFormatter(formatter)

    logging.basicConfig(handlers=[handler], level=monitoring.LOG_LEVEL.upper(), force=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            (
                structlog.processors.JSONRenderer()
                if monitoring.LOG_FORMAT == "json"
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _configured = True
    logging.getLogger(__name__).info("Application logging configured")
