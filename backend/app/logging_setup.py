from __future__ import annotations
import logging, sys
import structlog
import structlog.stdlib
from app.config import settings

def configure_logging(level: str | None = None):
    lvl = logging.getLevelName((level or settings.log_level).upper())
    if not isinstance(lvl, int):
        lvl = logging.INFO
    timestamper = structlog.processors.TimeStamper(fmt="iso")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            timestamper,
            structlog.processors.add_log_level,
            structlog.processors.EventRenamer("message"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(lvl),
        cache_logger_on_first_use=True,
    )
    # sqlalchemy / uvicorn / rq go through the stdlib root logger
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(structlog.processors.JSONRenderer()))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(lvl)
