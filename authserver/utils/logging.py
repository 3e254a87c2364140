import logging
import sys
import uuid
from contextvars import ContextVar, Token

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s req=%(request_id)s: %(message)s"


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get() or "-"
        return True


def bind_request_id(request_id: str | None = None) -> Token:
    """Tag every log line of the current request; reset with the returned token."""
    return request_id_ctx.set(request_id or uuid.uuid4().hex[:8])


def get_logger(name: str = "authserver", level: int = logging.INFO) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(level)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(RequestIdFilter())
        logger.addHandler(handler)
        # uvicorn configures the root logger; avoid double lines
        logger.propagate = False
    return logger


logger = get_logger()
