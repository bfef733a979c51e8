import logging
from logging import StreamHandler

from app.core.config import settings

FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def setup_logging(level_name: str | None = None) -> None:
    level_name = (level_name or settings.LOG_LEVEL or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format=FORMAT)

    logging.getLogger("app").setLevel(level)

    # Keep uvicorn output in the same shape as ours
    for logger_name in ("uvicorn", "uvicorn.access"):
        lg = logging.getLogger(logger_name)
        lg.setLevel(level)
        if not lg.handlers:
            handler = StreamHandler()
            handler.setFormatter(logging.Formatter(FORMAT))
            lg.addHandler(handler)
