import logging
import sys
from logging import StreamHandler

from eventpages.config.settings import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# chatty at DEBUG; SQL echo has its own switch
QUIET_LOGGERS = ("sqlalchemy.engine", "httpx", "httpcore", "aiosqlite")


def setup_logging() -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=[StreamHandler(sys.stdout)],
    )
    for name in QUIET_LOGGERS:
        if name == "sqlalchemy.engine" and settings.LOG_DB:
            continue
        logging.getLogger(name).setLevel(logging.WARNING)
