"""
Logging setup for the API process.

etc/logging.conf declares the handlers (console + rotating file) and wires
the ``sahyog`` application logger together with uvicorn's ``uvicorn.error``
and ``uvicorn.access`` loggers, so server and application lines land in
the same log/app.log.  ``LOG_LEVEL`` from the settings overrides the level
of the ``sahyog`` and ``uvicorn.error`` loggers without editing the file.

uvicorn must be started with ``log_config=None`` (see main.py), otherwise it
replaces this configuration with its own at startup.

    from core.logger import logger
"""

import configparser
import logging
import logging.config
from pathlib import Path

from core.config import settings

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_LOGGING_CONF = _PROJECT_ROOT / "etc" / "logging.conf"
LOG_FILE = _PROJECT_ROOT / "log" / "app.log"

APP_LOGGER = "sahyog"
# uvicorn.access stays at its file level; the request middleware covers it
LEVELLED_LOGGERS = (APP_LOGGER, "uvicorn.error")


def configure_logging(level: str = settings.log_level) -> logging.Logger:
    """Apply etc/logging.conf, then force *level* on the app and uvicorn.error loggers."""
    LOG_FILE.parent.mkdir(exist_ok=True)

    # The file refers to the log path as %(log_file)s.  RawConfigParser leaves
    # the %(asctime)s-style format strings alone.
    raw = _LOGGING_CONF.read_text(encoding="utf-8").replace("%(log_file)s", str(LOG_FILE))
    parser = configparser.RawConfigParser()
    parser.read_string(raw)
    logging.config.fileConfig(parser, disable_existing_loggers=False)

    for name in LEVELLED_LOGGERS:
        logging.getLogger(name).setLevel(level.upper())
    return logging.getLogger(APP_LOGGER)


logger = configure_logging()
