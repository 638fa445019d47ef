# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Logging setup.

Handlers and formats live in etc/logging.conf; the level of the site logger
and the directory that receives app.log come from settings (LOG_LEVEL,
LOG_DIR).

    from core.logger import logger
"""

import configparser as _cp
import logging
import logging.config
from pathlib import Path
from typing import Optional

from core.config import settings

# backend/core/logger.py  →  ../../
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_LOGGING_CONF = _PROJECT_ROOT / "etc" / "logging.conf"

LOGGER_NAME = "weddingsite"


def resolve_log_dir(log_dir: Optional[str] = None) -> Path:
    path = Path(log_dir or settings.log_dir)
    if not path.is_absolute():
        path = _PROJECT_ROOT / path
    return path


def configure_logging(log_dir: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """
    Apply etc/logging.conf with app.log placed under *log_dir*, then set the
    site logger to *level*.  Both default to settings.
    """
    directory = resolve_log_dir(log_dir)
    directory.mkdir(parents=True, exist_ok=True)

    # %(log_file)s is a placeholder in logging.conf; RawConfigParser leaves
    # the %(asctime)s style format strings alone.
    raw = _LOGGING_CONF.read_text(encoding="utf-8")
    raw = raw.replace("%(log_file)s", str(directory / "app.log").replace("\\", "/"))
    parser = _cp.RawConfigParser()
    parser.read_string(raw)
    logging.config.fileConfig(parser, disable_existing_loggers=False)

    site_logger = logging.getLogger(LOGGER_NAME)
    site_logger.setLevel((level or settings.log_level).upper())
    return site_logger


logger = configure_logging()
