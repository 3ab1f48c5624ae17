from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from todo_engine.config import SETTINGS, PROJECT_ROOT

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(level: str | None = None, log_dir: str | Path | None = None) -> Path:
    """Attach a rotating file log and a console log to the root logger.

    Returns the path of the log file. Safe to call again: handlers from an
    earlier call are replaced.
    """
    directory = Path(log_dir) if log_dir is not None else PROJECT_ROOT / SETTINGS.log_dir
    directory.mkdir(parents=True, exist_ok=True)
    log_file = directory / "todo_engine.log"

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    file_handler = RotatingFileHandler(
        log_file, maxBytes=2_000_000, backupCount=3, encoding="utf-8"
    )
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    logging.basicConfig(
        level=(level or SETTINGS.log_level).upper(),
        handlers=[file_handler, console_handler],
        force=True,
    )
    # SQL echo is only useful when chasing storage bugs.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    return log_file
