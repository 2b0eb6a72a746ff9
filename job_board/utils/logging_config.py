import logging
import json
from datetime import datetime
from pathlib import Path
from typing import Optional

from job_board.config import settings


class JSONFormatter(logging.Formatter):
    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "path": record.pathname,
            "line": record.lineno
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None):
    logger = logging.getLogger()
    logger.setLevel((level or settings.log_level).upper())

    # Configure once per process; reloads must not stack handlers.
    if getattr(logger, "_job_board_configured", False):
        return
    logger._job_board_configured = True

    # Console handler
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    logger.addHandler(handler)

    # File handler (JSON)
    target = log_file or settings.log_file
    if target:
        Path(target).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(target)
        file_handler.setFormatter(JSONFormatter())
        logger.addHandler(file_handler)
