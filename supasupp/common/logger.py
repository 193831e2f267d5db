import logging
import os
import re
import sys
from datetime import datetime

from supasupp.config.config import LOG_DIR

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

# Terminal colour codes leak into log files when messages are copied from CLI output
ANSI_RE = re.compile(r"\x1B\[[0-?]*[ -/]*[@-~]")


class StripAnsiFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = ANSI_RE.sub("", record.msg)
        return True


_configured = False


def _log_file_path() -> str:
    return os.path.join(LOG_DIR, f"supasupp_{datetime.now().strftime('%Y-%m-%d')}.log")


def _configure_root_logger():
    global _configured
    if _configured:
        return

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    fmt = logging.Formatter(LOG_FORMAT)
    ansi_filter = StripAnsiFilter()

    try:
        os.makedirs(LOG_DIR, exist_ok=True)
        fh = logging.FileHandler(_log_file_path(), encoding="utf-8")
        fh.setLevel(logging.INFO)
        fh.setFormatter(fmt)
        fh.addFilter(ansi_filter)
        root.addHandler(fh)
    except OSError:
        # Read-only working directory: keep console logging only
        pass

    sh = logging.StreamHandler(stream=sys.stdout)
    sh.setLevel(logging.INFO)
    sh.setFormatter(fmt)
    sh.addFilter(ansi_filter)
    root.addHandler(sh)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    _configure_root_logger()
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    return logger
