from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Union

LOGGER = logging.getLogger("timetracker")

LOG_NAME = "timetracker.log"


def setup_logging(log_path: Union[str, Path], level: int = logging.INFO) -> None:
    LOGGER.setLevel(level)
    target = str(Path(log_path).resolve())
    if any(getattr(h, "baseFilename", None) == target for h in LOGGER.handlers):
        return
    handler = logging.FileHandler(target, encoding="utf-8")
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    LOGGER.addHandler(handler)
    LOGGER.propagate = False


def log_unhandled_exception(exc_type, exc, tb) -> None:
    LOGGER.error("Unhandled exception", exc_info=(exc_type, exc, tb))


def install_excepthook() -> None:
    sys.excepthook = log_unhandled_exception
