from __future__ import annotations

import logging
import os
import sys
from pythonjsonlogger import jsonlogger


def setup_logging(app_name: str = "ctgml") -> logging.Logger:
    """
    JSON structured logger for pipeline stages (stdout + optional LOG_FILE).
    """
    logger = logging.getLogger(app_name)
    logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    logger.propagate = False

    # Stages call this repeatedly; configure once
    if logger.handlers:
        return logger

    fmt = "%(asctime)s %(levelname)s %(name)s %(message)s %(module)s %(funcName)s"
    formatter = jsonlogger.JsonFormatter(fmt)

    ch = logging.StreamHandler(sys.stdout)
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    log_file = os.getenv("LOG_FILE")  # e.g. logs/ctgml.jsonl
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    return logger


def get_logger(stage: str) -> logging.Logger:
    """Child logger for one pipeline stage, sharing the root handlers."""
    setup_logging()
    return logging.getLogger(f"ctgml.{stage}")
