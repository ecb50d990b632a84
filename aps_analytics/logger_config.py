from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
OUTPUTS = ("console", "file", "both")


def configure_logger(
    name: Optional[str] = None,
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    output: str = "both",
) -> logging.Logger:
    """Configure and return a logger.

    ``output`` is ``"console"``, ``"file"`` or ``"both"``; the file handler
    is only attached when ``log_file`` is given. Handlers are attached once
    per logger, later calls only adjust the level.
    """
    if output not in OUTPUTS:
        raise ValueError(f"Unknown log output: {output!r}")
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if logger.handlers:
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    if output in {"console", "both"}:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file is not None and output in {"file", "both"}:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file, maxBytes=max_bytes, backupCount=backup_count
            )
        except OSError as exc:
            raise RuntimeError(f"Failed to configure file handler for logger: {exc}") from exc
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
