from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

ROOT_LOGGER = "bgr"


def setup_logger(
    name: str = ROOT_LOGGER,
    log_dir: str | Path | None = "results",
    level: int | str = logging.INFO,
) -> logging.Logger:
    logger = logging.getLogger(name)
    numeric_level = getattr(logging, str(level).upper(), level)
    logger.setLevel(numeric_level)

    # Prevent duplicate handlers across re-runs.
    if logger.handlers:
        return logger

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler()
    ch.setLevel(numeric_level)
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_dir / "run.log", encoding="utf-8")
        fh.setLevel(numeric_level)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Child of the application logger, so handlers installed by setup_logger apply."""
    if not name:
        return logging.getLogger(ROOT_LOGGER)
    if name.startswith("src."):
        name = name[len("src."):]
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
