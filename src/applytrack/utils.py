"""Utility functions for applytrack."""

import re
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

LOG_FILE_NAME = "applytrack.log"


def setup_logging(
    log_level: str = "INFO",
    log_to_file: bool = False,
    log_to_stderr: bool = False,
    log_dir: Optional[Path] = None,
) -> None:  # pragma: no cover
    """Configure loguru sinks for the current entry point.

    Removes the default stderr handler first so every entry point gets
    exactly the sinks it asks for.

    Args:
        log_level: Minimum level for all sinks
        log_to_file: Write to a rotating file in ``log_dir``
        log_to_stderr: Write to stderr
        log_dir: Directory for the log file (defaults to ~/.applytrack)
    """
    logger.remove()

    if log_to_file:
        directory = log_dir or Path.home() / ".applytrack"
        directory.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(directory / LOG_FILE_NAME),
            level=log_level,
            rotation="10 MB",
            retention="10 days",
            backtrace=True,
            diagnose=False,
        )

    if log_to_stderr:
        logger.add(sys.stderr, level=log_level, backtrace=True, diagnose=False)


def to_snake_case(name: str) -> str:
    """Convert a free-form label to snake_case.

    Examples:
        Salary Range -> salary_range
        Interview  Date -> interview_date
        CompanyName -> company_name
    """
    s1 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name.strip())
    s2 = re.sub(r"[^\w]+", "_", s1)
    return re.sub(r"_+", "_", s2).strip("_").lower()
