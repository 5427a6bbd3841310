"""
Logging helper utilities for the dockprobe CLI.

Provides consistent formatting for section headers and run summaries.
"""

import logging
from typing import Any, Mapping, Optional


def log_info_header(
    message: str,
    logger: Optional[logging.Logger] = None,
    width: int = 60,
    char: str = "="
) -> None:
    """
    Log an informational header with separator lines.

    Args:
        message: Header message to display
        logger: Logger instance (defaults to root logger if not provided)
        width: Width of separator line in characters
        char: Character to use for separator line

    Examples:
        >>> log_info_header("Security scan: myapp:latest")
        ============================================================
        Security scan: myapp:latest
        ============================================================
    """
    if logger is None:
        logger = logging.getLogger()

    logger.info(char * width)
    logger.info(message)
    logger.info(char * width)


def log_summary(
    title: str,
    values: Mapping[str, Any],
    logger: Optional[logging.Logger] = None,
    width: int = 60,
) -> None:
    """
    Log a titled block of aligned "label: value" lines.

    Args:
        title: Summary title
        values: Labels and values in display order
        logger: Logger instance (defaults to root logger if not provided)
        width: Width of separator line in characters
    """
    if logger is None:
        logger = logging.getLogger()

    label_width = max((len(label) for label in values), default=0)

    logger.info("-" * width)
    logger.info(title)
    for label, value in values.items():
        logger.info(f"  {label.ljust(label_width)} : {value}")
    logger.info("-" * width)


def log_warning_section(
    title: str,
    messages: list[str],
    logger: Optional[logging.Logger] = None,
    width: int = 60
) -> None:
    """
    Log a warning section with separator lines and multiple messages.

    Args:
        title: Title message for the warning section
        messages: Messages to display; empty strings become blank lines
        logger: Logger instance (defaults to root logger if not provided)
        width: Width of separator line in characters
    """
    if logger is None:
        logger = logging.getLogger()

    logger.warning("=" * width)
    logger.warning(title)
    for message in messages:
        logger.warning(message)
    logger.warning("=" * width)
