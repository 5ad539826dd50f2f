"""
Logging utilities for the Zipplign backend.

Provides standardized logger configuration following privacy rules.

CRITICAL PRIVACY RULES:
- NEVER log Supabase Auth tokens, API keys, or secrets
- NEVER log a user's full viewing history (log counts only)
- NEVER log raw model completions at INFO level

Acceptable logging:
- High-level events (e.g., "Recommendation flow invoked")
- Non-sensitive metadata (e.g., "history_size=12, num_recommendations=5")
- Error codes and sanitized error messages
"""

import logging
from typing import Optional

from zipplign.config import settings


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to LOG_LEVEL setting)

    Returns:
        Configured logger instance

    Usage:
        >>> from zipplign.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("High-level event occurred")
    """
    logger = logging.getLogger(name)

    if level is None:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger.setLevel(level)

    # Add handler if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
