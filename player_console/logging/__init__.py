"""
Logging package - Console-wide logger.

Usage:
    from player_console.logging import get_logger

    logger = get_logger()
    logger.info("Loading players...")
    logger.success("Loaded!")
"""

from player_console.logging.logger import get_logger, ConsoleLogger

__all__ = [
    "get_logger",
    "ConsoleLogger",
]
