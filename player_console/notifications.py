"""
Notification contract.

Every component surfaces user-visible outcomes through a single
``notify(kind, message)`` call. The renderer owns the real implementation
(toasts in the Streamlit app); the default one writes to the console log.
"""

from typing import Optional, Protocol

from player_console.logging import ConsoleLogger, get_logger

SUCCESS = "success"
ERROR = "error"
WARNING = "warning"
INFO = "info"


class Notifier(Protocol):
    def notify(self, kind: str, message: str) -> None:
        ...


class LoggingNotifier:
    """Notifier that routes every notification to the console logger."""

    def __init__(self, logger: Optional[ConsoleLogger] = None):
        self.logger = logger or get_logger()

    def notify(self, kind: str, message: str) -> None:
        if kind == ERROR:
            self.logger.error(message)
        elif kind == WARNING:
            self.logger.warning(message)
        elif kind == SUCCESS:
            self.logger.success(message)
        else:
            self.logger.info(message)
