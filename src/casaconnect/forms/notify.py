from typing import Protocol

import structlog


class Notifier(Protocol):
    """Fire-and-forget user notifications (toasts in the browser)."""

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...


class LogNotifier:
    """Notifier that writes to the structured log, for headless use."""

    def __init__(self) -> None:
        self._logger = structlog.get_logger(__name__)

    def success(self, message: str) -> None:
        self._logger.info("notify", level="success", message=message)

    def error(self, message: str) -> None:
        self._logger.error("notify", level="error", message=message)

    def warning(self, message: str) -> None:
        self._logger.warning("notify", level="warning", message=message)

    def info(self, message: str) -> None:
        self._logger.info("notify", level="info", message=message)
