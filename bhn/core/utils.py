import logging
from typing import Any, Dict, Optional, Union


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

LogMessage = Union[str, Dict[str, Any]]


def _render(value: Any) -> str:
    if isinstance(value, str) and " " in value:
        return repr(value)
    return str(value)


def format_event(message: LogMessage) -> str:
    """
    Render a log message as one line.

    Dict messages become ``key=value`` pairs with ``event_type`` first, e.g.
    ``event_type=row_created table=patients id=...``. Strings pass through.
    """
    if not isinstance(message, dict):
        return message

    keys = sorted(message, key=lambda k: (k != "event_type", k))
    return " ".join(f"{key}={_render(message[key])}" for key in keys)


class LoggerMixin:
    """
    Structured logging for repositories and seeders.

    Messages are either plain strings or dicts keyed by ``event_type``. The
    logger is named ``bhn.<ClassName>`` so one repository can be turned up
    without the rest.

    Example:
        class PatientRepository(LoggerMixin):
            async def add(self, patient):
                self.log_info({"event_type": "patient_added", "bhn_id": patient.bhn_id})
    """

    _logger: Optional[logging.Logger] = None

    @property
    def logger(self) -> logging.Logger:
        if self._logger is None:
            self._logger = logging.getLogger(f"bhn.{self.__class__.__name__}")
        return self._logger

    def log_info(self, message: LogMessage, **kwargs) -> None:
        self.logger.info(format_event(message), **kwargs)

    def log_warning(self, message: LogMessage, **kwargs) -> None:
        self.logger.warning(format_event(message), **kwargs)

    def log_error(self, message: LogMessage, exc_info: bool = False, **kwargs) -> None:
        self.logger.error(format_event(message), exc_info=exc_info, **kwargs)

    def log_debug(self, message: LogMessage, **kwargs) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(format_event(message), **kwargs)

    def log_security_event(self, message: LogMessage, **kwargs) -> None:
        """Warning-level entry prefixed ``SECURITY EVENT:`` for filtering."""
        self.logger.warning(f"SECURITY EVENT: {format_event(message)}", **kwargs)


class _ModuleLevelLogger(LoggerMixin):
    """Logger for module-level functions (hooks, DDL, seeding)."""

    def __init__(self, name: str = "bhn"):
        self._logger = logging.getLogger(name)


logger = _ModuleLevelLogger()


def configure_logging(level: str = "INFO") -> None:
    """Install a root handler for command-line entry points."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # SQL echo is controlled by BHN_DATABASE_ECHO, not the root level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
