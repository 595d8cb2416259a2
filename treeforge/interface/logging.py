import enum
import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"

_handler: logging.Handler = logging.NullHandler()


class LogLevel(str, enum.Enum):
    """Log levels accepted by the --log-level option."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def setup_logging(level: LogLevel) -> None:
    """Send treeforge logs at the given level (and above) to stderr.

    Calling this again replaces the previous handler instead of adding another one.
    """
    global _handler

    logger = logging.getLogger("treeforge")
    logger.removeHandler(_handler)

    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)
    logger.setLevel(level.value.upper())
