import logging
import sys

RECORD_FORMAT = '%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s'


class MainFormatter(logging.Formatter):
    """Formats library records normally and prints child process output as-is."""

    def __init__(self):
        super().__init__()
        self._record_formatter = logging.Formatter(RECORD_FORMAT)

    def format(self, record):
        # Lines forwarded from Xvfb/x11vnc are tagged with the child's name only.
        if record.name.startswith('proc.'):
            return f"[{record.name[len('proc.'):]}] {record.getMessage()}"
        return self._record_formatter.format(record)


def setup_logging(console_level: int = logging.INFO) -> None:
    """
    Configures the root logger for a host application.
    Clears any previously configured handlers to prevent duplication.

    :param console_level: The logging level for the console output (e.g., logging.INFO).
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(MainFormatter())
    root_logger.addHandler(console_handler)
