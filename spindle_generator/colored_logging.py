"""
Colored logging for Spindle Generator.

Console output gets a color per level, and INFO/DEBUG messages that report
progress, results or findings of a generation run get their own accents.
"""

import logging
import sys
from typing import IO, Optional


class ColoredFormatter(logging.Formatter):
    """
    Logging formatter that adds ANSI color codes to log messages.

    Errors and warnings always take their level color; informational messages
    are colored by what they report.
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }

    SPECIAL_COLORS = {
        'success': '\033[92m',    # Bright Green
        'progress': '\033[94m',   # Bright Blue
        'highlight': '\033[96m',  # Bright Cyan
    }

    RESET = '\033[0m'
    BOLD = '\033[1m'

    SUCCESS_MARKERS = ('✓', 'complete', 'written', 'rendered', 'generated', 'passed')
    PROGRESS_MARKERS = ('→', 'generating', 'loading', 'fetching', 'checking', 'starting')
    HIGHLIGHT_MARKERS = ('•', 'found', 'skipping', 'dry run', 'suggest')

    def __init__(self, fmt: Optional[str] = None, use_colors: bool = True, stream: IO = None):
        """
        Initialize the colored formatter.

        Args:
            fmt: Log format string (uses default if None)
            use_colors: Whether to use colors; ignored when the stream is not a TTY
            stream: Stream the handler writes to (default: stderr)
        """
        if fmt is None:
            fmt = "%(levelname)s: %(message)s"
        super().__init__(fmt)

        stream = stream or sys.stderr
        self.use_colors = use_colors and hasattr(stream, 'isatty') and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        if not self.use_colors:
            return formatted

        color = self.color_for(record)
        if not color:
            return formatted
        return f"{color}{formatted}{self.RESET}"

    def color_for(self, record: logging.LogRecord) -> str:
        """Escape sequence for a record, or an empty string for plain output."""
        if record.levelname in ('ERROR', 'CRITICAL', 'WARNING'):
            return self.COLORS[record.levelname]

        message = record.getMessage().lower()
        if self._matches(message, self.SUCCESS_MARKERS):
            return self.SPECIAL_COLORS['success'] + self.BOLD
        if self._matches(message, self.PROGRESS_MARKERS):
            return self.SPECIAL_COLORS['progress']
        if self._matches(message, self.HIGHLIGHT_MARKERS):
            return self.SPECIAL_COLORS['highlight']
        if self._is_section_message(message):
            return self.BOLD + self.SPECIAL_COLORS['highlight']
        if record.levelname == 'DEBUG':
            return self.COLORS['DEBUG']
        return ''

    @staticmethod
    def _matches(message: str, markers) -> bool:
        return any(marker in message for marker in markers)

    @staticmethod
    def _is_section_message(message: str) -> bool:
        return '=' in message and len(message.strip()) > 20


def setup_colored_logging(level: int = logging.INFO, use_colors: bool = True, stream: IO = None) -> None:
    """
    Route all logging through one colored console handler.

    Args:
        level: Logging level (default: INFO)
        use_colors: Whether to use colors (default: True)
        stream: Output stream (default: stderr)
    """
    stream = stream or sys.stderr
    formatter = ColoredFormatter(use_colors=use_colors, stream=stream)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(stream)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)

    root_logger.addHandler(console_handler)
    root_logger.setLevel(level)


def get_colored_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_success(logger: logging.Logger, message: str) -> None:
    logger.info(f"✓ {message}")


def log_progress(logger: logging.Logger, message: str) -> None:
    logger.info(f"→ {message}")


def log_highlight(logger: logging.Logger, message: str) -> None:
    logger.info(f"• {message}")


def log_section(logger: logging.Logger, section_name: str) -> None:
    """Log a section header framed by separator lines."""
    separator = "=" * 60
    logger.info(separator)
    logger.info(f"  {section_name.upper()}")
    logger.info(separator)
