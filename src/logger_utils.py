import logging
import sys
import os
from typing import Optional


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name when writing to a terminal"""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',    # cyan
        'INFO': '\033[32m',     # green
        'WARNING': '\033[33m',  # yellow
        'ERROR': '\033[31m',    # red
        'CRITICAL': '\033[35m', # magenta
    }
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[90m'

    def __init__(self, use_colors=True, stream=None):
        super().__init__()
        self.stream = stream if stream is not None else sys.stderr
        self.use_colors = use_colors and self._supports_color()

    def _supports_color(self):
        return (
            hasattr(self.stream, "isatty") and self.stream.isatty() and
            os.environ.get('TERM') != 'dumb' and
            os.environ.get('NO_COLOR') is None
        )

    def format(self, record):
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        if not self.use_colors:
            return f"{self.formatTime(record, '%Y-%m-%d %H:%M:%S')} - {record.levelname} - {message}"

        level_color = self.COLORS.get(record.levelname, '')
        level_name = f"{level_color}{self.BOLD}{record.levelname:<8}{self.RESET}"
        timestamp = f"{self.DIM}{self.formatTime(record, '%H:%M:%S')}{self.RESET}"
        return f"{timestamp} {level_name} {message}"


def setup_logging(verbose: bool = False, no_color: bool = False, log_file: Optional[str] = None):
    """Configure the root logger: colored stderr output plus an optional plain log file"""
    logger = logging.getLogger()

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    level = logging.DEBUG if verbose else logging.INFO
    # the file handler always records DEBUG
    logger.setLevel(logging.DEBUG if log_file else level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ColoredFormatter(use_colors=not no_color, stream=sys.stderr))
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    # web3 and pymongo are noisy at DEBUG
    for noisy in ('web3', 'urllib3', 'pymongo', 'websockets'):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger
