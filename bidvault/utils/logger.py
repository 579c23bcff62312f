"""
Centralized logging configuration for BidVault.

All loggers hang off the "bidvault" namespace (bidvault.auction,
bidvault.storage.sqlite, bidvault.runtime, ...). The console gets colored
output on stderr; a plain-text log file is optional.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

import colorlog

ROOT_LOGGER = "bidvault"
LOG_FILE = "bidvault.log"

_FORMAT = "%(asctime)s [%(name)s] %(levelname)-8s %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


class BidVaultLogger:
    """Configures the bidvault logger tree once per process (or on demand)"""

    _initialized = False

    @staticmethod
    def _handlers(log_dir: Optional[Path]) -> List[logging.Handler]:
        console = colorlog.StreamHandler(sys.stderr)
        console.setFormatter(colorlog.ColoredFormatter(
            "%(log_color)s" + _FORMAT.replace(" %(message)s", "%(reset)s %(message)s"),
            datefmt=_DATE_FORMAT,
            log_colors=_COLORS,
        ))
        handlers: List[logging.Handler] = [console]

        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            to_file = logging.FileHandler(log_dir / LOG_FILE)
            to_file.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
            handlers.append(to_file)

        return handlers

    @classmethod
    def setup(
        cls,
        level: int = logging.INFO,
        log_dir: Optional[str] = None,
        log_to_file: bool = False,
        force: bool = False,
    ):
        """
        Install handlers on the bidvault root logger.

        Args:
            level: Threshold for every handler
            log_dir: Where bidvault.log goes (default ./logs)
            log_to_file: Also write to log_dir/bidvault.log
            force: Replace an existing configuration
        """
        if cls._initialized and not force:
            return

        root = logging.getLogger(ROOT_LOGGER)
        root.setLevel(level)
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()

        file_dir = Path(log_dir or "logs") if log_to_file else None
        for handler in cls._handlers(file_dir):
            handler.setLevel(level)
            root.addHandler(handler)

        cls._initialized = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Logger for a subsystem, e.g. 'auction' or 'storage.sqlite'."""
        if not cls._initialized:
            cls.setup()
        return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def get_logger(name: str) -> logging.Logger:
    return BidVaultLogger.get_logger(name)


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    log_to_file: bool = False,
):
    """(Re)configure logging, e.g. from the CLI once flags are parsed"""
    BidVaultLogger.setup(level=level, log_dir=log_dir, log_to_file=log_to_file, force=True)
