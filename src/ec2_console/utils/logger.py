# utils/logger.py
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Dict, Optional

DEFAULT_LOG_DIR = "logs"
LOG_ROTATION_MAX_BYTES = 10 * 1024 * 1024  # 10MB
LOG_BACKUP_COUNT = 5
PACKAGE_LOGGER_PREFIX = "ec2_console"

# Level and directory applied by configure_logging to every package logger
_package_settings: Dict[str, str] = {}


def resolve_log_dir(log_dir: Optional[str] = None) -> Path:
    """Log directory: explicit argument, configured directory, LOG_PATH, then ./logs."""
    return Path(
        log_dir
        or _package_settings.get("log_dir")
        or os.environ.get("LOG_PATH")
        or DEFAULT_LOG_DIR
    )


def _build_file_handler(
    log_path: Path,
    formatter: logging.Formatter,
    enable_rotation: bool = True,
    max_bytes: int = LOG_ROTATION_MAX_BYTES,
    backup_count: int = LOG_BACKUP_COUNT,
) -> logging.Handler:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    if enable_rotation:
        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    else:
        file_handler = logging.FileHandler(log_path, encoding="utf-8")

    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.DEBUG)
    return file_handler


def setup_logger(
    name: str,
    log_file: Optional[str] = None,
    level: str = "INFO",
    enable_rotation: bool = True,
    max_bytes: int = LOG_ROTATION_MAX_BYTES,
    backup_count: int = LOG_BACKUP_COUNT,
    log_dir: Optional[str] = None,
) -> logging.Logger:
    """Setup a module logger with console output and a rotating log file.

    Calling it again for the same name only adjusts the level, so modules
    can create their logger at import time and the CLI can raise verbosity
    later. Once configure_logging has run, its level wins for package
    loggers.
    """
    if name.startswith(PACKAGE_LOGGER_PREFIX) and "level" in _package_settings:
        level = _package_settings["level"]

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(logging.INFO)
    logger.addHandler(stream_handler)

    if log_file:
        log_path = resolve_log_dir(log_dir) / log_file
        try:
            logger.addHandler(
                _build_file_handler(log_path, formatter, enable_rotation, max_bytes, backup_count)
            )
        except OSError as e:
            logger.warning(
                f"Failed to create log file {log_path}: {e}. Logging to console only."
            )

    logger.propagate = False

    return logger


def configure_logging(level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """Apply one level and log directory to every ``ec2_console`` logger.

    Loggers created before the call are updated in place (their log files
    move to ``log_dir``); loggers created afterwards pick the settings up
    through setup_logger.
    """
    _package_settings["level"] = level
    if log_dir:
        _package_settings["log_dir"] = str(log_dir)
    target_dir = resolve_log_dir()

    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if not isinstance(logger, logging.Logger) or not name.startswith(PACKAGE_LOGGER_PREFIX):
            continue
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))

        for handler in list(logger.handlers):
            if not isinstance(handler, logging.FileHandler):
                continue
            current = Path(handler.baseFilename)
            if current.parent == target_dir.resolve():
                continue
            try:
                if isinstance(handler, logging.handlers.RotatingFileHandler):
                    replacement = _build_file_handler(
                        target_dir / current.name,
                        handler.formatter,
                        max_bytes=handler.maxBytes,
                        backup_count=handler.backupCount,
                    )
                else:
                    replacement = _build_file_handler(
                        target_dir / current.name, handler.formatter, enable_rotation=False
                    )
            except OSError as e:
                logger.warning(f"Unable to move {current.name} to {target_dir}: {e}")
                continue
            logger.removeHandler(handler)
            handler.close()
            logger.addHandler(replacement)
