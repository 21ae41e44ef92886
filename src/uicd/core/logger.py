"""
Logging configuration module
"""
import sys
import threading
from pathlib import Path
from typing import Dict

from loguru import logger
from .config import settings

_setup_lock = threading.Lock()
_configured = False
# device_id -> loguru sink id
_device_sinks: Dict[str, int] = {}


def _console_stream():
    """Return a usable console stream, or None when running windowed."""
    for stream in (sys.stdout, sys.stderr, sys.__stdout__, sys.__stderr__):
        if stream is not None:
            return stream
    return None


def setup_logger(force: bool = False):
    """Configure loguru sinks.

    Safe to call repeatedly; sinks are only rebuilt when ``force`` is set.
    """
    global _configured
    with _setup_lock:
        if _configured and not force:
            return logger

        logger.remove()
        _device_sinks.clear()

        log_dir = Path(settings.log_path)
        log_dir.mkdir(parents=True, exist_ok=True)

        console_missing = False
        if settings.log_console_enabled:
            stream = _console_stream()
            if stream is not None:
                logger.add(
                    stream,
                    level=settings.log_level,
                    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
                )
            else:
                console_missing = True

        # Global log, rotated daily
        logger.add(
            log_dir / "app_{time:YYYY-MM-DD}.log",
            level=settings.log_level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation=settings.log_rotation,
            retention=f"{settings.log_retention_days} days",
            encoding="utf-8",
            serialize=True,  # one JSON record per line
        )

        # Errors are kept twice as long
        logger.add(
            log_dir / "error_{time:YYYY-MM-DD}.log",
            level="ERROR",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation=settings.log_rotation,
            retention=f"{settings.log_retention_days * 2} days",
            encoding="utf-8",
        )

        _configured = True

    if console_missing:
        logger.warning("No console stream available, logging to files only")
    return logger


def get_device_logger(device_id: str):
    """Return a logger bound to one device, with its own file sink."""
    device_logger = logger.bind(device=device_id)
    with _setup_lock:
        if device_id in _device_sinks:
            return device_logger

        log_dir = Path(settings.log_path) / "devices"
        log_dir.mkdir(parents=True, exist_ok=True)
        safe_name = device_id.replace(":", "_").replace("/", "_")
        _device_sinks[device_id] = logger.add(
            log_dir / f"device_{safe_name}_{{time:YYYY-MM-DD}}.log",
            level=settings.log_level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}",
            rotation=settings.log_rotation,
            retention=f"{settings.log_retention_days} days",
            encoding="utf-8",
            filter=lambda record: record["extra"].get("device") == device_id,
        )
    return device_logger


# Initialise on import
logger = setup_logger()
