# logger.py
# Logging setup and event helpers

import logging
import os
from datetime import datetime
from typing import Optional

import config

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'

_configured = False


def configure_logging():
    """Configures the root logger once (console, plus a daily file when LOG_DIR is set)"""
    global _configured
    if _configured:
        return
    root = logging.getLogger()
    root.setLevel(getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, '%H:%M:%S'))
    root.addHandler(console_handler)

    if config.LOG_DIR:
        os.makedirs(config.LOG_DIR, exist_ok=True)
        log_path = os.path.join(config.LOG_DIR, f'storefront_{datetime.now().strftime("%Y%m%d")}.log')
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, '%Y-%m-%d %H:%M:%S'))
        root.addHandler(file_handler)

    _configured = True


logger = logging.getLogger("storefront")


def log_event(msg: str):
    """Records an informational event"""
    logger.info(msg)


def log_warning(msg: str):
    logger.warning(msg)


def log_error(msg: str, exc: Optional[Exception] = None):
    """Records an error, with traceback when an exception is given"""
    if exc:
        logger.error(f"{msg}: {exc}", exc_info=exc)
    else:
        logger.error(msg)
