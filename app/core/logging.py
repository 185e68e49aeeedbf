# app/core/logging.py
import logging
import sys

from app.core.config import settings

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = None):
    """
    Configure the root logger once. Safe to call again (reloads, tests).
    """
    root = logging.getLogger()
    root.setLevel((level or settings.LOG_LEVEL).upper())

    if any(getattr(h, "_guardianship", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._guardianship = True
    root.addHandler(handler)

    # boto is chatty at INFO
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)
