"""Logging setup for applications and scripts using the client."""

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging.

    The library itself only creates module loggers; call this from an
    entry point. level defaults to the LOG_LEVEL setting.
    """
    if level is None:
        from .settings import get_settings
        level = get_settings().log_level

    logging.basicConfig(
        format=LOG_FORMAT,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    # Keep SDK request chatter out of INFO output
    for noisy in ("botocore", "boto3", "s3transfer", "urllib3", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
