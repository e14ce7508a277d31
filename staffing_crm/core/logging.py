"""
Logging setup - stdlib logging configured once from settings.
"""

import logging

from staffing_crm.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=LOG_FORMAT)
    # SQL echo goes through the sqlalchemy.engine logger
    if settings.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
