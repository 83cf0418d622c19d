import logging
import sys

from diffset.config.settings import settings


def setup_logging(level: str | None = None):
    """
    Configures the application's logging settings.
    """
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )
