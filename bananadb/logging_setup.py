import logging
from bananadb.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"

def configure_logging(level: str | None = None):
    level = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(format=LOG_FORMAT, level=getattr(logging, level, logging.INFO))
    # httpx logs every request at INFO, including provider URLs
    logging.getLogger("httpx").setLevel(logging.WARNING)
