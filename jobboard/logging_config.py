import logging

from jobboard import config

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = None) -> None:
    """Set up root logging once; later calls only adjust the level."""
    level = level or config.LOG_LEVEL
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root.setLevel(level)
