import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level=logging.INFO, stream=None):
    """Route the package's log records to a stream handler."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("taskgraph")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if getattr(handler, "_taskgraph_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._taskgraph_handler = True
    logger.addHandler(handler)
    return logger
