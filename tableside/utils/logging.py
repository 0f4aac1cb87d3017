import logging
import sys

from pythonjsonlogger import jsonlogger

_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def setup_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Route every logger to stdout; JSON lines unless ``json_output`` is off."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    if root_logger.handlers:
        root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        formatter = jsonlogger.JsonFormatter(fmt=_FORMAT, datefmt="%Y-%m-%dT%H:%M:%SZ")
    else:
        formatter = logging.Formatter(_FORMAT)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
