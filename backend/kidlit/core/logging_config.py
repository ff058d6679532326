import logging
import sys

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"

_HANDLER_NAME = "kidlit"


def setup_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the root logger.

    Safe to call more than once; repeated calls only adjust the level.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())
    # httpx logs full request URLs at INFO, which would include the API key.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    if any(handler.get_name() == _HANDLER_NAME for handler in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
