import logging

from govrelay.config import common_settings as settings

# One named logger for the whole relay
logger = logging.getLogger("govrelay")
logger.setLevel(settings.LOG_LEVEL)
logger.propagate = False  # uvicorn also configures the root logger

if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s.%(module)s: %(message)s"
    ))
    logger.addHandler(handler)
