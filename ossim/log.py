import logging

logger = logging.getLogger("ossim")

LOG_FORMAT = "%(levelname)-7s %(message)s"


# Purpose: Attaches a fresh console handler to the package logger, replacing any
# earlier one so repeated runs write to the current stderr
def setup_logger(verbose=False):
    for old in [h for h in logger.handlers if getattr(h, "_ossim", False)]:
        logger.removeHandler(old)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._ossim = True
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return logger
