import logging

logger = logging.getLogger("esodm")


def warn(message: str, *args) -> None:
    logger.warning(message, *args)


def debug(message: str, *args) -> None:
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(message, *args)
