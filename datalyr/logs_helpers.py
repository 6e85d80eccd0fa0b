import logging

LOG_FORMAT = "%(asctime)s %(name)s => %(message)s"


def enable_debug_logging(name: str = "datalyr") -> logging.Logger:
    """
    Send the client's debug output to stderr.

    Attaches a stream handler to the package logger once, no matter how
    many clients are created with ``debug`` enabled.

    Args:
        name: Logger to configure (default: the package logger)

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)

    if not any(getattr(h, "_datalyr_debug", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._datalyr_debug = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
