"""Logging setup for command-line use.

Library modules only create loggers; configuring handlers is left to the
process that embeds the engine.
"""

import logging

LOG_FORMAT = "[%(levelname)s] [%(name)s] %(message)s"


def setup_logging(level: str = "info") -> None:
    """Configure the root logger with the ``[LEVEL] [logger] message`` format.

    Unknown level names fall back to INFO.
    """
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=LOG_FORMAT, force=True)
