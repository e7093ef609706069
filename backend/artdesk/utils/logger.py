import logging
import os
import sys

_configured = False


def setup_logging():
    global _configured
    if _configured:
        return

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))

    # Leave handlers alone when something (uvicorn, pytest) already installed them
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-7s | %(name)s | %(message)s")
        )
        root.addHandler(handler)

    _configured = True


def get_logger(name: str = None) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)
