"""Process-wide logging setup."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the ``stockroom`` logger tree.

    Safe to call more than once; later calls only adjust the level.
    """
    root = logging.getLogger("stockroom")
    root.setLevel(level.upper())
    if not any(getattr(h, "_stockroom", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._stockroom = True  # type: ignore[attr-defined]
        root.addHandler(handler)
