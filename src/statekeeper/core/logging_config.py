import logging
import sys
import os


def setup_logging(level: str = None) -> logging.Logger:
    """Configure the statekeeper logger namespace."""
    log_level = level or os.environ.get("LOG_LEVEL", "INFO")
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    root = logging.getLogger("statekeeper")
    root.setLevel(numeric_level)

    # Calling twice (tests, repeated main()) must not stack handlers
    for existing in list(root.handlers):
        if getattr(existing, "_statekeeper", False):
            root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler._statekeeper = True
    root.addHandler(handler)
    root.propagate = False  # prevent duplicate output via root logger

    return root
