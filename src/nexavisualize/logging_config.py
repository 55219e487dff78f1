"""
Logging Configuration
=====================
Console (and optional file) output for the `nexavisualize` namespace.

The level comes from, in order: an explicit argument, the `--debug` flag, the
NEXAVISUALIZE_LOG_LEVEL environment variable, then INFO. The rendering stack
(pyvista, pyvistaqt) is held at WARNING unless the app itself runs at DEBUG,
so per-frame actor chatter does not drown the build and training messages.
"""
import logging
import os
import sys
from typing import Mapping, Optional

APP_LOGGER: str = "nexavisualize"
LEVEL_ENV_VAR: str = "NEXAVISUALIZE_LOG_LEVEL"
LIBRARY_LOGGERS: tuple[str, ...] = ("pyvista", "pyvistaqt")


def resolve_level(debug: bool = False, environ: Optional[Mapping[str, str]] = None) -> int:
    """`--debug` wins; otherwise a level name from the environment; otherwise INFO."""
    if debug:
        return logging.DEBUG
    environ = os.environ if environ is None else environ
    name = environ.get(LEVEL_ENV_VAR, "").strip().upper()
    return logging.getLevelNamesMapping().get(name, logging.INFO)


def setup_logging(
    level: Optional[int] = None,
    log_file: Optional[str] = None,
    debug: bool = False,
) -> logging.Logger:
    """
    Configures the 'nexavisualize' logger and quiets the rendering libraries.

    Args:
        level: Explicit logging level; overrides `debug` and the environment.
        log_file: Optional path to also write the log to (overwritten per run).
        debug: Value of the `--debug` command line flag.
    """
    if level is None:
        level = resolve_level(debug)

    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        '%(asctime)s %(levelname)-7s %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    logger.debug(f"Logging at {logging.getLevelName(level)}; rendering libraries at {logging.getLevelName(library_level)}.")
    return logger
