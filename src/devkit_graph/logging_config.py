"""
Logging for devkit-graph.

All modules log under the ``devkit_graph`` logger. Records are rendered to
stderr by a RichHandler so reports, JSON and build scripts on stdout stay
clean. The level follows the configured verbosity (quiet, normal, verbose).
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

_ROOT_LOGGER = "devkit_graph"

_LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}


def verbosity_from_flags(verbose: bool = False, quiet: bool = False) -> str:
    """Map --verbose/--quiet onto a verbosity level. Quiet wins."""
    if quiet:
        return "quiet"
    if verbose:
        return "verbose"
    return "normal"


def setup_logging(verbosity: str = "normal") -> logging.Logger:
    """
    Route devkit-graph logging to stderr at the given verbosity.

    Commands call this twice: once from their flags, so config loading
    itself is logged, and again with the merged ``AnalysisConfig.verbosity``.
    Each call replaces the previous handler.

    Args:
        verbosity: quiet (errors only), normal (warnings) or verbose (debug,
            with source paths and traceback locals)

    Returns:
        The devkit_graph logger

    Raises:
        ValueError: If verbosity is not a known level
    """
    if verbosity not in _LEVELS:
        raise ValueError(f"Unknown verbosity {verbosity!r} (use quiet, normal or verbose)")
    level = _LEVELS[verbosity]
    detailed = verbosity == "verbose"

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=detailed,
        markup=False,
        show_time=detailed,
        show_path=detailed,
    )

    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]", handlers=[handler], force=True
    )

    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger inside the devkit_graph namespace.

    ``__name__`` of any package module passes through unchanged; other names
    are nested under ``devkit_graph``.
    """
    if not name or name == _ROOT_LOGGER:
        return logging.getLogger(_ROOT_LOGGER)
    if not name.startswith(f"{_ROOT_LOGGER}."):
        name = f"{_ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
