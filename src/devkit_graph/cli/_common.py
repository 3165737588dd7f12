"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import AnalysisConfig, load_config

console = Console()
err_console = Console(stderr=True)

# Exit codes
EXIT_OK = 0
EXIT_FINDINGS = 1  # blocking anomalies or unresolvable build order
EXIT_USAGE = 2  # bad root path or configuration


def resolve_config(
    root: Path,
    config: Optional[Path] = None,
    namespace: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False,
) -> AnalysisConfig:
    """Build configuration from CLI options."""
    overrides = {}
    if namespace is not None:
        overrides["namespace_prefix"] = namespace
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    return load_config(config_file=config, root=root, **overrides)
