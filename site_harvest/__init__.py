"""
SiteHarvest package initializer.
Defines package version and exposes CLI.
"""
__version__ = "0.1.0"

# Expose CLI entry point
from site_harvest.cli import cli  # noqa: E402

__all__ = ["cli", "__version__"]
