"""Load and validate Flint site configuration.

This subpackage parses the project's ``flint.yaml`` file and produces a
:class:`BuildConfig` that the site builder consumes. The primary entry point
is :func:`load_build_config`, which applies defaults, normalizes the base
path and validates manual navigation entries.

Examples
--------
>>> from pathlib import Path
>>> from flint_pages.config import load_build_config
>>> config = load_build_config(Path("flint.yaml"))  # doctest: +SKIP
>>> config.base_path  # doctest: +SKIP
'/Flint'
"""

from .helpers import normalize_base_path
from .loader import load_build_config
from .models import BuildConfig, NavItem, SiteConfigError

__all__ = [
    "BuildConfig",
    "NavItem",
    "SiteConfigError",
    "load_build_config",
    "normalize_base_path",
]
