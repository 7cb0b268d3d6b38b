"""Load site configuration YAML into a :class:`BuildConfig`."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .helpers import (
    _build_nav_items,
    _normalize_files,
    _optional_str,
    _require_mapping,
    normalize_base_path,
)
from .models import DEFAULT_CSS_FILES, DEFAULT_JS_FILES, BuildConfig, SiteConfigError


def load_build_config(path: Path) -> BuildConfig:
    """Load the YAML configuration describing a site build.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``flint.yaml``). Its top-level mapping holds a ``site:`` block.

    Returns
    -------
    BuildConfig
        Parsed build configuration with defaults applied and ``base_path``
        normalized.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    SiteConfigError
        If the ``site`` block or one of its fields is missing or invalid.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from flint_pages.config import load_build_config
    >>> config = load_build_config(Path("flint.yaml"))  # doctest: +SKIP
    >>> config.output_dir  # doctest: +SKIP
    PosixPath('dist')
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    if "site" not in raw:
        msg = f"Configuration file '{path}' has no 'site' block."
        raise SiteConfigError(msg)
    site = _require_mapping(raw.get("site") or {}, "site")
    return _build_config(site)


def _build_config(site: typ.Mapping[str, typ.Any]) -> BuildConfig:
    """Build a BuildConfig from the ``site`` mapping, applying defaults."""
    templates_dir = _optional_str(site.get("templates_dir"))
    css_files = _normalize_files(site.get("css_files"))
    js_files = _normalize_files(site.get("js_files"))
    allow_html = site.get("allow_html", True)
    if not isinstance(allow_html, bool):
        msg = "'allow_html' must be true or false."
        raise SiteConfigError(msg)
    return BuildConfig(
        content_dir=Path(_optional_str(site.get("content_dir")) or "content"),
        output_dir=Path(_optional_str(site.get("output_dir")) or "dist"),
        templates_dir=Path(templates_dir) if templates_dir else None,
        themes_dir=Path(_optional_str(site.get("themes_dir")) or "themes"),
        theme=_optional_str(site.get("theme")) or "default",
        navigation=_build_nav_items(site.get("navigation")),
        default_title=_optional_str(site.get("default_title")) or "Untitled",
        site_name=_optional_str(site.get("site_name")) or "Site",
        site_url=_optional_str(site.get("site_url")) or "",
        site_description=_optional_str(site.get("site_description")) or "",
        base_path=normalize_base_path(site.get("base_path")),
        css_files=list(DEFAULT_CSS_FILES) if css_files is None else css_files,
        js_files=list(DEFAULT_JS_FILES) if js_files is None else js_files,
        pygments_style=_optional_str(site.get("pygments_style")) or "monokai",
        allow_html=allow_html,
    )


__all__ = ["load_build_config"]
