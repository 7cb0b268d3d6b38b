"""Typed dataclasses describing a Flint site build."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

DEFAULT_CSS_FILES: tuple[str, ...] = ()
DEFAULT_JS_FILES: tuple[str, ...] = ()


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class NavItem:
    """A single entry in the top-level navigation bar."""

    label: str
    href: str
    order: int | float = 999
    active: bool = False


@dc.dataclass(slots=True)
class BuildConfig:
    """Everything the site builder needs to turn content into HTML.

    Attributes
    ----------
    content_dir : Path
        Directory scanned recursively for ``*.md`` files.
    output_dir : Path
        Directory that receives the generated site.
    templates_dir : Path | None
        Root theme templates; ``None`` uses the templates shipped with the
        package.
    themes_dir : Path
        Directory holding named theme overlays (``{themes_dir}/{theme}``).
    theme : str
        Overlay applied on top of the root templates unless ``"default"``.
    navigation : list[NavItem] | None
        Manual navigation; ``None`` derives it from top-level pages.
    base_path : str
        URL prefix such as ``/Flint``; empty when the site is served from
        the domain root.
    """

    content_dir: Path
    output_dir: Path
    templates_dir: Path | None = None
    themes_dir: Path = Path("themes")
    theme: str = "default"
    navigation: list[NavItem] | None = None
    default_title: str = "Untitled"
    site_name: str = "Site"
    site_url: str = ""
    site_description: str = ""
    base_path: str = ""
    css_files: list[str] = dc.field(default_factory=lambda: list(DEFAULT_CSS_FILES))
    js_files: list[str] = dc.field(default_factory=lambda: list(DEFAULT_JS_FILES))
    pygments_style: str = "monokai"
    allow_html: bool = True


__all__ = [
    "DEFAULT_CSS_FILES",
    "DEFAULT_JS_FILES",
    "BuildConfig",
    "NavItem",
    "SiteConfigError",
]
