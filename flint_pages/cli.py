"""Cyclopts CLI entrypoint for building Flint sites.

The ``flint`` console script defined here turns a directory of Markdown files
into a static site. Settings come from ``flint.yaml`` when it exists; every
option can also be supplied through an ``INPUT_*`` environment variable so
the command runs unchanged inside CI actions.

Examples
--------
Build the site described by ``flint.yaml`` in the working directory:

>>> from flint_pages.cli import main
>>> main()  # doctest: +SKIP

Build a project page served from ``/Flint`` into a custom folder:

>>> from flint_pages.cli import app
>>> app.run(
...     ["build", "--base-path", "/Flint", "--output-dir", "public"]
... )  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import BuildConfig, load_build_config, normalize_base_path
from .generator import SiteBuilder

DEFAULT_CONFIG = Path("flint.yaml")
DEFAULT_CONTENT_DIR = Path("content")
DEFAULT_OUTPUT_DIR = Path("dist")
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

app = App(name="flint", config=cyclopts.config.Env("INPUT_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _resolve_config(config: Path | None) -> BuildConfig:
    if config is not None:
        return load_build_config(config)
    if DEFAULT_CONFIG.exists():
        return load_build_config(DEFAULT_CONFIG)
    return BuildConfig(content_dir=DEFAULT_CONTENT_DIR, output_dir=DEFAULT_OUTPUT_DIR)


@app.command(help="Build the static site from Markdown content.")
def build(  # noqa: PLR0913
    *,
    config: typ.Annotated[
        Path | None,
        Parameter(help="Path to flint.yaml", env_var="INPUT_CONFIG"),
    ] = None,
    content_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the content folder", env_var="INPUT_CONTENT_DIR"),
    ] = None,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="INPUT_OUTPUT_DIR"),
    ] = None,
    base_path: typ.Annotated[
        str | None,
        Parameter(help="URL prefix such as /Flint", env_var="INPUT_BASE_PATH"),
    ] = None,
    site_url: typ.Annotated[
        str | None,
        Parameter(help="Public site URL for SEO files", env_var="INPUT_SITE_URL"),
    ] = None,
    theme: typ.Annotated[
        str | None,
        Parameter(help="Theme folder under themes_dir", env_var="INPUT_THEME"),
    ] = None,
    verbose: typ.Annotated[
        bool, Parameter(help="Log every written file", env_var="INPUT_VERBOSE")
    ] = False,
) -> None:
    """Build the site and print every written artifact.

    Parameters
    ----------
    config : Path or None, optional
        Path to the YAML configuration. When ``None``, ``flint.yaml`` in the
        working directory is used if present, otherwise built-in defaults
        (``content`` into ``dist``).
    content_dir, output_dir : Path or None, optional
        Override the configured source and destination folders.
    base_path : str or None, optional
        Override the URL prefix; normalized to ``/prefix`` form.
    site_url : str or None, optional
        Override the public URL; enables ``robots.txt``, ``sitemap.xml`` and
        ``llms.txt``.
    theme : str or None, optional
        Override the theme overlaid on the default templates.
    verbose : bool, optional
        Log at DEBUG instead of INFO.

    Raises
    ------
    SiteConfigError
        If the configuration file holds invalid values.
    HierarchyError
        If the content pages do not form a single tree.
    DuplicateUrlError
        If two pages would publish to the same URL.
    InvalidShortUriError
        If a page's ``Short-URI`` would escape the output directory.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT
    )
    site_config = _resolve_config(config)
    overrides: dict[str, typ.Any] = {}
    if content_dir is not None:
        overrides["content_dir"] = content_dir
    if output_dir is not None:
        overrides["output_dir"] = output_dir
    if base_path is not None:
        overrides["base_path"] = normalize_base_path(base_path)
    if site_url is not None:
        overrides["site_url"] = site_url.rstrip("/")
    if theme is not None:
        overrides["theme"] = theme
    if overrides:
        site_config = dc.replace(site_config, **overrides)

    for path in SiteBuilder(site_config).build():
        print(f"wrote {_format_path(path)}")


def main() -> None:
    """Invoke the Cyclopts application that powers the ``flint`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()


__all__ = ["app", "build", "main"]
