"""Build static HTML sites from Markdown with Flint.

This package exposes the CLI entry points used by ``flint build`` to turn a
folder of Markdown pages with YAML frontmatter into a themed static site.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from flint_pages import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
