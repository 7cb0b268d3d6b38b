"""Prefix site-absolute links in rendered HTML with the configured base path.

Sites served from a sub-path (for example a project page at ``/Flint``) need
every ``href="/..."`` and ``src="/..."`` to carry that prefix. Rewriting runs
over the complete rendered page so links written by hand in theme templates
are handled the same way as links produced from Markdown.

Examples
--------
>>> from flint_pages.generator.link_rewriter import rewrite_absolute_paths
>>> rewrite_absolute_paths('<a href="/about">About</a>', "/Flint")
'<a href="/Flint/about">About</a>'
>>> rewrite_absolute_paths('<a href="/Flint/about">About</a>', "/Flint")
'<a href="/Flint/about">About</a>'
"""

from __future__ import annotations

import re

from flint_pages.config.helpers import normalize_base_path

PATH_ATTRIBUTES = ("href", "src", "hx-get", "hx-post", "hx-put", "hx-delete", "hx-patch")
ABSOLUTE_PATH_PATTERN = re.compile(
    r"(?<![\w-])(?P<attr>" + "|".join(re.escape(attr) for attr in PATH_ATTRIBUTES) + r")"
    r"(?P<eq>\s*=\s*)(?P<quote>['\"])(?P<path>/(?!/)[^'\"]*)(?P=quote)"
)


def _already_prefixed(path: str, base_path: str) -> bool:
    if path == base_path:
        return True
    if not path.startswith(base_path):
        return False
    return path[len(base_path)] in "/?#"


def rewrite_absolute_paths(html: str, base_path: str) -> str:
    """Return ``html`` with site-absolute attribute values under ``base_path``.

    Parameters
    ----------
    html : str
        A rendered page or fragment.
    base_path : str
        Normalized prefix such as ``/Flint``. An empty value returns
        ``html`` unchanged.

    Notes
    -----
    External URLs, protocol-relative URLs (``//cdn...``), fragments and
    relative paths are never touched, and values already under
    ``base_path`` are left alone so rewriting twice changes nothing.
    """
    if not base_path:
        return html

    def _repl(match: re.Match[str]) -> str:
        path = match.group("path")
        if _already_prefixed(path, base_path):
            return match.group(0)
        quote = match.group("quote")
        return f"{match.group('attr')}{match.group('eq')}{quote}{base_path}{path}{quote}"

    return ABSOLUTE_PATH_PATTERN.sub(_repl, html)


__all__ = [
    "ABSOLUTE_PATH_PATTERN",
    "PATH_ATTRIBUTES",
    "normalize_base_path",
    "rewrite_absolute_paths",
]
