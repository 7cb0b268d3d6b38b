"""Generate ``robots.txt``, ``sitemap.xml`` and ``llms.txt`` for a built site.

All three are derived from the page index. Label index pages live under
``{base_path}/label/`` and are navigation helpers rather than canonical
content, so they are left out of the sitemap and ``llms.txt``.
"""

from __future__ import annotations

import typing as typ
from xml.sax.saxutils import escape

if typ.TYPE_CHECKING:
    from .page_index import PageIndexEntry

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"
UNCATEGORISED = "Docs"


def _clean_site_url(site_url: str) -> str:
    return site_url.rstrip("/")


def _canonical_entries(
    entries: typ.Iterable[PageIndexEntry], base_path: str
) -> list[PageIndexEntry]:
    label_prefix = f"{base_path}/label/"
    return [entry for entry in entries if not entry.url.startswith(label_prefix)]


def generate_robots_txt(site_url: str, base_path: str = "") -> str:
    """Return a permissive ``robots.txt`` pointing at the sitemap."""
    lines = [
        "User-agent: *",
        "Allow: /",
        "",
        f"Sitemap: {_clean_site_url(site_url)}{base_path}/sitemap.xml",
        "",
    ]
    return "\n".join(lines)


def generate_sitemap(
    entries: typ.Iterable[PageIndexEntry], site_url: str, base_path: str = ""
) -> str:
    """Return a ``sitemap.xml`` document listing every canonical page.

    Entry URLs already carry ``base_path``; it is only used here to
    recognise label pages.
    """
    root_url = _clean_site_url(site_url)
    blocks: list[str] = []
    for entry in _canonical_entries(entries, base_path):
        lastmod = f"\n    <lastmod>{entry.date}</lastmod>" if entry.date else ""
        loc = escape(f"{root_url}{entry.url}")
        blocks.append(f"  <url>\n    <loc>{loc}</loc>{lastmod}\n  </url>")
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<urlset xmlns="{SITEMAP_NAMESPACE}">',
        *blocks,
        "</urlset>",
        "",
    ]
    return "\n".join(lines)


def _link_line(entry: PageIndexEntry, root_url: str) -> str:
    description = f": {entry.description}" if entry.description else ""
    return f"- [{entry.title}]({root_url}{entry.url}){description}"


def generate_llms_txt(
    entries: typ.Iterable[PageIndexEntry],
    site_url: str,
    base_path: str = "",
    site_name: str = "Site",
    site_description: str = "",
) -> str:
    """Return an ``llms.txt`` summary of the site.

    Pages are grouped into one ``##`` section per category, in first-seen
    order, with uncategorised pages under ``Docs``. Posts are collected in a
    trailing ``## Optional`` section.
    """
    root_url = _clean_site_url(site_url)
    canonical = _canonical_entries(entries, base_path)
    posts = [entry for entry in canonical if entry.type == "post"]
    groups: dict[str, list[PageIndexEntry]] = {}
    for entry in canonical:
        if entry.type == "post":
            continue
        groups.setdefault(entry.category or UNCATEGORISED, []).append(entry)

    lines = [f"# {site_name}", ""]
    if site_description:
        lines.extend([f"> {site_description}", ""])
    for category, grouped in groups.items():
        lines.extend([f"## {category}", ""])
        lines.extend(_link_line(entry, root_url) for entry in grouped)
        lines.append("")
    if posts:
        lines.extend(["## Optional", ""])
        lines.extend(_link_line(entry, root_url) for entry in posts)
        lines.append("")
    return "\n".join(lines)


__all__ = ["generate_llms_txt", "generate_robots_txt", "generate_sitemap"]
