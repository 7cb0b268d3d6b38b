"""Build the machine-readable page index published as JSON.

The index lists every page with just enough metadata for client-side label
routing and for the SEO generators: URL, title, description, labels,
category, ISO date and type.
"""

from __future__ import annotations

import dataclasses as dc
import re
import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt

    from .metadata import PageMetadata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


@dc.dataclass(frozen=True, slots=True)
class PageIndexEntry:
    """Published summary of one page."""

    url: str
    title: str
    description: str
    labels: list[str]
    category: str
    date: str | None
    type: str

    def to_dict(self) -> dict[str, typ.Any]:
        """Return the entry as a JSON-ready mapping."""
        return {
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "labels": list(self.labels),
            "category": self.category,
            "date": self.date,
            "type": self.type,
        }


def generate_label_slug(label: str) -> str:
    """Return a URL-safe slug for ``label``.

    Examples
    --------
    >>> generate_label_slug("  Machine Learning & AI ")
    'machine-learning-ai'
    """
    return _NON_ALNUM.sub("-", label.lower().strip()).strip("-")


def _iso_date(value: dt.date | None) -> str | None:
    return value.isoformat() if value is not None else None


def generate_page_index(
    pages: typ.Iterable[tuple[PageMetadata, str]],
) -> list[PageIndexEntry]:
    """Return one :class:`PageIndexEntry` per ``(metadata, url)`` pair.

    Entries keep the input order.
    """
    return [
        PageIndexEntry(
            url=url,
            title=metadata.title,
            description=metadata.description,
            labels=list(metadata.labels),
            category=metadata.category,
            date=_iso_date(metadata.date),
            type=metadata.type,
        )
        for metadata, url in pages
    ]


__all__ = ["PageIndexEntry", "generate_label_slug", "generate_page_index"]
