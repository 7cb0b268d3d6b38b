"""Shared dataclasses used by the site build pipeline."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt  # noqa: TC003 - used for runtime type metadata
import typing as typ
from pathlib import Path  # noqa: TC003 - used for runtime type metadata

from flint_pages.metadata import DEFAULT_TYPE

if typ.TYPE_CHECKING:
    from flint_pages.config import NavItem
    from flint_pages.metadata import PageMetadata

CURRENCY_SYMBOLS = {"usd": "$", "eur": "€", "gbp": "£"}


@dc.dataclass(frozen=True, slots=True)
class ContentFile:
    """A Markdown file discovered under the content directory.

    Attributes
    ----------
    path : Path
        Absolute or cwd-relative location on disk.
    relative_path : str
        POSIX-style path relative to the content directory; the file's
        identity within a build.
    name : str
        Filename including the ``.md`` suffix.
    """

    path: Path
    relative_path: str
    name: str


def format_price(price_cents: int, currency: str = "") -> str:
    """Return a display price such as ``$14.99``; empty when not priced.

    Examples
    --------
    >>> format_price(1499)
    '$14.99'
    >>> format_price(500, "chf")
    '5.00 CHF'
    >>> format_price(0)
    ''
    """
    if price_cents <= 0:
        return ""
    amount = f"{price_cents / 100:.2f}"
    code = currency.strip().lower() or "usd"
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol is not None:
        return f"{symbol}{amount}"
    return f"{amount} {code.upper()}"


@dc.dataclass(frozen=True, slots=True)
class ChildPageData:
    """Render-ready view of a child page for ``:::children`` listings.

    Commerce fields are populated only for ``type: product`` pages.
    """

    title: str
    url: str
    short_uri: str
    description: str = ""
    date: dt.date | None = None
    category: str = ""
    labels: tuple[str, ...] = ()
    author: str = ""
    type: str = DEFAULT_TYPE
    order: int | float = 999
    price: str = ""
    price_cents: int | None = None
    currency: str = ""
    stripe_price_id: str = ""
    image: str = ""

    @classmethod
    def from_metadata(cls, metadata: PageMetadata, url: str) -> ChildPageData:
        """Build the listing view of ``metadata`` published at ``url``."""
        commerce: dict[str, typ.Any] = {}
        if metadata.is_product:
            commerce = {
                "price": format_price(metadata.price_cents, metadata.currency),
                "price_cents": metadata.price_cents,
                "currency": metadata.currency,
                "stripe_price_id": metadata.stripe_price_id,
                "image": metadata.image,
            }
        return cls(
            title=metadata.title or metadata.short_uri,
            url=url,
            short_uri=metadata.short_uri,
            description=metadata.description,
            date=metadata.date,
            category=metadata.category,
            labels=tuple(metadata.labels),
            author=metadata.author,
            type=metadata.type,
            order=metadata.order,
            **commerce,
        )


@dc.dataclass(frozen=True, slots=True)
class BreadcrumbLink:
    """Breadcrumb entry resolved to a public URL."""

    title: str
    href: str


@dc.dataclass(slots=True)
class TemplateContext:
    """Everything a theme template may reference when rendering one page."""

    title: str
    content: str = ""
    description: str = ""
    keywords: str = ""
    base_path: str = ""
    navigation: list[NavItem] = dc.field(default_factory=list)
    site_labels: list[str] = dc.field(default_factory=list)
    frontmatter: dict[str, typ.Any] = dc.field(default_factory=dict)
    css_files: list[str] = dc.field(default_factory=list)
    js_files: list[str] = dc.field(default_factory=list)
    author: str = ""
    date: dt.date | None = None
    category: str = ""
    labels: list[str] = dc.field(default_factory=list)
    type: str = DEFAULT_TYPE
    url: str = ""
    short_uri: str = ""
    template: str = "default"
    breadcrumbs: list[BreadcrumbLink] = dc.field(default_factory=list)


__all__ = [
    "BreadcrumbLink",
    "ChildPageData",
    "ContentFile",
    "TemplateContext",
    "format_price",
]
