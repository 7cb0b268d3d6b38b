"""High-level orchestration for building a static site from Markdown.

:class:`SiteBuilder` consumes a :class:`~flint_pages.config.BuildConfig`,
scans the content directory, validates the page hierarchy, renders every
page through the theme templates and writes the result together with the
page index, label index pages, the product index and, when a site URL is
configured, ``robots.txt``, ``sitemap.xml`` and ``llms.txt``.

The page's ``Short-URI`` (not its location on disk) decides where it is
published, so a deeply nested source file can live at a shallow URL. The
file ``index.md`` at the content root is always the site root.

Example
-------
>>> from pathlib import Path
>>> from flint_pages.config import BuildConfig
>>> from flint_pages.generator import SiteBuilder
>>> config = BuildConfig(content_dir=Path("content"), output_dir=Path("dist"))
>>> SiteBuilder(config).build()  # doctest: +SKIP
[PosixPath('dist/index.html'), ...]
"""

from __future__ import annotations

import dataclasses as dc
import json
import logging
import posixpath
import typing as typ
from pathlib import Path

from flint_pages.components import PartialRenderer, default_registry
from flint_pages.config import NavItem, normalize_base_path
from flint_pages.frontmatter import FRONTMATTER_PATTERN, parse_frontmatter
from flint_pages.hierarchy import build_page_hierarchy, generate_breadcrumbs
from flint_pages.metadata import (
    ROOT_PARENT,
    MetadataError,
    PageMetadata,
    metadata_from_path,
    parse_page_metadata,
    slug_from_path,
)
from flint_pages.page_index import (
    PageIndexEntry,
    generate_label_slug,
    generate_page_index,
)
from flint_pages.seo import generate_llms_txt, generate_robots_txt, generate_sitemap

from .children import EPOCH, process_children_directives
from .link_rewriter import rewrite_absolute_paths
from .models import BreadcrumbLink, ChildPageData, ContentFile, TemplateContext
from .renderer import MarkdownCompiler
from .template_registry import (
    TemplateRegistry,
    load_templates_from_dir,
    overlay_templates_from_dir,
)

if typ.TYPE_CHECKING:
    from flint_pages.components import ComponentRegistry
    from flint_pages.config import BuildConfig
    from flint_pages.frontmatter import FrontmatterData
    from flint_pages.hierarchy import PageNode

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates" / "theme"
SITE_ROOT_FILE = "index.md"
PAGE_INDEX_PATH = Path("fragments") / "page-index.json"
PRODUCTS_INDEX_PATH = Path("static") / "products" / "index.json"
LABEL_DIR = "label"
LABEL_PAGE_THRESHOLD = 2


class DuplicateUrlError(ValueError):
    """Raised when two content files would publish to the same URL."""


class InvalidShortUriError(ValueError):
    """Raised when a page's slug cannot be used as a path under the output."""


def page_slug(relative_path: str, short_uri: str) -> str:
    """Return the normalized slug a page publishes under.

    Leading and trailing slashes are dropped and ``.`` segments collapse, so
    ``/about``, ``./about`` and ``about/`` all publish as ``about``.

    Raises
    ------
    InvalidShortUriError
        If the slug is empty or climbs out of the output directory.

    Examples
    --------
    >>> page_slug("about.md", "./docs//about/")
    'docs/about'
    """
    raw = short_uri or slug_from_path(relative_path)
    stripped = raw.strip().strip("/")
    slug = posixpath.normpath(stripped) if stripped else ""
    if not slug or any(part in ("", ".", "..") for part in slug.split("/")):
        msg = (
            f"{relative_path}: Short-URI {raw!r} does not name a path "
            "inside the output directory"
        )
        raise InvalidShortUriError(msg)
    return slug


def output_path_for(relative_path: str, short_uri: str) -> str:
    """Return the output path, relative to the output directory, for a page.

    Examples
    --------
    >>> output_path_for("blog/post.md", "my-post")
    'my-post/index.html'
    >>> output_path_for("blog/index.md", "")
    'blog/index.html'
    >>> output_path_for("index.md", "home")
    'index.html'
    """
    if relative_path == SITE_ROOT_FILE:
        return "index.html"
    return f"{page_slug(relative_path, short_uri)}/index.html"


def url_path_for(relative_path: str, short_uri: str) -> str:
    """Return the public URL path (without base path) for a page.

    Examples
    --------
    >>> url_path_for("blog/post.md", "my-post")
    '/my-post'
    >>> url_path_for("index.md", "home")
    '/'
    """
    if relative_path == SITE_ROOT_FILE:
        return "/"
    return f"/{page_slug(relative_path, short_uri)}"


@dc.dataclass(slots=True)
class _SourcePage:
    """A content file with its metadata, body and publishing location."""

    file: ContentFile
    metadata: PageMetadata
    data: FrontmatterData
    body: str
    url: str
    output_path: str

    @property
    def is_site_root(self) -> bool:
        return self.file.relative_path == SITE_ROOT_FILE


@dc.dataclass(slots=True)
class _LabelGroup:
    """Pages sharing one label slug."""

    label: str
    pages: list[_SourcePage] = dc.field(default_factory=list)


class SiteBuilder:
    """Scan content, render each page through the theme and write the site."""

    def __init__(
        self,
        config: BuildConfig,
        registry: ComponentRegistry | None = None,
        *,
        partials: PartialRenderer | None = None,
    ) -> None:
        """Initialize the builder and load theme templates.

        Parameters
        ----------
        config : BuildConfig
            Build settings: directories, theme, base path and site metadata.
        registry : ComponentRegistry, optional
            Components available to ``{{tag}}`` placeholders; defaults to
            :func:`~flint_pages.components.default_registry`.
        partials : PartialRenderer, optional
            Renderer for built-in fragments; defaults to the packaged
            partials.
        """
        self.config = config
        self.base_path = normalize_base_path(config.base_path)
        self.partials = partials or PartialRenderer()
        self.registry = (
            registry if registry is not None else default_registry(self.partials)
        )
        self.compiler = MarkdownCompiler(
            self.registry, config.pygments_style, allow_html=config.allow_html
        )
        self.templates = self._load_templates()

    def _load_templates(self) -> TemplateRegistry:
        templates_dir = self.config.templates_dir or DEFAULT_TEMPLATES_DIR
        registry = load_templates_from_dir(
            templates_dir, TemplateRegistry(self.registry, self.partials)
        )
        if self.config.theme != "default":
            overlay_templates_from_dir(
                self.config.themes_dir / self.config.theme, registry
            )
        return registry

    def scan_content(self) -> list[ContentFile]:
        """Return every ``*.md`` file under the content directory, sorted."""
        content_dir = self.config.content_dir
        if not content_dir.is_dir():
            logger.warning("Content directory %s does not exist", content_dir)
            return []
        return [
            ContentFile(
                path=path,
                relative_path=path.relative_to(content_dir).as_posix(),
                name=path.name,
            )
            for path in sorted(content_dir.rglob("*.md"))
            if path.is_file()
        ]

    def build(self) -> list[Path]:
        """Build the whole site.

        Returns
        -------
        list[Path]
            Every file written, pages first in scan order followed by the
            page index, label pages, product index and SEO files.

        Raises
        ------
        DuplicateUrlError
            If two files publish to the same URL or share a ``Short-URI``.
        InvalidShortUriError
            If a ``Short-URI`` does not name a path inside the output directory.
        HierarchyError
            If the parent pointers do not form a single tree.
        DirectiveError
            If a ``:::children`` block carries a malformed option.
        TemplateNotFoundError
            If the theme has no ``default`` template to fall back to.
        """
        self.config.output_dir.mkdir(parents=True, exist_ok=True)
        pages = [self._load_page(file) for file in self.scan_content()]
        self._check_unique_urls(pages)
        tree = self._validate_hierarchy(pages)

        navigation = self._build_navigation(pages)
        children_map = self._build_children_map(pages)
        site_labels = sorted(
            {label for page in pages for label in page.metadata.labels}
        )
        urls = {page.metadata.short_uri: page.url for page in pages}
        home = next((page for page in pages if page.is_site_root), None)

        written: list[Path] = []
        for page in pages:
            breadcrumbs = self._breadcrumbs(tree, page, urls, home)
            context = self._page_context(page, navigation, site_labels, breadcrumbs)
            context.content = self._compile_page(page, children_map)
            html = self.templates.render(page.metadata.template, context)
            html = rewrite_absolute_paths(html, self.base_path)
            written.append(self._write(page.output_path, html))

        entries = generate_page_index(
            (page.metadata, self._public_url(page.url)) for page in pages
        )
        index = [entry.to_dict() for entry in entries]
        written.append(self._write_json(PAGE_INDEX_PATH, index))
        written.extend(self._write_label_pages(pages, navigation, site_labels))
        products = self._write_product_index(pages)
        if products is not None:
            written.append(products)
        written.extend(self._write_seo(entries))
        return written

    def _load_page(self, file: ContentFile) -> _SourcePage:
        text = file.path.read_text(encoding="utf-8")
        relative_path = file.relative_path
        try:
            metadata = parse_page_metadata(text, relative_path)
        except MetadataError as exc:
            logger.warning("%s; using filename-derived metadata", exc)
            metadata = metadata_from_path(relative_path)
            header = FRONTMATTER_PATTERN.match(text)
            data: FrontmatterData = {}
            body = text[header.end() :] if header else text
        else:
            parsed = parse_frontmatter(text)
            data, body = parsed.data, parsed.content
        return _SourcePage(
            file=file,
            metadata=metadata,
            data=data,
            body=body,
            url=url_path_for(relative_path, metadata.short_uri),
            output_path=output_path_for(relative_path, metadata.short_uri),
        )

    @staticmethod
    def _check_unique_urls(pages: typ.Sequence[_SourcePage]) -> None:
        seen_urls: dict[str, str] = {}
        seen_uris: dict[str, str] = {}
        for page in pages:
            source = page.file.relative_path
            for seen, key, kind in (
                (seen_urls, page.url, "URL"),
                (seen_uris, page.metadata.short_uri, "Short-URI"),
            ):
                if key in seen:
                    msg = f"Duplicate {kind} '{key}' used by {seen[key]} and {source}"
                    raise DuplicateUrlError(msg)
                seen[key] = source

    def _validate_hierarchy(self, pages: typ.Sequence[_SourcePage]) -> PageNode | None:
        """Build the page tree, hanging top-level pages off a ``root`` node.

        A synthetic ``root`` page is added unless a content page already owns
        that ``Short-URI``; pages without a parent become its children.
        """
        if not pages:
            return None
        owns_root = any(page.metadata.short_uri == ROOT_PARENT for page in pages)
        nodes: list[PageMetadata] = []
        if not owns_root:
            nodes.append(
                PageMetadata(short_uri=ROOT_PARENT, title=self.config.site_name)
            )
        for page in pages:
            metadata = page.metadata
            if metadata.short_uri == ROOT_PARENT:
                metadata = dc.replace(metadata, parent=None)
            elif metadata.parent in (None, ""):
                metadata = dc.replace(metadata, parent=ROOT_PARENT)
            nodes.append(metadata)
        return build_page_hierarchy(nodes)

    def _build_navigation(self, pages: typ.Sequence[_SourcePage]) -> list[NavItem]:
        if self.config.navigation is not None:
            return [dc.replace(item, active=False) for item in self.config.navigation]
        items = [
            NavItem(
                label=page.metadata.title or page.metadata.short_uri,
                href=page.url,
                order=page.metadata.order,
            )
            for page in pages
            if page.metadata.is_top_level and page.metadata.short_uri != ROOT_PARENT
        ]
        items.sort(key=lambda item: (item.order, item.label))
        return items

    @staticmethod
    def _build_children_map(
        pages: typ.Sequence[_SourcePage],
    ) -> dict[str, list[ChildPageData]]:
        children: dict[str, list[ChildPageData]] = {}
        for page in pages:
            metadata = page.metadata
            if metadata.short_uri == ROOT_PARENT:
                continue
            parent = (
                ROOT_PARENT if metadata.is_top_level else typ.cast("str", metadata.parent)
            )
            children.setdefault(parent, []).append(
                ChildPageData.from_metadata(metadata, page.url)
            )
        return children

    def _children_for(
        self, page: _SourcePage, children_map: typ.Mapping[str, list[ChildPageData]]
    ) -> list[ChildPageData]:
        short_uri = page.metadata.short_uri
        children = list(children_map.get(short_uri, []))
        if page.is_site_root and short_uri != ROOT_PARENT:
            children.extend(
                child
                for child in children_map.get(ROOT_PARENT, [])
                if child.short_uri != short_uri
            )
        return children

    def _compile_page(
        self, page: _SourcePage, children_map: typ.Mapping[str, list[ChildPageData]]
    ) -> str:
        body = process_children_directives(
            page.body, self._children_for(page, children_map)
        )
        return self.compiler.compile(body, page.data)

    def _breadcrumbs(
        self,
        tree: PageNode | None,
        page: _SourcePage,
        urls: typ.Mapping[str, str],
        home: _SourcePage | None,
    ) -> list[BreadcrumbLink]:
        crumbs = [
            BreadcrumbLink(title=item.title, href=urls[item.short_uri])
            for item in generate_breadcrumbs(tree, page.metadata.short_uri)
            if item.short_uri in urls
        ]
        if home is not None and (not crumbs or crumbs[0].href != home.url):
            title = home.metadata.title or "Home"
            crumbs.insert(0, BreadcrumbLink(title=title, href=home.url))
        return crumbs

    def _page_context(
        self,
        page: _SourcePage,
        navigation: typ.Sequence[NavItem],
        site_labels: list[str],
        breadcrumbs: list[BreadcrumbLink],
    ) -> TemplateContext:
        metadata = page.metadata
        return TemplateContext(
            title=metadata.title or self.config.default_title,
            description=metadata.description or self.config.site_description,
            keywords=", ".join(metadata.keywords),
            base_path=self.base_path,
            navigation=[
                dc.replace(item, active=item.href == page.url) for item in navigation
            ],
            site_labels=site_labels,
            frontmatter=page.data,
            css_files=list(self.config.css_files),
            js_files=list(self.config.js_files),
            author=metadata.author,
            date=metadata.date,
            category=metadata.category,
            labels=list(metadata.labels),
            type=metadata.type,
            url=page.url,
            short_uri=metadata.short_uri,
            template=metadata.template,
            breadcrumbs=breadcrumbs,
        )

    def _public_url(self, url: str) -> str:
        return f"{self.base_path}{url}"

    def _group_labels(self, pages: typ.Sequence[_SourcePage]) -> dict[str, _LabelGroup]:
        groups: dict[str, _LabelGroup] = {}
        for page in pages:
            for label in page.metadata.labels:
                slug = generate_label_slug(label)
                if not slug:
                    continue
                group = groups.setdefault(slug, _LabelGroup(label=label))
                if group.label != label:
                    logger.warning(
                        "Labels %r and %r share slug %r; merging their pages",
                        group.label,
                        label,
                        slug,
                    )
                if page not in group.pages:
                    group.pages.append(page)
        return groups

    def _write_label_pages(
        self,
        pages: typ.Sequence[_SourcePage],
        navigation: typ.Sequence[NavItem],
        site_labels: list[str],
    ) -> list[Path]:
        written: list[Path] = []
        for slug, group in self._group_labels(pages).items():
            if len(group.pages) < LABEL_PAGE_THRESHOLD:
                continue
            tagged = sorted(
                group.pages,
                key=lambda page: page.metadata.date or EPOCH,
                reverse=True,
            )
            listing = [
                {
                    "url": page.url,
                    "title": page.metadata.title or page.metadata.short_uri,
                    "description": page.metadata.description,
                    "category": page.metadata.category,
                    "date": page.metadata.date.isoformat() if page.metadata.date else None,
                }
                for page in tagged
            ]
            url = f"/{LABEL_DIR}/{slug}"
            context = TemplateContext(
                title=f"Label: {group.label}",
                content=self.partials.label_index(group.label, listing),
                description=f'All pages tagged with "{group.label}"',
                base_path=self.base_path,
                navigation=[dc.replace(item, active=False) for item in navigation],
                site_labels=site_labels,
                css_files=list(self.config.css_files),
                js_files=list(self.config.js_files),
                url=url,
                short_uri=f"{LABEL_DIR}/{slug}",
                type="index",
            )
            html = self.templates.render("default", context)
            written.append(
                self._write(
                    f"{LABEL_DIR}/{slug}/index.html",
                    rewrite_absolute_paths(html, self.base_path),
                )
            )
        return written

    def _write_product_index(self, pages: typ.Sequence[_SourcePage]) -> Path | None:
        products = {
            page.metadata.short_uri: {
                "id": page.metadata.short_uri,
                "title": page.metadata.title,
                "price_cents": page.metadata.price_cents,
                "currency": page.metadata.currency,
                "stripe_price_id": page.metadata.stripe_price_id,
                "stripe_payment_link": page.metadata.stripe_payment_link,
                "image": page.metadata.image,
            }
            for page in pages
            if page.metadata.is_product
        }
        if not products:
            return None
        return self._write_json(PRODUCTS_INDEX_PATH, products)

    def _write_seo(self, entries: typ.Sequence[PageIndexEntry]) -> list[Path]:
        site_url = self.config.site_url
        if not site_url:
            return []
        return [
            self._write("robots.txt", generate_robots_txt(site_url, self.base_path)),
            self._write(
                "sitemap.xml", generate_sitemap(entries, site_url, self.base_path)
            ),
            self._write(
                "llms.txt",
                generate_llms_txt(
                    entries,
                    site_url,
                    self.base_path,
                    site_name=self.config.site_name,
                    site_description=self.config.site_description,
                ),
            ),
        ]

    def _write_json(self, relative: Path, payload: object) -> Path:
        return self._write(str(relative), json.dumps(payload, indent=2) + "\n")

    def _write(self, relative: str, text: str) -> Path:
        path = self.config.output_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        logger.debug("wrote %s", path)
        return path


__all__ = [
    "DEFAULT_TEMPLATES_DIR",
    "PAGE_INDEX_PATH",
    "PRODUCTS_INDEX_PATH",
    "DuplicateUrlError",
    "InvalidShortUriError",
    "SiteBuilder",
    "output_path_for",
    "page_slug",
    "url_path_for",
]
