"""Assemble flat page metadata into a single-rooted page tree.

Pages point at their parent by ``short_uri``. The builder indexes every page
by URI, groups children under their parent, and validates the structure in a
fixed order: orphans first, then the root count, then cycles. Each failure
raises a dedicated :class:`HierarchyError` subclass whose message names the
offending pages.

Examples
--------
>>> from flint_pages.hierarchy import build_page_hierarchy, flatten_tree
>>> from flint_pages.metadata import PageMetadata
>>> tree = build_page_hierarchy(
...     [
...         PageMetadata(short_uri="home", title="Home"),
...         PageMetadata(short_uri="blog", title="Blog", parent="home"),
...     ]
... )
>>> [node.short_uri for node in flatten_tree(tree)]
['home', 'blog']
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from .metadata import ROOT_PARENT, PageMetadata


class HierarchyError(ValueError):
    """Base class for structural problems in the page tree."""


class OrphanedPageError(HierarchyError):
    """Raised when a page names a parent that does not exist."""


class NoRootError(HierarchyError):
    """Raised when no page qualifies as the tree root."""


class MultipleRootsError(HierarchyError):
    """Raised when more than one page qualifies as the tree root."""


class CircularReferenceError(HierarchyError):
    """Raised when parent pointers form a cycle."""


class PageNotFoundError(LookupError):
    """Raised when a query names a page absent from the tree."""


@dc.dataclass(slots=True)
class PageNode:
    """A page's metadata together with its ordered child nodes."""

    metadata: PageMetadata
    children: list[PageNode] = dc.field(default_factory=list)

    @property
    def short_uri(self) -> str:
        """Return the node's identifying ``short_uri``."""
        return self.metadata.short_uri

    @property
    def title(self) -> str:
        """Return the page title."""
        return self.metadata.title


@dc.dataclass(frozen=True, slots=True)
class BreadcrumbItem:
    """One step on the path from the root to a page."""

    short_uri: str
    title: str


def _is_root(page: PageMetadata) -> bool:
    return page.parent is None or page.parent == ""


def _parent_key(page: PageMetadata, nodes: typ.Mapping[str, PageNode]) -> str:
    """Return the URI whose children list ``page`` belongs in."""
    parent = typ.cast("str", page.parent)
    if parent == ROOT_PARENT and ROOT_PARENT not in nodes:
        return ""
    return parent


def build_page_hierarchy(pages: typ.Sequence[PageMetadata]) -> PageNode | None:
    """Build and validate the page tree described by ``pages``.

    Parameters
    ----------
    pages : Sequence[PageMetadata]
        Every page in the build. Children keep the relative order in which
        they appear here.

    Returns
    -------
    PageNode | None
        The root node, or ``None`` when ``pages`` is empty.

    Raises
    ------
    OrphanedPageError
        If any page references a parent that is not in ``pages``. The
        ``"root"`` sentinel refers to the page with that URI when one
        exists and to the tree root otherwise.
    NoRootError
        If no page has an empty parent.
    MultipleRootsError
        If several pages have an empty parent.
    CircularReferenceError
        If parent pointers form a cycle, including cycles detached from
        the root.
    """
    if not pages:
        return None

    nodes: dict[str, PageNode] = {}
    for page in pages:
        nodes.setdefault(page.short_uri, PageNode(metadata=page))

    orphans = [
        f"{page.short_uri} -> {page.parent}"
        for page in pages
        if not _is_root(page)
        and page.parent != ROOT_PARENT
        and page.parent not in nodes
    ]
    if orphans:
        msg = f"Orphaned pages detected: {', '.join(orphans)}"
        raise OrphanedPageError(msg)

    roots = [page for page in pages if _is_root(page)]
    if not roots:
        msg = "No root page found: exactly one page must have no Parent."
        raise NoRootError(msg)
    if len(roots) > 1:
        names = ", ".join(page.short_uri for page in roots)
        msg = f"Multiple root pages detected: {names}"
        raise MultipleRootsError(msg)
    root = nodes[roots[0].short_uri]

    children_index: dict[str, list[PageNode]] = {}
    for page in pages:
        if _is_root(page):
            continue
        key = _parent_key(page, nodes)
        children_index.setdefault(key, []).append(nodes[page.short_uri])
    root.children = children_index.pop("", [])
    for uri, children in children_index.items():
        nodes[uri].children = children

    visited = _detect_cycles(root)
    unreachable = [uri for uri in nodes if uri not in visited]
    if unreachable:
        msg = f"Circular reference detected involving: {unreachable[0]}"
        raise CircularReferenceError(msg)
    return root


def _detect_cycles(root: PageNode) -> set[str]:
    """Walk the tree depth first, returning every URI reached.

    The walk keeps the URIs on the current root-to-node path; meeting one
    of them again means a cycle.
    """
    visited: set[str] = set()
    on_path: set[str] = set()

    def _walk(node: PageNode) -> None:
        if node.short_uri in on_path:
            msg = f"Circular reference detected involving: {node.short_uri}"
            raise CircularReferenceError(msg)
        on_path.add(node.short_uri)
        visited.add(node.short_uri)
        for child in node.children:
            _walk(child)
        on_path.discard(node.short_uri)

    _walk(root)
    return visited


def find_page_by_short_uri(tree: PageNode | None, short_uri: str) -> PageNode | None:
    """Return the node with ``short_uri`` or ``None`` when absent."""
    if tree is None:
        return None
    stack = [tree]
    while stack:
        node = stack.pop()
        if node.short_uri == short_uri:
            return node
        stack.extend(reversed(node.children))
    return None


def get_children(tree: PageNode | None, parent_uri: str) -> list[PageNode]:
    """Return the direct children of ``parent_uri`` (empty when unknown)."""
    parent = find_page_by_short_uri(tree, parent_uri)
    if parent is None:
        return []
    return list(parent.children)


def _path_to(node: PageNode, target: str) -> list[PageNode] | None:
    if node.short_uri == target:
        return [node]
    for child in node.children:
        path = _path_to(child, target)
        if path is not None:
            return [node, *path]
    return None


def generate_breadcrumbs(tree: PageNode | None, target_uri: str) -> list[BreadcrumbItem]:
    """Return the root-to-target path for ``target_uri``.

    Titles fall back to the ``short_uri`` when a page has no title.

    Raises
    ------
    PageNotFoundError
        If ``target_uri`` is not in ``tree``.
    """
    if tree is None:
        return []
    path = _path_to(tree, target_uri)
    if path is None:
        msg = f"Page not found: {target_uri}"
        raise PageNotFoundError(msg)
    return [
        BreadcrumbItem(short_uri=node.short_uri, title=node.title or node.short_uri)
        for node in path
    ]


def flatten_tree(tree: PageNode | None) -> list[PageNode]:
    """Return every node in pre-order."""
    if tree is None:
        return []
    flattened: list[PageNode] = []
    stack = [tree]
    while stack:
        node = stack.pop()
        flattened.append(node)
        stack.extend(reversed(node.children))
    return flattened


__all__ = [
    "BreadcrumbItem",
    "CircularReferenceError",
    "HierarchyError",
    "MultipleRootsError",
    "NoRootError",
    "OrphanedPageError",
    "PageNode",
    "PageNotFoundError",
    "build_page_hierarchy",
    "find_page_by_short_uri",
    "flatten_tree",
    "generate_breadcrumbs",
    "get_children",
]
