"""Unit tests for assembling and querying the page tree."""

from __future__ import annotations

import pytest

from flint_pages.hierarchy import (
    BreadcrumbItem,
    CircularReferenceError,
    MultipleRootsError,
    NoRootError,
    OrphanedPageError,
    PageNotFoundError,
    build_page_hierarchy,
    find_page_by_short_uri,
    flatten_tree,
    generate_breadcrumbs,
    get_children,
)
from flint_pages.metadata import PageMetadata


def _page(short_uri: str, parent: str | None = None, title: str = "") -> PageMetadata:
    return PageMetadata(short_uri=short_uri, parent=parent, title=title)


@pytest.fixture
def site_pages() -> list[PageMetadata]:
    """Return a small three-level site."""
    return [
        _page("home", title="Home"),
        _page("blog", "home", "Blog"),
        _page("about", "home", "About"),
        _page("first-post", "blog", "First Post"),
        _page("second-post", "blog"),
    ]


def test_builds_tree_in_input_order(site_pages: list[PageMetadata]) -> None:
    """Children keep the order in which their pages were supplied."""
    tree = build_page_hierarchy(site_pages)

    assert tree is not None
    assert tree.short_uri == "home"
    assert [child.short_uri for child in tree.children] == ["blog", "about"]
    assert [node.short_uri for node in flatten_tree(tree)] == [
        "home",
        "blog",
        "first-post",
        "second-post",
        "about",
    ]
    assert len(flatten_tree(tree)) == len(site_pages)


def test_empty_input_has_no_tree() -> None:
    """No pages means no tree rather than an error."""
    assert build_page_hierarchy([]) is None
    assert flatten_tree(None) == []


def test_root_sentinel_attaches_to_tree_root() -> None:
    """``Parent: root`` hangs a page off the root when no ``root`` page exists."""
    tree = build_page_hierarchy([_page("home"), _page("docs", "root")])

    assert tree is not None
    assert [child.short_uri for child in tree.children] == ["docs"]


def test_orphaned_parent_is_reported() -> None:
    """A parent that does not exist names both pages in the message."""
    with pytest.raises(OrphanedPageError, match="lost -> missing"):
        build_page_hierarchy([_page("home"), _page("lost", "missing")])


def test_no_root_raises() -> None:
    """Every page having a parent leaves the tree without a root."""
    with pytest.raises(NoRootError):
        build_page_hierarchy([_page("a", "b"), _page("b", "a")])


def test_multiple_roots_raise() -> None:
    """Two parentless pages are both named."""
    with pytest.raises(MultipleRootsError, match="home, other"):
        build_page_hierarchy([_page("home"), _page("other", "")])


@pytest.mark.parametrize(
    "cycle",
    [
        [_page("loop", "loop")],
        [_page("a", "b"), _page("b", "a")],
        [_page("a", "c"), _page("b", "a"), _page("c", "b")],
    ],
)
def test_cycles_detached_from_root_raise(cycle: list[PageMetadata]) -> None:
    """Cycles of any length are rejected even when the root is valid."""
    with pytest.raises(CircularReferenceError, match="Circular reference"):
        build_page_hierarchy([_page("home"), *cycle])


def test_find_and_get_children(site_pages: list[PageMetadata]) -> None:
    """Lookups return nodes or empty results for unknown URIs."""
    tree = build_page_hierarchy(site_pages)

    node = find_page_by_short_uri(tree, "first-post")
    assert node is not None
    assert node.title == "First Post"
    assert find_page_by_short_uri(tree, "nope") is None
    assert [child.short_uri for child in get_children(tree, "blog")] == [
        "first-post",
        "second-post",
    ]
    assert get_children(tree, "nope") == []


def test_breadcrumbs_follow_root_to_target(site_pages: list[PageMetadata]) -> None:
    """Breadcrumbs list every ancestor in order; untitled pages use their URI."""
    tree = build_page_hierarchy(site_pages)

    assert generate_breadcrumbs(tree, "second-post") == [
        BreadcrumbItem("home", "Home"),
        BreadcrumbItem("blog", "Blog"),
        BreadcrumbItem("second-post", "second-post"),
    ]
    assert generate_breadcrumbs(tree, "home") == [BreadcrumbItem("home", "Home")]


def test_breadcrumbs_for_unknown_page_raise(site_pages: list[PageMetadata]) -> None:
    """Asking for a page that is not in the tree is an error."""
    tree = build_page_hierarchy(site_pages)

    with pytest.raises(PageNotFoundError, match="ghost"):
        generate_breadcrumbs(tree, "ghost")
