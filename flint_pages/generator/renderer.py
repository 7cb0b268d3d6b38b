"""Compile page Markdown into HTML fragments.

Besides plain Python-Markdown conversion the compiler understands two
content-authoring extensions:

- ``:::html`` ... ``:::`` blocks whose contents pass through verbatim.
- ``{{tag}}`` placeholders for registered components, rendered with the
  page's frontmatter as props.

Both are swapped for opaque tokens before conversion and restored
afterwards, so Markdown never sees (or escapes) their HTML. Fenced code
blocks are left alone so examples of either syntax stay literal.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import re
import typing as typ
from html import escape

from markdown import Markdown

from flint_pages.components import ComponentError
from flint_pages.frontmatter import FrontmatterData, parse_frontmatter

if typ.TYPE_CHECKING:
    from markdown.extensions import Extension

    from flint_pages.components import ComponentProps, ComponentRegistry
else:  # pragma: no cover - type-checking fallback
    Extension = typ.Any

logger = logging.getLogger(__name__)

HTML_BLOCK_PATTERN = re.compile(
    r"^:::html[ \t]*\r?\n(?P<body>.*?)^:::[ \t]*(?=\r?$)",
    re.MULTILINE | re.DOTALL,
)
PROTECTED_BLOCK_PATTERN = re.compile(
    r"(?P<code>^[ ]{0,3}(?P<marker>`{3,}|~{3,})[^\r\n]*\r?\n.*?"
    r"^[ ]{0,3}(?P=marker)[ \t]*(?=\r?$))"
    rf"|{HTML_BLOCK_PATTERN.pattern}",
    re.MULTILINE | re.DOTALL,
)
COMPONENT_TAG_PATTERN = re.compile(r"\{\{([A-Za-z0-9_:-]+)\}\}")
CODE_BLOCK_PATTERN = re.compile(r"```([A-Za-z0-9_+#.-]+)?[^\n]*\n(.*?)```", re.DOTALL)
FENCED_INDENT_PATTERN = re.compile(r"^[ ]{1,3}([`~]{3,})", re.MULTILINE)
FENCE_LABEL_PATTERN = re.compile(
    r"^([`~]{3,})([A-Za-z0-9_+#.-]+)?(,[^\r\n]+)$", re.MULTILINE
)
CODEHILITE_OPEN_TAG = re.compile(r'<div class="codehilite">')
STASH_TEMPLATE = "FLINTSTASH{index:04d}X"


@dc.dataclass(slots=True)
class CompiledMarkdown:
    """Compiled HTML together with the frontmatter it was split from."""

    html: str
    data: FrontmatterData


class _HtmlStash:
    """Hold raw HTML fragments behind Markdown-inert tokens."""

    def __init__(self) -> None:
        self._fragments: dict[str, str] = {}

    def add(self, fragment: str) -> str:
        token = STASH_TEMPLATE.format(index=len(self._fragments))
        self._fragments[token] = fragment
        return token

    def restore(self, html: str) -> str:
        for token, fragment in self._fragments.items():
            html = html.replace(f"<p>{token}</p>", fragment)
            html = html.replace(token, fragment)
        return html


class MarkdownCompiler:
    """Render page Markdown with consistent styling and component support."""

    def __init__(
        self,
        registry: ComponentRegistry | None = None,
        pygments_style: str = "monokai",
        *,
        allow_html: bool = True,
    ) -> None:
        """Initialize a compiler.

        Parameters
        ----------
        registry : ComponentRegistry, optional
            Component registry consulted for ``{{tag}}`` placeholders; with
            ``None`` every placeholder is left as literal text.
        pygments_style : str, optional
            Name of the Pygments style used for syntax highlighting. Defaults
            to ``"monokai"``.
        allow_html : bool, optional
            When ``False``, raw HTML written in the Markdown body is escaped.
            ``:::html`` blocks always pass through.
        """
        self.registry = registry
        self.pygments_style = pygments_style
        self.allow_html = allow_html

    def compile(self, markdown: str, props: ComponentProps | None = None) -> str:
        """Compile ``markdown`` into an HTML fragment.

        Parameters
        ----------
        markdown : str
            Markdown body without frontmatter.
        props : Mapping, optional
            Props passed to component renderers, normally the page's
            frontmatter.
        """
        stash = _HtmlStash()
        props = props or {}
        segments: list[str] = []
        position = 0
        for match in PROTECTED_BLOCK_PATTERN.finditer(markdown):
            before = markdown[position : match.start()]
            segments.append(self._stash_components(before, stash, props))
            if match.group("code") is not None:
                segments.append(match.group("code"))
            else:
                segments.append(f"\n{stash.add(match.group('body').strip())}\n")
            position = match.end()
        segments.append(self._stash_components(markdown[position:], stash, props))
        html = self._convert("".join(segments))
        return stash.restore(html)

    def compile_with_frontmatter(self, text: str) -> CompiledMarkdown:
        """Split the frontmatter off ``text`` and compile the body."""
        parsed = parse_frontmatter(text)
        return CompiledMarkdown(
            html=self.compile(parsed.content, parsed.data), data=parsed.data
        )

    def _stash_components(
        self, text: str, stash: _HtmlStash, props: ComponentProps
    ) -> str:
        registry = self.registry

        def _repl(match: re.Match[str]) -> str:
            tag = match.group(1)
            if registry is None or not registry.has_tag(tag):
                return stash.add(match.group(0))
            try:
                rendered = registry.render(tag, props)
            except ComponentError as exc:
                logger.warning("Component %r failed to render: %s", tag, exc)
                return stash.add(match.group(0))
            return stash.add(rendered)

        return COMPONENT_TAG_PATTERN.sub(_repl, text)

    def _convert(self, text: str) -> str:
        """Render markdown into HTML using the configured extensions."""
        normalized = self._normalize_fenced_blocks(text)
        if not normalized.strip():
            return ""
        extensions: list[Extension | str] = [
            "fenced_code",
            "codehilite",
            "tables",
            "sane_lists",
        ]
        md = Markdown(
            extensions=extensions,
            extension_configs={
                "codehilite": {
                    "linenums": False,
                    "guess_lang": False,
                    "css_class": "codehilite",
                    "pygments_style": self.pygments_style,
                }
            },
        )
        if not self.allow_html:
            md.preprocessors.deregister("html_block")
            md.inlinePatterns.deregister("html")
        html = md.convert(normalized)
        return self._annotate_codehilite(html, normalized)

    def _annotate_codehilite(self, html: str, source_markdown: str) -> str:
        """Attach language metadata to each highlighted block in converted markdown."""
        languages = [
            match.group(1) or "text"
            for match in CODE_BLOCK_PATTERN.finditer(source_markdown)
        ]
        if not languages:
            return html
        lang_iter = iter(languages)

        def _repl(match: re.Match[str]) -> str:
            lang = next(lang_iter, "text")
            return (
                f'<div class="codehilite" data-language="{escape(lang, quote=True)}">'
            )

        return CODEHILITE_OPEN_TAG.sub(_repl, html, len(languages))

    @staticmethod
    def _normalize_fenced_blocks(text: str) -> str:
        without_indent = FENCED_INDENT_PATTERN.sub(r"\1", text)

        def _strip_labels(match: re.Match[str]) -> str:
            fence, language, _extras = match.groups()
            label = language or ""
            return f"{fence}{label}"

        return FENCE_LABEL_PATTERN.sub(_strip_labels, without_indent)


__all__ = [
    "CODE_BLOCK_PATTERN",
    "HTML_BLOCK_PATTERN",
    "PROTECTED_BLOCK_PATTERN",
    "CompiledMarkdown",
    "MarkdownCompiler",
]
