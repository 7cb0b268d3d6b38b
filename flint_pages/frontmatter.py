r"""Split Markdown documents into a YAML header and a Markdown body.

The header is a ``---`` delimited block at the very top of the file. Parsing
uses ``ruamel.yaml`` in safe mode, the same loader the site configuration
uses, so frontmatter and config accept identical YAML.

Example
-------
>>> from flint_pages.frontmatter import parse_frontmatter
>>> parsed = parse_frontmatter("---\ntitle: Hello\n---\n# Body\n")
>>> parsed.data["title"]
'Hello'
>>> parsed.content
'# Body\n'
"""

from __future__ import annotations

import dataclasses as dc
import io
import re
import typing as typ

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

FRONTMATTER_PATTERN = re.compile(
    r"\A\ufeff?---[ \t]*\r?\n(?P<header>.*?)(?:^|\r?\n)---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)

FrontmatterData = dict[str, typ.Any]


class FrontmatterError(ValueError):
    """Raised when a frontmatter header cannot be parsed into a mapping."""


@dc.dataclass(slots=True)
class ParsedFrontmatter:
    """Frontmatter mapping and the Markdown body that follows it."""

    data: FrontmatterData
    content: str


def parse_frontmatter(text: str) -> ParsedFrontmatter:
    """Return the YAML header and Markdown body of ``text``.

    Parameters
    ----------
    text : str
        Raw file contents. Documents without a leading ``---`` line have no
        header and are returned whole as the body.

    Returns
    -------
    ParsedFrontmatter
        The parsed header (empty when absent or blank) and the remaining body.

    Raises
    ------
    FrontmatterError
        If the header is not valid YAML or does not describe a mapping.
    """
    match = FRONTMATTER_PATTERN.match(text)
    if match is None:
        return ParsedFrontmatter(data={}, content=text.lstrip("\ufeff"))

    header = match.group("header")
    body = text[match.end() :]
    if not header.strip():
        return ParsedFrontmatter(data={}, content=body)

    try:
        loaded = YAML(typ="safe").load(header)
    except YAMLError as exc:
        msg = f"Failed to parse frontmatter: {exc}"
        raise FrontmatterError(msg) from exc

    if loaded is None:
        return ParsedFrontmatter(data={}, content=body)
    if not isinstance(loaded, dict):
        msg = (
            "Failed to parse frontmatter: expected a mapping, "
            f"got {type(loaded).__name__}"
        )
        raise FrontmatterError(msg)
    return ParsedFrontmatter(data=dict(loaded), content=body)


def stringify_frontmatter(data: typ.Mapping[str, typ.Any], content: str) -> str:
    """Serialize ``data`` as a YAML header in front of ``content``."""
    if not data:
        return content
    dumper = YAML(typ="safe", pure=True)
    dumper.default_flow_style = False
    buffer = io.StringIO()
    dumper.dump(dict(data), buffer)
    body = content if content.startswith("\n") else f"\n{content}"
    return f"---\n{buffer.getvalue()}---{body}"


__all__ = [
    "FRONTMATTER_PATTERN",
    "FrontmatterData",
    "FrontmatterError",
    "ParsedFrontmatter",
    "parse_frontmatter",
    "stringify_frontmatter",
]
