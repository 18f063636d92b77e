"""
readmegen Document Parser

Turns README markup (Markdown with embedded HTML tags) into an ordered
tuple of Node values for the preview.

Block structure comes from markdown-it-py with HTML enabled. Raw HTML spans,
both blocks and inline tags, are parsed with BeautifulSoup so that attributes
such as ``align`` and ``width`` survive onto the nodes.

The parser never raises. A span that cannot be parsed is kept as a literal
text node; unknown attributes are kept in ``Node.attrs``.
Text keeps the whitespace it had in the markup; only whitespace-only
strings are dropped.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from markdown_it import MarkdownIt

HEADING = "heading"
PARAGRAPH = "paragraph"
IMAGE = "image"
LINK = "link"
RAW = "raw"
TEXT = "text"

NODE_KINDS = (HEADING, PARAGRAPH, IMAGE, LINK, RAW, TEXT)

_HEADING_TAGS = {f"h{n}": n for n in range(1, 7)}
_PARAGRAPH_TAGS = {"p", "div", "center"}
_ANCHOR_OPEN = re.compile(r"<a[\s>]")
# Inline wrappers whose children are lifted into the parent
_TRANSPARENT_TAGS = {"span", "strong", "b", "em", "i", "u", "small", "sup", "sub", "code", "picture"}


@dataclass(frozen=True)
class Node:
    """
    One element of the parsed document.

    Attributes:
        kind: heading, paragraph, image, link, raw or text
        text: Visible text (link label, heading text, literal text)
        level: Heading level (0 for non-headings)
        align: Value of an ``align`` attribute, if any
        src: Image source URI
        alt: Image alt text
        href: Link target
        attrs: All attributes found on the source tag, unknown ones included
            (compared for equality, left out of the hash)
        children: Inline nodes contained in a heading, paragraph or link
        source: Raw markup this node was built from
    """
    kind: str
    text: str = ""
    level: int = 0
    align: Optional[str] = None
    src: str = ""
    alt: str = ""
    href: str = ""
    attrs: dict = field(default_factory=dict, hash=False)
    children: tuple = ()
    source: str = ""


def _markdown() -> MarkdownIt:
    return MarkdownIt("commonmark", {"html": True})


def parse_document(text: str) -> tuple[Node, ...]:
    """
    Parse README markup into an ordered node tree.

    Args:
        text: Markup text, typically renderer output

    Returns:
        Tuple of top-level nodes in document order
    """
    try:
        tokens = _markdown().parse(text or "")
    except Exception:
        return (_literal(text or ""),) if text else ()

    nodes: list[Node] = []
    i = 0
    while i < len(tokens):
        token = tokens[i]

        if token.type in ("heading_open", "paragraph_open"):
            inline = tokens[i + 1] if i + 1 < len(tokens) else None
            content = inline.content if inline is not None and inline.type == "inline" else ""
            children = _inline_nodes(inline.children or []) if inline is not None and inline.type == "inline" else ()
            if token.type == "heading_open":
                nodes.append(Node(
                    kind=HEADING,
                    text=_join_text(children),
                    level=_HEADING_TAGS.get(token.tag, 0),
                    children=children,
                    source=f"{token.markup} {content}",
                ))
            else:
                nodes.append(_paragraph_from_inline(children, content))
            i += 3
            continue

        if token.type == "html_block":
            nodes.extend(_html_nodes(token.content, block=True))
        elif token.type in ("fence", "code_block"):
            nodes.append(Node(kind=RAW, text=token.content, source=token.content))
        elif token.type == "hr":
            nodes.append(Node(kind=RAW, source=token.markup))
        elif token.type == "inline":
            nodes.append(_paragraph_from_inline(_inline_nodes(token.children or []), token.content))
        i += 1

    return tuple(nodes)


def _paragraph_from_inline(children: tuple, content: str) -> Node:
    # A Markdown paragraph holding a single image is presented as that image.
    if len(children) == 1 and children[0].kind == IMAGE:
        return children[0]
    return Node(kind=PARAGRAPH, text=_join_text(children), children=children, source=content)


def _literal(source: str) -> Node:
    return Node(kind=TEXT, text=source, source=source)


def _join_text(nodes: Iterable[Node]) -> str:
    return " ".join(n.text for n in nodes if n.text).strip()


def _tag_attrs(tag: Tag) -> dict[str, str]:
    """Flatten BeautifulSoup attributes (multi-valued ones become space-joined)."""
    attrs = {}
    for key, value in tag.attrs.items():
        attrs[key] = " ".join(value) if isinstance(value, list) else str(value)
    return attrs


def _html_nodes(source: str, block: bool) -> list[Node]:
    """
    Parse a raw HTML span into nodes.

    Block spans yield headings and paragraphs; inline spans yield the inline
    nodes found inside. Parse failures keep the span as literal text.
    """
    try:
        soup = BeautifulSoup(source, "html.parser")
        if block:
            return [n for n in (_block_node(child) for child in soup.contents) if n is not None]
        return list(_element_inline_nodes(soup))
    except Exception:
        return [_literal(source)] if source.strip() else []


def _block_node(element: Any) -> Optional[Node]:
    if isinstance(element, Comment):
        return None
    if isinstance(element, NavigableString):
        text = str(element)
        return _literal(text) if text.strip() else None
    if not isinstance(element, Tag):
        return None

    attrs = _tag_attrs(element)
    name = element.name.lower()
    source = str(element)

    if name in _HEADING_TAGS:
        children = _element_inline_nodes(element)
        return Node(
            kind=HEADING,
            text=element.get_text(),
            level=_HEADING_TAGS[name],
            align=attrs.get("align"),
            attrs=attrs,
            children=children,
            source=source,
        )
    if name in _PARAGRAPH_TAGS:
        children = _element_inline_nodes(element)
        return Node(
            kind=PARAGRAPH,
            text=element.get_text(),
            align=attrs.get("align"),
            attrs=attrs,
            children=children,
            source=source,
        )
    if name in ("img", "a"):
        return _inline_tag_node(element)
    if name == "br":
        return None

    return Node(
        kind=RAW,
        text=element.get_text(),
        align=attrs.get("align"),
        attrs=attrs,
        children=_element_inline_nodes(element),
        source=source,
    )


def _inline_tag_node(tag: Tag) -> Node:
    attrs = _tag_attrs(tag)
    if tag.name.lower() == "img":
        return Node(
            kind=IMAGE,
            src=attrs.get("src", ""),
            alt=attrs.get("alt", ""),
            align=attrs.get("align"),
            attrs=attrs,
            source=str(tag),
        )
    return Node(
        kind=LINK,
        text=tag.get_text(),
        href=attrs.get("href", ""),
        attrs=attrs,
        children=_element_inline_nodes(tag),
        source=str(tag),
    )


def _element_inline_nodes(element: Any) -> tuple[Node, ...]:
    """Collect text, image and link nodes below an HTML element."""
    out: list[Node] = []
    for child in element.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            text = str(child)
            if text.strip():
                out.append(_literal(text))
            continue
        if not isinstance(child, Tag):
            continue
        name = child.name.lower()
        if name in ("img", "a"):
            out.append(_inline_tag_node(child))
        elif name == "br":
            continue
        elif name in _TRANSPARENT_TAGS:
            out.extend(_element_inline_nodes(child))
        else:
            block = _block_node(child)
            if block is not None:
                out.append(block)
    return tuple(out)


def _inline_nodes(tokens: list) -> tuple[Node, ...]:
    """
    Convert markdown-it inline tokens into nodes.

    Markdown links and ``<a ...>``/``</a>`` HTML tags both open a link
    frame; text and images inside it become the link's children.
    """
    out: list[Node] = []
    stack: list[tuple[dict, list[Node], str]] = []

    def target() -> list[Node]:
        return stack[-1][1] if stack else out

    def close_link() -> None:
        attrs, kids, source = stack.pop()
        target().append(Node(
            kind=LINK,
            text=_join_text(kids),
            href=attrs.get("href", ""),
            attrs=attrs,
            children=tuple(kids),
            source=source,
        ))

    for token in tokens:
        if token.type in ("text", "code_inline"):
            if token.content.strip():
                target().append(_literal(token.content))
        elif token.type == "link_open":
            stack.append(({k: str(v) for k, v in (token.attrs or {}).items()}, [], ""))
        elif token.type == "link_close":
            if stack:
                close_link()
        elif token.type == "image":
            attrs = {k: str(v) for k, v in (token.attrs or {}).items()}
            attrs["alt"] = token.content
            target().append(Node(
                kind=IMAGE,
                src=attrs.get("src", ""),
                alt=token.content,
                attrs=attrs,
                source=f"![{token.content}]({attrs.get('src', '')})",
            ))
        elif token.type == "html_inline":
            _html_inline(token.content, stack, target, close_link)

    while stack:
        close_link()

    return tuple(out)


def _html_inline(source: str, stack: list, target: Any, close_link: Any) -> None:
    stripped = source.strip()
    lowered = stripped.lower()
    if lowered.startswith("</a"):
        if stack:
            close_link()
        return
    if _ANCHOR_OPEN.match(lowered) and not lowered.endswith("</a>"):
        try:
            soup = BeautifulSoup(stripped, "html.parser")
            anchor = soup.find("a")
            attrs = _tag_attrs(anchor) if anchor is not None else {}
        except Exception:
            target().append(_literal(source))
            return
        stack.append((attrs, [], source))
        return
    target().extend(_html_nodes(source, block=False))


def flatten_text(nodes: Iterable[Node]) -> str:
    """
    Concatenate every text-bearing value in a node tree.

    Includes visible text, link targets, image sources and alt text. Useful
    for checking that descriptor content survived rendering and parsing.
    """
    parts: list[str] = []

    def walk(items: Iterable[Node]) -> None:
        for node in items:
            for value in (node.text, node.href, node.src, node.alt):
                if value:
                    parts.append(value)
            walk(node.children)

    walk(nodes)
    return "\n".join(parts)
