"""
readmegen Preview

Chooses between the rendered and raw views of generated README text, and
renders a classified node tree into styled HTML for the rendered view.
"""

import html
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from readmegen.classifier import ClassifiedNode, Role, classify_document
from readmegen.parser import parse_document


class ViewMode(Enum):
    """Which representation of the README is shown."""
    RENDERED = "rendered"
    RAW = "raw"

    @property
    def label(self) -> str:
        return "Markdown Preview" if self is ViewMode.RENDERED else "Markdown Code"

    @classmethod
    def parse(cls, value: str) -> "ViewMode":
        """Accept "rendered"/"preview" and "raw"/"code"."""
        if value is not None and not isinstance(value, str):
            raise ValueError(f"View mode must be a string, got {type(value).__name__}")
        aliases = {"preview": cls.RENDERED, "code": cls.RAW}
        key = (value or "").strip().lower()
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown view mode: {value!r} (use 'rendered' or 'raw')") from None


@dataclass
class PreviewState:
    """Holds the current view mode of the preview pane."""
    mode: ViewMode = ViewMode.RENDERED

    def select(self, mode: ViewMode) -> ViewMode:
        self.mode = mode
        return self.mode

    def toggle(self) -> ViewMode:
        self.mode = ViewMode.RAW if self.mode is ViewMode.RENDERED else ViewMode.RENDERED
        return self.mode

    def present(self, text: str) -> str:
        return present(text, self.mode)


def _attr_string(classified: ClassifiedNode, extra: Iterable[tuple[str, str]] = ()) -> str:
    pairs = list(extra)
    if classified.treatment.css_class:
        pairs.append(("class", classified.treatment.css_class))
    pairs.extend(classified.treatment.attrs)
    return "".join(f' {name}="{html.escape(value, quote=True)}"' for name, value in pairs)


def _render_node(classified: ClassifiedNode) -> str:
    node = classified.node
    role = classified.role

    if role in (Role.BADGE, Role.SCREENSHOT, Role.LOGO):
        extra = [("src", node.src), ("alt", node.alt)]
        return f"<img{_attr_string(classified, extra)} />"

    inner = _render_children(classified)

    if role is Role.EXTERNAL_LINK:
        body = inner or html.escape(node.text)
        return f"<a{_attr_string(classified, [('href', node.href)])}>{body}</a>"
    if role in (Role.TITLE, Role.LINK_BAR, Role.HEADING):
        tag = f"h{node.level or 2}"
        return f"<{tag}{_attr_string(classified)}>{inner}</{tag}>"
    if role in (Role.CENTERED_PARAGRAPH, Role.LEFT_PARAGRAPH):
        return f"<p{_attr_string(classified)}>{inner}</p>"
    if role is Role.TEXT:
        return html.escape(node.text)
    return f"<pre{_attr_string(classified)}>{html.escape(node.text)}</pre>"


def _render_children(classified: ClassifiedNode) -> str:
    if classified.children:
        return " ".join(_render_node(child) for child in classified.children)
    return html.escape(classified.node.text)


def render_preview_html(classified: Iterable[ClassifiedNode]) -> str:
    """
    Render classified nodes to HTML, one element per line.

    Args:
        classified: Output of classify_document

    Returns:
        HTML fragment wrapped in a ``markdown-body`` div
    """
    body = "\n".join(_render_node(node) for node in classified)
    return f'<div class="markdown-body">\n{body}\n</div>'


def present(text: str, mode: ViewMode) -> str:
    """
    Return the representation of README text for the given view mode.

    RAW returns the text unchanged; RENDERED parses, classifies and renders it.
    """
    if mode is ViewMode.RAW:
        return text
    return render_preview_html(classify_document(parse_document(text)))
