"""
readmegen Semantic Classifier

Assigns every parsed node a Role and looks up the fixed visual Treatment
for that role.

Classification is an ordered, total function over a closed set of roles:

    heading    level 1 -> TITLE, level 4 -> LINK_BAR, other -> HEADING
    paragraph  centered source -> CENTERED_PARAGRAPH, else LEFT_PARAGRAPH
    image      badge service URI -> BADGE
               else "Screenshot" in alt -> SCREENSHOT
               else -> LOGO
    link       -> EXTERNAL_LINK
    text       -> TEXT
    raw        -> RAW

The image checks run in that order; an image that matches nothing is
always a LOGO.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from readmegen.parser import HEADING, IMAGE, LINK, PARAGRAPH, TEXT, Node
from readmegen.schema import badge_markers

CENTER_MARKER = 'align="center"'
SCREENSHOT_MARKER = "Screenshot"


class Role(Enum):
    """Semantic role of a parsed node."""
    TITLE = "title"
    LINK_BAR = "link-bar"
    HEADING = "heading"
    CENTERED_PARAGRAPH = "centered-paragraph"
    LEFT_PARAGRAPH = "left-paragraph"
    BADGE = "badge"
    SCREENSHOT = "screenshot"
    LOGO = "logo"
    EXTERNAL_LINK = "external-link"
    TEXT = "text"
    RAW = "raw"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Treatment:
    """
    Visual treatment applied to a role in the preview.

    Attributes:
        token: Short name of the styling rule
        css_class: Class list applied to the rendered element
        attrs: Extra HTML attributes as (name, value) pairs
    """
    token: str
    css_class: str
    attrs: tuple = ()


TREATMENTS: dict[Role, Treatment] = {
    Role.TITLE: Treatment("centered-title", "text-center text-3xl font-bold my-4"),
    Role.LINK_BAR: Treatment("centered-link-bar", "text-center text-lg font-medium my-3"),
    Role.HEADING: Treatment("plain-heading", "font-semibold my-3"),
    Role.CENTERED_PARAGRAPH: Treatment("centered-block", "text-center my-3"),
    Role.LEFT_PARAGRAPH: Treatment("left-block", "my-3"),
    Role.BADGE: Treatment("inline-icon", "mx-auto inline-block h-5"),
    Role.SCREENSHOT: Treatment("full-width-frame", "mx-auto w-full my-2 border rounded-md"),
    Role.LOGO: Treatment("small-square", "mx-auto w-32 h-32 object-contain"),
    Role.EXTERNAL_LINK: Treatment(
        "new-tab-link",
        "text-blue-600 hover:underline",
        (("target", "_blank"), ("rel", "noopener noreferrer")),
    ),
    Role.TEXT: Treatment("plain-text", ""),
    Role.RAW: Treatment("preformatted", "whitespace-pre-wrap font-mono text-sm"),
}

_missing = [role for role in Role if role not in TREATMENTS]
if _missing:
    raise RuntimeError(f"Roles without a treatment: {_missing}")


@dataclass(frozen=True)
class ClassifiedNode:
    """A parsed node with its role, treatment and classified children."""
    node: Node
    role: Role
    treatment: Treatment
    children: tuple = ()

    def summary(self) -> dict:
        """JSON-friendly view used by the API."""
        data = {
            "kind": self.node.kind,
            "role": self.role.value,
            "treatment": self.treatment.token,
        }
        for key in ("text", "src", "alt", "href"):
            value = getattr(self.node, key)
            if value:
                data[key] = value
        if self.node.level:
            data["level"] = self.node.level
        if self.children:
            data["children"] = [child.summary() for child in self.children]
        return data


def _is_centered(node: Node) -> bool:
    return CENTER_MARKER in node.source or (node.align or "").lower() == "center"


def _classify_image(node: Node) -> Role:
    if any(marker in node.src for marker in badge_markers()):
        return Role.BADGE
    if SCREENSHOT_MARKER in node.alt:
        return Role.SCREENSHOT
    return Role.LOGO


def classify_node(node: Node) -> Role:
    """
    Return the role of a single node.

    Args:
        node: A parsed node

    Returns:
        The node's Role (never fails; unknown images are LOGO)
    """
    if node.kind == HEADING:
        if node.level == 1:
            return Role.TITLE
        if node.level == 4:
            return Role.LINK_BAR
        return Role.HEADING
    if node.kind == PARAGRAPH:
        return Role.CENTERED_PARAGRAPH if _is_centered(node) else Role.LEFT_PARAGRAPH
    if node.kind == IMAGE:
        return _classify_image(node)
    if node.kind == LINK:
        return Role.EXTERNAL_LINK
    if node.kind == TEXT:
        return Role.TEXT
    return Role.RAW


def classify(node: Node) -> ClassifiedNode:
    role = classify_node(node)
    return ClassifiedNode(
        node=node,
        role=role,
        treatment=TREATMENTS[role],
        children=tuple(classify(child) for child in node.children),
    )


def classify_document(nodes: Iterable[Node]) -> tuple[ClassifiedNode, ...]:
    """Classify every node of a parsed document, children included."""
    return tuple(classify(node) for node in nodes)
