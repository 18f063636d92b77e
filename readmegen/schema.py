"""
readmegen Descriptor Schema

This module defines the structured state a user edits to produce a README:
the Descriptor value, its Link entries, the fixed badge vocabulary, and the
DescriptorStore that owns the current descriptor.

Design Principles:
    1. The descriptor is immutable; every edit replaces the whole value
    2. A DescriptorPatch (field name -> new value) is the only mutation primitive
    3. Empty values are legal everywhere; the renderer substitutes placeholders
    4. Round-trips to the JSON shape used by the editing form

Field Names:
    The form historically used camelCase keys (``logoUrl``, ``customLinks``,
    ``githubUsername``). ``Descriptor.from_dict`` accepts those aliases as
    well as the snake_case attribute names.
"""

from collections import OrderedDict
from dataclasses import dataclass, field, fields, replace
from typing import Any, Iterable, Mapping, Optional

DEFAULT_LINK_LABEL = "Custom Link"
DEFAULT_LINK_URL = "#"


class DescriptorError(ValueError):
    """Raised when a patch or store operation does not fit the descriptor."""


@dataclass(frozen=True)
class Link:
    """
    A single entry of the centered link row.

    Attributes:
        label: Visible anchor text
        url: Anchor target, inserted verbatim
    """
    label: str = DEFAULT_LINK_LABEL
    url: str = DEFAULT_LINK_URL

    @classmethod
    def from_value(cls, value: Any) -> "Link":
        """Build a Link from a dict, a (label, url) pair, or a Link."""
        if isinstance(value, Link):
            return value
        if isinstance(value, Mapping):
            return cls(
                label=str(value.get("label", "")),
                url=str(value.get("url", "")),
            )
        if isinstance(value, (str, bytes)):
            raise DescriptorError(f"Link must be an object or a (label, url) pair, got {value!r}")
        label, url = value
        return cls(label=str(label), url=str(url))

    def to_dict(self) -> dict[str, str]:
        return {"label": self.label, "url": self.url}


@dataclass(frozen=True)
class BadgeSpec:
    """
    One member of the badge vocabulary.

    Attributes:
        identifier: Name the user toggles (e.g. "PWA")
        fragment: Raw HTML emitted into the badge row when active
        service_marker: Substring of the badge image URI, used by the
            classifier to recognise the rendered badge
    """
    identifier: str
    fragment: str
    service_marker: str


# Vocabulary order is the order fragments appear in the badge row.
BADGES: "OrderedDict[str, BadgeSpec]" = OrderedDict(
    [
        (
            "PWA",
            BadgeSpec(
                identifier="PWA",
                fragment=(
                    '<img src="https://www.pwa-shields.com/1.0.0/series/certified/purple.svg"'
                    ' alt="PWA Shields" height="20">'
                ),
                service_marker="pwa-shields.com",
            ),
        ),
    ]
)


def badge_markers() -> tuple[str, ...]:
    """Return the image-service substrings of every known badge."""
    return tuple(spec.service_marker for spec in BADGES.values())


# Alternative keys accepted by Descriptor.from_dict
_FIELD_ALIASES = {
    "authorHandle": "author_handle",
    "githubUsername": "author_handle",
    "logoRef": "logo_ref",
    "logoUrl": "logo_ref",
    "logo": "logo_ref",
    "customLinks": "links",
    "isLoading": "is_loading",
}


@dataclass(frozen=True)
class Descriptor:
    """
    Complete, immutable description of the README to generate.

    Every field may be empty. ``is_loading`` tracks an in-flight profile
    lookup and never influences the generated text.
    """
    title: str = ""
    description: str = ""
    author_handle: str = ""
    logo_ref: str = ""
    badges: frozenset = field(default_factory=frozenset)
    links: tuple = field(default_factory=tuple)
    screenshots: tuple = field(default_factory=tuple)
    is_loading: bool = False

    def active_badges(self) -> list[BadgeSpec]:
        """Badges present in this descriptor, in vocabulary order."""
        return [spec for key, spec in BADGES.items() if key in self.badges]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict (badges in vocabulary order)."""
        ordered_badges = [key for key in BADGES if key in self.badges]
        ordered_badges += sorted(b for b in self.badges if b not in BADGES)
        return {
            "title": self.title,
            "description": self.description,
            "author_handle": self.author_handle,
            "logo_ref": self.logo_ref,
            "badges": ordered_badges,
            "links": [link.to_dict() for link in self.links],
            "screenshots": list(self.screenshots),
            "is_loading": self.is_loading,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Descriptor":
        """
        Build a Descriptor from a JSON-shaped mapping.

        Unknown keys are ignored; missing keys fall back to empty values.

        Raises:
            DescriptorError: If data is not a mapping or a field has the wrong shape
        """
        if not isinstance(data, Mapping):
            raise DescriptorError("Descriptor must be a JSON object")

        values: dict[str, Any] = {}
        for key, value in data.items():
            name = _FIELD_ALIASES.get(key, key)
            if name in _FIELD_NAMES:
                values[name] = value

        try:
            return cls(**_coerce_fields(values))
        except (TypeError, ValueError) as e:
            raise DescriptorError(f"Invalid descriptor: {e}") from e


_FIELD_NAMES = frozenset(f.name for f in fields(Descriptor))


def _coerce_fields(values: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize raw field values to the types Descriptor stores."""
    coerced: dict[str, Any] = {}
    for name, value in values.items():
        if name == "badges":
            if isinstance(value, str):
                value = [value]
            coerced[name] = frozenset(str(b) for b in value or ())
        elif name == "links":
            coerced[name] = tuple(Link.from_value(v) for v in value or ())
        elif name == "screenshots":
            if isinstance(value, str):
                value = [value]
            coerced[name] = tuple(str(s) for s in value or ())
        elif name == "is_loading":
            coerced[name] = bool(value)
        else:
            coerced[name] = "" if value is None else str(value)
    return coerced


def sample_descriptor() -> Descriptor:
    """Return the descriptor the editor starts with."""
    return Descriptor(
        title="ParsonLabs Music",
        description=(
            "ParsonLabs Music is the Self Hosted Audio streaming alternative to "
            "YouTube Music, Spotify & Apple Music, providing Unrestricted Access "
            "to your library in Uncompressed, Lossless Quality"
        ),
        author_handle="parsonlabs",
        logo_ref="https://avatars.githubusercontent.com/u/138057124?s=200&v=4",
        badges=frozenset({"PWA"}),
        links=(
            Link("Get Started", "#"),
            Link("Documentation", "https://docs.parsonlabs.com"),
            Link("Releases", "https://github.com/WillKirkmanM/music/releases"),
        ),
        screenshots=("/music.png",),
    )


# A patch maps descriptor field names to replacement values.
DescriptorPatch = Mapping[str, Any]


class DescriptorStore:
    """
    Holds the current Descriptor and applies patches to it.

    The store never mutates a descriptor in place; each operation builds a
    patch and ``apply`` swaps in a new value. Readers always see a complete
    descriptor.

    Usage:
        store = DescriptorStore()
        store.set_field("title", "My Project")
        store.add_link("Docs", "https://example.com/docs")
        text = render_readme(store.descriptor)
    """

    def __init__(self, descriptor: Optional[Descriptor] = None):
        self._descriptor = descriptor or Descriptor(links=(Link(),))
        self.history = 0

    @property
    def descriptor(self) -> Descriptor:
        return self._descriptor

    def apply(self, patch: DescriptorPatch) -> Descriptor:
        """
        Replace the descriptor with a copy carrying the patched fields.

        Args:
            patch: Mapping of field name to new value (empty patch is a no-op)

        Returns:
            The new current descriptor

        Raises:
            DescriptorError: If the patch names an unknown field
        """
        if not patch:
            return self._descriptor

        unknown = [name for name in patch if name not in _FIELD_NAMES]
        if unknown:
            raise DescriptorError(f"Unknown descriptor field(s): {', '.join(sorted(unknown))}")

        self._descriptor = replace(self._descriptor, **_coerce_fields(patch))
        self.history += 1
        return self._descriptor

    def set_field(self, name: str, value: Any) -> Descriptor:
        return self.apply({name: value})

    def set_logo(self, ref: str) -> Descriptor:
        return self.apply({"logo_ref": ref})

    def toggle_badge(self, identifier: str) -> Descriptor:
        """Add the badge if absent, remove it if present."""
        badges = set(self._descriptor.badges)
        if identifier in badges:
            badges.discard(identifier)
        else:
            badges.add(identifier)
        return self.apply({"badges": badges})

    def add_link(self, label: str = DEFAULT_LINK_LABEL, url: str = DEFAULT_LINK_URL) -> Descriptor:
        return self.apply({"links": self._descriptor.links + (Link(label, url),)})

    def update_link(
        self,
        index: int,
        label: Optional[str] = None,
        url: Optional[str] = None,
    ) -> Descriptor:
        """Replace the label and/or url of the link at ``index``."""
        links = list(self._descriptor.links)
        self._check_index(index, len(links), "link")
        current = links[index]
        links[index] = Link(
            label=current.label if label is None else label,
            url=current.url if url is None else url,
        )
        return self.apply({"links": links})

    def remove_link(self, index: int) -> Descriptor:
        """Remove a link; the last remaining link is kept, as in the editor."""
        links = list(self._descriptor.links)
        self._check_index(index, len(links), "link")
        if len(links) <= 1:
            return self._descriptor
        del links[index]
        return self.apply({"links": links})

    def add_screenshot(self, ref: str) -> Descriptor:
        return self.apply({"screenshots": self._descriptor.screenshots + (ref,)})

    def remove_screenshot(self, index: int) -> Descriptor:
        screenshots = list(self._descriptor.screenshots)
        self._check_index(index, len(screenshots), "screenshot")
        del screenshots[index]
        return self.apply({"screenshots": screenshots})

    def begin_profile_lookup(self) -> Descriptor:
        return self.apply({"is_loading": True})

    def extend(self, patches: Iterable[DescriptorPatch]) -> Descriptor:
        """Apply several patches in order; last write wins."""
        for patch in patches:
            self.apply(patch)
        return self._descriptor

    @staticmethod
    def _check_index(index: int, length: int, what: str) -> None:
        if not 0 <= index < length:
            raise DescriptorError(f"No {what} at index {index} (have {length})")
