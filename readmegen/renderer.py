"""
readmegen Markup Renderer

This module generates README.md content from a Descriptor. The layout is
fixed: every descriptor produces the same sequence of centered HTML blocks,
so the output can be previewed, diffed and exported as-is.

Design Principles:
    1. Pure: the same descriptor always renders to byte-identical text
    2. Total: empty strings and empty sequences still render valid text
    3. Raw HTML fragments: alignment and sizing attributes have no Markdown
       equivalent, so images, headings and links are emitted as HTML tags

Output Structure:
    1. Centered logo (placeholder image when no logo is set)
    2. Centered title heading
    3. Centered badge row (present even when no badge is active)
    4. Centered link row, anchors separated by a middle dot
    5. Centered description paragraph
    6. Screenshots, one per line, alt text "Screenshot {n}"
"""

from pathlib import Path
from typing import Optional, Union

from readmegen.schema import Descriptor

PLACEHOLDER_LOGO_URI = "https://via.placeholder.com/200"
LINK_SEPARATOR = "\n  ·\n  "
BADGE_SEPARATOR = "\n  "
EXPORT_FILENAME = "README.md"


class ReadmeRenderer:
    """
    Renders a Descriptor into README markup.

    Usage:
        renderer = ReadmeRenderer(descriptor)
        readme_content = renderer.render()

    Sections are collected in order and joined with a blank line. Unlike a
    free-form README, empty sections are kept so the document shape never
    changes with the data.
    """

    def __init__(self, descriptor: Descriptor):
        """
        Initialize the renderer.

        Args:
            descriptor: The descriptor to render
        """
        self.descriptor = descriptor
        self._sections: list[str] = []

    def render(self) -> str:
        """
        Generate the complete README content.

        Returns:
            The rendered README as a string, starting and ending with a newline
        """
        self._sections = []

        self._add_header_section()
        self._add_badges_section()
        self._add_links_section()
        self._add_description_section()
        self._add_screenshots_section()

        return "\n" + "\n\n".join(self._sections) + "\n"

    def _add_section(self, content: str) -> None:
        self._sections.append(content)

    def _logo_uri(self) -> str:
        return self.descriptor.logo_ref or PLACEHOLDER_LOGO_URI

    def _add_header_section(self) -> None:
        """Add the centered logo followed directly by the title heading."""
        self._add_section(
            '<p align="center">\n'
            f'  <img src="{self._logo_uri()}" width="150" />\n'
            "</p>\n"
            f'<h1 align="center">{self.descriptor.title}</h1>'
        )

    def _add_badges_section(self) -> None:
        """Add the badge row; an empty row is still emitted."""
        fragments = [badge.fragment for badge in self.descriptor.active_badges()]
        self._add_section(
            '<p align="center">\n'
            f"  {BADGE_SEPARATOR.join(fragments)}\n"
            "</p>"
        )

    def _add_links_section(self) -> None:
        """Add the link row as an h4 of anchors."""
        anchors = [
            f'<a href="{link.url}">{link.label}</a>'
            for link in self.descriptor.links
        ]
        self._add_section(
            '<h4 align="center">\n'
            f"  {LINK_SEPARATOR.join(anchors)}\n"
            "</h4>"
        )

    def _add_description_section(self) -> None:
        self._add_section(f'<p align="center">{self.descriptor.description}</p>')

    def _add_screenshots_section(self) -> None:
        """Add one full-width image per screenshot, numbered from 1."""
        images = [
            f'<img width="1280" alt="Screenshot {n}" src="{ref}" />'
            for n, ref in enumerate(self.descriptor.screenshots, start=1)
        ]
        self._add_section("\n".join(images))


def render_readme(descriptor: Descriptor) -> str:
    """
    Convenience function to render README markup from a descriptor.

    Args:
        descriptor: The descriptor to render

    Returns:
        Rendered README text

    Example:
        from readmegen.schema import sample_descriptor
        from readmegen.renderer import render_readme

        print(render_readme(sample_descriptor()))
    """
    return ReadmeRenderer(descriptor).render()


def export_readme(
    content: Union[Descriptor, str],
    directory: Path,
    force: bool = False,
    filename: Optional[str] = None,
) -> Path:
    """
    Write README text to ``directory/README.md`` as UTF-8, unchanged.

    Args:
        content: A descriptor (rendered first) or already-rendered text
        directory: Target directory, created if missing
        force: Overwrite an existing file
        filename: Override the file name (default README.md)

    Returns:
        Path of the written file

    Raises:
        FileExistsError: If the file exists and force is not set
    """
    text = render_readme(content) if isinstance(content, Descriptor) else content
    output_path = Path(directory) / (filename or EXPORT_FILENAME)

    if output_path.exists() and not force:
        raise FileExistsError(f"File already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    # newline="" keeps the text byte-for-byte on every platform
    with open(output_path, "w", encoding="utf-8", newline="") as f:
        f.write(text)

    return output_path
