"""
readmegen - Interactive README generation from a small project descriptor.

Turns a handful of editable fields (title, description, logo, badges,
links, screenshots) into a centered README.md, with a classified preview
of the generated markup.
"""

__version__ = "0.1.0"
__author__ = "ParsonLabs"
