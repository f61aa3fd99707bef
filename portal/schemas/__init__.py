# This project was developed with assistance from AI tools.
"""Shared schema components."""

from .checklist import Category, Checklist, DirtyMask, DocumentEntry, SectionsMeta

__all__ = ["Category", "Checklist", "DirtyMask", "DocumentEntry", "SectionsMeta"]
