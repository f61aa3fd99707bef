# This project was developed with assistance from AI tools.
"""Client document portal: checklist merge and sync core."""

__version__ = "0.1.0"
