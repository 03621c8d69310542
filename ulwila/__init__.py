"""ULWILA color score editor: staff and color-circle notation layout and rendering."""

__version__ = "0.1.0"
