"""LIFE OS: private journaling with model-assisted capture and recall."""

__version__ = "1.0.4"
