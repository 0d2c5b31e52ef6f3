"""Static blog builder: markdown posts in, standalone HTML pages out."""

__version__ = "0.2.0"
