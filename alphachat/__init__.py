"""AlphaChat backend - temporary AI chat sessions with usage accounting."""

__version__ = "1.0.0"
