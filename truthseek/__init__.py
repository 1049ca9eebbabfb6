"""truthseek -- multi-provider search layer for claim verification."""

__version__ = "0.1.0"
