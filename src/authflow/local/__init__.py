"""Local username/password authentication."""

from authflow.local.strategy import LocalStrategy

__all__ = ["LocalStrategy"]
