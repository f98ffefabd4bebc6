"""
Configuration for label generation and its service surface.
"""

from .config import Settings, settings

__all__ = ["Settings", "settings"]
