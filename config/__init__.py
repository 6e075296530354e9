"""
Configuration for the innsyn service
"""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
