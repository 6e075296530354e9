"""
Innsyn - postjournal browsing and freedom-of-information request tracking
"""

__version__ = "0.1.0"
