"""
Resources module - authored content loading and validation.
"""

from runtime.resources.database import ContentDatabase

__all__ = [
    "ContentDatabase",
]
