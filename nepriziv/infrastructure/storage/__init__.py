"""
Storage Infrastructure Module

Object storage adapters and format processors for uploaded files.
"""

from . import object_storage
from . import format_processors

__all__ = [
    'object_storage',
    'format_processors'
]
